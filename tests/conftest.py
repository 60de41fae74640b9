from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator

import pytest
from flask import Flask
from flask.testing import FlaskClient

from inventaire.app import create_app
from inventaire.config import Settings
from inventaire.controller import InventoryController
from inventaire.models import IdentifierAllocator
from inventaire.storage import StorageService

TODAY = "17/10/2026"


class FakeClock:
    """Frozen clock; every allocator call sees the same millisecond."""

    def __init__(self, value: float = 1_700_000_000.0) -> None:
        self.value = value

    def __call__(self) -> float:
        return self.value


@pytest.fixture()
def today() -> str:
    return TODAY


@pytest.fixture()
def make_clock() -> Callable[[float], FakeClock]:
    return FakeClock


@pytest.fixture()
def storage(tmp_path: Path) -> StorageService:
    return StorageService(tmp_path / "data")


@pytest.fixture()
def controller(storage: StorageService) -> InventoryController:
    manager = InventoryController(
        storage,
        today=lambda: TODAY,
        allocate_id=IdentifierAllocator(clock=FakeClock()),
    )
    manager.load()
    return manager


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        data_dir=tmp_path / "app-data",
        environment="test",
        app_name="Test Inventory",
    )


@pytest.fixture()
def app(settings: Settings) -> Iterator[Flask]:
    app = create_app(settings)
    app.config["TESTING"] = True
    yield app


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()


