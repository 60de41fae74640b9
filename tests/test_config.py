from pathlib import Path
import logging

import pytest
from pydantic import ValidationError

from inventaire.config import Settings, configure_logging
from inventaire.controller import InventoryController


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("INVENTAIRE_STORAGE_KEY", raising=False)
    settings = Settings(_env_file=None)

    assert settings.storage_key == "inventory_v1"
    assert settings.strict_load is False
    assert settings.date_format == "%d/%m/%Y"
    assert settings.currency == "XAF"


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("INVENTAIRE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("INVENTAIRE_STRICT_LOAD", "true")
    monkeypatch.setenv("INVENTAIRE_LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.data_dir == tmp_path
    assert settings.strict_load is True
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("key", ["", "   ", "../escape", "a\\b"])
def test_settings_reject_bad_storage_key(key: str) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, storage_key=key)


def test_settings_reject_unknown_log_level() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="chatty")


def test_controller_from_settings_uses_slot(tmp_path: Path) -> None:
    settings = Settings(_env_file=None, data_dir=tmp_path, storage_key="boutique", date_format="%Y-%m-%d")

    controller = InventoryController.from_settings(settings)
    product = controller.add({"name": "Vis", "category": "Quincaillerie"})

    assert controller.loaded is True
    assert (tmp_path / "boutique.json").exists()
    assert len(product.last_updated) == 10
    assert product.last_updated[4] == "-"


def test_configure_logging_sets_level(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging(Settings(_env_file=None, log_level="warning"))

    assert calls[0]["level"] == "WARNING"
    assert "%(levelname)s" in calls[0]["format"]
