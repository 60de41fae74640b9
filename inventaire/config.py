"""Application configuration objects."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class Settings(BaseSettings):
    """Pydantic settings used to configure the inventory tracker."""

    model_config = SettingsConfigDict(
        env_prefix="INVENTAIRE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = Field(
        default="Gestionnaire d'inventaire",
        description="Human friendly name for the app.",
    )
    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Deployment environment flag used for logging.",
    )
    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory holding the persisted storage slots.",
    )
    storage_key: str = Field(
        default="inventory_v1",
        description="Name of the slot holding the product collection.",
    )
    strict_load: bool = Field(
        default=False,
        description="Raise on corrupt stored data instead of starting empty.",
    )
    date_format: str = Field(
        default="%d/%m/%Y",
        description="strftime pattern used for the lastUpdated column.",
    )
    currency: str = Field(
        default="XAF",
        description="Display currency for prices and total value.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level.",
    )
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5000, ge=1, le=65535)

    @field_validator("storage_key")
    @classmethod
    def validate_storage_key(cls, value: str) -> str:
        candidate = value.strip()
        if not candidate:
            raise ValueError("storage_key cannot be blank")
        if "/" in candidate or "\\" in candidate:
            raise ValueError("storage_key must be a plain slot name")
        return candidate

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of :class:`Settings`."""

    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)


__all__ = ["LOG_FORMAT", "Settings", "configure_logging", "get_settings"]
