"""Application configuration via pydantic settings."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_name: str = Field("Unit Reservation Service", alias="APP_NAME")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    seed_demo_data: bool = Field(False, alias="SEED_DEMO_DATA")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[1] / ".env",
        case_sensitive=False,
        populate_by_name=True,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = str(value).strip().upper()
        # getLevelName maps known names to ints and unknown ones to "Level x"
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()
