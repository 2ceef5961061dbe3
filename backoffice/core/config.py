from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Restaurant Back Office"
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent.parent)
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent.parent / "data")

    API_KEY: str = Field(default="", validation_alias=AliasChoices("API_KEY", "API_TOKEN"))
    ALLOWED_ORIGINS: list[str] = Field(default_factory=list)

    DB_URL: str | None = Field(default=None, validation_alias=AliasChoices("DATABASE_URL", "DB_URL"))

    # Quebec sales taxes, applied on the discounted subtotal
    GST_RATE: float = 0.05
    QST_RATE: float = 0.09975

    MEDIA_MAX_IMAGE_BYTES: int = 10 * 1024 * 1024
    MEDIA_MAX_IMAGES: int = 5
    MEDIA_MAX_VIDEO_BYTES: int = 100 * 1024 * 1024

    RECENT_DAYS: int = 30

    @property
    def media_dir(self) -> Path:
        return self.DATA_DIR / "media"

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("ALLOWED_ORIGINS must be a comma separated string or list")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    if not settings.DB_URL:
        settings.DB_URL = f"sqlite:///{settings.DATA_DIR / 'backoffice.db'}"
    return settings


settings = get_settings()
