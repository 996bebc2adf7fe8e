"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the rich-text service."""

    app_name: str = "Richtext"
    app_version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"
    min_font_size: int = 10
    max_font_size: int = 48
    max_request_body_bytes: int = 1_048_576

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_font_bounds(self) -> "Settings":
        if self.min_font_size < 1:
            raise ValueError("min_font_size must be >= 1")
        if self.min_font_size > self.max_font_size:
            raise ValueError("min_font_size must not exceed max_font_size")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings so env parsing only happens once."""

    return Settings()
