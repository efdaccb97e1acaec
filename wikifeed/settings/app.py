"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    db_path: Path = Field(
        default=Path.home() / ".wikifeed" / "state.sqlite",
        validation_alias="WIKIFEED_DB_PATH",
    )
    config_path: Path | None = Field(
        default=None, validation_alias="WIKIFEED_CONFIG_PATH"
    )
    language: str | None = Field(default=None, validation_alias="WIKIFEED_LANGUAGE")
    log_level: str = Field(default="WARNING", validation_alias="WIKIFEED_LOG_LEVEL")
    log_json: bool = Field(default=False, validation_alias="WIKIFEED_LOG_JSON")


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
