"""Runtime configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Bot configuration, read from POOPBOT_* environment variables or .env."""

    model_config = SettingsConfigDict(env_prefix="POOPBOT_", env_file=".env", extra="ignore")

    line_channel_secret: str = ""
    line_channel_access_token: str = ""

    # SQLite database stored in ./data/poop.db by default
    database_url: str = "sqlite:///./data/poop.db"

    # How long a user must wait between two records in the same chat
    record_ttl_hours: int = Field(default=1, ge=1)

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


@lru_cache
def get_settings() -> Settings:
    return Settings()
