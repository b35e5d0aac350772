"""
Centralized configuration management for flipdeck.
"""
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_SEARCH_DEBOUNCE_MS, STORAGE_KEY


def get_default_db_path() -> Path:
    """Returns the default path for the storage file under the user's home."""
    return Path.home() / ".flipdeck" / "flipdeck.db"


class Settings(BaseSettings):
    """
    Application settings, loaded from FLIPDECK_* environment variables or a
    local .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLIPDECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Overridden by FLIPDECK_DB_PATH; the CLI --db flag wins over both.
    db_path: Path = Field(default_factory=get_default_db_path)

    storage_key: str = STORAGE_KEY

    search_debounce_ms: int = Field(default=DEFAULT_SEARCH_DEBOUNCE_MS, ge=0)

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000.0


def load_settings(db_path: Optional[Path] = None) -> Settings:
    """
    Build a Settings instance. An explicit db_path takes precedence over
    FLIPDECK_DB_PATH and the home-directory default.
    """
    if db_path is not None:
        return Settings(db_path=db_path)
    return Settings()
