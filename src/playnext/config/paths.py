"""Filesystem paths configuration."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PathsConfig(BaseSettings):
    """Filesystem paths for the library database and saved history.

    Environment variables:
        PLAYNEXT_BASE_PATH: Base directory (default: ~/.local/share/playnext)
    """

    model_config = SettingsConfigDict(
        env_prefix="PLAYNEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_path: Path = Field(default_factory=lambda: Path.home() / ".local" / "share" / "playnext")

    @property
    def db_path(self) -> Path:
        return self.base_path / "library.sqlite3"

    @property
    def state_path(self) -> Path:
        return self.base_path / "state"

    @property
    def history_file(self) -> Path:
        return self.state_path / "history.json"
