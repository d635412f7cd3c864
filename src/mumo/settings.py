"""Configuration helpers for Mumo."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_DATA_DIR = Path.home() / "mumo-comics"
DEFAULT_CONTENT_DIR = Path("content") / "comics"
DEFAULT_SITE_URL = "http://localhost:3000"


class Settings(BaseModel):
    """Runtime configuration loaded from env vars with sensible defaults."""

    content_source: Literal["files", "database"] = "files"
    content_dir: Path = Field(default_factory=lambda: DEFAULT_CONTENT_DIR)
    data_dir: Path = Field(default_factory=lambda: DEFAULT_DATA_DIR)
    db_filename: str = "comics.sqlite3"
    database_url: str | None = None
    site_url: str = DEFAULT_SITE_URL
    cover_image_prefix: str = "/comics/"
    default_author: str = "Mumo Team"
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename

    @property
    def resolved_database_url(self) -> str:
        return self.database_url or f"sqlite:///{self.db_path}"

    @property
    def base_url(self) -> str:
        return self.site_url.rstrip("/")

    def ensure_directories(self) -> None:
        """Create data directories if they are missing."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load(cls) -> "Settings":
        load_dotenv()
        return cls(
            content_source=os.environ.get("MUMO_CONTENT_SOURCE", "files"),
            content_dir=Path(os.environ.get("MUMO_CONTENT_DIR", DEFAULT_CONTENT_DIR)),
            data_dir=Path(os.environ.get("MUMO_DATA_DIR", DEFAULT_DATA_DIR)),
            db_filename=os.environ.get("MUMO_DB_FILENAME", "comics.sqlite3"),
            database_url=os.environ.get("MUMO_DATABASE_URL"),
            site_url=os.environ.get("MUMO_SITE_URL", DEFAULT_SITE_URL),
            cover_image_prefix=os.environ.get("MUMO_COVER_PREFIX", "/comics/"),
            default_author=os.environ.get("MUMO_DEFAULT_AUTHOR", "Mumo Team"),
            log_level=os.environ.get("MUMO_LOG_LEVEL", "INFO"),
        )


def get_settings() -> Settings:
    """Convenience accessor for lazy modules."""
    settings = Settings.load()
    settings.ensure_directories()
    return settings
