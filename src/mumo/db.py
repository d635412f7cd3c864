"""Relational persistence layer for published comics."""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from uuid import uuid4

from sqlalchemy.engine import Engine, make_url
from sqlmodel import Field, SQLModel, create_engine


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ComicRecord(SQLModel, table=True):
    """One row of the ``comics`` table; optional columns may be null."""

    __tablename__ = "comics"

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    title: str
    slug: str = Field(index=True, unique=True)
    publish_date: datetime = Field(default_factory=_utcnow, index=True)
    synopsis: str
    tags_json: str | None = Field(default="[]")
    reading_time: int | None = Field(default=5)
    cover_image_url: str | None = None
    author: str | None = Field(default="Mumo Team")
    featured: bool | None = Field(default=False)
    content: str
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


def create_engine_for_url(url: str) -> Engine:
    parsed = make_url(url)
    connect_args = {}
    if parsed.get_backend_name() == "sqlite":
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
        connect_args["check_same_thread"] = False
    return create_engine(url, echo=False, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


@lru_cache(maxsize=4)
def get_engine(url: str) -> Engine:
    engine = create_engine_for_url(url)
    init_db(engine)
    return engine
