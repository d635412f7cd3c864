"""Content sources that produce the raw, unsorted comic collection."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from mumo.db import ComicRecord, get_engine
from mumo.exceptions import ContentSourceError
from mumo.models import Comic, ComicFrontmatter
from mumo.schema import DEFAULT_COVER_PREFIX, parse_publish_date
from mumo.settings import Settings
from .mdx import extract_slug_from_filename, get_mdx_files, parse_mdx_file

logger = structlog.get_logger(__name__)

DEFAULT_READING_TIME = 5
DEFAULT_AUTHOR = "Mumo Team"


class ComicSource(Protocol):
    """Anything that can produce the full comic collection."""

    name: str

    async def load(self) -> list[Comic]:
        ...


class FileComicSource:
    """Reads ``YYYY-MM-<slug>.mdx`` files from a content directory."""

    name = "files"

    def __init__(self, content_dir: Path, *, cover_prefix: str = DEFAULT_COVER_PREFIX) -> None:
        self._content_dir = content_dir
        self._cover_prefix = cover_prefix

    @property
    def content_dir(self) -> Path:
        return self._content_dir

    async def load(self) -> list[Comic]:
        return await asyncio.to_thread(self._load_sync)

    def _load_sync(self) -> list[Comic]:
        comics = []
        for path in get_mdx_files(self._content_dir):
            parsed = parse_mdx_file(path, cover_prefix=self._cover_prefix)
            comics.append(
                Comic(
                    frontmatter=parsed.frontmatter,
                    content=parsed.content,
                    slug=extract_slug_from_filename(path.name),
                )
            )
        logger.debug("source.files.loaded", directory=str(self._content_dir), count=len(comics))
        return comics


class DatabaseComicSource:
    """Reads comics from the ``comics`` table.

    Rows already passed validation when they were written, so they are mapped
    as-is with fixed defaults for null optional columns.
    """

    name = "database"

    def __init__(self, engine: Engine, *, default_author: str = DEFAULT_AUTHOR) -> None:
        self._engine = engine
        self._default_author = default_author

    async def load(self) -> list[Comic]:
        return await asyncio.to_thread(self._load_sync)

    async def publish(self, comic: Comic) -> Comic:
        """Insert ``comic`` or update the row that already has its slug."""
        await asyncio.to_thread(self._publish_sync, comic)
        return comic

    # Internal helpers -----------------------------------------------------

    def _load_sync(self) -> list[Comic]:
        statement = select(ComicRecord).order_by(ComicRecord.publish_date.desc())
        try:
            with Session(self._engine) as session:
                records = session.exec(statement).all()
        except SQLAlchemyError as exc:
            logger.error("source.database.query_failed", error=str(exc))
            raise ContentSourceError(f"Failed to fetch comics from database: {exc}") from exc
        logger.debug("source.database.loaded", count=len(records))
        return [self._record_to_comic(record) for record in records]

    def _publish_sync(self, comic: Comic) -> None:
        frontmatter = comic.frontmatter
        statement = select(ComicRecord).where(ComicRecord.slug == comic.slug)
        try:
            with Session(self._engine) as session:
                record = session.exec(statement).first()
                if record is None:
                    record = ComicRecord(
                        title=frontmatter.title,
                        slug=comic.slug,
                        synopsis=frontmatter.synopsis,
                        content=comic.content,
                    )
                record.title = frontmatter.title
                record.publish_date = frontmatter.publish_date
                record.synopsis = frontmatter.synopsis
                record.tags_json = json.dumps(frontmatter.tags)
                record.reading_time = frontmatter.reading_time
                record.cover_image_url = frontmatter.cover_image
                record.author = frontmatter.author or self._default_author
                record.featured = bool(frontmatter.featured)
                record.content = comic.content
                record.updated_at = datetime.now(timezone.utc)
                session.add(record)
                session.commit()
        except SQLAlchemyError as exc:
            logger.error("source.database.publish_failed", slug=comic.slug, error=str(exc))
            raise ContentSourceError(f"Failed to publish comic {comic.slug}: {exc}") from exc
        logger.info("source.database.published", slug=comic.slug)

    def _record_to_comic(self, record: ComicRecord) -> Comic:
        tags = json.loads(record.tags_json) if record.tags_json else []
        frontmatter = ComicFrontmatter(
            title=record.title,
            slug=record.slug,
            publish_date=parse_publish_date(record.publish_date),
            synopsis=record.synopsis,
            tags=tags,
            reading_time=(
                record.reading_time if record.reading_time is not None else DEFAULT_READING_TIME
            ),
            cover_image=record.cover_image_url or "",
            author=record.author or self._default_author,
            featured=bool(record.featured),
        )
        return Comic(frontmatter=frontmatter, content=record.content, slug=record.slug)


def build_source(settings: Settings) -> FileComicSource | DatabaseComicSource:
    """Pick the content source configured for this deployment."""
    if settings.content_source == "database":
        engine = get_engine(settings.resolved_database_url)
        return DatabaseComicSource(engine, default_author=settings.default_author)
    return FileComicSource(settings.content_dir, cover_prefix=settings.cover_image_prefix)
