from datetime import datetime, timezone
from pathlib import Path

import pytest
from sqlmodel import Session

from mumo.db import ComicRecord, create_engine_for_url, init_db
from mumo.exceptions import (
    ContentNotFoundError,
    ContentParseError,
    ContentSourceError,
    FrontmatterValidationError,
)
from mumo.models import Comic, ComicFrontmatter
from mumo.services.sources import DatabaseComicSource, FileComicSource, build_source
from mumo.settings import Settings


def _mdx(slug: str, publish_date: str, *, tags: str = "[tech]") -> str:
    return (
        "---\n"
        f"title: {slug.replace('-', ' ').title()}\n"
        f"slug: {slug}\n"
        f'publishDate: "{publish_date}"\n'
        "synopsis: Another week, another Mumo adventure.\n"
        f"tags: {tags}\n"
        "readingTime: 2\n"
        f"coverImage: /comics/{slug}/cover.svg\n"
        "---\n"
        f"Body of {slug}\n"
    )


def _engine(tmp_path: Path):
    engine = create_engine_for_url(f"sqlite:///{tmp_path / 'comics.sqlite3'}")
    init_db(engine)
    return engine


@pytest.mark.asyncio
async def test_file_source_reads_every_mdx_file(tmp_path: Path) -> None:
    (tmp_path / "2024-01-mumo-meets-world.mdx").write_text(
        _mdx("mumo-meets-world", "2024-01-15T10:00:00Z"), encoding="utf-8"
    )
    (tmp_path / "cable-chaos.mdx").write_text(
        _mdx("cable-chaos", "2024-02-01T10:00:00Z"), encoding="utf-8"
    )
    (tmp_path / "README.txt").write_text("ignored", encoding="utf-8")

    comics = await FileComicSource(tmp_path).load()

    assert sorted(comic.slug for comic in comics) == ["cable-chaos", "mumo-meets-world"]
    by_slug = {comic.slug: comic for comic in comics}
    assert by_slug["mumo-meets-world"].content == "Body of mumo-meets-world"


@pytest.mark.asyncio
async def test_file_source_fails_whole_read_on_one_bad_file(tmp_path: Path) -> None:
    (tmp_path / "2024-01-good.mdx").write_text(_mdx("good", "2024-01-01T00:00:00Z"), encoding="utf-8")
    (tmp_path / "2024-02-bad.mdx").write_text(
        _mdx("bad", "2024-02-01T00:00:00Z", tags="[]"), encoding="utf-8"
    )

    with pytest.raises(FrontmatterValidationError, match="tags"):
        await FileComicSource(tmp_path).load()


@pytest.mark.asyncio
async def test_file_source_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(ContentNotFoundError):
        await FileComicSource(tmp_path / "missing").load()


@pytest.mark.asyncio
async def test_file_source_rejects_non_utf8_file(tmp_path: Path) -> None:
    (tmp_path / "2024-01-good.mdx").write_text(_mdx("good", "2024-01-01T00:00:00Z"), encoding="utf-8")
    (tmp_path / "2024-02-garbled.mdx").write_bytes(b"\xff\xfe")

    with pytest.raises(ContentParseError, match="2024-02-garbled.mdx"):
        await FileComicSource(tmp_path).load()


@pytest.mark.asyncio
async def test_database_source_applies_defaults_for_null_columns(tmp_path: Path) -> None:
    engine = _engine(tmp_path)
    with Session(engine) as session:
        session.add(
            ComicRecord(
                title="Bare Row",
                slug="bare-row",
                publish_date=datetime(2024, 1, 1, 12, 0),
                synopsis="A row with nothing optional set.",
                tags_json=None,
                reading_time=None,
                cover_image_url=None,
                author=None,
                featured=None,
                content="body",
            )
        )
        session.commit()

    comics = await DatabaseComicSource(engine).load()

    assert len(comics) == 1
    metadata = comics[0].frontmatter
    assert metadata.tags == []
    assert metadata.reading_time == 5
    assert metadata.author == "Mumo Team"
    assert metadata.featured is False
    assert metadata.cover_image == ""
    assert metadata.publish_date == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_database_source_empty_table_is_not_an_error(tmp_path: Path) -> None:
    assert await DatabaseComicSource(_engine(tmp_path)).load() == []


@pytest.mark.asyncio
async def test_database_source_wraps_query_failures(tmp_path: Path) -> None:
    engine = create_engine_for_url(f"sqlite:///{tmp_path / 'empty.sqlite3'}")

    with pytest.raises(ContentSourceError, match="Failed to fetch comics from database"):
        await DatabaseComicSource(engine).load()


@pytest.mark.asyncio
async def test_database_publish_upserts_by_slug(tmp_path: Path) -> None:
    source = DatabaseComicSource(_engine(tmp_path))
    frontmatter = ComicFrontmatter(
        title="Streaming Dreams",
        slug="streaming-dreams",
        publish_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
        synopsis="Mumo binges an entire season overnight.",
        tags=["streaming"],
        reading_time=6,
        cover_image="/comics/streaming-dreams/cover.svg",
    )
    await source.publish(Comic(frontmatter=frontmatter, content="v1", slug="streaming-dreams"))
    await source.publish(
        Comic(
            frontmatter=frontmatter.model_copy(update={"title": "Streaming Dreams (Remastered)"}),
            content="v2",
            slug="streaming-dreams",
        )
    )

    comics = await source.load()

    assert len(comics) == 1
    assert comics[0].frontmatter.title == "Streaming Dreams (Remastered)"
    assert comics[0].content == "v2"
    assert comics[0].frontmatter.author == "Mumo Team"


def test_build_source_follows_settings(tmp_path: Path) -> None:
    files = build_source(Settings(content_dir=tmp_path, data_dir=tmp_path))
    database = build_source(
        Settings(
            content_source="database",
            data_dir=tmp_path,
            database_url=f"sqlite:///{tmp_path / 'build.sqlite3'}",
        )
    )
    assert isinstance(files, FileComicSource)
    assert files.content_dir == tmp_path
    assert isinstance(database, DatabaseComicSource)
