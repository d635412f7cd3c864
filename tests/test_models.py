from datetime import datetime, timezone

from mumo.models import Comic, ComicFrontmatter


def test_comic_shortcuts_and_camel_case_dump() -> None:
    frontmatter = ComicFrontmatter(
        title="Mumo Meets World",
        slug="mumo-meets-world",
        publishDate=datetime(2024, 1, 15, 10, tzinfo=timezone.utc),
        synopsis="Mumo discovers the internet.",
        tags=["tech"],
        readingTime=3,
        coverImage="/comics/mumo-meets-world/cover.svg",
    )
    comic = Comic(frontmatter=frontmatter, content="", slug="mumo-meets-world")

    assert comic.title == "Mumo Meets World"
    assert comic.tags == ["tech"]
    payload = comic.model_dump(mode="json", by_alias=True)
    assert payload["frontmatter"]["readingTime"] == 3
    assert payload["frontmatter"]["coverImage"].startswith("/comics/")


def test_naive_publish_date_is_read_as_utc() -> None:
    naive = ComicFrontmatter(
        title="Cable Chaos",
        slug="cable-chaos",
        publish_date=datetime(2024, 2, 1, 9),
        synopsis="Mumo untangles a drawer of cables.",
        tags=["tech"],
        reading_time=4,
        cover_image="/comics/cable-chaos/cover.svg",
    )

    assert naive.publish_date == datetime(2024, 2, 1, 9, tzinfo=timezone.utc)
    assert naive.publish_date > datetime(2024, 1, 1, tzinfo=timezone.utc)
