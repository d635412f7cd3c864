from datetime import datetime, timezone

from fastapi.testclient import TestClient

from mumo.exceptions import ContentNotFoundError
from mumo.models import Comic, ComicFrontmatter
from mumo.settings import Settings
from mumo.web.app import create_app


def _comic(slug: str, day: int, tags: list[str]) -> Comic:
    frontmatter = ComicFrontmatter(
        title=slug.replace("-", " ").title(),
        slug=slug,
        publish_date=datetime(2024, 1, day, tzinfo=timezone.utc),
        synopsis="Mumo learns something new this week.",
        tags=tags,
        reading_time=3,
        cover_image=f"/comics/{slug}/cover.svg",
    )
    return Comic(frontmatter=frontmatter, content="body", slug=slug)


class _CountingSource:
    name = "stub"

    def __init__(self, comics=None, error=None) -> None:
        self.comics = comics or []
        self.error = error
        self.calls = 0

    async def load(self) -> list[Comic]:
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.comics)


def _client(tmp_path, source) -> TestClient:
    settings = Settings(data_dir=tmp_path, site_url="https://mumo.example")
    return TestClient(create_app(settings, source=source))


def _sample_source() -> _CountingSource:
    return _CountingSource(
        [
            _comic("mumo-meets-world", 1, ["tech", "origin"]),
            _comic("cable-chaos", 8, ["tech"]),
            _comic("streaming-dreams", 15, ["streaming"]),
        ]
    )


def test_list_and_filter_comics(tmp_path) -> None:
    client = _client(tmp_path, _sample_source())

    response = client.get("/api/comics")
    assert response.status_code == 200
    payload = response.json()
    assert payload["total"] == 3
    assert [item["slug"] for item in payload["comics"]] == [
        "streaming-dreams",
        "cable-chaos",
        "mumo-meets-world",
    ]
    assert payload["comics"][0]["frontmatter"]["publishDate"].startswith("2024-01-15")

    tagged = client.get("/api/comics", params={"tag": "origin"}).json()
    assert [item["slug"] for item in tagged["comics"]] == ["mumo-meets-world"]

    empty = client.get("/api/comics", params={"tag": ""}).json()
    assert empty == {"comics": [], "total": 0}


def test_comic_detail_includes_neighbours_and_reads_once(tmp_path) -> None:
    source = _sample_source()
    client = _client(tmp_path, source)

    response = client.get("/api/comics/cable-chaos")

    assert response.status_code == 200
    payload = response.json()
    assert payload["previous"] == {"slug": "mumo-meets-world", "title": "Mumo Meets World"}
    assert payload["next"] == {"slug": "streaming-dreams", "title": "Streaming Dreams"}
    assert payload["structuredData"]["article"]["headline"] == "Cable Chaos"
    assert source.calls == 1


def test_unknown_comic_is_404(tmp_path) -> None:
    client = _client(tmp_path, _sample_source())
    assert client.get("/api/comics/nope").status_code == 404


def test_latest_random_and_tags(tmp_path) -> None:
    client = _client(tmp_path, _sample_source())

    assert client.get("/api/comics/latest").json()["slug"] == "streaming-dreams"
    assert client.get("/api/comics/random").json()["slug"] in {
        "streaming-dreams",
        "cable-chaos",
        "mumo-meets-world",
    }
    assert client.get("/api/tags").json() == {"tags": ["tech", "streaming", "origin"]}


def test_empty_collection(tmp_path) -> None:
    client = _client(tmp_path, _CountingSource([]))

    assert client.get("/api/comics").json() == {"comics": [], "total": 0}
    assert client.get("/api/comics/latest").status_code == 404
    assert client.get("/api/comics/random").status_code == 404


def test_retrieval_failure_is_generic_500(tmp_path) -> None:
    client = _client(tmp_path, _CountingSource(error=ContentNotFoundError("Directory not found: x")))

    response = client.get("/api/comics")

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to load comics"}


def test_rss_feed(tmp_path) -> None:
    client = _client(tmp_path, _sample_source())

    response = client.get("/api/rss")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/rss+xml")
    assert "s-maxage=3600" in response.headers["cache-control"]
    assert response.text.count("<item>") == 3
    assert "https://mumo.example/comics/streaming-dreams" in response.text


def test_sitemap(tmp_path) -> None:
    client = _client(tmp_path, _sample_source())

    response = client.get("/sitemap.xml")

    assert response.status_code == 200
    assert response.text.count("<url>") == 5
