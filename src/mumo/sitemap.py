"""sitemap.xml generation: static pages plus one entry per comic."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from mumo.exceptions import RetrievalError
from mumo.feeds import escape_xml
from mumo.services.repository import ComicQueries

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class SitemapEntry:
    url: str
    last_modified: datetime
    change_frequency: str
    priority: float


def static_entries(site_url: str, now: datetime | None = None) -> list[SitemapEntry]:
    now = now or datetime.now(timezone.utc)
    base = site_url.rstrip("/")
    return [
        SitemapEntry(url=base, last_modified=now, change_frequency="daily", priority=1.0),
        SitemapEntry(
            url=f"{base}/archive", last_modified=now, change_frequency="daily", priority=0.8
        ),
    ]


async def build_sitemap(comics: ComicQueries, site_url: str) -> list[SitemapEntry]:
    """Home and archive pages, then every comic; comics are dropped if unreadable."""
    entries = static_entries(site_url)
    try:
        published = await comics.get_all_comics()
    except RetrievalError as exc:
        logger.error("sitemap.comics_unavailable", error=str(exc))
        return entries
    base = site_url.rstrip("/")
    entries.extend(
        SitemapEntry(
            url=f"{base}/comics/{comic.slug}",
            last_modified=comic.frontmatter.publish_date,
            change_frequency="monthly",
            priority=0.7,
        )
        for comic in published
    )
    return entries


def render_sitemap(entries: list[SitemapEntry]) -> str:
    urls = "\n".join(
        "  <url>\n"
        f"    <loc>{escape_xml(entry.url)}</loc>\n"
        f"    <lastmod>{entry.last_modified.astimezone(timezone.utc).isoformat()}</lastmod>\n"
        f"    <changefreq>{entry.change_frequency}</changefreq>\n"
        f"    <priority>{entry.priority:.1f}</priority>\n"
        "  </url>"
        for entry in entries
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{urls}\n"
        "</urlset>"
    )
