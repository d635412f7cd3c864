"""RSS 2.0 feed generation for published comics."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from xml.sax.saxutils import escape

from mumo.models import Comic
from mumo.settings import DEFAULT_SITE_URL, Settings
from mumo.utils import absolute_url

MAX_FEED_ITEMS = 20
DEFAULT_ENCLOSURE_TYPE = "image/svg+xml"
_ENTITIES = {'"': "&quot;", "'": "&apos;"}


@dataclass(slots=True)
class SiteInfo:
    """Channel-level metadata for the feed."""

    url: str = DEFAULT_SITE_URL
    title: str = "Mumo Comics"
    description: str = (
        "Weekly short comics featuring the character Mumo exploring technology, "
        "streaming, and modern life."
    )
    language: str = "en-US"
    managing_editor: str = "editor@mumocomics.com (Mumo Comics Team)"
    web_master: str = "webmaster@mumocomics.com (Mumo Comics Team)"
    category: str = "Comics"
    copyright: str = field(
        default_factory=lambda: f"Copyright {datetime.now(timezone.utc).year} Mumo Comics"
    )

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SiteInfo":
        return cls(url=settings.base_url)


def escape_xml(text: str) -> str:
    """Replace the five XML metacharacters with their named entities."""
    return escape(text, _ENTITIES)


def format_rss_date(value: datetime) -> str:
    """RFC 822 date in GMT, e.g. ``Mon, 15 Jan 2024 10:00:00 GMT``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def comic_url(site: SiteInfo, comic: Comic) -> str:
    return f"{site.base_url}/comics/{comic.slug}"


def generate_rss_item(comic: Comic, site: SiteInfo) -> str:
    metadata = comic.frontmatter
    title = escape_xml(metadata.title)
    link = escape_xml(comic_url(site, comic))
    image_url = escape_xml(absolute_url(site.base_url, metadata.cover_image))
    enclosure_type = mimetypes.guess_type(metadata.cover_image)[0] or DEFAULT_ENCLOSURE_TYPE
    description = f"""<![CDATA[
        <img src="{image_url}" alt="{title}" style="max-width: 100%; height: auto;" />
        <p>{escape_xml(metadata.synopsis)}</p>
        <p><a href="{link}">Read the full comic</a></p>
      ]]>"""
    return f"""    <item>
      <title>{title}</title>
      <link>{link}</link>
      <guid isPermaLink="true">{link}</guid>
      <description>{description}</description>
      <pubDate>{format_rss_date(metadata.publish_date)}</pubDate>
      <author>{escape_xml(metadata.author or site.managing_editor)}</author>
      <category>{escape_xml(site.category)}</category>
      <enclosure url="{image_url}" type="{enclosure_type}" />
    </item>"""


def generate_rss_feed(comics: list[Comic], site: SiteInfo | None = None) -> str:
    """Render the feed; ``comics`` must already be newest-first."""
    site = site or SiteInfo()
    recent = comics[:MAX_FEED_ITEMS]
    if recent:
        last_build = format_rss_date(recent[0].frontmatter.publish_date)
    else:
        last_build = format_rss_date(datetime.now(timezone.utc))
    items = "\n".join(generate_rss_item(comic, site) for comic in recent)
    base = escape_xml(site.base_url)
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:atom="http://www.w3.org/2005/Atom"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>{escape_xml(site.title)}</title>
    <link>{base}</link>
    <description>{escape_xml(site.description)}</description>
    <language>{escape_xml(site.language)}</language>
    <copyright>{escape_xml(site.copyright)}</copyright>
    <managingEditor>{escape_xml(site.managing_editor)}</managingEditor>
    <webMaster>{escape_xml(site.web_master)}</webMaster>
    <lastBuildDate>{last_build}</lastBuildDate>
    <category>{escape_xml(site.category)}</category>
    <generator>Mumo Comics RSS Generator</generator>
    <atom:link href="{base}/api/rss" rel="self" type="application/rss+xml" />
    <image>
      <url>{base}/logo.png</url>
      <title>{escape_xml(site.title)}</title>
      <link>{base}</link>
    </image>
{items}
  </channel>
</rss>"""


def validate_rss_feed(xml: str) -> bool:
    """Cheap structural check of a generated feed; not a full XML parse."""
    if '<?xml version="1.0"' not in xml:
        return False
    if '<rss version="2.0"' not in xml:
        return False
    if "<channel>" not in xml or "</channel>" not in xml:
        return False
    if "</rss>" not in xml:
        return False
    return all(element in xml for element in ("<title>", "<link>", "<description>"))
