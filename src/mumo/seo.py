"""schema.org JSON-LD structured data for comic pages."""

from __future__ import annotations

from typing import Any

from mumo.models import Comic
from mumo.utils import absolute_url

SITE_NAME = "Mumo Comics"


def comic_breadcrumbs(comic: Comic) -> list[dict[str, str]]:
    return [
        {"name": "Home", "url": "/"},
        {"name": "Archive", "url": "/archive"},
        {"name": comic.frontmatter.title, "url": f"/comics/{comic.slug}"},
    ]


def breadcrumb_schema(items: list[dict[str, str]], site_url: str) -> dict[str, Any]:
    base = site_url.rstrip("/")
    return {
        "@context": "https://schema.org",
        "@type": "BreadcrumbList",
        "itemListElement": [
            {
                "@type": "ListItem",
                "position": position,
                "name": item["name"],
                "item": f"{base}{item['url']}",
            }
            for position, item in enumerate(items, start=1)
        ],
    }


def article_schema(comic: Comic, site_url: str, default_author: str = "Mumo Team") -> dict[str, Any]:
    """Article markup search engines use for rich results."""
    metadata = comic.frontmatter
    base = site_url.rstrip("/")
    published = metadata.publish_date.isoformat()
    return {
        "@context": "https://schema.org",
        "@type": "Article",
        "headline": metadata.title,
        "description": metadata.synopsis,
        "image": absolute_url(base, metadata.cover_image),
        "datePublished": published,
        "dateModified": published,
        "author": {"@type": "Person", "name": metadata.author or default_author},
        "publisher": {
            "@type": "Organization",
            "name": SITE_NAME,
            "logo": {"@type": "ImageObject", "url": f"{base}/logo.png"},
        },
        "mainEntityOfPage": {"@type": "WebPage", "@id": f"{base}/comics/{comic.slug}"},
        "keywords": ", ".join(metadata.tags),
        "articleSection": "Comics",
        "inLanguage": "en-US",
    }
