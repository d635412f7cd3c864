"""Utility helpers for slugs and URLs."""

from __future__ import annotations

import re
import unicodedata

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str, max_length: int = 80) -> str:
    """Create a URL-safe comic slug from a title."""
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode()
    value = value.lower()
    value = SLUG_PATTERN.sub("-", value).strip("-")
    if not value:
        value = "comic"
    return value[:max_length].rstrip("-")


def absolute_url(base_url: str, path: str) -> str:
    """Join a site-relative path onto the base URL; absolute URLs pass through."""
    if path.startswith(("http://", "https://")):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
