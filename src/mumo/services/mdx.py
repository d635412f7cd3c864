"""Helpers for reading comic MDX files from disk."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

from mumo.exceptions import (
    ContentNotFoundError,
    ContentParseError,
    ContentPermissionError,
    ContentSourceError,
)
from mumo.models import ComicFrontmatter
from mumo.schema import DEFAULT_COVER_PREFIX, validate_frontmatter

logger = structlog.get_logger(__name__)

MDX_EXTENSION = ".mdx"
DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-")
FRONTMATTER_BLOCK = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(?P<meta>.*?)^---[ \t]*(?:\r?\n|\Z)(?P<body>.*)\Z",
    flags=re.DOTALL | re.MULTILINE,
)


@dataclass(slots=True)
class ParsedMDX:
    frontmatter: ComicFrontmatter
    content: str


def split_frontmatter(text: str) -> tuple[Any, str]:
    """Split ``---``-delimited YAML metadata from the body.

    Text without a metadata block yields an empty mapping and the whole text as body.
    """
    match = FRONTMATTER_BLOCK.match(text)
    if not match:
        return {}, text
    try:
        metadata = yaml.safe_load(match.group("meta"))
    except yaml.YAMLError as exc:
        raise ContentParseError(f"Malformed YAML frontmatter: {exc}") from exc
    if metadata is None:
        metadata = {}
    return metadata, match.group("body")


def parse_mdx_file(path: Path, *, cover_prefix: str = DEFAULT_COVER_PREFIX) -> ParsedMDX:
    """Read ``path`` and return its validated frontmatter and trimmed body."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ContentNotFoundError(f"Comic file not found: {path}") from exc
    except PermissionError as exc:
        raise ContentPermissionError(f"Permission denied reading file: {path}") from exc
    except UnicodeDecodeError as exc:
        raise ContentParseError(f"Error parsing MDX file {path}: not valid UTF-8") from exc
    except OSError as exc:
        raise ContentSourceError(f"Error reading MDX file {path}: {exc}") from exc

    try:
        metadata, body = split_frontmatter(text)
    except ContentParseError as exc:
        raise ContentParseError(f"Error parsing MDX file {path}: {exc}") from exc
    frontmatter = validate_frontmatter(metadata, cover_prefix=cover_prefix, source=str(path))
    return ParsedMDX(frontmatter=frontmatter, content=body.strip())


def get_mdx_files(directory: Path) -> list[Path]:
    """List the ``.mdx`` files directly inside ``directory``, sorted by name."""
    try:
        entries = list(directory.iterdir())
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise ContentNotFoundError(f"Directory not found: {directory}") from exc
    except PermissionError as exc:
        raise ContentPermissionError(f"Permission denied reading directory: {directory}") from exc
    except OSError as exc:
        raise ContentSourceError(f"Error reading directory {directory}: {exc}") from exc
    files = [entry for entry in entries if entry.name.endswith(MDX_EXTENSION) and entry.is_file()]
    return sorted(files, key=lambda entry: entry.name)


def extract_slug_from_filename(filename: str | Path) -> str:
    """``2024-01-mumo-meets-world.mdx`` -> ``mumo-meets-world``."""
    name = Path(filename).name
    if name.endswith(MDX_EXTENSION):
        name = name[: -len(MDX_EXTENSION)]
    return DATE_PREFIX.sub("", name, count=1)
