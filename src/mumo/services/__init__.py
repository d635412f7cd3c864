"""Service abstractions for the Mumo content engine."""

from .mdx import ParsedMDX, extract_slug_from_filename, get_mdx_files, parse_mdx_file
from .repository import (
    ComicQueries,
    ComicRepository,
    ComicRequest,
    SnapshotCache,
    compare_by_date_and_slug,
    sort_comics,
)
from .sources import ComicSource, DatabaseComicSource, FileComicSource, build_source

__all__ = [
    "ComicQueries",
    "ComicRepository",
    "ComicRequest",
    "ComicSource",
    "DatabaseComicSource",
    "FileComicSource",
    "ParsedMDX",
    "SnapshotCache",
    "build_source",
    "compare_by_date_and_slug",
    "extract_slug_from_filename",
    "get_mdx_files",
    "parse_mdx_file",
    "sort_comics",
]
