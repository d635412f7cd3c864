"""Retrieval, ordering and filtering over the comic collection.

Every operation works on one canonically sorted snapshot: newest ``publish_date``
first, equal dates broken by ascending slug. A :class:`ComicRepository` reads the
backing source on every call; ``repository.request()`` opens a scope in which the
source is read at most once and all derived views share that snapshot.
"""

from __future__ import annotations

import asyncio
import random
from collections import Counter
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from contextlib import asynccontextmanager, contextmanager
from functools import cmp_to_key
from uuid import uuid4

import structlog

from mumo.exceptions import RetrievalError
from mumo.models import AdjacentComics, Comic
from .sources import ComicSource

logger = structlog.get_logger(__name__)

Loader = Callable[[], Awaitable[list[Comic]]]


def compare_by_date_and_slug(a: Comic, b: Comic) -> int:
    """Negative when ``a`` sorts first: later date first, then slug ascending."""
    date_a = a.frontmatter.publish_date
    date_b = b.frontmatter.publish_date
    if date_a != date_b:
        return -1 if date_a > date_b else 1
    if a.slug == b.slug:
        return 0
    return -1 if a.slug < b.slug else 1


canonical_sort_key = cmp_to_key(compare_by_date_and_slug)


def sort_comics(comics: list[Comic]) -> list[Comic]:
    return sorted(comics, key=canonical_sort_key)


class SnapshotCache:
    """Per-request memo of the sorted collection, with explicit teardown."""

    def __init__(self) -> None:
        self._snapshots: dict[str, list[Comic]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self.loads = 0

    async def get_or_load(self, request_id: str, loader: Loader) -> list[Comic]:
        lock = self._locks.setdefault(request_id, asyncio.Lock())
        async with lock:
            snapshot = self._snapshots.get(request_id)
            if snapshot is not None:
                logger.debug("repository.snapshot.hit", request_id=request_id)
                return snapshot
            logger.debug("repository.snapshot.miss", request_id=request_id)
            snapshot = await loader()
            self.loads += 1
            self._snapshots[request_id] = snapshot
            return snapshot

    def release(self, request_id: str) -> None:
        self._snapshots.pop(request_id, None)
        self._locks.pop(request_id, None)

    def active(self) -> list[str]:
        return sorted(set(self._snapshots) | set(self._locks))


@contextmanager
def _annotate(operation: str, **inputs: str) -> Iterator[None]:
    try:
        yield
    except RetrievalError:
        raise
    except Exception as exc:
        detail = ", ".join(f"{key}={value!r}" for key, value in inputs.items())
        logger.error("repository.retrieval_failed", operation=operation, error=str(exc), **inputs)
        raise RetrievalError(f"{operation}({detail}) failed: {exc}") from exc


class ComicQueries:
    """Operations shared by the repository and its request scopes."""

    _rng: random.Random

    async def _snapshot(self) -> list[Comic]:
        raise NotImplementedError

    async def get_all_comics(self) -> list[Comic]:
        with _annotate("get_all_comics"):
            return list(await self._snapshot())

    async def get_comic_by_slug(self, slug: str) -> Comic | None:
        with _annotate("get_comic_by_slug", slug=slug):
            comics = await self._snapshot()
        return next((comic for comic in comics if comic.slug == slug), None)

    async def get_latest_comic(self) -> Comic | None:
        with _annotate("get_latest_comic"):
            comics = await self._snapshot()
        return comics[0] if comics else None

    async def get_comics_by_tag(self, tag: str) -> list[Comic]:
        with _annotate("get_comics_by_tag", tag=tag):
            comics = await self._snapshot()
        return [comic for comic in comics if tag in comic.frontmatter.tags]

    async def get_all_tags(self) -> list[str]:
        """Distinct tags, most used first; ties keep first-seen order."""
        with _annotate("get_all_tags"):
            comics = await self._snapshot()
        counts: Counter[str] = Counter()
        for comic in comics:
            counts.update(comic.frontmatter.tags)
        return [tag for tag, _ in counts.most_common()]

    async def get_random_comic(self) -> Comic | None:
        with _annotate("get_random_comic"):
            comics = await self._snapshot()
        if not comics:
            return None
        return comics[self._rng.randrange(len(comics))]

    async def get_adjacent_comics(self, slug: str) -> AdjacentComics:
        with _annotate("get_adjacent_comics", slug=slug):
            comics = await self._snapshot()
        index = next((i for i, comic in enumerate(comics) if comic.slug == slug), None)
        if index is None:
            return AdjacentComics()
        return AdjacentComics(
            previous=comics[index + 1] if index + 1 < len(comics) else None,
            next=comics[index - 1] if index > 0 else None,
        )


class ComicRepository(ComicQueries):
    """Entry point for comic retrieval over a single content source."""

    def __init__(
        self,
        source: ComicSource,
        *,
        cache: SnapshotCache | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._source = source
        self._cache = cache or SnapshotCache()
        self._rng = rng or random.Random()

    @property
    def source(self) -> ComicSource:
        return self._source

    @property
    def cache(self) -> SnapshotCache:
        return self._cache

    @asynccontextmanager
    async def request(self, request_id: str | None = None) -> AsyncIterator["ComicRequest"]:
        """Scope in which the source is read at most once."""
        request_id = request_id or uuid4().hex
        try:
            yield ComicRequest(self, request_id)
        finally:
            self._cache.release(request_id)

    async def _snapshot(self) -> list[Comic]:
        return await self._read_sorted()

    async def _read_sorted(self) -> list[Comic]:
        comics = await self._source.load()
        logger.debug("repository.loaded", source=self._source.name, count=len(comics))
        return sort_comics(comics)


class ComicRequest(ComicQueries):
    """Request-scoped view sharing one memoized snapshot."""

    def __init__(self, repository: ComicRepository, request_id: str) -> None:
        self._repository = repository
        self._rng = repository._rng
        self.request_id = request_id

    async def _snapshot(self) -> list[Comic]:
        return await self._repository.cache.get_or_load(
            self.request_id, self._repository._read_sorted
        )
