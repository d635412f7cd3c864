"""FastAPI surface serving comics, tags, the RSS feed and the sitemap."""

from __future__ import annotations

import random
from collections.abc import AsyncIterator
from typing import Any, Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from mumo.exceptions import RetrievalError
from mumo.feeds import SiteInfo, generate_rss_feed
from mumo.models import Comic
from mumo.seo import article_schema, breadcrumb_schema, comic_breadcrumbs
from mumo.services import ComicRepository, ComicRequest, ComicSource, build_source
from mumo.settings import Settings, get_settings
from mumo.sitemap import build_sitemap, render_sitemap

logger = structlog.get_logger(__name__)

RSS_CACHE_CONTROL = "public, s-maxage=3600, stale-while-revalidate=7200"


def _comic_payload(comic: Comic) -> dict[str, Any]:
    return comic.model_dump(mode="json", by_alias=True)


def _link(comic: Comic | None) -> dict[str, str] | None:
    if comic is None:
        return None
    return {"slug": comic.slug, "title": comic.frontmatter.title}


def create_app(
    settings: Optional[Settings] = None,
    *,
    source: Optional[ComicSource] = None,
    rng: Optional[random.Random] = None,
) -> FastAPI:
    """Factory used by uvicorn."""
    settings = settings or get_settings()
    repository = ComicRepository(source or build_source(settings), rng=rng)
    site = SiteInfo.from_settings(settings)
    app = FastAPI(title="Mumo Comics")
    app.state.repository = repository

    async def comics_scope() -> AsyncIterator[ComicRequest]:
        # One snapshot of the collection per HTTP request.
        async with repository.request() as scope:
            yield scope

    @app.exception_handler(RetrievalError)
    async def retrieval_failed(request: Request, exc: RetrievalError) -> JSONResponse:
        logger.error("web.retrieval_failed", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Failed to load comics"},
        )

    @app.get("/api/comics")
    async def list_comics(
        tag: Optional[str] = None, comics: ComicRequest = Depends(comics_scope)
    ) -> dict[str, Any]:
        if tag is not None:
            found = await comics.get_comics_by_tag(tag)
        else:
            found = await comics.get_all_comics()
        return {"comics": [_comic_payload(comic) for comic in found], "total": len(found)}

    @app.get("/api/comics/latest")
    async def latest_comic(comics: ComicRequest = Depends(comics_scope)) -> dict[str, Any]:
        comic = await comics.get_latest_comic()
        if comic is None:
            raise HTTPException(status_code=404, detail="No comics available")
        return _comic_payload(comic)

    @app.get("/api/comics/random")
    async def random_comic(comics: ComicRequest = Depends(comics_scope)) -> dict[str, Any]:
        comic = await comics.get_random_comic()
        if comic is None:
            raise HTTPException(status_code=404, detail="No comics available")
        return _comic_payload(comic)

    @app.get("/api/comics/{slug}")
    async def comic_detail(slug: str, comics: ComicRequest = Depends(comics_scope)) -> dict[str, Any]:
        comic = await comics.get_comic_by_slug(slug)
        if comic is None:
            raise HTTPException(status_code=404, detail="Comic not found")
        adjacent = await comics.get_adjacent_comics(slug)
        return {
            "comic": _comic_payload(comic),
            "previous": _link(adjacent.previous),
            "next": _link(adjacent.next),
            "structuredData": {
                "article": article_schema(comic, site.base_url, settings.default_author),
                "breadcrumbs": breadcrumb_schema(comic_breadcrumbs(comic), site.base_url),
            },
        }

    @app.get("/api/tags")
    async def list_tags(comics: ComicRequest = Depends(comics_scope)) -> dict[str, list[str]]:
        return {"tags": await comics.get_all_tags()}

    @app.get("/api/rss")
    async def rss_feed(comics: ComicRequest = Depends(comics_scope)) -> Response:
        feed = generate_rss_feed(await comics.get_all_comics(), site)
        return Response(
            content=feed,
            media_type="application/rss+xml; charset=utf-8",
            headers={"Cache-Control": RSS_CACHE_CONTROL},
        )

    @app.get("/sitemap.xml")
    async def sitemap(comics: ComicRequest = Depends(comics_scope)) -> Response:
        entries = await build_sitemap(comics, site.base_url)
        return Response(content=render_sitemap(entries), media_type="application/xml")

    return app
