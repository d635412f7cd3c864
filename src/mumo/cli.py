"""Command-line interface for the Mumo content engine."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from mumo.db import get_engine
from mumo.exceptions import MumoError, RetrievalError
from mumo.feeds import SiteInfo, generate_rss_feed, validate_rss_feed
from mumo.log import configure_logging
from mumo.models import Comic
from mumo.services import (
    ComicRepository,
    DatabaseComicSource,
    build_source,
    extract_slug_from_filename,
    get_mdx_files,
    parse_mdx_file,
)
from mumo.settings import Settings, get_settings
from mumo.sitemap import build_sitemap, render_sitemap
from mumo.utils import slugify

console = Console()
app = typer.Typer(help="Mumo Comics content engine")


@app.callback()
def main() -> None:
    """Configure logging from MUMO_LOG_LEVEL before any command runs."""
    configure_logging(Settings.load().log_level)


def _repository(settings: Settings) -> ComicRepository:
    return ComicRepository(build_source(settings))


def _run(coro):
    try:
        return asyncio.run(coro)
    except RetrievalError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc


def _print_comics(comics: list[Comic], title: str) -> None:
    table = Table(title=title)
    table.add_column("Published")
    table.add_column("Slug")
    table.add_column("Title", overflow="fold")
    table.add_column("Tags")
    for comic in comics:
        table.add_row(
            comic.frontmatter.publish_date.strftime("%Y-%m-%d"),
            comic.slug,
            comic.frontmatter.title,
            ", ".join(comic.frontmatter.tags) or "—",
        )
    console.print(table)


def _print_comic(comic: Comic) -> None:
    metadata = comic.frontmatter
    table = Table(title=metadata.title)
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    table.add_row("Slug", comic.slug)
    table.add_row("Published", metadata.publish_date.isoformat())
    table.add_row("Synopsis", metadata.synopsis)
    table.add_row("Tags", ", ".join(metadata.tags) or "—")
    table.add_row("Reading time", f"{metadata.reading_time} min")
    table.add_row("Cover", metadata.cover_image or "—")
    table.add_row("Author", metadata.author or "—")
    table.add_row("Featured", "yes" if metadata.featured else "no")
    console.print(table)


def _write_or_echo(text: str, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    console.print(f"[green]Wrote[/green] {output}")


@app.command()
def config(
    json_output: bool = typer.Option(False, "--json", help="Output settings as JSON"),
) -> None:
    """Display the resolved settings."""
    settings = get_settings()
    if json_output:
        typer.echo(settings.model_dump_json(indent=2))
        return
    table = Table(title="Mumo Settings")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command("list")
def list_comics(
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only comics with this tag"),
) -> None:
    """List comics newest first."""
    repository = _repository(get_settings())
    if tag:
        comics = _run(repository.get_comics_by_tag(tag))
    else:
        comics = _run(repository.get_all_comics())
    if not comics:
        console.print("[yellow]No comics found.")
        return
    _print_comics(comics, f"Comics ({len(comics)})")


@app.command()
def show(slug: str = typer.Argument(..., help="Comic slug")) -> None:
    """Show one comic and its neighbours."""
    repository = _repository(get_settings())

    async def runner():
        async with repository.request() as comics:
            return await comics.get_comic_by_slug(slug), await comics.get_adjacent_comics(slug)

    comic, adjacent = _run(runner())
    if comic is None:
        console.print(f"[red]Comic not found:[/red] {slug}")
        raise typer.Exit(code=1)
    _print_comic(comic)
    console.print(f"Previous: {adjacent.previous.slug if adjacent.previous else '—'}")
    console.print(f"Next: {adjacent.next.slug if adjacent.next else '—'}")


@app.command()
def tags() -> None:
    """List tags, most used first."""
    repository = _repository(get_settings())
    found = _run(repository.get_all_tags())
    if not found:
        console.print("[yellow]No tags found.")
        return
    for tag in found:
        typer.echo(tag)


@app.command()
def latest() -> None:
    """Show the most recently published comic."""
    comic = _run(_repository(get_settings()).get_latest_comic())
    if comic is None:
        console.print("[yellow]No comics available.")
        return
    _print_comic(comic)


@app.command("random")
def random_comic() -> None:
    """Pick a comic at random."""
    comic = _run(_repository(get_settings()).get_random_comic())
    if comic is None:
        console.print("[yellow]No comics available.")
        return
    _print_comic(comic)


@app.command()
def validate(
    content_dir: Optional[Path] = typer.Option(None, help="Override the content directory"),
) -> None:
    """Check every MDX file and report all invalid ones."""
    settings = get_settings()
    directory = content_dir or settings.content_dir
    try:
        files = get_mdx_files(directory)
    except MumoError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    failures: list[tuple[Path, MumoError]] = []
    for path in files:
        try:
            parse_mdx_file(path, cover_prefix=settings.cover_image_prefix)
        except MumoError as exc:
            failures.append((path, exc))
    if not failures:
        console.print(f"[green]{len(files)} comic file(s) valid.[/green]")
        return
    table = Table(title=f"Invalid files ({len(failures)} of {len(files)})")
    table.add_column("File")
    table.add_column("Problem", overflow="fold")
    for path, exc in failures:
        table.add_row(path.name, str(exc))
    console.print(table)
    raise typer.Exit(code=1)


@app.command()
def rss(output: Optional[Path] = typer.Option(None, help="Write the feed to this file")) -> None:
    """Render the RSS feed of the 20 newest comics."""
    settings = get_settings()
    comics = _run(_repository(settings).get_all_comics())
    feed = generate_rss_feed(comics, SiteInfo.from_settings(settings))
    if not validate_rss_feed(feed):  # pragma: no cover - generator bug
        console.print("[red]Generated feed failed validation.[/red]")
        raise typer.Exit(code=1)
    _write_or_echo(feed, output)


@app.command()
def sitemap(output: Optional[Path] = typer.Option(None, help="Write sitemap.xml here")) -> None:
    """Render sitemap.xml."""
    settings = get_settings()
    entries = asyncio.run(build_sitemap(_repository(settings), settings.base_url))
    _write_or_echo(render_sitemap(entries), output)


@app.command()
def publish(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    slug: Optional[str] = typer.Option(None, help="Slug override (default: from filename)"),
) -> None:
    """Validate an MDX file and write it to the comics database."""
    settings = get_settings()
    try:
        parsed = parse_mdx_file(path, cover_prefix=settings.cover_image_prefix)
    except MumoError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    comic = Comic(
        frontmatter=parsed.frontmatter,
        content=parsed.content,
        slug=slug or extract_slug_from_filename(path),
    )
    source = DatabaseComicSource(
        get_engine(settings.resolved_database_url), default_author=settings.default_author
    )
    try:
        asyncio.run(source.publish(comic))
    except MumoError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print(f"[green]Published[/green]: {comic.frontmatter.title} ({comic.slug})")


@app.command("slug")
def make_slug(title: str = typer.Argument(..., help="Comic title")) -> None:
    """Print the slug generated for a title."""
    typer.echo(slugify(title))


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """Launch the FastAPI app."""
    uvicorn.run(
        "mumo.web.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )
