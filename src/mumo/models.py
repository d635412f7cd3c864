"""Core data models used throughout the Mumo content engine."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ComicFrontmatter(BaseModel):
    """Metadata describing a single comic issue."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    slug: str
    publish_date: datetime = Field(alias="publishDate")
    synopsis: str
    tags: list[str]
    reading_time: int = Field(alias="readingTime")
    cover_image: str = Field(alias="coverImage")
    author: str | None = None
    featured: bool | None = None

    @field_validator("publish_date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Comic(BaseModel):
    """A publishable comic: validated metadata plus its raw MDX body."""

    frontmatter: ComicFrontmatter
    content: str
    slug: str

    @property
    def title(self) -> str:
        return self.frontmatter.title

    @property
    def publish_date(self) -> datetime:
        return self.frontmatter.publish_date

    @property
    def tags(self) -> list[str]:
        return self.frontmatter.tags


class AdjacentComics(BaseModel):
    """Neighbours of a comic in the canonical newest-first ordering."""

    previous: Comic | None = None  # next-older issue
    next: Comic | None = None  # next-newer issue
