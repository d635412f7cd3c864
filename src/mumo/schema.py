"""Validation of raw comic frontmatter into typed records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Annotated, Any

from pydantic import (
    Field,
    StrictBool,
    StrictInt,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from mumo.exceptions import FrontmatterValidationError
from mumo.models import ComicFrontmatter

DEFAULT_COVER_PREFIX = "/comics/"
SLUG_REGEX = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

Tag = Annotated[str, Field(min_length=2, max_length=20)]

# Friendlier wording for the pydantic error types each field can produce.
_MESSAGES: dict[tuple[str, str], str] = {
    ("title", "string_too_short"): "Title is required",
    ("title", "string_too_long"): "Title must be 100 characters or less",
    ("slug", "string_too_short"): "Slug is required",
    ("slug", "string_pattern_mismatch"): "Slug must be lowercase alphanumeric with hyphens only",
    ("synopsis", "string_too_short"): "Synopsis must be at least 10 characters",
    ("synopsis", "string_too_long"): "Synopsis must be 300 characters or less",
    ("tags", "too_short"): "At least one tag is required",
    ("tags", "too_long"): "Maximum of 5 tags allowed",
    ("tags[]", "string_too_short"): "Each tag must be at least 2 characters",
    ("tags[]", "string_too_long"): "Each tag must be 20 characters or less",
    ("readingTime", "int_type"): "Reading time must be an integer",
    ("readingTime", "greater_than"): "Reading time must be a positive number",
    ("coverImage", "string_too_short"): "Cover image is required",
    ("author", "string_too_short"): "Author name must be at least 1 character",
    ("author", "string_too_long"): "Author name must be 50 characters or less",
    ("featured", "bool_type"): "Featured must be true or false",
}


class ValidatedFrontmatter(ComicFrontmatter):
    """Frontmatter with every field constraint enforced."""

    title: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, pattern=SLUG_REGEX)
    publish_date: datetime = Field(alias="publishDate")
    synopsis: str = Field(min_length=10, max_length=300)
    tags: list[Tag] = Field(min_length=1, max_length=5)
    reading_time: StrictInt = Field(alias="readingTime", gt=0)
    cover_image: str = Field(alias="coverImage", min_length=1)
    author: str | None = Field(default=None, min_length=1, max_length=50)
    featured: StrictBool | None = None

    @field_validator("publish_date", mode="before")
    @classmethod
    def _parse_publish_date(cls, value: Any) -> datetime:
        return parse_publish_date(value)

    @field_validator("cover_image")
    @classmethod
    def _check_cover_prefix(cls, value: str, info: ValidationInfo) -> str:
        prefix = (info.context or {}).get("cover_prefix", DEFAULT_COVER_PREFIX)
        if prefix and not value.startswith(prefix):
            raise ValueError(f"Cover image path must start with {prefix}")
        return value


@dataclass(slots=True)
class FrontmatterResult:
    """Outcome of validating one metadata block."""

    frontmatter: ComicFrontmatter | None = None
    errors: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.frontmatter is not None and not self.errors


def parse_publish_date(value: Any) -> datetime:
    """Normalize an ISO 8601 string, date or datetime into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValueError("Publish date must be a valid ISO 8601 datetime") from exc
    else:
        raise ValueError("Publish date must be a valid ISO 8601 datetime")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def safe_parse_frontmatter(
    data: Any, *, cover_prefix: str = DEFAULT_COVER_PREFIX
) -> FrontmatterResult:
    """Validate ``data`` without raising; every violation is collected."""
    if not isinstance(data, Mapping):
        return FrontmatterResult(errors=[("frontmatter", "Expected a mapping of metadata fields")])
    try:
        frontmatter = ValidatedFrontmatter.model_validate(
            dict(data), context={"cover_prefix": cover_prefix}
        )
    except ValidationError as exc:
        return FrontmatterResult(errors=[_describe(error) for error in exc.errors()])
    return FrontmatterResult(frontmatter=frontmatter)


def validate_frontmatter(
    data: Any, *, cover_prefix: str = DEFAULT_COVER_PREFIX, source: str | None = None
) -> ComicFrontmatter:
    """Return typed frontmatter or raise listing every invalid field."""
    result = safe_parse_frontmatter(data, cover_prefix=cover_prefix)
    if not result.ok:
        raise FrontmatterValidationError(result.errors, source=source)
    return result.frontmatter


def _describe(error: dict[str, Any]) -> tuple[str, str]:
    loc = [str(part) for part in error.get("loc", ())] or ["frontmatter"]
    field_name = ".".join(loc)
    key = f"{loc[0]}[]" if len(loc) > 1 else loc[0]
    kind = error.get("type", "")
    if kind == "missing":
        return field_name, "required"
    if kind == "value_error":
        return field_name, str(error.get("ctx", {}).get("error", error.get("msg", "")))
    return field_name, _MESSAGES.get((key, kind), error.get("msg", "invalid value"))
