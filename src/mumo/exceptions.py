"""Exception hierarchy for the Mumo content engine."""

from __future__ import annotations


class MumoError(Exception):
    """Base exception for all Mumo errors."""


class FrontmatterValidationError(MumoError):
    """Comic metadata violates one or more field constraints.

    ``errors`` holds every ``(field, reason)`` pair found, not just the first.
    """

    def __init__(self, errors: list[tuple[str, str]], *, source: str | None = None) -> None:
        self.errors = list(errors)
        self.source = source
        details = "; ".join(f"{field}: {reason}" for field, reason in self.errors)
        if source:
            message = f"Invalid frontmatter in {source}: {details}"
        else:
            message = f"Invalid frontmatter: {details}"
        super().__init__(message)

    @property
    def fields(self) -> list[str]:
        return [field for field, _ in self.errors]


class ContentSourceError(MumoError):
    """The backing store could not produce the comic collection."""


class ContentNotFoundError(ContentSourceError):
    """Content directory, file, or row does not exist."""


class ContentPermissionError(ContentSourceError):
    """Content exists but cannot be read."""


class ContentParseError(ContentSourceError):
    """A content file could not be split into metadata and body."""


class RetrievalError(MumoError):
    """Raised by the repository whenever the collection cannot be read."""
