"""Failure taxonomy for deck resolution."""

from __future__ import annotations

from crcast_source.models import SourceRef


class SourceError(Exception):
    """Base class for failures tied to a specific deck source."""

    def __init__(self, source: SourceRef, message: str) -> None:
        super().__init__(message)
        self.source = source


class SourceNotFoundError(SourceError):
    """The deck does not exist upstream. Retrying will not help."""

    def __init__(self, source: SourceRef) -> None:
        super().__init__(
            source, f"{source.kind} deck '{source.deck_code}' was not found"
        )


class SourceServiceError(SourceError):
    """The upstream service is unreachable, failing, or sent garbage.

    The user may try again later.
    """

    def __init__(self, source: SourceRef, reason: str = "") -> None:
        message = f"{source.kind} is unavailable for deck '{source.deck_code}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(source, message)
        self.reason = reason


class DeckFormatError(ValueError):
    """A payload could not be decoded into the expected shape."""
