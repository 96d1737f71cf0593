"""Data models for source references, cards, and deck summaries.

Cards are frozen so they can be collected into sets. A call's ``parts``
is a tuple of paragraphs; each paragraph is a tuple of literal strings
and ``Slot`` placeholders.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional, Set, Tuple, Union

CRCAST = "CrCast"


@dataclass(frozen=True)
class SourceRef:
    """Reference to an external deck: provider kind plus provider-local code."""

    kind: str  # e.g. "CrCast"
    deck_code: str

    @classmethod
    def crcast(cls, deck_code: str) -> SourceRef:
        return cls(kind=CRCAST, deck_code=deck_code)


@dataclass(frozen=True)
class Slot:
    """An empty blank for a response to fill."""


Part = Union[str, Slot]
Paragraph = Tuple[Part, ...]


@dataclass(frozen=True)
class Call:
    id: str
    parts: Tuple[Paragraph, ...]
    source: SourceRef

    @property
    def slot_count(self) -> int:
        return sum(1 for line in self.parts for part in line if isinstance(part, Slot))


@dataclass(frozen=True)
class Response:
    id: str
    text: str
    source: SourceRef


@dataclass
class Templates:
    """Every card in a deck."""

    calls: Set[Call] = field(default_factory=set)
    responses: Set[Response] = field(default_factory=set)


@dataclass(frozen=True)
class Details:
    """Human-readable label for a deck, optionally with a link to it."""

    name: str
    url: Optional[str] = None


@dataclass(frozen=True)
class DeckSummary:
    """Derived per resolution, never persisted."""

    details: Details
    calls: int
    responses: int
    tag: Optional[str] = None

    @property
    def name(self) -> str:
        return self.details.name

    @property
    def canonical_url(self) -> Optional[str]:
        return self.details.url

    @property
    def call_count(self) -> int:
        return self.calls

    @property
    def response_count(self) -> int:
        return self.responses


@dataclass
class Resolution:
    summary: DeckSummary
    templates: Templates


@dataclass(frozen=True)
class ClientInfo:
    base_url: str


def new_card_id() -> str:
    """Return a fresh, process-wide unique card id."""
    return uuid.uuid4().hex
