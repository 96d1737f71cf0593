"""Protocols for deck source providers.

A ``MetaResolver`` is the long-lived, per-provider object; it hands out
a ``Resolver`` bound to one deck on demand.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from crcast_source.models import (
    ClientInfo,
    DeckSummary,
    Details,
    Resolution,
    SourceRef,
    Templates,
)


@runtime_checkable
class Resolver(Protocol):
    """Resolves one referenced deck into a summary and cards."""

    source: SourceRef

    def id(self) -> str:
        """Constant identifier of the provider, used for dispatch."""
        ...

    def deck_id(self) -> str:
        """Provider-local identity of the deck."""
        ...

    def loading_details(self) -> Details:
        """Label usable before resolution completes."""
        ...

    def equals(self, source: SourceRef) -> bool:
        ...

    async def resolve(self) -> Resolution:
        ...

    async def resolve_summary(self) -> DeckSummary:
        ...

    async def resolve_templates(self) -> Templates:
        ...

    async def resolve_tag(self) -> Optional[str]:
        ...


@runtime_checkable
class MetaResolver(Protocol):
    """Per-provider factory for resolvers.

    ``cache`` tells callers whether resolutions for a given deck may be
    memoized across calls.
    """

    cache: bool

    def client_info(self) -> ClientInfo:
        ...

    def resolver(self, source: SourceRef) -> Resolver:
        ...

    def limited_resolver(self, source: SourceRef) -> Resolver:
        ...
