"""Resolver for decks hosted on CrCast.

Each resolution borrows one pooled client, fetches the deck info and
then its cards, and shapes the raw card text into calls and responses.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from crcast_source import source as provider
from crcast_source.config import CrCastConfig
from crcast_source.decode import decode_payload, require_list, require_mapping
from crcast_source.errors import DeckFormatError, SourceNotFoundError, SourceServiceError
from crcast_source.models import (
    CRCAST,
    Call,
    ClientInfo,
    DeckSummary,
    Details,
    Part,
    Resolution,
    Response,
    Slot,
    SourceRef,
    Templates,
    new_card_id,
)
from crcast_source.pool import ConnectionPool, client_factory

logger = logging.getLogger(__name__)


class Resolver:
    """Resolves a single CrCast deck."""

    def __init__(
        self,
        source: SourceRef,
        config: CrCastConfig,
        pool: ConnectionPool[httpx.AsyncClient],
    ) -> None:
        self.source = source
        self._config = config
        self._pool = pool

    def id(self) -> str:
        return CRCAST

    def deck_id(self) -> str:
        return self.source.deck_code

    def loading_details(self) -> Details:
        return Details(name=f"CrCast {self.source.deck_code}")

    def equals(self, source: SourceRef) -> bool:
        return source.kind == CRCAST and source.deck_code == self.source.deck_code

    async def resolve_tag(self) -> Optional[str]:
        return (await self.resolve_summary()).tag

    async def resolve_summary(self) -> DeckSummary:
        return (await self.resolve()).summary

    async def resolve_templates(self) -> Templates:
        return (await self.resolve()).templates

    async def resolve(self) -> Resolution:
        """Fetch and shape the whole deck. Not memoized."""
        code = self.source.deck_code
        async with self._pool.connection() as client:
            try:
                info = require_mapping(
                    await self._fetch(client, f"cc/decks/{code}"), "deck info"
                )
                cards = require_mapping(
                    await self._fetch(client, f"cc/decks/{code}/cards"), "deck cards"
                )
                raw_calls = require_list(cards, "calls", "deck cards")
                raw_responses = require_list(cards, "responses", "deck cards")
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status == httpx.codes.NOT_FOUND:
                    logger.warning("CrCast: deck %s not found", code)
                    raise SourceNotFoundError(self.source) from exc
                logger.warning("CrCast: deck %s -> HTTP %d", code, status)
                raise SourceServiceError(self.source, f"HTTP {status}") from exc
            except httpx.TransportError as exc:
                logger.warning("CrCast: deck %s -> %s", code, exc.__class__.__name__)
                raise SourceServiceError(self.source, str(exc) or exc.__class__.__name__) from exc
            except DeckFormatError as exc:
                logger.warning("CrCast: deck %s -> bad payload: %s", code, exc)
                raise SourceServiceError(self.source, str(exc)) from exc

        summary = DeckSummary(
            details=Details(
                name=_deck_name(info),
                url=f"{self._config.base_url}decks/{code}",
            ),
            calls=len(raw_calls),
            responses=len(raw_responses),
        )
        try:
            templates = Templates(
                calls={call_from_raw(raw, self.source) for raw in raw_calls},
                responses={response_from_raw(raw, self.source) for raw in raw_responses},
            )
        except DeckFormatError as exc:
            logger.warning("CrCast: deck %s -> bad card: %s", code, exc)
            raise SourceServiceError(self.source, str(exc)) from exc

        logger.info(
            "CrCast: deck %s -> %d calls, %d responses",
            code,
            summary.calls,
            summary.responses,
        )
        return Resolution(summary=summary, templates=templates)

    async def _fetch(self, client: httpx.AsyncClient, path: str) -> Any:
        logger.debug("CrCast: GET %s", path)
        resp = await client.get(path)
        resp.raise_for_status()
        try:
            body = resp.json()
        except ValueError:
            # Not strict JSON; let the lenient decoder have a go.
            return decode_payload(resp.text, path)
        return decode_payload(body, path)


class MetaResolver:
    """Owns the CrCast client configuration and connection pool."""

    # CrCast deck content is immutable per deck code.
    cache = True

    def __init__(self, config: CrCastConfig) -> None:
        self._config = config
        self._pool: ConnectionPool[httpx.AsyncClient] = ConnectionPool(
            client_factory(config), max_size=config.simultaneous_connections
        )

    @property
    def pool(self) -> ConnectionPool[httpx.AsyncClient]:
        return self._pool

    def client_info(self) -> ClientInfo:
        return ClientInfo(base_url=self._config.base_url)

    def limited_resolver(self, source: SourceRef) -> provider.Resolver:
        return self.resolver(source)

    def resolver(self, source: SourceRef) -> provider.Resolver:
        return Resolver(source, self._config, self._pool)

    async def close(self) -> None:
        await self._pool.close()

    async def __aenter__(self) -> MetaResolver:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


async def load(config: CrCastConfig) -> MetaResolver:
    return MetaResolver(config)


def call_from_raw(raw: Dict[str, Any], source: SourceRef) -> Call:
    """Build a call, with a slot between each pair of text fragments.

    CrCast has no line breaks, so there is always exactly one paragraph.
    """
    parts: List[Part] = []
    for fragment in _text_of(raw):
        if parts:
            parts.extend((" ", Slot()))
        parts.append(fragment.strip())
    return Call(id=new_card_id(), parts=(tuple(parts),), source=source)


def response_from_raw(raw: Dict[str, Any], source: SourceRef) -> Response:
    text = _text_of(raw)
    if not text:
        raise DeckFormatError("response has no text")
    return Response(id=new_card_id(), text=text[0], source=source)


def _deck_name(info: Dict[str, Any]) -> str:
    name = info.get("name")
    return "" if name is None else str(name)


def _text_of(raw: Any) -> List[str]:
    if not isinstance(raw, dict) or not isinstance(raw.get("text"), list):
        raise DeckFormatError("card must be an object with a 'text' list")
    text = raw["text"]
    if not all(isinstance(t, str) for t in text):
        raise DeckFormatError("card text must be a list of strings")
    return text
