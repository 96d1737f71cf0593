"""Bounded pool of reusable HTTP clients."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Generic, List, TypeVar

import httpx

from crcast_source import __version__
from crcast_source.config import CrCastConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = f"CrCastSource/{__version__}"


class ConnectionPool(Generic[T]):
    """Lends at most ``max_size`` connections at a time.

    Connections are created lazily by ``factory`` and reused once
    released. Callers past the bound wait in ``acquire`` until a
    connection comes back. A connection is never lent to two borrowers
    at once.
    """

    def __init__(self, factory: Callable[[], T], max_size: int) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self._factory = factory
        self._max_size = max_size
        self._semaphore = asyncio.Semaphore(max_size)
        self._idle: List[T] = []
        self._borrowed: List[T] = []
        self._created = 0
        self._closed = False

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def size(self) -> int:
        """Number of connections created so far."""
        return self._created

    @property
    def borrowed(self) -> int:
        return len(self._borrowed)

    @property
    def idle(self) -> int:
        return len(self._idle)

    async def acquire(self) -> T:
        if self._closed:
            raise RuntimeError("Connection pool is closed")
        await self._semaphore.acquire()
        if self._closed:
            self._semaphore.release()
            raise RuntimeError("Connection pool is closed")
        try:
            if self._idle:
                conn = self._idle.pop()
            else:
                conn = self._factory()
                self._created += 1
                logger.debug("Created connection %d/%d", self._created, self._max_size)
        except BaseException:
            self._semaphore.release()
            raise
        self._borrowed.append(conn)
        return conn

    async def release(self, conn: T) -> None:
        """Return a borrowed connection. After ``close`` it is closed instead."""
        for i, held in enumerate(self._borrowed):
            if held is conn:
                del self._borrowed[i]
                break
        else:
            raise ValueError("Connection is not currently borrowed from this pool")
        self._semaphore.release()
        if self._closed:
            await _close_connection(conn)
        else:
            self._idle.append(conn)

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[T]:
        """Borrow a connection for the duration of the block."""
        conn = await self.acquire()
        try:
            yield conn
        finally:
            await self.release(conn)

    async def close(self) -> None:
        """Close idle connections and refuse further borrowing.

        Connections still borrowed are closed as they are released.
        """
        self._closed = True
        idle, self._idle = self._idle, []
        for conn in idle:
            await _close_connection(conn)
        if self._borrowed:
            logger.warning(
                "Pool closed with %d connection(s) still borrowed, closing them on release",
                len(self._borrowed),
            )


async def _close_connection(conn: Any) -> None:
    aclose = getattr(conn, "aclose", None)
    if aclose is not None:
        await aclose()


def client_factory(config: CrCastConfig) -> Callable[[], httpx.AsyncClient]:
    """Return a factory for clients bound to the configured CrCast API."""

    def create() -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_ms / 1000.0),
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        )

    return create
