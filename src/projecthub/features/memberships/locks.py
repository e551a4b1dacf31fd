"""Per-key asyncio locks used to serialize membership mutations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager
from datetime import timedelta

from projecthub.common.logging import log_context
from projecthub.core.auth.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class KeyedLocks:
    """Hand out one ``asyncio.Lock`` per key; idle locks are dropped.

    ``timeout`` bounds how long :meth:`hold` waits. A wait that runs out
    raises :class:`StoreUnavailableError` rather than blocking forever.
    """

    def __init__(self, *, timeout: timedelta | float | None = None) -> None:
        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        self._timeout = timeout
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self._timeout)
            except TimeoutError as exc:
                logger.warning(
                    "membership.lock.timeout",
                    extra=log_context(key=repr(key), timeout=self._timeout),
                )
                raise StoreUnavailableError(
                    f"Timed out waiting for membership lock {key!r}"
                ) from exc
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]


__all__ = ["KeyedLocks"]
