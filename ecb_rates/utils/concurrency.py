"""Single-flight memoization of an async producer.

:class:`SingleFlightMemoizer` puts a :class:`BoundedCache` in front of an
async ``producer(key)`` and coalesces concurrent calls for the same key:

1. **hit** -- the cached value is returned without suspending.
2. **wait** -- a producer for the key is already running; the caller
   awaits that same task and receives its value or its exception.
3. **miss** -- the caller starts the producer as a task and registers it
   as in flight until it settles.

Failures are never cached.  The in-flight record is dropped as soon as the
producer settles, so the next call after a failure starts a fresh attempt.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Awaitable, Callable

import structlog

from ecb_rates.providers.cache.bounded_cache import BoundedCache
from ecb_rates.utils.logging import get_logger

Producer = Callable[[str], Awaitable[str]]

_logger: structlog.BoundLogger = get_logger(__name__)


class SingleFlightMemoizer:
    """Cache-backed wrapper running at most one producer per key at a time.

    Parameters
    ----------
    producer:
        Async callable mapping a key to its string value.
    cache:
        Store for successful results.  Shared with whoever needs to
        inspect or flush it (e.g. the periodic invalidator).
    """

    def __init__(self, producer: Producer, cache: BoundedCache) -> None:
        self._producer = producer
        self._cache = cache
        self._in_flight: dict[str, asyncio.Task[str]] = {}

    @property
    def cache(self) -> BoundedCache:
        return self._cache

    @property
    def in_flight(self) -> int:
        """Number of producers currently outstanding."""
        return len(self._in_flight)

    def is_in_flight(self, key: str) -> bool:
        return key in self._in_flight

    async def get(self, key: str) -> str:
        """Return the value for *key*, producing it at most once concurrently."""
        if self._cache.has(key):
            _logger.debug("memo_hit", key=key)
            return self._cache.get(key)  # type: ignore[return-value]

        task = self._in_flight.get(key)
        if task is None:
            _logger.debug("memo_miss", key=key)
            task = asyncio.ensure_future(self._run(key))
            task.add_done_callback(functools.partial(self._settled, key))
            self._in_flight[key] = task
        else:
            _logger.debug("memo_wait", key=key)

        # Shielded so a cancelled waiter leaves the producer running for
        # everyone else; cancelling the task itself still reaches all waiters.
        return await asyncio.shield(task)

    async def _run(self, key: str) -> str:
        try:
            value = await self._producer(key)
        except BaseException:
            self._in_flight.pop(key, None)
            raise
        self._in_flight.pop(key, None)
        self._cache.set(key, value)
        return value

    def _settled(self, key: str, task: asyncio.Task[str]) -> None:
        # Covers a task cancelled before its first step ran.
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if task.cancelled():
            _logger.debug("memo_cancelled", key=key)
            return
        # Mark the outcome as retrieved even if every waiter went away.
        exc = task.exception()
        if exc is not None:
            _logger.debug("memo_failed", key=key, error=repr(exc))
