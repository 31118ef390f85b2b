"""Recurring full flush of a :class:`BoundedCache`.

The invalidator bounds staleness independently of traffic: every
``interval_seconds`` it clears the whole cache, regardless of what is in
flight.  A producer that settles just after a flush may repopulate one
entry immediately, which is acceptable.

Scheduling uses ``loop.call_later`` so the flush runs as a plain callback
on the event loop thread -- it never awaits and never blocks.
"""

from __future__ import annotations

import asyncio

from ecb_rates.providers.cache.bounded_cache import BoundedCache
from ecb_rates.utils.errors import ConfigurationError
from ecb_rates.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0 * 60.0


class PeriodicInvalidator:
    """Clear *cache* every *interval_seconds* until :meth:`stop` is called."""

    def __init__(
        self,
        cache: BoundedCache,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        if interval_seconds <= 0:
            raise ConfigurationError(
                f"invalidation interval must be positive, got {interval_seconds}"
            )
        self._cache = cache
        self._interval = interval_seconds
        self._loop: asyncio.AbstractEventLoop | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._stopped = False
        self._flush_count = 0

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        # A handle left on a loop that has since closed never fires.
        return (
            self._handle is not None
            and self._loop is not None
            and not self._loop.is_closed()
        )

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def flush_count(self) -> int:
        return self._flush_count

    def start(self) -> None:
        """Schedule the first flush on the running event loop.

        A no-op while already scheduled on the current loop or after
        :meth:`stop`.  A timer left on a different loop is dropped and the
        flush is rescheduled here.  Raises ``RuntimeError`` when called
        outside a running loop.
        """
        if self._stopped:
            return
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            if self._loop is loop:
                return
            self._handle.cancel()
            logger.debug("invalidator_loop_changed")
        self._loop = loop
        self._schedule()
        logger.debug("invalidator_started", interval_seconds=self._interval)

    def stop(self) -> None:
        """Cancel the timer.  Safe to call any number of times."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logger.debug("invalidator_stopped", flush_count=self._flush_count)
        self._stopped = True

    def _schedule(self) -> None:
        assert self._loop is not None
        self._handle = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        dropped = self._cache.size
        self._cache.clear()
        self._flush_count += 1
        logger.info("cache_invalidated", dropped_entries=dropped, flush_count=self._flush_count)
        if not self._stopped:
            self._schedule()
