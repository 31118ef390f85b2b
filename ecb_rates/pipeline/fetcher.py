"""Fetch-and-parse pipeline with a bounded, single-flight cache in front.

:class:`FetchAndParsePipeline` owns the three moving parts of a request:

* a :class:`BoundedCache` holding serialized results,
* a :class:`SingleFlightMemoizer` so concurrent identical URLs share one
  download,
* a :class:`PeriodicInvalidator` flushing the cache on a fixed interval.

The producer (:meth:`FetchAndParsePipeline.produce`) downloads the URL with
httpx, enforces an overall timeout and a body-size cap, and turns the SDMX
XML into compact JSON.  Only strings go into the cache, so every caller
deserializes its own copy.
"""

from __future__ import annotations

import asyncio
import time
from types import TracebackType

import httpx
import structlog

from ecb_rates.config.settings import Settings
from ecb_rates.pipeline.invalidator import PeriodicInvalidator
from ecb_rates.providers.cache.bounded_cache import BoundedCache
from ecb_rates.services.sdmx_parser import (
    empty_record,
    parse_exchange_rates,
    serialize_record,
)
from ecb_rates.utils.concurrency import SingleFlightMemoizer
from ecb_rates.utils.errors import RemoteError, TransportError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER_NAME = "ecb"
_DEFAULT_HEADERS = {
    "User-Agent": "ecb-rates/0.1",
    "Accept": "application/vnd.sdmx.genericdata+xml;version=2.1, application/xml;q=0.9",
}


class FetchAndParsePipeline:
    """Memoized ``url -> serialized ExchangeRateRecord`` producer.

    Parameters
    ----------
    settings:
        Timeout, size cap, cache bounds and invalidation interval.
    http_client:
        Optional shared client.  When omitted the pipeline creates one and
        closes it in :meth:`aclose`.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._timeout = self._settings.request_timeout_seconds
        self._max_response_bytes = self._settings.max_response_bytes

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            headers=_DEFAULT_HEADERS,
            follow_redirects=True,
        )

        self._cache = BoundedCache(
            max_entries=self._settings.max_cache_entries,
            max_bytes=self._settings.max_cache_bytes,
        )
        self._memoizer = SingleFlightMemoizer(self.produce, self._cache)
        self._invalidator = PeriodicInvalidator(
            self._cache, self._settings.invalidation_interval_seconds
        )
        self._ensure_invalidator()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def cache(self) -> BoundedCache:
        return self._cache

    @property
    def memoizer(self) -> SingleFlightMemoizer:
        return self._memoizer

    @property
    def invalidator(self) -> PeriodicInvalidator:
        return self._invalidator

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch(self, url: str) -> str:
        """Return the serialized record for *url*, downloading at most once."""
        self._ensure_invalidator()
        return await self._memoizer.get(url)

    async def produce(self, url: str) -> str:
        """Download *url* and return its serialized record (uncached)."""
        logger.debug("fetching", url=url)
        t0 = time.perf_counter()
        try:
            body = await asyncio.wait_for(self._download(url), timeout=self._timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise TransportError(
                message=f"Timed out after {self._timeout:g}s fetching {url}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                message=f"HTTP error fetching {url}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        logger.debug(
            "download_finished",
            url=url,
            bytes=len(body),
            elapsed_ms=int((time.perf_counter() - t0) * 1000),
        )

        if not body.strip():
            logger.debug("empty_result_set", url=url)
            return serialize_record(empty_record(url))

        logger.debug("processing_result_set", url=url)
        record = parse_exchange_rates(body, url)
        logger.debug("done_processing_result_set", url=url, series=len(record.data))
        return serialize_record(record)

    def destroy(self) -> None:
        """Stop the periodic invalidator.  Idempotent."""
        self._invalidator.stop()

    async def aclose(self) -> None:
        """Stop the invalidator and close the HTTP client if we created it."""
        self.destroy()
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> FetchAndParsePipeline:
        self._ensure_invalidator()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_invalidator(self) -> None:
        # Constructed outside a running loop, or reused under a new one:
        # start() schedules on whichever loop is running now.
        if self._invalidator.stopped:
            return
        try:
            self._invalidator.start()
        except RuntimeError:
            logger.debug("invalidator_deferred")

    async def _download(self, url: str) -> bytes:
        """GET *url* and return its body, enforcing the size cap."""
        async with self._client.stream("GET", url) as response:
            chunks: list[bytes] = []
            received = 0
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > self._max_response_bytes:
                    raise TransportError(
                        message=(
                            f"Response from {url} exceeds {self._max_response_bytes} bytes"
                        ),
                        provider_name=_PROVIDER_NAME,
                    )
                chunks.append(chunk)
            body = b"".join(chunks)

            if not response.is_success:
                text = body.decode(response.encoding or "utf-8", errors="replace")
                logger.warning(
                    "remote_error",
                    url=url,
                    status_code=response.status_code,
                )
                raise RemoteError(body=text, status_code=response.status_code)

        return body
