"""European Central Bank exchange-rate client.

Builds the data-service URL for an :class:`ExchangeRateQuery`, fetches it
through the memoized :class:`FetchAndParsePipeline` and returns a freshly
deserialized :class:`ExchangeRateRecord`.

Service documentation: https://sdw-wsrest.ecb.europa.eu/help/
"""

from __future__ import annotations

from types import TracebackType
from urllib.parse import urlencode, urljoin

import httpx

from ecb_rates.config.settings import Settings
from ecb_rates.models.query import ExchangeRateQuery
from ecb_rates.models.rates import ExchangeRateRecord
from ecb_rates.pipeline.fetcher import FetchAndParsePipeline
from ecb_rates.services.sdmx_parser import deserialize_record
from ecb_rates.utils.logging import get_logger


class EuropeanCentralBankExchangeRates:
    """High-level client for the ``EXR`` dataflow.

    Usage::

        async with EuropeanCentralBankExchangeRates() as ecb:
            record = await ecb.exchange_rate(
                ExchangeRateQuery(
                    start_period=date(2019, 1, 1),
                    end_period=date(2019, 12, 31),
                    to_currency="USD",
                )
            )
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._endpoint = self._settings.endpoint
        self._pipeline = FetchAndParsePipeline(self._settings, http_client=http_client)
        self._logger = get_logger(__name__)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def pipeline(self) -> FetchAndParsePipeline:
        return self._pipeline

    def build_url(self, query: ExchangeRateQuery) -> str:
        """Return the fully-qualified request URL for *query*."""
        qs = urlencode(query.query_params())
        return urljoin(self._endpoint, f"{query.series_key()}?{qs}")

    async def exchange_rate(self, query: ExchangeRateQuery) -> ExchangeRateRecord:
        """Fetch (or serve from cache) the rates described by *query*."""
        url = self.build_url(query)
        self._logger.info("exchange_rate_requested", url=url)
        text = await self._pipeline.fetch(url)
        return deserialize_record(text)

    async def fetch(self, url: str) -> str:
        """Serialized record for an already-built *url*."""
        return await self._pipeline.fetch(url)

    def destroy(self) -> None:
        self._pipeline.destroy()

    async def aclose(self) -> None:
        await self._pipeline.aclose()

    async def __aenter__(self) -> EuropeanCentralBankExchangeRates:
        await self._pipeline.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
