"""Integration tests for FetchAndParsePipeline over a mocked HTTP transport."""

from __future__ import annotations

import asyncio
import json
from typing import Callable

import httpx
import pytest

from ecb_rates.pipeline.fetcher import FetchAndParsePipeline
from ecb_rates.utils.errors import ParseError, RemoteError, TransportError

MONTHLY_USD_URL = (
    "https://sdw-wsrest.ecb.europa.eu/service/data/EXR/"
    "M.USD.EUR.SP00.A?startPeriod=2019-01-01&endPeriod=2019-02-28"
)


def _xml_response(body: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=body.encode("utf-8"),
        headers={"Content-Type": "application/xml"},
    )


class TestFetchAndParsePipeline:
    @pytest.mark.asyncio
    async def test_empty_body_gives_empty_record(self, make_settings, make_client) -> None:
        client, _ = make_client(lambda request: httpx.Response(200, text="  \n "))

        async with FetchAndParsePipeline(make_settings(), http_client=client) as pipeline:
            result = await pipeline.fetch(MONTHLY_USD_URL)

        assert result == '{"data":[],"meta":{"url":"%s"}}' % MONTHLY_USD_URL

    @pytest.mark.asyncio
    async def test_one_series_two_observations(
        self, make_settings, make_client, one_series_xml
    ) -> None:
        client, _ = make_client(lambda request: _xml_response(one_series_xml))

        async with FetchAndParsePipeline(make_settings(), http_client=client) as pipeline:
            payload = json.loads(await pipeline.fetch(MONTHLY_USD_URL))

        assert len(payload["data"]) == 1
        items = payload["data"][0]["items"]
        assert len(items) == 2
        for item in items:
            assert isinstance(item["period"], str)
            assert isinstance(item["value"], float)
        assert payload["meta"] == {"url": MONTHLY_USD_URL}

    @pytest.mark.asyncio
    async def test_cached_result_is_identical_without_second_request(
        self, make_settings, make_client, one_series_xml
    ) -> None:
        client, transport = make_client(lambda request: _xml_response(one_series_xml))

        async with FetchAndParsePipeline(make_settings(), http_client=client) as pipeline:
            first = await pipeline.fetch(MONTHLY_USD_URL)
            second = await pipeline.fetch(MONTHLY_USD_URL)

        assert first == second
        assert transport.call_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_fetches_share_one_request(
        self, make_settings, make_client, one_series_xml
    ) -> None:
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            await release.wait()
            return _xml_response(one_series_xml)

        client, transport = make_client(handler)

        async with FetchAndParsePipeline(make_settings(), http_client=client) as pipeline:
            waiters = [asyncio.ensure_future(pipeline.fetch(MONTHLY_USD_URL)) for _ in range(8)]
            await asyncio.sleep(0.01)
            release.set()
            results = await asyncio.gather(*waiters)

        assert len(set(results)) == 1
        assert transport.call_count == 1

    @pytest.mark.asyncio
    async def test_non_success_status_raises_remote_error(self, make_settings, make_client) -> None:
        client, transport = make_client(
            lambda request: httpx.Response(404, text="No results found.")
        )

        async with FetchAndParsePipeline(make_settings(), http_client=client) as pipeline:
            with pytest.raises(RemoteError) as exc_info:
                await pipeline.fetch(MONTHLY_USD_URL)

            assert str(exc_info.value) == "No results found."
            assert exc_info.value.body == "No results found."
            assert exc_info.value.status_code == 404
            assert pipeline.cache.has(MONTHLY_USD_URL) is False

            with pytest.raises(RemoteError):
                await pipeline.fetch(MONTHLY_USD_URL)

        assert transport.call_count == 2

    @pytest.mark.asyncio
    async def test_failure_then_success_retries(
        self, make_settings, make_client, one_series_xml
    ) -> None:
        responses = [httpx.Response(503, text="busy"), _xml_response(one_series_xml)]
        client, transport = make_client(lambda request: responses.pop(0))

        async with FetchAndParsePipeline(make_settings(), http_client=client) as pipeline:
            with pytest.raises(RemoteError):
                await pipeline.fetch(MONTHLY_USD_URL)
            payload = json.loads(await pipeline.fetch(MONTHLY_USD_URL))

        assert len(payload["data"]) == 1
        assert transport.call_count == 2

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(
        self, make_settings, make_client, one_series_xml
    ) -> None:
        async def slow(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return _xml_response(one_series_xml)

        client, _ = make_client(slow)

        async with FetchAndParsePipeline(
            make_settings(request_timeout_ms=50), http_client=client
        ) as pipeline:
            with pytest.raises(TransportError):
                await pipeline.fetch(MONTHLY_USD_URL)
            assert pipeline.memoizer.in_flight == 0
            assert pipeline.cache.size == 0

    @pytest.mark.asyncio
    async def test_oversized_response_raises_transport_error(
        self, make_settings, make_client, one_series_xml
    ) -> None:
        client, _ = make_client(lambda request: _xml_response(one_series_xml))

        async with FetchAndParsePipeline(
            make_settings(max_response_bytes=100), http_client=client
        ) as pipeline:
            with pytest.raises(TransportError):
                await pipeline.fetch(MONTHLY_USD_URL)

    @pytest.mark.asyncio
    async def test_connection_error_raises_transport_error(
        self, make_settings, make_client
    ) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = make_client(refuse)

        async with FetchAndParsePipeline(make_settings(), http_client=client) as pipeline:
            with pytest.raises(TransportError):
                await pipeline.fetch(MONTHLY_USD_URL)

    @pytest.mark.asyncio
    async def test_malformed_xml_raises_parse_error(self, make_settings, make_client) -> None:
        client, _ = make_client(lambda request: httpx.Response(200, text="<GenericData>"))

        async with FetchAndParsePipeline(make_settings(), http_client=client) as pipeline:
            with pytest.raises(ParseError):
                await pipeline.fetch(MONTHLY_USD_URL)

    @pytest.mark.asyncio
    async def test_cache_entry_bound_evicts_everything(self, make_settings, make_client) -> None:
        client, transport = make_client(lambda request: httpx.Response(200, text=""))
        urls = [f"{MONTHLY_USD_URL}&n={i}" for i in range(3)]

        async with FetchAndParsePipeline(
            make_settings(max_cache_entries=2), http_client=client
        ) as pipeline:
            for url in urls:
                await pipeline.fetch(url)
            assert list(pipeline.cache.keys()) == [urls[2]]

            await pipeline.fetch(urls[0])

        assert transport.call_count == 4

    @pytest.mark.asyncio
    async def test_invalidator_starts_and_flushes(
        self, make_settings, make_client, one_series_xml
    ) -> None:
        client, transport = make_client(lambda request: _xml_response(one_series_xml))

        pipeline = FetchAndParsePipeline(
            make_settings(invalidation_interval_ms=20), http_client=client
        )
        try:
            assert pipeline.invalidator.running is True
            await pipeline.fetch(MONTHLY_USD_URL)
            await asyncio.sleep(0.08)
            assert pipeline.cache.size == 0

            await pipeline.fetch(MONTHLY_USD_URL)
            assert transport.call_count == 2
        finally:
            await pipeline.aclose()

    @pytest.mark.asyncio
    async def test_destroy_is_idempotent(
        self, make_settings, make_client, one_series_xml
    ) -> None:
        client, _ = make_client(lambda request: _xml_response(one_series_xml))
        pipeline = FetchAndParsePipeline(make_settings(), http_client=client)

        pipeline.destroy()
        pipeline.destroy()

        assert pipeline.invalidator.running is False
        await client.aclose()

    def test_constructed_outside_loop_defers_invalidator(
        self, make_settings, make_client: Callable
    ) -> None:
        client, _ = make_client(lambda request: httpx.Response(200, text=""))
        pipeline = FetchAndParsePipeline(make_settings(), http_client=client)
        assert pipeline.invalidator.running is False

        async def _use() -> None:
            await pipeline.fetch(MONTHLY_USD_URL)
            assert pipeline.invalidator.running is True
            await pipeline.aclose()
            await client.aclose()

        asyncio.run(_use())
        assert pipeline.invalidator.running is False

    def test_reused_under_a_new_loop_keeps_flushing(
        self, make_settings, make_client: Callable
    ) -> None:
        client, transport = make_client(lambda request: httpx.Response(200, text=""))
        pipeline = FetchAndParsePipeline(
            make_settings(invalidation_interval_ms=20), http_client=client
        )

        async def _prime() -> None:
            await pipeline.fetch(MONTHLY_USD_URL)

        asyncio.run(_prime())
        assert pipeline.invalidator.running is False
        flushed_before = pipeline.invalidator.flush_count

        async def _reuse() -> None:
            pipeline.cache.set(MONTHLY_USD_URL, "stale")
            await pipeline.fetch(MONTHLY_USD_URL)
            assert pipeline.invalidator.running is True
            await asyncio.sleep(0.08)
            assert pipeline.cache.size == 0
            await pipeline.aclose()
            await client.aclose()

        asyncio.run(_reuse())
        assert pipeline.invalidator.flush_count > flushed_before
        assert transport.call_count == 1
