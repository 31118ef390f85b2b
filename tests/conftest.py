"""Shared pytest fixtures for the ecb-rates test suite."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from ecb_rates.config.settings import Settings

ENDPOINT = "https://sdw-wsrest.ecb.europa.eu/service/data/EXR/"

# ---------------------------------------------------------------------------
# Sample SDMX-ML documents
# ---------------------------------------------------------------------------

ONE_SERIES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<message:GenericData xmlns:message="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/message"
    xmlns:common="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/common"
    xmlns:generic="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/data/generic">
  <message:Header>
    <message:ID>a1b2c3</message:ID>
    <message:Test>false</message:Test>
  </message:Header>
  <message:DataSet action="Replace" structureRef="ECB_EXR1">
    <generic:Series>
      <generic:SeriesKey>
        <generic:Value id="FREQ" value="M"/>
        <generic:Value id="CURRENCY" value="USD"/>
        <generic:Value id="CURRENCY_DENOM" value="EUR"/>
        <generic:Value id="EXR_TYPE" value="SP00"/>
        <generic:Value id="EXR_SUFFIX" value="A"/>
      </generic:SeriesKey>
      <generic:Attributes>
        <generic:Value id="TIME_FORMAT" value="P1M"/>
        <generic:Value id="SOURCE_AGENCY" value="4F0"/>
        <generic:Value id="UNIT_MULT" value="0"/>
        <generic:Value id="TITLE" value="US dollar/Euro"/>
        <generic:Value id="TITLE_COMPL" value="ECB reference exchange rate, US dollar/Euro, 2:15 pm (C.E.T.)"/>
        <generic:Value id="COLLECTION" value="A"/>
        <generic:Value id="UNIT" value="USD"/>
        <generic:Value id="DECIMALS" value="4"/>
      </generic:Attributes>
      <generic:Obs>
        <generic:ObsDimension value="2019-01"/>
        <generic:ObsValue value="1.141563636363636"/>
        <generic:Attributes>
          <generic:Value id="OBS_STATUS" value="A"/>
          <generic:Value id="OBS_CONF" value="F"/>
        </generic:Attributes>
      </generic:Obs>
      <generic:Obs>
        <generic:ObsDimension value="2019-02"/>
        <generic:ObsValue value="1.1351"/>
        <generic:Attributes>
          <generic:Value id="OBS_STATUS" value="A"/>
        </generic:Attributes>
      </generic:Obs>
    </generic:Series>
  </message:DataSet>
</message:GenericData>
"""

TWO_SERIES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<message:GenericData xmlns:message="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/message"
    xmlns:generic="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/data/generic">
  <message:DataSet>
    <generic:Series>
      <generic:Attributes>
        <generic:Value id="UNIT" value="USD"/>
      </generic:Attributes>
      <generic:Obs>
        <generic:ObsDimension value="2019-01"/>
        <generic:ObsValue value="1.14"/>
      </generic:Obs>
    </generic:Series>
    <generic:Series>
      <generic:Attributes>
        <generic:Value id="UNIT" value="JPY"/>
      </generic:Attributes>
      <generic:Obs>
        <generic:ObsDimension value="2019-01"/>
        <generic:ObsValue value="NaN"/>
      </generic:Obs>
    </generic:Series>
  </message:DataSet>
</message:GenericData>
"""


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def one_series_xml() -> str:
    return ONE_SERIES_XML


@pytest.fixture
def two_series_xml() -> str:
    return TWO_SERIES_XML


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build Settings with test-friendly defaults; keyword args override."""

    def _make(**overrides: Any) -> Settings:
        defaults: dict[str, Any] = {
            "endpoint": ENDPOINT,
            "request_timeout_ms": 2_000,
            "max_response_bytes": 1024 * 1024,
            "max_cache_entries": 10,
            "max_cache_bytes": 1024 * 1024,
            "invalidation_interval_ms": 60 * 60 * 1000,
        }
        defaults.update(overrides)
        return Settings(**defaults)

    return _make


class RecordingTransport(httpx.MockTransport):
    """MockTransport that records every request it serves."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.requests: list[httpx.Request] = []

        def _recording(request: httpx.Request) -> Any:
            self.requests.append(request)
            return handler(request)

        super().__init__(_recording)

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def make_client() -> Callable[..., tuple[httpx.AsyncClient, RecordingTransport]]:
    """Return a factory producing an AsyncClient backed by a RecordingTransport."""

    def _make(handler: Callable[[httpx.Request], Any]) -> tuple[httpx.AsyncClient, RecordingTransport]:
        transport = RecordingTransport(handler)
        return httpx.AsyncClient(transport=transport), transport

    return _make
