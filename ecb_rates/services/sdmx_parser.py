"""SDMX-ML generic data parser.

Turns the XML body returned by the data service into an
:class:`ExchangeRateRecord`.  A response looks like::

    <message:GenericData ...>
      <message:DataSet ...>
        <generic:Series>
          <generic:SeriesKey>...</generic:SeriesKey>
          <generic:Attributes>
            <generic:Value id="TIME_FORMAT" value="P1M"/>
            <generic:Value id="UNIT" value="USD"/>
          </generic:Attributes>
          <generic:Obs>
            <generic:ObsDimension value="2019-01"/>
            <generic:ObsValue value="1.1416"/>
            <generic:Attributes>
              <generic:Value id="OBS_STATUS" value="A"/>
            </generic:Attributes>
          </generic:Obs>
        </generic:Series>
      </message:DataSet>
    </message:GenericData>

Elements are matched on their local name so the parser does not depend
on the namespace URIs the service happens to use.  Parsing is lenient:
values that are missing or not numeric become ``NaN`` and attributes
without an id or value are skipped, instead of failing the whole response.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from typing import Iterator

from ecb_rates.models.rates import ExchangeRateRecord, Observation, ResultMeta, Series
from ecb_rates.utils.errors import ParseError
from ecb_rates.utils.text import parse_float, to_camel_case


def _local_name(tag: str) -> str:
    # "{http://...}Series" -> "Series"; also tolerates "generic:Series".
    if "}" in tag:
        tag = tag.rsplit("}", 1)[1]
    return tag.rsplit(":", 1)[-1]


def _children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for child in element:
        if _local_name(child.tag) == name:
            yield child


def _first_child(element: ET.Element, name: str) -> ET.Element | None:
    return next(_children(element, name), None)


def _descendants(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for node in element.iter():
        if _local_name(node.tag) == name:
            yield node


def _collect_attributes(block: ET.Element | None) -> dict[str, str]:
    """Read every ``Value`` in an ``Attributes`` block into a camel-case map."""
    attributes: dict[str, str] = {}
    if block is None:
        return attributes
    for node in _children(block, "Value"):
        attr_id = node.get("id")
        if not attr_id:
            continue
        value = node.get("value")
        if not value:
            continue
        attributes[to_camel_case(attr_id)] = value
    return attributes


def _parse_observation(obs: ET.Element) -> Observation:
    dimension = _first_child(obs, "ObsDimension")
    obs_value = _first_child(obs, "ObsValue")
    extra = _collect_attributes(_first_child(obs, "Attributes"))
    # Declared fields win over same-named runtime attributes.
    extra.pop("period", None)
    extra.pop("value", None)
    return Observation(
        period=dimension.get("value", "") if dimension is not None else "",
        value=parse_float(obs_value.get("value") if obs_value is not None else None),
        **extra,
    )


def _parse_series(series: ET.Element) -> Series:
    header = _collect_attributes(_first_child(series, "Attributes"))
    header.pop("items", None)
    items = [_parse_observation(obs) for obs in _children(series, "Obs")]
    return Series(items=items, **header)


def parse_exchange_rates(xml: str | bytes, url: str) -> ExchangeRateRecord:
    """Parse an SDMX generic data document into an :class:`ExchangeRateRecord`.

    Raises
    ------
    ParseError
        If *xml* is not well-formed.
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as exc:
        raise ParseError(
            message=f"Malformed XML in response from {url}: {exc}",
            provider_name="ecb",
        ) from exc

    data = [_parse_series(series) for series in _descendants(root, "Series")]
    return ExchangeRateRecord(data=data, meta=ResultMeta(url=url))


def empty_record(url: str) -> ExchangeRateRecord:
    return ExchangeRateRecord(data=[], meta=ResultMeta(url=url))


def serialize_record(record: ExchangeRateRecord) -> str:
    """Encode *record* as compact JSON.

    ``NaN`` observation values are written as the ``NaN`` token so they
    survive :func:`deserialize_record` unchanged.
    """
    return json.dumps(record.model_dump(), separators=(",", ":"), ensure_ascii=False)


def deserialize_record(text: str) -> ExchangeRateRecord:
    """Decode a string produced by :func:`serialize_record` into a fresh record."""
    return ExchangeRateRecord.model_validate(json.loads(text))
