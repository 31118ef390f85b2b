"""Exchange-rate result models.

Pydantic v2 models for the record produced from one data-service response.
All models are frozen.  ``Series`` and ``Observation`` accept extra string
fields: the service attaches attributes whose ids are only known at
runtime (``unit``, ``decimals``, ``obsStatus`` ...), and they are kept as
flat keys ahead of the declared fields when serialised.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
)


def _attributes_first(dumped: dict[str, Any], declared: tuple[str, ...]) -> dict[str, Any]:
    ordered = {key: value for key, value in dumped.items() if key not in declared}
    ordered.update((key, dumped[key]) for key in declared if key in dumped)
    return ordered


class Observation(BaseModel):
    """One time-stamped data point inside a series.

    ``value`` is ``NaN`` when the service sent no usable number.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    period: str
    value: float

    @model_serializer(mode="wrap")
    def serialize_model(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return _attributes_first(handler(self), ("period", "value"))

    @property
    def attributes(self) -> dict[str, str]:
        """Observation-level attributes discovered in the response."""
        return dict(self.model_extra or {})


class Series(BaseModel):
    """One time-series block: header attributes plus its observations."""

    model_config = ConfigDict(frozen=True, extra="allow")

    items: list[Observation] = Field(default_factory=list)

    @model_serializer(mode="wrap")
    def serialize_model(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return _attributes_first(handler(self), ("items",))

    @property
    def attributes(self) -> dict[str, str]:
        """Header attributes (``timeFormat``, ``unit``, ``title`` ...)."""
        return dict(self.model_extra or {})


class ResultMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str


class ExchangeRateRecord(BaseModel):
    """Structured result of one request: every series plus request metadata."""

    model_config = ConfigDict(frozen=True)

    data: list[Series] = Field(default_factory=list)
    meta: ResultMeta
