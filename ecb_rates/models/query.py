"""Exchange-rate query model.

An :class:`ExchangeRateQuery` names one slice of the ``EXR`` dataflow.  The
dataflow key has five dot-separated dimensions::

    {interval}.{to_currency}.{from_currency}.{type}.{variation_code}

e.g. ``M.USD.EUR.SP00.A`` = monthly US dollar against the euro, spot rate,
average of observations through the period.  An empty currency is a
wildcard (``M..EUR.SP00.A`` returns every currency).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

Currency = Literal[
    "EUR", "USD", "JPY", "BGN", "CZK", "DKK", "GBP", "HUF", "PLN", "RON", "SEK",
    "CHF", "ISK", "NOK", "HRK", "RUB", "TRY", "AUD", "BRL", "CAD", "CNY", "HKD",
    "IDR", "ILS", "INR", "KRW", "MXN", "MYR", "NZD", "PHP", "SGD", "THB", "ZAR",
]

Interval = Literal["M", "D"]


def format_period(value: date | datetime) -> str:
    """Format *value* as ``YYYY-MM-DD``; aware datetimes are taken in UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        value = value.date()
    return value.isoformat()


class ExchangeRateQuery(BaseModel):
    """Parameters for one exchange-rate request."""

    model_config = ConfigDict(frozen=True)

    start_period: date | datetime
    end_period: date | datetime
    interval: Interval = "M"
    from_currency: Currency | Literal[""] = "EUR"
    to_currency: Currency | Literal[""] = ""
    type: str = "SP00"
    variation_code: str = "A"

    @model_validator(mode="after")
    def _check_period_order(self) -> ExchangeRateQuery:
        if format_period(self.start_period) > format_period(self.end_period):
            raise ValueError("start_period must not be after end_period")
        return self

    def series_key(self) -> str:
        return ".".join(
            [
                self.interval,
                self.to_currency,
                self.from_currency,
                self.type,
                self.variation_code,
            ]
        )

    def query_params(self) -> dict[str, str]:
        return {
            "startPeriod": format_period(self.start_period),
            "endPeriod": format_period(self.end_period),
        }
