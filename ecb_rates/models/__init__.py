"""Pydantic models for queries and exchange-rate records."""

from ecb_rates.models.query import Currency, ExchangeRateQuery, Interval
from ecb_rates.models.rates import ExchangeRateRecord, Observation, ResultMeta, Series

__all__ = [
    "Currency",
    "ExchangeRateQuery",
    "ExchangeRateRecord",
    "Interval",
    "Observation",
    "ResultMeta",
    "Series",
]
