"""ecb-rates: cached client for the ECB exchange-rate data service."""

from ecb_rates.config.settings import Settings
from ecb_rates.models.query import ExchangeRateQuery
from ecb_rates.models.rates import ExchangeRateRecord, Observation, ResultMeta, Series
from ecb_rates.pipeline.fetcher import FetchAndParsePipeline
from ecb_rates.pipeline.invalidator import PeriodicInvalidator
from ecb_rates.providers.cache.bounded_cache import BoundedCache
from ecb_rates.services.exchange_rate_service import EuropeanCentralBankExchangeRates
from ecb_rates.utils.concurrency import SingleFlightMemoizer
from ecb_rates.utils.errors import (
    ConfigurationError,
    EcbRatesError,
    ParseError,
    RemoteError,
    TransportError,
)

__version__ = "0.1.0"

__all__ = [
    "BoundedCache",
    "ConfigurationError",
    "EcbRatesError",
    "EuropeanCentralBankExchangeRates",
    "ExchangeRateQuery",
    "ExchangeRateRecord",
    "FetchAndParsePipeline",
    "Observation",
    "ParseError",
    "PeriodicInvalidator",
    "RemoteError",
    "ResultMeta",
    "Series",
    "Settings",
    "SingleFlightMemoizer",
    "TransportError",
]
