"""Utility modules for ecb-rates.

- **errors** -- exception hierarchy rooted at EcbRatesError.
- **logging** -- structlog setup with console/JSON renderers.
- **text** -- attribute-name normalisation and lenient float parsing.
- **concurrency** (not re-exported here) -- single-flight memoizer.
"""

from ecb_rates.utils.errors import (
    ConfigurationError,
    EcbRatesError,
    ParseError,
    RemoteError,
    TransportError,
)
from ecb_rates.utils.logging import configure_logging, get_logger
from ecb_rates.utils.text import parse_float, to_camel_case

__all__ = [
    "ConfigurationError",
    "EcbRatesError",
    "ParseError",
    "RemoteError",
    "TransportError",
    "configure_logging",
    "get_logger",
    "parse_float",
    "to_camel_case",
]
