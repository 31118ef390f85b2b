"""Command-line client for ECB exchange rates.

Usage::

    ecb-rates --start 2019-01-01 --end 2019-12-31 --to USD
    python -m ecb_rates.cli --start 2019-01-01 --end 2019-01-31 --interval D --pretty

Prints the exchange-rate record as JSON on stdout, with missing values as
``null``.  Logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import math
import sys
from datetime import date
from typing import Any

from pydantic import ValidationError

from ecb_rates.config.loader import DEFAULT_CONFIG_PATH, load_settings
from ecb_rates.models.query import ExchangeRateQuery
from ecb_rates.services.exchange_rate_service import EuropeanCentralBankExchangeRates
from ecb_rates.utils.errors import EcbRatesError
from ecb_rates.utils.logging import configure_logging


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecb-rates",
        description="Fetch exchange rates from the ECB statistical data service.",
    )
    parser.add_argument("--start", required=True, type=_parse_date, help="Start period (YYYY-MM-DD)")
    parser.add_argument("--end", required=True, type=_parse_date, help="End period (YYYY-MM-DD)")
    parser.add_argument("--from", dest="from_currency", default="EUR", help="Base currency (default: EUR)")
    parser.add_argument("--to", dest="to_currency", default="", help="Quote currency (default: all)")
    parser.add_argument("--interval", choices=["M", "D"], default="M", help="Monthly or daily series")
    parser.add_argument("--type", dest="rate_type", default="SP00", help="Exchange rate type")
    parser.add_argument("--variation", dest="variation_code", default="A", help="Series variation code")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to YAML config")
    parser.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def _json_safe(value: Any) -> Any:
    """Replace non-finite floats with ``None`` so the output is strict JSON."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_json_safe(item) for item in value]
    return value


async def _run(args: argparse.Namespace) -> str:
    settings = load_settings(args.config)
    query = ExchangeRateQuery(
        start_period=args.start,
        end_period=args.end,
        interval=args.interval,
        from_currency=args.from_currency.upper(),
        to_currency=args.to_currency.upper(),
        type=args.rate_type,
        variation_code=args.variation_code,
    )
    async with EuropeanCentralBankExchangeRates(settings) as client:
        record = await client.exchange_rate(query)
    return json.dumps(
        _json_safe(record.model_dump()),
        indent=2 if args.pretty else None,
        allow_nan=False,
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "WARNING")

    try:
        output = asyncio.run(_run(args))
    except ValidationError as exc:
        print(f"Invalid query: {exc}", file=sys.stderr)
        return 2
    except EcbRatesError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
