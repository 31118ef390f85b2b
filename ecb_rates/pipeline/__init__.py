"""Request pipeline: memoized fetch-and-parse plus periodic cache flush."""

from ecb_rates.pipeline.fetcher import FetchAndParsePipeline
from ecb_rates.pipeline.invalidator import PeriodicInvalidator

__all__ = ["FetchAndParsePipeline", "PeriodicInvalidator"]
