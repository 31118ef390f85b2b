"""Configuration module -- exports Settings and the layered loader."""

from ecb_rates.config.loader import load_settings
from ecb_rates.config.settings import DEFAULT_ENDPOINT, Settings

__all__ = ["DEFAULT_ENDPOINT", "Settings", "load_settings"]
