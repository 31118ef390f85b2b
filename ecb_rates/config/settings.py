"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (highest priority first):

  1. Environment variables prefixed with ``ECB_RATES_``,
     e.g. ``ECB_RATES_REQUEST_TIMEOUT_MS=5000``
  2. A ``.env`` file in the working directory
  3. The defaults below

``config/loader.py`` adds ``config/config.yaml`` as a layer underneath the
environment.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENDPOINT = "https://sdw-wsrest.ecb.europa.eu/service/data/EXR/"


class Settings(BaseSettings):
    """ecb-rates settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_prefix="ECB_RATES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Data service ===
    endpoint: str = DEFAULT_ENDPOINT
    request_timeout_ms: int = Field(default=20_000, gt=0)
    max_response_bytes: int = Field(default=2 * 1024 * 1024, gt=0)

    # === Cache ===
    max_cache_entries: int = Field(default=100, gt=0)
    max_cache_bytes: int = Field(default=20 * 1024 * 1024, gt=0)
    invalidation_interval_ms: int = Field(default=60 * 60 * 1000, gt=0)

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000.0

    @property
    def invalidation_interval_seconds(self) -> float:
        return self.invalidation_interval_ms / 1000.0
