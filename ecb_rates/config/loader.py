"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- set at deploy time

Only the ``ecb_rates`` section of the YAML file is read; its keys are the
:class:`Settings` field names.
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from ecb_rates.config.settings import Settings
from ecb_rates.utils.errors import ConfigurationError

DEFAULT_CONFIG_PATH = "config/config.yaml"


def load_settings(path: str = DEFAULT_CONFIG_PATH) -> Settings:
    """Build :class:`Settings` from the YAML file with env values on top.

    Args:
        path: Path to the YAML configuration file.  A missing file is the
              same as an empty one.

    Raises:
        ConfigurationError: if the file is not valid YAML or a value fails
            validation.
    """
    config_path = Path(path)
    yaml_config: dict = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc

    section = yaml_config.get("ecb_rates") or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'ecb_rates' in {config_path} must be a mapping")

    try:
        # Fields set from the environment or .env count as explicitly set.
        env_settings = Settings()
        overrides = env_settings.model_dump(exclude_unset=True)
        _deep_merge(section, overrides)
        return Settings(**section)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
