"""Analytics configuration loader — reads threshold overrides from YAML."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from riskwatch.domains.health.domain_logic.configuration import (
    AnalyticsConfiguration,
    ConfigurationError,
    default_configuration,
    merge_configuration,
)

logger = logging.getLogger(__name__)


def load_configuration_file(path: str | Path) -> AnalyticsConfiguration:
    """Parse a YAML file of (partial) overrides and merge it over the defaults.

    An empty file yields the defaults.

    Raises:
        ConfigurationError: the file is missing, is not valid YAML, or does not
            match the configuration shape.
    """
    path = Path(path).expanduser()
    try:
        with open(path) as f:
            data: Any = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigurationError(f"cannot read configuration file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid YAML in {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")

    config = merge_configuration(default_configuration(), data)
    logger.info("Loaded analytics configuration from %s", path)
    return config


def dump_configuration(config: AnalyticsConfiguration) -> str:
    """Render a configuration as YAML (round-trips through the loader)."""
    return yaml.safe_dump(config.model_dump(), sort_keys=False)
