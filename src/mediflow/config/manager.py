"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
and configuration validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from mediflow.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from mediflow.config.schema import (
    Config,
    LoggingConfig,
    ReportsConfig,
    SchedulingConfig,
)
from mediflow.derivation.vitals import VitalReferenceRanges
from mediflow.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "MEDIFLOW_"

# (environment suffix, section, field, converter)
_ENV_OVERRIDES = [
    ("LOG_LEVEL", "logging", "level", str),
    ("LOG_FILE", "logging", "log_file", str),
    ("REDACT_PII", "logging", "redact_pii", "bool"),
    ("ID_STRATEGY", "identifiers", "strategy", str),
    ("ID_SEED", "identifiers", "seed", int),
    ("DAY_START", "scheduling", "day_start", str),
    ("DAY_END", "scheduling", "day_end", str),
    ("SLOT_MINUTES", "scheduling", "slot_minutes", int),
    ("TOTAL_BEDS", "reports", "total_beds", int),
    ("TREND_DAYS", "reports", "trend_days", int),
    ("RECENT_VITALS_HOURS", "reports", "recent_vitals_hours", int),
    ("OP_LOG_VITALS_LEVEL", "operation_logging", "vitals_log_level", str),
    ("OP_LOG_ORDERS_LEVEL", "operation_logging", "orders_log_level", str),
    ("OP_LOG_SCHEDULING_LEVEL", "operation_logging", "scheduling_log_level", str),
    ("OP_LOG_STORE_LEVEL", "operation_logging", "store_log_level", str),
]


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (MEDIFLOW_* prefix)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> config.reports.total_beds
        50
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        ) from e


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Raises:
        ConfigurationError: If JSON is malformed or unreadable
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a JSON object at the top level"
            )
        logger.info(f"Loaded configuration from {config_path}")
        return config_dict

    logger.info(f"Config file not found: {config_path}. Using default configuration.")
    # Deep copy so callers never mutate the defaults
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with MEDIFLOW_ prefix.

    Environment variables follow the pattern MEDIFLOW_<NAME>, for example
    MEDIFLOW_LOG_LEVEL, MEDIFLOW_TOTAL_BEDS, MEDIFLOW_ID_STRATEGY.

    Raises:
        ConfigurationError: If a numeric override is not a number
    """
    for suffix, section, field_name, converter in _ENV_OVERRIDES:
        raw = os.getenv(f"{ENV_PREFIX}{suffix}")
        if not raw:
            continue
        if converter == "bool":
            value: Any = _parse_bool(raw)
        else:
            try:
                value = converter(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {ENV_PREFIX}{suffix}: {raw!r}. Error: {e}"
                ) from e
        config_dict.setdefault(section, {})[field_name] = value
        logger.debug(f"Override: {section}.{field_name} from environment")

    return config_dict


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string (case-insensitive)."""
    return value.lower() in ("true", "1", "yes", "on")


def get_reference_ranges(config: Config) -> VitalReferenceRanges:
    """Get vital sign reference ranges as used by the vitals evaluator."""
    return config.reference_ranges.to_reference_ranges()


def get_scheduling_config(config: Config) -> SchedulingConfig:
    return config.scheduling


def get_reports_config(config: Config) -> ReportsConfig:
    return config.reports


def get_logging_config(config: Config) -> LoggingConfig:
    return config.logging
