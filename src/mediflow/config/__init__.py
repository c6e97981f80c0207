"""Config module.

This module provides configuration management functionality.
"""

from mediflow.config.manager import (
    get_logging_config,
    get_reference_ranges,
    get_reports_config,
    get_scheduling_config,
    load_config,
)
from mediflow.config.schema import (
    Config,
    IdentifierConfig,
    LoggingConfig,
    OperationLoggingConfig,
    RangeConfig,
    ReferenceRangesConfig,
    ReportsConfig,
    SchedulingConfig,
)

__all__ = [
    "load_config",
    "get_logging_config",
    "get_reference_ranges",
    "get_reports_config",
    "get_scheduling_config",
    "Config",
    "IdentifierConfig",
    "LoggingConfig",
    "OperationLoggingConfig",
    "RangeConfig",
    "ReferenceRangesConfig",
    "ReportsConfig",
    "SchedulingConfig",
]
