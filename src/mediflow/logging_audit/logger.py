"""Logging configuration and logger factory for MediFlow.

This module provides centralized logging configuration with support for:
- Console and file handlers with different log levels
- Log rotation to prevent unbounded file growth
- PII redaction via custom formatters
- Environment variable configuration
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from .formatters import PIIRedactingFormatter

if TYPE_CHECKING:
    from ..config.schema import OperationLoggingConfig

# Constants
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = Path("logs") / "mediflow.log"
MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Track if logging has been configured
_logging_configured = False

# Operation-specific logger names
OPERATION_LOGGERS = {
    "vitals": "mediflow.vitals",
    "orders": "mediflow.orders",
    "scheduling": "mediflow.scheduling",
    "store": "mediflow.store",
}

logger = logging.getLogger(__name__)


def _numeric_level(level: str, context: str = "") -> int:
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        prefix = f"Invalid log level for {context}" if context else "Invalid log level"
        raise ValueError(
            f"{prefix}: {level}. Must be one of: {', '.join(VALID_LEVELS)}"
        )
    return numeric_level


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    redact_pii: bool = False,
) -> None:
    """Configure logging for MediFlow.

    Sets up both console and file handlers with appropriate log levels and formatting.
    This function is idempotent - it can be called multiple times safely.

    Args:
        level: Log level for console output (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               File handler always uses DEBUG level.
        log_file: Path to log file. If None, uses DEFAULT_LOG_FILE or
                 MEDIFLOW_LOG_FILE environment variable if set.
        redact_pii: Whether to redact PII (patient names, MRNs, phone numbers) from logs

    Raises:
        ValueError: If invalid log level is provided
        RuntimeError: If log directory cannot be created

    Example:
        >>> configure_logging(level="DEBUG", redact_pii=True)
        >>> configure_logging(level="INFO", log_file=Path("custom/mediflow.log"))
    """
    global _logging_configured

    numeric_level = _numeric_level(level)

    if log_file is None:
        env_log_file = os.environ.get("MEDIFLOW_LOG_FILE")
        log_file = Path(env_log_file) if env_log_file else DEFAULT_LOG_FILE

    log_dir = log_file.parent
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except (OSError, PermissionError) as e:
        raise RuntimeError(
            f"Failed to create log directory: {log_dir}. "
            f"Ensure write permissions are available. Error: {e}"
        ) from e

    root_logger = logging.getLogger()

    # If already configured, remove existing handlers to avoid duplicates
    if _logging_configured:
        for handler in list(root_logger.handlers):
            handler.close()
        root_logger.handlers.clear()

    root_logger.setLevel(logging.DEBUG)

    formatter = PIIRedactingFormatter(fmt=DEFAULT_LOG_FORMAT, redact_pii=redact_pii)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    try:
        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=MAX_LOG_FILE_SIZE,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except (OSError, PermissionError) as e:
        # Keep console logging when the file cannot be opened
        root_logger.warning(
            f"Failed to create file handler for {log_file}: {e}. "
            f"Logging to console only."
        )

    _logging_configured = True


def get_logger(module_name: str) -> logging.Logger:
    """Get a logger for the specified module.

    Args:
        module_name: Name of the module, typically __name__

    Returns:
        Configured logger instance for the module
    """
    return logging.getLogger(module_name)


def get_operation_logger(operation: str) -> logging.Logger:
    """Get a logger for a specific operation type.

    Operation loggers enable per-operation log level configuration.
    Supported operations: vitals, orders, scheduling, store.

    Args:
        operation: Operation type

    Returns:
        Logger instance for the operation

    Raises:
        ValueError: If operation is not a recognized type
    """
    if operation not in OPERATION_LOGGERS:
        raise ValueError(
            f"Unknown operation: {operation}. "
            f"Must be one of: {', '.join(OPERATION_LOGGERS.keys())}"
        )
    return logging.getLogger(OPERATION_LOGGERS[operation])


def set_operation_log_level(operation: str, level: str) -> None:
    """Set log level for a specific operation at runtime.

    Raises:
        ValueError: If operation or level is invalid
    """
    operation_logger = get_operation_logger(operation)
    operation_logger.setLevel(_numeric_level(level))
    logger.debug("Set %s logger level to %s", operation_logger.name, level.upper())


def configure_operation_logging_from_config(config: "OperationLoggingConfig") -> None:
    """Configure operation log levels from an OperationLoggingConfig object.

    Example:
        >>> from mediflow.config.schema import OperationLoggingConfig
        >>> configure_operation_logging_from_config(OperationLoggingConfig(store_log_level="DEBUG"))
    """
    levels = {
        "vitals": config.vitals_log_level,
        "orders": config.orders_log_level,
        "scheduling": config.scheduling_log_level,
        "store": config.store_log_level,
    }
    for operation, level in levels.items():
        set_operation_log_level(operation, level)
