"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
"""

import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from mediflow.derivation.vitals import ReferenceRange, VitalReferenceRanges

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _validate_level(v: str) -> str:
    v_upper = v.upper()
    if v_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: {v}. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )
    return v_upper


class RangeConfig(BaseModel):
    """Closed normal interval for one vital sign. Either bound may be open."""

    low: Optional[float] = None
    high: Optional[float] = None

    @model_validator(mode="after")
    def validate_bounds(self) -> "RangeConfig":
        if self.low is not None and self.high is not None and self.low > self.high:
            raise ValueError(
                f"Range low bound ({self.low}) cannot be greater than high bound ({self.high})"
            )
        return self

    def to_range(self) -> ReferenceRange:
        return ReferenceRange(low=self.low, high=self.high)


class ReferenceRangesConfig(BaseModel):
    """Normal reference ranges used to flag abnormal vital signs.

    The systolic upper bound of 140 applies to every evaluation.
    """

    temperature_celsius: RangeConfig = RangeConfig(low=36.1, high=37.2)
    systolic_bp: RangeConfig = RangeConfig(low=90, high=140)
    diastolic_bp: RangeConfig = RangeConfig(low=60, high=90)
    heart_rate: RangeConfig = RangeConfig(low=60, high=100)
    respiratory_rate: RangeConfig = RangeConfig(low=12, high=20)
    oxygen_saturation: RangeConfig = RangeConfig(low=95, high=None)

    def to_reference_ranges(self) -> VitalReferenceRanges:
        return VitalReferenceRanges(
            temperature_celsius=self.temperature_celsius.to_range(),
            systolic_bp=self.systolic_bp.to_range(),
            diastolic_bp=self.diastolic_bp.to_range(),
            heart_rate=self.heart_rate.to_range(),
            respiratory_rate=self.respiratory_rate.to_range(),
            oxygen_saturation=self.oxygen_saturation.to_range(),
        )


class IdentifierConfig(BaseModel):
    """Record number generation strategy.

    Attributes:
        strategy: random (no uniqueness check), checked (collision-checked
                  random) or sequential (monotonic per prefix and year)
        seed: Optional random seed for reproducible numbers
    """

    strategy: str = Field(default="random", description="random, checked or sequential")
    seed: Optional[int] = Field(default=None, description="Random seed")

    @field_validator("strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        valid = ["random", "checked", "sequential"]
        if v.lower() not in valid:
            raise ValueError(
                f"Invalid identifier strategy: {v}. Must be one of: {', '.join(valid)}"
            )
        return v.lower()


class SchedulingConfig(BaseModel):
    """Appointment slot grid for the booking screen."""

    day_start: str = Field(default="08:00", description="First slot (HH:MM)")
    day_end: str = Field(default="17:00", description="End of day, exclusive (HH:MM)")
    slot_minutes: int = Field(default=30, ge=5, le=240, description="Slot length")

    @field_validator("day_start", "day_end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not TIME_PATTERN.match(v):
            raise ValueError(f"Invalid time: {v}. Use 24-hour HH:MM format")
        return v

    @model_validator(mode="after")
    def validate_window(self) -> "SchedulingConfig":
        if self.day_start >= self.day_end:
            raise ValueError(
                f"day_start ({self.day_start}) must be before day_end ({self.day_end})"
            )
        return self


class ReportsConfig(BaseModel):
    """Reporting and monitoring parameters."""

    total_beds: int = Field(default=50, ge=1, description="Inpatient bed capacity")
    trend_days: int = Field(default=7, ge=1, le=90, description="Days in visit trend")
    recent_vitals_hours: int = Field(
        default=4, ge=1, description="Vitals older than this are not recent"
    )


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_pii: Whether to redact PII from logs
    """

    level: str = Field(default="INFO", description="Log level")
    log_file: Path = Field(default=Path("logs/mediflow.log"), description="Log file path")
    redact_pii: bool = Field(default=False, description="Redact PII from logs")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return _validate_level(v)


class OperationLoggingConfig(BaseModel):
    """Per-operation log levels."""

    vitals_log_level: str = "INFO"
    orders_log_level: str = "INFO"
    scheduling_log_level: str = "INFO"
    store_log_level: str = "INFO"

    @field_validator(
        "vitals_log_level", "orders_log_level", "scheduling_log_level", "store_log_level"
    )
    @classmethod
    def validate_operation_log_level(cls, v: str) -> str:
        return _validate_level(v)


class Config(BaseModel):
    """Root configuration model.

    Example:
        >>> config = Config(reports=ReportsConfig(total_beds=120))
        >>> config.reports.total_beds
        120
    """

    reference_ranges: ReferenceRangesConfig = ReferenceRangesConfig()
    identifiers: IdentifierConfig = IdentifierConfig()
    scheduling: SchedulingConfig = SchedulingConfig()
    reports: ReportsConfig = ReportsConfig()
    logging: LoggingConfig = LoggingConfig()
    operation_logging: OperationLoggingConfig = OperationLoggingConfig()
    hospital_name: str = Field(default="MediFlow Hospital", description="Display name")
