"""Unit tests for configuration management.

Tests cover configuration loading, validation, environment variable overrides,
and error handling.
"""

import json
import os
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from mediflow.config import (
    Config,
    IdentifierConfig,
    RangeConfig,
    ReportsConfig,
    SchedulingConfig,
    get_logging_config,
    get_reference_ranges,
    get_reports_config,
    get_scheduling_config,
    load_config,
)
from mediflow.config.defaults import DEFAULT_CONFIG
from mediflow.derivation.vitals import ReferenceRange
from mediflow.utils.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run each test from an empty directory without MEDIFLOW_ variables."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("MEDIFLOW_"):
            monkeypatch.delenv(name)
    yield
    # load_dotenv writes straight to os.environ
    for name in list(os.environ):
        if name.startswith("MEDIFLOW_"):
            del os.environ[name]


def _write_config(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestConfigurationSchema:
    """Test pydantic configuration models validation."""

    def test_range_config_valid(self) -> None:
        """Test a closed range converts to a ReferenceRange."""
        # Arrange & Act
        config = RangeConfig(low=60, high=100)

        # Assert
        assert config.to_range() == ReferenceRange(low=60, high=100)

    def test_range_config_open_upper_bound(self) -> None:
        """Test an open upper bound is allowed."""
        assert RangeConfig(low=95).high is None

    def test_range_config_inverted_bounds(self) -> None:
        """Test low above high is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            RangeConfig(low=100, high=60)

        assert "cannot be greater than high bound" in str(exc_info.value)

    def test_identifier_strategy_normalized(self) -> None:
        """Test strategy names are case-insensitive."""
        assert IdentifierConfig(strategy="Sequential").strategy == "sequential"

    def test_identifier_strategy_invalid(self) -> None:
        """Test unknown strategies are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            IdentifierConfig(strategy="uuid")

        assert "Invalid identifier strategy" in str(exc_info.value)

    @pytest.mark.parametrize("value", ["8:00", "24:00", "0800", "noon"])
    def test_scheduling_rejects_bad_times(self, value: str) -> None:
        """Test day bounds must be HH:MM."""
        with pytest.raises(ValidationError):
            SchedulingConfig(day_start=value)

    def test_scheduling_window_must_be_ordered(self) -> None:
        """Test day_start must precede day_end."""
        with pytest.raises(ValidationError) as exc_info:
            SchedulingConfig(day_start="17:00", day_end="08:00")

        assert "must be before day_end" in str(exc_info.value)

    @pytest.mark.parametrize("slot_minutes", [0, 4, 241])
    def test_scheduling_slot_length_bounds(self, slot_minutes: int) -> None:
        """Test slot length must be between 5 and 240 minutes."""
        with pytest.raises(ValidationError):
            SchedulingConfig(slot_minutes=slot_minutes)

    def test_reports_total_beds_positive(self) -> None:
        """Test bed capacity must be at least one."""
        with pytest.raises(ValidationError):
            ReportsConfig(total_beds=0)

    def test_logging_level_normalized(self) -> None:
        """Test log levels are upper-cased."""
        config = Config(logging={"level": "debug"})

        assert config.logging.level == "DEBUG"

    def test_config_defaults(self) -> None:
        """Test defaults of the root model."""
        # Act
        config = Config()

        # Assert
        assert config.hospital_name == "MediFlow Hospital"
        assert config.reports.total_beds == 50
        assert config.reports.trend_days == 7
        assert config.reports.recent_vitals_hours == 4
        assert config.scheduling.slot_minutes == 30
        assert config.identifiers.strategy == "random"
        assert config.reference_ranges.systolic_bp.high == 140


class TestLoadConfig:
    """Test configuration loading."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        """Test defaults are used when the file does not exist."""
        # Act
        config = load_config(tmp_path / "absent.json")

        # Assert
        assert config.reports.total_beds == DEFAULT_CONFIG["reports"]["total_beds"]
        assert config.logging.log_file == Path("logs/mediflow.log")

    def test_default_path_is_config_json(self, tmp_path: Path) -> None:
        """Test ./config/config.json is read when no path is given."""
        # Arrange
        (tmp_path / "config").mkdir()
        _write_config(tmp_path / "config" / "config.json", {"hospital_name": "St. Luke"})

        # Act
        config = load_config()

        # Assert
        assert config.hospital_name == "St. Luke"

    def test_file_values_override_defaults(self, tmp_path: Path) -> None:
        """Test values from the file replace defaults."""
        # Arrange
        path = _write_config(
            tmp_path / "config.json",
            {
                "reports": {"total_beds": 120},
                "reference_ranges": {"heart_rate": {"low": 50, "high": 110}},
            },
        )

        # Act
        config = load_config(path)

        # Assert
        assert config.reports.total_beds == 120
        assert config.reports.trend_days == 7
        assert config.reference_ranges.heart_rate.high == 110

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        """Test malformed JSON raises ConfigurationError with position."""
        # Arrange
        path = tmp_path / "config.json"
        path.write_text('{"reports": ', encoding="utf-8")

        # Act & Assert
        with pytest.raises(ConfigurationError, match="Invalid JSON in config file"):
            load_config(path)

    def test_non_object_json_raises(self, tmp_path: Path) -> None:
        """Test a JSON array at the top level is rejected."""
        path = _write_config(tmp_path / "config.json", [1, 2, 3])

        with pytest.raises(ConfigurationError, match="JSON object"):
            load_config(path)

    def test_invalid_values_raise(self, tmp_path: Path) -> None:
        """Test schema violations surface as ConfigurationError."""
        path = _write_config(tmp_path / "config.json", {"reports": {"total_beds": -1}})

        with pytest.raises(ConfigurationError, match="Configuration validation failed"):
            load_config(path)


class TestEnvironmentOverrides:
    """Test MEDIFLOW_ environment variable overrides."""

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment values beat file values."""
        # Arrange
        path = _write_config(tmp_path / "config.json", {"reports": {"total_beds": 120}})
        monkeypatch.setenv("MEDIFLOW_TOTAL_BEDS", "80")
        monkeypatch.setenv("MEDIFLOW_ID_STRATEGY", "sequential")
        monkeypatch.setenv("MEDIFLOW_SLOT_MINUTES", "15")

        # Act
        config = load_config(path)

        # Assert
        assert config.reports.total_beds == 80
        assert config.identifiers.strategy == "sequential"
        assert config.scheduling.slot_minutes == 15

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("no", False)])
    def test_bool_override(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
    ) -> None:
        """Test boolean parsing of MEDIFLOW_REDACT_PII."""
        monkeypatch.setenv("MEDIFLOW_REDACT_PII", raw)

        assert load_config(tmp_path / "absent.json").logging.redact_pii is expected

    def test_non_numeric_override_raises(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a non-numeric integer override is reported."""
        monkeypatch.setenv("MEDIFLOW_TOTAL_BEDS", "many")

        with pytest.raises(ConfigurationError, match="MEDIFLOW_TOTAL_BEDS"):
            load_config(tmp_path / "absent.json")

    def test_dotenv_loaded_before_overrides(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test .env values are loaded before environment overrides apply."""
        # Arrange
        def fake_load_dotenv() -> bool:
            os.environ["MEDIFLOW_TREND_DAYS"] = "14"
            return True

        monkeypatch.setattr("mediflow.config.manager.load_dotenv", fake_load_dotenv)

        # Act
        config = load_config(tmp_path / "absent.json")

        # Assert
        assert config.reports.trend_days == 14


class TestAccessors:
    """Test section accessors."""

    def test_section_accessors(self) -> None:
        """Test accessors return the configured sections."""
        # Arrange
        config = Config(reports={"total_beds": 10}, scheduling={"slot_minutes": 20})

        # Act & Assert
        assert get_reports_config(config).total_beds == 10
        assert get_scheduling_config(config).slot_minutes == 20
        assert get_logging_config(config).level == "INFO"

    def test_reference_ranges_conversion(self) -> None:
        """Test config ranges convert to evaluator ranges."""
        # Arrange
        config = Config(reference_ranges={"systolic_bp": {"low": 90, "high": 120}})

        # Act
        ranges = get_reference_ranges(config)

        # Assert
        assert ranges.systolic_bp == ReferenceRange(low=90, high=120)
        assert ranges.oxygen_saturation == ReferenceRange(low=95, high=None)
