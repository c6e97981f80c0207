"""Integration tests for CLI workflows.

This module tests complete CLI workflows including multi-step processes,
configuration files that change derived output, and identifier generation
that continues from an existing dataset.
"""

import json
import re
import shutil
from pathlib import Path

import pytest

from mediflow.cli.main import cli
from mediflow.derivation.identifiers import is_valid_identifier
from mediflow.data_loader import load_dataset

NOW = "2024-03-15T10:00"


@pytest.fixture
def working_dataset(tmp_path: Path, dataset_path: Path) -> Path:
    """Copy of the clinic dataset that a test may edit."""
    target = tmp_path / "clinic.json"
    shutil.copy(dataset_path, target)
    return target


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Configuration with a short clinic day, hourly slots and a small ward."""
    path = tmp_path / "mediflow.json"
    path.write_text(
        json.dumps(
            {
                "hospital_name": "Harbour Clinic",
                "scheduling": {"day_start": "08:00", "day_end": "10:00", "slot_minutes": 60},
                "reports": {"total_beds": 4, "trend_days": 3},
                "identifiers": {"strategy": "sequential"},
            }
        ),
        encoding="utf-8",
    )
    return path


class TestDatasetReviewWorkflow:
    """Validate a dataset, then read its derived views."""

    def test_validate_then_review(self, runner, cli_env, working_dataset):
        """Test validate, dashboard, report and summary on the same dataset."""
        base = ["--log-file", str(cli_env)]

        # Act - Step 1: Validate
        validate_result = runner.invoke(
            cli, base + ["data", "validate", str(working_dataset), "--now", NOW]
        )

        # Assert - Validation passes
        assert validate_result.exit_code == 0
        assert "All validations passed" in validate_result.output

        # Act - Step 2: Dashboard
        dashboard_result = runner.invoke(
            cli, base + ["dashboard", str(working_dataset), "--now", NOW, "--json"]
        )

        # Assert - KPIs match the dataset
        assert dashboard_result.exit_code == 0
        stats = json.loads(dashboard_result.output)
        assert stats["total_patients"] == 3
        assert stats["active_visits"] == 2
        assert stats["pending_lab_orders"] == 2

        # Act - Step 3: Report
        report_result = runner.invoke(
            cli, base + ["report", str(working_dataset), "--now", NOW]
        )

        # Assert - Default bed capacity
        assert report_result.exit_code == 0
        assert "Bed occupancy: 2.0% (1/50)" in report_result.output
        assert "Lab orders: 2 completed, 1 pending" in report_result.output

        # Act - Step 4: Patient summary by MRN
        summary_result = runner.invoke(
            cli,
            base + ["patient", "summary", str(working_dataset), "MR-2024-000002", "--now", NOW],
        )

        # Assert
        assert summary_result.exit_code == 0
        assert "Kwame Mensah (MR-2024-000002)  alert level: medium" in summary_result.output
        assert "Latest vitals: Never" in summary_result.output
        assert "Pending labs: none" in summary_result.output

        # Assert - File logging configured from the global option
        assert cli_env.exists()

    def test_fix_dataset_after_failed_validation(
        self, runner, cli_env, working_dataset, monkeypatch
    ):
        """Test a dataset that fails validation passes once corrected."""
        # Arrange
        monkeypatch.setenv("MEDIFLOW_LOG_LEVEL", "CRITICAL")
        base = ["--log-file", str(cli_env)]
        data = json.loads(working_dataset.read_text(encoding="utf-8"))
        data["bills"][0]["visit_id"] = "V9"
        working_dataset.write_text(json.dumps(data), encoding="utf-8")

        # Act - Step 1: Validate broken dataset
        failed = runner.invoke(
            cli, base + ["data", "validate", str(working_dataset), "--now", NOW, "--json"]
        )

        # Assert - Error reported against the bill
        assert failed.exit_code == 1
        errors = json.loads(failed.output)["errors"]
        assert any(error["field_name"] == "visit_id" for error in errors)

        # Act - Step 2: Fix and re-validate
        data["bills"][0]["visit_id"] = "V4"
        working_dataset.write_text(json.dumps(data), encoding="utf-8")
        fixed = runner.invoke(
            cli, base + ["data", "validate", str(working_dataset), "--now", NOW]
        )

        # Assert
        assert fixed.exit_code == 0

    def test_discharged_patient_changes_dashboard(self, runner, cli_env, working_dataset):
        """Test editing the dataset is reflected in the next dashboard."""
        # Arrange
        base = ["--log-file", str(cli_env)]
        before = runner.invoke(
            cli, base + ["dashboard", str(working_dataset), "--now", NOW, "--json"]
        )
        data = json.loads(working_dataset.read_text(encoding="utf-8"))
        data["visits"][2]["status"] = "DISCHARGED"
        data["visits"][2]["discharge_datetime"] = "2024-03-15T09:00:00"
        working_dataset.write_text(json.dumps(data), encoding="utf-8")

        # Act
        after = runner.invoke(
            cli, base + ["dashboard", str(working_dataset), "--now", NOW, "--json"]
        )

        # Assert
        assert json.loads(before.output)["active_visits"] == 2
        assert json.loads(after.output)["active_visits"] == 1

    def test_utc_suffixed_dataset_matches_plain_dataset(
        self, runner, cli_env, working_dataset, tmp_path
    ):
        """Test report and patient summary read Z-suffixed timestamps as UTC."""
        # Arrange
        base = ["--log-file", str(cli_env)]
        utc_dataset = tmp_path / "clinic_utc.json"
        utc_dataset.write_text(
            re.sub(
                r'"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"',
                r'"\1Z"',
                working_dataset.read_text(encoding="utf-8"),
            ),
            encoding="utf-8",
        )
        assert "\"2024-03-15T08:00:00Z\"" in utc_dataset.read_text(encoding="utf-8")
        commands = [
            ["report", "{dataset}", "--now", NOW],
            ["patient", "summary", "{dataset}", "MR-2024-000001", "--now", NOW],
            ["patient", "summary", "{dataset}", "MR-2024-000001", "--now", NOW, "--json"],
        ]

        for command in commands:
            # Act
            plain = runner.invoke(
                cli, base + [str(working_dataset) if arg == "{dataset}" else arg for arg in command]
            )
            utc = runner.invoke(
                cli, base + [str(utc_dataset) if arg == "{dataset}" else arg for arg in command]
            )

            # Assert
            assert utc.exception is None, command
            assert utc.exit_code == 0
            assert utc.output == plain.output


class TestConfigDrivenWorkflow:
    """Configuration files change scheduling, reports and identifiers."""

    def test_config_validate_then_use(self, runner, cli_env, config_file, dataset_path):
        """Test a validated configuration drives slots and report figures."""
        base = ["--log-file", str(cli_env)]

        # Act - Step 1: Validate configuration
        validate_result = runner.invoke(cli, base + ["config", "validate", str(config_file)])

        # Assert
        assert validate_result.exit_code == 0

        # Act - Step 2: Slots with hourly configuration
        slots_result = runner.invoke(
            cli,
            base
            + [
                "--config",
                str(config_file),
                "appointments",
                "slots",
                str(dataset_path),
                "--doctor",
                "D1",
                "--date",
                "2024-03-15",
            ],
        )

        # Assert - 09:00 is taken by the confirmed booking
        assert slots_result.exit_code == 0
        assert slots_result.output.strip() == "08:00"

        # Act - Step 3: Report with a four-bed ward
        report_result = runner.invoke(
            cli,
            base + ["--config", str(config_file), "report", str(dataset_path), "--now", NOW],
        )

        # Assert
        assert report_result.exit_code == 0
        assert "Bed occupancy: 25.0% (1/4)" in report_result.output
        trend_lines = re.findall(r"^  \d{4}-\d{2}-\d{2}  \d+$", report_result.output, re.MULTILINE)
        assert len(trend_lines) == 3

    def test_default_slots_without_config(self, runner, cli_env, dataset_path):
        """Test a doctor with no bookings has the full default day."""
        # Act
        result = runner.invoke(
            cli,
            [
                "--log-file",
                str(cli_env),
                "appointments",
                "slots",
                str(dataset_path),
                "--doctor",
                "D1",
                "--date",
                "2024-03-16",
            ],
        )

        # Assert
        assert result.exit_code == 0
        slots = result.output.split()
        assert len(slots) == 18
        assert slots[0] == "08:00"
        assert slots[-1] == "16:30"

    def test_env_override_beats_config_file(
        self, runner, cli_env, config_file, dataset_path, monkeypatch
    ):
        """Test MEDIFLOW_TOTAL_BEDS overrides the configuration file."""
        # Arrange
        monkeypatch.setenv("MEDIFLOW_TOTAL_BEDS", "20")

        # Act
        result = runner.invoke(
            cli,
            [
                "--log-file",
                str(cli_env),
                "--config",
                str(config_file),
                "report",
                str(dataset_path),
                "--now",
                NOW,
            ],
        )

        # Assert
        assert result.exit_code == 0
        assert "Bed occupancy: 5.0% (1/20)" in result.output


class TestIdentifierWorkflow:
    """Identifier generation against an existing dataset."""

    def test_sequential_ids_skip_dataset_numbers(self, runner, cli_env, config_file, dataset_path):
        """Test configured sequential numbers never reuse dataset numbers."""
        # Arrange
        existing = set(load_dataset(dataset_path).record_numbers())

        # Act
        result = runner.invoke(
            cli,
            [
                "--log-file",
                str(cli_env),
                "--config",
                str(config_file),
                "ids",
                "generate",
                "VS",
                "--count",
                "3",
                "--dataset",
                str(dataset_path),
            ],
        )

        # Assert
        assert result.exit_code == 0
        numbers = result.output.split()
        assert len(numbers) == 3
        assert all(is_valid_identifier(number, "VS") for number in numbers)
        assert not existing & set(numbers)
        suffixes = [int(number.rsplit("-", 1)[1]) for number in numbers]
        assert suffixes == sorted(suffixes)
        assert suffixes[1] == suffixes[0] + 1

    def test_checked_strategy_with_dataset(self, runner, cli_env, dataset_path):
        """Test checked random numbers are distinct and unused."""
        # Arrange
        existing = set(load_dataset(dataset_path).record_numbers())

        # Act
        result = runner.invoke(
            cli,
            [
                "--log-file",
                str(cli_env),
                "ids",
                "generate",
                "MR",
                "--count",
                "10",
                "--strategy",
                "checked",
                "--seed",
                "7",
                "--dataset",
                str(dataset_path),
            ],
        )

        # Assert
        assert result.exit_code == 0
        numbers = result.output.split()
        assert len(set(numbers)) == 10
        assert not existing & set(numbers)
