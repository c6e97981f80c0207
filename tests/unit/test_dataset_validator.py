"""Unit tests for dataset consistency validation."""

import json
from pathlib import Path

import pytest

from mediflow.data_loader import (
    IssueSeverity,
    ValidationResult,
    build_store,
    validate_dataset,
)


@pytest.fixture
def dataset(dataset_path: Path) -> dict:
    """Raw decoded clinic dataset."""
    return json.loads(dataset_path.read_text(encoding="utf-8"))


def _fields(issues):
    return [(issue.record_type, issue.record_id, issue.field_name) for issue in issues]


class TestValidateDataset:
    """Test suite for validate_dataset."""

    def test_fixture_is_clean(self, store, now):
        """Test the clinic fixture passes without errors or warnings."""
        # Act
        result = validate_dataset(store, now)

        # Assert
        assert not result.has_errors
        assert not result.has_warnings
        assert result.record_counts == {
            "patients": 3,
            "staff": 4,
            "visits": 4,
            "appointments": 5,
            "bills": 1,
        }

    def test_malformed_record_number(self, dataset, now):
        """Test numbers must match PREFIX-YYYY-NNNNNN with the right prefix."""
        # Arrange
        dataset["patients"][1]["mrn"] = "MRN-42"
        dataset["visits"][0]["lab_orders"][0]["order_number"] = "MO-2024-000009"

        # Act
        result = validate_dataset(build_store(dataset), now)

        # Assert
        assert ("patient", "P2", "mrn") in _fields(result.all_errors)
        assert ("lab order", "LO1", "order_number") in _fields(result.all_errors)

    def test_duplicate_record_numbers(self, dataset, now):
        """Test numbers reused across records are reported once each."""
        # Arrange
        dataset["visits"][1]["visit_number"] = "VS-2024-000001"

        # Act
        result = validate_dataset(build_store(dataset), now)

        # Assert
        assert result.duplicate_identifiers == ["VS-2024-000001"]
        assert any("used 2 times" in issue.message for issue in result.all_errors)

    def test_dangling_references(self, dataset, now):
        """Test unknown patient, doctor and visit references are errors."""
        # Arrange
        dataset["visits"][2]["patient_id"] = "P9"
        dataset["appointments"][0]["doctor_id"] = "N1"
        dataset["bills"][0]["visit_id"] = "V9"

        # Act
        result = validate_dataset(build_store(dataset), now)

        # Assert
        errors = _fields(result.all_errors)
        assert ("visit", "V3", "patient_id") in errors
        assert ("appointment", "A1", "doctor_id") in errors
        assert ("bill", "B1", "visit_id") in errors

    def test_future_date_of_birth(self, dataset, now):
        """Test a date of birth after the reference date is an error."""
        # Arrange
        dataset["patients"][0]["date_of_birth"] = "2030-01-01"

        # Act
        result = validate_dataset(build_store(dataset), now)

        # Assert
        assert ("patient", "P1", "date_of_birth") in _fields(result.all_errors)

    def test_discharge_before_admission(self, dataset, now):
        """Test discharge time must follow admission."""
        # Arrange
        dataset["visits"][3]["discharge_datetime"] = "2024-02-01T09:00:00"

        # Act
        result = validate_dataset(build_store(dataset), now)

        # Assert
        assert ("visit", "V4", "discharge_datetime") in _fields(result.all_errors)

    def test_incomplete_data_warnings(self, dataset, now):
        """Test usable but incomplete records produce warnings."""
        # Arrange
        del dataset["visits"][0]["bed_number"]
        del dataset["visits"][1]["discharge_datetime"]
        dataset["visits"][2]["assigned_nurses"] = ["D1"]

        # Act
        result = validate_dataset(build_store(dataset), now)

        # Assert
        assert not result.has_errors
        warnings = _fields(result.all_warnings)
        assert ("visit", "V1", "bed_number") in warnings
        assert ("visit", "V2", "discharge_datetime") in warnings
        assert ("visit", "V3", "assigned_nurses") in warnings

    def test_misplaced_order(self, dataset, now):
        """Test an order listed under another visit is an error."""
        # Arrange
        dataset["visits"][0]["medication_orders"][0]["visit_id"] = "V4"

        # Act
        result = validate_dataset(build_store(dataset), now)

        # Assert
        assert ("order", "MO1", "visit_id") in _fields(result.all_errors)


class TestValidationResult:
    """Test suite for ValidationResult reporting."""

    def test_add_routes_by_severity(self):
        """Test issues land in errors or warnings by severity."""
        # Arrange
        result = ValidationResult()

        # Act
        result.add(IssueSeverity.ERROR, "visit", "V1", "patient_id", "bad", "fix")
        result.add(IssueSeverity.WARNING, "visit", "V1", "bed_number", "meh", "fix")

        # Assert
        assert result.has_errors
        assert result.has_warnings
        assert result.to_dict()["errors"][0]["severity"] == "error"

    def test_report_clean(self, store, now):
        """Test the report for a clean dataset."""
        report = validate_dataset(store, now).format_report()

        assert "DATASET VALIDATION REPORT" in report
        assert "Patients: 3" in report
        assert "RESULT: ✓ All validations passed" in report

    def test_report_with_warnings_only(self):
        """Test warnings alone still pass."""
        # Arrange
        result = ValidationResult()
        result.add(IssueSeverity.WARNING, "visit", "V1", "bed_number", "No bed", "Assign a bed")

        # Act
        report = result.format_report()

        # Assert
        assert "WARNINGS (1):" in report
        assert "→ Assign a bed" in report
        assert "RESULT: ✓ Validation passed with warnings" in report

    def test_report_truncates_long_lists(self):
        """Test only the first twenty issues are listed."""
        # Arrange
        result = ValidationResult()
        for i in range(25):
            result.add(IssueSeverity.ERROR, "patient", f"P{i}", "mrn", "Malformed", "Fix")

        # Act
        report = result.format_report()

        # Assert
        assert "ERRORS (25):" in report
        assert "... and 5 more errors" in report
        assert "RESULT: ✗ Validation failed - please fix errors above" in report
