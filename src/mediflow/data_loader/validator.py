"""Consistency validation for a loaded clinical dataset.

Collects every issue before reporting so a dataset author can fix several
problems in one pass. Errors describe records the derivations would
misreport; warnings describe incomplete but usable data.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from mediflow.derivation.identifiers import (
    APPOINTMENT_PREFIX,
    BILL_PREFIX,
    LAB_ORDER_PREFIX,
    MEDICATION_ORDER_PREFIX,
    MRN_PREFIX,
    RADIOLOGY_ORDER_PREFIX,
    VISIT_PREFIX,
    is_valid_identifier,
)
from mediflow.logging_audit import get_logger
from mediflow.models.staff import Role
from mediflow.models.visit import VisitStatus, VisitType
from mediflow.store.state import ClinicalStore

logger = get_logger(__name__)

MAX_REPORTED_ISSUES = 20


class IssueSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """Individual validation issue with context and suggested fix.

    Attributes:
        record_type: Kind of record with the issue (patient, visit, ...)
        record_id: Identifier of the record
        field_name: Field with the issue
        severity: ERROR or WARNING level
        message: Description of what's wrong
        suggestion: Actionable guidance on how to fix the issue
    """

    record_type: str
    record_id: str
    field_name: str
    severity: IssueSeverity
    message: str
    suggestion: str

    def to_dict(self) -> dict:
        return {
            "record_type": self.record_type,
            "record_id": self.record_id,
            "field_name": self.field_name,
            "severity": self.severity.value,
            "message": self.message,
            "suggestion": self.suggestion,
        }


@dataclass
class ValidationResult:
    """Dataset validation results with statistics and issues.

    Attributes:
        record_counts: Number of records per section
        duplicate_identifiers: Record numbers used more than once
        all_errors: List of all error-level issues
        all_warnings: List of all warning-level issues
    """

    record_counts: dict[str, int] = field(default_factory=dict)
    duplicate_identifiers: list[str] = field(default_factory=list)
    all_errors: list[ValidationIssue] = field(default_factory=list)
    all_warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.all_errors) > 0

    @property
    def has_warnings(self) -> bool:
        return len(self.all_warnings) > 0

    def add(
        self,
        severity: IssueSeverity,
        record_type: str,
        record_id: str,
        field_name: str,
        message: str,
        suggestion: str,
    ) -> None:
        issue = ValidationIssue(record_type, record_id, field_name, severity, message, suggestion)
        if severity is IssueSeverity.ERROR:
            self.all_errors.append(issue)
        else:
            self.all_warnings.append(issue)

    def format_report(self) -> str:
        """Format validation results as human-readable report.

        Returns:
            Multi-line string with validation summary and detailed issues
        """
        lines = []
        lines.append("=" * 60)
        lines.append("DATASET VALIDATION REPORT")
        lines.append("=" * 60)
        lines.append("")

        lines.append("SUMMARY:")
        for section, count in self.record_counts.items():
            lines.append(f"  {section.capitalize()}: {count}")
        lines.append("")

        if self.duplicate_identifiers:
            lines.append(
                f"DUPLICATE IDENTIFIERS: {len(self.duplicate_identifiers)} "
                f"({', '.join(self.duplicate_identifiers[:5])}"
                f"{'...' if len(self.duplicate_identifiers) > 5 else ''})"
            )
            lines.append("")

        for title, issues in (("ERRORS", self.all_errors), ("WARNINGS", self.all_warnings)):
            if not issues:
                continue
            lines.append(f"{title} ({len(issues)}):")
            for issue in issues[:MAX_REPORTED_ISSUES]:
                lines.append(
                    f"  {issue.record_type} {issue.record_id} [{issue.field_name}]: "
                    f"{issue.message}"
                )
                lines.append(f"    → {issue.suggestion}")
            if len(issues) > MAX_REPORTED_ISSUES:
                lines.append(
                    f"  ... and {len(issues) - MAX_REPORTED_ISSUES} more {title.lower()}"
                )
            lines.append("")

        lines.append("=" * 60)
        if not self.has_errors and not self.has_warnings:
            lines.append("RESULT: ✓ All validations passed")
        elif not self.has_errors:
            lines.append("RESULT: ✓ Validation passed with warnings")
        else:
            lines.append("RESULT: ✗ Validation failed - please fix errors above")
        lines.append("=" * 60)

        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Export validation results as structured dictionary for JSON serialization."""
        return {
            "record_counts": dict(self.record_counts),
            "duplicate_identifiers": list(self.duplicate_identifiers),
            "errors": [issue.to_dict() for issue in self.all_errors],
            "warnings": [issue.to_dict() for issue in self.all_warnings],
        }


def _check_identifiers(store: ClinicalStore, result: ValidationResult) -> None:
    expected = [
        ("patient", p.id, "mrn", p.mrn, MRN_PREFIX) for p in store.patients
    ] + [
        ("appointment", a.id, "appointment_number", a.appointment_number, APPOINTMENT_PREFIX)
        for a in store.appointments
    ] + [("bill", b.id, "bill_number", b.bill_number, BILL_PREFIX) for b in store.bills]

    for visit in store.visits:
        expected.append(("visit", visit.id, "visit_number", visit.visit_number, VISIT_PREFIX))
        expected.extend(
            ("lab order", o.id, "order_number", o.order_number, LAB_ORDER_PREFIX)
            for o in visit.lab_orders
        )
        expected.extend(
            ("medication order", o.id, "order_number", o.order_number, MEDICATION_ORDER_PREFIX)
            for o in visit.medication_orders
        )
        expected.extend(
            ("radiology order", o.id, "order_number", o.order_number, RADIOLOGY_ORDER_PREFIX)
            for o in visit.radiology_orders
        )

    for record_type, record_id, field_name, value, prefix in expected:
        if not is_valid_identifier(value, prefix):
            result.add(
                IssueSeverity.ERROR,
                record_type,
                record_id,
                field_name,
                f"Malformed record number '{value}'",
                f"Use the format {prefix}-YYYY-NNNNNN (e.g., {prefix}-2024-000123)",
            )

    counts = Counter(value for *_, value, _ in expected)
    result.duplicate_identifiers = sorted(value for value, n in counts.items() if n > 1)
    for value in result.duplicate_identifiers:
        result.add(
            IssueSeverity.ERROR,
            "dataset",
            value,
            "record_number",
            f"Record number '{value}' is used {counts[value]} times",
            "Give every record a unique number",
        )


def validate_dataset(store: ClinicalStore, now: datetime) -> ValidationResult:
    """Check a loaded dataset for consistency problems.

    Args:
        store: Loaded dataset
        now: Reference time for "in the future" checks

    Returns:
        ValidationResult listing all errors and warnings
    """
    result = ValidationResult(
        record_counts={
            "patients": len(store.patients),
            "staff": len(store.staff),
            "visits": len(store.visits),
            "appointments": len(store.appointments),
            "bills": len(store.bills),
        }
    )
    patient_ids = {patient.id for patient in store.patients}
    staff_by_id = {member.id: member for member in store.staff}
    visit_ids = {visit.id for visit in store.visits}

    _check_identifiers(store, result)

    for patient in store.patients:
        if patient.date_of_birth > now.date():
            result.add(
                IssueSeverity.ERROR,
                "patient",
                patient.id,
                "date_of_birth",
                f"Date of birth {patient.date_of_birth.isoformat()} is in the future",
                "Verify the date of birth (format YYYY-MM-DD)",
            )

    for visit in store.visits:
        if visit.patient_id not in patient_ids:
            result.add(
                IssueSeverity.ERROR,
                "visit",
                visit.id,
                "patient_id",
                f"Unknown patient '{visit.patient_id}'",
                "Register the patient or correct the reference",
            )
        if visit.visit_type is VisitType.IPD and not (visit.ward and visit.bed_number):
            result.add(
                IssueSeverity.WARNING,
                "visit",
                visit.id,
                "bed_number",
                "Inpatient visit without ward or bed",
                "Assign a ward and bed number",
            )
        if visit.discharge_datetime and visit.discharge_datetime < visit.admission_datetime:
            result.add(
                IssueSeverity.ERROR,
                "visit",
                visit.id,
                "discharge_datetime",
                "Discharge precedes admission",
                "Correct the admission or discharge time",
            )
        if visit.status is VisitStatus.DISCHARGED and visit.discharge_datetime is None:
            result.add(
                IssueSeverity.WARNING,
                "visit",
                visit.id,
                "discharge_datetime",
                "Discharged visit has no discharge time",
                "Record the discharge time",
            )
        if visit.admission_datetime > now:
            result.add(
                IssueSeverity.WARNING,
                "visit",
                visit.id,
                "admission_datetime",
                f"Admission {visit.admission_datetime.isoformat()} is in the future",
                "Verify the admission time",
            )
        for role, refs in ((Role.DOCTOR, visit.assigned_doctors), (Role.NURSE, visit.assigned_nurses)):
            for ref in refs:
                member = staff_by_id.get(ref.id)
                if member is None or member.role is not role:
                    result.add(
                        IssueSeverity.WARNING,
                        "visit",
                        visit.id,
                        f"assigned_{role.value.lower()}s",
                        f"'{ref.id}' is not a known {role.label.lower()}",
                        "Add the staff member or correct the assignment",
                    )
        for order in (*visit.lab_orders, *visit.medication_orders, *visit.radiology_orders):
            if order.visit_id != visit.id:
                result.add(
                    IssueSeverity.ERROR,
                    "order",
                    order.id,
                    "visit_id",
                    f"Order belongs to visit '{order.visit_id}' but is listed under '{visit.id}'",
                    "Move the order to its visit or correct visit_id",
                )

    for appointment in store.appointments:
        if appointment.patient_id not in patient_ids:
            result.add(
                IssueSeverity.ERROR,
                "appointment",
                appointment.id,
                "patient_id",
                f"Unknown patient '{appointment.patient_id}'",
                "Register the patient or correct the reference",
            )
        doctor = staff_by_id.get(appointment.doctor_id)
        if doctor is None or doctor.role is not Role.DOCTOR:
            result.add(
                IssueSeverity.ERROR,
                "appointment",
                appointment.id,
                "doctor_id",
                f"'{appointment.doctor_id}' is not a known doctor",
                "Book the appointment with a registered doctor",
            )
        if appointment.visit_id and appointment.visit_id not in visit_ids:
            result.add(
                IssueSeverity.WARNING,
                "appointment",
                appointment.id,
                "visit_id",
                f"Linked visit '{appointment.visit_id}' does not exist",
                "Remove the link or load the visit",
            )

    for bill in store.bills:
        if bill.visit_id not in visit_ids:
            result.add(
                IssueSeverity.ERROR,
                "bill",
                bill.id,
                "visit_id",
                f"Unknown visit '{bill.visit_id}'",
                "Correct the visit reference",
            )

    logger.info(
        f"Dataset validation complete: {len(result.all_errors)} errors, "
        f"{len(result.all_warnings)} warnings"
    )
    return result
