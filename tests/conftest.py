"""
Shared pytest configuration and fixtures.

This module provides fixtures and configuration used across all test suites
(unit and integration tests).
"""

import logging
from datetime import date, datetime
from pathlib import Path

import pytest

from mediflow.data_loader import load_dataset
from mediflow.models import (
    Appointment,
    AppointmentStatus,
    AppointmentType,
    Gender,
    Patient,
    Role,
    StaffMember,
    Visit,
    VisitType,
    VitalSignReading,
)
from mediflow.store import ClinicalStore


# Reference time the fixture dataset is written against
REFERENCE_NOW = datetime(2024, 3, 15, 10, 0)


@pytest.fixture(autouse=True)
def _isolate_global_logging():
    """Restore process-wide logging state after each test.

    CLI invocations call configure_logging and set operation logger levels,
    which would otherwise leak into later tests.
    """
    import mediflow.logging_audit.logger as logger_module

    root = logging.getLogger()
    root_level = root.level
    root_handlers = list(root.handlers)
    operation_levels = {
        name: logging.getLogger(name).level
        for name in logger_module.OPERATION_LOGGERS.values()
    }
    yield
    for handler in list(root.handlers):
        if handler not in root_handlers:
            handler.close()
    root.handlers[:] = root_handlers
    root.setLevel(root_level)
    for name, level in operation_levels.items():
        logging.getLogger(name).setLevel(level)


@pytest.fixture
def project_root() -> Path:
    """
    Return the project root directory.

    Returns:
        Path: Absolute path to the project root directory.
    """
    return Path(__file__).parent.parent


@pytest.fixture
def tests_dir(project_root: Path) -> Path:
    """
    Return the tests directory path.

    Args:
        project_root: Project root directory fixture.

    Returns:
        Path: Absolute path to the tests directory.
    """
    return project_root / "tests"


@pytest.fixture
def fixtures_dir(tests_dir: Path) -> Path:
    """
    Return the test fixtures directory path.

    Args:
        tests_dir: Tests directory fixture.

    Returns:
        Path: Absolute path to the test fixtures directory.
    """
    return tests_dir / "fixtures"


@pytest.fixture
def dataset_path(fixtures_dir: Path) -> Path:
    """
    Return the path of the clinic dataset fixture.

    The dataset holds three patients, four staff, four visits, five
    appointments and one bill, written against REFERENCE_NOW.

    Returns:
        Path: Path to clinic_dataset.json.
    """
    return fixtures_dir / "clinic_dataset.json"


@pytest.fixture
def now() -> datetime:
    """Return the fixed reference time (2024-03-15 10:00)."""
    return REFERENCE_NOW


@pytest.fixture
def store(dataset_path: Path) -> ClinicalStore:
    """
    Load the clinic dataset fixture.

    Args:
        dataset_path: Dataset fixture path.

    Returns:
        ClinicalStore: Store holding every record of the fixture.
    """
    return load_dataset(dataset_path)


@pytest.fixture
def patient() -> Patient:
    """Return a minimal registered patient without allergies."""
    return Patient(
        id="PX",
        mrn="MR-2024-000100",
        first_name="Grace",
        last_name="Hopper",
        date_of_birth=date(1990, 5, 1),
        gender=Gender.FEMALE,
        phone="555-0900",
    )


@pytest.fixture
def doctor() -> StaffMember:
    """Return a doctor account."""
    return StaffMember(id="DX", first_name="Alan", last_name="Turing", role=Role.DOCTOR)


@pytest.fixture
def nurse() -> StaffMember:
    """Return a nurse account."""
    return StaffMember(id="NX", first_name="Edith", last_name="Cavell", role=Role.NURSE)


@pytest.fixture
def empty_store(patient: Patient, doctor: StaffMember, nurse: StaffMember) -> ClinicalStore:
    """
    Return a store with one patient and two staff members but no visits.

    Args:
        patient: Patient fixture.
        doctor: Doctor fixture.
        nurse: Nurse fixture.

    Returns:
        ClinicalStore: Store ready for reducer tests.
    """
    return ClinicalStore(patients=(patient,), staff=(doctor, nurse))


def _make_visit(
    visit_id: str = "VX",
    number: str = "VS-2024-000100",
    patient_id: str = "PX",
    visit_type: VisitType = VisitType.OPD,
    admitted: datetime = datetime(2024, 3, 15, 8, 0),
    **kwargs,
) -> Visit:
    """Build a visit with sensible defaults for tests."""
    return Visit(
        id=visit_id,
        visit_number=number,
        patient_id=patient_id,
        visit_type=visit_type,
        admission_datetime=admitted,
        **kwargs,
    )


def _make_reading(
    reading_id: str = "R1",
    visit_id: str = "VX",
    recorded_at: datetime = datetime(2024, 3, 15, 9, 0),
    **measurements,
) -> VitalSignReading:
    """Build a vital sign reading with only the given measurements."""
    return VitalSignReading(
        id=reading_id,
        visit_id=visit_id,
        recorded_by="NX",
        recorded_at=recorded_at,
        **measurements,
    )


def _make_appointment(
    appointment_id: str = "AX",
    number: str = "AP-2024-000100",
    day: date = date(2024, 3, 15),
    hour: int = 9,
    minute: int = 0,
    status: AppointmentStatus = AppointmentStatus.SCHEDULED,
    patient_id: str = "PX",
    doctor_id: str = "DX",
    **kwargs,
) -> Appointment:
    """Build an appointment with sensible defaults for tests."""
    return Appointment(
        id=appointment_id,
        appointment_number=number,
        patient_id=patient_id,
        doctor_id=doctor_id,
        appointment_date=day,
        appointment_time=datetime(2000, 1, 1, hour, minute).time(),
        appointment_type=AppointmentType.FOLLOW_UP,
        reason=kwargs.pop("reason", "Review"),
        status=status,
        **kwargs,
    )


@pytest.fixture
def make_visit():
    """Return a factory building visits (defaults: OPD, patient PX, 2024-03-15 08:00)."""
    return _make_visit


@pytest.fixture
def make_reading():
    """Return a factory building vital sign readings for visit VX."""
    return _make_reading


@pytest.fixture
def make_appointment():
    """Return a factory building appointments for patient PX with doctor DX."""
    return _make_appointment
