"""Error handling examples for clinical record operations.

This module demonstrates the errors raised by the store reducers and the
loaders: forward-only status changes, duplicate records and slot clashes,
malformed dataset records and collected CSV row errors.
"""

import json
import logging
import tempfile
from datetime import date, datetime, time
from pathlib import Path

from mediflow.data_loader import build_store, load_dataset, load_patients_csv
from mediflow.models import Appointment, AppointmentType, LabOrderStatus
from mediflow.store import advance_lab_order, book_appointment, discharge_visit
from mediflow.utils.exceptions import (
    DuplicateRecordError,
    InvalidTransitionError,
    MediflowError,
    RecordNotFoundError,
    RecordShapeError,
    ValidationError,
)

# Configure logging to see audit events as they happen
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

DATASET = Path(__file__).parent / "seed_dataset.json"


def example_1_forward_only_transitions():
    """Example 1: Status changes can only move forward.

    A completed lab order cannot return to PENDING, and a discharged visit
    cannot be discharged again.
    """
    print("=" * 80)
    print("EXAMPLE 1: Forward-only Status Changes")
    print("=" * 80)
    print()

    store = load_dataset(DATASET)

    try:
        advance_lab_order(store, "V1", "LO1", LabOrderStatus.PENDING)
    except InvalidTransitionError as e:
        print(f"Rejected: {e}")

    try:
        discharge_visit(store, "V4", at=datetime(2024, 3, 15, 10, 0))
    except InvalidTransitionError as e:
        print(f"Rejected: {e}")

    try:
        discharge_visit(store, "V9", at=datetime(2024, 3, 15, 10, 0))
    except RecordNotFoundError as e:
        print(f"Rejected: {e}")
    print()


def example_2_slot_conflicts():
    """Example 2: A doctor's slot can hold only one live booking."""
    print("=" * 80)
    print("EXAMPLE 2: Slot Conflicts")
    print("=" * 80)
    print()

    store = load_dataset(DATASET)
    clash = Appointment(
        id="A9",
        appointment_number="AP-2024-000099",
        patient_id="P1",
        doctor_id="D1",
        appointment_date=date(2024, 3, 15),
        appointment_time=time(9, 0),
        appointment_type=AppointmentType.CHECK_UP,
        reason="Annual check",
    )

    try:
        book_appointment(store, clash)
    except DuplicateRecordError as e:
        print(f"Rejected: {e}")
    print()


def example_3_malformed_dataset():
    """Example 3: Malformed records name the record type and field."""
    print("=" * 80)
    print("EXAMPLE 3: Malformed Dataset Records")
    print("=" * 80)
    print()

    data = json.loads(DATASET.read_text(encoding="utf-8"))
    data["visits"][0]["admission_datetime"] = "yesterday"

    try:
        build_store(data)
    except RecordShapeError as e:
        print(f"Record type: {e.record_type}")
        print(f"Field: {e.field_name}")
        print(f"Message: {e}")
    print()


def example_4_csv_row_errors():
    """Example 4: CSV import reports every bad row at once."""
    print("=" * 80)
    print("EXAMPLE 4: CSV Row Errors")
    print("=" * 80)
    print()

    with tempfile.TemporaryDirectory() as tmp:
        csv_path = Path(tmp) / "patients.csv"
        csv_path.write_text(
            "first_name,last_name,date_of_birth,gender\n"
            "Ngozi,Eze,03/11/1992,F\n"
            ",Adeyemi,1988-02-14,M\n",
            encoding="utf-8",
        )

        try:
            load_patients_csv(csv_path)
        except ValidationError as e:
            print(e)
        except MediflowError as e:
            logger.error(f"Unexpected error: {e}")
            raise
    print()


if __name__ == "__main__":
    example_1_forward_only_transitions()
    example_2_slot_conflicts()
    example_3_malformed_dataset()
    example_4_csv_row_errors()
