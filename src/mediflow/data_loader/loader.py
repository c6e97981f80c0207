"""Dataset loading for clinical records.

Reads the JSON seed dataset (patients, staff, visits, appointments and bills)
into a ClinicalStore, and imports patient rosters from CSV with pandas.
"""

import json
import logging
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Any, Optional, TypeVar

import pandas as pd

from mediflow.derivation.identifiers import MRN_PREFIX, IdentifierGenerator, create_generator
from mediflow.models.appointment import Appointment, AppointmentStatus, AppointmentType
from mediflow.models.billing import Bill, PaymentMethod
from mediflow.models.orders import (
    LabOrder,
    LabOrderStatus,
    LabResult,
    MedicationOrder,
    MedicationRoute,
    MedicationStatus,
    OrderPriority,
    RadiologyOrder,
    RadiologyOrderStatus,
)
from mediflow.models.patient import EmergencyContact, Gender, Patient
from mediflow.models.staff import Role, StaffMember, StaffRef
from mediflow.models.visit import DischargeSummary, Visit, VisitStatus, VisitType, VitalSignReading
from mediflow.store.state import ClinicalStore
from mediflow.utils.exceptions import RecordShapeError, ValidationError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

DATASET_SECTIONS = ("patients", "staff", "visits", "appointments", "bills")

# Patient roster CSV columns
REQUIRED_COLUMNS = ["first_name", "last_name", "date_of_birth", "gender"]
OPTIONAL_COLUMNS = [
    "id",
    "mrn",
    "phone",
    "email",
    "address",
    "city",
    "state",
    "postal_code",
    "blood_group",
    "allergies",
    "medical_history",
    "current_medications",
    "insurance_provider",
    "insurance_number",
]


# Field parsing helpers


def _require(record: dict, key: str, record_type: str) -> Any:
    value = record.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise RecordShapeError(record_type, key, "required field is missing")
    return value


def _enum(enum_cls: type[E], value: Any, record_type: str, field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise RecordShapeError(
            record_type, field_name, f"{value!r} is not one of: {allowed}"
        ) from e


def _optional_enum(
    enum_cls: type[E], record: dict, key: str, record_type: str, default: Optional[E] = None
) -> Optional[E]:
    value = record.get(key)
    if value is None:
        return default
    return _enum(enum_cls, value, record_type, key)


def _datetime(value: Any, record_type: str, field_name: str) -> datetime:
    """Parse an ISO 8601 timestamp as naive UTC when it carries an offset."""
    text = str(value)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise RecordShapeError(
            record_type, field_name, f"invalid datetime {value!r}, expected ISO 8601"
        ) from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _optional_datetime(record: dict, key: str, record_type: str) -> Optional[datetime]:
    value = record.get(key)
    return _datetime(value, record_type, key) if value else None


def _date(value: Any, record_type: str, field_name: str) -> date:
    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise RecordShapeError(
            record_type, field_name, f"invalid date {value!r}, expected YYYY-MM-DD"
        ) from e


def _time(value: Any, record_type: str, field_name: str) -> time:
    try:
        return time.fromisoformat(str(value))
    except ValueError as e:
        raise RecordShapeError(
            record_type, field_name, f"invalid time {value!r}, expected HH:MM"
        ) from e


def _duration(record: dict) -> int:
    value = record.get("duration_minutes", 30)
    try:
        minutes = int(value)
    except (TypeError, ValueError) as e:
        raise RecordShapeError(
            "appointment", "duration_minutes", f"invalid duration {value!r}"
        ) from e
    if minutes <= 0:
        raise RecordShapeError(
            "appointment", "duration_minutes", f"duration must be positive, got {minutes}"
        )
    return minutes


def _decimal(record: dict, key: str, record_type: str) -> Decimal:
    value = record.get(key, 0)
    try:
        return Decimal(str(value if value is not None else 0))
    except InvalidOperation as e:
        raise RecordShapeError(record_type, key, f"invalid amount {value!r}") from e


def _pick(record: dict, *keys: str) -> dict:
    return {key: record[key] for key in keys if record.get(key) is not None}


# Record parsers


def parse_patient(record: dict) -> Patient:
    return Patient(
        id=_require(record, "id", "patient"),
        mrn=_require(record, "mrn", "patient"),
        first_name=_require(record, "first_name", "patient"),
        last_name=_require(record, "last_name", "patient"),
        date_of_birth=_date(
            _require(record, "date_of_birth", "patient"), "patient", "date_of_birth"
        ),
        gender=_enum(Gender, _require(record, "gender", "patient"), "patient", "gender"),
        phone=record.get("phone") or "",
        address=record.get("address") or "",
        emergency_contacts=[
            EmergencyContact(
                id=_require(contact, "id", "emergency contact"),
                name=_require(contact, "name", "emergency contact"),
                relationship=_require(contact, "relationship", "emergency contact"),
                phone=_require(contact, "phone", "emergency contact"),
                alternate_phone=contact.get("alternate_phone"),
            )
            for contact in record.get("emergency_contacts", [])
        ],
        is_active=record.get("is_active", True),
        created_at=_optional_datetime(record, "created_at", "patient"),
        updated_at=_optional_datetime(record, "updated_at", "patient"),
        **_pick(
            record,
            "blood_group",
            "email",
            "city",
            "state",
            "postal_code",
            "allergies",
            "medical_history",
            "current_medications",
            "insurance_provider",
            "insurance_number",
            "created_by",
        ),
    )


def parse_staff(record: dict) -> StaffMember:
    return StaffMember(
        id=_require(record, "id", "staff"),
        first_name=_require(record, "first_name", "staff"),
        last_name=_require(record, "last_name", "staff"),
        role=_enum(Role, _require(record, "role", "staff"), "staff", "role"),
        is_active=record.get("is_active", True),
        **_pick(record, "email", "phone", "license_number", "specialization"),
    )


def _staff_ref(value: Any, staff: dict[str, StaffMember]) -> StaffRef:
    # Assignments may be a bare id or {"id": ..., "name": ...}
    if isinstance(value, str):
        ref_id, name = value, None
    else:
        ref_id, name = _require(value, "id", "staff assignment"), value.get("name")
    if name is None and ref_id in staff:
        name = staff[ref_id].full_name
    return StaffRef(id=ref_id, name=name)


def parse_vital_signs(record: dict, visit_id: str) -> VitalSignReading:
    return VitalSignReading(
        id=_require(record, "id", "vital signs"),
        visit_id=record.get("visit_id", visit_id),
        recorded_by=_require(record, "recorded_by", "vital signs"),
        recorded_at=_datetime(
            _require(record, "recorded_at", "vital signs"), "vital signs", "recorded_at"
        ),
        **_pick(
            record,
            "temperature_celsius",
            "systolic_bp",
            "diastolic_bp",
            "heart_rate",
            "respiratory_rate",
            "oxygen_saturation",
            "weight_kg",
            "height_cm",
            "notes",
            "recorded_by_name",
        ),
    )


def parse_lab_order(record: dict, visit_id: str) -> LabOrder:
    return LabOrder(
        id=_require(record, "id", "lab order"),
        order_number=_require(record, "order_number", "lab order"),
        visit_id=record.get("visit_id", visit_id),
        test_name=_require(record, "test_name", "lab order"),
        test_category=record.get("test_category", ""),
        ordered_by=_require(record, "ordered_by", "lab order"),
        ordered_at=_datetime(
            _require(record, "ordered_at", "lab order"), "lab order", "ordered_at"
        ),
        status=_optional_enum(
            LabOrderStatus, record, "status", "lab order", LabOrderStatus.PENDING
        ),
        priority=_optional_enum(
            OrderPriority, record, "priority", "lab order", OrderPriority.ROUTINE
        ),
        completed_at=_optional_datetime(record, "completed_at", "lab order"),
        results=[
            LabResult(
                id=_require(result, "id", "lab result"),
                parameter_name=_require(result, "parameter_name", "lab result"),
                result_value=str(_require(result, "result_value", "lab result")),
                is_abnormal=bool(result.get("is_abnormal", False)),
                created_at=_optional_datetime(result, "created_at", "lab result"),
                **_pick(result, "unit", "reference_range", "notes"),
            )
            for result in record.get("results", [])
        ],
        **_pick(record, "clinical_notes", "ordered_by_name", "technician", "technician_name"),
    )


def parse_medication_order(record: dict, visit_id: str) -> MedicationOrder:
    return MedicationOrder(
        id=_require(record, "id", "medication order"),
        order_number=_require(record, "order_number", "medication order"),
        visit_id=record.get("visit_id", visit_id),
        medication_name=_require(record, "medication_name", "medication order"),
        dosage=_require(record, "dosage", "medication order"),
        route=_enum(
            MedicationRoute,
            _require(record, "route", "medication order"),
            "medication order",
            "route",
        ),
        frequency=_require(record, "frequency", "medication order"),
        duration_days=int(record.get("duration_days", 0)),
        prescribed_by=_require(record, "prescribed_by", "medication order"),
        prescribed_at=_datetime(
            _require(record, "prescribed_at", "medication order"),
            "medication order",
            "prescribed_at",
        ),
        status=_optional_enum(
            MedicationStatus, record, "status", "medication order", MedicationStatus.ACTIVE
        ),
        dispensed_at=_optional_datetime(record, "dispensed_at", "medication order"),
        **_pick(
            record, "instructions", "prescribed_by_name", "dispensed_by", "dispensed_by_name"
        ),
    )


def parse_radiology_order(record: dict, visit_id: str) -> RadiologyOrder:
    return RadiologyOrder(
        id=_require(record, "id", "radiology order"),
        order_number=_require(record, "order_number", "radiology order"),
        visit_id=record.get("visit_id", visit_id),
        study_type=_require(record, "study_type", "radiology order"),
        body_part=_require(record, "body_part", "radiology order"),
        clinical_indication=record.get("clinical_indication", ""),
        ordered_by=_require(record, "ordered_by", "radiology order"),
        ordered_at=_datetime(
            _require(record, "ordered_at", "radiology order"),
            "radiology order",
            "ordered_at",
        ),
        status=_optional_enum(
            RadiologyOrderStatus,
            record,
            "status",
            "radiology order",
            RadiologyOrderStatus.PENDING,
        ),
        priority=_optional_enum(
            OrderPriority, record, "priority", "radiology order", OrderPriority.ROUTINE
        ),
        scheduled_at=_optional_datetime(record, "scheduled_at", "radiology order"),
        completed_at=_optional_datetime(record, "completed_at", "radiology order"),
        **_pick(
            record, "report", "image_url", "ordered_by_name", "radiologist", "radiologist_name"
        ),
    )


def _parse_discharge_summary(record: dict, visit_id: str) -> DischargeSummary:
    return DischargeSummary(
        id=_require(record, "id", "discharge summary"),
        visit_id=record.get("visit_id", visit_id),
        admission_date=_datetime(
            _require(record, "admission_date", "discharge summary"),
            "discharge summary",
            "admission_date",
        ),
        discharge_date=_datetime(
            _require(record, "discharge_date", "discharge summary"),
            "discharge summary",
            "discharge_date",
        ),
        final_diagnosis=_require(record, "final_diagnosis", "discharge summary"),
        hospital_course=record.get("hospital_course", ""),
        discharge_medications=record.get("discharge_medications", ""),
        follow_up_instructions=record.get("follow_up_instructions", ""),
        prepared_by=_require(record, "prepared_by", "discharge summary"),
        **_pick(
            record,
            "procedures_performed",
            "diet_restrictions",
            "activity_restrictions",
            "prepared_by_name",
        ),
    )


def parse_visit(
    record: dict, patients: dict[str, Patient], staff: dict[str, StaffMember]
) -> Visit:
    """Parse a visit with its vitals, orders and discharge summary.

    The patient summary is embedded from ``patients`` when the visit
    references a known patient.
    """
    visit_id = _require(record, "id", "visit")
    patient_id = _require(record, "patient_id", "visit")
    patient = patients.get(patient_id)

    return Visit(
        id=visit_id,
        visit_number=_require(record, "visit_number", "visit"),
        patient_id=patient_id,
        visit_type=_enum(
            VisitType, _require(record, "visit_type", "visit"), "visit", "visit_type"
        ),
        admission_datetime=_datetime(
            _require(record, "admission_datetime", "visit"), "visit", "admission_datetime"
        ),
        chief_complaint=record.get("chief_complaint", ""),
        patient=patient.summary() if patient else None,
        discharge_datetime=_optional_datetime(record, "discharge_datetime", "visit"),
        status=_optional_enum(VisitStatus, record, "status", "visit", VisitStatus.ACTIVE),
        assigned_doctors=[_staff_ref(v, staff) for v in record.get("assigned_doctors", [])],
        assigned_nurses=[_staff_ref(v, staff) for v in record.get("assigned_nurses", [])],
        vital_signs=[parse_vital_signs(r, visit_id) for r in record.get("vital_signs", [])],
        lab_orders=[parse_lab_order(r, visit_id) for r in record.get("lab_orders", [])],
        medication_orders=[
            parse_medication_order(r, visit_id) for r in record.get("medication_orders", [])
        ],
        radiology_orders=[
            parse_radiology_order(r, visit_id) for r in record.get("radiology_orders", [])
        ],
        discharge_summary=_parse_discharge_summary(record["discharge_summary"], visit_id)
        if record.get("discharge_summary")
        else None,
        **_pick(
            record,
            "history_of_present_illness",
            "physical_examination",
            "diagnosis",
            "treatment_plan",
            "bed_number",
            "ward",
            "created_by",
        ),
    )


def parse_appointment(
    record: dict, patients: dict[str, Patient], staff: dict[str, StaffMember]
) -> Appointment:
    patient = patients.get(record.get("patient_id"))
    doctor = staff.get(record.get("doctor_id"))
    return Appointment(
        id=_require(record, "id", "appointment"),
        appointment_number=_require(record, "appointment_number", "appointment"),
        patient_id=_require(record, "patient_id", "appointment"),
        doctor_id=_require(record, "doctor_id", "appointment"),
        appointment_date=_date(
            _require(record, "appointment_date", "appointment"),
            "appointment",
            "appointment_date",
        ),
        appointment_time=_time(
            _require(record, "appointment_time", "appointment"),
            "appointment",
            "appointment_time",
        ),
        appointment_type=_enum(
            AppointmentType,
            _require(record, "appointment_type", "appointment"),
            "appointment",
            "appointment_type",
        ),
        reason=record.get("reason", ""),
        duration_minutes=_duration(record),
        status=_optional_enum(
            AppointmentStatus, record, "status", "appointment", AppointmentStatus.SCHEDULED
        ),
        patient=patient.summary() if patient else None,
        doctor_name=record.get("doctor_name") or (doctor.full_name if doctor else None),
        doctor_specialization=record.get("doctor_specialization")
        or (doctor.specialization if doctor else None),
        cancelled_at=_optional_datetime(record, "cancelled_at", "appointment"),
        **_pick(
            record, "notes", "visit_id", "visit_number", "created_by", "cancellation_reason"
        ),
    )


def parse_bill(record: dict) -> Bill:
    return Bill(
        id=_require(record, "id", "bill"),
        bill_number=_require(record, "bill_number", "bill"),
        visit_id=_require(record, "visit_id", "bill"),
        patient_id=_require(record, "patient_id", "bill"),
        consultation_fee=_decimal(record, "consultation_fee", "bill"),
        lab_charges=_decimal(record, "lab_charges", "bill"),
        radiology_charges=_decimal(record, "radiology_charges", "bill"),
        medication_charges=_decimal(record, "medication_charges", "bill"),
        bed_charges=_decimal(record, "bed_charges", "bill"),
        procedure_charges=_decimal(record, "procedure_charges", "bill"),
        other_charges=_decimal(record, "other_charges", "bill"),
        tax_amount=_decimal(record, "tax_amount", "bill"),
        discount_amount=_decimal(record, "discount_amount", "bill"),
        paid_amount=_decimal(record, "paid_amount", "bill"),
        payment_method=_optional_enum(PaymentMethod, record, "payment_method", "bill"),
        created_at=_optional_datetime(record, "created_at", "bill"),
        **_pick(record, "patient_name", "notes"),
    )


def build_store(data: dict) -> ClinicalStore:
    """Build a ClinicalStore from an already-decoded dataset dictionary.

    Raises:
        RecordShapeError: If a record is missing a required field or has an
            invalid value
        ValidationError: If the top-level structure is not an object
    """
    if not isinstance(data, dict):
        raise ValidationError("Dataset must be a JSON object with record sections")

    unknown = [key for key in data if key not in DATASET_SECTIONS]
    if unknown:
        logger.warning(f"Dataset contains unknown sections that will be ignored: {', '.join(unknown)}")

    patients = [parse_patient(r) for r in data.get("patients", [])]
    staff = [parse_staff(r) for r in data.get("staff", [])]
    patients_by_id = {patient.id: patient for patient in patients}
    staff_by_id = {member.id: member for member in staff}

    store = ClinicalStore(
        patients=tuple(patients),
        staff=tuple(staff),
        visits=tuple(
            parse_visit(r, patients_by_id, staff_by_id) for r in data.get("visits", [])
        ),
        appointments=tuple(
            parse_appointment(r, patients_by_id, staff_by_id)
            for r in data.get("appointments", [])
        ),
        bills=tuple(parse_bill(r) for r in data.get("bills", [])),
    )
    logger.info(
        f"Loaded {len(store.patients)} patients, {len(store.staff)} staff, "
        f"{len(store.visits)} visits, {len(store.appointments)} appointments, "
        f"{len(store.bills)} bills"
    )
    return store


def load_dataset(file_path: Path) -> ClinicalStore:
    """Load a JSON seed dataset into a ClinicalStore.

    Args:
        file_path: Path to the dataset JSON file

    Returns:
        ClinicalStore holding every record in the file

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file is not valid JSON
        RecordShapeError: If a record is malformed
    """
    logger.info(f"Loading dataset from {file_path}")
    if not file_path.exists():
        raise FileNotFoundError(f"Dataset file not found: {file_path}")

    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(
            f"Invalid JSON in dataset file {file_path}. "
            f"Error at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e

    return build_store(data)


def _cell(row: pd.Series, column: str) -> Optional[str]:
    if column not in row.index or pd.isna(row[column]):
        return None
    value = str(row[column]).strip()
    return value or None


def load_patients_csv(
    file_path: Path, generator: Optional[IdentifierGenerator] = None
) -> list[Patient]:
    """Import a patient roster from CSV.

    Rows without an MRN get one from ``generator`` (collision-checked
    random by default); rows without an id use their MRN as id. All row
    errors are collected before raising.

    Args:
        file_path: Path to a UTF-8 CSV file
        generator: Identifier strategy for missing MRNs

    Returns:
        Patients in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If columns are missing or any row is invalid
    """
    logger.info(f"Loading patient CSV from {file_path}")
    if not file_path.exists():
        raise FileNotFoundError(f"CSV file not found: {file_path}")

    try:
        df = pd.read_csv(file_path, encoding="utf-8", dtype=str)
    except Exception as e:
        raise ValidationError(
            f"Failed to read CSV file {file_path}. Ensure file is valid CSV with UTF-8 encoding. Error: {e}"
        ) from e

    missing_columns = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_columns:
        raise ValidationError(
            f"Missing required columns: {', '.join(missing_columns)}. "
            f"Required columns are: {', '.join(REQUIRED_COLUMNS)}"
        )

    unknown_columns = [
        col for col in df.columns if col not in REQUIRED_COLUMNS + OPTIONAL_COLUMNS
    ]
    if unknown_columns:
        logger.warning(
            f"CSV contains unknown columns that will be ignored: {', '.join(unknown_columns)}"
        )

    existing_mrns = [mrn for mrn in df.get("mrn", pd.Series(dtype=str)).dropna()]
    generator = generator or create_generator("checked", existing=existing_mrns)

    patients: list[Patient] = []
    errors: list[str] = []

    for idx, row in df.iterrows():
        row_num = idx + 2  # +1 for header, +1 for 1-indexed
        missing = [col for col in REQUIRED_COLUMNS if _cell(row, col) is None]
        if missing:
            errors.append(f"Row {row_num}: Missing required field(s): {', '.join(missing)}")
            continue

        try:
            dob = date.fromisoformat(_cell(row, "date_of_birth"))
        except ValueError:
            errors.append(
                f"Row {row_num}: Invalid date_of_birth '{_cell(row, 'date_of_birth')}'. "
                "Expected format: YYYY-MM-DD"
            )
            continue

        gender_value = _cell(row, "gender").upper()
        if gender_value not in [g.value for g in Gender]:
            errors.append(
                f"Row {row_num}: Invalid gender '{_cell(row, 'gender')}'. "
                f"Must be one of: {', '.join(g.value for g in Gender)} (case-insensitive)"
            )
            continue

        mrn = _cell(row, "mrn")
        if mrn is None:
            mrn = generator.generate(MRN_PREFIX)
            logger.info(f"Generated MRN {mrn} for row {row_num}")

        optional = {
            column: _cell(row, column)
            for column in OPTIONAL_COLUMNS
            if column not in ("id", "mrn", "phone", "address") and _cell(row, column)
        }
        patients.append(
            Patient(
                id=_cell(row, "id") or mrn,
                mrn=mrn,
                first_name=_cell(row, "first_name"),
                last_name=_cell(row, "last_name"),
                date_of_birth=dob,
                gender=Gender(gender_value),
                phone=_cell(row, "phone") or "",
                address=_cell(row, "address") or "",
                **optional,
            )
        )

    if errors:
        raise ValidationError(
            f"Found {len(errors)} validation error(s) in CSV:\n  - " + "\n  - ".join(errors)
        )

    logger.info(f"Successfully parsed {len(patients)} patient record(s)")
    return patients
