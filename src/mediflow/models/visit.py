"""Visit (encounter) data models.

This module defines the Visit dataclass with its owned collections: vital
sign readings, clinical orders and the optional discharge summary.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from mediflow.models.orders import LabOrder, MedicationOrder, RadiologyOrder
from mediflow.models.patient import PatientSummary
from mediflow.models.staff import StaffRef
from mediflow.utils.exceptions import RecordShapeError


class VisitType(Enum):
    """Visit type: outpatient (OPD), inpatient (IPD) or emergency."""

    OPD = "OPD"
    IPD = "IPD"
    EMERGENCY = "EMERGENCY"


class VisitStatus(Enum):
    """Visit status. DISCHARGED and CANCELLED are terminal."""

    ACTIVE = "ACTIVE"
    DISCHARGED = "DISCHARGED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class VitalSignReading:
    """One set of vital sign measurements.

    Readings are append-only per visit. Every measurement is optional; BMI is
    derived from weight and height by the vitals evaluator and never stored.

    Attributes:
        id: Reading identifier
        visit_id: Owning visit
        recorded_by: Staff id of the recorder
        recorded_at: When the reading was taken
        temperature_celsius: Body temperature (°C)
        systolic_bp: Systolic blood pressure (mmHg)
        diastolic_bp: Diastolic blood pressure (mmHg)
        heart_rate: Heart rate (bpm)
        respiratory_rate: Respiratory rate (breaths/min)
        oxygen_saturation: SpO2 (%)
        weight_kg: Weight (kg)
        height_cm: Height (cm)
    """

    id: str
    visit_id: str
    recorded_by: str
    recorded_at: datetime
    temperature_celsius: Optional[float] = None
    systolic_bp: Optional[int] = None
    diastolic_bp: Optional[int] = None
    heart_rate: Optional[int] = None
    respiratory_rate: Optional[int] = None
    oxygen_saturation: Optional[int] = None
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    notes: Optional[str] = None
    recorded_by_name: Optional[str] = None


@dataclass
class DischargeSummary:
    """Discharge summary prepared when an inpatient leaves."""

    id: str
    visit_id: str
    admission_date: datetime
    discharge_date: datetime
    final_diagnosis: str
    hospital_course: str
    discharge_medications: str
    follow_up_instructions: str
    prepared_by: str
    procedures_performed: Optional[str] = None
    diet_restrictions: Optional[str] = None
    activity_restrictions: Optional[str] = None
    prepared_by_name: Optional[str] = None


@dataclass
class Visit:
    """Patient visit (VS-<year>-<6 digits>).

    A visit belongs to exactly one patient. Its status only moves forward:
    ACTIVE to DISCHARGED or CANCELLED.

    Attributes:
        id: Unique visit identifier
        visit_number: Human-readable visit number
        patient_id: Owning patient (required)
        visit_type: OPD, IPD or EMERGENCY
        admission_datetime: Admission / registration timestamp
        patient: Embedded patient details used for display and search
        status: Visit status
        assigned_doctors: Doctors assigned to the visit, in assignment order
        assigned_nurses: Nurses assigned to the visit, in assignment order
        vital_signs: Readings in recording order
    """

    id: str
    visit_number: str
    patient_id: str
    visit_type: VisitType
    admission_datetime: datetime
    chief_complaint: str = ""
    patient: Optional[PatientSummary] = None
    discharge_datetime: Optional[datetime] = None
    history_of_present_illness: Optional[str] = None
    physical_examination: Optional[str] = None
    diagnosis: Optional[str] = None
    treatment_plan: Optional[str] = None
    bed_number: Optional[str] = None
    ward: Optional[str] = None
    status: VisitStatus = VisitStatus.ACTIVE
    assigned_doctors: list[StaffRef] = field(default_factory=list)
    assigned_nurses: list[StaffRef] = field(default_factory=list)
    vital_signs: list[VitalSignReading] = field(default_factory=list)
    lab_orders: list[LabOrder] = field(default_factory=list)
    medication_orders: list[MedicationOrder] = field(default_factory=list)
    radiology_orders: list[RadiologyOrder] = field(default_factory=list)
    discharge_summary: Optional[DischargeSummary] = None
    created_by: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.patient_id:
            raise RecordShapeError("visit", "patient_id", "owning patient reference is required")
        if not self.visit_number:
            raise RecordShapeError("visit", "visit_number", "visit number is required")

    def duration_days(self, now: datetime) -> int:
        """Whole days between admission and discharge (or ``now`` while open)."""
        end = self.discharge_datetime or now
        return (end - self.admission_datetime).days

    @property
    def is_active(self) -> bool:
        return self.status is VisitStatus.ACTIVE
