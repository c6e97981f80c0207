"""Clinical summary of a single patient."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from mediflow.derivation.vitals import (
    DEFAULT_REFERENCE_RANGES,
    VitalEvaluation,
    VitalReferenceRanges,
    evaluate,
    latest_reading_across,
    time_since,
)
from mediflow.models.orders import LabOrder, LabOrderStatus, MedicationOrder, MedicationStatus
from mediflow.models.patient import Patient
from mediflow.models.visit import Visit, VitalSignReading

RECENT_VISIT_LIMIT = 5


class AlertLevel(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class PatientClinicalSummary:
    """Summary panel for one patient.

    Attributes:
        patient: The patient
        alert_level: HIGH when allergies are recorded, MEDIUM with an active
                     visit, LOW otherwise
        active_visits: Visits with status ACTIVE
        recent_visits: First five visits in the order supplied
        latest_vitals: Latest reading across all visits, if any
        latest_vitals_evaluation: Evaluation of ``latest_vitals``
        latest_vitals_age: "Never" or elapsed time such as "3h ago"
        active_medications: ACTIVE medication orders of active visits
        pending_labs: PENDING or IN_PROGRESS lab orders of active visits
    """

    patient: Patient
    alert_level: AlertLevel
    active_visits: list[Visit] = field(default_factory=list)
    recent_visits: list[Visit] = field(default_factory=list)
    latest_vitals: Optional[VitalSignReading] = None
    latest_vitals_evaluation: Optional[VitalEvaluation] = None
    latest_vitals_age: str = "Never"
    active_medications: list[MedicationOrder] = field(default_factory=list)
    pending_labs: list[LabOrder] = field(default_factory=list)

    @property
    def alerts(self) -> list[str]:
        messages = []
        if self.patient.allergies:
            messages.append(f"Known Allergies: {self.patient.allergies}")
        if self.active_visits:
            messages.append(f"{len(self.active_visits)} active visit(s)")
        if self.pending_labs:
            messages.append(f"{len(self.pending_labs)} pending lab order(s)")
        return messages

    def to_dict(self) -> dict:
        evaluation = self.latest_vitals_evaluation
        return {
            "patient": {
                "id": self.patient.id,
                "mrn": self.patient.mrn,
                "name": self.patient.full_name,
            },
            "alert_level": self.alert_level.value,
            "alerts": self.alerts,
            "active_visits": [visit.visit_number for visit in self.active_visits],
            "recent_visits": [visit.visit_number for visit in self.recent_visits],
            "latest_vitals_age": self.latest_vitals_age,
            "latest_vitals_abnormal": sorted(flag.value for flag in evaluation.flags)
            if evaluation
            else [],
            "bmi": evaluation.bmi if evaluation else None,
            "active_medications": [
                f"{order.medication_name} {order.dosage}" for order in self.active_medications
            ],
            "pending_labs": [order.test_name for order in self.pending_labs],
        }


def summarize_patient(
    patient: Patient,
    visits: Iterable[Visit],
    now: datetime,
    ranges: VitalReferenceRanges = DEFAULT_REFERENCE_RANGES,
) -> PatientClinicalSummary:
    """Build the clinical summary for ``patient``.

    Args:
        patient: Patient to summarise
        visits: The patient's visits, newest first
        now: Reference time for the vitals age
        ranges: Reference ranges for evaluating the latest vitals

    Returns:
        PatientClinicalSummary
    """
    visits = list(visits)
    active = [visit for visit in visits if visit.is_active]

    latest = latest_reading_across(visits)

    if patient.allergies:
        alert_level = AlertLevel.HIGH
    elif active:
        alert_level = AlertLevel.MEDIUM
    else:
        alert_level = AlertLevel.LOW

    return PatientClinicalSummary(
        patient=patient,
        alert_level=alert_level,
        active_visits=active,
        recent_visits=visits[:RECENT_VISIT_LIMIT],
        latest_vitals=latest,
        latest_vitals_evaluation=evaluate(latest, ranges) if latest else None,
        latest_vitals_age=time_since(latest, now),
        active_medications=[
            order
            for visit in active
            for order in visit.medication_orders
            if order.status is MedicationStatus.ACTIVE
        ],
        pending_labs=[
            order
            for visit in active
            for order in visit.lab_orders
            if order.status in (LabOrderStatus.PENDING, LabOrderStatus.IN_PROGRESS)
        ],
    )
