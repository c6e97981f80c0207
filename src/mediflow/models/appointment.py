"""Appointment data model."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional

from mediflow.models.patient import PatientSummary


class AppointmentType(Enum):
    NEW_CONSULTATION = "NEW_CONSULTATION"
    FOLLOW_UP = "FOLLOW_UP"
    PROCEDURE = "PROCEDURE"
    CHECK_UP = "CHECK_UP"


class AppointmentStatus(Enum):
    """Appointment status.

    Forward-only: SCHEDULED, CONFIRMED, CHECKED_IN, IN_PROGRESS, COMPLETED,
    with CANCELLED and NO_SHOW as terminal side branches.
    """

    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


@dataclass
class Appointment:
    """Scheduled appointment (AP-<year>-<6 digits>).

    Attributes:
        id: Unique appointment identifier
        appointment_number: Human-readable appointment number
        patient_id: Patient reference
        doctor_id: Doctor reference
        appointment_date: Scheduled day
        appointment_time: Scheduled start time
        duration_minutes: Booked duration
        appointment_type: Consultation type
        reason: Reason for visit
        status: Appointment status
        patient: Embedded patient details used for display and search
        doctor_name: Doctor display name (optional)
        visit_id: Visit created from this appointment (optional)
    """

    id: str
    appointment_number: str
    patient_id: str
    doctor_id: str
    appointment_date: date
    appointment_time: time
    appointment_type: AppointmentType
    reason: str
    duration_minutes: int = 30
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    patient: Optional[PatientSummary] = None
    doctor_name: Optional[str] = None
    doctor_specialization: Optional[str] = None
    notes: Optional[str] = None
    visit_id: Optional[str] = None
    visit_number: Optional[str] = None
    created_by: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None

    @property
    def scheduled_at(self) -> datetime:
        return datetime.combine(self.appointment_date, self.appointment_time)

    @property
    def ends_at(self) -> datetime:
        return self.scheduled_at + timedelta(minutes=self.duration_minutes)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Check whether the booking intersects the half-open window [start, end)."""
        return self.scheduled_at < end and start < self.ends_at

    @property
    def occupies_slot(self) -> bool:
        return self.status not in (AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW)
