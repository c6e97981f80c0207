"""Filter and sort engine for visits, appointments, patients and orders.

Criteria are independent predicates combined with logical AND. Every
function is pure: inputs are never mutated and repeated calls with the same
arguments return equal results. Date buckets compare calendar days against
a caller-supplied ``now`` so results never depend on the wall clock.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from mediflow.derivation.orders import OrderEntry, StatusBucket
from mediflow.derivation.vitals import (
    DEFAULT_REFERENCE_RANGES,
    VitalReferenceRanges,
    is_reading_abnormal,
    latest_reading,
)
from mediflow.models.appointment import Appointment, AppointmentStatus
from mediflow.models.patient import Patient, PatientSummary
from mediflow.models.visit import Visit, VisitStatus, VisitType

T = TypeVar("T")


class DateBucket(Enum):
    """Relative day windows.

    THIS_WEEK covers today through today + 7 days; NEXT_WEEK covers the
    seven days after that.
    """

    ALL = "ALL"
    TODAY = "TODAY"
    TOMORROW = "TOMORROW"
    THIS_WEEK = "THIS_WEEK"
    NEXT_WEEK = "NEXT_WEEK"


class OrderStatusFilter(Enum):
    ALL = "all"
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


def in_date_bucket(day: date, bucket: DateBucket, now: datetime) -> bool:
    """Check whether ``day`` falls in ``bucket`` relative to ``now`` (day granularity)."""
    today = now.date()
    if bucket is DateBucket.ALL:
        return True
    if bucket is DateBucket.TODAY:
        return day == today
    if bucket is DateBucket.TOMORROW:
        return day == today + timedelta(days=1)
    if bucket is DateBucket.THIS_WEEK:
        return today <= day <= today + timedelta(days=7)
    if bucket is DateBucket.NEXT_WEEK:
        return today + timedelta(days=7) < day <= today + timedelta(days=14)
    raise ValueError(f"Unknown date bucket: {bucket}")


def matches_search(term: Optional[str], fields: Iterable[Optional[str]]) -> bool:
    """Case-insensitive substring match of ``term`` against ANY of ``fields``.

    An empty or missing term matches everything; missing fields never match.
    """
    if not term:
        return True
    needle = term.lower()
    return any(value is not None and needle in value.lower() for value in fields)


def _patient_fields(patient: Optional[PatientSummary]) -> list[Optional[str]]:
    if patient is None:
        return []
    return [patient.first_name, patient.last_name, patient.full_name, patient.mrn]


def _apply(items: Iterable[T], predicates: Sequence[Callable[[T], bool]]) -> list[T]:
    return [item for item in items if all(predicate(item) for predicate in predicates)]


@dataclass(frozen=True)
class VisitCriteria:
    """Visit filter criteria. ``None`` (or ALL / empty) disables a criterion.

    Attributes:
        status: Exact status match
        visit_type: Exact visit type match
        date_bucket: Admission day window
        search: Free-text term (visit number, patient name, MRN,
                chief complaint, diagnosis)
        abnormal_vitals_only: Keep only visits whose latest reading is abnormal
    """

    status: Optional[VisitStatus] = None
    visit_type: Optional[VisitType] = None
    date_bucket: DateBucket = DateBucket.ALL
    search: Optional[str] = None
    abnormal_vitals_only: bool = False


def visit_search_fields(visit: Visit) -> list[Optional[str]]:
    return [
        visit.visit_number,
        *_patient_fields(visit.patient),
        visit.chief_complaint,
        visit.diagnosis,
    ]


def filter_visits(
    visits: Iterable[Visit],
    criteria: VisitCriteria,
    now: datetime,
    ranges: VitalReferenceRanges = DEFAULT_REFERENCE_RANGES,
) -> list[Visit]:
    """Filter visits by ``criteria``, keeping the caller's order.

    Args:
        visits: Visits to filter
        criteria: Filter criteria (AND-combined)
        now: Reference time for date buckets
        ranges: Reference ranges for the abnormal-vitals criterion

    Returns:
        Matching visits in input order
    """
    predicates: list[Callable[[Visit], bool]] = []
    if criteria.status is not None:
        predicates.append(lambda v: v.status is criteria.status)
    if criteria.visit_type is not None:
        predicates.append(lambda v: v.visit_type is criteria.visit_type)
    if criteria.date_bucket is not DateBucket.ALL:
        predicates.append(
            lambda v: in_date_bucket(v.admission_datetime.date(), criteria.date_bucket, now)
        )
    if criteria.abnormal_vitals_only:
        predicates.append(lambda v: is_reading_abnormal(latest_reading(v), ranges))
    if criteria.search:
        predicates.append(lambda v: matches_search(criteria.search, visit_search_fields(v)))
    return _apply(visits, predicates)


@dataclass(frozen=True)
class AppointmentCriteria:
    """Appointment filter criteria. ``None`` (or ALL / empty) disables a criterion.

    Attributes:
        status: Exact status match
        doctor_id: Exact doctor match
        date_bucket: Appointment day window
        search: Free-text term (appointment number, patient name, MRN,
                doctor name, reason)
    """

    status: Optional[AppointmentStatus] = None
    doctor_id: Optional[str] = None
    date_bucket: DateBucket = DateBucket.ALL
    search: Optional[str] = None


def appointment_search_fields(appointment: Appointment) -> list[Optional[str]]:
    patient = appointment.patient
    return [
        appointment.appointment_number,
        patient.first_name if patient else None,
        patient.last_name if patient else None,
        patient.mrn if patient else None,
        appointment.doctor_name,
        appointment.reason,
    ]


def sort_appointments(appointments: Iterable[Appointment]) -> list[Appointment]:
    """Ascending by (date, time); equal keys keep their input order."""
    return sorted(appointments, key=lambda a: (a.appointment_date, a.appointment_time))


def filter_appointments(
    appointments: Iterable[Appointment], criteria: AppointmentCriteria, now: datetime
) -> list[Appointment]:
    """Filter appointments by ``criteria`` and sort them by (date, time).

    Args:
        appointments: Appointments to filter
        criteria: Filter criteria (AND-combined)
        now: Reference time for date buckets

    Returns:
        Matching appointments, earliest first
    """
    predicates: list[Callable[[Appointment], bool]] = []
    if criteria.status is not None:
        predicates.append(lambda a: a.status is criteria.status)
    if criteria.doctor_id is not None:
        predicates.append(lambda a: a.doctor_id == criteria.doctor_id)
    if criteria.date_bucket is not DateBucket.ALL:
        predicates.append(
            lambda a: in_date_bucket(a.appointment_date, criteria.date_bucket, now)
        )
    if criteria.search:
        predicates.append(
            lambda a: matches_search(criteria.search, appointment_search_fields(a))
        )
    return sort_appointments(_apply(appointments, predicates))


def filter_patients(
    patients: Iterable[Patient], search: Optional[str] = None, include_inactive: bool = False
) -> list[Patient]:
    """Filter patients by name, MRN or phone; inactive patients hidden by default."""
    return [
        patient
        for patient in patients
        if (include_inactive or patient.is_active)
        and matches_search(
            search,
            [patient.first_name, patient.last_name, patient.full_name, patient.mrn, patient.phone],
        )
    ]


_ORDER_FILTER_BUCKETS = {
    OrderStatusFilter.PENDING: StatusBucket.PENDING,
    OrderStatusFilter.IN_PROGRESS: StatusBucket.IN_PROGRESS,
    OrderStatusFilter.COMPLETED: StatusBucket.COMPLETED,
}


def filter_orders(
    entries: Iterable[OrderEntry], status_filter: OrderStatusFilter = OrderStatusFilter.ALL
) -> list[OrderEntry]:
    """Filter order entries by status bucket, keeping input order.

    Active medications count as pending until dispensed.
    """
    if status_filter is OrderStatusFilter.ALL:
        return list(entries)
    bucket = _ORDER_FILTER_BUCKETS[status_filter]
    return [entry for entry in entries if entry.bucket is bucket]
