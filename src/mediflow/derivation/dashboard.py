"""Dashboard statistics aggregation.

Derives the KPI tiles and panels shown on the landing dashboard from the
patient and visit collections. "Today" is the calendar day of ``now``.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from mediflow.derivation.orders import outstanding_lab_orders
from mediflow.models.appointment import Appointment, AppointmentStatus
from mediflow.models.patient import Patient
from mediflow.models.visit import Visit, VisitStatus, VisitType


@dataclass(frozen=True)
class DashboardTile:
    label: str
    value: str
    detail: str


@dataclass(frozen=True)
class DashboardStats:
    """Dashboard KPIs.

    Attributes:
        total_patients: Number of patients passed in
        active_visits: Visits with status ACTIVE
        visits_today: Visits admitted on the day of ``now``
        pending_lab_orders: Lab orders still PENDING or IN_PROGRESS
        inpatient_visits: IPD visits (any status)
        outpatient_visits: OPD visits (any status)
        emergency_visits: EMERGENCY visits (any status)
        total_visits: Number of visits passed in
    """

    total_patients: int
    active_visits: int
    visits_today: int
    pending_lab_orders: int
    inpatient_visits: int
    outpatient_visits: int
    emergency_visits: int
    total_visits: int

    def to_tiles(self) -> list[DashboardTile]:
        """KPI tiles in dashboard order."""
        return [
            DashboardTile(
                "Total Patients", str(self.total_patients), f"{self.total_patients} registered"
            ),
            DashboardTile("Active Visits", str(self.active_visits), f"{self.visits_today} today"),
            DashboardTile("Pending Lab Orders", str(self.pending_lab_orders), "Needs attention"),
            DashboardTile("Total Visits", str(self.total_visits), f"{self.inpatient_visits} IPD"),
        ]

    def to_dict(self) -> dict:
        return {
            "total_patients": self.total_patients,
            "active_visits": self.active_visits,
            "visits_today": self.visits_today,
            "pending_lab_orders": self.pending_lab_orders,
            "inpatient_visits": self.inpatient_visits,
            "outpatient_visits": self.outpatient_visits,
            "emergency_visits": self.emergency_visits,
            "total_visits": self.total_visits,
        }


def todays_visits(visits: Iterable[Visit], now: datetime) -> list[Visit]:
    """Visits admitted on the calendar day of ``now``, in input order."""
    today = now.date()
    return [visit for visit in visits if visit.admission_datetime.date() == today]


def recent_patients(patients: Sequence[Patient], limit: int = 3) -> list[Patient]:
    """First ``limit`` patients in the order supplied (newest first by convention)."""
    return list(patients[:limit])


def compute_dashboard(
    patients: Iterable[Patient], visits: Iterable[Visit], now: datetime
) -> DashboardStats:
    """Compute dashboard KPIs.

    Empty collections produce all-zero statistics.

    Args:
        patients: Registered patients
        visits: All visits
        now: Reference time for "today"

    Returns:
        DashboardStats
    """
    patients = list(patients)
    visits = list(visits)

    def count_type(visit_type: VisitType) -> int:
        return sum(1 for visit in visits if visit.visit_type is visit_type)

    return DashboardStats(
        total_patients=len(patients),
        active_visits=sum(1 for visit in visits if visit.status is VisitStatus.ACTIVE),
        visits_today=len(todays_visits(visits, now)),
        pending_lab_orders=outstanding_lab_orders(visits),
        inpatient_visits=count_type(VisitType.IPD),
        outpatient_visits=count_type(VisitType.OPD),
        emergency_visits=count_type(VisitType.EMERGENCY),
        total_visits=len(visits),
    )


@dataclass(frozen=True)
class AppointmentStatistics:
    total: int
    today: int
    scheduled: int
    confirmed: int
    checked_in: int
    completed: int
    cancelled: int

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "today": self.today,
            "scheduled": self.scheduled,
            "confirmed": self.confirmed,
            "checked_in": self.checked_in,
            "completed": self.completed,
            "cancelled": self.cancelled,
        }


def appointment_statistics(
    appointments: Iterable[Appointment], now: datetime
) -> AppointmentStatistics:
    """Summary tiles for the appointments page."""
    appointments = list(appointments)
    today = now.date()

    def count_status(status: AppointmentStatus) -> int:
        return sum(1 for appointment in appointments if appointment.status is status)

    return AppointmentStatistics(
        total=len(appointments),
        today=sum(1 for appointment in appointments if appointment.appointment_date == today),
        scheduled=count_status(AppointmentStatus.SCHEDULED),
        confirmed=count_status(AppointmentStatus.CONFIRMED),
        checked_in=count_status(AppointmentStatus.CHECKED_IN),
        completed=count_status(AppointmentStatus.COMPLETED),
        cancelled=count_status(AppointmentStatus.CANCELLED),
    )
