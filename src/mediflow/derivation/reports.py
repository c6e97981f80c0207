"""Hospital reports and analytics over a visit collection."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from mediflow.models.orders import LabOrderStatus, MedicationStatus
from mediflow.models.visit import Visit, VisitStatus, VisitType

DEFAULT_TOTAL_BEDS = 50
DEFAULT_TREND_DAYS = 7
TOP_DIAGNOSES_LIMIT = 5


def _round1(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class DailyVisitCount:
    day: date
    opd: int
    ipd: int
    emergency: int

    @property
    def total(self) -> int:
        return self.opd + self.ipd + self.emergency


@dataclass
class HospitalReport:
    """Aggregated report figures.

    Attributes:
        average_length_of_stay: Mean IPD stay in days (1 dp); 0.0 without IPD visits
        bed_occupancy_rate: Active IPD visits as a percentage of total beds (1 dp)
        occupied_beds: Active IPD visits
        total_beds: Bed capacity used for the occupancy rate
        visit_types: Visit count per type
        visit_statuses: Visit count per status
        completed_lab_orders: Lab orders COMPLETED
        pending_lab_orders: Lab orders PENDING
        active_medications: Medication orders ACTIVE
        daily_trend: Visits per admission day, oldest first, ending today
        top_diagnoses: Most frequent diagnoses with counts
    """

    average_length_of_stay: float
    bed_occupancy_rate: float
    occupied_beds: int
    total_beds: int
    visit_types: dict[str, int] = field(default_factory=dict)
    visit_statuses: dict[str, int] = field(default_factory=dict)
    completed_lab_orders: int = 0
    pending_lab_orders: int = 0
    active_medications: int = 0
    daily_trend: list[DailyVisitCount] = field(default_factory=list)
    top_diagnoses: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "average_length_of_stay": self.average_length_of_stay,
            "bed_occupancy_rate": self.bed_occupancy_rate,
            "occupied_beds": self.occupied_beds,
            "total_beds": self.total_beds,
            "visit_types": dict(self.visit_types),
            "visit_statuses": dict(self.visit_statuses),
            "completed_lab_orders": self.completed_lab_orders,
            "pending_lab_orders": self.pending_lab_orders,
            "active_medications": self.active_medications,
            "daily_trend": [
                {
                    "date": entry.day.isoformat(),
                    "OPD": entry.opd,
                    "IPD": entry.ipd,
                    "EMERGENCY": entry.emergency,
                    "total": entry.total,
                }
                for entry in self.daily_trend
            ],
            "top_diagnoses": [
                {"diagnosis": diagnosis, "count": count}
                for diagnosis, count in self.top_diagnoses
            ],
        }


def compute_report(
    visits: Iterable[Visit],
    now: datetime,
    total_beds: int = DEFAULT_TOTAL_BEDS,
    trend_days: int = DEFAULT_TREND_DAYS,
) -> HospitalReport:
    """Compute report figures for a collection of visits.

    Length of stay runs from admission to discharge, or to ``now`` for
    visits still open.

    Args:
        visits: Visits to report on
        now: Reference time
        total_beds: Bed capacity (must be positive)
        trend_days: Number of days in the visit trend

    Returns:
        HospitalReport

    Raises:
        ValueError: If total_beds or trend_days is not positive
    """
    if total_beds <= 0:
        raise ValueError(f"total_beds must be positive, got {total_beds}")
    if trend_days <= 0:
        raise ValueError(f"trend_days must be positive, got {trend_days}")

    visits = list(visits)
    ipd = [visit for visit in visits if visit.visit_type is VisitType.IPD]

    average_stay = (
        _round1(sum(visit.duration_days(now) for visit in ipd) / len(ipd)) if ipd else 0.0
    )
    occupied = sum(1 for visit in ipd if visit.status is VisitStatus.ACTIVE)

    lab_orders = [order for visit in visits for order in visit.lab_orders]
    medications = [order for visit in visits for order in visit.medication_orders]

    today = now.date()
    days = [today - timedelta(days=offset) for offset in range(trend_days - 1, -1, -1)]
    per_day = Counter(
        (visit.admission_datetime.date(), visit.visit_type) for visit in visits
    )
    trend = [
        DailyVisitCount(
            day=day,
            opd=per_day[(day, VisitType.OPD)],
            ipd=per_day[(day, VisitType.IPD)],
            emergency=per_day[(day, VisitType.EMERGENCY)],
        )
        for day in days
    ]

    diagnoses = Counter(
        visit.diagnosis.strip()
        for visit in visits
        if visit.diagnosis and visit.diagnosis.strip()
    )

    return HospitalReport(
        average_length_of_stay=average_stay,
        bed_occupancy_rate=_round1(occupied / total_beds * 100),
        occupied_beds=occupied,
        total_beds=total_beds,
        visit_types={
            visit_type.value: sum(1 for visit in visits if visit.visit_type is visit_type)
            for visit_type in VisitType
        },
        visit_statuses={
            status.value: sum(1 for visit in visits if visit.status is status)
            for status in VisitStatus
        },
        completed_lab_orders=sum(
            1 for order in lab_orders if order.status is LabOrderStatus.COMPLETED
        ),
        pending_lab_orders=sum(
            1 for order in lab_orders if order.status is LabOrderStatus.PENDING
        ),
        active_medications=sum(
            1 for order in medications if order.status is MedicationStatus.ACTIVE
        ),
        daily_trend=trend,
        top_diagnoses=diagnoses.most_common(TOP_DIAGNOSES_LIMIT),
    )
