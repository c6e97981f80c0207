"""Derivation module.

Pure functions that turn clinical record collections into view-ready facts:
record numbers, vital sign evaluation, order statistics, filtering, staff
rosters, dashboard KPIs, scheduling, summaries, reports and billing.
"""

from .access import visible_menu_items, visible_order_types
from .billing import BillSummary, summarize_bill
from .dashboard import (
    DashboardStats,
    appointment_statistics,
    compute_dashboard,
    recent_patients,
    todays_visits,
)
from .filters import (
    AppointmentCriteria,
    DateBucket,
    OrderStatusFilter,
    VisitCriteria,
    filter_appointments,
    filter_orders,
    filter_patients,
    filter_visits,
    matches_search,
)
from .identifiers import (
    APPOINTMENT_PREFIX,
    BILL_PREFIX,
    LAB_ORDER_PREFIX,
    MEDICATION_ORDER_PREFIX,
    MRN_PREFIX,
    RADIOLOGY_ORDER_PREFIX,
    VISIT_PREFIX,
    CheckedRandomIdentifierGenerator,
    IdentifierGenerator,
    RandomIdentifierGenerator,
    SequentialIdentifierGenerator,
    create_generator,
    generate_identifier,
    is_valid_identifier,
)
from .orders import (
    OrderAggregate,
    OrderCounts,
    OrderKind,
    active_orders,
    aggregate_orders,
    collect_orders,
    outstanding_lab_orders,
    recent_orders,
)
from .patient_summary import AlertLevel, summarize_patient
from .reports import HospitalReport, compute_report
from .roster import RosterEntry, StaffRoster, build_staff_roster
from .scheduling import available_slots, generate_time_slots
from .vitals import (
    DEFAULT_REFERENCE_RANGES,
    AbnormalFlag,
    BMICategory,
    VitalEvaluation,
    VitalReferenceRanges,
    calculate_bmi,
    classify_bmi,
    evaluate,
    latest_reading,
    time_since,
    vitals_monitoring_stats,
)

__all__ = [
    "APPOINTMENT_PREFIX",
    "BILL_PREFIX",
    "DEFAULT_REFERENCE_RANGES",
    "LAB_ORDER_PREFIX",
    "MEDICATION_ORDER_PREFIX",
    "MRN_PREFIX",
    "RADIOLOGY_ORDER_PREFIX",
    "VISIT_PREFIX",
    "AbnormalFlag",
    "AlertLevel",
    "AppointmentCriteria",
    "BillSummary",
    "BMICategory",
    "CheckedRandomIdentifierGenerator",
    "DashboardStats",
    "DateBucket",
    "HospitalReport",
    "IdentifierGenerator",
    "OrderAggregate",
    "OrderCounts",
    "OrderKind",
    "OrderStatusFilter",
    "RandomIdentifierGenerator",
    "RosterEntry",
    "SequentialIdentifierGenerator",
    "StaffRoster",
    "VisitCriteria",
    "VitalEvaluation",
    "VitalReferenceRanges",
    "active_orders",
    "aggregate_orders",
    "appointment_statistics",
    "available_slots",
    "build_staff_roster",
    "calculate_bmi",
    "classify_bmi",
    "collect_orders",
    "compute_dashboard",
    "compute_report",
    "create_generator",
    "evaluate",
    "filter_appointments",
    "filter_orders",
    "filter_patients",
    "filter_visits",
    "generate_identifier",
    "generate_time_slots",
    "is_valid_identifier",
    "latest_reading",
    "matches_search",
    "outstanding_lab_orders",
    "recent_orders",
    "recent_patients",
    "summarize_bill",
    "summarize_patient",
    "time_since",
    "todays_visits",
    "visible_menu_items",
    "visible_order_types",
]
