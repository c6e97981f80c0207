"""Forward-only status transition tables.

Each record type has a table mapping a status to the statuses it may move
to next. Terminal statuses map to an empty set.
"""

from enum import Enum

from mediflow.models.appointment import AppointmentStatus
from mediflow.models.orders import LabOrderStatus, MedicationStatus, RadiologyOrderStatus
from mediflow.models.visit import VisitStatus
from mediflow.utils.exceptions import InvalidTransitionError


VISIT_TRANSITIONS: dict[Enum, frozenset] = {
    VisitStatus.ACTIVE: frozenset({VisitStatus.DISCHARGED, VisitStatus.CANCELLED}),
    VisitStatus.DISCHARGED: frozenset(),
    VisitStatus.CANCELLED: frozenset(),
}

LAB_ORDER_TRANSITIONS: dict[Enum, frozenset] = {
    LabOrderStatus.PENDING: frozenset(
        {LabOrderStatus.IN_PROGRESS, LabOrderStatus.COMPLETED, LabOrderStatus.CANCELLED}
    ),
    LabOrderStatus.IN_PROGRESS: frozenset(
        {LabOrderStatus.COMPLETED, LabOrderStatus.CANCELLED}
    ),
    LabOrderStatus.COMPLETED: frozenset(),
    LabOrderStatus.CANCELLED: frozenset(),
}

RADIOLOGY_ORDER_TRANSITIONS: dict[Enum, frozenset] = {
    RadiologyOrderStatus.PENDING: frozenset(
        {
            RadiologyOrderStatus.SCHEDULED,
            RadiologyOrderStatus.COMPLETED,
            RadiologyOrderStatus.CANCELLED,
        }
    ),
    RadiologyOrderStatus.SCHEDULED: frozenset(
        {RadiologyOrderStatus.COMPLETED, RadiologyOrderStatus.CANCELLED}
    ),
    RadiologyOrderStatus.COMPLETED: frozenset(),
    RadiologyOrderStatus.CANCELLED: frozenset(),
}

MEDICATION_TRANSITIONS: dict[Enum, frozenset] = {
    MedicationStatus.ACTIVE: frozenset(
        {MedicationStatus.COMPLETED, MedicationStatus.DISCONTINUED}
    ),
    MedicationStatus.COMPLETED: frozenset(),
    MedicationStatus.DISCONTINUED: frozenset(),
}

# Appointments move along SCHEDULED, CONFIRMED, CHECKED_IN, IN_PROGRESS,
# COMPLETED and may skip ahead to any later step. CANCELLED is reachable
# until the consultation starts, NO_SHOW until the patient checks in.
APPOINTMENT_TRANSITIONS: dict[Enum, frozenset] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {
            AppointmentStatus.CONFIRMED,
            AppointmentStatus.CHECKED_IN,
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
            AppointmentStatus.NO_SHOW,
        }
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {
            AppointmentStatus.CHECKED_IN,
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
            AppointmentStatus.NO_SHOW,
        }
    ),
    AppointmentStatus.CHECKED_IN: frozenset(
        {
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
        }
    ),
    AppointmentStatus.IN_PROGRESS: frozenset({AppointmentStatus.COMPLETED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}

_TABLES: dict[type, tuple[str, dict[Enum, frozenset]]] = {
    VisitStatus: ("visit", VISIT_TRANSITIONS),
    LabOrderStatus: ("lab order", LAB_ORDER_TRANSITIONS),
    RadiologyOrderStatus: ("radiology order", RADIOLOGY_ORDER_TRANSITIONS),
    MedicationStatus: ("medication order", MEDICATION_TRANSITIONS),
    AppointmentStatus: ("appointment", APPOINTMENT_TRANSITIONS),
}


def can_transition(current: Enum, target: Enum) -> bool:
    """Check whether ``current`` may move to ``target``.

    Args:
        current: Current status of the record
        target: Requested status (same enum type as ``current``)

    Returns:
        True if the transition is allowed

    Raises:
        TypeError: If the statuses are of different or unknown enum types
    """
    if type(current) is not type(target):
        raise TypeError(
            f"Status types differ: {type(current).__name__} vs {type(target).__name__}"
        )
    if type(current) not in _TABLES:
        raise TypeError(f"No transition table for {type(current).__name__}")
    _, table = _TABLES[type(current)]
    return target in table[current]


def ensure_transition(current: Enum, target: Enum) -> None:
    """Raise InvalidTransitionError unless ``current`` may move to ``target``."""
    if not can_transition(current, target):
        record_type, _ = _TABLES[type(current)]
        raise InvalidTransitionError(record_type, current.value, target.value)


def is_terminal(status: Enum) -> bool:
    _, table = _TABLES[type(status)]
    return not table[status]
