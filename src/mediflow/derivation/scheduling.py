"""Appointment slot generation and availability."""

from datetime import date, datetime, time, timedelta
from typing import Iterable

from mediflow.logging_audit import get_operation_logger
from mediflow.models.appointment import Appointment

logger = get_operation_logger("scheduling")

DEFAULT_DAY_START = "08:00"
DEFAULT_DAY_END = "17:00"
DEFAULT_SLOT_MINUTES = 30


def parse_hhmm(value: str) -> time:
    """Parse an ``HH:MM`` string.

    Raises:
        ValueError: If the value is not a valid 24-hour time
    """
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError as e:
        raise ValueError(f"Invalid time {value!r}. Expected HH:MM (24-hour)") from e


def generate_time_slots(
    day_start: str = DEFAULT_DAY_START,
    day_end: str = DEFAULT_DAY_END,
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
) -> list[str]:
    """Bookable slot start times from ``day_start`` up to (excluding) ``day_end``.

    Example:
        >>> generate_time_slots("08:00", "09:30", 30)
        ['08:00', '08:30', '09:00']

    Raises:
        ValueError: If a time is malformed or ``slot_minutes`` is not positive
    """
    if slot_minutes <= 0:
        raise ValueError(f"slot_minutes must be positive, got {slot_minutes}")

    anchor = date(2000, 1, 1)
    current = datetime.combine(anchor, parse_hhmm(day_start))
    end = datetime.combine(anchor, parse_hhmm(day_end))
    step = timedelta(minutes=slot_minutes)

    slots = []
    while current < end:
        slots.append(current.strftime("%H:%M"))
        current += step
    return slots


def booked_windows(
    doctor_id: str, day: date, appointments: Iterable[Appointment]
) -> list[tuple[datetime, datetime]]:
    """Time windows held by a doctor's bookings on ``day``, earliest first.

    Each window runs from the booking's start for its ``duration_minutes``.
    Cancelled and no-show bookings do not hold time.
    """
    return sorted(
        (appointment.scheduled_at, appointment.ends_at)
        for appointment in appointments
        if appointment.doctor_id == doctor_id
        and appointment.appointment_date == day
        and appointment.occupies_slot
    )


def available_slots(
    doctor_id: str,
    day: date,
    appointments: Iterable[Appointment],
    day_start: str = DEFAULT_DAY_START,
    day_end: str = DEFAULT_DAY_END,
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
) -> list[str]:
    """Slots on ``day`` that no booking of ``doctor_id`` overlaps.

    A slot ``[start, start + slot_minutes)`` is taken when it intersects any
    booked window, so a 60 minute booking at 09:00 also takes 09:30 and an
    off-grid booking at 09:15 takes both 09:00 and 09:30.

    Args:
        doctor_id: Doctor to check
        day: Appointment day
        appointments: Existing appointments (any doctor, any day)
        day_start: First slot of the day (HH:MM)
        day_end: End of the bookable day (HH:MM, exclusive)
        slot_minutes: Slot length

    Returns:
        Free slot start times in chronological order
    """
    taken = booked_windows(doctor_id, day, appointments)
    step = timedelta(minutes=slot_minutes)

    free = []
    for slot in generate_time_slots(day_start, day_end, slot_minutes):
        start = datetime.combine(day, parse_hhmm(slot))
        end = start + step
        if not any(booked_start < end and start < booked_end for booked_start, booked_end in taken):
            free.append(slot)

    logger.debug(
        f"Doctor {doctor_id} on {day.isoformat()}: {len(free)} free, {len(taken)} booked"
    )
    return free
