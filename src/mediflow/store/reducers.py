"""Pure reducers over ClinicalStore.

Every reducer takes a store and returns a new one; the input store and the
records it holds are never modified. Status changes go through the
forward-only lifecycle tables and every successful change is written to
the audit log.
"""

import dataclasses
from datetime import datetime
from typing import Iterable, Optional

from mediflow.logging_audit import get_operation_logger, log_audit_event
from mediflow.models.appointment import Appointment, AppointmentStatus
from mediflow.models.billing import Bill
from mediflow.models.lifecycle import ensure_transition
from mediflow.models.orders import (
    LabOrder,
    LabOrderStatus,
    LabResult,
    MedicationOrder,
    MedicationStatus,
    RadiologyOrder,
    RadiologyOrderStatus,
)
from mediflow.models.patient import Patient
from mediflow.models.staff import Role
from mediflow.models.visit import DischargeSummary, Visit, VisitStatus, VitalSignReading
from mediflow.store.state import ClinicalStore
from mediflow.utils.exceptions import (
    DuplicateRecordError,
    InvalidTransitionError,
    RecordNotFoundError,
    RecordShapeError,
)

logger = get_operation_logger("store")

_ORDER_LISTS = {
    LabOrder: ("lab_orders", "lab order"),
    MedicationOrder: ("medication_orders", "medication order"),
    RadiologyOrder: ("radiology_orders", "radiology order"),
}


def _with_visit(store: ClinicalStore, visit: Visit) -> ClinicalStore:
    return store.replace(
        visits=tuple(visit if v.id == visit.id else v for v in store.visits)
    )


def _with_appointment(store: ClinicalStore, appointment: Appointment) -> ClinicalStore:
    return store.replace(
        appointments=tuple(
            appointment if a.id == appointment.id else a for a in store.appointments
        )
    )


def _audit(event_type: str, **details) -> None:
    log_audit_event(event_type, {k: v for k, v in details.items() if v is not None})


# Patients


def register_patient(store: ClinicalStore, patient: Patient) -> ClinicalStore:
    """Add a patient.

    Raises:
        DuplicateRecordError: If the id or MRN is already registered
    """
    if store.find_patient(patient.id) is not None:
        raise DuplicateRecordError(f"Patient id already registered: {patient.id}")
    if store.find_patient_by_mrn(patient.mrn) is not None:
        raise DuplicateRecordError(f"MRN already registered: {patient.mrn}")

    _audit(
        "PATIENT_REGISTERED",
        record_type="patient",
        record_id=patient.id,
        record_number=patient.mrn,
        actor=patient.created_by,
    )
    return store.replace(patients=store.patients + (patient,))


def deactivate_patient(
    store: ClinicalStore, patient_id: str, actor: Optional[str] = None
) -> ClinicalStore:
    """Soft-delete a patient. Deactivating an inactive patient is a no-op."""
    patient = store.get_patient(patient_id)
    if not patient.is_active:
        logger.debug(f"Patient {patient_id} already inactive")
        return store

    updated = dataclasses.replace(patient, is_active=False)
    _audit(
        "PATIENT_DEACTIVATED",
        record_type="patient",
        record_id=patient.id,
        record_number=patient.mrn,
        actor=actor,
    )
    return store.replace(
        patients=tuple(updated if p.id == patient_id else p for p in store.patients)
    )


# Visits


def create_visit(store: ClinicalStore, visit: Visit) -> ClinicalStore:
    """Open a visit for a registered patient.

    The patient summary is embedded when the visit does not carry one.

    Raises:
        RecordNotFoundError: If the patient is unknown
        DuplicateRecordError: If the visit id or number is already used
    """
    patient = store.get_patient(visit.patient_id)
    for existing in store.visits:
        if existing.id == visit.id or existing.visit_number == visit.visit_number:
            raise DuplicateRecordError(f"Visit already exists: {visit.visit_number}")

    if visit.patient is None:
        visit = dataclasses.replace(visit, patient=patient.summary())

    _audit(
        "VISIT_CREATED",
        record_type="visit",
        record_id=visit.id,
        record_number=visit.visit_number,
        visit_type=visit.visit_type.value,
        actor=visit.created_by,
    )
    return store.replace(visits=store.visits + (visit,))


def _close_visit(
    store: ClinicalStore,
    visit_id: str,
    target: VisitStatus,
    at: datetime,
    actor: Optional[str],
    **changes,
) -> ClinicalStore:
    visit = store.get_visit(visit_id)
    ensure_transition(visit.status, target)
    updated = dataclasses.replace(visit, status=target, **changes)
    _audit(
        f"VISIT_{target.value}",
        record_type="visit",
        record_id=visit.id,
        record_number=visit.visit_number,
        from_status=visit.status.value,
        to_status=target.value,
        actor=actor,
        at=at.isoformat(),
    )
    return _with_visit(store, updated)


def discharge_visit(
    store: ClinicalStore,
    visit_id: str,
    at: datetime,
    summary: Optional[DischargeSummary] = None,
    actor: Optional[str] = None,
) -> ClinicalStore:
    """Discharge an active visit at ``at``.

    Raises:
        RecordNotFoundError: If the visit is unknown
        InvalidTransitionError: If the visit is not ACTIVE
        RecordShapeError: If ``at`` precedes admission
    """
    visit = store.get_visit(visit_id)
    if at < visit.admission_datetime:
        raise RecordShapeError(
            "visit", "discharge_datetime", "discharge cannot precede admission"
        )
    changes = {"discharge_datetime": at}
    if summary is not None:
        changes["discharge_summary"] = summary
    return _close_visit(store, visit_id, VisitStatus.DISCHARGED, at, actor, **changes)


def cancel_visit(
    store: ClinicalStore, visit_id: str, at: datetime, actor: Optional[str] = None
) -> ClinicalStore:
    return _close_visit(store, visit_id, VisitStatus.CANCELLED, at, actor)


def record_vitals(store: ClinicalStore, reading: VitalSignReading) -> ClinicalStore:
    """Append a vital sign reading to its visit.

    Raises:
        RecordNotFoundError: If the visit is unknown
        DuplicateRecordError: If the reading id is already recorded on the visit
    """
    visit = store.get_visit(reading.visit_id)
    if any(existing.id == reading.id for existing in visit.vital_signs):
        raise DuplicateRecordError(f"Vital sign reading already recorded: {reading.id}")

    updated = dataclasses.replace(visit, vital_signs=[*visit.vital_signs, reading])
    _audit(
        "VITALS_RECORDED",
        record_type="vital_signs",
        record_id=reading.id,
        record_number=visit.visit_number,
        actor=reading.recorded_by,
    )
    return _with_visit(store, updated)


def assign_staff(
    store: ClinicalStore, visit_id: str, staff_id: str, actor: Optional[str] = None
) -> ClinicalStore:
    """Assign a doctor or nurse to a visit.

    Assigning someone already on the visit leaves the store unchanged.

    Raises:
        RecordNotFoundError: If the visit or staff member is unknown
        RecordShapeError: If the staff member is neither doctor nor nurse
    """
    visit = store.get_visit(visit_id)
    member = store.get_staff(staff_id)

    if member.role is Role.DOCTOR:
        field_name = "assigned_doctors"
    elif member.role is Role.NURSE:
        field_name = "assigned_nurses"
    else:
        raise RecordShapeError(
            "visit", "assigned_staff", f"{member.role.label} cannot be assigned to a visit"
        )

    current = getattr(visit, field_name)
    if any(ref.id == staff_id for ref in current):
        logger.debug(f"{staff_id} already assigned to {visit.visit_number}")
        return store

    updated = dataclasses.replace(visit, **{field_name: [*current, member.ref()]})
    _audit(
        "STAFF_ASSIGNED",
        record_type="visit",
        record_id=visit.id,
        record_number=visit.visit_number,
        staff_id=staff_id,
        role=member.role.value,
        actor=actor,
    )
    return _with_visit(store, updated)


# Orders


def add_order(store: ClinicalStore, order) -> ClinicalStore:
    """Place a lab, medication or radiology order on its visit.

    Raises:
        RecordNotFoundError: If the visit is unknown
        DuplicateRecordError: If the order number is already used on the visit
    """
    list_name, record_type = _ORDER_LISTS[type(order)]
    visit = store.get_visit(order.visit_id)
    orders = getattr(visit, list_name)
    if any(o.id == order.id or o.order_number == order.order_number for o in orders):
        raise DuplicateRecordError(f"{record_type} already exists: {order.order_number}")

    updated = dataclasses.replace(visit, **{list_name: [*orders, order]})
    _audit(
        f"{record_type.upper().replace(' ', '_')}_PLACED",
        record_type=record_type,
        record_id=order.id,
        record_number=order.order_number,
        to_status=order.status.value,
    )
    return _with_visit(store, updated)


def _update_order(
    store: ClinicalStore,
    visit_id: str,
    order_type: type,
    order_id: str,
    target,
    actor: Optional[str],
    **changes,
) -> ClinicalStore:
    list_name, record_type = _ORDER_LISTS[order_type]
    visit = store.get_visit(visit_id)
    orders = getattr(visit, list_name)
    order = next((o for o in orders if o.id == order_id), None)
    if order is None:
        raise RecordNotFoundError(record_type, order_id)

    if target is not None:
        ensure_transition(order.status, target)
        changes["status"] = target

    updated_order = dataclasses.replace(order, **changes)
    updated_visit = dataclasses.replace(
        visit, **{list_name: [updated_order if o.id == order_id else o for o in orders]}
    )
    _audit(
        f"{record_type.upper().replace(' ', '_')}_UPDATED",
        record_type=record_type,
        record_id=order.id,
        record_number=order.order_number,
        from_status=order.status.value,
        to_status=updated_order.status.value,
        actor=actor,
    )
    return _with_visit(store, updated_visit)


def advance_lab_order(
    store: ClinicalStore,
    visit_id: str,
    order_id: str,
    target: LabOrderStatus,
    at: Optional[datetime] = None,
    actor: Optional[str] = None,
) -> ClinicalStore:
    changes = {}
    if target is LabOrderStatus.COMPLETED and at is not None:
        changes["completed_at"] = at
    if target is LabOrderStatus.IN_PROGRESS and actor is not None:
        changes["technician"] = actor
    return _update_order(store, visit_id, LabOrder, order_id, target, actor, **changes)


def attach_lab_results(
    store: ClinicalStore,
    visit_id: str,
    order_id: str,
    results: Iterable[LabResult],
    at: datetime,
    actor: Optional[str] = None,
) -> ClinicalStore:
    """Attach results to a lab order and complete it.

    Raises:
        InvalidTransitionError: If the order is already completed or cancelled
    """
    visit = store.get_visit(visit_id)
    order = next((o for o in visit.lab_orders if o.id == order_id), None)
    if order is None:
        raise RecordNotFoundError("lab order", order_id)
    return _update_order(
        store,
        visit_id,
        LabOrder,
        order_id,
        LabOrderStatus.COMPLETED,
        actor,
        results=[*order.results, *results],
        completed_at=at,
        technician=actor or order.technician,
    )


def advance_radiology_order(
    store: ClinicalStore,
    visit_id: str,
    order_id: str,
    target: RadiologyOrderStatus,
    at: Optional[datetime] = None,
    report: Optional[str] = None,
    actor: Optional[str] = None,
) -> ClinicalStore:
    changes = {}
    if target is RadiologyOrderStatus.SCHEDULED and at is not None:
        changes["scheduled_at"] = at
    if target is RadiologyOrderStatus.COMPLETED:
        if at is not None:
            changes["completed_at"] = at
        if report is not None:
            changes["report"] = report
        if actor is not None:
            changes["radiologist"] = actor
    return _update_order(
        store, visit_id, RadiologyOrder, order_id, target, actor, **changes
    )


def advance_medication_order(
    store: ClinicalStore,
    visit_id: str,
    order_id: str,
    target: MedicationStatus,
    actor: Optional[str] = None,
) -> ClinicalStore:
    return _update_order(store, visit_id, MedicationOrder, order_id, target, actor)


def dispense_medication(
    store: ClinicalStore, visit_id: str, order_id: str, at: datetime, actor: str
) -> ClinicalStore:
    """Mark an active medication order as dispensed.

    Raises:
        InvalidTransitionError: If the order is not ACTIVE or already dispensed
    """
    visit = store.get_visit(visit_id)
    order = next((o for o in visit.medication_orders if o.id == order_id), None)
    if order is None:
        raise RecordNotFoundError("medication order", order_id)
    if order.status is not MedicationStatus.ACTIVE or order.is_dispensed:
        raise InvalidTransitionError("medication order", order.status.value, "DISPENSED")
    return _update_order(
        store,
        visit_id,
        MedicationOrder,
        order_id,
        None,
        actor,
        dispensed_at=at,
        dispensed_by=actor,
    )


# Appointments


def book_appointment(store: ClinicalStore, appointment: Appointment) -> ClinicalStore:
    """Book an appointment for a registered patient with a known doctor.

    Raises:
        RecordNotFoundError: If the patient or doctor is unknown
        DuplicateRecordError: If the id or number is used, or the doctor's
            slot is already held
    """
    patient = store.get_patient(appointment.patient_id)
    doctor = store.get_staff(appointment.doctor_id)

    for existing in store.appointments:
        if (
            existing.id == appointment.id
            or existing.appointment_number == appointment.appointment_number
        ):
            raise DuplicateRecordError(
                f"Appointment already exists: {appointment.appointment_number}"
            )
        if (
            existing.occupies_slot
            and existing.doctor_id == appointment.doctor_id
            and existing.overlaps(appointment.scheduled_at, appointment.ends_at)
        ):
            raise DuplicateRecordError(
                f"Slot {appointment.appointment_time.strftime('%H:%M')} on "
                f"{appointment.appointment_date.isoformat()} already booked for "
                f"{doctor.full_name} by {existing.appointment_number} at "
                f"{existing.appointment_time.strftime('%H:%M')}"
            )

    changes = {}
    if appointment.patient is None:
        changes["patient"] = patient.summary()
    if appointment.doctor_name is None:
        changes["doctor_name"] = doctor.full_name
    if changes:
        appointment = dataclasses.replace(appointment, **changes)

    _audit(
        "APPOINTMENT_BOOKED",
        record_type="appointment",
        record_id=appointment.id,
        record_number=appointment.appointment_number,
        to_status=appointment.status.value,
        actor=appointment.created_by,
    )
    return store.replace(appointments=store.appointments + (appointment,))


def advance_appointment(
    store: ClinicalStore,
    appointment_id: str,
    target: AppointmentStatus,
    at: Optional[datetime] = None,
    reason: Optional[str] = None,
    actor: Optional[str] = None,
) -> ClinicalStore:
    """Move an appointment forward in its lifecycle.

    Raises:
        RecordNotFoundError: If the appointment is unknown
        InvalidTransitionError: If the move is not allowed
    """
    appointment = store.get_appointment(appointment_id)
    ensure_transition(appointment.status, target)

    changes = {"status": target}
    if target is AppointmentStatus.CANCELLED:
        changes["cancelled_at"] = at
        changes["cancellation_reason"] = reason

    _audit(
        "APPOINTMENT_STATUS_CHANGED",
        record_type="appointment",
        record_id=appointment.id,
        record_number=appointment.appointment_number,
        from_status=appointment.status.value,
        to_status=target.value,
        actor=actor,
    )
    return _with_appointment(store, dataclasses.replace(appointment, **changes))


def link_appointment_to_visit(
    store: ClinicalStore, appointment_id: str, visit_id: str
) -> ClinicalStore:
    """Record the visit opened from an appointment.

    Raises:
        RecordShapeError: If the visit belongs to another patient
    """
    appointment = store.get_appointment(appointment_id)
    visit = store.get_visit(visit_id)
    if visit.patient_id != appointment.patient_id:
        raise RecordShapeError(
            "appointment", "visit_id", "visit belongs to a different patient"
        )

    _audit(
        "APPOINTMENT_LINKED",
        record_type="appointment",
        record_id=appointment.id,
        record_number=appointment.appointment_number,
        visit_number=visit.visit_number,
    )
    return _with_appointment(
        store,
        dataclasses.replace(appointment, visit_id=visit.id, visit_number=visit.visit_number),
    )


# Billing


def add_bill(store: ClinicalStore, bill: Bill) -> ClinicalStore:
    """Raise a bill for a visit.

    Raises:
        RecordNotFoundError: If the visit is unknown
        DuplicateRecordError: If the bill number is already used
    """
    store.get_visit(bill.visit_id)
    if any(b.id == bill.id or b.bill_number == bill.bill_number for b in store.bills):
        raise DuplicateRecordError(f"Bill already exists: {bill.bill_number}")

    _audit(
        "BILL_CREATED",
        record_type="bill",
        record_id=bill.id,
        record_number=bill.bill_number,
    )
    return store.replace(bills=store.bills + (bill,))
