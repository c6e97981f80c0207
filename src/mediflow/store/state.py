"""Immutable clinical record store.

The store is a snapshot of every collection. Reducers in
``mediflow.store.reducers`` return a new snapshot instead of changing one,
so a caller holding an older store always sees consistent data.
"""

import dataclasses
from dataclasses import dataclass
from typing import Iterator, Optional

from mediflow.models.appointment import Appointment
from mediflow.models.billing import Bill
from mediflow.models.patient import Patient
from mediflow.models.staff import Role, StaffMember
from mediflow.models.visit import Visit
from mediflow.utils.exceptions import RecordNotFoundError


@dataclass(frozen=True)
class ClinicalStore:
    """Snapshot of all clinical records.

    Attributes:
        patients: Registered patients (including deactivated ones)
        staff: Staff accounts
        visits: Visits, each owning its vitals and orders
        appointments: Appointments
        bills: Bills
    """

    patients: tuple[Patient, ...] = ()
    staff: tuple[StaffMember, ...] = ()
    visits: tuple[Visit, ...] = ()
    appointments: tuple[Appointment, ...] = ()
    bills: tuple[Bill, ...] = ()

    def replace(self, **changes) -> "ClinicalStore":
        return dataclasses.replace(self, **changes)

    def find_patient(self, patient_id: str) -> Optional[Patient]:
        return next((p for p in self.patients if p.id == patient_id), None)

    def find_patient_by_mrn(self, mrn: str) -> Optional[Patient]:
        return next((p for p in self.patients if p.mrn == mrn), None)

    def get_patient(self, patient_id: str) -> Patient:
        patient = self.find_patient(patient_id)
        if patient is None:
            raise RecordNotFoundError("patient", patient_id)
        return patient

    def find_staff(self, staff_id: str) -> Optional[StaffMember]:
        return next((s for s in self.staff if s.id == staff_id), None)

    def get_staff(self, staff_id: str) -> StaffMember:
        member = self.find_staff(staff_id)
        if member is None:
            raise RecordNotFoundError("staff member", staff_id)
        return member

    def staff_with_role(self, role: Role) -> list[StaffMember]:
        return [member for member in self.staff if member.role is role]

    def find_visit(self, visit_id: str) -> Optional[Visit]:
        return next((v for v in self.visits if v.id == visit_id), None)

    def get_visit(self, visit_id: str) -> Visit:
        visit = self.find_visit(visit_id)
        if visit is None:
            raise RecordNotFoundError("visit", visit_id)
        return visit

    def find_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return next((a for a in self.appointments if a.id == appointment_id), None)

    def get_appointment(self, appointment_id: str) -> Appointment:
        appointment = self.find_appointment(appointment_id)
        if appointment is None:
            raise RecordNotFoundError("appointment", appointment_id)
        return appointment

    def visits_for_patient(self, patient_id: str) -> list[Visit]:
        """A patient's visits, most recent admission first."""
        return sorted(
            (visit for visit in self.visits if visit.patient_id == patient_id),
            key=lambda visit: visit.admission_datetime,
            reverse=True,
        )

    def appointments_for_patient(self, patient_id: str) -> list[Appointment]:
        return [a for a in self.appointments if a.patient_id == patient_id]

    def record_numbers(self) -> Iterator[str]:
        """Every human-readable record number in the store."""
        for patient in self.patients:
            yield patient.mrn
        for visit in self.visits:
            yield visit.visit_number
            for order in (*visit.lab_orders, *visit.medication_orders, *visit.radiology_orders):
                yield order.order_number
        for appointment in self.appointments:
            yield appointment.appointment_number
        for bill in self.bills:
            yield bill.bill_number
