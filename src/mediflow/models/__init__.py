"""Models module.

This module provides the clinical record dataclasses and enumerations.
"""

from mediflow.models.appointment import Appointment, AppointmentStatus, AppointmentType
from mediflow.models.billing import Bill, PaymentMethod, PaymentStatus
from mediflow.models.orders import (
    LabOrder,
    LabOrderStatus,
    LabResult,
    MedicationOrder,
    MedicationRoute,
    MedicationStatus,
    OrderPriority,
    RadiologyOrder,
    RadiologyOrderStatus,
)
from mediflow.models.patient import EmergencyContact, Gender, Patient, PatientSummary
from mediflow.models.staff import Role, StaffMember, StaffRef
from mediflow.models.visit import (
    DischargeSummary,
    Visit,
    VisitStatus,
    VisitType,
    VitalSignReading,
)

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "AppointmentType",
    "Bill",
    "DischargeSummary",
    "EmergencyContact",
    "Gender",
    "LabOrder",
    "LabOrderStatus",
    "LabResult",
    "MedicationOrder",
    "MedicationRoute",
    "MedicationStatus",
    "OrderPriority",
    "Patient",
    "PatientSummary",
    "PaymentMethod",
    "PaymentStatus",
    "RadiologyOrder",
    "RadiologyOrderStatus",
    "Role",
    "StaffMember",
    "StaffRef",
    "Visit",
    "VisitStatus",
    "VisitType",
    "VitalSignReading",
]
