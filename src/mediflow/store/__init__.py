"""Store module.

This module provides the immutable clinical record store and the pure
reducers that produce updated snapshots.
"""

from .reducers import (
    add_bill,
    add_order,
    advance_appointment,
    advance_lab_order,
    advance_medication_order,
    advance_radiology_order,
    assign_staff,
    attach_lab_results,
    book_appointment,
    cancel_visit,
    create_visit,
    deactivate_patient,
    discharge_visit,
    dispense_medication,
    link_appointment_to_visit,
    record_vitals,
    register_patient,
)
from .state import ClinicalStore

__all__ = [
    "ClinicalStore",
    "add_bill",
    "add_order",
    "advance_appointment",
    "advance_lab_order",
    "advance_medication_order",
    "advance_radiology_order",
    "assign_staff",
    "attach_lab_results",
    "book_appointment",
    "cancel_visit",
    "create_visit",
    "deactivate_patient",
    "discharge_visit",
    "dispense_medication",
    "link_appointment_to_visit",
    "record_vitals",
    "register_patient",
]
