"""Billing data model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class PaymentMethod(Enum):
    CASH = "CASH"
    CARD = "CARD"
    UPI = "UPI"
    INSURANCE = "INSURANCE"
    CHECK = "CHECK"


@dataclass
class Bill:
    """Visit bill (BL-<year>-<6 digits>).

    Charge amounts are stored as entered; totals and balance are derived by
    the billing summary.
    """

    id: str
    bill_number: str
    visit_id: str
    patient_id: str
    consultation_fee: Decimal = Decimal("0")
    lab_charges: Decimal = Decimal("0")
    radiology_charges: Decimal = Decimal("0")
    medication_charges: Decimal = Decimal("0")
    bed_charges: Decimal = Decimal("0")
    procedure_charges: Decimal = Decimal("0")
    other_charges: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    payment_method: Optional[PaymentMethod] = None
    patient_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
