"""Bill totals and payment status."""

from dataclasses import dataclass, field
from decimal import Decimal

from mediflow.models.billing import Bill, PaymentStatus

CHARGE_LINES = (
    ("Consultation Fee", "consultation_fee"),
    ("Lab Charges", "lab_charges"),
    ("Radiology Charges", "radiology_charges"),
    ("Medication Charges", "medication_charges"),
    ("Bed Charges", "bed_charges"),
    ("Procedure Charges", "procedure_charges"),
    ("Other Charges", "other_charges"),
)

ZERO = Decimal("0")


@dataclass(frozen=True)
class BillSummary:
    """Derived bill figures.

    ``total = subtotal + tax - discount`` and ``balance = total - paid``.
    """

    bill_number: str
    lines: list[tuple[str, Decimal]] = field(default_factory=list)
    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    total_amount: Decimal = ZERO
    paid_amount: Decimal = ZERO
    balance_amount: Decimal = ZERO
    payment_status: PaymentStatus = PaymentStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "bill_number": self.bill_number,
            "lines": [{"label": label, "amount": str(amount)} for label, amount in self.lines],
            "subtotal": str(self.subtotal),
            "tax_amount": str(self.tax_amount),
            "discount_amount": str(self.discount_amount),
            "total_amount": str(self.total_amount),
            "paid_amount": str(self.paid_amount),
            "balance_amount": str(self.balance_amount),
            "payment_status": self.payment_status.value,
        }


def payment_status_for(total: Decimal, paid: Decimal) -> PaymentStatus:
    """PAID once the total is covered, PARTIAL after any payment, else PENDING."""
    if paid >= total and paid > ZERO:
        return PaymentStatus.PAID
    if paid > ZERO:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING


def summarize_bill(bill: Bill) -> BillSummary:
    """Compute subtotal, total, balance and payment status of a bill.

    Only non-zero charge lines are listed; all charges count towards the
    subtotal.
    """
    amounts = [(label, getattr(bill, attribute)) for label, attribute in CHARGE_LINES]
    subtotal = sum((amount for _, amount in amounts), ZERO)
    total = subtotal + bill.tax_amount - bill.discount_amount

    return BillSummary(
        bill_number=bill.bill_number,
        lines=[(label, amount) for label, amount in amounts if amount > ZERO],
        subtotal=subtotal,
        tax_amount=bill.tax_amount,
        discount_amount=bill.discount_amount,
        total_amount=total,
        paid_amount=bill.paid_amount,
        balance_amount=total - bill.paid_amount,
        payment_status=payment_status_for(total, bill.paid_amount),
    )
