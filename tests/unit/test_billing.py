"""Unit tests for bill totals."""

from decimal import Decimal

import pytest

from mediflow.derivation.billing import payment_status_for, summarize_bill
from mediflow.models import Bill, PaymentStatus


class TestSummarizeBill:
    """Test suite for summarize_bill."""

    def test_fixture_bill(self, store):
        """Test totals of the fixture bill."""
        # Act
        summary = summarize_bill(store.bills[0])

        # Assert
        assert summary.subtotal == Decimal("5700")
        assert summary.total_amount == Decimal("5885")
        assert summary.balance_amount == Decimal("3885")
        assert summary.payment_status is PaymentStatus.PARTIAL
        assert [label for label, _ in summary.lines] == [
            "Consultation Fee",
            "Lab Charges",
            "Bed Charges",
        ]

    def test_empty_bill_is_pending(self):
        """Test a bill with no charges or payments."""
        # Act
        summary = summarize_bill(Bill(id="B", bill_number="BL-2024-000009", visit_id="V", patient_id="P"))

        # Assert
        assert summary.total_amount == Decimal("0")
        assert summary.lines == []
        assert summary.payment_status is PaymentStatus.PENDING

    def test_decimal_amounts_are_exact(self):
        """Test cents do not drift."""
        # Arrange
        bill = Bill(
            id="B",
            bill_number="BL-2024-000010",
            visit_id="V",
            patient_id="P",
            consultation_fee=Decimal("0.10"),
            lab_charges=Decimal("0.20"),
            paid_amount=Decimal("0.30"),
        )

        # Act
        summary = summarize_bill(bill)

        # Assert
        assert summary.total_amount == Decimal("0.30")
        assert summary.balance_amount == Decimal("0")
        assert summary.payment_status is PaymentStatus.PAID
        assert summary.to_dict()["total_amount"] == "0.30"


class TestPaymentStatus:
    """Test suite for payment status derivation."""

    @pytest.mark.parametrize(
        "total,paid,status",
        [
            ("100", "0", PaymentStatus.PENDING),
            ("100", "40", PaymentStatus.PARTIAL),
            ("100", "100", PaymentStatus.PAID),
            ("100", "120", PaymentStatus.PAID),
            ("0", "0", PaymentStatus.PENDING),
        ],
    )
    def test_status(self, total, paid, status):
        """Test PENDING, PARTIAL and PAID thresholds."""
        assert payment_status_for(Decimal(total), Decimal(paid)) is status
