"""Unit tests for order aggregation."""

from datetime import datetime

import pytest

from mediflow.derivation.orders import (
    OrderKind,
    StatusBucket,
    active_orders,
    aggregate_orders,
    collect_orders,
    count_orders,
    outstanding_lab_orders,
    recent_orders,
    status_bucket,
)
from mediflow.models import (
    LabOrder,
    LabOrderStatus,
    LabResult,
    MedicationOrder,
    MedicationRoute,
    MedicationStatus,
    RadiologyOrder,
    RadiologyOrderStatus,
)


def lab(order_id, status, results=(), ordered_at=datetime(2024, 3, 15, 8, 0)):
    return LabOrder(
        id=order_id,
        order_number=f"LO-2024-{order_id[-6:].zfill(6)}",
        visit_id="VX",
        test_name=f"Test {order_id}",
        test_category="Hematology",
        ordered_by="DX",
        ordered_at=ordered_at,
        status=status,
        results=list(results),
    )


def medication(order_id, status, dispensed=False):
    return MedicationOrder(
        id=order_id,
        order_number=f"MO-2024-{order_id[-6:].zfill(6)}",
        visit_id="VX",
        medication_name="Paracetamol",
        dosage="1 g",
        route=MedicationRoute.ORAL,
        frequency="QID",
        duration_days=3,
        prescribed_by="DX",
        prescribed_at=datetime(2024, 3, 15, 8, 0),
        status=status,
        dispensed_at=datetime(2024, 3, 15, 9, 0) if dispensed else None,
    )


def radiology(order_id, status):
    return RadiologyOrder(
        id=order_id,
        order_number=f"RO-2024-{order_id[-6:].zfill(6)}",
        visit_id="VX",
        study_type="X-Ray",
        body_part="Chest",
        clinical_indication="Cough",
        ordered_by="DX",
        ordered_at=datetime(2024, 3, 15, 8, 0),
        status=status,
    )


def result(abnormal):
    return LabResult(id="r", parameter_name="WBC", result_value="9", is_abnormal=abnormal)


class TestStatusBucket:
    """Test suite for the status bucket mapping."""

    @pytest.mark.parametrize(
        "status,bucket",
        [
            (LabOrderStatus.PENDING, StatusBucket.PENDING),
            (LabOrderStatus.IN_PROGRESS, StatusBucket.IN_PROGRESS),
            (LabOrderStatus.COMPLETED, StatusBucket.COMPLETED),
            (LabOrderStatus.CANCELLED, StatusBucket.CANCELLED),
        ],
    )
    def test_lab_buckets(self, status, bucket):
        """Test lab statuses map one to one."""
        assert status_bucket(lab("1", status)) is bucket

    @pytest.mark.parametrize(
        "status,bucket",
        [
            (RadiologyOrderStatus.PENDING, StatusBucket.PENDING),
            (RadiologyOrderStatus.SCHEDULED, StatusBucket.IN_PROGRESS),
            (RadiologyOrderStatus.COMPLETED, StatusBucket.COMPLETED),
            (RadiologyOrderStatus.CANCELLED, StatusBucket.CANCELLED),
        ],
    )
    def test_radiology_buckets(self, status, bucket):
        """Test scheduled studies count as in progress."""
        assert status_bucket(radiology("1", status)) is bucket

    def test_medication_buckets(self):
        """Test active medications are pending until dispensed."""
        assert status_bucket(medication("1", MedicationStatus.ACTIVE)) is StatusBucket.PENDING
        assert (
            status_bucket(medication("2", MedicationStatus.ACTIVE, dispensed=True))
            is StatusBucket.IN_PROGRESS
        )
        assert status_bucket(medication("3", MedicationStatus.COMPLETED)) is StatusBucket.COMPLETED
        assert (
            status_bucket(medication("4", MedicationStatus.DISCONTINUED))
            is StatusBucket.CANCELLED
        )

    def test_non_order_raises_type_error(self):
        """Test that arbitrary objects are rejected."""
        with pytest.raises(TypeError):
            status_bucket("LO-2024-000001")


class TestAggregateOrders:
    """Test suite for per-patient order aggregation."""

    def test_three_lab_orders_with_one_abnormal_result(self, make_visit):
        """Test counts and flattened results for pending, completed and cancelled orders."""
        # Arrange
        visit = make_visit(
            lab_orders=[
                lab("1", LabOrderStatus.PENDING),
                lab("2", LabOrderStatus.COMPLETED, results=[result(True), result(False)]),
                lab("3", LabOrderStatus.CANCELLED),
            ]
        )

        # Act
        aggregate = aggregate_orders([visit])

        # Assert
        assert aggregate.lab.total == 3
        assert aggregate.lab.pending == 1
        assert aggregate.lab.in_progress == 0
        assert aggregate.lab.completed == 1
        assert aggregate.lab.cancelled == 1
        assert aggregate.has_abnormal_result is True
        assert len(aggregate.completed_lab_results) == 2
        assert aggregate.completed_lab_results[0].visit_number == visit.visit_number

    def test_zero_visits_gives_zero_counts(self):
        """Test a patient with no visits."""
        # Act
        aggregate = aggregate_orders([])

        # Assert
        for kind in OrderKind:
            assert aggregate.counts(kind).total == 0
        assert aggregate.has_abnormal_result is False
        assert aggregate.completed_lab_results == []

    def test_buckets_partition_every_type(self, store):
        """Test pending + in_progress + completed + cancelled equals total."""
        # Act
        aggregate = aggregate_orders(store.visits)

        # Assert
        for kind in OrderKind:
            counts = aggregate.counts(kind)
            assert (
                counts.pending + counts.in_progress + counts.completed + counts.cancelled
                == counts.total
            )

    def test_abnormal_result_on_non_completed_order_still_flags(self, make_visit):
        """Test the abnormal flag covers results on any lab order."""
        # Arrange
        visit = make_visit(lab_orders=[lab("1", LabOrderStatus.IN_PROGRESS, [result(True)])])

        # Act
        aggregate = aggregate_orders([visit])

        # Assert
        assert aggregate.has_abnormal_result is True
        assert aggregate.completed_lab_results == []

    def test_fixture_patient_orders(self, store):
        """Test aggregation over the first fixture patient's visits."""
        # Act
        aggregate = aggregate_orders(store.visits_for_patient("P1"))

        # Assert
        assert aggregate.lab.to_dict() == {
            "total": 3,
            "pending": 1,
            "in_progress": 1,
            "completed": 1,
            "cancelled": 0,
        }
        assert aggregate.medication.pending == 1
        assert aggregate.medication.in_progress == 1
        assert aggregate.radiology.in_progress == 1
        assert aggregate.to_dict()["completed_lab_results"][0]["parameter_name"] == "WBC"

    def test_count_orders_on_empty_input(self):
        """Test counting nothing."""
        assert count_orders([]).total == 0


class TestOrderListings:
    """Test suite for order listing helpers."""

    def test_collect_orders_keeps_visit_context(self, store):
        """Test each entry carries its owning visit."""
        # Act
        entries = collect_orders(store.visits, OrderKind.MEDICATION)

        # Assert
        assert [entry.order.order_number for entry in entries] == [
            "MO-2024-000001",
            "MO-2024-000002",
            "MO-2024-000003",
        ]
        assert entries[2].visit.visit_number == "VS-2024-000004"

    def test_recent_orders_newest_first_and_stable(self, make_visit):
        """Test orders sort newest first and ties keep collection order."""
        # Arrange
        tie = datetime(2024, 3, 15, 9, 0)
        visit = make_visit(
            lab_orders=[
                lab("1", LabOrderStatus.PENDING, ordered_at=datetime(2024, 3, 15, 7, 0)),
                lab("2", LabOrderStatus.PENDING, ordered_at=tie),
                lab("3", LabOrderStatus.PENDING, ordered_at=tie),
            ]
        )

        # Act
        entries = recent_orders([visit], OrderKind.LAB)

        # Assert
        assert [entry.order.id for entry in entries] == ["2", "3", "1"]
        assert len(recent_orders([visit], OrderKind.LAB, limit=1)) == 1

    def test_active_orders_excludes_finished(self, store):
        """Test only pending and in-progress orders are active."""
        # Act
        entries = active_orders(store.visits, OrderKind.LAB)

        # Assert
        assert {entry.order.order_number for entry in entries} == {
            "LO-2024-000002",
            "LO-2024-000003",
        }

    def test_outstanding_lab_orders(self, store):
        """Test pending plus in-progress lab orders across all visits."""
        assert outstanding_lab_orders(store.visits) == 2
