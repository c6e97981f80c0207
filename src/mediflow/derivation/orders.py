"""Order aggregation across a patient's visits.

Collects lab, medication and radiology orders from visits and summarises
them into status buckets. Every order falls into exactly one bucket, so
``pending + in_progress + completed + cancelled == total`` for each type.

Bucket mapping:

    lab        PENDING / IN_PROGRESS / COMPLETED / CANCELLED
    radiology  PENDING / SCHEDULED (in progress) / COMPLETED / CANCELLED
    medication ACTIVE not dispensed (pending) / ACTIVE dispensed (in progress)
               / COMPLETED / DISCONTINUED (cancelled)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Union

from mediflow.logging_audit import get_operation_logger
from mediflow.models.orders import (
    LabOrder,
    LabOrderStatus,
    LabResult,
    MedicationOrder,
    MedicationStatus,
    RadiologyOrder,
    RadiologyOrderStatus,
)
from mediflow.models.visit import Visit

logger = get_operation_logger("orders")

Order = Union[LabOrder, MedicationOrder, RadiologyOrder]


class OrderKind(Enum):
    LAB = "lab"
    MEDICATION = "medication"
    RADIOLOGY = "radiology"


class StatusBucket(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_LAB_BUCKETS = {
    LabOrderStatus.PENDING: StatusBucket.PENDING,
    LabOrderStatus.IN_PROGRESS: StatusBucket.IN_PROGRESS,
    LabOrderStatus.COMPLETED: StatusBucket.COMPLETED,
    LabOrderStatus.CANCELLED: StatusBucket.CANCELLED,
}

_RADIOLOGY_BUCKETS = {
    RadiologyOrderStatus.PENDING: StatusBucket.PENDING,
    RadiologyOrderStatus.SCHEDULED: StatusBucket.IN_PROGRESS,
    RadiologyOrderStatus.COMPLETED: StatusBucket.COMPLETED,
    RadiologyOrderStatus.CANCELLED: StatusBucket.CANCELLED,
}


def status_bucket(order: Order) -> StatusBucket:
    """Map an order of any kind onto its status bucket."""
    if isinstance(order, LabOrder):
        return _LAB_BUCKETS[order.status]
    if isinstance(order, RadiologyOrder):
        return _RADIOLOGY_BUCKETS[order.status]
    if isinstance(order, MedicationOrder):
        if order.status is MedicationStatus.ACTIVE:
            return StatusBucket.IN_PROGRESS if order.is_dispensed else StatusBucket.PENDING
        if order.status is MedicationStatus.COMPLETED:
            return StatusBucket.COMPLETED
        return StatusBucket.CANCELLED
    raise TypeError(f"Not an order: {type(order).__name__}")


@dataclass(frozen=True)
class OrderEntry:
    """An order together with the visit it belongs to."""

    order: Order
    visit: Visit

    @property
    def bucket(self) -> StatusBucket:
        return status_bucket(self.order)


@dataclass(frozen=True)
class OrderCounts:
    """Counts for one order type."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "pending": self.pending,
            "in_progress": self.in_progress,
            "completed": self.completed,
            "cancelled": self.cancelled,
        }


@dataclass(frozen=True)
class FlattenedLabResult:
    """A lab result with the order and visit it came from."""

    visit_number: str
    order_number: str
    test_name: str
    result: LabResult


@dataclass(frozen=True)
class OrderAggregate:
    """Per-type order counts for a collection of visits.

    Attributes:
        lab: Lab order counts
        medication: Medication order counts
        radiology: Radiology order counts
        has_abnormal_result: Any lab result attached to any lab order is abnormal
        completed_lab_results: Results of completed lab orders, in visit order
    """

    lab: OrderCounts
    medication: OrderCounts
    radiology: OrderCounts
    has_abnormal_result: bool = False
    completed_lab_results: list[FlattenedLabResult] = field(default_factory=list)

    def counts(self, kind: OrderKind) -> OrderCounts:
        return {
            OrderKind.LAB: self.lab,
            OrderKind.MEDICATION: self.medication,
            OrderKind.RADIOLOGY: self.radiology,
        }[kind]

    def to_dict(self) -> dict:
        return {
            "lab": self.lab.to_dict(),
            "medication": self.medication.to_dict(),
            "radiology": self.radiology.to_dict(),
            "has_abnormal_result": self.has_abnormal_result,
            "completed_lab_results": [
                {
                    "visit_number": entry.visit_number,
                    "order_number": entry.order_number,
                    "test_name": entry.test_name,
                    "parameter_name": entry.result.parameter_name,
                    "result_value": entry.result.result_value,
                    "unit": entry.result.unit,
                    "reference_range": entry.result.reference_range,
                    "is_abnormal": entry.result.is_abnormal,
                }
                for entry in self.completed_lab_results
            ],
        }


def _orders_of(visit: Visit, kind: OrderKind) -> list:
    if kind is OrderKind.LAB:
        return visit.lab_orders
    if kind is OrderKind.MEDICATION:
        return visit.medication_orders
    return visit.radiology_orders


def collect_orders(visits: Iterable[Visit], kind: OrderKind) -> list[OrderEntry]:
    """All orders of one kind, in visit order then order-list order."""
    return [
        OrderEntry(order=order, visit=visit)
        for visit in visits
        for order in _orders_of(visit, kind)
    ]


def count_orders(orders: Iterable[Order]) -> OrderCounts:
    """Count orders into status buckets."""
    tally = {bucket: 0 for bucket in StatusBucket}
    total = 0
    for order in orders:
        tally[status_bucket(order)] += 1
        total += 1
    return OrderCounts(
        total=total,
        pending=tally[StatusBucket.PENDING],
        in_progress=tally[StatusBucket.IN_PROGRESS],
        completed=tally[StatusBucket.COMPLETED],
        cancelled=tally[StatusBucket.CANCELLED],
    )


def aggregate_orders(visits: Iterable[Visit]) -> OrderAggregate:
    """Summarise all orders across ``visits``.

    A patient with no visits, or visits without orders, yields zero counts
    and no results.

    Args:
        visits: A patient's visits (any order)

    Returns:
        OrderAggregate with per-type counts and lab result details
    """
    visits = list(visits)
    lab_entries = collect_orders(visits, OrderKind.LAB)

    has_abnormal = any(entry.order.has_abnormal_result for entry in lab_entries)
    completed_results = [
        FlattenedLabResult(
            visit_number=entry.visit.visit_number,
            order_number=entry.order.order_number,
            test_name=entry.order.test_name,
            result=result,
        )
        for entry in lab_entries
        if entry.order.status is LabOrderStatus.COMPLETED
        for result in entry.order.results
    ]

    aggregate = OrderAggregate(
        lab=count_orders(entry.order for entry in lab_entries),
        medication=count_orders(
            entry.order for entry in collect_orders(visits, OrderKind.MEDICATION)
        ),
        radiology=count_orders(
            entry.order for entry in collect_orders(visits, OrderKind.RADIOLOGY)
        ),
        has_abnormal_result=has_abnormal,
        completed_lab_results=completed_results,
    )
    logger.debug(
        f"Aggregated orders over {len(visits)} visits: lab={aggregate.lab.total} "
        f"medication={aggregate.medication.total} radiology={aggregate.radiology.total}"
    )
    return aggregate


def recent_orders(
    visits: Iterable[Visit], kind: OrderKind, limit: Optional[int] = None
) -> list[OrderEntry]:
    """Orders of one kind, newest first.

    Sorting is stable: orders with equal timestamps keep their collection order.
    """
    entries = sorted(
        collect_orders(visits, kind), key=lambda entry: entry.order.timestamp, reverse=True
    )
    return entries if limit is None else entries[:limit]


def active_orders(visits: Iterable[Visit], kind: OrderKind) -> list[OrderEntry]:
    """Orders still pending or in progress, newest first."""
    return [
        entry
        for entry in recent_orders(visits, kind)
        if entry.bucket in (StatusBucket.PENDING, StatusBucket.IN_PROGRESS)
    ]


def outstanding_lab_orders(visits: Iterable[Visit]) -> int:
    """Number of lab orders that are PENDING or IN_PROGRESS."""
    return sum(
        1
        for entry in collect_orders(visits, OrderKind.LAB)
        if entry.order.status in (LabOrderStatus.PENDING, LabOrderStatus.IN_PROGRESS)
    )
