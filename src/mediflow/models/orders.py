"""Clinical order data models.

This module defines lab, medication and radiology orders placed during a
visit, together with lab result entries.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class OrderPriority(Enum):
    """Order priority. STAT requires immediate action."""

    ROUTINE = "ROUTINE"
    URGENT = "URGENT"
    STAT = "STAT"


class LabOrderStatus(Enum):
    """Lab order status (forward-only)."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class RadiologyOrderStatus(Enum):
    """Radiology order status (forward-only)."""

    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class MedicationStatus(Enum):
    """Medication order status."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    DISCONTINUED = "DISCONTINUED"


class MedicationRoute(Enum):
    """Route of administration."""

    ORAL = "ORAL"
    IV = "IV"
    IM = "IM"
    SC = "SC"
    TOPICAL = "TOPICAL"
    INHALED = "INHALED"


@dataclass
class LabResult:
    """Single measured parameter of a lab order.

    The abnormal flag is supplied by the technician entering the result; it
    is not computed from the reference range text.

    Attributes:
        id: Result identifier
        parameter_name: Measured parameter (e.g. "Hemoglobin")
        result_value: Result as entered
        unit: Measurement unit (optional)
        reference_range: Reference range text (optional)
        is_abnormal: Whether the value is outside its reference range
        notes: Technician notes (optional)
    """

    id: str
    parameter_name: str
    result_value: str
    unit: Optional[str] = None
    reference_range: Optional[str] = None
    is_abnormal: bool = False
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class LabOrder:
    """Laboratory test order (LO-<year>-<6 digits>)."""

    id: str
    order_number: str
    visit_id: str
    test_name: str
    test_category: str
    ordered_by: str
    ordered_at: datetime
    status: LabOrderStatus = LabOrderStatus.PENDING
    priority: OrderPriority = OrderPriority.ROUTINE
    clinical_notes: Optional[str] = None
    ordered_by_name: Optional[str] = None
    technician: Optional[str] = None
    technician_name: Optional[str] = None
    completed_at: Optional[datetime] = None
    results: list[LabResult] = field(default_factory=list)

    @property
    def timestamp(self) -> datetime:
        return self.ordered_at

    @property
    def has_abnormal_result(self) -> bool:
        return any(result.is_abnormal for result in self.results)


@dataclass
class MedicationOrder:
    """Medication prescription (MO-<year>-<6 digits>)."""

    id: str
    order_number: str
    visit_id: str
    medication_name: str
    dosage: str
    route: MedicationRoute
    frequency: str
    duration_days: int
    prescribed_by: str
    prescribed_at: datetime
    status: MedicationStatus = MedicationStatus.ACTIVE
    instructions: Optional[str] = None
    prescribed_by_name: Optional[str] = None
    dispensed_by: Optional[str] = None
    dispensed_by_name: Optional[str] = None
    dispensed_at: Optional[datetime] = None

    @property
    def timestamp(self) -> datetime:
        return self.prescribed_at

    @property
    def is_dispensed(self) -> bool:
        return self.dispensed_at is not None


@dataclass
class RadiologyOrder:
    """Imaging study order (RO-<year>-<6 digits>)."""

    id: str
    order_number: str
    visit_id: str
    study_type: str
    body_part: str
    clinical_indication: str
    ordered_by: str
    ordered_at: datetime
    status: RadiologyOrderStatus = RadiologyOrderStatus.PENDING
    priority: OrderPriority = OrderPriority.ROUTINE
    report: Optional[str] = None
    image_url: Optional[str] = None
    ordered_by_name: Optional[str] = None
    radiologist: Optional[str] = None
    radiologist_name: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def timestamp(self) -> datetime:
        return self.ordered_at
