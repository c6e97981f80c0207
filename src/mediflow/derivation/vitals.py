"""Vital sign evaluation.

Computes BMI and flags vital sign measurements that fall outside their
normal reference ranges. Missing measurements are never flagged.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Optional

from mediflow.logging_audit import get_operation_logger
from mediflow.models.visit import Visit, VitalSignReading

logger = get_operation_logger("vitals")


class AbnormalFlag(Enum):
    """Vital sign found outside its normal range."""

    TEMPERATURE = "temperature_celsius"
    SYSTOLIC_BP = "systolic_bp"
    DIASTOLIC_BP = "diastolic_bp"
    HEART_RATE = "heart_rate"
    RESPIRATORY_RATE = "respiratory_rate"
    OXYGEN_SATURATION = "oxygen_saturation"
    BMI = "bmi"


class BMICategory(Enum):
    UNDERWEIGHT = "underweight"
    NORMAL = "normal"
    OVERWEIGHT = "overweight"
    OBESE = "obese"


@dataclass(frozen=True)
class ReferenceRange:
    """Closed normal interval. ``None`` leaves that side unbounded."""

    low: Optional[float] = None
    high: Optional[float] = None

    def contains(self, value: float) -> bool:
        if self.low is not None and value < self.low:
            return False
        if self.high is not None and value > self.high:
            return False
        return True


@dataclass(frozen=True)
class VitalReferenceRanges:
    """Normal ranges for each measured vital sign.

    The systolic upper bound is 140 mmHg everywhere. An older registration
    screen used 120; that value is not applied.
    """

    temperature_celsius: ReferenceRange = ReferenceRange(36.1, 37.2)
    systolic_bp: ReferenceRange = ReferenceRange(90, 140)
    diastolic_bp: ReferenceRange = ReferenceRange(60, 90)
    heart_rate: ReferenceRange = ReferenceRange(60, 100)
    respiratory_rate: ReferenceRange = ReferenceRange(12, 20)
    oxygen_saturation: ReferenceRange = ReferenceRange(95, None)


DEFAULT_REFERENCE_RANGES = VitalReferenceRanges()

# BMI category lower bounds
BMI_NORMAL_MIN = 18.5
BMI_OVERWEIGHT_MIN = 25.0
BMI_OBESE_MIN = 30.0

_MEASURED_FLAGS = (
    AbnormalFlag.TEMPERATURE,
    AbnormalFlag.SYSTOLIC_BP,
    AbnormalFlag.DIASTOLIC_BP,
    AbnormalFlag.HEART_RATE,
    AbnormalFlag.RESPIRATORY_RATE,
    AbnormalFlag.OXYGEN_SATURATION,
)


@dataclass(frozen=True)
class VitalEvaluation:
    """Result of evaluating one reading.

    Attributes:
        bmi: BMI rounded to one decimal, or None when weight or height is missing
        bmi_category: Category of the rounded BMI, or None
        flags: Measurements outside their normal range
    """

    bmi: Optional[float]
    bmi_category: Optional[BMICategory]
    flags: frozenset[AbnormalFlag] = field(default_factory=frozenset)

    @property
    def is_abnormal(self) -> bool:
        return bool(self.flags)


def calculate_bmi(weight_kg: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    """Compute BMI = weight / height(m)², rounded half-up to one decimal.

    Args:
        weight_kg: Body weight in kilograms
        height_cm: Height in centimetres

    Returns:
        BMI, or None when either value is missing or height is not positive

    Example:
        >>> calculate_bmi(70, 175)
        22.9
    """
    if weight_kg is None or height_cm is None or height_cm <= 0:
        return None
    height_m = Decimal(str(height_cm)) / Decimal(100)
    bmi = Decimal(str(weight_kg)) / (height_m * height_m)
    return float(bmi.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def classify_bmi(bmi: float) -> BMICategory:
    if bmi < BMI_NORMAL_MIN:
        return BMICategory.UNDERWEIGHT
    if bmi < BMI_OVERWEIGHT_MIN:
        return BMICategory.NORMAL
    if bmi < BMI_OBESE_MIN:
        return BMICategory.OVERWEIGHT
    return BMICategory.OBESE


def evaluate(
    reading: VitalSignReading, ranges: VitalReferenceRanges = DEFAULT_REFERENCE_RANGES
) -> VitalEvaluation:
    """Evaluate a reading against the reference ranges.

    A field is flagged only when it is present and outside its range. BMI is
    flagged when it is computable and not in the normal category.

    Args:
        reading: Vital sign reading
        ranges: Reference ranges to apply

    Returns:
        VitalEvaluation with BMI and abnormal flags
    """
    flags = set()
    for flag in _MEASURED_FLAGS:
        value = getattr(reading, flag.value)
        if value is None:
            continue
        if not getattr(ranges, flag.value).contains(value):
            flags.add(flag)

    bmi = calculate_bmi(reading.weight_kg, reading.height_cm)
    category = classify_bmi(bmi) if bmi is not None else None
    if category is not None and category is not BMICategory.NORMAL:
        flags.add(AbnormalFlag.BMI)

    return VitalEvaluation(bmi=bmi, bmi_category=category, flags=frozenset(flags))


def is_reading_abnormal(
    reading: Optional[VitalSignReading],
    ranges: VitalReferenceRanges = DEFAULT_REFERENCE_RANGES,
) -> bool:
    """True if any present field of ``reading`` is abnormal. None is not abnormal."""
    if reading is None:
        return False
    return evaluate(reading, ranges).is_abnormal


def latest_reading(visit: Visit) -> Optional[VitalSignReading]:
    """Most recently appended reading of a visit, or None."""
    return visit.vital_signs[-1] if visit.vital_signs else None


def latest_reading_across(visits: Iterable[Visit]) -> Optional[VitalSignReading]:
    """Latest reading by ``recorded_at`` across visits (later position wins ties)."""
    latest: Optional[VitalSignReading] = None
    for visit in visits:
        for reading in visit.vital_signs:
            if latest is None or reading.recorded_at >= latest.recorded_at:
                latest = reading
    return latest


def time_since(reading: Optional[VitalSignReading], now: datetime) -> str:
    """Elapsed time since a reading as "Never", "2d ago", "3h ago" or "15m ago"."""
    if reading is None:
        return "Never"
    elapsed = now - reading.recorded_at
    # Readings stamped after now count as just taken
    total_minutes = max(0, int(elapsed.total_seconds() // 60))
    hours, minutes = divmod(total_minutes, 60)
    if hours > 24:
        return f"{hours // 24}d ago"
    if hours > 0:
        return f"{hours}h ago"
    return f"{minutes}m ago"


@dataclass(frozen=True)
class VitalsMonitoringStats:
    """Vitals monitoring tiles for active visits."""

    total_active: int
    with_recent_vitals: int
    with_abnormal_vitals: int
    needing_vitals: int


def vitals_monitoring_stats(
    visits: Iterable[Visit],
    now: datetime,
    recent_hours: int = 4,
    ranges: VitalReferenceRanges = DEFAULT_REFERENCE_RANGES,
) -> VitalsMonitoringStats:
    """Count active visits by the state of their latest vitals.

    Args:
        visits: Visits to consider (only ACTIVE ones are counted)
        now: Reference time
        recent_hours: Readings younger than this count as recent
        ranges: Reference ranges for abnormal detection
    """
    active = [visit for visit in visits if visit.is_active]
    window = timedelta(hours=recent_hours)

    with_recent = 0
    with_abnormal = 0
    needing = 0
    for visit in active:
        reading = latest_reading(visit)
        if reading is None:
            needing += 1
            continue
        if now - reading.recorded_at < window:
            with_recent += 1
        if is_reading_abnormal(reading, ranges):
            with_abnormal += 1

    logger.debug(
        f"Vitals monitoring: active={len(active)} recent={with_recent} "
        f"abnormal={with_abnormal} needing={needing}"
    )
    return VitalsMonitoringStats(
        total_active=len(active),
        with_recent_vitals=with_recent,
        with_abnormal_vitals=with_abnormal,
        needing_vitals=needing,
    )
