"""Human-readable record number generation.

Record numbers share the format ``<PREFIX>-<year>-<6 digits>``, for example
``MR-2024-004821`` for a medical record number. The generation strategy is
pluggable:

- RandomIdentifierGenerator: uniform random suffix, no uniqueness check
- CheckedRandomIdentifierGenerator: random suffix, retried on collision
- SequentialIdentifierGenerator: monotonic counter per prefix and year
"""

import logging
import random
import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Iterable, Optional

from mediflow.utils.exceptions import IdentifierCollisionError, IdentifierExhaustedError

logger = logging.getLogger(__name__)

MRN_PREFIX = "MR"
VISIT_PREFIX = "VS"
LAB_ORDER_PREFIX = "LO"
MEDICATION_ORDER_PREFIX = "MO"
RADIOLOGY_ORDER_PREFIX = "RO"
APPOINTMENT_PREFIX = "AP"
BILL_PREFIX = "BL"

MAX_SUFFIX = 999999

# Maximum attempts to find a free number (collision should be rare)
MAX_GENERATION_ATTEMPTS = 1000

IDENTIFIER_PATTERN = re.compile(r"^[A-Z]{2}-\d{4}-\d{6}$")
_PREFIX_PATTERN = re.compile(r"^[A-Z]{2}$")

Clock = Callable[[], datetime]


def _check_prefix(prefix: str) -> None:
    if not _PREFIX_PATTERN.match(prefix or ""):
        raise ValueError(
            f"Invalid identifier prefix: {prefix!r}. Use two upper-case letters, e.g. 'MR'"
        )


def format_identifier(prefix: str, year: int, number: int) -> str:
    """Format a record number as ``PREFIX-YYYY-NNNNNN``."""
    return f"{prefix}-{year}-{number:06d}"


def is_valid_identifier(value: str, prefix: Optional[str] = None) -> bool:
    """Check that ``value`` is a well-formed record number.

    Args:
        value: Candidate record number
        prefix: When given, the number must also carry this prefix

    Returns:
        True if the value matches ``^[A-Z]{2}-\\d{4}-\\d{6}$`` (and the prefix)
    """
    if not isinstance(value, str) or not IDENTIFIER_PATTERN.match(value):
        return False
    return prefix is None or value.split("-", 1)[0] == prefix


class IdentifierGenerator(ABC):
    """Strategy for producing record numbers."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or datetime.now

    def current_year(self) -> int:
        return self._clock().year

    @abstractmethod
    def generate(self, prefix: str) -> str:
        """Return a new record number for ``prefix``."""


class RandomIdentifierGenerator(IdentifierGenerator):
    """Random six-digit suffix drawn uniformly from [0, 999999].

    No uniqueness check is made: two calls may return the same number.
    """

    def __init__(
        self, rng: Optional[random.Random] = None, clock: Optional[Clock] = None
    ) -> None:
        super().__init__(clock)
        self._rng = rng or random.Random()

    def generate(self, prefix: str) -> str:
        _check_prefix(prefix)
        identifier = format_identifier(
            prefix, self.current_year(), self._rng.randint(0, MAX_SUFFIX)
        )
        logger.debug(f"Generated identifier: {identifier}")
        return identifier


class CheckedRandomIdentifierGenerator(RandomIdentifierGenerator):
    """Random suffix with a collision check against issued numbers.

    Args:
        existing: Record numbers already in use (e.g. loaded from a dataset)
        rng: Random source
        clock: Now-provider used for the year component
    """

    def __init__(
        self,
        existing: Iterable[str] = (),
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(rng=rng, clock=clock)
        self._issued: set[str] = set(existing)

    def generate(self, prefix: str) -> str:
        _check_prefix(prefix)
        year = self.current_year()

        for attempt in range(MAX_GENERATION_ATTEMPTS):
            identifier = format_identifier(prefix, year, self._rng.randint(0, MAX_SUFFIX))
            if identifier not in self._issued:
                self._issued.add(identifier)
                logger.debug(f"Generated identifier: {identifier}")
                return identifier
            logger.warning(
                f"Identifier collision detected for {identifier}. "
                f"Regenerating (attempt {attempt + 1})"
            )

        raise IdentifierCollisionError(
            f"Unable to generate unique {prefix} identifier after "
            f"{MAX_GENERATION_ATTEMPTS} attempts. The {year} number space may be "
            f"nearly full; switch to the sequential strategy."
        )

    def reset(self) -> None:
        """Forget issued numbers (primarily for tests)."""
        self._issued.clear()


class SequentialIdentifierGenerator(IdentifierGenerator):
    """Monotonic counter per (prefix, year), starting at ``start``.

    Args:
        start: First number issued for a new prefix/year
        clock: Now-provider used for the year component
        last_issued: Highest number already issued per (prefix, year)
    """

    def __init__(
        self,
        start: int = 1,
        clock: Optional[Clock] = None,
        last_issued: Optional[dict[tuple[str, int], int]] = None,
    ) -> None:
        super().__init__(clock)
        self._start = start
        self._counters: dict[tuple[str, int], int] = dict(last_issued or {})

    @classmethod
    def from_existing(
        cls, identifiers: Iterable[str], clock: Optional[Clock] = None
    ) -> "SequentialIdentifierGenerator":
        """Seed counters from record numbers already in use."""
        last_issued: dict[tuple[str, int], int] = {}
        for identifier in identifiers:
            if not is_valid_identifier(identifier):
                continue
            prefix, year, number = identifier.split("-")
            key = (prefix, int(year))
            last_issued[key] = max(last_issued.get(key, 0), int(number))
        return cls(clock=clock, last_issued=last_issued)

    def generate(self, prefix: str) -> str:
        _check_prefix(prefix)
        key = (prefix, self.current_year())
        number = self._counters.get(key, self._start - 1) + 1
        if number > MAX_SUFFIX:
            raise IdentifierExhaustedError(
                f"Sequence for {prefix}-{key[1]} exhausted at {MAX_SUFFIX}"
            )
        self._counters[key] = number
        identifier = format_identifier(prefix, key[1], number)
        logger.debug(f"Generated identifier: {identifier}")
        return identifier


_default_generator: IdentifierGenerator = RandomIdentifierGenerator()


def generate_identifier(prefix: str, generator: Optional[IdentifierGenerator] = None) -> str:
    """Generate a record number with the given (or default random) strategy.

    Example:
        >>> generate_identifier(MRN_PREFIX)  # doctest: +SKIP
        'MR-2024-048213'
    """
    return (generator or _default_generator).generate(prefix)


def create_generator(
    strategy: str = "random",
    seed: Optional[int] = None,
    existing: Iterable[str] = (),
    clock: Optional[Clock] = None,
) -> IdentifierGenerator:
    """Build an identifier generator for a configured strategy.

    Args:
        strategy: "random", "checked" or "sequential"
        seed: Optional seed for reproducible random numbers
        existing: Record numbers already in use (checked and sequential only)
        clock: Now-provider used for the year component

    Raises:
        ValueError: If strategy is unknown
    """
    rng = random.Random(seed) if seed is not None else None
    if strategy == "random":
        return RandomIdentifierGenerator(rng=rng, clock=clock)
    if strategy == "checked":
        return CheckedRandomIdentifierGenerator(existing=existing, rng=rng, clock=clock)
    if strategy == "sequential":
        return SequentialIdentifierGenerator.from_existing(existing, clock=clock)
    raise ValueError(
        f"Unknown identifier strategy: {strategy}. Must be one of: random, checked, sequential"
    )
