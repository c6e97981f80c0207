"""Custom log formatters for MediFlow.

This module provides specialized formatters for logging, including PII redaction.
"""

import logging
import re
from typing import List, Tuple


class PIIRedactingFormatter(logging.Formatter):
    """Formatter that redacts patient-identifying information from log messages.

    Redacts medical record numbers, phone numbers and patient names written
    as ``name=...`` or ``Patient: First Last``.

    Example:
        >>> formatter = PIIRedactingFormatter(redact_pii=True)
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_pii: bool = False,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_pii = redact_pii

        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # MRN: MR-2024-001234
            (re.compile(r"\bMR-\d{4}-\d{6}\b"), "[MRN-REDACTED]"),
            # Phone: +234 803 123 4567, 555-555-1234, (555) 555-1234
            (
                re.compile(r"(?<![\w-])\+?\(?\d{3}\)?[\s-]\d{3}[\s-]\d{3,4}(?:[\s-]\d{4})?\b"),
                "[PHONE-REDACTED]",
            ),
            # name="Aisha Bello", name='Aisha Bello', name=Aisha
            (re.compile(r"name=[\"']?([^\"'|,]+)[\"']?"), "name=[NAME-REDACTED]"),
            # Patient: Aisha Bello
            (
                re.compile(r"(Patient|Name):\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)+"),
                r"\1: [NAME-REDACTED]",
            ),
        ]

    def format(self, record: logging.LogRecord) -> str:
        original = super().format(record)

        if self.redact_pii:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
