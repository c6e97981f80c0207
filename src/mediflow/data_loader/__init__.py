"""Data loader module.

This module loads clinical datasets from JSON and patient rosters from CSV,
and validates loaded datasets for consistency.
"""

from .loader import build_store, load_dataset, load_patients_csv
from .validator import IssueSeverity, ValidationIssue, ValidationResult, validate_dataset

__all__ = [
    "IssueSeverity",
    "ValidationIssue",
    "ValidationResult",
    "build_store",
    "load_dataset",
    "load_patients_csv",
    "validate_dataset",
]
