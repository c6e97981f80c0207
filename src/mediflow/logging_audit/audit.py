"""Audit trail functionality for MediFlow.

This module provides structured audit logging for clinical record mutations
(registrations, status changes, orders, discharges).
"""

import time
import uuid
from typing import Any, Dict

from .logger import get_logger

logger = get_logger(__name__)

# Key fields rendered first, in this order
FIELD_ORDER = [
    "status",
    "record_type",
    "record_id",
    "record_number",
    "from_status",
    "to_status",
    "actor",
    "error_message",
    "correlation_id",
]


def log_audit_event(event_type: str, details: Dict[str, Any]) -> str:
    """Log an audit trail event.

    Creates a structured audit log entry. Events are logged at INFO level for
    successful operations and ERROR level for failures.

    Args:
        event_type: Type of operation (e.g., "PATIENT_REGISTERED",
                   "VISIT_DISCHARGED", "LAB_ORDER_STATUS_CHANGED")
        details: Event details. Common fields include:
                - record_type / record_id / record_number
                - from_status / to_status for lifecycle changes
                - actor: staff id performing the change
                - status: "success" or "failure"

    Returns:
        The audit message that was logged

    Example:
        >>> log_audit_event("VISIT_DISCHARGED", {
        ...     "record_type": "visit",
        ...     "record_number": "VS-2024-000123",
        ...     "from_status": "ACTIVE",
        ...     "to_status": "DISCHARGED",
        ... })
    """
    entry = dict(details)
    entry.setdefault("timestamp", time.time())
    entry.setdefault("correlation_id", str(uuid.uuid4()))
    entry.setdefault("status", "success")

    message_parts = [f"AUDIT [{event_type}]"]

    for field in FIELD_ORDER:
        if field in entry:
            message_parts.append(f"{field}={entry[field]}")

    for key, value in entry.items():
        if key not in FIELD_ORDER and key != "timestamp":
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    if entry["status"] == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)

    return audit_message
