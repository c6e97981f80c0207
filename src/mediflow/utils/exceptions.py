"""Custom exception classes for MediFlow.

All exceptions inherit from MediflowError to allow catching all custom exceptions.
"""


class MediflowError(Exception):
    """Base exception for all MediFlow custom exceptions."""

    pass


class ValidationError(MediflowError):
    """Raised when clinical data validation fails.

    Examples:
        - Dataset file with malformed records
        - Patient CSV missing required columns
    """

    pass


class RecordShapeError(ValidationError):
    """Raised when a record is missing a required field or reference.

    Examples:
        - Visit without an owning patient reference
        - Lab order without an order number
        - Appointment with an unparseable date
    """

    def __init__(self, record_type: str, field_name: str, message: str) -> None:
        self.record_type = record_type
        self.field_name = field_name
        super().__init__(f"Invalid {record_type} [{field_name}]: {message}")


class RecordNotFoundError(MediflowError):
    """Raised when a store operation references an unknown record.

    Examples:
        - Recording vitals for a visit id that does not exist
        - Booking an appointment for an unregistered patient
    """

    def __init__(self, record_type: str, record_id: str) -> None:
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(f"{record_type} not found: {record_id}")


class DuplicateRecordError(MediflowError):
    """Raised when a record with the same identifier already exists.

    Examples:
        - Registering a second patient with an existing MRN
        - Creating a visit whose id is already in the store
    """

    pass


class InvalidTransitionError(MediflowError):
    """Raised when a status change would move a record backwards.

    Statuses are forward-only: discharged visits are never reactivated and
    completed orders never return to pending.
    """

    def __init__(self, record_type: str, current: str, target: str) -> None:
        self.record_type = record_type
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot change {record_type} status from {current} to {target}"
        )


class IdentifierError(MediflowError):
    """Base exception for record number generation errors."""

    pass


class IdentifierCollisionError(IdentifierError):
    """Raised when a collision-checked generator cannot find a free number.

    Examples:
        - Every retry produced an MRN already issued this year
    """

    pass


class IdentifierExhaustedError(IdentifierError):
    """Raised when a sequential generator runs past 999999 for a prefix/year."""

    pass


class ConfigurationError(MediflowError):
    """Raised when configuration loading or validation fails.

    Examples:
        - Missing required configuration
        - Invalid configuration file format
        - Reference range with low bound above high bound
    """

    pass
