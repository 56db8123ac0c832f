"""Error taxonomy shared by the scheduling, booking, and store layers.

Components raise these; ``BookingService`` turns them into tagged
result dicts whose ``error`` field is the exception's ``code``.
"""

from typing import Optional


class BookingError(Exception):
    """Base class for every failure the connector reports to its caller."""

    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(BookingError):
    """A required field is missing or malformed. Raised before any remote call."""

    code = "invalid_input"


class NotFoundError(BookingError):
    """A customer, vehicle, or appointment the caller referred to does not exist."""

    code = "not_found"


class SlotConflictError(BookingError):
    """The requested interval overlaps an existing active appointment."""

    code = "conflict"

    def __init__(self, message: str, conflicting_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.conflicting_id = conflicting_id


class RemoteFailureError(BookingError):
    """The remote store returned an error or could not be reached."""

    code = "remote_failure"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ServiceMisconfiguredError(RemoteFailureError):
    """The remote store rejected our credentials."""

    code = "misconfigured"

    def __init__(self, status_code: Optional[int] = None) -> None:
        super().__init__("API Authorization Forbidden. Check your API Key.", status_code)


class InvalidTransitionError(BookingError):
    """Raised when an appointment status change is not allowed from its current status."""

    code = "invalid_input"
