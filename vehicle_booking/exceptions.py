"""
Custom exception classes for the vehicle booking app.

These exceptions provide precise error types that controllers and the
booking wizard can catch to render friendly messages instead of generic
500 errors.
"""


class BookingError(Exception):
    """Base class for every error raised by the booking domain."""

    default_message = "Error: booking failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class ValidationError(BookingError):
    """Raised when booking input is missing or malformed."""

    default_message = "All fields are required."

    def __init__(self, message: str | None = None, field_errors: dict | None = None) -> None:
        self.field_errors = dict(field_errors or {})
        super().__init__(message)


class InvalidDateRangeError(BookingError, ValueError):
    """Raised when a date range is built with its start after its end."""

    default_message = "Error: invalid date range"


class ConflictError(BookingError):
    """Raised when a booking would overlap an existing booking of the same vehicle."""

    default_message = (
        "This vehicle is already booked for the selected dates. "
        "Please choose a different date range or vehicle."
    )

    def __init__(self, vehicle_id=None, conflicting_range=None, message: str | None = None) -> None:
        self.vehicle_id = vehicle_id
        self.conflicting_range = conflicting_range
        super().__init__(message)


class TransientError(BookingError):
    """Raised when the store fails to persist; safe to retry."""

    default_message = "Error: storage is temporarily unavailable"


class InvalidTransitionError(BookingError):
    """Raised when the wizard is asked for a transition its current state does not allow."""

    default_message = "Error: invalid wizard transition"


class VehicleNotFoundError(BookingError):
    """Raised when a vehicle ID cannot be found in the catalog."""

    default_message = "Error: vehicle not found"


class VehicleTypeNotFoundError(BookingError):
    """Raised when a vehicle type ID cannot be found in the catalog."""

    default_message = "Error: vehicle type not found"
