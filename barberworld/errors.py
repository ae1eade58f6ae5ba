# barberworld/errors.py
"""
Error taxonomy shared by the server routes and the client-side services.

Lower layers (repository, API client) raise these; the booking guard and the
reconciler decide between falling back and surfacing them.
"""

from typing import Optional


class BookingError(Exception):
    """Base class for every classified booking failure"""

    status_code = 500
    code = "booking_error"
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class ValidationError(BookingError):
    status_code = 422
    code = "validation_error"
    default_message = "Missing required booking fields"


class ConflictError(BookingError):
    status_code = 409
    code = "conflict"
    default_message = "Conflicting appointment"


class SlotAlreadyBooked(ConflictError):
    code = "slot_already_booked"
    default_message = "That time is already booked, please pick another time"


class IdentityUnavailable(BookingError):
    status_code = 401
    code = "identity_unavailable"
    default_message = "Please log in again to continue"


class NotFound(BookingError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class TransientNetworkError(BookingError):
    status_code = 503
    code = "network_error"
    default_message = "Network error, please try again"


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (ValidationError, ConflictError, SlotAlreadyBooked, IdentityUnavailable, NotFound, TransientNetworkError)
}
