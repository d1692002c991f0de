# beautybook/core/exceptions.py
"""
Typed booking outcomes.

Services raise these; the API layer renders each one as
{"error": <code>, "detail": <message>} with the class's HTTP status, so
callers branch on the stable ``code`` rather than on message text.
"""
from typing import Optional


class BookingError(Exception):
    """Base class for every booking-domain failure"""

    code = "BOOKING_ERROR"
    status_code = 400
    default_message = "Booking request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message}


class BusinessNotFound(BookingError):
    code = "BUSINESS_NOT_FOUND"
    status_code = 404
    default_message = "Business not found"


class BusinessClosed(BookingError):
    code = "BUSINESS_CLOSED"
    status_code = 409
    default_message = "Business is closed on this date"


class ServiceNotFound(BookingError):
    code = "SERVICE_NOT_FOUND"
    status_code = 404
    default_message = "Service not found"


class InvalidService(BookingError):
    code = "INVALID_SERVICE"
    status_code = 422
    default_message = "Invalid service"


class SlotUnavailable(BookingError):
    code = "SLOT_UNAVAILABLE"
    status_code = 409
    default_message = "This time slot is no longer available. Please choose another time."


class InvalidPromotion(BookingError):
    code = "INVALID_PROMOTION"
    status_code = 422
    default_message = "Promotion cannot be applied"


class BookingNotFound(BookingError):
    code = "BOOKING_NOT_FOUND"
    status_code = 404
    default_message = "Booking not found"


class InvalidTransition(BookingError):
    code = "INVALID_TRANSITION"
    status_code = 409
    default_message = "Booking cannot move to the requested status"


class TooEarly(BookingError):
    code = "TOO_EARLY"
    status_code = 409
    default_message = "Appointment has not finished yet"


class CancellationWindowClosed(BookingError):
    code = "CANCELLATION_WINDOW_CLOSED"
    status_code = 409
    default_message = (
        "Cancellations must be made in advance. "
        "Contact the business directly for assistance."
    )


class BookingStorageError(BookingError):
    """Storage failed mid-write; nothing was persisted and the call can be retried"""
    code = "STORAGE_ERROR"
    status_code = 503
    default_message = "Booking could not be saved, please retry"
