# beautybook/schemas/__init__.py
from .booking import (
    BookingCreateRequest,
    BookingCancelRequest,
    BookingCreatedResponse,
    BookingResponse,
    SlotResponse,
    AvailabilityResponse,
)
from .business import (
    AvailabilityRuleSchema,
    AvailabilityUpdateRequest,
    AvailabilityRuleResponse,
    TimeOffCreateRequest,
    TimeOffResponse,
)

__all__ = [
    "BookingCreateRequest",
    "BookingCancelRequest",
    "BookingCreatedResponse",
    "BookingResponse",
    "SlotResponse",
    "AvailabilityResponse",
    "AvailabilityRuleSchema",
    "AvailabilityUpdateRequest",
    "AvailabilityRuleResponse",
    "TimeOffCreateRequest",
    "TimeOffResponse",
]
