"""
Pydantic schemas for booking requests and responses
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
from uuid import UUID

TIME_PATTERN = r"^\d{2}:\d{2}$"


def _check_clock_time(value: str) -> str:
    """Reject 'HH:MM' strings that match the pattern but aren't real times"""
    try:
        datetime.strptime(value, "%H:%M")
    except ValueError:
        raise ValueError("time must be a valid HH:MM value")
    return value


# ============================================================================
# Request Schemas
# ============================================================================

class BookingCreateRequest(BaseModel):
    """Customer booking request; date and time are in the business's local time"""
    business_id: UUID
    service_id: UUID
    date: date
    time: str = Field(..., pattern=TIME_PATTERN, description="Slot start, HH:MM")
    staff_id: Optional[UUID] = None
    promotion_id: Optional[UUID] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return _check_clock_time(v)


class BookingCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


# ============================================================================
# Response Schemas
# ============================================================================

class BookingCreatedResponse(BaseModel):
    booking_id: str
    total_price: float
    discount_amount: float
    status: str
    start_time: str
    end_time: str


class BookingResponse(BaseModel):
    id: str
    user_id: str
    business_id: str
    service_id: str
    staff_id: Optional[str] = None
    date: str
    start_time: str
    end_time: str
    status: str
    payment_status: str
    total_price: float
    discount_amount: float
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[str] = None


class SlotResponse(BaseModel):
    time: str
    available: bool


class AvailabilityResponse(BaseModel):
    business_id: str
    service_id: str
    date: str
    closed: bool
    reason: Optional[str] = None
    reason_code: Optional[str] = None
    slots: List[SlotResponse]
