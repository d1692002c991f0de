# beautybook/models/__init__.py
from .base import Base
from .user import User, UserRole
from .business import Business
from .availability import Availability, TimeOff
from .service import Service
from .staff import Staff, StaffSchedule
from .promotion import Promotion, PromotionType
from .booking import Booking, BookingStatus, PaymentStatus, ACTIVE_STATUSES

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Business",
    "Availability",
    "TimeOff",
    "Service",
    "Staff",
    "StaffSchedule",
    "Promotion",
    "PromotionType",
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "ACTIVE_STATUSES",
]
