# beautybook/models/booking.py
from sqlalchemy import (
    Column, String, Text, Date, DateTime, Numeric, ForeignKey, Index, Uuid, Enum as SQLEnum, text
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
import enum
from beautybook.models.base import Base


class BookingStatus(str, enum.Enum):
    """Booking lifecycle states; transitions live in the booking state machine."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Bookings in these states occupy their time slot
ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_business_date", "business_id", "date"),
        # Canonical slot key: one active booking per business start time
        Index(
            "uq_bookings_active_slot",
            "business_id",
            "start_time",
            unique=True,
            postgresql_where=text("status IN ('PENDING', 'CONFIRMED')"),
            sqlite_where=text("status IN ('PENDING', 'CONFIRMED')"),
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id"), nullable=False)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id"), nullable=False)
    staff_id = Column(Uuid(as_uuid=True), ForeignKey("staff.id"), nullable=True)
    promotion_id = Column(Uuid(as_uuid=True), ForeignKey("promotions.id"), nullable=True)

    # Appointment details (business-local wall-clock time)
    date = Column(Date, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    notes = Column(Text, nullable=True)

    # Price snapshot taken at creation
    total_price = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)

    # Status tracking
    status = Column(SQLEnum(BookingStatus, name="booking_status"), nullable=False, default=BookingStatus.PENDING)
    payment_status = Column(SQLEnum(PaymentStatus, name="payment_status"), nullable=False, default=PaymentStatus.PENDING)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    user = relationship("User")
    business = relationship("Business")
    service = relationship("Service")

    def __repr__(self):
        return f"<Booking(id={self.id}, business_id={self.business_id}, status={self.status})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "business_id": str(self.business_id),
            "service_id": str(self.service_id),
            "staff_id": str(self.staff_id) if self.staff_id else None,
            "date": self.date.isoformat(),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "status": self.status.value,
            "payment_status": self.payment_status.value,
            "total_price": float(self.total_price),
            "discount_amount": float(self.discount_amount or 0),
            "notes": self.notes,
            "cancellation_reason": self.cancellation_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
