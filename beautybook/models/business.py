# beautybook/models/business.py
"""
Business Model
A business owns its services, weekly availability, time off, staff and bookings.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Numeric, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from beautybook.models.base import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True)

    # Platform commission taken from each booking (0.10 = 10%)
    commission_rate = Column(Numeric(5, 4), nullable=False, default=0.10)

    # All booking times are stored as wall-clock times in this zone
    timezone = Column(String(50), nullable=False, default="UTC")

    # Bumped inside every booking-creation transaction; the UPDATE doubles as
    # the per-business write lock
    booking_version = Column(Integer, nullable=False, default=0)

    is_verified = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    services = relationship("Service", back_populates="business")
    availabilities = relationship("Availability", back_populates="business", cascade="all, delete-orphan")
    time_offs = relationship("TimeOff", back_populates="business", cascade="all, delete-orphan")
    staff = relationship("Staff", back_populates="business")

    def __repr__(self):
        return f"<Business(id={self.id}, name={self.name})>"
