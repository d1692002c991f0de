# beautybook/models/availability.py
from sqlalchemy import Column, String, Integer, Boolean, Time, Date, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from beautybook.models.base import Base
import uuid


class Availability(Base):
    """Recurring weekly opening hours, one row per open day"""
    __tablename__ = "availabilities"
    __table_args__ = (
        UniqueConstraint("business_id", "day_of_week", name="uq_availability_business_day"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)

    day_of_week = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    is_active = Column(Boolean, default=True)

    business = relationship("Business", back_populates="availabilities")

    def to_dict(self):
        return {
            "id": str(self.id),
            "day_of_week": self.day_of_week,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "is_active": self.is_active,
        }


class TimeOff(Base):
    """Date-specific closures (holidays, vacation, a blocked afternoon)"""
    __tablename__ = "time_offs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)

    date = Column(Date, nullable=False, index=True)
    # Both null = closed all day; both set = only this part of the day is blocked
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    reason = Column(String, nullable=True)  # "Holiday", "Vacation", etc.

    business = relationship("Business", back_populates="time_offs")

    @property
    def is_full_day(self) -> bool:
        return self.start_time is None or self.end_time is None

    def to_dict(self):
        return {
            "id": str(self.id),
            "business_id": str(self.business_id),
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
            "reason": self.reason,
            "is_full_day": self.is_full_day,
        }
