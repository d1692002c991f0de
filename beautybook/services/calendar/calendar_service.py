# beautybook/services/calendar/calendar_service.py
"""Effective operating window for a business on a given date"""
import enum
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple, Union
from uuid import UUID

from sqlalchemy.orm import Session

from beautybook.models.availability import Availability, TimeOff
from beautybook.models.staff import Staff, StaffSchedule

logger = logging.getLogger(__name__)


class ClosedReason(str, enum.Enum):
    NO_AVAILABILITY = "NO_AVAILABILITY"
    TIME_OFF = "TIME_OFF"
    STAFF_UNAVAILABLE = "STAFF_UNAVAILABLE"


@dataclass
class OperatingWindow:
    start: datetime
    end: datetime
    # Partial time off inside the window
    blocked: List[Tuple[datetime, datetime]] = field(default_factory=list)

    closed = False


@dataclass
class ClosedDay:
    reason_code: ClosedReason
    reason: str

    closed = True


CalendarResult = Union[OperatingWindow, ClosedDay]


def day_of_week(target_date: date) -> int:
    """0=Sunday ... 6=Saturday, the convention Availability rows are stored in"""
    return target_date.isoweekday() % 7


def build_operating_window(
        target_date: date,
        availability: Optional[Availability],
        time_offs: Sequence[TimeOff] = (),
        staff_schedule: Optional[StaffSchedule] = None,
        staff_requested: bool = False
) -> CalendarResult:
    """
    Combine already-loaded calendar rows into the day's window.

    Full-day time off wins over everything, then the weekly rule, then the
    staff member's own hours narrow what is left.
    """
    full_day = next((t for t in time_offs if t.is_full_day), None)
    if full_day is not None:
        reason = "business closed for this date"
        if full_day.reason:
            reason = f"{reason} ({full_day.reason})"
        return ClosedDay(ClosedReason.TIME_OFF, reason)

    if availability is None or not availability.is_active:
        return ClosedDay(ClosedReason.NO_AVAILABILITY, "no availability configured")

    start_time, end_time = availability.start_time, availability.end_time

    if staff_requested:
        if staff_schedule is None or not staff_schedule.is_active:
            return ClosedDay(ClosedReason.STAFF_UNAVAILABLE, "staff member is not working on this date")
        start_time = max(start_time, staff_schedule.start_time)
        end_time = min(end_time, staff_schedule.end_time)

    if end_time <= start_time:
        if staff_requested:
            return ClosedDay(ClosedReason.STAFF_UNAVAILABLE, "staff member is not working during business hours")
        return ClosedDay(ClosedReason.NO_AVAILABILITY, "no availability configured")

    blocked = [
        (datetime.combine(target_date, t.start_time), datetime.combine(target_date, t.end_time))
        for t in time_offs
        if not t.is_full_day
    ]

    return OperatingWindow(
        start=datetime.combine(target_date, start_time),
        end=datetime.combine(target_date, end_time),
        blocked=blocked,
    )


class CalendarService:
    """Loads calendar rows and resolves the operating window"""

    @staticmethod
    def get_operating_window(
            db: Session,
            business_id: UUID,
            target_date: date,
            staff_id: Optional[UUID] = None
    ) -> CalendarResult:
        weekday = day_of_week(target_date)

        availability = db.query(Availability).filter(
            Availability.business_id == business_id,
            Availability.day_of_week == weekday,
        ).first()

        time_offs = db.query(TimeOff).filter(
            TimeOff.business_id == business_id,
            TimeOff.date == target_date,
        ).all()

        staff_schedule = None
        if staff_id is not None:
            staff_schedule = db.query(StaffSchedule).join(Staff).filter(
                Staff.id == staff_id,
                Staff.business_id == business_id,
                Staff.is_active == True,
                StaffSchedule.day_of_week == weekday,
            ).first()

        result = build_operating_window(
            target_date,
            availability,
            time_offs,
            staff_schedule=staff_schedule,
            staff_requested=staff_id is not None,
        )

        if result.closed:
            logger.debug(f"Business {business_id} closed on {target_date}: {result.reason}")

        return result

    @staticmethod
    def get_closed_dates(db: Session, business_id: UUID, from_date: date) -> List[date]:
        """Upcoming dates the business has taken fully off"""
        time_offs = db.query(TimeOff).filter(
            TimeOff.business_id == business_id,
            TimeOff.date >= from_date,
            TimeOff.start_time.is_(None),
            TimeOff.end_time.is_(None),
        ).order_by(TimeOff.date.asc()).all()

        return sorted({t.date for t in time_offs})
