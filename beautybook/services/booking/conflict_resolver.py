# beautybook/services/booking/conflict_resolver.py
"""
Booking conflict resolution: which generated slots are actually free.

Read path only. The write path in BookingService runs the same resolution
again under the per-business lock before inserting.
"""
import logging
from datetime import date, datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from beautybook.config.settings import get_settings
from beautybook.core.exceptions import BusinessNotFound, ServiceNotFound, InvalidService
from beautybook.models.booking import Booking, ACTIVE_STATUSES
from beautybook.models.business import Business
from beautybook.models.service import Service
from beautybook.services.calendar.calendar_service import CalendarService, CalendarResult
from beautybook.services.slots.slot_generator import Slot, generate_slots, mark_unavailable

logger = logging.getLogger(__name__)


class ConflictResolver:

    @staticmethod
    def load_bookable_service(db: Session, business_id: UUID, service_id: UUID) -> Tuple[Business, Service]:
        """Fetch an active business and one of its active services, or raise"""
        business = db.query(Business).filter(
            Business.id == business_id,
            Business.is_active == True
        ).first()
        if not business:
            raise BusinessNotFound()

        service = db.query(Service).filter(Service.id == service_id).first()
        if not service:
            raise ServiceNotFound()

        if service.business_id != business.id:
            logger.warning(f"Service {service_id} does not belong to business {business_id}")
            raise InvalidService("Service is not offered by this business")
        if not service.is_active:
            raise InvalidService("Service is no longer available")

        return business, service

    @staticmethod
    def get_busy_intervals(db: Session, business_id: UUID, target_date: date) -> List[Tuple[datetime, datetime]]:
        """Time ranges held by PENDING or CONFIRMED bookings on the date"""
        rows = db.query(Booking.start_time, Booking.end_time).filter(
            Booking.business_id == business_id,
            Booking.date == target_date,
            Booking.status.in_(ACTIVE_STATUSES)
        ).all()
        return [(row.start_time, row.end_time) for row in rows]

    @staticmethod
    def resolve_slots(
            db: Session,
            business: Business,
            service: Service,
            target_date: date,
            staff_id: Optional[UUID] = None,
            local_now: Optional[datetime] = None
    ) -> Tuple[CalendarResult, List[Slot]]:
        """Operating window plus every candidate slot with availability marked"""
        window = CalendarService.get_operating_window(db, business.id, target_date, staff_id=staff_id)
        if window.closed:
            return window, []

        slots = generate_slots(
            window.start,
            window.end,
            service.duration_minutes,
            get_settings().SLOT_INTERVAL_MINUTES,
        )

        busy = ConflictResolver.get_busy_intervals(db, business.id, target_date) + window.blocked
        return window, mark_unavailable(slots, busy, not_before=local_now)
