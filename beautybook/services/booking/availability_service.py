# beautybook/services/booking/availability_service.py
from datetime import date, datetime
from typing import Any, Dict, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from beautybook.core.clock import business_local_now, system_clock
from beautybook.services.booking.conflict_resolver import ConflictResolver

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Customer-facing availability query"""

    @staticmethod
    def get_availability(
            db: Session,
            business_id: UUID,
            target_date: date,
            service_id: UUID,
            staff_id: Optional[UUID] = None,
            now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Slots for one business, service and date.

        Lock-free: a slot shown as available can still be taken by another
        customer before this one submits; create_booking re-checks.
        """
        business, service = ConflictResolver.load_bookable_service(db, business_id, service_id)
        local_now = business_local_now(now or system_clock(), business.timezone)

        window, slots = ConflictResolver.resolve_slots(
            db, business, service, target_date, staff_id=staff_id, local_now=local_now
        )

        response = {
            "business_id": str(business.id),
            "service_id": str(service.id),
            "date": target_date.isoformat(),
            "closed": window.closed,
            "slots": [slot.to_dict() for slot in slots],
        }

        if window.closed:
            response["reason"] = window.reason
            response["reason_code"] = window.reason_code.value
        else:
            logger.info(
                f"Availability for business {business.id} on {target_date}: "
                f"{sum(1 for s in slots if s.available)}/{len(slots)} slots free"
            )

        return response
