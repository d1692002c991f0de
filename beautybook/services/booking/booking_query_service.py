# ============================================================================
# beautybook/services/booking/booking_query_service.py
# Read-only booking queries for the owner dashboard
# ============================================================================
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional, Dict, Any
from uuid import UUID

from beautybook.models.booking import Booking, BookingStatus


class BookingQueryService:

    @staticmethod
    def list_bookings(
            db: Session,
            business_id: UUID,
            booking_date: Optional[date] = None,
            status: Optional[BookingStatus] = None,
            skip: int = 0,
            limit: int = 50
    ) -> Dict[str, Any]:
        """Get paginated list of bookings with filters."""
        query = db.query(Booking).filter(Booking.business_id == business_id)

        if booking_date:
            query = query.filter(Booking.date == booking_date)
        if status:
            query = query.filter(Booking.status == status)

        query = query.order_by(Booking.start_time.asc())
        total = query.count()
        bookings = query.offset(skip).limit(limit).all()

        return {
            "business_id": str(business_id),
            "total_bookings": total,
            "page": {
                "skip": skip,
                "limit": limit,
                "total_pages": (total + limit - 1) // limit if total > 0 else 0
            },
            "filters": {
                "date": booking_date.isoformat() if booking_date else None,
                "status": status.value if status else None,
            },
            "bookings": [booking.to_dict() for booking in bookings]
        }
