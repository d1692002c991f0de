# ============================================================================
# beautybook/api/v1/public/availability.py
# Unauthenticated availability lookups used by the booking page
# ============================================================================
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session

from beautybook.config.database import get_db
from beautybook.core.clock import Clock, business_local_now, get_clock
from beautybook.core.exceptions import BusinessNotFound
from beautybook.models.business import Business
from beautybook.schemas.booking import AvailabilityResponse
from beautybook.services.booking.availability_service import AvailabilityService
from beautybook.services.calendar.calendar_service import CalendarService

router = APIRouter(tags=["public-availability"])


@router.get("/availability", response_model=AvailabilityResponse)
def get_availability(
        business_id: UUID = Query(..., description="Business to book with"),
        date: date = Query(..., description="Calendar date, YYYY-MM-DD (business local)"),
        service_id: UUID = Query(..., description="Service being booked"),
        staff_id: Optional[UUID] = Query(None, description="Narrow to one staff member's hours"),
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    """
    Bookable slots for a service on a date.
    A closed day returns closed=true, an empty slot list and the reason.
    """
    return AvailabilityService.get_availability(
        db=db,
        business_id=business_id,
        target_date=date,
        service_id=service_id,
        staff_id=staff_id,
        now=clock(),
    )


@router.get("/businesses/{business_id}/closed-dates")
def get_closed_dates(
        business_id: UUID = Path(..., description="The business ID"),
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    """Upcoming full-day closures, so the date picker can grey them out."""
    business = db.query(Business).filter(
        Business.id == business_id,
        Business.is_active == True
    ).first()
    if not business:
        raise BusinessNotFound()

    today = business_local_now(clock(), business.timezone).date()
    dates = CalendarService.get_closed_dates(db, business.id, today)
    return {"business_id": str(business.id), "dates": [d.isoformat() for d in dates]}
