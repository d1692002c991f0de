# ============================================================================
# beautybook/api/v1/dashboard/bookings.py
# Business-owner booking management
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID

from beautybook.api.dependencies import require_business_owner
from beautybook.config.database import get_db
from beautybook.core.clock import Clock, get_clock
from beautybook.models.booking import BookingStatus
from beautybook.models.business import Business
from beautybook.schemas.booking import BookingCancelRequest, BookingResponse
from beautybook.services.booking.booking_query_service import BookingQueryService
from beautybook.services.booking.state_machine import BookingStateMachine

router = APIRouter(prefix="/bookings", tags=["dashboard-bookings"])


@router.get("")
def list_bookings(
        booking_date: Optional[date] = Query(None, alias="date", description="Only bookings on this date"),
        status: Optional[BookingStatus] = Query(None, description="PENDING, CONFIRMED, COMPLETED or CANCELLED"),
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(50, ge=1, le=100, description="Number of records to return"),
        business: Business = Depends(require_business_owner),
        db: Session = Depends(get_db)
):
    """Bookings for your business, earliest first."""
    return BookingQueryService.list_bookings(
        db=db,
        business_id=business.id,
        booking_date=booking_date,
        status=status,
        skip=skip,
        limit=limit,
    )


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
def confirm_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        business: Business = Depends(require_business_owner),
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    booking = BookingStateMachine.confirm(db, booking_id, business_id=business.id, now=clock())
    return booking.to_dict()


@router.post("/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        business: Business = Depends(require_business_owner),
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    """Only allowed once the appointment's end time has passed."""
    booking = BookingStateMachine.complete(db, booking_id, business_id=business.id, now=clock())
    return booking.to_dict()


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        request: Optional[BookingCancelRequest] = None,
        business: Business = Depends(require_business_owner),
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    """Owners can cancel pending or confirmed bookings at any time."""
    booking = BookingStateMachine.cancel(
        db,
        booking_id,
        reason=request.reason if request else None,
        business_id=business.id,
        now=clock(),
    )
    return booking.to_dict()
