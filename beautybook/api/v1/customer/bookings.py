# ============================================================================
# beautybook/api/v1/customer/bookings.py
# Customer booking endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from beautybook.api.dependencies import get_current_user
from beautybook.config.database import get_db
from beautybook.core.clock import Clock, get_clock
from beautybook.models.business import Business
from beautybook.models.user import User
from beautybook.schemas.booking import (
    BookingCancelRequest,
    BookingCreateRequest,
    BookingCreatedResponse,
    BookingResponse,
)
from beautybook.services.booking.booking_service import BookingService
from beautybook.services.booking.state_machine import BookingStateMachine

router = APIRouter(prefix="/bookings", tags=["customer-bookings"])


@router.post("", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
        request: BookingCreateRequest,
        current_user: User = Depends(get_current_user),
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    """
    Book a slot. The slot is re-checked at write time; on success the booking
    is PENDING until payment or the business confirms it.
    """
    booking = BookingService.create_booking(
        db=db,
        user_id=current_user.id,
        business_id=request.business_id,
        service_id=request.service_id,
        booking_date=request.date,
        slot_time=request.time,
        staff_id=request.staff_id,
        promotion_id=request.promotion_id,
        notes=request.notes,
        now=clock(),
    )

    return BookingCreatedResponse(
        booking_id=str(booking.id),
        total_price=float(booking.total_price),
        discount_amount=float(booking.discount_amount),
        status=booking.status.value,
        start_time=booking.start_time.isoformat(),
        end_time=booking.end_time.isoformat(),
    )


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Visible to the customer who made it and to the business owner."""
    booking = BookingService.get_booking(db, booking_id)

    owner_id = db.query(Business.owner_id).filter(Business.id == booking.business_id).scalar()
    if current_user.id not in (booking.user_id, owner_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this booking"
        )

    return booking.to_dict()


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        request: Optional[BookingCancelRequest] = None,
        current_user: User = Depends(get_current_user),
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    """Customer cancellation; subject to the advance-notice policy."""
    booking = BookingStateMachine.cancel(
        db=db,
        booking_id=booking_id,
        reason=request.reason if request else None,
        customer_id=current_user.id,
        now=clock(),
    )
    return booking.to_dict()
