# beautybook/services/booking/state_machine.py
"""
Booking lifecycle.

    PENDING -> CONFIRMED -> COMPLETED
       |           |
       +-----------+--> CANCELLED

COMPLETED and CANCELLED are terminal. Status only changes through
confirm / complete / cancel below; there is no generic "set status".
"""
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Optional
from uuid import UUID
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from beautybook.config.settings import get_settings
from beautybook.core.clock import business_local_now, system_clock
from beautybook.core.exceptions import (
    BookingNotFound,
    BookingStorageError,
    CancellationWindowClosed,
    InvalidTransition,
    TooEarly,
)
from beautybook.models.booking import Booking, BookingStatus, PaymentStatus
from beautybook.services.booking.notification_service import NotificationService

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(booking: Booking, target: BookingStatus) -> None:
    if not can_transition(booking.status, target):
        raise InvalidTransition(
            f"Cannot change booking from {booking.status.value} to {target.value}"
        )


class BookingStateMachine:

    @staticmethod
    def _load(
            db: Session,
            booking_id: UUID,
            business_id: Optional[UUID] = None,
            user_id: Optional[UUID] = None
    ) -> Booking:
        """Load the booking row FOR UPDATE, scoped to an owner's business or a customer"""
        try:
            query = db.query(Booking).filter(Booking.id == booking_id)
            if business_id is not None:
                query = query.filter(Booking.business_id == business_id)
            if user_id is not None:
                query = query.filter(Booking.user_id == user_id)

            booking = query.with_for_update().first()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to load booking {booking_id}: {e}")
            raise BookingStorageError() from e

        if not booking:
            raise BookingNotFound()
        return booking

    @staticmethod
    def _commit(db: Session, booking: Booking, previous: BookingStatus) -> Booking:
        booking_id = booking.id
        try:
            db.commit()
            db.refresh(booking)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to persist transition for booking {booking_id}: {e}")
            raise BookingStorageError() from e

        logger.info(f"Booking {booking.id}: {previous.value} -> {booking.status.value}")
        NotificationService.booking_status_changed(booking)
        return booking

    @staticmethod
    def confirm(
            db: Session,
            booking_id: UUID,
            business_id: Optional[UUID] = None,
            payment_succeeded: bool = False,
            now: Optional[datetime] = None
    ) -> Booking:
        """PENDING -> CONFIRMED, by the owner or by a successful payment"""
        booking = BookingStateMachine._load(db, booking_id, business_id=business_id)
        try:
            ensure_transition(booking, BookingStatus.CONFIRMED)
        except InvalidTransition:
            db.rollback()
            raise

        previous = booking.status
        booking.status = BookingStatus.CONFIRMED
        booking.confirmed_at = now or system_clock()
        if payment_succeeded:
            booking.payment_status = PaymentStatus.SUCCEEDED

        return BookingStateMachine._commit(db, booking, previous)

    @staticmethod
    def complete(
            db: Session,
            booking_id: UUID,
            business_id: Optional[UUID] = None,
            now: Optional[datetime] = None
    ) -> Booking:
        """CONFIRMED -> COMPLETED, only once the appointment has ended"""
        now = now or system_clock()
        booking = BookingStateMachine._load(db, booking_id, business_id=business_id)
        try:
            ensure_transition(booking, BookingStatus.COMPLETED)

            local_now = business_local_now(now, booking.business.timezone)
            if local_now < booking.end_time:
                raise TooEarly(
                    f"Appointment ends at {booking.end_time:%Y-%m-%d %H:%M}; "
                    "it can be completed after that"
                )
        except (InvalidTransition, TooEarly):
            db.rollback()
            raise

        previous = booking.status
        booking.status = BookingStatus.COMPLETED
        booking.completed_at = now
        return BookingStateMachine._commit(db, booking, previous)

    @staticmethod
    def cancel(
            db: Session,
            booking_id: UUID,
            reason: Optional[str] = None,
            business_id: Optional[UUID] = None,
            customer_id: Optional[UUID] = None,
            now: Optional[datetime] = None
    ) -> Booking:
        """
        PENDING or CONFIRMED -> CANCELLED.

        Owners (business_id given) may cancel at any time. Customers
        (customer_id given) must cancel at least
        CUSTOMER_CANCELLATION_NOTICE_HOURS before the start. The freed slot
        is bookable again immediately since only active statuses block.
        """
        now = now or system_clock()
        booking = BookingStateMachine._load(db, booking_id, business_id=business_id, user_id=customer_id)
        try:
            ensure_transition(booking, BookingStatus.CANCELLED)

            if customer_id is not None and business_id is None:
                notice_hours = get_settings().CUSTOMER_CANCELLATION_NOTICE_HOURS
                local_now = business_local_now(now, booking.business.timezone)
                hours_before = (booking.start_time - local_now).total_seconds() / 3600
                if hours_before < notice_hours:
                    raise CancellationWindowClosed(
                        f"Cancellations must be made at least {notice_hours} hours before the "
                        "appointment. Contact the business directly for assistance."
                    )
        except (InvalidTransition, CancellationWindowClosed):
            db.rollback()
            raise

        previous = booking.status
        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = now
        if reason:
            booking.cancellation_reason = reason
            prefix = f"{booking.notes}\n" if booking.notes else ""
            booking.notes = f"{prefix}Cancellation reason: {reason}"

        return BookingStateMachine._commit(db, booking, previous)
