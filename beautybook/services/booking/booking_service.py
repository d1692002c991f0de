# ============================================================================
# beautybook/services/booking/booking_service.py
# Race-safe booking creation
# ============================================================================
"""
Booking creation.

Availability shown to a customer may be stale by the time they submit, so
the slot is re-validated inside the same transaction that inserts the
booking. The transaction first bumps ``businesses.booking_version``; that
UPDATE holds the business row lock (Postgres) or the database write lock
(SQLite) until commit, so two creations for one business cannot both pass
the overlap check. The partial unique index on (business_id, start_time)
backs this up for identical start times.
"""
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from beautybook.core.clock import business_local_now, system_clock
from beautybook.core.exceptions import (
    BookingError,
    BookingNotFound,
    BookingStorageError,
    BusinessClosed,
    SlotUnavailable,
)
from beautybook.models.booking import Booking, BookingStatus, PaymentStatus
from beautybook.models.business import Business
from beautybook.services.booking.conflict_resolver import ConflictResolver
from beautybook.services.promotion.promotion_service import PromotionService

logger = logging.getLogger(__name__)


def parse_slot_time(value: str) -> time:
    """'HH:MM' -> time"""
    return datetime.strptime(value, "%H:%M").time()


class BookingService:
    """Handles booking creation and payment bookkeeping"""

    @staticmethod
    def _lock_business(db: Session, business_id: UUID) -> None:
        db.execute(
            update(Business)
            .where(Business.id == business_id)
            .values(booking_version=Business.booking_version + 1)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def create_booking(
            db: Session,
            user_id: UUID,
            business_id: UUID,
            service_id: UUID,
            booking_date: date,
            slot_time: str,
            staff_id: Optional[UUID] = None,
            promotion_id: Optional[UUID] = None,
            notes: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Booking:
        """
        Re-validate the slot and insert a PENDING booking atomically.

        Raises:
            BusinessNotFound, ServiceNotFound, InvalidService: bad references
            BusinessClosed: no operating window on booking_date
            SlotUnavailable: slot off-grid, taken, blocked or in the past
            InvalidPromotion: promotion_id cannot be applied
            BookingStorageError: the write failed; nothing was saved
        """
        start_time = datetime.combine(booking_date, parse_slot_time(slot_time))

        try:
            business, service = ConflictResolver.load_bookable_service(db, business_id, service_id)
            local_now = business_local_now(now or system_clock(), business.timezone)
            BookingService._lock_business(db, business.id)

            window, slots = ConflictResolver.resolve_slots(
                db, business, service, booking_date, staff_id=staff_id, local_now=local_now
            )
            if window.closed:
                raise BusinessClosed(f"Business is closed on {booking_date.isoformat()}: {window.reason}")

            slot = next((s for s in slots if s.start == start_time), None)
            if slot is None or not slot.available:
                logger.info(f"Slot {start_time} unavailable for business {business.id}")
                raise SlotUnavailable()

            subtotal = Decimal(service.price)
            promotion, discount = PromotionService.apply(
                db, promotion_id, business.id, subtotal, local_now.date()
            )

            booking = Booking(
                user_id=user_id,
                business_id=business.id,
                service_id=service.id,
                staff_id=staff_id,
                promotion_id=promotion.id if promotion else None,
                date=booking_date,
                start_time=slot.start,
                end_time=slot.end,
                status=BookingStatus.PENDING,
                payment_status=PaymentStatus.PENDING,
                total_price=max(Decimal("0.00"), subtotal - discount),
                discount_amount=discount,
                notes=notes,
            )
            db.add(booking)
            db.commit()
            db.refresh(booking)

        except BookingError:
            db.rollback()
            raise
        except IntegrityError:
            db.rollback()
            logger.warning(f"Lost race for {start_time} at business {business_id}")
            raise SlotUnavailable()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Storage failure creating booking for business {business_id}: {e}")
            raise BookingStorageError() from e

        logger.info(
            f"Created booking {booking.id} for business {business.id} "
            f"{booking.start_time:%Y-%m-%d %H:%M}-{booking.end_time:%H:%M} total={booking.total_price}"
        )
        return booking

    @staticmethod
    def get_booking(db: Session, booking_id: UUID) -> Booking:
        booking = db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise BookingNotFound()
        return booking

    @staticmethod
    def record_payment_failure(db: Session, booking_id: UUID) -> Booking:
        """Payment collaborator reported a failed charge; status is unchanged"""
        booking = BookingService.get_booking(db, booking_id)
        booking.payment_status = PaymentStatus.FAILED
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise BookingStorageError() from e

        logger.info(f"Payment failed for booking {booking.id}")
        return booking
