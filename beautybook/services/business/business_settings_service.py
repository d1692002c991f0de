# beautybook/services/business/business_settings_service.py
"""Owner-managed calendar settings: weekly hours and time off"""
from datetime import date, time
from typing import List, Optional, Sequence
from uuid import UUID
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from beautybook.core.exceptions import BookingStorageError
from beautybook.models.availability import Availability, TimeOff
from beautybook.models.business import Business

logger = logging.getLogger(__name__)


class BusinessSettingsService:

    @staticmethod
    def get_owned_business(db: Session, owner_id: UUID) -> Optional[Business]:
        return db.query(Business).filter(
            Business.owner_id == owner_id,
            Business.is_active == True
        ).first()

    @staticmethod
    def list_availability(db: Session, business_id: UUID) -> List[Availability]:
        return db.query(Availability).filter(
            Availability.business_id == business_id
        ).order_by(Availability.day_of_week.asc()).all()

    @staticmethod
    def replace_availability(db: Session, business_id: UUID, rules: Sequence[dict]) -> List[Availability]:
        """
        Swap the whole weekly schedule in one transaction.

        Each rule is a dict with day_of_week, start_time, end_time, is_active.
        Existing bookings are left untouched.
        """
        try:
            db.query(Availability).filter(
                Availability.business_id == business_id
            ).delete(synchronize_session=False)

            created = [
                Availability(
                    business_id=business_id,
                    day_of_week=rule["day_of_week"],
                    start_time=rule["start_time"],
                    end_time=rule["end_time"],
                    is_active=rule.get("is_active", True),
                )
                for rule in rules
            ]
            db.add_all(created)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update availability for business {business_id}: {e}")
            raise BookingStorageError("Availability could not be saved, please retry") from e

        logger.info(f"Replaced availability for business {business_id} ({len(created)} rules)")
        return BusinessSettingsService.list_availability(db, business_id)

    @staticmethod
    def create_time_off(
            db: Session,
            business_id: UUID,
            off_date: date,
            start_time: Optional[time] = None,
            end_time: Optional[time] = None,
            reason: Optional[str] = None
    ) -> TimeOff:
        time_off = TimeOff(
            business_id=business_id,
            date=off_date,
            start_time=start_time,
            end_time=end_time,
            reason=reason,
        )
        db.add(time_off)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise BookingStorageError("Time off could not be saved, please retry") from e

        db.refresh(time_off)
        logger.info(f"Time off added for business {business_id} on {off_date}")
        return time_off

    @staticmethod
    def list_time_off(db: Session, business_id: UUID, from_date: Optional[date] = None) -> List[TimeOff]:
        query = db.query(TimeOff).filter(TimeOff.business_id == business_id)
        if from_date:
            query = query.filter(TimeOff.date >= from_date)
        return query.order_by(TimeOff.date.asc()).all()

    @staticmethod
    def delete_time_off(db: Session, business_id: UUID, time_off_id: UUID) -> bool:
        """Returns False when the time off doesn't exist or belongs to another business"""
        time_off = db.query(TimeOff).filter(
            TimeOff.id == time_off_id,
            TimeOff.business_id == business_id
        ).first()
        if not time_off:
            return False

        db.delete(time_off)
        db.commit()
        return True
