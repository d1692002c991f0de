"""
Business Calendar Settings Routes
Owner-authenticated endpoints for weekly hours and time off
"""
from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from beautybook.api.dependencies import require_business_owner
from beautybook.config.database import get_db
from beautybook.models.business import Business
from beautybook.schemas.business import (
    AvailabilityRuleResponse,
    AvailabilityUpdateRequest,
    TimeOffCreateRequest,
    TimeOffResponse,
)
from beautybook.services.business.business_settings_service import BusinessSettingsService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["dashboard-settings"])


@router.get("/availability", response_model=List[AvailabilityRuleResponse])
def get_availability_rules(
        business: Business = Depends(require_business_owner),
        db: Session = Depends(get_db)
):
    return [rule.to_dict() for rule in BusinessSettingsService.list_availability(db, business.id)]


@router.put("/availability", response_model=List[AvailabilityRuleResponse])
def replace_availability_rules(
        request: AvailabilityUpdateRequest,
        business: Business = Depends(require_business_owner),
        db: Session = Depends(get_db)
):
    """Replace the full weekly schedule. Days left out are closed."""
    rules = BusinessSettingsService.replace_availability(
        db,
        business.id,
        [rule.model_dump() for rule in request.availabilities],
    )
    return [rule.to_dict() for rule in rules]


@router.get("/time-off", response_model=List[TimeOffResponse])
def list_time_off(
        business: Business = Depends(require_business_owner),
        db: Session = Depends(get_db)
):
    return [t.to_dict() for t in BusinessSettingsService.list_time_off(db, business.id)]


@router.post("/time-off", response_model=TimeOffResponse, status_code=status.HTTP_201_CREATED)
def create_time_off(
        request: TimeOffCreateRequest,
        business: Business = Depends(require_business_owner),
        db: Session = Depends(get_db)
):
    """
    Close a whole date (no times) or block part of it.
    Existing bookings on that date are not cancelled automatically.
    """
    time_off = BusinessSettingsService.create_time_off(
        db,
        business.id,
        request.date,
        start_time=request.start_time,
        end_time=request.end_time,
        reason=request.reason,
    )
    return time_off.to_dict()


@router.delete("/time-off/{time_off_id}")
def delete_time_off(
        time_off_id: UUID = Path(..., description="The time off ID"),
        business: Business = Depends(require_business_owner),
        db: Session = Depends(get_db)
):
    if not BusinessSettingsService.delete_time_off(db, business.id, time_off_id):
        raise HTTPException(status_code=404, detail="Time off not found")

    return {"success": True}
