"""
Pydantic schemas for business calendar settings
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date, time


class AvailabilityRuleSchema(BaseModel):
    """Opening hours for one weekday (0=Sunday ... 6=Saturday)"""
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: time
    end_time: time
    is_active: bool = True

    @model_validator(mode="after")
    def validate_range(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class AvailabilityUpdateRequest(BaseModel):
    """Full weekly schedule; replaces whatever is stored"""
    availabilities: List[AvailabilityRuleSchema] = Field(default_factory=list)

    @field_validator("availabilities")
    @classmethod
    def validate_unique_days(cls, v):
        days = [rule.day_of_week for rule in v]
        if len(days) != len(set(days)):
            raise ValueError("Only one availability rule per day of week is allowed")
        return v


class AvailabilityRuleResponse(BaseModel):
    id: str
    day_of_week: int
    start_time: str
    end_time: str
    is_active: bool


class TimeOffCreateRequest(BaseModel):
    """Omit both times to close the whole day"""
    date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    reason: Optional[str] = Field(None, max_length=200)

    @model_validator(mode="after")
    def validate_partial_day(self):
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("Provide both start_time and end_time, or neither for a full day")
        if self.start_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class TimeOffResponse(BaseModel):
    id: str
    business_id: str
    date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None
    is_full_day: bool
