"""
Pydantic schemas for weekly schedules, blocked dates and slots
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date, time
from uuid import UUID


class TimeRange(BaseModel):
    """One available range within a day, e.g. 08:00-12:00"""
    start_time: time
    end_time: time

    @model_validator(mode='after')
    def validate_order(self):
        if self.start_time >= self.end_time:
            raise ValueError('start_time must be before end_time')
        return self


class DaySchedule(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0=Monday, 6=Sunday")
    is_available: bool = True
    slots: List[TimeRange] = Field(default_factory=list)


class WeeklyScheduleUpdate(BaseModel):
    """
    Full weekly schedule. Saving replaces every stored range.
    """
    days: List[DaySchedule]
    instant_booking: Optional[bool] = None

    @field_validator('days')
    @classmethod
    def validate_unique_days(cls, v):
        seen = [d.day_of_week for d in v]
        if len(seen) != len(set(seen)):
            raise ValueError('Each day_of_week may appear only once')
        return v


class BlockedDateCreate(BaseModel):
    blocked_date: date
    reason: Optional[str] = Field(None, max_length=255)


class BlockedDateResponse(BaseModel):
    id: UUID
    blocked_date: date
    reason: Optional[str] = None


class TimeSlotResponse(BaseModel):
    start_time: str
    end_time: str


class AvailableSlotsResponse(BaseModel):
    cleaner_id: UUID
    date: date
    duration_hours: float
    slots: List[TimeSlotResponse]


class DateEligibilityResponse(BaseModel):
    cleaner_id: UUID
    date: date
    eligible: bool
    reason: Optional[str] = None


class EligibleDatesResponse(BaseModel):
    cleaner_id: UUID
    start: date
    days: int
    dates: List[date]
