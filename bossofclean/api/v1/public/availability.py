# ============================================================================
# FILE: bossofclean/api/v1/public/availability.py
# Public availability endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from bossofclean.api.dependencies import get_now
from bossofclean.config.database import get_db
from bossofclean.core.timezone import local_today
from bossofclean.schemas.availability import (
    AvailableSlotsResponse,
    DateEligibilityResponse,
    EligibleDatesResponse,
)
from bossofclean.services.availability.availability_service import AvailabilityService

router = APIRouter(prefix="/cleaners", tags=["public-availability"])


@router.get("/{cleaner_id}/availability")
async def get_booking_calendar(
        cleaner_id: UUID = Path(..., description="The cleaner ID"),
        db: Session = Depends(get_db),
        now: datetime = Depends(get_now)
):
    """
    Weekly availability, upcoming blocked dates and upcoming confirmed bookings.
    Feeds the booking calendar.
    """
    return AvailabilityService.get_booking_calendar(db, cleaner_id, local_today(now))


@router.get("/{cleaner_id}/slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
        cleaner_id: UUID = Path(..., description="The cleaner ID"),
        target_date: date = Query(..., alias="date", description="Date to list slots for"),
        duration_hours: float = Query(..., gt=0, le=24, description="Service duration in hours"),
        db: Session = Depends(get_db),
        now: datetime = Depends(get_now)
):
    """
    Bookable time slots for one date.
    Advisory only: booking creation checks the slot again.
    """
    slots = AvailabilityService.compute_available_slots(
        db, cleaner_id, target_date, duration_hours, now
    )
    return {
        "cleaner_id": cleaner_id,
        "date": target_date,
        "duration_hours": duration_hours,
        "slots": [slot.to_dict() for slot in slots],
    }


@router.get("/{cleaner_id}/eligibility", response_model=DateEligibilityResponse)
async def check_date_eligibility(
        cleaner_id: UUID = Path(..., description="The cleaner ID"),
        target_date: date = Query(..., alias="date"),
        db: Session = Depends(get_db),
        now: datetime = Depends(get_now)
):
    """Whether a date can be selected at all (not past, worked weekday, not blocked)."""
    reason = AvailabilityService.date_ineligibility_reason(db, cleaner_id, target_date, now)
    return {
        "cleaner_id": cleaner_id,
        "date": target_date,
        "eligible": reason is None,
        "reason": reason,
    }


@router.get("/{cleaner_id}/eligible-dates", response_model=EligibleDatesResponse)
async def list_eligible_dates(
        cleaner_id: UUID = Path(..., description="The cleaner ID"),
        start: Optional[date] = Query(None, description="First date, defaults to today"),
        days: int = Query(30, ge=1, le=90),
        db: Session = Depends(get_db),
        now: datetime = Depends(get_now)
):
    """Selectable dates in a window, for the date picker."""
    start = start or local_today(now)
    dates = AvailabilityService.list_eligible_dates(db, cleaner_id, start, days, now)
    return {"cleaner_id": cleaner_id, "start": start, "days": days, "dates": dates}
