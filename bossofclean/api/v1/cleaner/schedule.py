# ============================================================================
# FILE: bossofclean/api/v1/cleaner/schedule.py
# Cleaner schedule management - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID

from bossofclean.api.dependencies import get_current_cleaner
from bossofclean.config.database import get_db
from bossofclean.models import Cleaner
from bossofclean.schemas.availability import BlockedDateCreate, BlockedDateResponse, WeeklyScheduleUpdate
from bossofclean.services.availability.availability_service import AvailabilityService

router = APIRouter(prefix="/cleaner", tags=["cleaner-schedule"])


@router.get("/availability")
async def get_weekly_schedule(
        cleaner: Cleaner = Depends(get_current_cleaner),
        db: Session = Depends(get_db)
):
    """Weekly schedule of the current cleaner, one entry per day (0=Monday)."""
    return {
        "cleaner_id": str(cleaner.id),
        "instant_booking": cleaner.instant_booking,
        "days": AvailabilityService.get_weekly_schedule(db, cleaner.id),
    }


@router.put("/availability")
async def save_weekly_schedule(
        body: WeeklyScheduleUpdate,
        cleaner: Cleaner = Depends(get_current_cleaner),
        db: Session = Depends(get_db)
):
    """
    Replace the whole weekly schedule.
    Concurrent saves are last-write-wins.
    """
    days = AvailabilityService.replace_weekly_schedule(
        db,
        cleaner.id,
        [day.model_dump() for day in body.days],
        instant_booking=body.instant_booking,
    )
    return {
        "cleaner_id": str(cleaner.id),
        "instant_booking": cleaner.instant_booking,
        "days": days,
    }


@router.get("/blocked-dates")
async def list_blocked_dates(
        from_date: Optional[date] = Query(None, description="Only dates on or after this date"),
        cleaner: Cleaner = Depends(get_current_cleaner),
        db: Session = Depends(get_db)
):
    return {
        "cleaner_id": str(cleaner.id),
        "blocked_dates": AvailabilityService.list_blocked_dates(db, cleaner.id, from_date=from_date),
    }


@router.post("/blocked-dates", status_code=201, response_model=BlockedDateResponse)
async def add_blocked_date(
        body: BlockedDateCreate,
        cleaner: Cleaner = Depends(get_current_cleaner),
        db: Session = Depends(get_db)
):
    """Block a date. Blocking an already blocked date returns the existing entry."""
    return AvailabilityService.add_blocked_date(db, cleaner.id, body.blocked_date, body.reason)


@router.delete("/blocked-dates/{blocked_date_id}")
async def remove_blocked_date(
        blocked_date_id: UUID = Path(..., description="The blocked date ID"),
        cleaner: Cleaner = Depends(get_current_cleaner),
        db: Session = Depends(get_db)
):
    AvailabilityService.remove_blocked_date(db, cleaner.id, blocked_date_id)
    return {"success": True}
