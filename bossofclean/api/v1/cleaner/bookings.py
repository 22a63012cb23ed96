# ============================================================================
# FILE: bossofclean/api/v1/cleaner/bookings.py
# Cleaner booking endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
from uuid import UUID

from bossofclean.api.dependencies import get_current_cleaner, get_now
from bossofclean.config.database import get_db
from bossofclean.models import Cleaner
from bossofclean.schemas.booking import (
    BookingActionResponse,
    BookingListResponse,
    CleanerBookingActionRequest,
)
from bossofclean.services.booking.booking_service import BookingService

router = APIRouter(prefix="/cleaner/bookings", tags=["cleaner-bookings"])


@router.get("", response_model=BookingListResponse)
async def list_bookings(
        status: Optional[str] = Query(None, description="Filter by status (confirmed, cancelled, completed)"),
        cleaner: Cleaner = Depends(get_current_cleaner),
        db: Session = Depends(get_db),
        now: datetime = Depends(get_now)
):
    bookings = BookingService.list_cleaner_bookings(db, cleaner.id, status=status)
    return {
        "total": len(bookings),
        "bookings": [BookingService.serialize(b, now) for b in bookings],
    }


@router.patch("/{booking_id}", response_model=BookingActionResponse)
async def update_booking(
        body: CleanerBookingActionRequest,
        booking_id: UUID = Path(..., description="The booking ID"),
        cleaner: Cleaner = Depends(get_current_cleaner),
        db: Session = Depends(get_db),
        now: datetime = Depends(get_now)
):
    """
    confirm: acknowledge a confirmed booking
    decline: cancel it, with an optional reason
    complete: mark it done once its end time has passed
    """
    if body.action == "confirm":
        booking = BookingService.confirm_booking(db, booking_id, cleaner.id)
        message = "Booking confirmed"
    elif body.action == "decline":
        booking = BookingService.decline_booking(db, booking_id, cleaner.id, now, reason=body.reason)
        message = "Booking declined"
    else:
        booking = BookingService.complete_booking(db, booking_id, cleaner.id, now)
        message = "Booking marked as completed"

    return {"message": message, "booking": BookingService.serialize(booking, now)}
