# ============================================================================
# FILE: bossofclean/api/v1/customer/bookings.py
# Customer booking endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
from uuid import UUID

from bossofclean.api.dependencies import CurrentUser, get_current_user, get_now
from bossofclean.config.database import get_db
from bossofclean.core.exceptions import ValidationError
from bossofclean.schemas.booking import (
    BookingActionResponse,
    BookingCreateRequest,
    BookingListResponse,
    BookingResponse,
    BookingUpdateRequest,
)
from bossofclean.services.booking.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["customer-bookings"])


@router.post("", status_code=201, response_model=BookingActionResponse)
async def create_booking(
        request: BookingCreateRequest,
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
        now: datetime = Depends(get_now)
):
    """
    Book a cleaner for a date and start time.
    Returns 409 when the slot is no longer available.
    """
    booking = BookingService.validate_and_create_booking(db, current_user.id, request, now)
    return {
        "message": "Booking confirmed",
        "booking": BookingService.serialize(booking, now),
    }


@router.get("", response_model=BookingListResponse)
async def list_bookings(
        status: Optional[str] = Query(None, description="Filter by status (confirmed, cancelled, completed)"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
        now: datetime = Depends(get_now)
):
    """All bookings of the current customer, soonest first."""
    bookings = BookingService.list_customer_bookings(db, current_user.id, status=status)
    return {
        "total": len(bookings),
        "bookings": [BookingService.serialize(b, now) for b in bookings],
    }


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
        now: datetime = Depends(get_now)
):
    booking = BookingService.get_customer_booking(db, booking_id, current_user.id)
    return BookingService.serialize(booking, now)


@router.patch("/{booking_id}", response_model=BookingActionResponse)
async def update_booking(
        body: BookingUpdateRequest,
        booking_id: UUID = Path(..., description="The booking ID"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
        now: datetime = Depends(get_now)
):
    """
    Cancel or reschedule a booking.
    Both are refused (403) within 24 hours of the scheduled start.
    """
    if body.action == "cancel":
        booking = BookingService.cancel_booking(
            db, booking_id, current_user.id, now, reason=body.reason
        )
        message = "Booking cancelled"
    else:
        if not body.booking_date or not body.start_time:
            raise ValidationError("New date and time are required for rescheduling")
        booking = BookingService.validate_and_reschedule_booking(
            db,
            booking_id,
            body.booking_date,
            body.start_time,
            now,
            customer_id=current_user.id,
        )
        message = "Booking rescheduled"

    return {"message": message, "booking": BookingService.serialize(booking, now)}
