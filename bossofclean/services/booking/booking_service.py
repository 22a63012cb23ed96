# ============================================================================
# bossofclean/services/booking/booking_service.py
# Pure business logic - no FastAPI dependencies, fully testable
# ============================================================================
"""Service for creating, moving and closing bookings"""
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from bossofclean.config.settings import get_settings
from bossofclean.core.exceptions import (
    ConflictError,
    NotFoundError,
    PolicyError,
    ValidationError,
    SLOT_TAKEN_MESSAGE,
    TOO_LATE_MESSAGE,
)
from bossofclean.core.timezone import combine_local, local_today, to_local
from bossofclean.models import Booking, BookingStatus
from bossofclean.schemas.booking import BookingCreateRequest
from bossofclean.services.availability.slots import (
    TimeSlot,
    find_conflict,
    generate_candidate_slots,
    ineligibility_reason,
    schedule_day_of_week,
    window_for,
)
from bossofclean.services.booking.booking_policy import (
    can_modify_booking,
    ensure_confirmed,
    ensure_transition,
    has_ended,
    hours_until_start,
)
from bossofclean.services.storage.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)

DEFAULT_DECLINE_REASON = "Declined by cleaner"


class BookingService:
    """Handles booking operations"""

    # ========== CUSTOMER ACTIONS ==========

    @staticmethod
    def validate_and_create_booking(
            db: Session,
            customer_id: UUID,
            request: BookingCreateRequest,
            now: datetime
    ) -> Booking:
        """
        Create a confirmed booking for the requested window.

        The end time is derived from estimated_hours. The request is rejected
        (never moved to a nearby slot) when the date is not bookable, the
        window is not one of the cleaner's slots, or it overlaps a confirmed
        booking. The final overlap check happens again inside the insert
        transaction.
        """
        if not request.cleaner_id:
            raise ValidationError("cleaner_id is required")

        store = ScheduleStore(db)
        cleaner = store.get_cleaner(request.cleaner_id)

        if not cleaner.instant_booking:
            raise ValidationError("This cleaner does not accept instant bookings")
        if cleaner.approval_status != "approved":
            raise ValidationError("This cleaner is not currently available")

        window = window_for(request.start_time, request.estimated_hours)
        BookingService._validate_window(
            store, cleaner.id, request.booking_date, window, request.estimated_hours, now
        )

        booking = Booking(
            cleaner_id=cleaner.id,
            customer_id=customer_id,
            booking_date=request.booking_date,
            start_time=window.start_time,
            end_time=window.end_time,
            estimated_hours=request.estimated_hours,
            service_type=request.service_type,
            property_type=request.property_type,
            bedrooms=request.bedrooms,
            bathrooms=request.bathrooms,
            zip_code=request.zip_code,
            address=request.address,
            special_instructions=request.special_instructions,
            estimated_price=request.estimated_price,
            status=BookingStatus.CONFIRMED.value,
        )
        booking = store.insert_booking(booking)

        logger.info(
            f"Booking {booking.id} created for cleaner {cleaner.id} on "
            f"{booking.booking_date} {booking.start_time}-{booking.end_time}"
        )
        return booking

    @staticmethod
    def validate_and_reschedule_booking(
            db: Session,
            booking_id: UUID,
            new_date: date,
            new_start_time: time,
            now: datetime,
            customer_id: Optional[UUID] = None
    ) -> Booking:
        """
        Move a confirmed booking to a new date and start time.

        Allowed only outside the modification window. The new end time is
        the new start plus the booking's own estimated_hours.
        """
        store = ScheduleStore(db)
        booking = BookingService._get_owned_booking(store, booking_id, customer_id=customer_id)

        ensure_confirmed(booking, "reschedule")
        BookingService._ensure_modifiable(booking, now)

        window = window_for(new_start_time, booking.estimated_hours)
        BookingService._validate_window(
            store,
            booking.cleaner_id,
            new_date,
            window,
            booking.estimated_hours,
            now,
            exclude_booking_id=booking.id,
        )

        booking = store.update_booking(
            booking.id,
            "reschedule",
            booking_date=new_date,
            start_time=window.start_time,
            end_time=window.end_time,
        )
        logger.info(f"Booking {booking.id} rescheduled to {new_date} {window.start_time}")
        return booking

    @staticmethod
    def cancel_booking(
            db: Session,
            booking_id: UUID,
            customer_id: UUID,
            now: datetime,
            reason: Optional[str] = None
    ) -> Booking:
        store = ScheduleStore(db)
        booking = BookingService._get_owned_booking(store, booking_id, customer_id=customer_id)

        ensure_transition(booking, BookingStatus.CANCELLED)
        BookingService._ensure_modifiable(booking, now)

        booking = store.update_booking(
            booking.id,
            "cancel",
            status=BookingStatus.CANCELLED.value,
            cancellation_reason=reason or None,
            cancelled_at=to_local(now),
        )
        logger.info(f"Booking {booking.id} cancelled by customer")
        return booking

    # ========== CLEANER ACTIONS ==========

    @staticmethod
    def confirm_booking(db: Session, booking_id: UUID, cleaner_id: UUID) -> Booking:
        """Acknowledge a booking. Bookings are confirmed on creation, so nothing changes."""
        booking = BookingService._get_owned_booking(ScheduleStore(db), booking_id, cleaner_id=cleaner_id)
        ensure_confirmed(booking, "acknowledge")
        return booking

    @staticmethod
    def decline_booking(
            db: Session,
            booking_id: UUID,
            cleaner_id: UUID,
            now: datetime,
            reason: Optional[str] = None
    ) -> Booking:
        store = ScheduleStore(db)
        booking = BookingService._get_owned_booking(store, booking_id, cleaner_id=cleaner_id)
        ensure_transition(booking, BookingStatus.CANCELLED)

        booking = store.update_booking(
            booking.id,
            "decline",
            status=BookingStatus.CANCELLED.value,
            cancellation_reason=reason or DEFAULT_DECLINE_REASON,
            cancelled_at=to_local(now),
        )
        logger.info(f"Booking {booking.id} declined by cleaner {cleaner_id}")
        return booking

    @staticmethod
    def complete_booking(db: Session, booking_id: UUID, cleaner_id: UUID, now: datetime) -> Booking:
        store = ScheduleStore(db)
        booking = BookingService._get_owned_booking(store, booking_id, cleaner_id=cleaner_id)
        ensure_transition(booking, BookingStatus.COMPLETED)

        if not has_ended(booking, now):
            raise PolicyError(
                "A booking can only be completed after its scheduled end time",
                code="booking_not_finished",
            )

        booking = store.update_booking(booking.id, "complete", status=BookingStatus.COMPLETED.value)
        logger.info(f"Booking {booking.id} completed")
        return booking

    # ========== QUERIES ==========

    @staticmethod
    def get_customer_booking(db: Session, booking_id: UUID, customer_id: UUID) -> Booking:
        return BookingService._get_owned_booking(ScheduleStore(db), booking_id, customer_id=customer_id)

    @staticmethod
    def list_customer_bookings(db: Session, customer_id: UUID, status: Optional[str] = None) -> List[Booking]:
        return ScheduleStore(db).list_bookings(customer_id=customer_id, status=status)

    @staticmethod
    def list_cleaner_bookings(db: Session, cleaner_id: UUID, status: Optional[str] = None) -> List[Booking]:
        return ScheduleStore(db).list_bookings(cleaner_id=cleaner_id, status=status)

    @staticmethod
    def serialize(booking: Booking, now: datetime) -> Dict[str, Any]:
        data = booking.to_dict()
        data["can_modify"] = can_modify_booking(booking, now)
        return data

    # ========== HELPERS ==========

    @staticmethod
    def _get_owned_booking(
            store: ScheduleStore,
            booking_id: UUID,
            customer_id: Optional[UUID] = None,
            cleaner_id: Optional[UUID] = None
    ) -> Booking:
        booking = store.get_booking(booking_id)
        if customer_id is not None and booking.customer_id != customer_id:
            raise NotFoundError("Booking not found", details={"booking_id": str(booking_id)})
        if cleaner_id is not None and booking.cleaner_id != cleaner_id:
            raise NotFoundError("Booking not found", details={"booking_id": str(booking_id)})
        return booking

    @staticmethod
    def _ensure_modifiable(booking: Booking, now: datetime) -> None:
        window_hours = get_settings().MODIFICATION_WINDOW_HOURS
        if not can_modify_booking(booking, now, window_hours=window_hours):
            raise PolicyError(
                TOO_LATE_MESSAGE.format(hours=window_hours),
                code="modification_window_closed",
                details={
                    "booking_id": str(booking.id),
                    "hours_until_start": round(hours_until_start(booking, now), 2),
                },
            )

    @staticmethod
    def _validate_window(
            store: ScheduleStore,
            cleaner_id: UUID,
            day: date,
            window: TimeSlot,
            duration_hours: float,
            now: datetime,
            exclude_booking_id: Optional[UUID] = None
    ) -> None:
        """Optimistic pre-check of a requested window; the store re-checks on write."""
        rows = store.get_weekly_availability(cleaner_id)
        blocked = [b.blocked_date for b in store.get_blocked_dates(cleaner_id)]

        reason = ineligibility_reason(rows, blocked, day, local_today(now))
        if reason:
            raise ConflictError(reason, code="date_unavailable", details={"booking_date": day.isoformat()})

        if combine_local(day, window.start_time) <= to_local(now):
            raise ConflictError("This time has already passed", code="time_passed")

        candidates = generate_candidate_slots(
            rows,
            schedule_day_of_week(day),
            duration_hours,
            step_minutes=get_settings().SLOT_STEP_MINUTES,
        )
        if window not in candidates:
            raise ConflictError(
                "The requested time is outside the cleaner's availability",
                code="outside_availability",
                details={"booking_date": day.isoformat(), **window.to_dict()},
            )

        if find_conflict(window, store.get_bookings_for_date(cleaner_id, day, exclude_booking_id)):
            raise ConflictError(
                SLOT_TAKEN_MESSAGE,
                code="slot_taken",
                details={"booking_date": day.isoformat(), **window.to_dict()},
            )
