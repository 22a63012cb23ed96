# ============================================================================
# bossofclean/services/storage/schedule_store.py
# Relational store for schedules, blocked dates and bookings
# ============================================================================
"""
Storage collaborator for the availability resolver.

Reads are plain queries. Writes that place a booking on the calendar
(insert, reschedule) run as one transaction that locks the cleaner row,
re-checks for overlapping confirmed bookings and only then writes. On
PostgreSQL the bookings_no_overlap_per_cleaner exclusion constraint backs
this up; its IntegrityError is reported as a ConflictError.
"""
from contextlib import nullcontext
from datetime import date
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bossofclean.core.booking_lock import cleaner_booking_lock
from bossofclean.core.exceptions import ConflictError, NotFoundError, SLOT_TAKEN_MESSAGE
from bossofclean.models import Booking, BookingStatus, Cleaner, CleanerAvailability, CleanerBlockedDate
from bossofclean.services.availability.slots import TimeSlot, find_conflict
from bossofclean.services.booking.booking_policy import ensure_confirmed

logger = logging.getLogger(__name__)

OVERLAP_CONSTRAINT = "bookings_no_overlap_per_cleaner"
SCHEDULE_FIELDS = ("booking_date", "start_time", "end_time")


class ScheduleStore:
    """Database access for one request; owns commit/rollback of its writes."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_cleaner(self, cleaner_id: UUID) -> Cleaner:
        cleaner = self.db.get(Cleaner, cleaner_id)
        if not cleaner:
            raise NotFoundError("Cleaner not found", details={"cleaner_id": str(cleaner_id)})
        return cleaner

    def get_cleaner_by_user(self, user_id: UUID) -> Optional[Cleaner]:
        return self.db.query(Cleaner).filter(Cleaner.user_id == user_id).first()

    def get_weekly_availability(self, cleaner_id: UUID) -> List[CleanerAvailability]:
        return (
            self.db.query(CleanerAvailability)
            .filter(CleanerAvailability.cleaner_id == cleaner_id)
            .order_by(CleanerAvailability.day_of_week.asc(), CleanerAvailability.start_time.asc())
            .all()
        )

    def get_blocked_dates(
            self,
            cleaner_id: UUID,
            from_date: Optional[date] = None
    ) -> List[CleanerBlockedDate]:
        query = self.db.query(CleanerBlockedDate).filter(CleanerBlockedDate.cleaner_id == cleaner_id)
        if from_date:
            query = query.filter(CleanerBlockedDate.blocked_date >= from_date)
        return query.order_by(CleanerBlockedDate.blocked_date.asc()).all()

    def get_bookings_for_date(
            self,
            cleaner_id: UUID,
            day: date,
            exclude_booking_id: Optional[UUID] = None
    ) -> List[Booking]:
        """Confirmed bookings of a cleaner on one date."""
        query = self.db.query(Booking).filter(
            Booking.cleaner_id == cleaner_id,
            Booking.booking_date == day,
            Booking.status == BookingStatus.CONFIRMED.value,
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return query.order_by(Booking.start_time.asc()).all()

    def get_confirmed_bookings_from(self, cleaner_id: UUID, from_date: date) -> List[Booking]:
        return (
            self.db.query(Booking)
            .filter(
                Booking.cleaner_id == cleaner_id,
                Booking.booking_date >= from_date,
                Booking.status == BookingStatus.CONFIRMED.value,
            )
            .order_by(Booking.booking_date.asc(), Booking.start_time.asc())
            .all()
        )

    def get_booking(self, booking_id: UUID) -> Booking:
        booking = self.db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking not found", details={"booking_id": str(booking_id)})
        return booking

    def list_bookings(
            self,
            cleaner_id: Optional[UUID] = None,
            customer_id: Optional[UUID] = None,
            status: Optional[str] = None
    ) -> List[Booking]:
        query = self.db.query(Booking)
        if cleaner_id:
            query = query.filter(Booking.cleaner_id == cleaner_id)
        if customer_id:
            query = query.filter(Booking.customer_id == customer_id)
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.booking_date.asc(), Booking.start_time.asc()).all()

    # ------------------------------------------------------------------
    # Booking writes
    # ------------------------------------------------------------------

    def insert_booking(self, booking: Booking) -> Booking:
        """Insert a confirmed booking, or raise ConflictError if its slot is taken."""
        with cleaner_booking_lock(booking.cleaner_id):
            try:
                self._lock_cleaner(booking.cleaner_id)
                self._ensure_slot_free(
                    booking.cleaner_id, booking.booking_date, booking.start_time, booking.end_time
                )
                self.db.add(booking)
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                self._raise_if_overlap(exc, booking.cleaner_id)
                raise
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(booking)
        logger.info(
            "Booking inserted",
            extra={"booking_id": str(booking.id), "cleaner_id": str(booking.cleaner_id)},
        )
        return booking

    def update_booking(self, booking_id: UUID, action: str, **changes: Any) -> Booking:
        """
        Apply `changes` to a booking that is still confirmed.

        The row is re-read under FOR UPDATE and its status checked in the same
        transaction; `action` names the change in the ConflictError raised
        when it is no longer confirmed. Moving the booking (booking_date/start_time/end_time)
        also goes through the same locked overlap re-check as an insert, with
        the booking itself excluded.
        """
        booking = self.get_booking(booking_id)
        moves = any(field in changes for field in SCHEDULE_FIELDS)
        guard = cleaner_booking_lock(booking.cleaner_id) if moves else nullcontext()

        with guard:
            try:
                if moves:
                    self._lock_cleaner(booking.cleaner_id)
                booking = self._lock_booking(booking_id)
                ensure_confirmed(booking, action)
                if moves:
                    self._ensure_slot_free(
                        booking.cleaner_id,
                        changes.get("booking_date", booking.booking_date),
                        changes.get("start_time", booking.start_time),
                        changes.get("end_time", booking.end_time),
                        exclude_booking_id=booking.id,
                    )
                for field, value in changes.items():
                    setattr(booking, field, value)
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                self._raise_if_overlap(exc, booking.cleaner_id)
                raise
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(booking)
        return booking

    # ------------------------------------------------------------------
    # Schedule writes
    # ------------------------------------------------------------------

    def replace_weekly_availability(
            self,
            cleaner_id: UUID,
            rows: Iterable[Dict[str, Any]],
            instant_booking: Optional[bool] = None
    ) -> List[CleanerAvailability]:
        """
        Replace the whole weekly schedule: delete every row, insert the new set.

        Both steps share one transaction so a failure cannot leave the cleaner
        with no rows. Two concurrent saves still resolve as last-write-wins.
        """
        cleaner = self.get_cleaner(cleaner_id)
        try:
            self.db.query(CleanerAvailability).filter(
                CleanerAvailability.cleaner_id == cleaner_id
            ).delete(synchronize_session=False)

            self.db.add_all([
                CleanerAvailability(cleaner_id=cleaner_id, **row) for row in rows
            ])
            if instant_booking is not None:
                cleaner.instant_booking = instant_booking
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return self.get_weekly_availability(cleaner_id)

    def add_blocked_date(
            self,
            cleaner_id: UUID,
            blocked_date: date,
            reason: Optional[str] = None
    ) -> CleanerBlockedDate:
        """Block a date; blocking an already blocked date returns the existing row."""
        self.get_cleaner(cleaner_id)
        existing = self.db.query(CleanerBlockedDate).filter(
            CleanerBlockedDate.cleaner_id == cleaner_id,
            CleanerBlockedDate.blocked_date == blocked_date,
        ).first()
        if existing:
            return existing

        row = CleanerBlockedDate(cleaner_id=cleaner_id, blocked_date=blocked_date, reason=reason)
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError:
            # lost a race against an identical insert
            self.db.rollback()
            return self.db.query(CleanerBlockedDate).filter(
                CleanerBlockedDate.cleaner_id == cleaner_id,
                CleanerBlockedDate.blocked_date == blocked_date,
            ).one()

        self.db.refresh(row)
        return row

    def remove_blocked_date(self, cleaner_id: UUID, blocked_date_id: UUID) -> None:
        row = self.db.query(CleanerBlockedDate).filter(
            CleanerBlockedDate.id == blocked_date_id,
            CleanerBlockedDate.cleaner_id == cleaner_id,
        ).first()
        if not row:
            raise NotFoundError(
                "Blocked date not found", details={"blocked_date_id": str(blocked_date_id)}
            )
        try:
            self.db.delete(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock_cleaner(self, cleaner_id: UUID) -> Cleaner:
        """SELECT ... FOR UPDATE on the cleaner row; serializes booking writers per cleaner."""
        cleaner = (
            self.db.query(Cleaner)
            .filter(Cleaner.id == cleaner_id)
            .with_for_update()
            .first()
        )
        if not cleaner:
            raise NotFoundError("Cleaner not found", details={"cleaner_id": str(cleaner_id)})
        return cleaner

    def _lock_booking(self, booking_id: UUID) -> Booking:
        """SELECT ... FOR UPDATE on the booking, overwriting any stale copy in the session."""
        booking = (
            self.db.query(Booking)
            .filter(Booking.id == booking_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not booking:
            raise NotFoundError("Booking not found", details={"booking_id": str(booking_id)})
        return booking

    def _ensure_slot_free(self, cleaner_id, day, start_time, end_time, exclude_booking_id=None) -> None:
        window = TimeSlot.from_times(start_time, end_time)
        taken = find_conflict(window, self.get_bookings_for_date(cleaner_id, day, exclude_booking_id))
        if taken is not None:
            raise ConflictError(
                SLOT_TAKEN_MESSAGE,
                code="slot_taken",
                details={
                    "booking_date": day.isoformat(),
                    "start_time": start_time.strftime("%H:%M"),
                    "end_time": end_time.strftime("%H:%M"),
                },
            )

    @staticmethod
    def _raise_if_overlap(exc: IntegrityError, cleaner_id) -> None:
        constraint_name = ""
        diag = getattr(getattr(exc, "orig", None), "diag", None)
        if diag is not None:
            constraint_name = getattr(diag, "constraint_name", "") or ""

        if constraint_name == OVERLAP_CONSTRAINT or OVERLAP_CONSTRAINT in str(exc.orig):
            logger.warning("Booking overlap rejected by database", extra={"cleaner_id": str(cleaner_id)})
            raise ConflictError(SLOT_TAKEN_MESSAGE, code="slot_taken") from exc
