# ===== bossofclean/services/availability/availability_service.py =====
from typing import Any, Dict, List, Optional
from datetime import date, datetime, time, timedelta
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from bossofclean.config.settings import get_settings
from bossofclean.core.exceptions import ValidationError
from bossofclean.core.timezone import local_today, to_local
from bossofclean.services.availability.slots import (
    TimeSlot,
    filter_conflicting_slots,
    format_time,
    generate_candidate_slots,
    ineligibility_reason,
    is_date_eligible,
    schedule_day_of_week,
    time_to_minutes,
)
from bossofclean.services.storage.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)

MAX_ELIGIBLE_DATE_WINDOW = 90


class AvailabilityService:
    """Resolves a cleaner's weekly schedule into bookable dates and slots"""

    @staticmethod
    def compute_available_slots(
            db: Session,
            cleaner_id: UUID,
            target_date: date,
            duration_hours: float,
            now: datetime
    ) -> List[TimeSlot]:
        """
        Bookable slots for one date, sized to `duration_hours`.

        1. Ineligible dates (past, blocked, no weekly rule) have no slots
        2. Candidate slots come from the weekly rules for that weekday
        3. Slots overlapping a confirmed booking on that date are removed
        4. On today's date, slots that have already started are removed

        The result is advisory; booking creation re-checks under a lock.
        """
        if not cleaner_id:
            raise ValidationError("cleaner_id is required")

        store = ScheduleStore(db)
        store.get_cleaner(cleaner_id)

        rows = store.get_weekly_availability(cleaner_id)
        blocked = [b.blocked_date for b in store.get_blocked_dates(cleaner_id)]
        today = local_today(now)

        if not is_date_eligible(rows, blocked, target_date, today):
            return []

        candidates = generate_candidate_slots(
            rows,
            schedule_day_of_week(target_date),
            duration_hours,
            step_minutes=get_settings().SLOT_STEP_MINUTES,
        )
        slots = filter_conflicting_slots(
            candidates, store.get_bookings_for_date(cleaner_id, target_date)
        )

        if target_date == today:
            now_minutes = time_to_minutes(to_local(now).time())
            slots = [s for s in slots if s.start_minutes > now_minutes]

        logger.debug(
            f"{len(slots)} of {len(candidates)} candidate slots free for cleaner {cleaner_id} on {target_date}"
        )
        return slots

    @staticmethod
    def is_date_eligible(
            db: Session,
            cleaner_id: UUID,
            target_date: date,
            now: datetime
    ) -> bool:
        return AvailabilityService.date_ineligibility_reason(db, cleaner_id, target_date, now) is None

    @staticmethod
    def date_ineligibility_reason(
            db: Session,
            cleaner_id: UUID,
            target_date: date,
            now: datetime
    ) -> Optional[str]:
        store = ScheduleStore(db)
        store.get_cleaner(cleaner_id)
        return ineligibility_reason(
            store.get_weekly_availability(cleaner_id),
            [b.blocked_date for b in store.get_blocked_dates(cleaner_id)],
            target_date,
            local_today(now),
        )

    @staticmethod
    def list_eligible_dates(
            db: Session,
            cleaner_id: UUID,
            start_date: date,
            days: int,
            now: datetime
    ) -> List[date]:
        """Dates in [start_date, start_date + days) a customer may pick in the calendar."""
        if days <= 0 or days > MAX_ELIGIBLE_DATE_WINDOW:
            raise ValidationError(f"days must be between 1 and {MAX_ELIGIBLE_DATE_WINDOW}")

        store = ScheduleStore(db)
        store.get_cleaner(cleaner_id)
        rows = store.get_weekly_availability(cleaner_id)
        blocked = [b.blocked_date for b in store.get_blocked_dates(cleaner_id, from_date=start_date)]
        today = local_today(now)

        candidates = (start_date + timedelta(days=offset) for offset in range(days))
        return [d for d in candidates if is_date_eligible(rows, blocked, d, today)]

    @staticmethod
    def get_booking_calendar(db: Session, cleaner_id: UUID, today: date) -> Dict[str, Any]:
        """Raw inputs for a booking calendar: available rules, upcoming blocks and bookings."""
        store = ScheduleStore(db)
        store.get_cleaner(cleaner_id)

        rows = [r for r in store.get_weekly_availability(cleaner_id) if r.is_available]
        return {
            "cleaner_id": str(cleaner_id),
            "availability": [r.to_dict() for r in rows],
            "blocked_dates": [b.to_dict() for b in store.get_blocked_dates(cleaner_id, from_date=today)],
            "existing_bookings": [
                {
                    "booking_date": b.booking_date.isoformat(),
                    "start_time": format_time(b.start_time),
                    "end_time": format_time(b.end_time),
                }
                for b in store.get_confirmed_bookings_from(cleaner_id, today)
            ],
        }

    # ========== WEEKLY SCHEDULE ==========

    @staticmethod
    def get_weekly_schedule(db: Session, cleaner_id: UUID) -> List[Dict[str, Any]]:
        """Weekly rules grouped per day, Monday first, one entry for every day."""
        rows = ScheduleStore(db).get_weekly_availability(cleaner_id)
        schedule = []
        for day in range(7):
            day_rows = [r for r in rows if r.day_of_week == day]
            schedule.append({
                "day_of_week": day,
                "is_available": any(r.is_available for r in day_rows),
                "slots": [
                    {"start_time": format_time(r.start_time), "end_time": format_time(r.end_time)}
                    for r in day_rows
                ],
            })
        return schedule

    @staticmethod
    def replace_weekly_schedule(
            db: Session,
            cleaner_id: UUID,
            days: List[Dict[str, Any]],
            instant_booking: Optional[bool] = None
    ) -> List[Dict[str, Any]]:
        """
        Save a full weekly schedule, replacing whatever was stored.

        `days` items look like {"day_of_week": 0, "is_available": True,
        "slots": [{"start_time": time, "end_time": time}, ...]}. Every range
        of a day inherits the day's is_available flag.
        """
        rows = []
        for day in days:
            day_of_week = day["day_of_week"]
            if not 0 <= day_of_week <= 6:
                raise ValidationError(f"day_of_week must be between 0 and 6, got {day_of_week}")
            for slot in day.get("slots", []):
                start_time: time = slot["start_time"]
                end_time: time = slot["end_time"]
                if start_time >= end_time:
                    raise ValidationError(
                        "Each availability range must start before it ends",
                        details={"day_of_week": day_of_week, "start_time": format_time(start_time)},
                    )
                rows.append({
                    "day_of_week": day_of_week,
                    "start_time": start_time,
                    "end_time": end_time,
                    "is_available": bool(day.get("is_available", True)),
                })

        ScheduleStore(db).replace_weekly_availability(cleaner_id, rows, instant_booking=instant_booking)
        logger.info(f"Weekly schedule replaced for cleaner {cleaner_id} ({len(rows)} ranges)")
        return AvailabilityService.get_weekly_schedule(db, cleaner_id)

    # ========== BLOCKED DATES ==========

    @staticmethod
    def list_blocked_dates(db: Session, cleaner_id: UUID, from_date: Optional[date] = None) -> List[Dict[str, Any]]:
        return [b.to_dict() for b in ScheduleStore(db).get_blocked_dates(cleaner_id, from_date=from_date)]

    @staticmethod
    def add_blocked_date(
            db: Session,
            cleaner_id: UUID,
            blocked_date: date,
            reason: Optional[str] = None
    ) -> Dict[str, Any]:
        row = ScheduleStore(db).add_blocked_date(cleaner_id, blocked_date, reason)
        logger.info(f"Cleaner {cleaner_id} blocked {blocked_date}")
        return row.to_dict()

    @staticmethod
    def remove_blocked_date(db: Session, cleaner_id: UUID, blocked_date_id: UUID) -> None:
        ScheduleStore(db).remove_blocked_date(cleaner_id, blocked_date_id)
        logger.info(f"Cleaner {cleaner_id} removed blocked date {blocked_date_id}")
