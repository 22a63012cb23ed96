# ============================================================================
# bossofclean/services/availability/slots.py
# Pure slot arithmetic - no database access, fully testable
# ============================================================================
"""
Turns weekly availability rules into concrete, duration-sized time slots.

Weekly rules use Monday=0..Sunday=6. Calendar code that counts from Sunday=0
must go through to_schedule_day_of_week() before looking a rule up.
"""
from dataclasses import dataclass
from datetime import date, time
from typing import Iterable, List, Optional, Sequence

from bossofclean.core.exceptions import ValidationError

DEFAULT_STEP_MINUTES = 60
MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True, order=True)
class TimeSlot:
    """Half-open [start, end) window, in minutes after midnight."""

    start_minutes: int
    end_minutes: int

    @property
    def start_time(self) -> time:
        return minutes_to_time(self.start_minutes)

    @property
    def end_time(self) -> time:
        return minutes_to_time(self.end_minutes)

    @classmethod
    def from_times(cls, start: time, end: time) -> "TimeSlot":
        return cls(time_to_minutes(start), time_to_minutes(end))

    def to_dict(self) -> dict:
        return {
            "start_time": format_time(self.start_time),
            "end_time": format_time(self.end_time),
        }


# ============================================================================
# Day-of-week normalization
# ============================================================================

def to_schedule_day_of_week(calendar_dow: int) -> int:
    """Map a Sunday=0 calendar weekday onto the Monday=0 schedule convention."""
    if not isinstance(calendar_dow, int) or not 0 <= calendar_dow <= 6:
        raise ValidationError(
            f"Calendar day of week must be between 0 and 6, got {calendar_dow!r}"
        )
    return 6 if calendar_dow == 0 else calendar_dow - 1


def schedule_day_of_week(day: date) -> int:
    """Schedule day of week (Monday=0) for a calendar date."""
    # isoweekday() is Monday=1..Sunday=7, so % 7 gives Sunday=0
    return to_schedule_day_of_week(day.isoweekday() % 7)


# ============================================================================
# Time helpers
# ============================================================================

def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def minutes_to_time(minutes: int) -> time:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValidationError(f"{minutes} minutes is outside a single day")
    return time(minutes // 60, minutes % 60)


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def duration_to_minutes(duration_hours: float) -> int:
    """Whole minutes for a service duration given in (possibly fractional) hours."""
    if duration_hours is None or duration_hours <= 0:
        raise ValidationError("Duration must be a positive number of hours")
    minutes = int(round(duration_hours * 60))
    if minutes <= 0 or minutes > MINUTES_PER_DAY:
        raise ValidationError(f"Duration of {duration_hours} hours is not bookable")
    return minutes


def window_for(start: time, duration_hours: float) -> TimeSlot:
    """
    Slot starting at `start` lasting `duration_hours`.

    Windows running past midnight are rejected; bookings never span two dates.
    """
    start_minutes = time_to_minutes(start)
    end_minutes = start_minutes + duration_to_minutes(duration_hours)
    if end_minutes >= MINUTES_PER_DAY:
        raise ValidationError("A booking must start and end on the same day")
    return TimeSlot(start_minutes, end_minutes)


# ============================================================================
# Slot generation and conflict filtering
# ============================================================================

def generate_candidate_slots(
        rows: Iterable,
        day_of_week: int,
        duration_hours: float,
        step_minutes: int = DEFAULT_STEP_MINUTES
) -> List[TimeSlot]:
    """
    Candidate slots for one schedule day.

    Each available row matching the day is walked on its own from its start
    time in `step_minutes` increments; a slot is emitted only when it ends at
    or before the row end. Adjacent rows are not merged, so no slot crosses
    the boundary between two rows.
    """
    duration_minutes = duration_to_minutes(duration_hours)
    slots = set()

    for row in rows:
        if row.day_of_week != day_of_week or not row.is_available:
            continue

        row_start = time_to_minutes(row.start_time)
        row_end = time_to_minutes(row.end_time)

        cursor = row_start
        while cursor + duration_minutes <= row_end:
            slots.add(TimeSlot(cursor, cursor + duration_minutes))
            cursor += step_minutes

    return sorted(slots)


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """Half-open interval overlap; touching intervals do not overlap."""
    return a_start < b_end and a_end > b_start


def filter_conflicting_slots(slots: Sequence[TimeSlot], bookings: Iterable) -> List[TimeSlot]:
    """Drop every slot that overlaps one of the given bookings."""
    booked = [TimeSlot.from_times(b.start_time, b.end_time) for b in bookings]
    return [
        slot for slot in slots
        if not any(
            overlaps(slot.start_minutes, slot.end_minutes, b.start_minutes, b.end_minutes)
            for b in booked
        )
    ]


def find_conflict(window: TimeSlot, bookings: Iterable):
    """First booking overlapping `window`, or None."""
    for booking in bookings:
        other = TimeSlot.from_times(booking.start_time, booking.end_time)
        if overlaps(window.start_minutes, window.end_minutes, other.start_minutes, other.end_minutes):
            return booking
    return None


# ============================================================================
# Date eligibility
# ============================================================================

def has_weekly_availability(rows: Iterable, day_of_week: int) -> bool:
    return any(row.day_of_week == day_of_week and row.is_available for row in rows)


def is_date_eligible(
        rows: Iterable,
        blocked_dates: Iterable[date],
        target_date: date,
        today: date
) -> bool:
    """
    A date is selectable when it is not in the past, its weekday has at least
    one available rule, and the cleaner has not blocked it.
    """
    return ineligibility_reason(rows, blocked_dates, target_date, today) is None


def ineligibility_reason(
        rows: Iterable,
        blocked_dates: Iterable[date],
        target_date: date,
        today: date
) -> Optional[str]:
    """Human-readable reason a date cannot be booked, or None when it can."""
    if target_date < today:
        return "Bookings cannot be made for past dates"
    if not has_weekly_availability(rows, schedule_day_of_week(target_date)):
        return "The cleaner does not work on this day"
    if target_date in set(blocked_dates):
        return "The cleaner is not available on this date"
    return None
