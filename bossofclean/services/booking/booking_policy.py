# ============================================================================
# bossofclean/services/booking/booking_policy.py
# Status transitions and the modification window
# ============================================================================
from datetime import datetime, timedelta
from typing import Dict, FrozenSet

from bossofclean.config.settings import get_settings
from bossofclean.core.exceptions import ConflictError
from bossofclean.core.timezone import combine_local, to_local
from bossofclean.models.booking import BookingStatus

# confirmed is the only live state; cancelled and completed are terminal
ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}


def booking_start(booking) -> datetime:
    """Aware start instant of a booking in the service timezone."""
    return combine_local(booking.booking_date, booking.start_time)


def booking_end(booking) -> datetime:
    return combine_local(booking.booking_date, booking.end_time)


def hours_until_start(booking, now: datetime) -> float:
    return (booking_start(booking) - to_local(now)).total_seconds() / 3600


def can_modify_booking(booking, now: datetime, window_hours: int = None) -> bool:
    """
    Whether a customer may still reschedule or cancel.

    Only confirmed bookings qualify, and only while at least `window_hours`
    (24 by default) remain before the start.
    """
    if window_hours is None:
        window_hours = get_settings().MODIFICATION_WINDOW_HOURS

    if booking.status != BookingStatus.CONFIRMED.value:
        return False

    return booking_start(booking) - to_local(now) >= timedelta(hours=window_hours)


def has_ended(booking, now: datetime) -> bool:
    return to_local(now) >= booking_end(booking)


def _state_error(current: BookingStatus, requested: str) -> ConflictError:
    if current == BookingStatus.CANCELLED:
        message = "This booking has already been cancelled"
    elif current == BookingStatus.COMPLETED:
        message = "Cannot modify a completed booking"
    else:
        message = f"Cannot {requested} a {current.value} booking"

    return ConflictError(
        message,
        code="invalid_status_transition",
        details={"status": current.value, "requested": requested},
    )


def ensure_transition(booking, target: BookingStatus) -> None:
    """Raise ConflictError when `booking` cannot move to `target`."""
    current = BookingStatus(booking.status)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise _state_error(current, target.value)


def ensure_confirmed(booking, action: str) -> None:
    """Raise ConflictError unless the booking is still confirmed."""
    current = BookingStatus(booking.status)
    if current != BookingStatus.CONFIRMED:
        raise _state_error(current, action)
