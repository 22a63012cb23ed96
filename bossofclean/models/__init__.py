# bossofclean/models/__init__.py
from .base import Base
from .cleaner import Cleaner
from .availability import CleanerAvailability, CleanerBlockedDate
from .booking import Booking, BookingStatus

__all__ = [
    "Base",
    "Cleaner",
    "CleanerAvailability",
    "CleanerBlockedDate",
    "Booking",
    "BookingStatus",
]
