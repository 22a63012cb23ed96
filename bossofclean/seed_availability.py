# ===== seed_availability.py =====
import uuid
from datetime import time, timedelta
import logging

from bossofclean.config.database import SessionLocal
from bossofclean.core.timezone import local_now
from bossofclean.models import Cleaner, CleanerAvailability, CleanerBlockedDate
from bossofclean.utils.my_logging import setup_logging

logger = logging.getLogger(__name__)

# Morning and afternoon ranges, as offered by default in the schedule editor
DEFAULT_RANGES = [(time(8, 0), time(12, 0)), (time(13, 0), time(17, 0))]


def seed_availability(user_id=None):
    db = SessionLocal()

    try:
        # 1. Demo cleaner, approved and taking instant bookings
        cleaner = Cleaner(
            id=uuid.uuid4(),
            user_id=user_id or uuid.uuid4(),
            business_name="Sunshine Sparkle Cleaning",
            instant_booking=True,
            approval_status="approved",
        )

        # 2. Mon-Fri availability rules (8-12 and 13-17)
        rules = []
        for day in range(0, 5):  # 0=Monday ... 4=Friday
            for start, end in DEFAULT_RANGES:
                rules.append(CleanerAvailability(
                    id=uuid.uuid4(),
                    cleaner_id=cleaner.id,
                    day_of_week=day,
                    start_time=start,
                    end_time=end,
                    is_available=True,
                ))

        # 3. Example blocked date two weeks out
        blocked = CleanerBlockedDate(
            id=uuid.uuid4(),
            cleaner_id=cleaner.id,
            blocked_date=local_now().date() + timedelta(days=14),
            reason="Vacation",
        )

        db.add(cleaner)
        db.flush()
        db.add_all(rules + [blocked])
        db.commit()
        logger.info(f"Seeded cleaner {cleaner.id} with {len(rules)} availability rules")
        return cleaner.id

    except Exception:
        db.rollback()
        logger.exception("Error seeding availability")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    seed_availability()
