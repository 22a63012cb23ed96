# bossofclean/core/booking_lock.py
"""
Per-cleaner Redis mutex around booking writes.

The mutex only narrows the window for the check-then-insert race; the
database transaction (row lock, overlap re-check, exclusion constraint) is
what actually guarantees that two confirmed bookings never overlap. When
Redis is unreachable the lock fails open and the database decides.
"""
from contextlib import contextmanager
import logging
from typing import Iterator

from redis.exceptions import LockError, RedisError

from bossofclean.config.redis import RedisKeys, get_redis
from bossofclean.config.settings import get_settings
from bossofclean.core.exceptions import ConflictError

logger = logging.getLogger(__name__)


def _lock_key(cleaner_id) -> str:
    return RedisKeys.CLEANER_BOOKING_LOCK.format(cleaner_id=cleaner_id)


@contextmanager
def cleaner_booking_lock(cleaner_id) -> Iterator[None]:
    settings = get_settings()
    if not settings.BOOKING_LOCK_ENABLED:
        yield
        return

    lock = None
    try:
        lock = get_redis().lock(
            _lock_key(cleaner_id),
            timeout=settings.BOOKING_LOCK_TTL_SECONDS,
            blocking_timeout=settings.BOOKING_LOCK_WAIT_SECONDS,
        )
        acquired = lock.acquire()
    except RedisError as exc:
        logger.warning(
            "booking_lock_unavailable",
            extra={"cleaner_id": str(cleaner_id), "error": str(exc)},
        )
        lock = None
        acquired = True

    if not acquired:
        raise ConflictError(
            "Another booking for this cleaner is being processed, please try again",
            code="booking_in_progress",
            details={"cleaner_id": str(cleaner_id)},
        )

    try:
        yield
    finally:
        if lock is not None:
            try:
                lock.release()
            except (LockError, RedisError) as exc:
                logger.warning(
                    "booking_lock_release_failed",
                    extra={"cleaner_id": str(cleaner_id), "error": str(exc)},
                )
