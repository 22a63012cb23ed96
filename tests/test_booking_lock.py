"""Tests for the per-cleaner Redis booking mutex."""

from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, LockError

from bossofclean.config.settings import get_settings
from bossofclean.core import booking_lock
from bossofclean.core.exceptions import ConflictError


class FakeLock:
    def __init__(self, acquired=True, acquire_error=None, release_error=None):
        self.acquired = acquired
        self.acquire_error = acquire_error
        self.release_error = release_error
        self.released = False

    def acquire(self):
        if self.acquire_error:
            raise self.acquire_error
        return self.acquired

    def release(self):
        if self.release_error:
            raise self.release_error
        self.released = True


class FakeRedis:
    def __init__(self, lock):
        self._lock = lock
        self.keys = []

    def lock(self, name, timeout=None, blocking_timeout=None):
        self.keys.append(name)
        return self._lock


@pytest.fixture
def lock_enabled(monkeypatch):
    enabled = get_settings().model_copy(update={"BOOKING_LOCK_ENABLED": True})
    monkeypatch.setattr(booking_lock, "get_settings", lambda: enabled)


def use_redis(monkeypatch, lock):
    client = FakeRedis(lock)
    monkeypatch.setattr(booking_lock, "get_redis", lambda: client)
    return client


class TestCleanerBookingLock:
    def test_disabled_lock_never_touches_redis(self, monkeypatch):
        def fail():
            raise AssertionError("redis should not be used")

        monkeypatch.setattr(booking_lock, "get_redis", fail)
        with booking_lock.cleaner_booking_lock(uuid4()):
            pass

    def test_acquires_and_releases(self, monkeypatch, lock_enabled):
        lock = FakeLock()
        cleaner_id = uuid4()
        client = use_redis(monkeypatch, lock)

        with booking_lock.cleaner_booking_lock(cleaner_id):
            assert not lock.released

        assert lock.released
        assert client.keys == [f"lock:cleaner:{cleaner_id}:bookings"]

    def test_busy_lock_is_a_conflict(self, monkeypatch, lock_enabled):
        use_redis(monkeypatch, FakeLock(acquired=False))
        with pytest.raises(ConflictError) as exc_info:
            with booking_lock.cleaner_booking_lock(uuid4()):
                pass
        assert exc_info.value.code == "booking_in_progress"

    def test_redis_down_fails_open(self, monkeypatch, lock_enabled):
        use_redis(monkeypatch, FakeLock(acquire_error=RedisConnectionError("refused")))
        ran = []
        with booking_lock.cleaner_booking_lock(uuid4()):
            ran.append(True)
        assert ran == [True]

    def test_release_error_is_swallowed(self, monkeypatch, lock_enabled):
        use_redis(monkeypatch, FakeLock(release_error=LockError("expired")))
        with booking_lock.cleaner_booking_lock(uuid4()):
            pass

    def test_body_errors_still_release(self, monkeypatch, lock_enabled):
        lock = FakeLock()
        use_redis(monkeypatch, lock)
        with pytest.raises(ValueError):
            with booking_lock.cleaner_booking_lock(uuid4()):
                raise ValueError("boom")
        assert lock.released
