"""Shared test fixtures and helpers."""

import os

# Settings are read once at import time; point them at SQLite and keep Redis out of it.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BOOKING_LOCK_ENABLED"] = "false"

from datetime import date, datetime, time
from typing import Optional
from uuid import UUID, uuid4

import pytest
import pytz
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bossofclean.api.dependencies import create_access_token, get_now
from bossofclean.config.database import get_db
from bossofclean.main import app
from bossofclean.models import Base, Booking, BookingStatus, Cleaner, CleanerAvailability
from bossofclean.schemas.booking import BookingCreateRequest

TZ = pytz.timezone("America/New_York")

# Monday 19 October 2026, 08:00 local
NOW = TZ.localize(datetime(2026, 10, 19, 8, 0))
NEXT_MONDAY = date(2026, 10, 26)
NEXT_TUESDAY = date(2026, 10, 27)
NEXT_SATURDAY = date(2026, 10, 24)

WEEKDAY_RANGES = [(time(8, 0), time(12, 0)), (time(13, 0), time(17, 0))]


def local(year, month, day, hour, minute=0) -> datetime:
    return TZ.localize(datetime(year, month, day, hour, minute))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def cleaner(db):
    """Approved instant-booking cleaner working Mon-Fri 08-12 and 13-17."""
    return make_cleaner(db)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: NOW
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_cleaner(
    db,
    weekdays=range(5),
    ranges=WEEKDAY_RANGES,
    instant_booking: bool = True,
    approval_status: str = "approved",
) -> Cleaner:
    """Helper to create a cleaner with one rule per (weekday, range)."""
    cleaner = Cleaner(
        user_id=uuid4(),
        business_name="Sparkle Home Cleaning",
        business_email="jobs@sparkle.example",
        instant_booking=instant_booking,
        approval_status=approval_status,
    )
    db.add(cleaner)
    db.flush()
    for day in weekdays:
        for start, end in ranges:
            db.add(CleanerAvailability(
                cleaner_id=cleaner.id,
                day_of_week=day,
                start_time=start,
                end_time=end,
                is_available=True,
            ))
    db.commit()
    db.refresh(cleaner)
    return cleaner


def make_booking(
    db,
    cleaner_id: UUID,
    booking_date: date,
    start: time,
    end: time,
    customer_id: Optional[UUID] = None,
    status: BookingStatus = BookingStatus.CONFIRMED,
) -> Booking:
    """Helper to insert a booking directly, bypassing slot validation."""
    start_minutes = start.hour * 60 + start.minute
    end_minutes = end.hour * 60 + end.minute
    booking = Booking(
        cleaner_id=cleaner_id,
        customer_id=customer_id or uuid4(),
        booking_date=booking_date,
        start_time=start,
        end_time=end,
        estimated_hours=(end_minutes - start_minutes) / 60,
        service_type="standard",
        property_type="house",
        status=status.value,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def make_create_request(
    cleaner_id: UUID,
    booking_date: date,
    start: time,
    hours: float = 2.0,
) -> BookingCreateRequest:
    """Helper to build a booking request with sensible defaults."""
    return BookingCreateRequest(
        cleaner_id=cleaner_id,
        booking_date=booking_date,
        start_time=start,
        estimated_hours=hours,
        service_type="standard",
        property_type="house",
        bedrooms=3,
        bathrooms=2,
        zip_code="33101",
        address="100 Ocean Dr, Miami, FL",
        estimated_price=120.0,
    )


def auth_headers(user_id: UUID) -> dict:
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}
