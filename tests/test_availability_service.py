"""Tests for the availability resolver against a real (SQLite) store."""

from datetime import date, time
from uuid import UUID, uuid4

import pytest

from bossofclean.core.exceptions import NotFoundError, ValidationError
from bossofclean.models import BookingStatus
from bossofclean.services.availability.availability_service import AvailabilityService
from tests.conftest import NEXT_MONDAY, NEXT_SATURDAY, NOW, make_booking, make_cleaner


def pairs(slots):
    return [(s.to_dict()["start_time"], s.to_dict()["end_time"]) for s in slots]


class TestComputeAvailableSlots:
    def test_full_weekday(self, db, cleaner):
        slots = AvailabilityService.compute_available_slots(db, cleaner.id, NEXT_MONDAY, 2, NOW)
        assert pairs(slots) == [
            ("08:00", "10:00"), ("09:00", "11:00"), ("10:00", "12:00"),
            ("13:00", "15:00"), ("14:00", "16:00"), ("15:00", "17:00"),
        ]

    def test_confirmed_booking_removes_overlaps(self, db, cleaner):
        make_booking(db, cleaner.id, NEXT_MONDAY, time(10), time(12))
        slots = AvailabilityService.compute_available_slots(db, cleaner.id, NEXT_MONDAY, 2, NOW)
        assert pairs(slots) == [
            ("08:00", "10:00"), ("13:00", "15:00"), ("14:00", "16:00"), ("15:00", "17:00"),
        ]

    def test_cancelled_booking_does_not_block(self, db, cleaner):
        make_booking(db, cleaner.id, NEXT_MONDAY, time(10), time(12), status=BookingStatus.CANCELLED)
        slots = AvailabilityService.compute_available_slots(db, cleaner.id, NEXT_MONDAY, 2, NOW)
        assert len(slots) == 6

    def test_other_cleaners_bookings_ignored(self, db, cleaner):
        other = make_cleaner(db)
        make_booking(db, other.id, NEXT_MONDAY, time(8), time(17))
        slots = AvailabilityService.compute_available_slots(db, cleaner.id, NEXT_MONDAY, 2, NOW)
        assert len(slots) == 6

    def test_blocked_date_has_no_slots(self, db, cleaner):
        AvailabilityService.add_blocked_date(db, cleaner.id, NEXT_MONDAY, "Vacation")
        assert AvailabilityService.compute_available_slots(db, cleaner.id, NEXT_MONDAY, 2, NOW) == []

    def test_unworked_day_has_no_slots(self, db, cleaner):
        assert AvailabilityService.compute_available_slots(db, cleaner.id, NEXT_SATURDAY, 2, NOW) == []

    def test_past_date_has_no_slots(self, db, cleaner):
        assert AvailabilityService.compute_available_slots(
            db, cleaner.id, date(2026, 10, 12), 2, NOW
        ) == []

    def test_today_drops_started_slots(self, db, cleaner):
        # NOW is 08:00 on Monday 19 October
        slots = AvailabilityService.compute_available_slots(db, cleaner.id, NOW.date(), 2, NOW)
        assert pairs(slots)[0] == ("09:00", "11:00")
        assert len(slots) == 5

    def test_unknown_cleaner(self, db):
        with pytest.raises(NotFoundError):
            AvailabilityService.compute_available_slots(db, uuid4(), NEXT_MONDAY, 2, NOW)

    def test_non_positive_duration(self, db, cleaner):
        with pytest.raises(ValidationError):
            AvailabilityService.compute_available_slots(db, cleaner.id, NEXT_MONDAY, 0, NOW)


class TestEligibleDates:
    def test_weekdays_only(self, db, cleaner):
        dates = AvailabilityService.list_eligible_dates(db, cleaner.id, NOW.date(), 7, NOW)
        assert dates == [date(2026, 10, d) for d in (19, 20, 21, 22, 23)]

    def test_blocked_dates_skipped(self, db, cleaner):
        AvailabilityService.add_blocked_date(db, cleaner.id, date(2026, 10, 21))
        dates = AvailabilityService.list_eligible_dates(db, cleaner.id, NOW.date(), 7, NOW)
        assert date(2026, 10, 21) not in dates

    def test_window_starting_in_past(self, db, cleaner):
        dates = AvailabilityService.list_eligible_dates(db, cleaner.id, date(2026, 10, 12), 9, NOW)
        assert dates == [date(2026, 10, 19), date(2026, 10, 20)]

    @pytest.mark.parametrize("days", [0, 91])
    def test_window_bounds(self, db, cleaner, days):
        with pytest.raises(ValidationError):
            AvailabilityService.list_eligible_dates(db, cleaner.id, NOW.date(), days, NOW)

    def test_reason_for_saturday(self, db, cleaner):
        reason = AvailabilityService.date_ineligibility_reason(db, cleaner.id, NEXT_SATURDAY, NOW)
        assert reason == "The cleaner does not work on this day"
        assert not AvailabilityService.is_date_eligible(db, cleaner.id, NEXT_SATURDAY, NOW)


class TestWeeklySchedule:
    def test_schedule_has_every_day(self, db, cleaner):
        schedule = AvailabilityService.get_weekly_schedule(db, cleaner.id)
        assert [d["day_of_week"] for d in schedule] == list(range(7))
        assert schedule[0]["slots"] == [
            {"start_time": "08:00", "end_time": "12:00"},
            {"start_time": "13:00", "end_time": "17:00"},
        ]
        assert schedule[6] == {"day_of_week": 6, "is_available": False, "slots": []}

    def test_replace_drops_old_rows(self, db, cleaner):
        AvailabilityService.replace_weekly_schedule(db, cleaner.id, [
            {"day_of_week": 5, "is_available": True,
             "slots": [{"start_time": time(9), "end_time": time(15)}]},
        ])
        schedule = AvailabilityService.get_weekly_schedule(db, cleaner.id)
        assert schedule[0]["slots"] == []
        assert schedule[5]["slots"] == [{"start_time": "09:00", "end_time": "15:00"}]
        assert AvailabilityService.compute_available_slots(db, cleaner.id, NEXT_MONDAY, 2, NOW) == []
        assert len(AvailabilityService.compute_available_slots(db, cleaner.id, NEXT_SATURDAY, 2, NOW)) == 5

    def test_unavailable_day_keeps_ranges_but_no_slots(self, db, cleaner):
        AvailabilityService.replace_weekly_schedule(db, cleaner.id, [
            {"day_of_week": 0, "is_available": False,
             "slots": [{"start_time": time(8), "end_time": time(12)}]},
        ])
        assert AvailabilityService.get_weekly_schedule(db, cleaner.id)[0]["is_available"] is False
        assert AvailabilityService.compute_available_slots(db, cleaner.id, NEXT_MONDAY, 1, NOW) == []

    def test_instant_booking_flag_saved(self, db, cleaner):
        AvailabilityService.replace_weekly_schedule(db, cleaner.id, [], instant_booking=False)
        db.refresh(cleaner)
        assert cleaner.instant_booking is False

    def test_inverted_range_rejected_and_nothing_saved(self, db, cleaner):
        with pytest.raises(ValidationError):
            AvailabilityService.replace_weekly_schedule(db, cleaner.id, [
                {"day_of_week": 0, "is_available": True,
                 "slots": [{"start_time": time(12), "end_time": time(8)}]},
            ])
        assert len(AvailabilityService.get_weekly_schedule(db, cleaner.id)[0]["slots"]) == 2

    def test_day_out_of_range_rejected(self, db, cleaner):
        with pytest.raises(ValidationError):
            AvailabilityService.replace_weekly_schedule(db, cleaner.id, [
                {"day_of_week": 7, "slots": []},
            ])


class TestBlockedDates:
    def test_blocking_twice_is_idempotent(self, db, cleaner):
        first = AvailabilityService.add_blocked_date(db, cleaner.id, NEXT_MONDAY, "Holiday")
        second = AvailabilityService.add_blocked_date(db, cleaner.id, NEXT_MONDAY, "Other")
        assert first["id"] == second["id"]
        assert len(AvailabilityService.list_blocked_dates(db, cleaner.id)) == 1

    def test_remove_reopens_date(self, db, cleaner):
        row = AvailabilityService.add_blocked_date(db, cleaner.id, NEXT_MONDAY)
        AvailabilityService.remove_blocked_date(db, cleaner.id, UUID(row["id"]))
        assert AvailabilityService.is_date_eligible(db, cleaner.id, NEXT_MONDAY, NOW)

    def test_remove_unknown(self, db, cleaner):
        with pytest.raises(NotFoundError):
            AvailabilityService.remove_blocked_date(db, cleaner.id, uuid4())

    def test_list_from_date(self, db, cleaner):
        AvailabilityService.add_blocked_date(db, cleaner.id, date(2026, 10, 1))
        AvailabilityService.add_blocked_date(db, cleaner.id, NEXT_MONDAY)
        upcoming = AvailabilityService.list_blocked_dates(db, cleaner.id, from_date=NOW.date())
        assert [b["blocked_date"] for b in upcoming] == ["2026-10-26"]


class TestBookingCalendar:
    def test_calendar_inputs(self, db, cleaner):
        make_booking(db, cleaner.id, NEXT_MONDAY, time(10), time(12))
        make_booking(db, cleaner.id, date(2026, 10, 12), time(10), time(12))
        calendar = AvailabilityService.get_booking_calendar(db, cleaner.id, NOW.date())
        assert len(calendar["availability"]) == 10
        assert calendar["existing_bookings"] == [
            {"booking_date": "2026-10-26", "start_time": "10:00", "end_time": "12:00"},
        ]
