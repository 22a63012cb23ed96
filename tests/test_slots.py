"""Tests for slot generation, conflict filtering and date eligibility."""

from datetime import date, time
from types import SimpleNamespace

import pytest

from bossofclean.core.exceptions import ValidationError
from bossofclean.services.availability.slots import (
    TimeSlot,
    duration_to_minutes,
    filter_conflicting_slots,
    find_conflict,
    generate_candidate_slots,
    ineligibility_reason,
    is_date_eligible,
    overlaps,
    schedule_day_of_week,
    to_schedule_day_of_week,
    window_for,
)


def rule(day, start, end, is_available=True):
    return SimpleNamespace(day_of_week=day, start_time=start, end_time=end, is_available=is_available)


def booked(start, end):
    return SimpleNamespace(start_time=start, end_time=end)


def as_pairs(slots):
    return [(s.to_dict()["start_time"], s.to_dict()["end_time"]) for s in slots]


class TestDayOfWeek:
    def test_sunday_maps_to_six(self):
        assert to_schedule_day_of_week(0) == 6

    def test_monday_maps_to_zero(self):
        assert to_schedule_day_of_week(1) == 0

    def test_saturday_maps_to_five(self):
        assert to_schedule_day_of_week(6) == 5

    @pytest.mark.parametrize("value", [-1, 7])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(ValidationError):
            to_schedule_day_of_week(value)

    def test_dates_use_monday_zero(self):
        assert schedule_day_of_week(date(2026, 10, 19)) == 0  # Monday
        assert schedule_day_of_week(date(2026, 10, 25)) == 6  # Sunday


class TestCandidateSlots:
    def test_hourly_steps_within_range(self):
        slots = generate_candidate_slots([rule(0, time(9), time(13))], 0, 2)
        assert as_pairs(slots) == [("09:00", "11:00"), ("10:00", "12:00"), ("11:00", "13:00")]

    def test_other_days_ignored(self):
        assert generate_candidate_slots([rule(1, time(9), time(13))], 0, 2) == []

    def test_unavailable_rows_ignored(self):
        assert generate_candidate_slots([rule(0, time(9), time(13), is_available=False)], 0, 1) == []

    def test_duration_longer_than_range(self):
        assert generate_candidate_slots([rule(0, time(9), time(10))], 0, 2) == []

    def test_duration_equal_to_range(self):
        slots = generate_candidate_slots([rule(0, time(9), time(11))], 0, 2)
        assert as_pairs(slots) == [("09:00", "11:00")]

    def test_adjacent_rows_are_not_merged(self):
        rows = [rule(0, time(8), time(12)), rule(0, time(12), time(16))]
        slots = generate_candidate_slots(rows, 0, 2)
        assert ("11:00", "13:00") not in as_pairs(slots)
        assert len(slots) == 6

    def test_fractional_duration(self):
        slots = generate_candidate_slots([rule(0, time(8), time(12))], 0, 1.5)
        assert as_pairs(slots) == [("08:00", "09:30"), ("09:00", "10:30"), ("10:00", "11:30")]

    def test_every_slot_fits_its_row(self):
        rows = [rule(2, time(7, 30), time(11, 45)), rule(2, time(14), time(18))]
        for slot in generate_candidate_slots(rows, 2, 3):
            assert slot.end_minutes - slot.start_minutes == 180
            assert any(
                slot.start_time >= r.start_time and slot.end_time <= r.end_time for r in rows
            )

    def test_overlapping_rows_are_deduplicated(self):
        rows = [rule(0, time(8), time(12)), rule(0, time(8), time(12))]
        assert len(generate_candidate_slots(rows, 0, 2)) == 3

    def test_custom_step(self):
        slots = generate_candidate_slots([rule(0, time(9), time(11))], 0, 1, step_minutes=30)
        assert as_pairs(slots)[1] == ("09:30", "10:30")

    @pytest.mark.parametrize("hours", [0, -1])
    def test_non_positive_duration_rejected(self, hours):
        with pytest.raises(ValidationError):
            generate_candidate_slots([rule(0, time(9), time(13))], 0, hours)


class TestConflictFiltering:
    def test_touching_intervals_do_not_overlap(self):
        assert not overlaps(600, 720, 720, 840)
        assert overlaps(600, 721, 720, 840)

    def test_booking_removes_every_overlapping_slot(self):
        slots = generate_candidate_slots([rule(0, time(9), time(13))], 0, 2)
        assert filter_conflicting_slots(slots, [booked(time(10), time(12))]) == []

    def test_adjacent_booking_keeps_slot(self):
        slots = generate_candidate_slots([rule(0, time(8), time(12))], 0, 2)
        free = filter_conflicting_slots(slots, [booked(time(10), time(12))])
        assert as_pairs(free) == [("08:00", "10:00")]

    def test_no_bookings_keeps_everything(self):
        slots = generate_candidate_slots([rule(0, time(8), time(12))], 0, 1)
        assert filter_conflicting_slots(slots, []) == slots

    def test_find_conflict_returns_booking(self):
        taken = booked(time(10), time(12))
        assert find_conflict(TimeSlot(9 * 60, 11 * 60), [taken]) is taken
        assert find_conflict(TimeSlot(12 * 60, 14 * 60), [taken]) is None


class TestWindows:
    def test_window_end_from_duration(self):
        assert window_for(time(10), 2.5).to_dict() == {"start_time": "10:00", "end_time": "12:30"}

    def test_window_past_midnight_rejected(self):
        with pytest.raises(ValidationError):
            window_for(time(23), 2)

    def test_duration_rounds_to_minutes(self):
        assert duration_to_minutes(1.25) == 75


class TestDateEligibility:
    rows = [rule(0, time(8), time(12))]
    today = date(2026, 10, 19)

    def test_worked_day_is_eligible(self):
        assert is_date_eligible(self.rows, [], date(2026, 10, 26), self.today)

    def test_today_is_eligible(self):
        assert is_date_eligible(self.rows, [], self.today, self.today)

    def test_past_date(self):
        assert ineligibility_reason(self.rows, [], date(2026, 10, 12), self.today) == (
            "Bookings cannot be made for past dates"
        )

    def test_unworked_weekday(self):
        assert not is_date_eligible(self.rows, [], date(2026, 10, 20), self.today)

    def test_blocked_date(self):
        blocked = [date(2026, 10, 26)]
        assert ineligibility_reason(self.rows, blocked, date(2026, 10, 26), self.today) == (
            "The cleaner is not available on this date"
        )
