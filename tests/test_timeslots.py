"""Tests for clock-time conversion and interval checks."""

import pytest

from config import MatchingConfig
from models import TimeSlot
from timeslots import available_slots, candidate_slots, conflicts, overlaps, to_minutes, to_time


class TestClockConversion:
    @pytest.mark.parametrize(
        "text, minutes",
        [("00:00", 0), ("08:30", 510), ("12:05", 725), ("23:59", 1439)],
    )
    def test_to_minutes(self, text, minutes):
        assert to_minutes(text) == minutes

    @pytest.mark.parametrize("text", ["00:00", "07:45", "13:00", "23:59"])
    def test_round_trip(self, text):
        assert to_time(to_minutes(text)) == text

    @pytest.mark.parametrize("text", ["24:00", "12:60", "7.30", "", "noon", "1230"])
    def test_rejects_malformed_time(self, text):
        with pytest.raises(ValueError):
            to_minutes(text)

    @pytest.mark.parametrize("minutes", [-1, 1440])
    def test_to_time_out_of_range(self, minutes):
        with pytest.raises(ValueError):
            to_time(minutes)


class TestOverlaps:
    def test_intersecting(self):
        assert overlaps(TimeSlot("09:00", "10:00"), TimeSlot("09:30", "10:30"))

    def test_touching_is_not_overlap(self):
        """Half-open intervals: 09:00-10:00 and 10:00-11:00 do not intersect."""
        assert not overlaps(TimeSlot("09:00", "10:00"), TimeSlot("10:00", "11:00"))

    def test_contained(self):
        assert overlaps(TimeSlot("09:00", "12:00"), TimeSlot("10:00", "10:30"))


class TestConflicts:
    busy = (TimeSlot("12:00", "13:58"),)

    def test_buffer_creates_conflict(self):
        assert conflicts(TimeSlot("14:00", "15:00"), self.busy, 5)

    def test_without_buffer_no_conflict(self):
        assert not conflicts(TimeSlot("14:00", "15:00"), self.busy, 0)

    def test_buffer_applies_after_session(self):
        busy = (TimeSlot("15:03", "16:00"),)
        assert conflicts(TimeSlot("14:00", "15:00"), busy, 5)
        assert not conflicts(TimeSlot("14:00", "15:00"), busy, 3)

    def test_empty_busy_list(self):
        assert not conflicts(TimeSlot("14:00", "15:00"), (), 5)

    def test_negative_buffer_rejected(self):
        with pytest.raises(ValueError):
            conflicts(TimeSlot("14:00", "15:00"), self.busy, -1)


class TestCandidateSlots:
    def test_default_window(self):
        slots = candidate_slots("08:00", "20:00", 60, 30)
        assert len(slots) == 23
        assert slots[0] == TimeSlot("08:00", "09:00")
        assert slots[1] == TimeSlot("08:30", "09:30")
        assert slots[-1] == TimeSlot("19:00", "20:00")

    def test_slot_must_end_inside_window(self):
        slots = candidate_slots("08:00", "09:45", 60, 30)
        assert slots == [TimeSlot("08:00", "09:00"), TimeSlot("08:30", "09:30")]

    def test_window_shorter_than_session(self):
        assert candidate_slots("08:00", "08:30", 60, 30) == []

    @pytest.mark.parametrize("duration, step", [(0, 30), (-60, 30), (60, 0)])
    def test_rejects_non_positive(self, duration, step):
        with pytest.raises(ValueError):
            candidate_slots("08:00", "20:00", duration, step)

    def test_rejects_empty_window(self):
        with pytest.raises(ValueError):
            candidate_slots("20:00", "08:00", 60, 30)


class TestAvailableSlots:
    def test_removes_slots_blocked_by_any_participant(self, make_schedule):
        config = MatchingConfig(window_start="08:00", window_end="12:00", buffer_minutes=0)
        a = make_schedule("a@x", monday=["08:00-09:00"])
        b = make_schedule("b@x", monday=["10:30-12:00"])

        slots = available_slots([a, b], "monday", config)

        assert slots == [TimeSlot("09:00", "10:00"), TimeSlot("09:30", "10:30")]

    def test_other_days_unaffected(self, make_schedule, config):
        a = make_schedule("a@x", monday=["08:00-20:00"])
        assert available_slots([a], "monday", config) == []
        assert len(available_slots([a], "tuesday", config)) == 23
