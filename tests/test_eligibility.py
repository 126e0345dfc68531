"""Tests for peer qualification and capacity."""

import pytest

from eligibility import PeerState, can_teach, has_capacity, peer_capacity, teaching_instructor


class TestCanTeach:
    def test_declared_slot_with_instructor(self, make_peer):
        peer = make_peer("p@x", ("MATH 1505", "Dr. Marina Elliott"))
        assert can_teach(peer, "MATH 1505", "elliot")

    def test_course_code_is_trimmed(self, make_peer):
        peer = make_peer("p@x", (" MATH 1505 ", "Smith"))
        assert can_teach(peer, "MATH 1505 ", "")

    def test_wrong_course(self, make_peer):
        peer = make_peer("p@x", ("MATH 1505", "Smith"))
        assert not can_teach(peer, "MATH 1506", "")

    def test_wrong_instructor(self, make_peer):
        peer = make_peer("p@x", ("MATH 1505", "Smith"))
        assert not can_teach(peer, "MATH 1505", "Brown")

    def test_blank_request_instructor_matches_any(self, make_peer):
        peer = make_peer("p@x", ("MATH 1505", "Smith"))
        assert can_teach(peer, "MATH 1505", "   ")

    def test_slot_without_instructor_only_serves_flexible(self, make_peer):
        peer = make_peer("p@x", ("MATH 1505", ""))
        assert can_teach(peer, "MATH 1505", "")
        assert not can_teach(peer, "MATH 1505", "Smith")

    def test_other_courses(self, make_peer):
        peer = make_peer("p@x", ("MATH 1505", "Smith"), other=[("COMP 1501", "Brown")])
        assert can_teach(peer, "COMP 1501", "Dr. Brown")


class TestTeachingInstructor:
    def test_first_matching_slot(self, make_peer):
        peer = make_peer("p@x", ("MATH 1505", "Smith"), other=[("MATH 1505", "Brown")])
        assert teaching_instructor(peer, "MATH 1505") == "Smith"

    def test_not_taught(self, make_peer):
        assert teaching_instructor(make_peer("p@x", ("MATH 1505", "Smith")), "COMP 1501") == ""


class TestCapacity:
    @pytest.mark.parametrize("groups, expected", [(None, 2), (0, 2), (1, 1), (3, 3)])
    def test_peer_capacity(self, make_peer, groups, expected):
        assert peer_capacity(make_peer("p@x", groups=groups)) == expected

    def test_has_capacity(self, make_peer):
        peer = make_peer("p@x", groups=2)
        assert has_capacity(peer, 0)
        assert has_capacity(peer, 1)
        assert not has_capacity(peer, 2)

    def test_custom_default(self, make_peer):
        assert has_capacity(make_peer("p@x"), 2, default_capacity=3)

    def test_peer_state_records_groups(self, make_peer):
        state = PeerState(peer=make_peer("p@x", groups=1), schedule=None)
        state.record_group("monday")
        assert state.assigned_groups == 1
        assert state.days_used == {"monday"}
        assert not state.has_capacity()
        with pytest.raises(ValueError):
            state.record_group("tuesday")
