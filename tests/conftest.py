"""Shared builders for matcher tests."""

import pytest

from config import DAYS, MatchingConfig
from models import ClassSchedule, CourseSlot, LearnerRequest, LearningPeer, TimeSlot

FULL_DAY = ("08:00-20:00",)


def _slots(ranges):
    return tuple(TimeSlot(*r.split("-")) for r in ranges)


@pytest.fixture
def make_schedule():
    """make_schedule("a@x", monday=["09:00-10:00"]) -> ClassSchedule (other days free)."""

    def _make(email, **days):
        return ClassSchedule(email=email, name=email.split("@")[0], days={d: _slots(r) for d, r in days.items()})

    return _make


@pytest.fixture
def free_only_on(make_schedule):
    """Every weekday fully booked except ``day``, which has only ``ranges`` busy."""

    def _make(email, day, *ranges):
        days = {d: FULL_DAY for d in DAYS}
        days[day] = ranges
        return make_schedule(email, **days)

    return _make


@pytest.fixture
def make_learner():
    def _make(email, course="MATH 1505", instructor="", required=False, name=None):
        return LearnerRequest(
            email=email,
            name=name or email.split("@")[0].title(),
            course_code=course,
            instructor=instructor,
            instructor_match_required=required,
        )

    return _make


@pytest.fixture
def make_peer():
    """make_peer("p@x", ("MATH 1505", "J. Smith"), groups=1)"""

    def _make(email, *courses, groups=None, other=(), name=None):
        return LearningPeer(
            email=email,
            name=name or email.split("@")[0].title(),
            groups=groups,
            courses=tuple(CourseSlot(c, i) for c, i in courses),
            other_courses=tuple(CourseSlot(c, i) for c, i in other),
        )

    return _make


@pytest.fixture
def config():
    return MatchingConfig()
