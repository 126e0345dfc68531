"""
Ranks conflict-free session slots for a group.

Score (highest wins):
    3  genuine gap between classes (someone is already on campus)
    2  within ``near_class_minutes`` of a class boundary
    1  within ``preferred_proximity_minutes``
    0  unconstrained
Ties prefer a weekday the peer has not used yet this run, then the earliest
slot in enumeration order (Monday first). No randomness.
"""

import math
from typing import AbstractSet, Optional, Sequence, Tuple

from config import DAYS
from models import ClassSchedule, MeetingSlot, TimeSlot
from timeslots import available_slots, to_minutes


def class_proximity(slot: TimeSlot, busy: Sequence[TimeSlot]) -> float:
    """Minutes from ``slot`` to the nearest class in ``busy`` (inf if none)."""
    if not busy:
        return math.inf

    start, end = to_minutes(slot.start), to_minutes(slot.end)
    nearest = math.inf

    for cls in busy:
        cls_start, cls_end = to_minutes(cls.start), to_minutes(cls.end)
        if end <= cls_start:
            distance = cls_start - end
        elif start >= cls_end:
            distance = start - cls_end
        else:
            distance = 0
        nearest = min(nearest, distance)

    return nearest


def is_between_classes(slot: TimeSlot, busy: Sequence[TimeSlot]) -> bool:
    """One participant has a class before and a class after the slot."""
    if len(busy) < 2:
        return False

    start, end = to_minutes(slot.start), to_minutes(slot.end)
    before = any(to_minutes(cls.end) <= start for cls in busy)
    after = any(to_minutes(cls.start) >= end for cls in busy)
    return before and after


def is_between_classes_for_group(
    slot: TimeSlot,
    schedules: Sequence[ClassSchedule],
    day: str,
    window_minutes: int,
) -> bool:
    """
    Individual gap for anyone, OR the group as a whole has someone arriving
    from a class that ended within ``window_minutes`` and someone leaving for
    a class that starts within ``window_minutes``.
    """
    for schedule in schedules:
        if is_between_classes(slot, schedule.for_day(day)):
            return True

    start, end = to_minutes(slot.start), to_minutes(slot.end)
    recent_before = False
    upcoming_after = False

    for schedule in schedules:
        for cls in schedule.for_day(day):
            cls_start, cls_end = to_minutes(cls.start), to_minutes(cls.end)
            if cls_end <= start and start - cls_end <= window_minutes:
                recent_before = True
            if cls_start >= end and cls_start - end <= window_minutes:
                upcoming_after = True

    return recent_before and upcoming_after


def slot_score(slot: TimeSlot, schedules: Sequence[ClassSchedule], day: str, config) -> int:
    if is_between_classes_for_group(slot, schedules, day, config.group_gap_window_minutes):
        return 3

    nearest = min(
        (class_proximity(slot, schedule.for_day(day)) for schedule in schedules),
        default=math.inf,
    )
    if nearest <= config.near_class_minutes:
        return 2
    if nearest <= config.preferred_proximity_minutes:
        return 1
    return 0


def best_slot(
    schedules: Sequence[ClassSchedule],
    days_used: AbstractSet[str],
    config,
) -> Optional[MeetingSlot]:
    """Highest (score, unused day) slot across the week, or None if every day is blocked."""
    best: Optional[Tuple[Tuple[int, int], str, TimeSlot]] = None

    for day in DAYS:
        fresh_day = 0 if day in days_used else 1
        for slot in available_slots(schedules, day, config):
            key = (slot_score(slot, schedules, day, config), fresh_day)
            # strict > keeps the earliest slot on ties
            if best is None or key > best[0]:
                best = (key, day, slot)

    if best is None:
        return None

    _, day, slot = best
    return MeetingSlot(day=day, start=slot.start, end=slot.end)
