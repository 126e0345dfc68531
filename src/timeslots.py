# timeslots.py
#
# Clock-time arithmetic and interval checks used by the availability search.
# All times are "HH:MM" strings on a 24-hour clock; internally we compare
# minutes from midnight.

import re
from typing import Iterable, List, Sequence

from models import ClassSchedule, TimeSlot

MINUTES_PER_DAY = 24 * 60

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def to_minutes(time_str: str) -> int:
    """Converts '08:30' to 510 (minutes from midnight)."""
    match = _CLOCK_RE.match(time_str.strip()) if isinstance(time_str, str) else None
    if not match:
        raise ValueError(f"Invalid clock time {time_str!r}, expected 'HH:MM'")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Clock time out of range: {time_str!r}")
    return hours * 60 + minutes


def to_time(minutes: int) -> str:
    """Converts 510 back to '08:30'."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of range for a clock time: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def overlaps(a: TimeSlot, b: TimeSlot) -> bool:
    """Half-open intervals intersect: Start1 < End2 and Start2 < End1."""
    return to_minutes(a.start) < to_minutes(b.end) and to_minutes(b.start) < to_minutes(a.end)


def conflicts(candidate: TimeSlot, busy: Iterable[TimeSlot], buffer_minutes: int) -> bool:
    """True if ``candidate`` widened by the buffer on both ends hits any busy interval."""
    if buffer_minutes < 0:
        raise ValueError(f"buffer_minutes cannot be negative, got {buffer_minutes}")

    start = to_minutes(candidate.start) - buffer_minutes
    end = to_minutes(candidate.end) + buffer_minutes

    for slot in busy:
        if start < to_minutes(slot.end) and to_minutes(slot.start) < end:
            return True
    return False


def candidate_slots(
    window_start: str,
    window_end: str,
    duration_minutes: int,
    step_minutes: int,
) -> List[TimeSlot]:
    """
    Every ``duration_minutes`` slot starting at ``step_minutes`` increments
    from ``window_start`` that ends no later than ``window_end``.
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")
    if step_minutes <= 0:
        raise ValueError(f"step_minutes must be positive, got {step_minutes}")

    first = to_minutes(window_start)
    last = to_minutes(window_end)
    if first >= last:
        raise ValueError(f"Empty availability window: {window_start}-{window_end}")

    slots = []
    start = first
    while start + duration_minutes <= last:
        slots.append(TimeSlot(to_time(start), to_time(start + duration_minutes)))
        start += step_minutes
    return slots


def available_slots(schedules: Sequence[ClassSchedule], day: str, config) -> List[TimeSlot]:
    """Candidate slots for ``day`` that clear every participant's classes."""
    candidates = candidate_slots(
        config.window_start,
        config.window_end,
        config.session_minutes,
        config.step_minutes,
    )
    busy_lists = [schedule.for_day(day) for schedule in schedules]

    return [
        slot
        for slot in candidates
        if not any(conflicts(slot, busy, config.buffer_minutes) for busy in busy_lists)
    ]
