from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ics import Calendar, Event

from config import DAYS
from models import ProposedGroup
from report import groups_frame
from timeslots import to_minutes


def _week_monday(week_start: Optional[date]) -> date:
    if week_start is None:
        today = date.today()
        days_ahead = 0 - today.weekday()
        if days_ahead <= 0:
            days_ahead += 7
        return today + timedelta(days=days_ahead)
    return week_start - timedelta(days=week_start.weekday())


def create_ics_file(groups: Sequence[ProposedGroup], week_start: Optional[date] = None) -> str:
    """
    One calendar event per group in the week of ``week_start``
    (next Monday when not given).
    """
    c = Calendar()
    if not groups:
        return c.serialize()

    monday = _week_monday(week_start)
    day_map = {day: monday + timedelta(days=i) for i, day in enumerate(DAYS)}

    for group in groups:
        slot = group.time_slot
        base = datetime.combine(day_map[slot.day], datetime.min.time())
        start_dt = base + timedelta(minutes=to_minutes(slot.start))
        end_dt = base + timedelta(minutes=to_minutes(slot.end))

        e = Event(
            name=f"{group.course_code} study group ({group.peer_name})",
            begin=start_dt,
            end=end_dt,
        )
        learners = ", ".join(m.name for m in group.learners)
        e.description = f"Peer: {group.peer_name} <{group.peer_email}> | Learners: {learners}"
        c.events.add(e)

    return c.serialize()


def groups_to_csv(groups: Sequence[ProposedGroup]) -> str:
    return groups_frame(groups).to_csv(index=False)
