from typing import Dict, List, Sequence

import pandas as pd

from config import DAY_LABELS, DAYS
from models import FAILURE_REASONS, LearningPeer, MatchingResult, MeetingSlot, ProposedGroup, UnmatchedParticipant

GROUP_COLUMNS = [
    "day", "start", "end", "course", "instructor",
    "peer", "peer_email", "peer_group", "size", "learners", "status",
]
UNMATCHED_COLUMNS = ["name", "email", "role", "course", "constraint_failure", "detail"]


# -------------------------------------------------------------
# Display helpers
# -------------------------------------------------------------

def format_clock(time_str: str) -> str:
    """'14:05' -> '2:05 PM'"""
    hours, minutes = map(int, time_str.split(":"))
    period = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {period}"


def format_meeting_time(slot: MeetingSlot) -> str:
    return f"{DAY_LABELS[slot.day]} {format_clock(slot.start)} - {format_clock(slot.end)}"


# -------------------------------------------------------------
# Tables
# -------------------------------------------------------------

def groups_frame(groups: Sequence[ProposedGroup]) -> pd.DataFrame:
    """
    One row per group. ``peer_group`` numbers each peer's groups 1, 2, ...
    in the order the run proposed them.
    """
    if not groups:
        return pd.DataFrame(columns=GROUP_COLUMNS)

    df = pd.DataFrame([
        {
            "day": g.time_slot.day,
            "start": g.time_slot.start,
            "end": g.time_slot.end,
            "course": g.course_code,
            "instructor": g.instructor,
            "peer": g.peer_name,
            "peer_email": g.peer_email,
            "size": g.size,
            "learners": ", ".join(m.name for m in g.learners),
            "status": g.status,
        }
        for g in groups
    ])
    df["peer_group"] = df.groupby("peer_email").cumcount() + 1
    return df[GROUP_COLUMNS]


def unmatched_frame(unmatched: Sequence[UnmatchedParticipant]) -> pd.DataFrame:
    if not unmatched:
        return pd.DataFrame(columns=UNMATCHED_COLUMNS)
    return pd.DataFrame([
        {
            "name": u.name,
            "email": u.email,
            "role": u.role,
            "course": u.course_code,
            "constraint_failure": u.constraint_failure,
            "detail": u.detail,
        }
        for u in unmatched
    ])[UNMATCHED_COLUMNS]


def format_groups_as_table(groups: Sequence[ProposedGroup], limit: int = 60) -> str:
    if not groups:
        return "No groups proposed."
    df = groups_frame(groups)
    df["day_order"] = df["day"].map({d: i for i, d in enumerate(DAYS)})
    df = df.sort_values(["day_order", "start", "peer"], kind="stable").drop(columns="day_order").head(limit)
    return df.to_markdown(index=False)


def failure_counts(unmatched: Sequence[UnmatchedParticipant]) -> Dict[str, int]:
    """Count per taxonomy reason, every reason present (zero if unused)."""
    counts = unmatched_frame(unmatched)["constraint_failure"].value_counts().to_dict()
    return {reason: int(counts.get(reason, 0)) for reason in FAILURE_REASONS}


def peers_without_groups(peers: Sequence[LearningPeer], groups: Sequence[ProposedGroup]) -> List[LearningPeer]:
    assigned = {g.peer_email.strip().lower() for g in groups}
    return [p for p in peers if p.email.strip().lower() not in assigned]


def summarize_run(result: MatchingResult) -> str:
    summary = result.summary()
    lines = [
        "Matching run summary:",
        f"- Learners: {summary.total_learners} ({summary.excluded_learners} excluded)",
        f"- Peers: {summary.total_peers}",
        f"- Proposed groups: {summary.proposed_groups}",
        f"- Matched learners: {summary.matched_learners}",
        f"- Unmatched learners: {summary.unmatched_learners}",
    ]
    counts = failure_counts(result.unmatched)
    lines.extend(f"  - {reason}: {n}" for reason, n in counts.items() if n)
    return "\n".join(lines)
