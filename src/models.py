# models.py
"""
Core domain models for the study group matcher.
These are used by:
- ingest (typed rows from spreadsheet exports)
- solver (matching engine input / output)
- report / export
- LangGraph pipeline
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from config import DAYS


# ======================================================================
# Time slots
# ======================================================================

@dataclass(frozen=True)
class TimeSlot:
    """A busy interval or a session window on one day, "HH:MM" strings."""

    start: str
    end: str

    def label(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class MeetingSlot:
    """The weekly slot committed for a proposed group."""

    day: str       # "monday" ... "friday"
    start: str
    end: str

    def __post_init__(self):
        if self.day not in DAYS:
            raise ValueError(f"Invalid day for MeetingSlot: {self.day!r}")

    def label(self) -> str:
        return f"{self.day} {self.start}-{self.end}"

    def as_time_slot(self) -> TimeSlot:
        return TimeSlot(self.start, self.end)


# ======================================================================
# Inputs
# ======================================================================

@dataclass(frozen=True)
class CourseSlot:
    """One (course, instructor) pair a peer is qualified for."""

    course_code: str
    instructor: str = ""


@dataclass(frozen=True)
class LearnerRequest:
    email: str
    name: str
    course_code: str
    instructor: str = ""
    instructor_match_required: bool = False
    section_number: Optional[str] = None

    @property
    def effective_instructor_required(self) -> bool:
        """A blank instructor always downgrades the requirement to "any"."""
        return bool(self.instructor_match_required and self.instructor.strip())


@dataclass(frozen=True)
class LearningPeer:
    """
    Tutor profile.

    groups:        declared capacity; None / 0 means "use the default"
    courses:       up to three declared teaching slots
    other_courses: open-ended extra (course, instructor) pairs
    """

    email: str
    name: str
    groups: Optional[int] = None
    courses: Tuple[CourseSlot, ...] = ()
    other_courses: Tuple[CourseSlot, ...] = ()

    def __post_init__(self):
        if len(self.courses) > 3:
            raise ValueError(
                f"Peer {self.email!r} declares {len(self.courses)} course slots (max 3)"
            )
        if self.groups is not None and self.groups < 0:
            raise ValueError(f"Peer {self.email!r} has negative capacity: {self.groups}")

    def teaching_slots(self) -> Tuple[CourseSlot, ...]:
        return tuple(self.courses) + tuple(self.other_courses)


@dataclass(frozen=True)
class ClassSchedule:
    """Fixed weekly commitments of one learner or peer."""

    email: str
    name: str = ""
    days: Dict[str, Tuple[TimeSlot, ...]] = field(default_factory=dict)

    def __post_init__(self):
        unknown = set(self.days) - set(DAYS)
        if unknown:
            raise ValueError(f"Unknown weekday(s) in schedule for {self.email!r}: {sorted(unknown)}")

    def for_day(self, day: str) -> Tuple[TimeSlot, ...]:
        return tuple(self.days.get(day, ()))


# ======================================================================
# Outputs
# ======================================================================

GROUP_STATUSES = ("pending", "approved", "rejected")


@dataclass(frozen=True)
class GroupMember:
    id: str
    name: str
    email: str
    instructor: str = ""

    def as_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "instructor": self.instructor,
        }


@dataclass
class ProposedGroup:
    course_code: str
    instructor: str
    peer_id: str
    peer_name: str
    peer_email: str
    learners: List[GroupMember]
    time_slot: MeetingSlot
    status: str = "pending"

    def __post_init__(self):
        if not 1 <= len(self.learners) <= 4:
            raise ValueError(f"Group size must be 1-4, got {len(self.learners)}")
        if self.status not in GROUP_STATUSES:
            raise ValueError(f"Invalid group status: {self.status!r}")

    @property
    def size(self) -> int:
        return len(self.learners)

    def _transition(self, status: str) -> None:
        if self.status != "pending":
            raise ValueError(f"Cannot move group from {self.status!r} to {status!r}")
        self.status = status

    def approve(self) -> None:
        self._transition("approved")

    def reject(self) -> None:
        self._transition("rejected")

    def as_dict(self):
        return {
            "course_code": self.course_code,
            "instructor": self.instructor,
            "peer_id": self.peer_id,
            "peer_name": self.peer_name,
            "peer_email": self.peer_email,
            "learners": [m.as_dict() for m in self.learners],
            "time_slot": {
                "day": self.time_slot.day,
                "start": self.time_slot.start,
                "end": self.time_slot.end,
            },
            "status": self.status,
        }


# Closed failure taxonomy, used verbatim as category labels
MISSING_SCHEDULE = "Missing schedule"
NO_ELIGIBLE_PEERS = "No eligible peers"
PEER_CAPACITY_EXHAUSTED = "Peer capacity exhausted"
SCHEDULE_CONFLICT = "Schedule conflict"

FAILURE_REASONS = (
    MISSING_SCHEDULE,
    NO_ELIGIBLE_PEERS,
    PEER_CAPACITY_EXHAUSTED,
    SCHEDULE_CONFLICT,
)


@dataclass(frozen=True)
class UnmatchedParticipant:
    id: str
    name: str
    email: str
    course_code: str
    constraint_failure: str
    detail: str = ""
    role: str = "Learner"

    def __post_init__(self):
        if self.constraint_failure not in FAILURE_REASONS:
            raise ValueError(f"Unknown constraint failure: {self.constraint_failure!r}")

    def as_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "course_code": self.course_code,
            "constraint_failure": self.constraint_failure,
            "detail": self.detail,
        }


# ======================================================================
# Run result
# ======================================================================

@dataclass(frozen=True)
class RunSummary:
    total_learners: int
    excluded_learners: int
    total_peers: int
    matched_learners: int
    unmatched_learners: int
    proposed_groups: int
    status: str = "completed"

    def as_dict(self):
        return {
            "total_learners": self.total_learners,
            "excluded_learners": self.excluded_learners,
            "total_peers": self.total_peers,
            "matched_learners": self.matched_learners,
            "unmatched_learners": self.unmatched_learners,
            "proposed_groups": self.proposed_groups,
            "status": self.status,
        }


@dataclass
class MatchingResult:
    groups: List[ProposedGroup] = field(default_factory=list)
    unmatched: List[UnmatchedParticipant] = field(default_factory=list)
    total_learners: int = 0
    excluded_learners: int = 0
    total_peers: int = 0

    @property
    def matched_emails(self) -> List[str]:
        return [m.email for g in self.groups for m in g.learners]

    def summary(self) -> RunSummary:
        return RunSummary(
            total_learners=self.total_learners,
            excluded_learners=self.excluded_learners,
            total_peers=self.total_peers,
            matched_learners=len(self.matched_emails),
            unmatched_learners=len(self.unmatched),
            proposed_groups=len(self.groups),
        )

    def as_dict(self):
        return {
            "groups": [g.as_dict() for g in self.groups],
            "unmatched": [u.as_dict() for u in self.unmatched],
            "summary": self.summary().as_dict(),
        }
