from dataclasses import dataclass, field
from typing import Optional, Set

from config import DEFAULT_PEER_CAPACITY
from instructors import names_match
from models import ClassSchedule, LearningPeer


# ================================================================
# Qualification
# ================================================================

def can_teach(peer: LearningPeer, course_code: str, instructor: str) -> bool:
    """
    True if one of the peer's declared or extra slots covers ``course_code``
    and, unless ``instructor`` is blank, the slot's instructor matches.
    """
    wanted = course_code.strip()
    any_instructor = not instructor or not instructor.strip()

    for slot in peer.teaching_slots():
        if not slot.course_code or slot.course_code.strip() != wanted:
            continue
        if any_instructor:
            return True
        if slot.instructor and names_match(slot.instructor, instructor):
            return True

    return False


def teaching_instructor(peer: LearningPeer, course_code: str) -> str:
    """Instructor on the first slot where the peer teaches ``course_code``."""
    wanted = course_code.strip()
    for slot in peer.teaching_slots():
        if slot.course_code and slot.course_code.strip() == wanted:
            return slot.instructor or ""
    return ""


# ================================================================
# Capacity
# ================================================================

def peer_capacity(peer: LearningPeer, default_capacity: int = DEFAULT_PEER_CAPACITY) -> int:
    return peer.groups or default_capacity


def has_capacity(
    peer: LearningPeer,
    assigned_this_run: int,
    default_capacity: int = DEFAULT_PEER_CAPACITY,
) -> bool:
    return assigned_this_run < peer_capacity(peer, default_capacity)


@dataclass
class PeerState:
    """
    Per-run bookkeeping for one peer.

    Lives only inside a single matching run; counters start at zero.
    """

    peer: LearningPeer
    schedule: Optional[ClassSchedule]
    default_capacity: int = DEFAULT_PEER_CAPACITY
    assigned_groups: int = 0
    days_used: Set[str] = field(default_factory=set)

    @property
    def capacity(self) -> int:
        return peer_capacity(self.peer, self.default_capacity)

    @property
    def label(self) -> str:
        return f"{self.peer.name} <{self.peer.email}>"

    def has_capacity(self) -> bool:
        return has_capacity(self.peer, self.assigned_groups, self.default_capacity)

    def record_group(self, day: str) -> None:
        if not self.has_capacity():
            raise ValueError(f"Peer {self.peer.email!r} is already at capacity ({self.capacity})")
        self.assigned_groups += 1
        self.days_used.add(day)
