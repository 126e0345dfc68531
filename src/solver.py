"""
Greedy study-group matcher with support for:
- instructor-required demand served before instructor-flexible demand
- bounded combinatorial search over learner subsets (largest groups first)
- per-run peer capacity and weekday variety
- a closed failure taxonomy for every learner left without a group
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from itertools import combinations, islice
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from availability import best_slot
from config import MatchingConfig
from eligibility import PeerState, can_teach, teaching_instructor
from instructors import names_match, normalize
from models import (
    MISSING_SCHEDULE,
    NO_ELIGIBLE_PEERS,
    PEER_CAPACITY_EXHAUSTED,
    SCHEDULE_CONFLICT,
    ClassSchedule,
    GroupMember,
    LearnerRequest,
    LearningPeer,
    MatchingResult,
    ProposedGroup,
    UnmatchedParticipant,
)

logger = logging.getLogger(__name__)


class MatchingInputError(ValueError):
    """The snapshot handed to the engine breaks one of its preconditions."""


def email_key(email: str) -> str:
    return (email or "").strip().lower()


# ================================================================
# Subset generation
# ================================================================

def candidate_subsets(items: Sequence, size: int, limit: int) -> Iterator[Tuple]:
    """
    Up to ``limit`` subsets of ``size`` items, in lexicographic order of
    their positions in ``items``.
    """
    if size < 1 or size > len(items) or limit < 1:
        return
    yield from islice(combinations(items, size), limit)


# ================================================================
# Partitioning
# ================================================================

PartitionKey = Tuple[str, bool]   # (course_code, instructor required)


def partition_learners(
    learners: Iterable[LearnerRequest],
) -> "OrderedDict[PartitionKey, List[LearnerRequest]]":
    """Group by (course, effective instructor requirement), first-seen order."""
    partitions: "OrderedDict[PartitionKey, List[LearnerRequest]]" = OrderedDict()
    for learner in learners:
        key = (learner.course_code.strip(), learner.effective_instructor_required)
        partitions.setdefault(key, []).append(learner)
    return partitions


def ordered_partition_keys(partitions) -> List[PartitionKey]:
    """Instructor-required partitions first; otherwise keep first-seen order."""
    return sorted(partitions, key=lambda key: not key[1])


def group_by_instructor(learners: Iterable[LearnerRequest]) -> List[Tuple[str, List[LearnerRequest]]]:
    """
    Buckets of learners whose requested instructors reconcile to the same
    person. A learner joins a bucket only if its instructor matches every
    member's. Each bucket is labelled with the first member's normalized name.
    """
    buckets: List[Tuple[str, List[LearnerRequest]]] = []
    for learner in learners:
        for label, members in buckets:
            if all(names_match(m.instructor, learner.instructor) for m in members):
                members.append(learner)
                break
        else:
            buckets.append((normalize(learner.instructor), [learner]))
    return buckets


# ================================================================
# Run bookkeeping
# ================================================================

_REASON_RANK = {
    NO_ELIGIBLE_PEERS: 1,
    PEER_CAPACITY_EXHAUSTED: 2,
    SCHEDULE_CONFLICT: 3,
}


@dataclass
class _Diagnosis:
    reason: str
    detail: str = ""
    tried: List[str] = field(default_factory=list)
    at_capacity: List[str] = field(default_factory=list)

    def render(self) -> str:
        if self.reason != SCHEDULE_CONFLICT:
            return self.detail
        parts = []
        if self.tried:
            parts.append("No common free slot with peers tried: " + ", ".join(self.tried))
        if self.at_capacity:
            parts.append("Peers at capacity: " + ", ".join(self.at_capacity))
        return "; ".join(parts) or self.detail


def _add_unique(target: List[str], items: Iterable[str]) -> None:
    for item in items:
        if item not in target:
            target.append(item)


@dataclass
class _RunState:
    """Mutable state for one run; discarded when ``run_matching`` returns."""

    config: MatchingConfig
    peers: List[PeerState]
    learner_schedules: Dict[str, ClassSchedule]
    groups: List[ProposedGroup] = field(default_factory=list)
    matched: Set[str] = field(default_factory=set)
    diagnoses: Dict[str, _Diagnosis] = field(default_factory=dict)

    def is_matched(self, learner: LearnerRequest) -> bool:
        return email_key(learner.email) in self.matched

    def diagnose(self, learners: Iterable[LearnerRequest], reason: str, detail: str = "") -> None:
        """Keep the most specific reason seen so far for each learner."""
        for learner in learners:
            key = email_key(learner.email)
            current = self.diagnoses.get(key)
            if current is None:
                self.diagnoses[key] = _Diagnosis(reason=reason, detail=detail)
            elif _REASON_RANK[reason] >= _REASON_RANK[current.reason]:
                current.reason = reason
                current.detail = detail

    def note_attempt(self, learners: Iterable[LearnerRequest], peer_state: PeerState) -> None:
        for learner in learners:
            diag = self.diagnoses.setdefault(
                email_key(learner.email), _Diagnosis(reason=SCHEDULE_CONFLICT)
            )
            _add_unique(diag.tried, [peer_state.label])

    def note_capacity(self, learners: Iterable[LearnerRequest], labels: List[str]) -> None:
        for learner in learners:
            diag = self.diagnoses.get(email_key(learner.email))
            if diag is not None:
                _add_unique(diag.at_capacity, labels)

    def accept(self, group: ProposedGroup, peer_state: PeerState) -> None:
        peer_state.record_group(group.time_slot.day)
        self.groups.append(group)
        for member in group.learners:
            key = email_key(member.email)
            self.matched.add(key)
            self.diagnoses.pop(key, None)


# ================================================================
# Group formation
# ================================================================

def try_form_group(
    learners: Sequence[LearnerRequest],
    peer_state: PeerState,
    course_code: str,
    instructor: str,
    learner_schedules: Dict[str, ClassSchedule],
    config: MatchingConfig,
) -> Optional[ProposedGroup]:
    """
    A pending group for ``learners`` with ``peer_state``'s peer, or None when
    a schedule is missing or no common slot exists. Does not touch the
    peer's counters.
    """
    if peer_state.schedule is None:
        return None

    schedules = [peer_state.schedule]
    for learner in learners:
        schedule = learner_schedules.get(email_key(learner.email))
        if schedule is None:
            return None
        schedules.append(schedule)

    slot = best_slot(schedules, peer_state.days_used, config)
    if slot is None:
        return None

    peer = peer_state.peer
    return ProposedGroup(
        course_code=course_code,
        instructor=instructor,
        peer_id=peer.email,
        peer_name=peer.name,
        peer_email=peer.email,
        learners=[
            GroupMember(
                id=learner.email,
                name=learner.name,
                email=learner.email,
                instructor=normalize(learner.instructor),
            )
            for learner in learners
        ],
        time_slot=slot,
    )


def _search_group(
    learners: List[LearnerRequest],
    peer_state: PeerState,
    course_code: str,
    instructor: str,
    state: _RunState,
) -> Optional[ProposedGroup]:
    config = state.config
    largest = min(config.max_group_size, len(learners))

    for size in range(largest, 0, -1):
        for subset in candidate_subsets(learners, size, config.combination_cap(size)):
            group = try_form_group(
                subset, peer_state, course_code, instructor, state.learner_schedules, config
            )
            if group is not None:
                return group
    return None


def _peer_can_take(peer_state: PeerState, course_code: str, learner: LearnerRequest) -> bool:
    if not learner.effective_instructor_required:
        return True
    return can_teach(peer_state.peer, course_code, learner.instructor)


def _match_partition(
    learners: Sequence[LearnerRequest],
    course_code: str,
    instructor: Optional[str],
    state: _RunState,
) -> None:
    pending = [learner for learner in learners if not state.is_matched(learner)]
    if not pending:
        return

    qualified = [ps for ps in state.peers if can_teach(ps.peer, course_code, instructor or "")]
    if not qualified:
        if instructor:
            detail = f"No peer is qualified for {course_code} with instructor '{instructor}'"
        else:
            detail = f"No peer is qualified for {course_code}"
        logger.info("%s: %d learner(s) without eligible peers", course_code, len(pending))
        state.diagnose(pending, NO_ELIGIBLE_PEERS, detail)
        return

    # names_match is not transitive: a peer qualified for the bucket label
    # may still be wrong for a member's own instructor
    if instructor:
        unqualified = [
            learner for learner in pending
            if learner.effective_instructor_required
            and not any(can_teach(ps.peer, course_code, learner.instructor) for ps in qualified)
        ]
        for learner in unqualified:
            state.diagnose(
                [learner],
                NO_ELIGIBLE_PEERS,
                f"No peer is qualified for {course_code} with instructor "
                f"'{normalize(learner.instructor)}'",
            )
        pending = [learner for learner in pending if learner not in unqualified]
        if not pending:
            return

    full = [ps.label for ps in qualified if not ps.has_capacity()]
    open_peers = [ps for ps in qualified if ps.has_capacity()]
    if not open_peers:
        logger.info("%s: all %d qualified peer(s) at capacity", course_code, len(qualified))
        state.diagnose(
            pending,
            PEER_CAPACITY_EXHAUSTED,
            "All qualified peers are at capacity: " + ", ".join(full),
        )
        return

    for peer_state in open_peers:
        label = instructor or normalize(teaching_instructor(peer_state.peer, course_code))
        while peer_state.has_capacity():
            remaining = [
                learner for learner in pending
                if not state.is_matched(learner) and _peer_can_take(peer_state, course_code, learner)
            ]
            if not remaining:
                break

            state.note_attempt(remaining, peer_state)
            group = _search_group(remaining, peer_state, course_code, label, state)
            if group is None:
                logger.debug("%s: no feasible group with %s", course_code, peer_state.label)
                break

            state.accept(group, peer_state)
            logger.debug(
                "%s: %s takes %d learner(s) on %s",
                course_code,
                peer_state.label,
                group.size,
                group.time_slot.label(),
            )

    leftover = [learner for learner in pending if not state.is_matched(learner)]
    if leftover:
        state.diagnose(leftover, SCHEDULE_CONFLICT)
        state.note_capacity(leftover, full)


# ================================================================
# Main entry point
# ================================================================

def _index_schedules(schedules: Iterable[ClassSchedule]) -> Dict[str, ClassSchedule]:
    index: Dict[str, ClassSchedule] = {}
    for schedule in schedules:
        index.setdefault(email_key(schedule.email), schedule)
    return index


def _check_unique(emails: Iterable[str], what: str) -> None:
    seen: Set[str] = set()
    for email in emails:
        key = email_key(email)
        if not key:
            raise MatchingInputError(f"{what} with a blank email")
        if key in seen:
            raise MatchingInputError(f"Duplicate {what} email: {email!r}")
        seen.add(key)


def run_matching(
    requests: Sequence[LearnerRequest],
    peers: Sequence[LearningPeer],
    learner_schedules: Iterable[ClassSchedule],
    peer_schedules: Iterable[ClassSchedule],
    excluded_learner_emails: Optional[Iterable[str]] = None,
    config: Optional[MatchingConfig] = None,
) -> MatchingResult:
    """
    Match learners to peers over one immutable snapshot.

    Every learner not in ``excluded_learner_emails`` ends up either in exactly
    one proposed group or in the unmatched list.
    """
    if not requests:
        raise MatchingInputError("No learner requests to match")
    if not peers:
        raise MatchingInputError("No learning peers to match against")
    _check_unique((r.email for r in requests), "learner request")
    _check_unique((p.email for p in peers), "learning peer")

    config = config or MatchingConfig()
    excluded = {email_key(e) for e in (excluded_learner_emails or ())}

    learners = [r for r in requests if email_key(r.email) not in excluded]
    peer_index = _index_schedules(peer_schedules)
    state = _RunState(
        config=config,
        peers=[
            PeerState(
                peer=peer,
                schedule=peer_index.get(email_key(peer.email)),
                default_capacity=config.default_peer_capacity,
            )
            for peer in peers
        ],
        learner_schedules=_index_schedules(learner_schedules),
    )

    logger.info(
        "Matching run: %d learner(s) (%d excluded), %d peer(s)",
        len(learners),
        len(requests) - len(learners),
        len(peers),
    )
    for ps in state.peers:
        if ps.schedule is None:
            logger.warning("Peer %s has no class schedule on file", ps.label)

    # ------------------------------------------------------------
    # 1. Learners without a schedule never enter the search
    # ------------------------------------------------------------
    missing = {
        email_key(l.email) for l in learners
        if email_key(l.email) not in state.learner_schedules
    }
    searchable = [l for l in learners if email_key(l.email) not in missing]

    # ------------------------------------------------------------
    # 2. Partitions in priority order
    # ------------------------------------------------------------
    partitions = partition_learners(searchable)
    for key in ordered_partition_keys(partitions):
        course_code, required = key
        if required:
            flexible = partitions.get((course_code, False), [])
            for instructor, members in group_by_instructor(partitions[key]):
                combined = members + [l for l in flexible if not state.is_matched(l)]
                _match_partition(combined, course_code, instructor, state)
        else:
            _match_partition(partitions[key], course_code, None, state)

    # ------------------------------------------------------------
    # 3. Everyone left over, in input order
    # ------------------------------------------------------------
    unmatched: List[UnmatchedParticipant] = []
    for learner in learners:
        key = email_key(learner.email)
        if key in state.matched:
            continue

        if key in missing:
            reason = MISSING_SCHEDULE
            detail = f"No class schedule on file for {learner.email}"
        elif key in state.diagnoses:
            diag = state.diagnoses[key]
            reason, detail = diag.reason, diag.render()
        else:
            logger.warning("Learner %s left unmatched without a diagnosis", learner.email)
            reason, detail = SCHEDULE_CONFLICT, "No group could be formed"

        unmatched.append(
            UnmatchedParticipant(
                id=learner.email,
                name=learner.name,
                email=learner.email,
                course_code=learner.course_code,
                constraint_failure=reason,
                detail=detail,
            )
        )

    result = MatchingResult(
        groups=list(state.groups),
        unmatched=unmatched,
        total_learners=len(requests),
        excluded_learners=len(requests) - len(learners),
        total_peers=len(peers),
    )
    logger.info(
        "Matching run done: %d group(s), %d matched, %d unmatched",
        len(result.groups),
        len(result.matched_emails),
        len(result.unmatched),
    )
    return result
