# graph.py

"""
LangGraph pipeline around one matching run.

Flow:
    prepare → match → summarize
           ↘ (no learners left after exclusions) END
"""

import logging
from typing import Iterable, List, Optional, Sequence, TypedDict

from langgraph.graph import END, StateGraph

from config import MatchingConfig
from logconfig import configure_logging
from models import ClassSchedule, LearnerRequest, LearningPeer, MatchingResult
from report import summarize_run
from solver import email_key, run_matching

logger = logging.getLogger(__name__)


class MatchingState(TypedDict, total=False):
    requests: List[LearnerRequest]
    peers: List[LearningPeer]
    learner_schedules: List[ClassSchedule]
    peer_schedules: List[ClassSchedule]
    excluded_learner_emails: List[str]
    config: MatchingConfig
    pending_learners: int
    result: MatchingResult
    summary: str
    status: str


# ---------------------------------------------------------
# NODES
# ---------------------------------------------------------

def prepare_node(state: MatchingState) -> MatchingState:
    excluded = {email_key(e) for e in state.get("excluded_learner_emails", [])}
    pending = [r for r in state["requests"] if email_key(r.email) not in excluded]

    state["pending_learners"] = len(pending)
    state.setdefault("config", MatchingConfig())

    if not pending:
        state["result"] = MatchingResult(
            total_learners=len(state["requests"]),
            excluded_learners=len(state["requests"]),
            total_peers=len(state["peers"]),
        )
        state["summary"] = "No new learner requests to match."
        state["status"] = "skipped"
    return state


def match_node(state: MatchingState) -> MatchingState:
    state["result"] = run_matching(
        requests=state["requests"],
        peers=state["peers"],
        learner_schedules=state.get("learner_schedules", []),
        peer_schedules=state.get("peer_schedules", []),
        excluded_learner_emails=state.get("excluded_learner_emails", []),
        config=state["config"],
    )
    return state


def summarize_node(state: MatchingState) -> MatchingState:
    state["summary"] = summarize_run(state["result"])
    state["status"] = "completed"
    return state


def decide_next_step(state: MatchingState) -> str:
    """Router: skip the engine when every request was excluded."""
    if state.get("pending_learners", 0) > 0:
        return "match"
    return "end"


# ---------------------------------------------------------
# GRAPH BUILD
# ---------------------------------------------------------

def build_matching_graph():
    graph = StateGraph(MatchingState)

    graph.add_node("prepare", prepare_node)
    graph.add_node("match", match_node)
    graph.add_node("summarize", summarize_node)

    graph.set_entry_point("prepare")
    graph.add_conditional_edges(
        "prepare",
        decide_next_step,
        {
            "match": "match",
            "end": END,
        },
    )
    graph.add_edge("match", "summarize")
    graph.add_edge("summarize", END)

    return graph.compile()


def run_matching_pipeline(
    requests: Sequence[LearnerRequest],
    peers: Sequence[LearningPeer],
    learner_schedules: Sequence[ClassSchedule],
    peer_schedules: Sequence[ClassSchedule],
    excluded_learner_emails: Optional[Iterable[str]] = None,
    config: Optional[MatchingConfig] = None,
    log_level: Optional[str] = None,
    json_logs: bool = False,
) -> MatchingState:
    """
    Run prepare → match → summarize and return the final state.

    Passing ``log_level`` (or ``json_logs``) makes this call the process
    entry point and sets up logging via ``configure_logging`` first.
    """
    if log_level or json_logs:
        configure_logging(log_level, json_logs=json_logs)

    state: MatchingState = {
        "requests": list(requests),
        "peers": list(peers),
        "learner_schedules": list(learner_schedules),
        "peer_schedules": list(peer_schedules),
        "excluded_learner_emails": list(excluded_learner_emails or []),
        "config": config or MatchingConfig(),
    }

    final_state = build_matching_graph().invoke(state)
    logger.info("Matching pipeline finished: %s", final_state.get("status"))
    return final_state
