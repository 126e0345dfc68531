# ingest.py
"""
Turns spreadsheet exports (CSV / Excel) into typed engine inputs.

Expected sheets, matched on normalized headers:

    requests:   email, first_name, last_name, course_code, instructor,
                instructor_match_required (Y/N), section_number
    peers:      email, preferred_name, last_name, groups,
                course_code_1, instructor_1 ... course_code_3, instructor_3,
                other_courses ("COMP 1501 - Smith (A-), MATH 1505 - Elliott")
    schedules:  email, first_name, monday ... friday ("0830-0950; 1000-1120")
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

import pandas as pd

from config import DAYS
from models import ClassSchedule, CourseSlot, LearnerRequest, LearningPeer, TimeSlot

logger = logging.getLogger(__name__)

# Known test rows in the live sheets
SENTINEL_EMAILS = frozenset({"chickey@test"})

_GRADE_RE = re.compile(r"\s*\([A-F][+-]?\)", re.IGNORECASE)
_HHMM_RE = re.compile(r"^\d{4}$")


# -------------------------------------------------------------
# Helpers: normalization & cell access
# -------------------------------------------------------------

def clean_header(col_name: str) -> str:
    return str(col_name).strip().lower().replace(" ", "_").replace("/", "_").replace(".", "")


def normalize_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [clean_header(c) for c in df.columns]
    return df


def _cell(row: pd.Series, name: str) -> str:
    value = row.get(name, "")
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _skip_row(email: str, skip_emails: Iterable[str]) -> bool:
    return not email or email.lower() in skip_emails


def read_table(path: Union[str, Path]) -> pd.DataFrame:
    """Load a .csv or .xlsx/.xls export as strings."""
    path = Path(path)
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path, dtype=str, keep_default_na=False)
    return pd.read_excel(path, dtype=str, keep_default_na=False)


# -------------------------------------------------------------
# Field parsers
# -------------------------------------------------------------

def parse_time_slot(raw: str) -> TimeSlot:
    """'0830-0950' -> TimeSlot('08:30', '09:50')"""
    parts = [p.strip() for p in raw.strip().split("-")]
    if len(parts) != 2 or not all(_HHMM_RE.match(p) for p in parts):
        raise ValueError(f"Invalid time slot format: {raw!r}")
    start, end = parts
    return TimeSlot(f"{start[:2]}:{start[2:]}", f"{end[:2]}:{end[2:]}")


def parse_schedule_field(raw: str) -> List[TimeSlot]:
    """'0830-0950; 1000-1120' -> two TimeSlots. Blank -> []."""
    if not raw or not raw.strip():
        return []
    return [parse_time_slot(part) for part in raw.split(";") if part.strip()]


def parse_other_courses(raw: str) -> List[CourseSlot]:
    """
    'COMP 1501 - Smith (A-), MATH 1505 - Elliott' -> two CourseSlots.

    Grade annotations like (A), (B+) are dropped; entries without a
    "COURSE - Instructor" shape are ignored.
    """
    if not raw or not raw.strip():
        return []

    courses = []
    for entry in raw.split(","):
        cleaned = _GRADE_RE.sub("", entry).strip()
        if not cleaned:
            continue
        course, sep, instructor = cleaned.partition("-")
        if not sep or not course.strip():
            logger.debug("Ignoring other-course entry without instructor: %r", entry)
            continue
        courses.append(CourseSlot(course_code=course.strip(), instructor=instructor.strip()))
    return courses


def _parse_capacity(raw: str, email: str) -> Optional[int]:
    if not raw:
        return None
    try:
        return int(float(raw))
    except ValueError:
        raise ValueError(f"Peer {email}: invalid groups value {raw!r}") from None


# -------------------------------------------------------------
# Sheet loaders
# -------------------------------------------------------------

def load_requests(df: pd.DataFrame, skip_emails: Iterable[str] = SENTINEL_EMAILS) -> List[LearnerRequest]:
    df = normalize_dataframe(df)
    skip = {e.lower() for e in skip_emails}
    requests = []

    for _, row in df.iterrows():
        email = _cell(row, "email")
        if _skip_row(email, skip):
            continue

        name = " ".join(p for p in (_cell(row, "first_name"), _cell(row, "last_name")) if p)
        requests.append(
            LearnerRequest(
                email=email,
                name=name or _cell(row, "name"),
                course_code=_cell(row, "course_code"),
                instructor=_cell(row, "instructor"),
                instructor_match_required=_cell(row, "instructor_match_required").upper() in ("Y", "YES", "TRUE"),
                section_number=_cell(row, "section_number") or None,
            )
        )

    logger.info("Loaded %d learner request(s)", len(requests))
    return requests


def load_peers(df: pd.DataFrame, skip_emails: Iterable[str] = SENTINEL_EMAILS) -> List[LearningPeer]:
    df = normalize_dataframe(df)
    skip = {e.lower() for e in skip_emails}
    peers = []

    for _, row in df.iterrows():
        email = _cell(row, "email")
        if _skip_row(email, skip):
            continue

        courses = []
        for i in (1, 2, 3):
            code = _cell(row, f"course_code_{i}")
            if code:
                courses.append(CourseSlot(course_code=code, instructor=_cell(row, f"instructor_{i}")))

        first = _cell(row, "preferred_name") or _cell(row, "first_name")
        name = " ".join(p for p in (first, _cell(row, "last_name")) if p)

        peers.append(
            LearningPeer(
                email=email,
                name=name or _cell(row, "name"),
                groups=_parse_capacity(_cell(row, "groups"), email),
                courses=tuple(courses),
                other_courses=tuple(parse_other_courses(_cell(row, "other_courses"))),
            )
        )

    logger.info("Loaded %d learning peer(s)", len(peers))
    return peers


def load_schedules(df: pd.DataFrame, skip_emails: Iterable[str] = SENTINEL_EMAILS) -> List[ClassSchedule]:
    df = normalize_dataframe(df)
    skip = {e.lower() for e in skip_emails}
    schedules = []

    for idx, row in df.iterrows():
        email = _cell(row, "email")
        if _skip_row(email, skip):
            continue

        days = {}
        for day in DAYS:
            try:
                days[day] = tuple(parse_schedule_field(_cell(row, day)))
            except ValueError as e:
                raise ValueError(f"Schedule row {idx} ({email}), {day}: {e}") from e

        schedules.append(ClassSchedule(email=email, name=_cell(row, "first_name"), days=days))

    logger.info("Loaded %d class schedule(s)", len(schedules))
    return schedules


# -------------------------------------------------------------
# Whole snapshot
# -------------------------------------------------------------

@dataclass
class Snapshot:
    requests: List[LearnerRequest] = field(default_factory=list)
    peers: List[LearningPeer] = field(default_factory=list)
    learner_schedules: List[ClassSchedule] = field(default_factory=list)
    peer_schedules: List[ClassSchedule] = field(default_factory=list)


def load_snapshot(
    requests: Union[str, Path, pd.DataFrame],
    peers: Union[str, Path, pd.DataFrame],
    learner_schedules: Union[str, Path, pd.DataFrame],
    peer_schedules: Union[str, Path, pd.DataFrame],
    skip_emails: Iterable[str] = SENTINEL_EMAILS,
) -> Snapshot:
    """Each argument is either a DataFrame or a path to a CSV / Excel export."""

    def frame(source) -> pd.DataFrame:
        return source if isinstance(source, pd.DataFrame) else read_table(source)

    skip = list(skip_emails)
    return Snapshot(
        requests=load_requests(frame(requests), skip),
        peers=load_peers(frame(peers), skip),
        learner_schedules=load_schedules(frame(learner_schedules), skip),
        peer_schedules=load_schedules(frame(peer_schedules), skip),
    )
