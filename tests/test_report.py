"""Tests for run reporting and export."""

from datetime import date

import pytest

from export import create_ics_file, groups_to_csv
from models import (
    MISSING_SCHEDULE,
    SCHEDULE_CONFLICT,
    GroupMember,
    MatchingResult,
    MeetingSlot,
    ProposedGroup,
    UnmatchedParticipant,
)
from report import (
    failure_counts,
    format_clock,
    format_groups_as_table,
    format_meeting_time,
    groups_frame,
    peers_without_groups,
    summarize_run,
    unmatched_frame,
)


def _group(peer_email, day="monday", start="14:00", end="15:00", learners=("a@x",)):
    return ProposedGroup(
        course_code="MATH 1505",
        instructor="smith",
        peer_id=peer_email,
        peer_name=peer_email.split("@")[0].title(),
        peer_email=peer_email,
        learners=[GroupMember(id=e, name=e.split("@")[0].title(), email=e) for e in learners],
        time_slot=MeetingSlot(day, start, end),
    )


@pytest.fixture
def result():
    return MatchingResult(
        groups=[
            _group("p@x", learners=("a@x", "b@x")),
            _group("q@x", day="tuesday", start="09:00", end="10:00", learners=("c@x",)),
            _group("p@x", day="wednesday", learners=("d@x",)),
        ],
        unmatched=[
            UnmatchedParticipant("e@x", "E", "e@x", "MATH 1505", MISSING_SCHEDULE, "No class schedule on file for e@x"),
            UnmatchedParticipant("f@x", "F", "f@x", "MATH 1505", SCHEDULE_CONFLICT, "No common free slot"),
            UnmatchedParticipant("g@x", "G", "g@x", "COMP 1501", SCHEDULE_CONFLICT, "No common free slot"),
        ],
        total_learners=8,
        excluded_learners=1,
        total_peers=3,
    )


class TestDisplay:
    @pytest.mark.parametrize(
        "text, expected",
        [("00:15", "12:15 AM"), ("09:05", "9:05 AM"), ("12:00", "12:00 PM"), ("14:30", "2:30 PM")],
    )
    def test_format_clock(self, text, expected):
        assert format_clock(text) == expected

    def test_format_meeting_time(self):
        assert format_meeting_time(MeetingSlot("monday", "14:00", "15:00")) == "Monday 2:00 PM - 3:00 PM"


class TestTables:
    def test_peer_group_sequence(self, result):
        df = groups_frame(result.groups)
        assert list(df["peer_group"]) == [1, 1, 2]
        assert list(df["size"]) == [2, 1, 1]
        assert df.loc[0, "learners"] == "A, B"

    def test_empty_frames_have_columns(self):
        assert "peer_group" in groups_frame([]).columns
        assert "constraint_failure" in unmatched_frame([]).columns

    def test_markdown_table_sorted_by_day(self, result):
        table = format_groups_as_table(result.groups)
        lines = table.splitlines()
        assert "peer_group" in lines[0]
        assert lines[2].lstrip("| ").startswith("monday")
        assert lines[4].lstrip("| ").startswith("wednesday")

    def test_no_groups_message(self):
        assert format_groups_as_table([]) == "No groups proposed."


class TestSummaries:
    def test_failure_counts_cover_taxonomy(self, result):
        assert failure_counts(result.unmatched) == {
            "Missing schedule": 1,
            "No eligible peers": 0,
            "Peer capacity exhausted": 0,
            "Schedule conflict": 2,
        }

    def test_peers_without_groups(self, result, make_peer):
        peers = [make_peer("p@x"), make_peer("Q@x"), make_peer("idle@x")]
        assert [p.email for p in peers_without_groups(peers, result.groups)] == ["idle@x"]

    def test_summarize_run(self, result):
        text = summarize_run(result)
        assert "Learners: 8 (1 excluded)" in text
        assert "Proposed groups: 3" in text
        assert "Matched learners: 4" in text
        assert "Schedule conflict: 2" in text
        assert "No eligible peers" not in text


class TestExport:
    def test_ics_uses_week_of_given_date(self, result):
        ics_text = create_ics_file(result.groups, week_start=date(2026, 10, 21))
        assert ics_text.count("BEGIN:VEVENT") == 3
        assert "20261019T140000" in ics_text
        assert "20261020T090000" in ics_text
        assert "MATH 1505 study group" in ics_text

    def test_ics_empty(self):
        assert "BEGIN:VCALENDAR" in create_ics_file([])

    def test_csv(self, result):
        lines = groups_to_csv(result.groups).splitlines()
        assert lines[0].startswith("day,start,end,course")
        assert len(lines) == 4
