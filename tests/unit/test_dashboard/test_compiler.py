"""
Unit tests for the DashboardCompiler.
"""

import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from autoplanner.agents.calendar_agent import CalendarAgent, CalendarAgentOutput
from autoplanner.agents.email_agent import EmailAgent
from autoplanner.agents.mock_data import MockCalendarEvent
from autoplanner.agents.study_agent import StudyAgent
from autoplanner.core.models import AuditLog
from autoplanner.dashboard.compiler import DashboardCompiler


NOW = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)


class FirstSlot:
    def choice(self, seq):
        return seq[0]


@pytest.fixture
def compiler():
    return DashboardCompiler()


@pytest.fixture
def email_output():
    return EmailAgent().execute(None, auto_send=False, now=NOW)


@pytest.fixture
def calendar_output():
    return CalendarAgent(rng=FirstSlot()).execute("primary", False, "week", now=NOW)


@pytest.fixture
def study_output():
    return StudyAgent().execute(None, subject="ml", today=NOW.date())


def audit(agent):
    return AuditLog(id=agent, user_id="u1", agent=agent, action="step")


class TestDefaults:
    """Tests for sections of agents that did not run."""

    def test_nothing_ran(self, compiler):
        snapshot = compiler.execute(None, None, None, [], now=NOW)

        assert snapshot.email_summary == {"top_urgent": [], "drafts_count": 0, "replies_sent": 0}
        assert snapshot.calendar_summary == {"events_today": 0, "proposed_changes": 0}
        assert snapshot.study_summary is None
        assert snapshot.quick_actions == []

    def test_study_summary_omitted_from_dict(self, compiler):
        data = compiler.execute(None, None, None, [], now=NOW).to_dict()

        assert "study_summary" not in data
        assert data["audit_summary"] == {"total_actions": 0, "agents_used": []}


class TestSections:
    """Tests for populated sections."""

    def test_email_section(self, compiler, email_output):
        snapshot = compiler.execute(email_output, None, None, [], now=NOW)

        assert snapshot.email_summary["drafts_count"] == 4
        assert snapshot.email_summary["replies_sent"] == 0
        assert [e["id"] for e in snapshot.email_summary["top_urgent"]] == ["email-1", "email-5"]
        assert snapshot.quick_actions[0].label == "View Draft 1: Re: URGENT: ML Midterm Reschedule to Monday"
        assert {a.type for a in snapshot.quick_actions} == {"email_draft"}

    def test_calendar_section(self, compiler, calendar_output):
        snapshot = compiler.execute(None, calendar_output, None, [], now=NOW)

        assert snapshot.calendar_summary["events_today"] == 4
        assert snapshot.calendar_summary["proposed_changes"] == 3
        assert snapshot.calendar_summary["next_event"]["id"] == "event-1"
        assert [a.label for a in snapshot.quick_actions] == [
            "Review Calendar Change 1", "Review Calendar Change 2", "Review Calendar Change 3",
        ]

    def test_next_event_is_none_when_nothing_upcoming(self, compiler):
        past = MockCalendarEvent("old", "Old", NOW - timedelta(hours=2), NOW - timedelta(hours=1))
        output = CalendarAgentOutput(events_inspected_count=1, events=[past])

        snapshot = compiler.execute(None, output, None, [], now=NOW)

        assert snapshot.calendar_summary["events_today"] == 1
        assert snapshot.calendar_summary["next_event"] is None

    def test_study_section(self, compiler, study_output):
        snapshot = compiler.execute(None, None, study_output, [], now=NOW)

        assert snapshot.study_summary == {
            "subject": "ml",
            "days_planned": 7,
            "flashcards_count": 20,
            "practice_questions_count": 5,
        }
        csv_action, schedule_action = snapshot.quick_actions
        assert csv_action.type == "download_csv"
        assert csv_action.data["csv"].startswith("Question,Answer\n")
        assert schedule_action.label == "View Study Schedule"
        assert len(schedule_action.data) == 7

    def test_quick_action_order(self, compiler, email_output, calendar_output, study_output):
        snapshot = compiler.execute(email_output, calendar_output, study_output, [], now=NOW)

        types = [a.type for a in snapshot.quick_actions]

        assert len(types) == 9
        assert types[:4] == ["email_draft"] * 4
        assert types[4:7] == ["calendar_proposal"] * 3
        assert types[7:] == ["download_csv", "study_schedule"]


class TestAuditSummary:
    """Tests for the audit section."""

    def test_agents_deduplicated_in_order(self, compiler):
        logs = [audit("IntentParser"), audit("EmailAgent"), audit("EmailAgent"), audit("StudyAgent")]

        summary = compiler.execute(None, None, None, logs, now=NOW).audit_summary

        assert summary == {
            "total_actions": 4,
            "agents_used": ["IntentParser", "EmailAgent", "StudyAgent"],
        }
