"""
Unit tests for the IntentParser.
Tests keyword routing, intent labels, timeframe/priority/subject extraction
and the never-fails contract.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from autoplanner.agents.intent_parser import (
    CALENDAR_AGENT,
    DASHBOARD_AGENT,
    EMAIL_AGENT,
    STUDY_AGENT,
    IntentParser,
)


@pytest.fixture
def parser():
    return IntentParser()


class TestAgentRouting:
    """Tests for required_agents."""

    def test_triage_inbox(self, parser):
        intent = parser.parse("Triage my inbox")

        assert intent.required_agents == (EMAIL_AGENT, DASHBOARD_AGENT)
        assert intent.intent == "email_management"

    @pytest.mark.parametrize("command", [
        "Check my EMAIL", "Reply to Sarah", "What's in my Inbox?",
    ])
    def test_email_keywords_case_insensitive(self, parser, command):
        assert parser.parse(command).requires(EMAIL_AGENT)

    @pytest.mark.parametrize("command", [
        "Show my calendar", "Schedule focus time", "Move the MEETING", "reschedule lunch",
    ])
    def test_calendar_keywords(self, parser, command):
        assert parser.parse(command).requires(CALENDAR_AGENT)

    @pytest.mark.parametrize("command", [
        "Help me study", "Prep for the exam", "ML Midterm next week", "make flashcards",
    ])
    def test_study_keywords(self, parser, command):
        assert parser.parse(command).requires(STUDY_AGENT)

    def test_plan_my_week_runs_everything(self, parser):
        intent = parser.parse("Plan my week")

        assert intent.intent == "plan_week"
        assert intent.required_agents == (EMAIL_AGENT, CALENDAR_AGENT, STUDY_AGENT, DASHBOARD_AGENT)

    def test_all_keyword_sets_give_plan_week(self, parser):
        intent = parser.parse("Reply to email, fix my calendar and study for the exam")

        assert intent.intent == "plan_week"
        assert intent.required_agents[-1] == DASHBOARD_AGENT

    def test_two_agents_uses_precedence(self, parser):
        """Email outranks calendar when both are present."""
        intent = parser.parse("reply to email and reschedule meetings")

        assert intent.intent == "email_management"
        assert intent.required_agents == (EMAIL_AGENT, CALENDAR_AGENT, DASHBOARD_AGENT)

    def test_unmatched_command_is_general_assist(self, parser):
        intent = parser.parse("What is the meaning of life?")

        assert intent.intent == "general_assist"
        assert intent.required_agents == (DASHBOARD_AGENT,)

    @pytest.mark.parametrize("command", ["", "   ", None])
    def test_never_raises_on_empty_input(self, parser, command):
        intent = parser.parse(command)

        assert intent.intent == "general_assist"
        assert intent.params.timeframe == "week"


class TestParams:
    """Tests for extracted parameters."""

    @pytest.mark.parametrize("command,expected", [
        ("Triage my inbox", "week"),
        ("clean up my calendar today", "today"),
        ("what's on this week", "week"),
        ("plan the month", "month"),
        ("today and this week", "today"),
    ])
    def test_timeframe(self, parser, command, expected):
        assert parser.parse(command).params.timeframe == expected

    @pytest.mark.parametrize("command,expected", [
        ("urgent emails only", "urgent"),
        ("move low priority meetings", "low"),
        ("move low-priority meetings", "low"),
        ("check email", "normal"),
    ])
    def test_priority(self, parser, command, expected):
        assert parser.parse(command).params.priority == expected

    def test_subject_before_midterm(self, parser):
        intent = parser.parse("Create a study plan for my ML midterm")

        assert intent.params.subject == "ml"
        assert intent.intent == "create_study_plan"

    def test_subject_to_end_of_command(self, parser):
        assert parser.parse("study plan about linear algebra").params.subject == "linear algebra"

    def test_no_subject(self, parser):
        assert parser.parse("Help me study").params.subject is None

    def test_auto_send_is_passed_through(self, parser):
        assert parser.parse("Triage my inbox", auto_send=True).params.auto_send is True
        assert parser.parse("Triage my inbox").params.auto_send is False

    def test_to_dict(self, parser):
        data = parser.parse("Triage my inbox").to_dict()

        assert data["required_agents"] == [EMAIL_AGENT, DASHBOARD_AGENT]
        assert data["params"]["timeframe"] == "week"
