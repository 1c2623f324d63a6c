"""
Unit tests for the CalendarAgent.
Tests window filtering, proposal generation and slot selection.
"""

import pytest
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from autoplanner.agents.calendar_agent import CalendarAgent
from autoplanner.agents.mock_data import MockCalendarEvent


# Wednesday morning
NOW = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)


class FirstSlot:
    """Random stand-in that always picks the first candidate."""

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def agent():
    return CalendarAgent(rng=FirstSlot())


@pytest.fixture
def mock_config():
    config = MagicMock()
    config.get.side_effect = lambda key, section="preferences", default=None: {
        "deep_work_slots": ["07:15"],
    }.get(key, default)
    return config


def make_event(event_id, start, hours=1, priority="low"):
    return MockCalendarEvent(event_id, event_id, start, start + timedelta(hours=hours), None, priority)


# =============================================================================
# Window filtering
# =============================================================================

class TestWindow:
    """Tests for the [now, now + timeframe) window."""

    def test_today_with_demo_calendar(self, agent):
        output = agent.execute("primary", auto_apply=False, timeframe="today", now=NOW)

        assert output.events_inspected_count == 4
        assert [c.event_id for c in output.proposed_changes] == ["event-2", "event-4"]

    def test_week_with_demo_calendar(self, agent):
        output = agent.execute("primary", auto_apply=False, timeframe="week", now=NOW)

        assert output.events_inspected_count == 6
        assert len(output.proposed_changes) == 3

    def test_today_boundary(self):
        events = [
            make_event("inside", NOW + timedelta(days=1) - timedelta(seconds=1)),
            make_event("outside", NOW + timedelta(days=1) + timedelta(seconds=1)),
            make_event("at-end", NOW + timedelta(days=1)),
            make_event("past", NOW - timedelta(minutes=1)),
        ]
        agent = CalendarAgent(rng=FirstSlot(), event_source=lambda now: events)

        output = agent.execute("primary", auto_apply=False, timeframe="today", now=NOW)

        assert [e.id for e in output.events] == ["inside"]

    def test_unknown_timeframe_uses_thirty_days(self, agent):
        start, end = agent.get_window("fortnight", NOW)

        assert start == NOW
        assert end - start == timedelta(days=30)

    @pytest.mark.parametrize("timeframe,days", [("today", 1), ("week", 7), ("month", 30)])
    def test_known_timeframes(self, agent, timeframe, days):
        start, end = agent.get_window(timeframe, NOW)
        assert end - start == timedelta(days=days)


# =============================================================================
# Proposals
# =============================================================================

class TestProposals:
    """Tests for proposed changes."""

    def test_only_low_priority_events_move(self):
        events = [
            make_event("high", NOW + timedelta(hours=2), priority="high"),
            make_event("medium", NOW + timedelta(hours=3), priority="medium"),
            make_event("low", NOW + timedelta(hours=4), priority="low"),
        ]
        agent = CalendarAgent(rng=FirstSlot(), event_source=lambda now: events)

        output = agent.execute("primary", auto_apply=False, timeframe="today", now=NOW)

        assert output.events_inspected_count == 3
        assert [c.event_id for c in output.proposed_changes] == ["low"]

    def test_move_keeps_day_and_duration(self, agent):
        change = agent.execute("primary", auto_apply=False, timeframe="today", now=NOW).proposed_changes[0]

        new_start = datetime.fromisoformat(change.new_start)
        new_end = datetime.fromisoformat(change.new_end)

        assert new_start.date() == NOW.date()
        assert (new_start.hour, new_start.minute) == (9, 0)
        assert new_end - new_start == timedelta(hours=1)

    def test_slot_strings(self, agent):
        change = agent.execute("primary", auto_apply=False, timeframe="today", now=NOW).proposed_changes[0]

        assert change.old_slot == "Wed, Jan 08, 11:00 AM - 12:00 PM"
        assert change.new_slot == "Wed, Jan 08, 09:00 AM - 10:00 AM"
        assert change.reason.startswith("Low priority event rescheduled")

    def test_seeded_random_picks_a_deep_work_slot(self):
        agent = CalendarAgent(rng=random.Random(7))

        output = agent.execute("primary", auto_apply=False, timeframe="week", now=NOW)

        for change in output.proposed_changes:
            assert change.new_slot.split(", ")[2][:8] in {"09:00 AM", "02:00 PM", "04:30 PM"}

    def test_changed_count_follows_auto_apply(self, agent):
        assert agent.execute("primary", False, "today", now=NOW).changed_events_count == 0
        assert agent.execute("primary", True, "today", now=NOW).changed_events_count == 2


# =============================================================================
# Slot sources
# =============================================================================

class TestSlotSources:
    """Tests for where candidate slots come from."""

    def test_auto_plan_options_override(self, mock_config):
        agent = CalendarAgent(config=mock_config, rng=FirstSlot())

        output = agent.execute("primary", False, "today",
                               auto_plan_options={"deep_work_slots": ["13:45"]}, now=NOW)

        assert "01:45 PM" in output.proposed_changes[0].new_slot

    def test_config_preference(self, mock_config):
        agent = CalendarAgent(config=mock_config, rng=FirstSlot())

        output = agent.execute("primary", False, "today", now=NOW)

        assert "07:15 AM" in output.proposed_changes[0].new_slot

    def test_invalid_slots_fall_back_to_defaults(self, agent):
        output = agent.execute("primary", False, "today",
                               auto_plan_options={"deep_work_slots": ["25:00", "noon"]}, now=NOW)

        assert "09:00 AM - 10:00 AM" in output.proposed_changes[0].new_slot


class TestSerialization:
    """Tests for to_dict()."""

    def test_to_dict(self, agent):
        data = agent.execute("primary", False, "today", now=NOW).to_dict()

        assert data["events_inspected_count"] == 4
        assert data["proposed_changes"][0]["event_id"] == "event-2"
        assert data["events"][0]["start"] == "2025-01-08T10:00:00+00:00"
