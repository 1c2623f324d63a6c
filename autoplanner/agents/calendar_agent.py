"""
Calendar Agent for Autoplanner
Inspects upcoming events and proposes moving low-priority ones into deep-work
slots.

No calendar is modified: proposals are returned (and persisted by the
orchestrator) for the user to apply.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import random

from .base_agent import BaseAgent
from .intent_parser import CALENDAR_AGENT
from .mock_data import MockCalendarEvent, generate_mock_calendar_events


@dataclass
class CalendarChange:
    event_id: str
    old_slot: str
    new_slot: str
    reason: str
    new_start: str = ""
    new_end: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "old_slot": self.old_slot,
            "new_slot": self.new_slot,
            "reason": self.reason,
            "new_start": self.new_start,
            "new_end": self.new_end,
        }


@dataclass
class CalendarAgentOutput:
    events_inspected_count: int
    proposed_changes: List[CalendarChange] = field(default_factory=list)
    changed_events_count: int = 0
    events: List[MockCalendarEvent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events_inspected_count": self.events_inspected_count,
            "proposed_changes": [c.to_dict() for c in self.proposed_changes],
            "changed_events_count": self.changed_events_count,
            "events": [e.to_dict() for e in self.events],
        }


class CalendarAgent(BaseAgent):
    """
    Calendar rebalancing agent.

    Events starting in [now, now + timeframe) are inspected. Every low-priority
    event gets a proposal to move it to a randomly chosen deep-work slot on the
    same day, keeping its duration.

    The random source and the event source are injectable so tests can pin
    the chosen slot and control the event set.
    """

    AGENT_NAME = CALENDAR_AGENT

    TIMEFRAME_DAYS = {
        "today": 1,
        "week": 7,
        "month": 30,
    }
    FALLBACK_DAYS = 30

    DEFAULT_DEEP_WORK_SLOTS = ["09:00", "14:00", "16:30"]

    REASON = ("Low priority event rescheduled to create focused deep-work block. "
              "Original slot can be used for high-value tasks.")

    def __init__(self, config=None, rng: Optional[random.Random] = None,
                 event_source: Optional[Callable[[datetime], List[MockCalendarEvent]]] = None):
        """
        Initialize the Calendar Agent.

        Args:
            config: Config instance (deep_work_slots preference is honoured)
            rng: Random source used to pick slots (defaults to an unseeded Random)
            event_source: Callable returning events for a reference time
                (defaults to the bundled demo calendar)
        """
        super().__init__(config, "calendar")
        self.rng = rng or random.Random()
        self.event_source = event_source or generate_mock_calendar_events

    def plan_step(self, intent) -> str:
        return (f"{self.AGENT_NAME}: Analyze calendar for {intent.params.timeframe}, "
                "propose rescheduling low-priority events into deep-work blocks.")

    def execute(self, calendar_id: str, auto_apply: bool, timeframe: str,
                auto_plan_options: Optional[Dict[str, Any]] = None,
                now: Optional[datetime] = None) -> CalendarAgentOutput:
        """
        Inspect the calendar window and propose changes.

        Args:
            calendar_id: Calendar to inspect; the demo calendar ignores it
            auto_apply: When True the proposals count as applied
            timeframe: 'today', 'week' or 'month'
            auto_plan_options: Optional overrides; "deep_work_slots" replaces the
                candidate slot list
            now: Window start (defaults to utcnow)

        Returns:
            CalendarAgentOutput
        """
        if now is None:
            now = datetime.now(timezone.utc)

        window_start, window_end = self.get_window(timeframe, now)
        events = [
            e for e in self.event_source(now)
            if window_start <= e.start < window_end
        ]
        slots = self._candidate_slots(auto_plan_options)

        proposals = [
            self._propose_move(event, slots)
            for event in events
            if event.priority == "low"
        ]

        self.log_action("analyze_and_propose", {
            "calendar_id": calendar_id,
            "timeframe": timeframe,
            "inspected": len(events),
            "proposed": len(proposals),
        })

        return CalendarAgentOutput(
            events_inspected_count=len(events),
            proposed_changes=proposals,
            changed_events_count=len(proposals) if auto_apply else 0,
            events=events,
        )

    def get_window(self, timeframe: str, now: datetime) -> Tuple[datetime, datetime]:
        """Return the half-open [start, end) window for a timeframe"""
        days = self.TIMEFRAME_DAYS.get(timeframe, self.FALLBACK_DAYS)
        return now, now + timedelta(days=days)

    def _candidate_slots(self, auto_plan_options: Optional[Dict[str, Any]]) -> List[Tuple[int, int]]:
        configured = None
        if auto_plan_options:
            configured = auto_plan_options.get("deep_work_slots")
        if not configured:
            configured = self.get_config_value("deep_work_slots", default=self.DEFAULT_DEEP_WORK_SLOTS)

        slots = [self._parse_slot(s) for s in configured]
        slots = [s for s in slots if s is not None]
        if not slots:
            slots = [self._parse_slot(s) for s in self.DEFAULT_DEEP_WORK_SLOTS]
        return slots

    @staticmethod
    def _parse_slot(value: str) -> Optional[Tuple[int, int]]:
        try:
            hour, minute = (int(part) for part in str(value).split(":", 1))
        except ValueError:
            return None
        if 0 <= hour < 24 and 0 <= minute < 60:
            return hour, minute
        return None

    def _propose_move(self, event: MockCalendarEvent,
                      slots: Sequence[Tuple[int, int]]) -> CalendarChange:
        hour, minute = self.rng.choice(list(slots))
        new_start = event.start.replace(hour=hour, minute=minute, second=0, microsecond=0)
        new_end = new_start + (event.end - event.start)

        return CalendarChange(
            event_id=event.id,
            old_slot=self.format_time_slot(event.start, event.end),
            new_slot=self.format_time_slot(new_start, new_end),
            reason=self.REASON,
            new_start=new_start.isoformat(),
            new_end=new_end.isoformat(),
        )

    @staticmethod
    def format_time_slot(start: datetime, end: datetime) -> str:
        """Format as 'Mon, Oct 19, 09:00 AM - 10:00 AM'"""
        return f"{start.strftime('%a, %b %d, %I:%M %p')} - {end.strftime('%I:%M %p')}"
