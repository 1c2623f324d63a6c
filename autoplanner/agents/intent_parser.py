"""
Intent Parser for Autoplanner

Maps a free-text command to the set of agents that should run, plus the
parameters they need (timeframe, priority, subject, auto-send).

Matching is keyword based: each agent owns a list of lowercase substrings and
every agent with at least one hit is included. The parser never fails; any
command yields a usable intent with defaults filled in.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
import re


EMAIL_AGENT = "EmailAgent"
CALENDAR_AGENT = "CalendarAgent"
STUDY_AGENT = "StudyAgent"
DASHBOARD_AGENT = "DashboardAgent"


@dataclass(frozen=True)
class IntentParams:
    """Parameters extracted from the command"""
    timeframe: str = "week"   # 'today', 'week', 'month'
    priority: str = "normal"  # 'urgent', 'normal', 'low'
    subject: Optional[str] = None
    auto_send: bool = False


@dataclass(frozen=True)
class ParsedIntent:
    """
    Structured form of a user command.

    Attributes:
        intent: Derived label (plan_week, email_management, calendar_management,
            create_study_plan, general_assist)
        required_agents: Agents to run, in detection order, always ending
            with DashboardAgent
        params: Extracted parameters
    """
    intent: str
    required_agents: Tuple[str, ...]
    params: IntentParams = field(default_factory=IntentParams)

    def requires(self, agent_name: str) -> bool:
        return agent_name in self.required_agents

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent,
            "required_agents": list(self.required_agents),
            "params": {
                "timeframe": self.params.timeframe,
                "priority": self.params.priority,
                "subject": self.params.subject,
                "auto_send": self.params.auto_send,
            },
        }


class IntentParser:
    """
    Keyword-driven command parser.

    Keyword sets are disjoint, so a command can enable several agents at once
    ("reply to email and reschedule meetings" runs both Email and Calendar).
    """

    # Agent -> substrings that enable it
    AGENT_KEYWORDS = {
        EMAIL_AGENT: ["email", "reply", "inbox"],
        CALENDAR_AGENT: ["calendar", "schedule", "meeting", "reschedule"],
        STUDY_AGENT: ["study", "exam", "midterm", "flashcard"],
    }

    # Phrases that ask for the whole pipeline
    FULL_PLAN_PHRASES = ["plan my week", "plan my day"]

    # Checked in order; first hit wins
    TIMEFRAME_KEYWORDS = [("today", "today"), ("week", "week"), ("month", "month")]
    DEFAULT_TIMEFRAME = "week"

    LOW_PRIORITY_PHRASES = ["low priority", "low-priority"]

    SUBJECT_PATTERN = re.compile(
        r"(?:for|about|regarding)\s+(?:my\s+)?([a-z\s]+?)(?:\s+starting|\s+exam|\s+midterm|$)",
        re.IGNORECASE,
    )

    # Intent label precedence after the all-agents check
    INTENT_BY_AGENT = [
        (EMAIL_AGENT, "email_management"),
        (CALENDAR_AGENT, "calendar_management"),
        (STUDY_AGENT, "create_study_plan"),
    ]

    def parse(self, command: str, auto_send: bool = False) -> ParsedIntent:
        """
        Parse a command into a ParsedIntent.

        Args:
            command: Raw user command
            auto_send: Whether the user allows drafts to be sent automatically

        Returns:
            ParsedIntent; never raises
        """
        text = (command or "").lower()

        required = [
            agent for agent, keywords in self.AGENT_KEYWORDS.items()
            if any(keyword in text for keyword in keywords)
        ]
        if any(phrase in text for phrase in self.FULL_PLAN_PHRASES):
            required = list(self.AGENT_KEYWORDS.keys())

        params = IntentParams(
            timeframe=self._extract_timeframe(text),
            priority=self._extract_priority(text),
            subject=self._extract_subject(text),
            auto_send=auto_send,
        )

        intent = self._derive_intent(required)
        required.append(DASHBOARD_AGENT)

        return ParsedIntent(intent=intent, required_agents=tuple(required), params=params)

    def _extract_timeframe(self, text: str) -> str:
        for keyword, timeframe in self.TIMEFRAME_KEYWORDS:
            if keyword in text:
                return timeframe
        return self.DEFAULT_TIMEFRAME

    def _extract_priority(self, text: str) -> str:
        if "urgent" in text:
            return "urgent"
        if any(phrase in text for phrase in self.LOW_PRIORITY_PHRASES):
            return "low"
        return "normal"

    def _extract_subject(self, text: str) -> Optional[str]:
        match = self.SUBJECT_PATTERN.search(text)
        if match:
            subject = match.group(1).strip()
            return subject or None
        return None

    def _derive_intent(self, required) -> str:
        if all(agent in required for agent in self.AGENT_KEYWORDS):
            return "plan_week"
        for agent, label in self.INTENT_BY_AGENT:
            if agent in required:
                return label
        return "general_assist"
