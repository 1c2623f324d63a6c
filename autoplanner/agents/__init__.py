"""
Agent Layer for Autoplanner

Each agent handles one domain and produces mock output for one step of a run.

Architecture Overview:
- IntentParser: Keyword routing from a command to the agents that should run
- BaseAgent: Abstract base class defining the agent interface
- EmailAgent: Inbox triage and reply drafts
- CalendarAgent: Moves low-priority events into deep-work slots
- StudyAgent: 7-day study schedule, flashcards and practice questions
- Orchestrator: Runs a command end to end and records the audit trail
  (import from autoplanner.agents.orchestrator; it depends on the dashboard
  compiler, which itself builds on these agents)

Usage:
    from autoplanner.agents.orchestrator import Orchestrator
    from autoplanner.core import Repository, SessionContext, UserContext, get_database

    orchestrator = Orchestrator(Repository(get_database()))
    session = SessionContext(user_id="me", user_context=UserContext(user_id="me"))
    result = orchestrator.execute("Plan my week", session)
"""

from .base_agent import BaseAgent
from .intent_parser import (
    CALENDAR_AGENT,
    DASHBOARD_AGENT,
    EMAIL_AGENT,
    STUDY_AGENT,
    IntentParams,
    IntentParser,
    ParsedIntent,
)
from .email_agent import EmailAgent, EmailAgentOutput
from .calendar_agent import CalendarAgent, CalendarAgentOutput, CalendarChange
from .study_agent import StudyAgent, StudyAgentOutput

__all__ = [
    'BaseAgent',
    'IntentParser',
    'IntentParams',
    'ParsedIntent',
    'EMAIL_AGENT',
    'CALENDAR_AGENT',
    'STUDY_AGENT',
    'DASHBOARD_AGENT',
    'EmailAgent',
    'EmailAgentOutput',
    'CalendarAgent',
    'CalendarAgentOutput',
    'CalendarChange',
    'StudyAgent',
    'StudyAgentOutput',
]
