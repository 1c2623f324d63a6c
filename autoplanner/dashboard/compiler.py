"""
Dashboard compiler for Autoplanner.

Folds the outputs of the agents that ran, plus the run's audit entries, into a
single DashboardSnapshot with summaries and quick actions.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from autoplanner.agents.base_agent import BaseAgent
from autoplanner.agents.calendar_agent import CalendarAgentOutput
from autoplanner.agents.email_agent import EmailAgentOutput
from autoplanner.agents.intent_parser import DASHBOARD_AGENT
from autoplanner.agents.study_agent import StudyAgentOutput
from autoplanner.core.models import AuditLog


@dataclass
class QuickAction:
    """One-click follow-up shown on the dashboard"""
    label: str
    type: str  # 'email_draft', 'calendar_proposal', 'download_csv', 'study_schedule'
    data: Any = None


@dataclass
class DashboardSnapshot:
    """Compiled view of one execution"""
    email_summary: Dict[str, Any] = field(default_factory=lambda: {
        "top_urgent": [],
        "drafts_count": 0,
        "replies_sent": 0,
    })
    calendar_summary: Dict[str, Any] = field(default_factory=lambda: {
        "events_today": 0,
        "proposed_changes": 0,
    })
    study_summary: Optional[Dict[str, Any]] = None
    quick_actions: List[QuickAction] = field(default_factory=list)
    audit_summary: Dict[str, Any] = field(default_factory=lambda: {
        "total_actions": 0,
        "agents_used": [],
    })

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.study_summary is None:
            del data["study_summary"]
        return data


class DashboardCompiler(BaseAgent):
    """
    Builds the DashboardSnapshot for a run.

    Sections for agents that did not run keep their zeroed defaults; the
    study section is omitted entirely. The audit summary always reflects every
    entry passed in.
    """

    AGENT_NAME = DASHBOARD_AGENT

    TOP_URGENT_LIMIT = 5

    def __init__(self, config=None):
        super().__init__(config, "dashboard")

    def plan_step(self, intent) -> str:
        return f"{self.AGENT_NAME}: Compile all outputs into dashboard snapshot with quick actions."

    def execute(self, email_output: Optional[EmailAgentOutput],
                calendar_output: Optional[CalendarAgentOutput],
                study_output: Optional[StudyAgentOutput],
                audit_logs: List[AuditLog],
                now: Optional[datetime] = None) -> DashboardSnapshot:
        """
        Compile the snapshot.

        Args:
            email_output: Email agent output, or None if it did not run
            calendar_output: Calendar agent output, or None
            study_output: Study agent output, or None
            audit_logs: Audit entries recorded for the run so far
            now: Reference time for "today" and "next event" (defaults to utcnow)

        Returns:
            DashboardSnapshot
        """
        if now is None:
            now = datetime.now(timezone.utc)

        snapshot = DashboardSnapshot(
            audit_summary=self._audit_summary(audit_logs),
        )

        if email_output is not None:
            self._add_email(snapshot, email_output)
        if calendar_output is not None:
            self._add_calendar(snapshot, calendar_output, now)
        if study_output is not None:
            self._add_study(snapshot, study_output)

        self.log_action("compile_snapshot", {
            "quick_actions": len(snapshot.quick_actions),
            "audit_entries": len(audit_logs),
        })
        return snapshot

    @staticmethod
    def _audit_summary(audit_logs: List[AuditLog]) -> Dict[str, Any]:
        agents_used = []
        for log in audit_logs:
            if log.agent not in agents_used:
                agents_used.append(log.agent)
        return {
            "total_actions": len(audit_logs),
            "agents_used": agents_used,
        }

    def _add_email(self, snapshot: DashboardSnapshot, output: EmailAgentOutput) -> None:
        snapshot.email_summary = {
            "top_urgent": [asdict(s) for s in output.top_urgent[:self.TOP_URGENT_LIMIT]],
            "drafts_count": len(output.drafts),
            "replies_sent": output.replies_sent_count,
        }
        for i, draft in enumerate(output.drafts, start=1):
            snapshot.quick_actions.append(QuickAction(
                label=f"View Draft {i}: {draft.subject}",
                type="email_draft",
                data=asdict(draft),
            ))

    @staticmethod
    def _add_calendar(snapshot: DashboardSnapshot, output: CalendarAgentOutput,
                      now: datetime) -> None:
        today = now.date()
        events_today = [e for e in output.events if e.start.date() == today]
        upcoming = sorted(
            (e for e in output.events if e.start > now),
            key=lambda e: e.start,
        )

        snapshot.calendar_summary = {
            "events_today": len(events_today),
            "proposed_changes": len(output.proposed_changes),
            "next_event": upcoming[0].to_dict() if upcoming else None,
        }
        for i, change in enumerate(output.proposed_changes, start=1):
            snapshot.quick_actions.append(QuickAction(
                label=f"Review Calendar Change {i}",
                type="calendar_proposal",
                data=change.to_dict(),
            ))

    @staticmethod
    def _add_study(snapshot: DashboardSnapshot, output: StudyAgentOutput) -> None:
        snapshot.study_summary = {
            "subject": output.subject,
            "days_planned": len(output.study_schedule),
            "flashcards_count": len(output.flashcards),
            "practice_questions_count": len(output.practice_questions),
        }
        snapshot.quick_actions.append(QuickAction(
            label="Download Flashcards CSV",
            type="download_csv",
            data={"csv": output.flashcards_csv},
        ))
        snapshot.quick_actions.append(QuickAction(
            label="View Study Schedule",
            type="study_schedule",
            data=[asdict(day) for day in output.study_schedule],
        ))
