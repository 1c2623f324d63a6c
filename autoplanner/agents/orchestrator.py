"""
Orchestrator for Autoplanner

The Orchestrator is the coordination layer that:
1. Validates the account the run will act on
2. Records an Execution and parses the command into an intent
3. Runs the required agents one after another (Email, Study, Calendar)
4. Writes one audit entry per step and persists each agent's artifacts
5. Compiles the dashboard snapshot and final summary

Design Pattern: Pipeline
- Single entry point per command
- Each step's audit entry is written before the next step starts
- One failure policy: mark the Execution failed and re-raise
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from autoplanner.core.accounts import AccountStore, AccountValidationError
from autoplanner.core.models import AuditLog, SessionContext, utc_now
from autoplanner.core.repository import Repository
from autoplanner.dashboard.compiler import DashboardCompiler, DashboardSnapshot

from .calendar_agent import CalendarAgent, CalendarAgentOutput
from .email_agent import EmailAgent, EmailAgentOutput
from .intent_parser import (
    CALENDAR_AGENT,
    DASHBOARD_AGENT,
    EMAIL_AGENT,
    STUDY_AGENT,
    IntentParser,
    ParsedIntent,
)
from .study_agent import DEFAULT_SUBJECT, StudyAgent, StudyAgentOutput


INTENT_PARSER = "IntentParser"


@dataclass
class OrchestratorOutput:
    """Result of one successful run"""
    execution_id: str
    execution_plan: str
    audit_log: List[AuditLog] = field(default_factory=list)
    final_summary: str = ""
    dashboard_snapshot: Optional[DashboardSnapshot] = None
    voice_summary_text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "execution_id": self.execution_id,
            "execution_plan": self.execution_plan,
            "audit_log": [log.to_dict() for log in self.audit_log],
            "final_summary": self.final_summary,
            "dashboard_snapshot": self.dashboard_snapshot.to_dict() if self.dashboard_snapshot else None,
            "voice_summary_text": self.voice_summary_text,
        }


class Orchestrator:
    """
    Runs a command end to end.

    The Orchestrator does not inherit from BaseAgent: it owns the agents and
    the persistence side effects rather than producing domain output itself.

    Execution lifecycle: running -> completed | failed. Everything after the
    Execution row exists is covered by one failure handler; child rows and
    audit entries already written are left in place.

    Attributes:
        repository: Persistence for executions, audit entries and artifacts
        account_store: Account validation (None skips validation entirely)
        agents: Email/Calendar/Study agents and the dashboard compiler
    """

    # Plan text lists agents in this order
    PLAN_ORDER = [EMAIL_AGENT, CALENDAR_AGENT, STUDY_AGENT]

    CLOSING_SENTENCE = "Dashboard and audit log available for review."

    def __init__(self, repository: Repository,
                 account_store: Optional[AccountStore] = None,
                 config=None,
                 intent_parser: Optional[IntentParser] = None,
                 email_agent: Optional[EmailAgent] = None,
                 calendar_agent: Optional[CalendarAgent] = None,
                 study_agent: Optional[StudyAgent] = None,
                 dashboard_compiler: Optional[DashboardCompiler] = None):
        self.repository = repository
        self.account_store = account_store
        self.config = config
        self.logger = logging.getLogger("agent.orchestrator")

        self.intent_parser = intent_parser or IntentParser()
        self.email_agent = email_agent or EmailAgent(config)
        self.calendar_agent = calendar_agent or CalendarAgent(config)
        self.study_agent = study_agent or StudyAgent(config)
        self.dashboard_compiler = dashboard_compiler or DashboardCompiler(config)

        self._plan_agents = {
            EMAIL_AGENT: self.email_agent,
            CALENDAR_AGENT: self.calendar_agent,
            STUDY_AGENT: self.study_agent,
        }

    # =========================================================================
    # Public API
    # =========================================================================

    def execute(self, command: str, session: SessionContext,
                options: Optional[Dict[str, Any]] = None,
                now: Optional[datetime] = None) -> OrchestratorOutput:
        """
        Run a command for the session's user.

        Args:
            command: Free-text command
            session: Acting user, their context, selected account and source
            options: Optional run options; "auto_plan_options" is handed to
                the Calendar Agent
            now: Reference time for the agents (defaults to utcnow)

        Returns:
            OrchestratorOutput

        Raises:
            AccountValidationError: The selected account cannot be used; no
                Execution is created
            Exception: Any step failure, re-raised after the Execution is
                marked failed
        """
        options = options or {}
        if now is None:
            now = utc_now()

        account = self._validate_account(session)
        user_id = session.user_id
        ctx = session.user_context

        execution = self.repository.create_execution(
            user_id,
            command,
            status="running",
            oauth_account_id=account.id if account else None,
            account_email=account.email if account else None,
        )
        execution_id = execution.id
        self.logger.info(f"Execution {execution_id} started for user {user_id}")

        audit_log: List[AuditLog] = []

        def audit(agent: str, action: str, input_summary: str, output_summary: str,
                  **extra: Any) -> None:
            audit_log.append(self.repository.insert_audit_log(
                user_id, agent, action, input_summary, output_summary,
                run_id=execution_id,
                oauth_account_id=account.id if account else None,
                user_email=account.email if account else None,
                **extra,
            ))

        try:
            intent = self.intent_parser.parse(command, auto_send=ctx.auto_send)
            audit(
                INTENT_PARSER, "parse_command",
                f'Command: "{command}"',
                f"Intent: {intent.intent}, Agents: {', '.join(intent.required_agents)}",
            )

            execution_plan = self.build_execution_plan(intent)
            self.repository.update_execution(execution_id, execution_plan=execution_plan)

            email_output = None
            study_output = None
            calendar_output = None

            if intent.requires(EMAIL_AGENT):
                email_output = self._run_email(execution_id, ctx, account, now, audit)

            if intent.requires(STUDY_AGENT):
                study_output = self._run_study(execution_id, intent, ctx, now, audit)

            if intent.requires(CALENDAR_AGENT):
                calendar_output = self._run_calendar(
                    execution_id, intent, ctx, options.get("auto_plan_options"), now, audit
                )

            snapshot = self.dashboard_compiler.execute(
                email_output, calendar_output, study_output, list(audit_log), now=now
            )
            audit(
                DASHBOARD_AGENT, "compile_snapshot",
                "Compiling all agent outputs",
                f"Created dashboard with {len(snapshot.quick_actions)} quick actions",
            )

            final_summary = self.generate_final_summary(email_output, calendar_output, study_output)

            self.repository.update_execution(
                execution_id,
                status="completed",
                final_summary=final_summary,
                dashboard_snapshot=snapshot.to_dict(),
                completed_at=utc_now(),
            )
        except Exception as e:
            self.logger.error(f"Execution {execution_id} failed: {e}", exc_info=True)
            try:
                self.repository.update_execution(execution_id, status="failed")
            except Exception as update_error:
                self.logger.error(f"Could not mark execution {execution_id} failed: {update_error}")
            raise e

        self.logger.info(f"Execution {execution_id} completed with {len(audit_log)} audit entries")

        return OrchestratorOutput(
            execution_id=execution_id,
            execution_plan=execution_plan,
            audit_log=audit_log,
            final_summary=final_summary,
            dashboard_snapshot=snapshot,
            voice_summary_text=final_summary if session.source == "speech" else None,
        )

    def build_execution_plan(self, intent: ParsedIntent) -> str:
        """
        Numbered, single-line plan: one step per required agent in
        PLAN_ORDER, always ending with the dashboard step.
        """
        steps = [
            self._plan_agents[name].plan_step(intent)
            for name in self.PLAN_ORDER
            if intent.requires(name)
        ]
        steps.append(self.dashboard_compiler.plan_step(intent))
        return " ".join(f"{i}) {step}" for i, step in enumerate(steps, start=1))

    def generate_final_summary(self, email_output: Optional[EmailAgentOutput],
                               calendar_output: Optional[CalendarAgentOutput],
                               study_output: Optional[StudyAgentOutput]) -> str:
        parts = []
        if email_output is not None:
            parts.append(f"Drafted {len(email_output.drafts)} email replies "
                         "(auto_send=false, review required)")
        if calendar_output is not None:
            parts.append(f"Proposed {len(calendar_output.proposed_changes)} calendar "
                         "optimizations to create focused work blocks")
        if study_output is not None:
            parts.append(f"Created comprehensive study plan with {len(study_output.flashcards)} "
                         f"flashcards and {len(study_output.practice_questions)} practice questions")

        if not parts:
            return self.CLOSING_SENTENCE
        return ". ".join(parts) + ". " + self.CLOSING_SENTENCE

    # =========================================================================
    # Steps
    # =========================================================================

    def _validate_account(self, session: SessionContext):
        """Return the validated account, or None when validation is skipped"""
        if self.account_store is None:
            return None
        if session.user_context.demo_mode and not session.account_id:
            return None

        result = self.account_store.validate_account_context(session.user_id, session.account_id)
        if not result.valid:
            self.logger.warning(f"Account validation failed for user {session.user_id}: {result.message}")
            raise AccountValidationError(result.message, result.account)

        self.account_store.log_account_usage(
            result.account.id, session.user_id, "orchestrator_execute", "orchestrator"
        )
        return result.account

    def _run_email(self, execution_id, ctx, account, now, audit) -> EmailAgentOutput:
        # Orchestrated runs never send; drafts wait for review
        output = self.email_agent.execute(ctx.email_oauth, False, now=now)
        audit(
            EMAIL_AGENT, "triage_and_draft",
            f"Processing inbox with auto_send=false (enforced), run_id={execution_id}",
            f"Drafted {len(output.drafts)} replies (all set to auto_send=false), "
            f"found {len(output.top_urgent)} urgent emails",
            drafts_created=len(output.drafts),
        )
        for draft in output.drafts:
            self.repository.insert_email_draft(
                execution_id,
                to_address=draft.to,
                subject=draft.subject,
                draft_body=draft.full_draft,
                priority_score=5,
                auto_send=False,
                from_account_id=account.id if account else None,
            )
        return output

    def _run_study(self, execution_id, intent, ctx, now, audit) -> StudyAgentOutput:
        subject = intent.params.subject or DEFAULT_SUBJECT
        output = self.study_agent.execute(
            ctx.study_notes_link, subject, ctx.work_hours, today=now.date()
        )
        audit(
            STUDY_AGENT, "create_study_plan",
            f"Creating plan for {subject}",
            f"Generated {len(output.study_schedule)}-day schedule, "
            f"{len(output.flashcards)} flashcards, "
            f"{len(output.practice_questions)} practice questions",
        )
        self.repository.insert_study_plan(
            execution_id,
            subject=subject,
            schedule=[asdict(day) for day in output.study_schedule],
            flashcards_csv=output.flashcards_csv,
            practice_questions=[asdict(q) for q in output.practice_questions],
        )
        return output

    def _run_calendar(self, execution_id, intent, ctx, auto_plan_options, now,
                      audit) -> CalendarAgentOutput:
        timeframe = intent.params.timeframe
        output = self.calendar_agent.execute(
            ctx.calendar_id, ctx.auto_send, timeframe,
            auto_plan_options=auto_plan_options, now=now,
        )
        audit(
            CALENDAR_AGENT, "analyze_and_propose",
            f"Analyzing {timeframe} calendar",
            f"Inspected {output.events_inspected_count} events, "
            f"proposed {len(output.proposed_changes)} changes",
            events_changed=output.changed_events_count,
        )
        for change in output.proposed_changes:
            self.repository.insert_calendar_proposal(
                execution_id,
                event_id=change.event_id,
                old_slot=change.old_slot,
                new_slot=change.new_slot,
                reason=change.reason,
                applied=ctx.auto_send,
            )
        return output
