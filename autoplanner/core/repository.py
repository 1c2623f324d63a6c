"""
Persistence operations for Autoplanner.

Wraps a Database backend with the single-row CRUD and ordered range queries
the orchestration core relies on. Every method is one round-trip; there is no
cross-call transaction.
"""

import json
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from .models import (
    AuditLog,
    CalendarProposal,
    EmailDraft,
    Execution,
    StudyPlan,
    UserContext,
    WeeklySnapshot,
    to_iso,
    utc_now,
)

# Columns holding JSON payloads; encoded on write
JSON_COLUMNS = {
    "dashboard_snapshot", "schedule", "practice_questions", "weekly_plan",
    "email_summary", "study_plan", "metrics", "timeline",
}

EXECUTION_UPDATABLE = {
    "status", "execution_plan", "final_summary", "dashboard_snapshot", "completed_at",
}


def new_id() -> str:
    return str(uuid.uuid4())


def _encode(column: str, value: Any) -> Any:
    if column in JSON_COLUMNS and value is not None and not isinstance(value, str):
        return json.dumps(value, default=str)
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, bool):
        return int(value)
    return value


class Repository:
    """Table-level access used by the orchestrator, weekly compiler and API"""

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger("autoplanner.repository")

    def _insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        columns = list(row.keys())
        placeholders = ", ".join("?" for _ in columns)
        query = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        self.db.execute_write(query, tuple(_encode(c, row[c]) for c in columns))
        return row

    def _update(self, table: str, row_id: str, fields: Dict[str, Any]) -> int:
        assignments = ", ".join(f"{column} = ?" for column in fields)
        params = tuple(_encode(c, v) for c, v in fields.items()) + (row_id,)
        return self.db.execute_write(
            f"UPDATE {table} SET {assignments} WHERE id = ?", params
        )

    # =========================================================================
    # User context
    # =========================================================================

    def get_user_context(self, user_id: str) -> Optional[UserContext]:
        row = self.db.execute_one(
            "SELECT * FROM user_contexts WHERE user_id = ?", (user_id,)
        )
        return UserContext.from_dict(row) if row else None

    def save_user_context(self, context: UserContext) -> UserContext:
        """Insert or update the context row for context.user_id"""
        now = utc_now()
        existing = self.get_user_context(context.user_id)
        fields = {
            "email_oauth": context.email_oauth,
            "calendar_id": context.calendar_id,
            "study_notes_link": context.study_notes_link,
            "auto_send": context.auto_send,
            "demo_mode": context.demo_mode,
            "work_hours": context.work_hours,
            "timezone": context.timezone,
            "default_oauth_account_id": context.default_oauth_account_id,
            "updated_at": now,
        }
        if existing:
            self._update("user_contexts", existing.id, fields)
        else:
            self._insert("user_contexts", {
                "id": new_id(),
                "user_id": context.user_id,
                "created_at": now,
                **fields,
            })
        return self.get_user_context(context.user_id)

    # =========================================================================
    # Executions
    # =========================================================================

    def create_execution(self, user_id: str, user_command: str,
                         status: str = "running",
                         oauth_account_id: Optional[str] = None,
                         account_email: Optional[str] = None) -> Execution:
        row = self._insert("executions", {
            "id": new_id(),
            "user_id": user_id,
            "user_command": user_command,
            "status": status,
            "oauth_account_id": oauth_account_id,
            "account_email": account_email,
            "created_at": utc_now(),
        })
        self.logger.debug("Created execution %s for user %s", row["id"], user_id)
        return self.get_execution(row["id"])

    def update_execution(self, execution_id: str, **fields: Any) -> None:
        unknown = set(fields) - EXECUTION_UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update execution columns: {', '.join(sorted(unknown))}")
        self._update("executions", execution_id, fields)

    def get_execution(self, execution_id: str) -> Optional[Execution]:
        row = self.db.execute_one("SELECT * FROM executions WHERE id = ?", (execution_id,))
        return Execution.from_dict(row) if row else None

    def list_executions(self, user_id: str, limit: int = 50) -> List[Execution]:
        rows = self.db.execute(
            """
            SELECT * FROM executions
            WHERE user_id = ?
            ORDER BY created_at DESC
            LIMIT ?
            """,
            (user_id, limit),
        )
        return [Execution.from_dict(r) for r in rows]

    def list_executions_between(self, user_id: str, start: datetime,
                                end: datetime) -> List[Execution]:
        """Executions created in [start, end], newest first"""
        rows = self.db.execute(
            """
            SELECT * FROM executions
            WHERE user_id = ? AND created_at >= ? AND created_at <= ?
            ORDER BY created_at DESC
            """,
            (user_id, to_iso(start), to_iso(end)),
        )
        return [Execution.from_dict(r) for r in rows]

    def get_latest_completed_execution(self, user_id: str) -> Optional[Execution]:
        row = self.db.execute_one(
            """
            SELECT * FROM executions
            WHERE user_id = ? AND status = 'completed'
            ORDER BY created_at DESC
            LIMIT 1
            """,
            (user_id,),
        )
        return Execution.from_dict(row) if row else None

    # =========================================================================
    # Audit log
    # =========================================================================

    def insert_audit_log(self, user_id: str, agent: str, action: str,
                         input_summary: str, output_summary: str,
                         run_id: Optional[str] = None,
                         oauth_account_id: Optional[str] = None,
                         user_email: Optional[str] = None,
                         drafts_created: Optional[int] = None,
                         events_changed: Optional[int] = None) -> AuditLog:
        row = self._insert("audit_logs", {
            "id": new_id(),
            "user_id": user_id,
            "agent": agent,
            "action": action,
            "input_summary": input_summary,
            "output_summary": output_summary,
            "oauth_account_id": oauth_account_id,
            "user_email": user_email,
            "drafts_created": drafts_created,
            "events_changed": events_changed,
            "run_id": run_id,
            "timestamp": utc_now(),
        })
        return AuditLog.from_dict({**row, "timestamp": to_iso(row["timestamp"])})

    def list_audit_logs_for_run(self, run_id: str) -> List[AuditLog]:
        rows = self.db.execute(
            "SELECT * FROM audit_logs WHERE run_id = ? ORDER BY timestamp ASC",
            (run_id,),
        )
        return [AuditLog.from_dict(r) for r in rows]

    def list_audit_logs_between(self, user_id: str, start: datetime,
                                end: datetime) -> List[AuditLog]:
        """Audit entries in [start, end], oldest first"""
        rows = self.db.execute(
            """
            SELECT * FROM audit_logs
            WHERE user_id = ? AND timestamp >= ? AND timestamp <= ?
            ORDER BY timestamp ASC
            """,
            (user_id, to_iso(start), to_iso(end)),
        )
        return [AuditLog.from_dict(r) for r in rows]

    # =========================================================================
    # Agent artifacts
    # =========================================================================

    def insert_email_draft(self, execution_id: str, to_address: str, subject: str,
                           draft_body: str, priority_score: int = 5,
                           auto_send: bool = False,
                           from_account_id: Optional[str] = None) -> str:
        row = self._insert("email_drafts", {
            "id": new_id(),
            "execution_id": execution_id,
            "to_address": to_address,
            "subject": subject,
            "draft_body": draft_body,
            "priority_score": priority_score,
            "sent": False,
            "auto_send": auto_send,
            "from_account_id": from_account_id,
            "confirmed_by_user": False,
            "created_at": utc_now(),
        })
        return row["id"]

    def list_email_drafts(self, execution_id: str) -> List[EmailDraft]:
        rows = self.db.execute(
            "SELECT * FROM email_drafts WHERE execution_id = ? ORDER BY created_at ASC",
            (execution_id,),
        )
        return [EmailDraft.from_dict(r) for r in rows]

    def insert_calendar_proposal(self, execution_id: str, event_id: str,
                                 old_slot: str, new_slot: str, reason: str,
                                 applied: bool = False) -> str:
        row = self._insert("calendar_proposals", {
            "id": new_id(),
            "execution_id": execution_id,
            "event_id": event_id,
            "old_slot": old_slot,
            "new_slot": new_slot,
            "reason": reason,
            "applied": applied,
            "created_at": utc_now(),
        })
        return row["id"]

    def list_calendar_proposals(self, execution_id: str) -> List[CalendarProposal]:
        rows = self.db.execute(
            "SELECT * FROM calendar_proposals WHERE execution_id = ? ORDER BY created_at ASC",
            (execution_id,),
        )
        return [CalendarProposal.from_dict(r) for r in rows]

    def insert_study_plan(self, execution_id: str, subject: str,
                          schedule: List[Dict[str, Any]], flashcards_csv: str,
                          practice_questions: List[Dict[str, Any]]) -> str:
        row = self._insert("study_plans", {
            "id": new_id(),
            "execution_id": execution_id,
            "subject": subject,
            "schedule": schedule,
            "flashcards_csv": flashcards_csv,
            "practice_questions": practice_questions,
            "created_at": utc_now(),
        })
        return row["id"]

    def list_study_plans(self, execution_id: str) -> List[StudyPlan]:
        rows = self.db.execute(
            "SELECT * FROM study_plans WHERE execution_id = ? ORDER BY created_at ASC",
            (execution_id,),
        )
        return [StudyPlan.from_dict(r) for r in rows]

    # =========================================================================
    # Weekly snapshots
    # =========================================================================

    def get_weekly_snapshot(self, user_id: str, week_start: str) -> Optional[WeeklySnapshot]:
        row = self.db.execute_one(
            "SELECT * FROM weekly_snapshots WHERE user_id = ? AND week_start = ?",
            (user_id, week_start),
        )
        return WeeklySnapshot.from_dict(row) if row else None

    def insert_weekly_snapshot(self, user_id: str, week_start: str, week_end: str,
                               **payload: Any) -> WeeklySnapshot:
        """
        Insert a snapshot unless one already exists for (user_id, week_start).

        The unique constraint decides the winner when two requests race; both
        callers get the stored row back.
        """
        now = utc_now()
        row = {
            "id": new_id(),
            "user_id": user_id,
            "week_start": week_start,
            "week_end": week_end,
            **payload,
            "created_at": now,
            "updated_at": now,
        }
        columns = list(row.keys())
        placeholders = ", ".join("?" for _ in columns)
        inserted = self.db.execute_write(
            f"""
            INSERT INTO weekly_snapshots ({', '.join(columns)})
            VALUES ({placeholders})
            ON CONFLICT (user_id, week_start) DO NOTHING
            """,
            tuple(_encode(c, row[c]) for c in columns),
        )
        if not inserted:
            self.logger.info(
                "Weekly snapshot for %s/%s already existed; returning stored row",
                user_id, week_start,
            )
        snapshot = self.get_weekly_snapshot(user_id, week_start)
        if snapshot is None:
            raise RuntimeError(
                f"Failed to create weekly snapshot for {user_id} week {week_start}"
            )
        return snapshot
