"""
Weekly report compilation for Autoplanner.

Rolls a week's executions and audit entries up into one WeeklySnapshot per
(user, ISO week). A stored snapshot is returned as is; the week is only
compiled once.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

from autoplanner.core.models import AuditLog, Execution, UserContext, WeeklySnapshot, utc_now
from autoplanner.core.repository import Repository


TOP_URGENT_LIMIT = 5

NO_STUDY_PLANS = {
    "subject": "No study plans this week",
    "days_planned": 0,
    "flashcards_count": 0,
}


def get_week_bounds(target: Union[date, datetime],
                    tz: tzinfo = timezone.utc) -> Tuple[datetime, datetime]:
    """
    ISO week containing target: Monday 00:00:00 to Sunday 23:59:59.999999 in tz.

    Naive datetimes are taken as already in tz; aware ones are converted first.
    """
    if isinstance(target, datetime):
        if target.tzinfo is not None:
            target = target.astimezone(tz)
        day = target.date()
    else:
        day = target

    monday = day - timedelta(days=day.weekday())
    sunday = monday + timedelta(days=6)
    week_start = datetime.combine(monday, time.min, tzinfo=tz)
    week_end = datetime.combine(sunday, time.max, tzinfo=tz)
    return week_start, week_end


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """ZoneInfo for an IANA name; UTC when the name is empty or unknown"""
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logging.getLogger("autoplanner.weekly").warning(f"Unknown timezone {name!r}, using UTC")
        return timezone.utc


def _long_date(d: datetime) -> str:
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def _short_date(d: datetime) -> str:
    return f"{d.strftime('%a, %b')} {d.day}"


class WeeklyCompiler:
    """Builds and memoizes weekly snapshots from persisted runs"""

    def __init__(self, repository: Repository):
        self.repository = repository
        self.logger = logging.getLogger("autoplanner.weekly")

    def compile_weekly_snapshot(self, user_id: str,
                                user_context: Optional[UserContext] = None,
                                week_start: Optional[Union[date, datetime]] = None,
                                now: Optional[datetime] = None) -> WeeklySnapshot:
        """
        Return the snapshot for the week containing week_start (default: now).

        Args:
            user_id: User whose runs are compiled
            user_context: The user's context; its timezone sets where the week
                begins and ends (UTC when omitted)
            week_start: Any date inside the target week
            now: Current time used when week_start is omitted

        Returns:
            The stored WeeklySnapshot, existing or newly created
        """
        target = week_start or now or utc_now()
        tz = resolve_timezone(user_context.timezone if user_context else None)
        start, end = get_week_bounds(target, tz)
        start_str = start.date().isoformat()
        end_str = end.date().isoformat()

        existing = self.repository.get_weekly_snapshot(user_id, start_str)
        if existing:
            self.logger.debug(f"Weekly snapshot {existing.id} already compiled for {start_str}")
            return existing

        latest = self.repository.get_latest_completed_execution(user_id)
        executions = self.repository.list_executions_between(user_id, start, end)
        audit_logs = self.repository.list_audit_logs_between(user_id, start, end)

        weekly_plan = self.build_weekly_plan(latest, executions)
        email_summary = self.aggregate_email_summary(executions)
        study_plan = self.aggregate_study_plan(executions)
        metrics = self.calculate_metrics(executions, audit_logs)
        timeline = self.build_timeline(executions)

        snapshot = self.repository.insert_weekly_snapshot(
            user_id, start_str, end_str,
            execution_plan=self.build_execution_plan(executions, start, end),
            weekly_plan=weekly_plan,
            email_summary=email_summary,
            study_plan=study_plan,
            metrics=metrics,
            timeline=timeline,
            dashboard_snapshot={
                "email_summary": email_summary,
                "calendar_summary": weekly_plan.get("calendar_summary") or {},
                "study_summary": study_plan,
                "timeline": timeline,
                "metrics": metrics,
            },
            pdf_path="",
            public_url="",
        )
        self.logger.info(
            f"Compiled weekly snapshot {snapshot.id} for {user_id} ({start_str}): "
            f"{len(executions)} executions, {len(audit_logs)} audit entries"
        )
        return snapshot

    # =========================================================================
    # Aggregations
    # =========================================================================

    @staticmethod
    def build_execution_plan(executions: List[Execution], week_start: datetime,
                             week_end: datetime) -> str:
        header = f"Weekly Report for {_long_date(week_start)} - {_long_date(week_end)}"
        if not executions:
            return (f"{header}\n\nNo commands executed this week. "
                    "Run a command to see your weekly activity.")

        lines = [
            f"{i}. {_short_date(e.created_at) if e.created_at else 'Unknown date'}: "
            f"{e.user_command or 'Command executed'}"
            for i, e in enumerate(executions, start=1)
        ]
        return (f"{header}\n\nCommands executed this week:\n" + "\n".join(lines) +
                f"\n\nTotal executions: {len(executions)}\nStatus: All systems operational")

    @staticmethod
    def build_weekly_plan(latest: Optional[Execution],
                          executions: List[Execution]) -> Dict[str, Any]:
        fallback = {
            "events_today": 0,
            "events_this_week": len(executions),
            "proposed_changes": 0,
        }
        snapshot = latest.dashboard_snapshot if latest else None
        if not snapshot:
            return {"calendar_summary": fallback}
        return {
            "calendar_summary": snapshot.get("calendar_summary") or fallback,
            "timeline": snapshot.get("timeline") or [],
        }

    @staticmethod
    def aggregate_email_summary(executions: List[Execution]) -> Dict[str, Any]:
        total_urgent = 0
        drafts = 0
        replies = 0
        urgent: List[Dict[str, Any]] = []

        for e in executions:
            summary = (e.dashboard_snapshot or {}).get("email_summary")
            if not summary:
                continue
            top = summary.get("top_urgent") or []
            total_urgent += len(top)
            drafts += summary.get("drafts_count") or 0
            replies += summary.get("replies_sent") or 0
            urgent.extend(top)

        seen = set()
        unique = []
        for email in urgent:
            key = (email.get("subject"), email.get("sender"))
            if key in seen:
                continue
            seen.add(key)
            unique.append(email)

        return {
            "top_urgent": unique[:TOP_URGENT_LIMIT],
            "drafts_count": drafts,
            "replies_sent": replies,
            "total_urgent": total_urgent,
        }

    @staticmethod
    def aggregate_study_plan(executions: List[Execution]) -> Dict[str, Any]:
        plans = [
            e.dashboard_snapshot["study_summary"]
            for e in executions
            if e.dashboard_snapshot and e.dashboard_snapshot.get("study_summary")
        ]
        if not plans:
            return dict(NO_STUDY_PLANS)

        # executions are newest first
        return {
            "subject": plans[0].get("subject") or "Multiple subjects",
            "days_planned": sum(p.get("days_planned") or 0 for p in plans),
            "flashcards_count": sum(p.get("flashcards_count") or 0 for p in plans),
            "plans_created": len(plans),
        }

    @staticmethod
    def calculate_metrics(executions: List[Execution],
                          audit_logs: List[AuditLog]) -> Dict[str, Any]:
        durations = [d for d in (e.duration_seconds() for e in executions) if d is not None]
        return {
            "total_commands": len(executions),
            "successful_executions": sum(1 for e in executions if e.status == "completed"),
            "failed_executions": sum(1 for e in executions if e.status == "failed"),
            "total_actions": len(audit_logs),
            "unique_agents": len({log.agent for log in audit_logs}),
            "avg_execution_time": round(sum(durations) / len(durations), 2) if durations else 0,
        }

    @staticmethod
    def build_timeline(executions: List[Execution]) -> List[Dict[str, Any]]:
        days: Dict[str, List[Dict[str, Any]]] = {}
        for e in executions:
            if e.created_at is None:
                continue
            created = e.created_at.astimezone(timezone.utc) if e.created_at.tzinfo else e.created_at
            days.setdefault(created.date().isoformat(), []).append({
                "time": created.strftime("%I:%M %p"),
                "command": e.user_command or "Command executed",
                "status": e.status,
                "execution_id": e.id,
            })

        return [
            {"date": day, "events": events, "total": len(events)}
            for day, events in sorted(days.items())
        ]
