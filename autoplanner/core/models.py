"""
Data models for Autoplanner
Defines the persisted records (executions, audit entries, agent artifacts,
weekly snapshots, accounts) and the explicit session context.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
import json


# Execution lifecycle: pending -> running -> completed | failed
EXECUTION_STATUSES = ('pending', 'running', 'completed', 'failed')


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """
    Format a datetime for storage.

    Always UTC with microseconds so stored timestamps compare correctly as
    strings in range queries.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _parse_datetime(dt_str: Optional[str]) -> Optional[datetime]:
    """Parse datetime string from database"""
    if isinstance(dt_str, datetime):
        return dt_str
    if dt_str:
        try:
            return datetime.fromisoformat(dt_str)
        except (ValueError, TypeError):
            return None
    return None


def _parse_json(json_str: Any) -> Any:
    """Parse JSON column from database; already-decoded values pass through"""
    if json_str is None or isinstance(json_str, (dict, list)):
        return json_str
    try:
        return json.loads(json_str)
    except (json.JSONDecodeError, TypeError):
        return None


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class UserContext:
    """Per-user settings that drive orchestration"""
    user_id: str
    id: Optional[str] = None
    email_oauth: Optional[str] = None
    calendar_id: str = "primary"
    study_notes_link: Optional[str] = None
    auto_send: bool = False
    demo_mode: bool = True
    work_hours: str = "09:00-17:00"
    timezone: str = "UTC"
    default_oauth_account_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserContext':
        """Create UserContext from database row dictionary"""
        return cls(
            id=data.get('id'),
            user_id=data['user_id'],
            email_oauth=data.get('email_oauth'),
            calendar_id=data.get('calendar_id') or 'primary',
            study_notes_link=data.get('study_notes_link'),
            auto_send=bool(data.get('auto_send', False)),
            demo_mode=bool(data.get('demo_mode', True)),
            work_hours=data.get('work_hours') or '09:00-17:00',
            timezone=data.get('timezone') or 'UTC',
            default_oauth_account_id=data.get('default_oauth_account_id'),
            created_at=_parse_datetime(data.get('created_at')),
            updated_at=_parse_datetime(data.get('updated_at')),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['created_at'] = _isoformat(self.created_at)
        data['updated_at'] = _isoformat(self.updated_at)
        return data


@dataclass
class OAuthAccount:
    """Connected mail/calendar account. Token exchange happens elsewhere."""
    id: str
    user_id: str
    provider: str  # 'gmail', 'google'
    email: str
    access_token: str
    refresh_token: Optional[str] = None
    token_expiry: Optional[datetime] = None
    scope: str = ""
    is_default: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OAuthAccount':
        """Create OAuthAccount from database row dictionary"""
        return cls(
            id=data['id'],
            user_id=data['user_id'],
            provider=data.get('provider', 'google'),
            email=data.get('email', ''),
            access_token=data.get('access_token', ''),
            refresh_token=data.get('refresh_token'),
            token_expiry=_parse_datetime(data.get('token_expiry')),
            scope=data.get('scope') or '',
            is_default=bool(data.get('is_default', False)),
            created_at=_parse_datetime(data.get('created_at')),
            updated_at=_parse_datetime(data.get('updated_at')),
        )

    def to_dict(self, include_tokens: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "provider": self.provider,
            "email": self.email,
            "token_expiry": _isoformat(self.token_expiry),
            "scope": self.scope,
            "is_default": self.is_default,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }
        if include_tokens:
            data["access_token"] = self.access_token
            data["refresh_token"] = self.refresh_token
        return data


@dataclass
class Execution:
    """One end-to-end run of the orchestration pipeline"""
    id: str
    user_id: str
    user_command: str
    status: str = "pending"  # see EXECUTION_STATUSES
    execution_plan: Optional[str] = None
    final_summary: Optional[str] = None
    dashboard_snapshot: Optional[Dict[str, Any]] = None
    oauth_account_id: Optional[str] = None
    account_email: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Execution':
        """Create Execution from database row dictionary"""
        return cls(
            id=data['id'],
            user_id=data['user_id'],
            user_command=data.get('user_command', ''),
            status=data.get('status', 'pending'),
            execution_plan=data.get('execution_plan'),
            final_summary=data.get('final_summary'),
            dashboard_snapshot=_parse_json(data.get('dashboard_snapshot')),
            oauth_account_id=data.get('oauth_account_id'),
            account_email=data.get('account_email'),
            created_at=_parse_datetime(data.get('created_at')),
            completed_at=_parse_datetime(data.get('completed_at')),
        )

    def duration_seconds(self) -> Optional[float]:
        """Wall-clock run time, if the execution has finished"""
        if self.created_at and self.completed_at:
            return (self.completed_at - self.created_at).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['created_at'] = _isoformat(self.created_at)
        data['completed_at'] = _isoformat(self.completed_at)
        return data


@dataclass
class AuditLog:
    """Append-only record of one orchestration step"""
    id: str
    user_id: str
    agent: str
    action: str
    input_summary: Optional[str] = None
    output_summary: Optional[str] = None
    oauth_account_id: Optional[str] = None
    user_email: Optional[str] = None
    drafts_created: Optional[int] = None
    events_changed: Optional[int] = None
    run_id: Optional[str] = None
    timestamp: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditLog':
        """Create AuditLog from database row dictionary"""
        return cls(
            id=data['id'],
            user_id=data['user_id'],
            agent=data['agent'],
            action=data['action'],
            input_summary=data.get('input_summary'),
            output_summary=data.get('output_summary'),
            oauth_account_id=data.get('oauth_account_id'),
            user_email=data.get('user_email'),
            drafts_created=data.get('drafts_created'),
            events_changed=data.get('events_changed'),
            run_id=data.get('run_id'),
            timestamp=_parse_datetime(data.get('timestamp')),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['timestamp'] = _isoformat(self.timestamp)
        return data


@dataclass
class EmailDraft:
    """Reply draft produced for one execution; sending is confirmed elsewhere"""
    id: str
    execution_id: str
    to_address: str
    subject: str
    draft_body: str
    priority_score: int = 5
    sent: bool = False
    auto_send: bool = False
    from_account_id: Optional[str] = None
    confirmed_by_user: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EmailDraft':
        """Create EmailDraft from database row dictionary"""
        return cls(
            id=data['id'],
            execution_id=data['execution_id'],
            to_address=data['to_address'],
            subject=data['subject'],
            draft_body=data['draft_body'],
            priority_score=data.get('priority_score', 5),
            sent=bool(data.get('sent', False)),
            auto_send=bool(data.get('auto_send', False)),
            from_account_id=data.get('from_account_id'),
            confirmed_by_user=bool(data.get('confirmed_by_user', False)),
            created_at=_parse_datetime(data.get('created_at')),
        )


@dataclass
class CalendarProposal:
    """Proposed slot change for one event"""
    id: str
    execution_id: str
    event_id: str
    old_slot: str
    new_slot: str
    reason: Optional[str] = None
    applied: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CalendarProposal':
        """Create CalendarProposal from database row dictionary"""
        return cls(
            id=data['id'],
            execution_id=data['execution_id'],
            event_id=data['event_id'],
            old_slot=data['old_slot'],
            new_slot=data['new_slot'],
            reason=data.get('reason'),
            applied=bool(data.get('applied', False)),
            created_at=_parse_datetime(data.get('created_at')),
        )


@dataclass
class StudyPlan:
    """Generated study schedule, flashcards and practice questions"""
    id: str
    execution_id: str
    subject: str
    schedule: List[Dict[str, Any]] = field(default_factory=list)
    flashcards_csv: Optional[str] = None
    practice_questions: List[Dict[str, Any]] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StudyPlan':
        """Create StudyPlan from database row dictionary"""
        return cls(
            id=data['id'],
            execution_id=data['execution_id'],
            subject=data['subject'],
            schedule=_parse_json(data.get('schedule')) or [],
            flashcards_csv=data.get('flashcards_csv'),
            practice_questions=_parse_json(data.get('practice_questions')) or [],
            created_at=_parse_datetime(data.get('created_at')),
        )


@dataclass
class WeeklySnapshot:
    """Memoized weekly rollup, unique per (user_id, week_start)"""
    id: str
    user_id: str
    week_start: str  # YYYY-MM-DD (Monday)
    week_end: str    # YYYY-MM-DD (Sunday)
    execution_plan: str = ""
    weekly_plan: Dict[str, Any] = field(default_factory=dict)
    email_summary: Dict[str, Any] = field(default_factory=dict)
    study_plan: Dict[str, Any] = field(default_factory=dict)
    metrics: Dict[str, Any] = field(default_factory=dict)
    timeline: List[Dict[str, Any]] = field(default_factory=list)
    dashboard_snapshot: Dict[str, Any] = field(default_factory=dict)
    pdf_path: str = ""
    public_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WeeklySnapshot':
        """Create WeeklySnapshot from database row dictionary"""
        return cls(
            id=data['id'],
            user_id=data['user_id'],
            week_start=data['week_start'],
            week_end=data['week_end'],
            execution_plan=data.get('execution_plan') or '',
            weekly_plan=_parse_json(data.get('weekly_plan')) or {},
            email_summary=_parse_json(data.get('email_summary')) or {},
            study_plan=_parse_json(data.get('study_plan')) or {},
            metrics=_parse_json(data.get('metrics')) or {},
            timeline=_parse_json(data.get('timeline')) or [],
            dashboard_snapshot=_parse_json(data.get('dashboard_snapshot')) or {},
            pdf_path=data.get('pdf_path') or '',
            public_url=data.get('public_url') or '',
            created_at=_parse_datetime(data.get('created_at')),
            updated_at=_parse_datetime(data.get('updated_at')),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['created_at'] = _isoformat(self.created_at)
        data['updated_at'] = _isoformat(self.updated_at)
        return data


@dataclass
class SessionContext:
    """
    Explicit session state passed into orchestration calls.

    Replaces ambient "current user / current account" globals: whoever calls
    the orchestrator states which user is acting and which connected account
    the run should use.

    Attributes:
        user_id: Acting user
        user_context: The user's stored orchestration settings
        account_id: Selected OAuth account (None in demo mode)
        source: How the command arrived ('text' or 'speech')
    """
    user_id: str
    user_context: UserContext
    account_id: Optional[str] = None
    source: str = "text"
