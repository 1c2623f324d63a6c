"""
Pydantic schemas for API request/response validation.

These schemas provide:
- Type safety for API inputs and outputs
- Automatic validation and error messages
- OpenAPI documentation generation
- Serialization/deserialization

Snapshots and audit payloads are free-form JSON produced by the agents, so
they are typed as dicts here.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


# =============================================================================
# Base Response Schemas
# =============================================================================

class ErrorResponse(BaseModel):
    """Error response for API errors."""
    detail: str
    code: Optional[str] = None


# =============================================================================
# Command Schemas
# =============================================================================

class CommandRequest(BaseModel):
    """Request body for running a command."""
    command: str = Field(..., min_length=1, max_length=2000)
    account_id: Optional[str] = None
    source: str = Field(default="text", pattern="^(text|speech)$")
    auto_plan_options: Optional[Dict[str, Any]] = None


class AuditLogResponse(BaseModel):
    """One audit entry."""
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
    timestamp: Optional[str] = None

    class Config:
        from_attributes = True


class CommandResponse(BaseModel):
    """Result of a completed run."""
    execution_id: str
    execution_plan: str
    audit_log: List[AuditLogResponse]
    final_summary: str
    dashboard_snapshot: Dict[str, Any]
    voice_summary_text: Optional[str] = None


# =============================================================================
# Execution Schemas
# =============================================================================

class ExecutionResponse(BaseModel):
    """Stored execution."""
    id: str
    user_id: str
    user_command: str
    status: str
    execution_plan: Optional[str] = None
    final_summary: Optional[str] = None
    dashboard_snapshot: Optional[Dict[str, Any]] = None
    oauth_account_id: Optional[str] = None
    account_email: Optional[str] = None
    created_at: Optional[str] = None
    completed_at: Optional[str] = None

    class Config:
        from_attributes = True


class ExecutionListResponse(BaseModel):
    """List of executions, newest first."""
    executions: List[ExecutionResponse]
    total: int


class AuditLogListResponse(BaseModel):
    """Audit entries for one execution, in step order."""
    execution_id: str
    entries: List[AuditLogResponse]
    total: int


# =============================================================================
# Weekly Schemas
# =============================================================================

class WeeklyRequest(BaseModel):
    """Request body for compiling a weekly snapshot."""
    week_start: Optional[str] = None  # YYYY-MM-DD, any day in the target week


class WeeklySnapshotResponse(BaseModel):
    """Stored weekly snapshot."""
    id: str
    user_id: str
    week_start: str
    week_end: str
    execution_plan: str
    weekly_plan: Dict[str, Any]
    email_summary: Dict[str, Any]
    study_plan: Dict[str, Any]
    metrics: Dict[str, Any]
    timeline: List[Dict[str, Any]]
    dashboard_snapshot: Dict[str, Any]
    pdf_path: str = ""
    public_url: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# =============================================================================
# Account Schemas
# =============================================================================

class AccountResponse(BaseModel):
    """Connected account without tokens."""
    id: str
    user_id: str
    provider: str
    email: str
    token_expiry: Optional[str] = None
    scope: str = ""
    is_default: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AccountListResponse(BaseModel):
    """Connected accounts, default first."""
    accounts: List[AccountResponse]
    total: int


# =============================================================================
# User Context Schemas
# =============================================================================

class UserContextUpdate(BaseModel):
    """Request body for updating the user context."""
    email_oauth: Optional[str] = None
    calendar_id: Optional[str] = None
    study_notes_link: Optional[str] = None
    auto_send: Optional[bool] = None
    demo_mode: Optional[bool] = None
    work_hours: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}-\d{2}:\d{2}$")
    timezone: Optional[str] = None
    default_oauth_account_id: Optional[str] = None


class UserContextResponse(BaseModel):
    """User context as stored."""
    user_id: str
    email_oauth: Optional[str] = None
    calendar_id: str
    study_notes_link: Optional[str] = None
    auto_send: bool
    demo_mode: bool
    work_hours: str
    timezone: str
    default_oauth_account_id: Optional[str] = None
