"""
Execution history API endpoints.

Read-only access to stored runs and their audit trails.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.dependencies import get_current_user_id, get_repository
from backend.schemas import (
    AuditLogListResponse,
    AuditLogResponse,
    ExecutionListResponse,
    ExecutionResponse,
)
from autoplanner.core import Execution, Repository

router = APIRouter(prefix="/executions", tags=["executions"])


def _get_owned_execution(execution_id: str, user_id: str, repository: Repository) -> Execution:
    execution = repository.get_execution(execution_id)
    # Other users' executions look the same as missing ones
    if execution is None or execution.user_id != user_id:
        raise HTTPException(status_code=404, detail=f"Execution {execution_id} not found")
    return execution


@router.get("/", response_model=ExecutionListResponse)
async def list_executions(
    limit: int = Query(50, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    repository: Repository = Depends(get_repository),
):
    """List the acting user's executions, newest first."""
    executions = repository.list_executions(user_id, limit=limit)
    return ExecutionListResponse(
        executions=[ExecutionResponse(**e.to_dict()) for e in executions],
        total=len(executions),
    )


@router.get("/{execution_id}", response_model=ExecutionResponse)
async def get_execution(
    execution_id: str,
    user_id: str = Depends(get_current_user_id),
    repository: Repository = Depends(get_repository),
):
    """Get a single execution by ID."""
    execution = _get_owned_execution(execution_id, user_id, repository)
    return ExecutionResponse(**execution.to_dict())


@router.get("/{execution_id}/audit", response_model=AuditLogListResponse)
async def get_execution_audit(
    execution_id: str,
    user_id: str = Depends(get_current_user_id),
    repository: Repository = Depends(get_repository),
):
    """Audit entries written during an execution, in step order."""
    _get_owned_execution(execution_id, user_id, repository)
    entries = repository.list_audit_logs_for_run(execution_id)
    return AuditLogListResponse(
        execution_id=execution_id,
        entries=[AuditLogResponse(**e.to_dict()) for e in entries],
        total=len(entries),
    )
