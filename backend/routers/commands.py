"""
Command execution API endpoint.

Runs a free-text command through the Orchestrator and returns the plan,
audit trail, summary and dashboard snapshot of the finished run.
"""

from fastapi import APIRouter, Depends, HTTPException

from backend.dependencies import get_current_user_id, get_orchestrator, get_user_context
from backend.schemas import CommandRequest, CommandResponse
from autoplanner.agents.orchestrator import Orchestrator
from autoplanner.core import AccountValidationError, SessionContext, UserContext

router = APIRouter(prefix="/commands", tags=["commands"])


@router.post("/", response_model=CommandResponse)
async def run_command(
    request: CommandRequest,
    user_id: str = Depends(get_current_user_id),
    user_context: UserContext = Depends(get_user_context),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """
    Run a command end to end.

    Examples:
    - "Triage my inbox"
    - "Reschedule low priority meetings today"
    - "Create a study plan for my ML midterm"
    - "Plan my week"

    Without an explicit account_id the user's default account is used.
    Returns 400 when the account cannot be used (no execution is recorded)
    and 500 when a step fails (the execution is recorded as failed).
    """
    session = SessionContext(
        user_id=user_id,
        user_context=user_context,
        account_id=request.account_id or user_context.default_oauth_account_id,
        source=request.source,
    )
    options = {}
    if request.auto_plan_options:
        options["auto_plan_options"] = request.auto_plan_options

    try:
        result = orchestrator.execute(request.command, session, options)
    except AccountValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Execution failed: {e}")

    return CommandResponse(**result.to_dict())
