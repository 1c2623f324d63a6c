"""
Weekly report API endpoint.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from backend.dependencies import get_current_user_id, get_user_context, get_weekly_compiler
from backend.schemas import WeeklyRequest, WeeklySnapshotResponse
from autoplanner.core import UserContext
from autoplanner.dashboard import WeeklyCompiler

router = APIRouter(prefix="/weekly", tags=["weekly"])


@router.post("/", response_model=WeeklySnapshotResponse)
async def compile_weekly(
    request: WeeklyRequest,
    user_id: str = Depends(get_current_user_id),
    user_context: UserContext = Depends(get_user_context),
    compiler: WeeklyCompiler = Depends(get_weekly_compiler),
):
    """
    Compile the weekly snapshot for the week containing week_start
    (default: the current week).

    A week is compiled once; later calls return the stored snapshot.
    """
    week_start = None
    if request.week_start:
        try:
            week_start = date.fromisoformat(request.week_start)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid week_start: {request.week_start}")

    snapshot = compiler.compile_weekly_snapshot(user_id, user_context, week_start=week_start)
    return WeeklySnapshotResponse(**snapshot.to_dict())
