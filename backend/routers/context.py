"""
User context API endpoints.

The user context holds the settings a run depends on: calendar, notes link,
auto-send, demo mode, work hours and the default account.
"""

from dataclasses import replace

from fastapi import APIRouter, Depends

from backend.dependencies import get_repository, get_user_context
from backend.schemas import UserContextResponse, UserContextUpdate
from autoplanner.core import Repository, UserContext

router = APIRouter(prefix="/context", tags=["context"])


@router.get("/", response_model=UserContextResponse)
async def get_context(user_context: UserContext = Depends(get_user_context)):
    """Get the acting user's context (defaults if never saved)."""
    return UserContextResponse(**user_context.to_dict())


@router.put("/", response_model=UserContextResponse)
async def update_context(
    update: UserContextUpdate,
    user_context: UserContext = Depends(get_user_context),
    repository: Repository = Depends(get_repository),
):
    """Update the acting user's context. Only non-null fields in the body change."""
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    saved = repository.save_user_context(replace(user_context, **changes))
    return UserContextResponse(**saved.to_dict())
