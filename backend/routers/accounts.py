"""
Connected account API endpoints.

Token exchange happens in the identity provider flow outside this service;
these endpoints list, select and disconnect stored accounts.
"""

from fastapi import APIRouter, Depends, HTTPException

from backend.dependencies import get_account_store, get_current_user_id
from backend.schemas import AccountListResponse, AccountResponse
from autoplanner.core import AccountStore

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("/", response_model=AccountListResponse)
async def list_accounts(
    user_id: str = Depends(get_current_user_id),
    store: AccountStore = Depends(get_account_store),
):
    """List connected accounts, default first."""
    accounts = store.get_user_accounts(user_id)
    return AccountListResponse(
        accounts=[AccountResponse(**a.to_dict()) for a in accounts],
        total=len(accounts),
    )


@router.post("/{account_id}/default", response_model=AccountResponse)
async def set_default_account(
    account_id: str,
    user_id: str = Depends(get_current_user_id),
    store: AccountStore = Depends(get_account_store),
):
    """Make an account the user's default."""
    if not store.set_default_account(user_id, account_id):
        raise HTTPException(status_code=404, detail=f"Account {account_id} not found")
    return AccountResponse(**store.get_account(account_id).to_dict())


@router.delete("/{account_id}")
async def remove_account(
    account_id: str,
    user_id: str = Depends(get_current_user_id),
    store: AccountStore = Depends(get_account_store),
):
    """Disconnect an account."""
    if not store.remove_account(account_id, user_id):
        raise HTTPException(status_code=404, detail=f"Account {account_id} not found")
    return {"success": True, "message": f"Account {account_id} removed"}
