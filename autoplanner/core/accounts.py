"""
OAuth account store for Autoplanner.

Tokens are obtained by an external identity provider; this module only stores
them, picks the default account, and validates that a selected account may be
used for a run.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional

from .models import OAuthAccount, utc_now, to_iso
from .repository import new_id


class AccountValidationError(Exception):
    """Raised when a run is requested with an unusable account context."""

    def __init__(self, message: str, account: Optional[OAuthAccount] = None):
        super().__init__(message)
        self.message = message
        self.account = account


@dataclass
class AccountValidation:
    """Result of validate_account_context()"""
    valid: bool
    message: Optional[str] = None
    account: Optional[OAuthAccount] = None


class AccountStore:
    """Reads and writes oauth_accounts and account_usage_log rows"""

    def __init__(self, db, expiry_margin_minutes: int = 5):
        self.db = db
        self.expiry_margin = timedelta(minutes=expiry_margin_minutes)
        self.logger = logging.getLogger("autoplanner.accounts")

    def get_account(self, account_id: str) -> Optional[OAuthAccount]:
        row = self.db.execute_one("SELECT * FROM oauth_accounts WHERE id = ?", (account_id,))
        return OAuthAccount.from_dict(row) if row else None

    def get_user_accounts(self, user_id: str) -> List[OAuthAccount]:
        """All accounts for a user, default first, then newest first"""
        rows = self.db.execute(
            """
            SELECT * FROM oauth_accounts
            WHERE user_id = ?
            ORDER BY is_default DESC, created_at DESC
            """,
            (user_id,),
        )
        return [OAuthAccount.from_dict(r) for r in rows]

    def get_default_account(self, user_id: str) -> Optional[OAuthAccount]:
        row = self.db.execute_one(
            "SELECT * FROM oauth_accounts WHERE user_id = ? AND is_default = 1",
            (user_id,),
        )
        return OAuthAccount.from_dict(row) if row else None

    def set_default_account(self, user_id: str, account_id: str) -> bool:
        account = self.get_account(account_id)
        if account is None or account.user_id != user_id:
            return False

        self.db.execute_write(
            "UPDATE oauth_accounts SET is_default = 0 WHERE user_id = ?", (user_id,)
        )
        self.db.execute_write(
            "UPDATE oauth_accounts SET is_default = 1, updated_at = ? WHERE id = ? AND user_id = ?",
            (to_iso(utc_now()), account_id, user_id),
        )
        return True

    def add_account(self, user_id: str, provider: str, email: str,
                    access_token: str, refresh_token: Optional[str],
                    expires_in: int, scope: str) -> OAuthAccount:
        """Store a newly connected account. The user's first account becomes the default."""
        now = utc_now()
        is_first_account = not self.get_user_accounts(user_id)
        account_id = new_id()

        self.db.execute_write(
            """
            INSERT INTO oauth_accounts (
                id, user_id, provider, email, access_token, refresh_token,
                token_expiry, scope, is_default, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                account_id, user_id, provider, email, access_token, refresh_token,
                to_iso(now + timedelta(seconds=expires_in)), scope,
                int(is_first_account), to_iso(now), to_iso(now),
            ),
        )
        self.logger.info("Connected %s account %s for user %s", provider, email, user_id)
        return self.get_account(account_id)

    def update_account_tokens(self, account_id: str, access_token: str,
                              refresh_token: Optional[str], expires_in: int) -> bool:
        now = utc_now()
        fields = {
            "access_token": access_token,
            "token_expiry": to_iso(now + timedelta(seconds=expires_in)),
            "updated_at": to_iso(now),
        }
        if refresh_token:
            fields["refresh_token"] = refresh_token

        assignments = ", ".join(f"{column} = ?" for column in fields)
        updated = self.db.execute_write(
            f"UPDATE oauth_accounts SET {assignments} WHERE id = ?",
            tuple(fields.values()) + (account_id,),
        )
        return updated > 0

    def remove_account(self, account_id: str, user_id: str) -> bool:
        removed = self.db.execute_write(
            "DELETE FROM oauth_accounts WHERE id = ? AND user_id = ?",
            (account_id, user_id),
        )
        return removed > 0

    def is_token_expired(self, account: OAuthAccount) -> bool:
        """Tokens expiring within the safety margin count as expired"""
        if account.token_expiry is None:
            return False
        return account.token_expiry <= utc_now() + self.expiry_margin

    def log_account_usage(self, account_id: str, user_id: str, action: str,
                          api_endpoint: Optional[str] = None) -> None:
        self.db.execute_write(
            """
            INSERT INTO account_usage_log (id, oauth_account_id, user_id, action, api_endpoint, timestamp)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (new_id(), account_id, user_id, action, api_endpoint, to_iso(utc_now())),
        )

    def validate_account_context(self, user_id: str,
                                 account_id: Optional[str]) -> AccountValidation:
        """
        Check that account_id can be used for a run by user_id.

        Returns:
            AccountValidation; on failure `message` is suitable for showing
            to the user as is.
        """
        if not account_id:
            return AccountValidation(
                valid=False,
                message="No OAuth account selected. Please select an account to continue.",
            )

        account = self.get_account(account_id)
        if account is None:
            return AccountValidation(
                valid=False,
                message="Selected OAuth account not found. Please reconnect your account.",
            )

        if account.user_id != user_id:
            return AccountValidation(
                valid=False,
                message="Account does not belong to current user.",
            )

        if self.is_token_expired(account):
            return AccountValidation(
                valid=False,
                message="OAuth token has expired. Please reconnect your account.",
                account=account,
            )

        return AccountValidation(valid=True, account=account)

    @staticmethod
    def get_token_scopes(account: OAuthAccount) -> List[str]:
        return [scope for scope in account.scope.split(" ") if scope]

    def has_required_scopes(self, account: OAuthAccount, required_scopes: List[str]) -> bool:
        granted = self.get_token_scopes(account)
        return all(scope in granted for scope in required_scopes)
