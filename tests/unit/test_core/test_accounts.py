"""
Unit tests for the AccountStore.
Tests default-account handling, token expiry and account validation messages.
"""

import pytest
from datetime import timedelta
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from autoplanner.core.accounts import AccountStore
from autoplanner.core.database import SQLiteDatabase
from autoplanner.core.models import to_iso, utc_now
from autoplanner.core.schema import init_schema


@pytest.fixture
def store(tmp_path):
    db = SQLiteDatabase.create(tmp_path / "test.db")
    init_schema(db)
    return AccountStore(db)


def add(store, user_id="u1", email="me@example.com", expires_in=3600,
        scope="gmail.readonly calendar"):
    return store.add_account(user_id, "google", email, "access", "refresh", expires_in, scope)


class TestAccountLifecycle:
    """Tests for adding, listing and removing accounts."""

    def test_first_account_becomes_default(self, store):
        first = add(store, email="first@example.com")
        second = add(store, email="second@example.com")

        assert first.is_default is True
        assert second.is_default is False
        assert store.get_default_account("u1").id == first.id

    def test_user_accounts_default_first(self, store):
        add(store, email="first@example.com")
        second = add(store, email="second@example.com")
        store.set_default_account("u1", second.id)

        emails = [a.email for a in store.get_user_accounts("u1")]

        assert emails[0] == "second@example.com"

    def test_set_default_rejects_other_users_account(self, store):
        theirs = add(store, user_id="u2")

        assert store.set_default_account("u1", theirs.id) is False
        assert store.get_account(theirs.id).is_default is True

    def test_update_tokens_keeps_refresh_token_when_not_given(self, store):
        account = add(store)

        assert store.update_account_tokens(account.id, "new-access", None, 7200) is True
        updated = store.get_account(account.id)

        assert updated.access_token == "new-access"
        assert updated.refresh_token == "refresh"

    def test_remove_account_only_for_owner(self, store):
        account = add(store)

        assert store.remove_account(account.id, "u2") is False
        assert store.remove_account(account.id, "u1") is True
        assert store.get_account(account.id) is None

    def test_log_usage_cascades_on_remove(self, store):
        account = add(store)
        store.log_account_usage(account.id, "u1", "orchestrator_execute", "orchestrator")
        assert len(store.db.execute("SELECT * FROM account_usage_log")) == 1

        store.remove_account(account.id, "u1")

        assert len(store.db.execute("SELECT * FROM account_usage_log")) == 0


class TestTokenExpiry:
    """Tests for is_token_expired()."""

    def test_fresh_token_is_valid(self, store):
        assert store.is_token_expired(add(store, expires_in=3600)) is False

    def test_token_inside_safety_margin_counts_as_expired(self, store):
        """Tokens expiring within five minutes are treated as expired."""
        assert store.is_token_expired(add(store, expires_in=240)) is True

    def test_no_expiry_never_expires(self, store):
        account = add(store)
        store.db.execute_write("UPDATE oauth_accounts SET token_expiry = NULL WHERE id = ?", (account.id,))

        assert store.is_token_expired(store.get_account(account.id)) is False


class TestValidateAccountContext:
    """Tests for validate_account_context() messages."""

    def test_no_account_selected(self, store):
        result = store.validate_account_context("u1", None)

        assert result.valid is False
        assert result.message == "No OAuth account selected. Please select an account to continue."

    def test_unknown_account(self, store):
        result = store.validate_account_context("u1", "missing")

        assert result.valid is False
        assert result.message == "Selected OAuth account not found. Please reconnect your account."

    def test_account_of_another_user(self, store):
        account = add(store, user_id="u2")

        result = store.validate_account_context("u1", account.id)

        assert result.valid is False
        assert result.message == "Account does not belong to current user."

    def test_expired_token(self, store):
        account = add(store)
        past = to_iso(utc_now() - timedelta(hours=1))
        store.db.execute_write("UPDATE oauth_accounts SET token_expiry = ? WHERE id = ?", (past, account.id))

        result = store.validate_account_context("u1", account.id)

        assert result.valid is False
        assert result.message == "OAuth token has expired. Please reconnect your account."
        assert result.account.id == account.id

    def test_valid_account(self, store):
        account = add(store)

        result = store.validate_account_context("u1", account.id)

        assert result.valid is True
        assert result.message is None
        assert result.account.email == "me@example.com"


class TestScopes:
    """Tests for scope helpers."""

    def test_scopes_split_on_spaces(self, store):
        account = add(store, scope="gmail.readonly  calendar")
        assert AccountStore.get_token_scopes(account) == ["gmail.readonly", "calendar"]

    def test_has_required_scopes(self, store):
        account = add(store)
        assert store.has_required_scopes(account, ["calendar"]) is True
        assert store.has_required_scopes(account, ["calendar", "drive"]) is False
