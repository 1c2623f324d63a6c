"""
Relational schema for Autoplanner.

The DDL sticks to types both SQLite and PostgreSQL accept: identifiers are
application-generated UUID strings, timestamps are ISO 8601 UTC strings,
booleans are 0/1 integers and structured payloads are JSON text.
"""

from typing import List

TABLES = [
    "user_contexts",
    "oauth_accounts",
    "account_usage_log",
    "executions",
    "audit_logs",
    "email_drafts",
    "calendar_proposals",
    "study_plans",
    "weekly_snapshots",
]

SCHEMA_STATEMENTS: List[str] = [
    """
    CREATE TABLE IF NOT EXISTS user_contexts (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL UNIQUE,
        email_oauth TEXT,
        calendar_id TEXT NOT NULL DEFAULT 'primary',
        study_notes_link TEXT,
        auto_send INTEGER NOT NULL DEFAULT 0,
        demo_mode INTEGER NOT NULL DEFAULT 1,
        work_hours TEXT NOT NULL DEFAULT '09:00-17:00',
        timezone TEXT NOT NULL DEFAULT 'UTC',
        default_oauth_account_id TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS oauth_accounts (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        provider TEXT NOT NULL CHECK(provider IN ('gmail', 'google')),
        email TEXT NOT NULL,
        access_token TEXT NOT NULL,
        refresh_token TEXT,
        token_expiry TEXT,
        scope TEXT NOT NULL DEFAULT '',
        is_default INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_oauth_accounts_user ON oauth_accounts(user_id)",
    """
    CREATE TABLE IF NOT EXISTS account_usage_log (
        id TEXT PRIMARY KEY,
        oauth_account_id TEXT NOT NULL REFERENCES oauth_accounts(id) ON DELETE CASCADE,
        user_id TEXT NOT NULL,
        action TEXT NOT NULL,
        api_endpoint TEXT,
        timestamp TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS executions (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        user_command TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending'
            CHECK(status IN ('pending', 'running', 'completed', 'failed')),
        execution_plan TEXT,
        final_summary TEXT,
        dashboard_snapshot TEXT,
        oauth_account_id TEXT,
        account_email TEXT,
        created_at TEXT NOT NULL,
        completed_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_executions_user_created ON executions(user_id, created_at)",
    """
    CREATE TABLE IF NOT EXISTS audit_logs (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        agent TEXT NOT NULL,
        action TEXT NOT NULL,
        input_summary TEXT,
        output_summary TEXT,
        oauth_account_id TEXT,
        user_email TEXT,
        drafts_created INTEGER,
        events_changed INTEGER,
        run_id TEXT,
        timestamp TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_audit_logs_user_timestamp ON audit_logs(user_id, timestamp)",
    "CREATE INDEX IF NOT EXISTS idx_audit_logs_run ON audit_logs(run_id)",
    """
    CREATE TABLE IF NOT EXISTS email_drafts (
        id TEXT PRIMARY KEY,
        execution_id TEXT NOT NULL REFERENCES executions(id) ON DELETE CASCADE,
        to_address TEXT NOT NULL,
        subject TEXT NOT NULL,
        draft_body TEXT NOT NULL,
        priority_score INTEGER NOT NULL DEFAULT 5,
        sent INTEGER NOT NULL DEFAULT 0,
        auto_send INTEGER NOT NULL DEFAULT 0,
        from_account_id TEXT,
        sent_at TEXT,
        confirmed_by_user INTEGER NOT NULL DEFAULT 0,
        confirmation_timestamp TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS calendar_proposals (
        id TEXT PRIMARY KEY,
        execution_id TEXT NOT NULL REFERENCES executions(id) ON DELETE CASCADE,
        event_id TEXT NOT NULL,
        old_slot TEXT NOT NULL,
        new_slot TEXT NOT NULL,
        reason TEXT,
        applied INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS study_plans (
        id TEXT PRIMARY KEY,
        execution_id TEXT NOT NULL REFERENCES executions(id) ON DELETE CASCADE,
        subject TEXT NOT NULL,
        schedule TEXT NOT NULL,
        flashcards_csv TEXT,
        practice_questions TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS weekly_snapshots (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        week_start TEXT NOT NULL,
        week_end TEXT NOT NULL,
        execution_plan TEXT,
        weekly_plan TEXT,
        email_summary TEXT,
        study_plan TEXT,
        metrics TEXT,
        timeline TEXT,
        dashboard_snapshot TEXT,
        pdf_path TEXT NOT NULL DEFAULT '',
        public_url TEXT NOT NULL DEFAULT '',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (user_id, week_start)
    )
    """,
]


def init_schema(db) -> None:
    """Create every table and index. Safe to call on an initialised database."""
    db.execute_script(SCHEMA_STATEMENTS)
