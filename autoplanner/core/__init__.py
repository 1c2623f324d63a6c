"""
Core module for Autoplanner
Contains database, configuration, persistence and model definitions
"""

from .config import Config
from .database import Database, SQLiteDatabase, PostgreSQLDatabase, get_database
from .schema import init_schema
from .repository import Repository
from .accounts import AccountStore, AccountValidation, AccountValidationError
from .models import (
    AuditLog,
    CalendarProposal,
    EmailDraft,
    Execution,
    OAuthAccount,
    SessionContext,
    StudyPlan,
    UserContext,
    WeeklySnapshot,
)

__all__ = [
    'Config', 'Database', 'SQLiteDatabase', 'PostgreSQLDatabase', 'get_database',
    'init_schema', 'Repository',
    'AccountStore', 'AccountValidation', 'AccountValidationError',
    'AuditLog', 'CalendarProposal', 'EmailDraft', 'Execution', 'OAuthAccount',
    'SessionContext', 'StudyPlan', 'UserContext', 'WeeklySnapshot',
]
