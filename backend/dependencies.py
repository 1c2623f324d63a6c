"""
Dependency injection for FastAPI endpoints.

Provides singleton instances of Database and Config, plus per-request
Repository, AccountStore, Orchestrator and WeeklyCompiler built on them.

Pattern: **Dependency Injection** - FastAPI's Depends() mechanism
allows us to inject shared resources into route handlers without
global state, making the code testable and maintainable.
"""

from functools import lru_cache
import sys
from pathlib import Path

from fastapi import Depends, Header

# Add project root to path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from autoplanner.core import AccountStore, Config, Database, Repository, UserContext, get_database as open_database
from autoplanner.agents.orchestrator import Orchestrator
from autoplanner.dashboard import WeeklyCompiler


@lru_cache()
def get_config() -> Config:
    """
    Get cached Config instance.

    lru_cache ensures we only create one Config instance
    for the lifetime of the application (singleton pattern).
    """
    return Config()


@lru_cache()
def get_database() -> Database:
    """
    Get cached Database instance.

    PostgreSQL when DATABASE_URL is set, otherwise the SQLite file named in
    settings.json.
    """
    return open_database(get_config().get_database_path())


def get_repository(db: Database = Depends(get_database)) -> Repository:
    return Repository(db)


def get_account_store(db: Database = Depends(get_database),
                      config: Config = Depends(get_config)) -> AccountStore:
    margin = config.get("token_expiry_margin_minutes", section="preferences", default=5)
    return AccountStore(db, expiry_margin_minutes=margin)


def get_orchestrator(
    repository: Repository = Depends(get_repository),
    accounts: AccountStore = Depends(get_account_store),
    config: Config = Depends(get_config),
) -> Orchestrator:
    """
    Get an Orchestrator for one request.

    Agents are stateless, so a fresh instance per request shares nothing but
    the DB and Config singletons.
    """
    return Orchestrator(repository, account_store=accounts, config=config)


def get_weekly_compiler(repository: Repository = Depends(get_repository)) -> WeeklyCompiler:
    return WeeklyCompiler(repository)


def get_current_user_id(
    x_user_id: str = Header(default="", alias="X-User-Id"),
    config: Config = Depends(get_config),
) -> str:
    """
    Acting user for the request.

    Authentication happens in front of this service; the authenticated user id
    arrives in the X-User-Id header. Without it the configured local user is
    used.
    """
    return x_user_id or config.get("default_user_id", default="local-user")


def get_user_context(
    user_id: str = Depends(get_current_user_id),
    repository: Repository = Depends(get_repository),
    config: Config = Depends(get_config),
) -> UserContext:
    """Stored context for the acting user, or defaults if none saved yet"""
    context = repository.get_user_context(user_id)
    if context is None:
        context = UserContext(
            user_id=user_id,
            work_hours=config.get("work_hours", section="preferences", default="09:00-17:00"),
            timezone=config.get("timezone", default="UTC"),
        )
    return context
