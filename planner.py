#!/usr/bin/env python3
"""
Autoplanner - Command Line Interface
Run commands through the agents, browse past runs and compile weekly reports
"""

import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent))

import typer
from rich.console import Console
from datetime import date
from typing import Optional
import logging
import os

from autoplanner.core import (
    AccountStore,
    AccountValidationError,
    Config,
    Repository,
    SessionContext,
    SQLiteDatabase,
    UserContext,
    get_database,
    init_schema,
)
from autoplanner.agents.orchestrator import Orchestrator
from autoplanner.dashboard import DashboardFormatter, WeeklyCompiler

# Initialize CLI app and console
app = typer.Typer(help="Autoplanner - Turn a command into email, calendar and study plans")

console = Console()
config = Config()

# Lazy-loaded repository (initialized on first use)
_repository: Optional[Repository] = None


def get_repository() -> Repository:
    """
    Get or initialize the Repository.

    Lazy so `init-db` can run before the database exists.
    """
    global _repository
    if _repository is None:
        _repository = Repository(get_database(config.get_database_path()))
    return _repository


def resolve_user(user: Optional[str]) -> str:
    return user or config.get("default_user_id", default="local-user")


def load_user_context(repository: Repository, user_id: str) -> UserContext:
    context = repository.get_user_context(user_id)
    if context is None:
        context = UserContext(
            user_id=user_id,
            work_hours=config.get("work_hours", section="preferences", default="09:00-17:00"),
        )
    return context


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log agent actions to stderr"),
):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


@app.command("init-db")
def init_db():
    """
    Create the database tables

    Uses PostgreSQL when DATABASE_URL is set, otherwise creates the SQLite file
    named in config/settings.json. Safe to run on an existing database.
    """
    try:
        if os.environ.get("DATABASE_URL") and os.environ.get("USE_SQLITE", "").lower() not in ("1", "true", "yes"):
            db = get_database()
            location = "PostgreSQL (DATABASE_URL)"
        else:
            db_path = config.get_database_path()
            db = SQLiteDatabase.create(db_path)
            location = str(db_path)

        init_schema(db)
        tables = db.get_table_names()
        console.print(f"[green]✓[/green] Database ready: {location} ({len(tables)} tables)")
        console.print(f"[dim]{', '.join(tables)}[/dim]")

    except Exception as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def run(
    command: str = typer.Argument(..., help="What you want done"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Acting user id"),
    account: Optional[str] = typer.Option(None, "--account", "-a", help="Connected account id"),
    speech: bool = typer.Option(False, "--speech", help="Command came from voice input"),
):
    """
    Run a command through the agents

    Examples:
      planner run "Triage my inbox"
      planner run "Reschedule low priority meetings today"
      planner run "Create a study plan for my ML midterm"
      planner run "Plan my week"
    """
    try:
        repository = get_repository()
        user_id = resolve_user(user)
        context = load_user_context(repository, user_id)
        margin = config.get("token_expiry_margin_minutes", section="preferences", default=5)

        orchestrator = Orchestrator(
            repository,
            account_store=AccountStore(repository.db, expiry_margin_minutes=margin),
            config=config,
        )
        session = SessionContext(
            user_id=user_id,
            user_context=context,
            account_id=account or context.default_oauth_account_id,
            source="speech" if speech else "text",
        )
        result = orchestrator.execute(command, session)

        DashboardFormatter(console).render_run(result.to_dict())

    except AccountValidationError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Execution failed: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def executions(
    user: Optional[str] = typer.Option(None, "--user", "-u", help="User id"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of executions to show"),
):
    """
    Show recent executions, newest first
    """
    try:
        rows = get_repository().list_executions(resolve_user(user), limit=limit)
        DashboardFormatter(console).render_executions(rows)

    except Exception as e:
        console.print(f"[red]Error loading executions: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def weekly(
    user: Optional[str] = typer.Option(None, "--user", "-u", help="User id"),
    week_start: Optional[str] = typer.Option(None, "--week-start", "-w", help="Any date in the week (YYYY-MM-DD)"),
):
    """
    Compile (or show) the weekly report

    A week is compiled once; later calls show the stored report.
    """
    try:
        target = date.fromisoformat(week_start) if week_start else None
    except ValueError:
        console.print(f"[red]Invalid date: {week_start} (expected YYYY-MM-DD)[/red]")
        raise typer.Exit(1)

    try:
        repository = get_repository()
        user_id = resolve_user(user)
        snapshot = WeeklyCompiler(repository).compile_weekly_snapshot(
            user_id, load_user_context(repository, user_id), week_start=target
        )
        DashboardFormatter(console).render_weekly(snapshot)

    except Exception as e:
        console.print(f"[red]Error compiling weekly report: {e}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
