"""
Autoplanner FastAPI Backend

This is the main entry point for the API server that exposes the
orchestrator and the weekly compiler to the frontend.

Architecture:
- FastAPI handles HTTP routing and request/response validation
- Pydantic schemas ensure type safety
- The orchestrator and agents handle all business logic
- Database provides persistence via SQLite or PostgreSQL

Run with:
    uvicorn backend.main:app --reload --port 8000

Or:
    python -m backend.main
"""

import sys
import logging
from pathlib import Path
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Add project root to path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from backend.routers import (
    commands_router,
    executions_router,
    weekly_router,
    accounts_router,
    context_router,
)
from backend.dependencies import get_database, get_config

logger = logging.getLogger("autoplanner.api")

ALLOWED_ORIGINS = [
    "http://localhost:5173",  # Vite dev server
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Runs startup and shutdown tasks:
    - Startup: Verify database connection
    - Shutdown: Clean up resources
    """
    # Startup
    try:
        db = get_database()
        config = get_config()
        logger.info(f"Database connected ({db.dialect})")
        logger.info(f"Config loaded from: {config.config_dir}")
    except FileNotFoundError as e:
        logger.error(str(e))
        # Allow app to start but endpoints will fail until the database exists

    yield

    logger.info("Shutting down...")


def register_routes(app: FastAPI) -> None:
    """Attach routers and the root/health endpoints to an app"""
    app.include_router(commands_router)
    app.include_router(executions_router)
    app.include_router(weekly_router)
    app.include_router(accounts_router)
    app.include_router(context_router)

    @app.get("/")
    async def root():
        """API root - returns basic info and available endpoints."""
        return {
            "name": "Autoplanner API",
            "version": "0.1.0",
            "docs": "/docs",
            "endpoints": {
                "commands": "/commands",
                "executions": "/executions",
                "weekly": "/weekly",
                "accounts": "/accounts",
                "context": "/context",
            }
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring."""
        try:
            db = get_database()
            db.execute_one("SELECT 1")
            return {"status": "healthy", "database": "connected"}
        except Exception as e:
            return {"status": "unhealthy", "error": str(e)}


# Create FastAPI app
app = FastAPI(
    title="Autoplanner API",
    description="""
    Command-driven personal automation API.

    ## Features

    - **Commands**: Run a free-text command through email, calendar and study agents
    - **Executions**: Browse past runs, their dashboard snapshots and audit trails
    - **Weekly**: Compile a weekly report from the week's runs
    - **Accounts**: Manage connected mail/calendar accounts
    - **Context**: Per-user settings (calendar, notes link, auto-send, work hours)

    ## Command Examples

    - "Triage my inbox"
    - "Reschedule low priority meetings today"
    - "Create a study plan for my ML midterm"
    - "Plan my week"

    The acting user is read from the X-User-Id header.
    """,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_routes(app)


# Allow running directly with: python -m backend.main
if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        "backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
