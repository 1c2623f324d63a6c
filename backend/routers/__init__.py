"""
API routers for the Autoplanner backend.

Each router handles a specific domain:
- commands: Run a command through the orchestrator
- executions: Stored runs and their audit trails
- weekly: Weekly snapshot compilation
- accounts: Connected account management
- context: Per-user orchestration settings
"""

from .commands import router as commands_router
from .executions import router as executions_router
from .weekly import router as weekly_router
from .accounts import router as accounts_router
from .context import router as context_router

__all__ = [
    'commands_router',
    'executions_router',
    'weekly_router',
    'accounts_router',
    'context_router',
]
