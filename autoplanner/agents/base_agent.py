"""
Base Agent for Autoplanner
Defines the abstract base class and common interface for all pipeline agents.

The Agent Layer follows a sub-agent architecture pattern where:
- Each agent handles one domain (email, calendar, study, dashboard)
- Agents are stateless between runs; every output is built from the inputs
- Agents describe their own step in the execution plan
- All agents share consistent logging
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING
from datetime import datetime, timezone
import logging
import json

if TYPE_CHECKING:
    from .intent_parser import ParsedIntent


class BaseAgent(ABC):
    """
    Abstract base class for Autoplanner agents.

    Provides common functionality for:
    - Configuration access
    - Logging

    Subclasses must set AGENT_NAME (the name used in ParsedIntent.required_agents
    and in audit entries) and implement:
    - plan_step(): One-line description of the agent's step for the execution plan
    - execute(): The agent's actual work; signature varies per agent

    Design Pattern: Template Method
    - Base class defines the shared skeleton
    - Subclasses provide the domain work
    """

    AGENT_NAME = ""

    def __init__(self, config, name: str):
        """
        Initialize the base agent.

        Args:
            config: Config instance for settings/preferences (may be None)
            name: Short identifier for this agent (e.g., "email", "calendar")
        """
        self.config = config
        self.name = name
        self.logger = logging.getLogger(f"agent.{name}")

    @abstractmethod
    def plan_step(self, intent: 'ParsedIntent') -> str:
        """
        Describe this agent's step for the human-readable execution plan.

        Args:
            intent: The parsed command

        Returns:
            Sentence such as "EmailAgent: Triage inbox, ..." without numbering
        """
        pass

    @abstractmethod
    def execute(self, *args, **kwargs) -> Any:
        """Run the agent and return its structured output."""
        pass

    def log_action(self, action: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Log an action taken by this agent.

        Provides consistent action logging for debugging and audit trails.

        Args:
            action: Description of the action taken
            details: Optional additional details as key-value pairs
        """
        log_entry = {
            "agent": self.name,
            "action": action,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
        if details:
            log_entry["details"] = details

        self.logger.info(json.dumps(log_entry, default=str))

    def get_config_value(self, key: str, section: str = "preferences",
                         default: Any = None) -> Any:
        """
        Get a configuration value with fallback to default.

        Args:
            key: Configuration key to retrieve
            section: Configuration section (settings, preferences)
            default: Default value if key not found or no config is attached

        Returns:
            Configuration value or default
        """
        if self.config is None:
            return default
        return self.config.get(key, section=section, default=default)
