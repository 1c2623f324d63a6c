"""
Dashboard module for Autoplanner.

Compiles per-run dashboard snapshots, weekly rollups, and Rich CLI output.
"""

from .compiler import DashboardCompiler, DashboardSnapshot, QuickAction
from .weekly import WeeklyCompiler, get_week_bounds
from .formatter import DashboardFormatter

__all__ = [
    'DashboardCompiler',
    'DashboardSnapshot',
    'QuickAction',
    'WeeklyCompiler',
    'get_week_bounds',
    'DashboardFormatter',
]
