"""
Integration tests for the planner CLI.

Commands run through Typer's CliRunner with the module-level Config swapped
for one pointing at a temporary directory.
"""

import pytest
from pathlib import Path

from rich.console import Console
from typer.testing import CliRunner

import sys
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import planner
from autoplanner.core import Config
from autoplanner.core.schema import TABLES


runner = CliRunner()


@pytest.fixture
def cli_config(tmp_path, monkeypatch):
    config = Config(tmp_path / "config")
    config.set("database_path", str(tmp_path / "cli.db"))
    monkeypatch.setattr(planner, "config", config)
    monkeypatch.setattr(planner, "_repository", None)
    monkeypatch.setattr(planner, "console", Console(width=300))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    return config


class TestInitDb:
    """Tests for `planner init-db`."""

    def test_reports_created_tables(self, cli_config, tmp_path):
        result = runner.invoke(planner.app, ["init-db"])

        assert result.exit_code == 0
        assert (tmp_path / "cli.db").exists()
        assert f"({len(TABLES)} tables)" in result.output
        for table in TABLES:
            assert table in result.output

    def test_rerun_is_safe(self, cli_config):
        runner.invoke(planner.app, ["init-db"])
        result = runner.invoke(planner.app, ["init-db"])

        assert result.exit_code == 0
        assert f"({len(TABLES)} tables)" in result.output
