"""
Rich formatter module for the Autoplanner dashboard.

Renders run results, dashboard snapshots and weekly reports in the terminal.
Works on the dict form of snapshots so stored and freshly compiled snapshots
render the same way.
"""

from typing import Any, Dict, List, Optional
import re

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from autoplanner.core.models import Execution, WeeklySnapshot


# Execution status badges
STATUS_STYLES = {
    "pending": "[dim]pending[/dim]",
    "running": "[yellow]running[/yellow]",
    "completed": "[green]completed[/green]",
    "failed": "[red bold]failed[/red bold]",
}

# Space before "N) " in a single-line plan
STEP_BOUNDARY = re.compile(r"\s(?=\d+\) )")

QUICK_ACTION_ICONS = {
    "email_draft": "✉",
    "calendar_proposal": "◷",
    "download_csv": "⇩",
    "study_schedule": "☰",
}


class DashboardFormatter:
    """
    Rich-based formatter for run dashboards and weekly reports.
    """

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize formatter.

        Args:
            console: Rich Console instance (creates default if not provided)
        """
        self.console = console or Console()

    def format_plan(self, execution_plan: str) -> Panel:
        """Execution plan, one numbered step per line"""
        text = Text("\n".join(STEP_BOUNDARY.split(execution_plan)))

        return Panel(
            text,
            title="[bold]Execution Plan[/bold]",
            border_style="blue",
            padding=(0, 1),
        )

    def format_email_summary(self, summary: Dict[str, Any]) -> Panel:
        table = Table(show_header=False, box=None, padding=(0, 1), expand=True)
        table.add_column("From", width=28)
        table.add_column("Subject", ratio=1)

        for email in summary.get("top_urgent") or []:
            table.add_row(f"[dim]{email.get('sender', '')}[/dim]", f"[red]{email.get('subject', '')}[/red]")

        footer = (f"[white]{summary.get('drafts_count', 0)} drafts[/white] │ "
                  f"[green]{summary.get('replies_sent', 0)} sent[/green]")
        if not summary.get("top_urgent"):
            table.add_row("", "[dim]No urgent email[/dim]")
        table.add_row("", footer)

        return Panel(
            table,
            title="[bold]Email[/bold]",
            border_style="red",
            padding=(0, 1),
        )

    def format_calendar_summary(self, summary: Dict[str, Any]) -> Panel:
        lines = [
            f"Events today      [cyan]{summary.get('events_today', 0)}[/cyan]",
            f"Proposed changes  [yellow]{summary.get('proposed_changes', 0)}[/yellow]",
        ]
        next_event = summary.get("next_event")
        if next_event:
            lines.append(f"Next              {next_event.get('title', '')} [dim]{next_event.get('start', '')}[/dim]")
        elif "next_event" in summary:
            lines.append("Next              [dim]Nothing upcoming[/dim]")

        return Panel(
            "\n".join(lines),
            title="[bold]Calendar[/bold]",
            border_style="cyan",
            padding=(0, 1),
        )

    def format_study_summary(self, summary: Dict[str, Any]) -> Panel:
        lines = [
            f"Subject             [bold]{summary.get('subject', '')}[/bold]",
            f"Days planned        {summary.get('days_planned', 0)}",
            f"Flashcards          {summary.get('flashcards_count', 0)}",
        ]
        if "practice_questions_count" in summary:
            lines.append(f"Practice questions  {summary['practice_questions_count']}")
        if "plans_created" in summary:
            lines.append(f"Plans created       {summary['plans_created']}")

        return Panel(
            "\n".join(lines),
            title="[bold]Study[/bold]",
            border_style="magenta",
            padding=(0, 1),
        )

    def format_quick_actions(self, actions: List[Dict[str, Any]], max_items: int = 10) -> Optional[Panel]:
        if not actions:
            return None

        table = Table(show_header=False, box=None, padding=(0, 1), expand=True)
        table.add_column("Icon", width=2)
        table.add_column("Label", ratio=1)

        for action in actions[:max_items]:
            table.add_row(QUICK_ACTION_ICONS.get(action.get("type"), "•"), action.get("label", ""))
        if len(actions) > max_items:
            table.add_row("", f"[dim]+ {len(actions) - max_items} more...[/dim]")

        return Panel(
            table,
            title=f"[bold]Quick Actions ({len(actions)})[/bold]",
            border_style="white",
            padding=(0, 1),
        )

    def format_audit_summary(self, summary: Dict[str, Any]) -> str:
        agents = ", ".join(summary.get("agents_used") or []) or "none"
        return f"[dim]{summary.get('total_actions', 0)} actions │ agents: {agents}[/dim]"

    def render_snapshot(self, snapshot: Dict[str, Any]) -> None:
        """Render a dashboard snapshot dict"""
        self.console.print(self.format_email_summary(snapshot.get("email_summary") or {}))
        self.console.print(self.format_calendar_summary(snapshot.get("calendar_summary") or {}))
        if snapshot.get("study_summary"):
            self.console.print(self.format_study_summary(snapshot["study_summary"]))

        actions_panel = self.format_quick_actions(snapshot.get("quick_actions") or [])
        if actions_panel:
            self.console.print(actions_panel)

        if snapshot.get("audit_summary"):
            self.console.print("─" * 60)
            self.console.print(self.format_audit_summary(snapshot["audit_summary"]), justify="center")
            self.console.print("─" * 60)

    def render_run(self, result: Dict[str, Any]) -> None:
        """
        Render an orchestrator result (OrchestratorOutput.to_dict()).

        Args:
            result: Run result dict
        """
        self.console.print(self.format_plan(result.get("execution_plan") or ""))
        self.console.print()
        if result.get("dashboard_snapshot"):
            self.render_snapshot(result["dashboard_snapshot"])
            self.console.print()
        self.console.print(Panel(
            result.get("final_summary") or "",
            title="[bold]Summary[/bold]",
            border_style="green",
            padding=(0, 1),
        ))
        self.console.print(f"[dim]Execution {result.get('execution_id')}[/dim]")

    def render_executions(self, executions: List[Execution]) -> None:
        if not executions:
            self.console.print("[dim]No executions yet.[/dim]")
            return

        table = Table(box=box.SIMPLE, expand=True)
        table.add_column("Created", width=20)
        table.add_column("Command", ratio=1)
        table.add_column("Status", width=10)
        table.add_column("ID", style="dim", width=10)

        for e in executions:
            created = e.created_at.strftime("%Y-%m-%d %H:%M") if e.created_at else "---"
            command = e.user_command[:50] + "..." if len(e.user_command) > 50 else e.user_command
            table.add_row(created, command, STATUS_STYLES.get(e.status, e.status), e.id[:8])

        self.console.print(table)

    def render_weekly(self, snapshot: WeeklySnapshot) -> None:
        """Render a weekly report"""
        self.console.print(Panel(
            snapshot.execution_plan,
            title=f"[bold]Week of {snapshot.week_start}[/bold]",
            title_align="center",
            border_style="blue",
            padding=(0, 2),
        ))

        metrics = snapshot.metrics
        stats = Table(show_header=False, box=None, padding=(0, 1))
        stats.add_column("Metric")
        stats.add_column("Value", justify="right")
        stats.add_row("Commands", str(metrics.get("total_commands", 0)))
        stats.add_row("[green]Succeeded[/green]", str(metrics.get("successful_executions", 0)))
        stats.add_row("[red]Failed[/red]", str(metrics.get("failed_executions", 0)))
        stats.add_row("Actions", str(metrics.get("total_actions", 0)))
        stats.add_row("Agents", str(metrics.get("unique_agents", 0)))
        stats.add_row("Avg time (s)", str(metrics.get("avg_execution_time", 0)))
        self.console.print(Panel(stats, title="[bold]Metrics[/bold]", border_style="yellow", padding=(0, 1)))

        self.console.print(self.format_email_summary(snapshot.email_summary))
        self.console.print(self.format_study_summary(snapshot.study_plan))

        if snapshot.timeline:
            timeline = Table(box=box.SIMPLE, expand=True)
            timeline.add_column("Date", width=12)
            timeline.add_column("Time", width=9)
            timeline.add_column("Command", ratio=1)
            timeline.add_column("Status", width=10)
            for day in snapshot.timeline:
                for event in day.get("events", []):
                    timeline.add_row(
                        day.get("date", ""),
                        event.get("time", ""),
                        event.get("command", ""),
                        STATUS_STYLES.get(event.get("status"), event.get("status", "")),
                    )
            self.console.print(timeline)
