"""CLI interface for adaptbeat.

Quick start:
    adaptbeat status -a main               # Current interest level and next beat
    adaptbeat beat -a main --replies 2     # Record a cycle that found 2 replies
    adaptbeat beat -a main --if-due        # Record a quiet cycle only when due
    adaptbeat human -a main                # A human just wrote in
    adaptbeat history -a main -n 20        # Recent scheduling decisions
    adaptbeat context ~/agents/workspace   # Combined .shrimp/ memory
"""

import logging
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adaptbeat import __version__
from adaptbeat.config import get_settings
from adaptbeat.heartbeat import (
    AdaptiveHeartbeat,
    AssessmentContext,
    HeartbeatStateStore,
    InterestLevel,
)
from adaptbeat.heartbeat.state import now_ms

app = typer.Typer(
    name="adaptbeat",
    help="Adaptive heartbeat scheduling for autonomous agents",
    no_args_is_help=True,
)

console = Console()

LEVEL_COLORS = {
    InterestLevel.HIGH: "red",
    InterestLevel.MEDIUM: "yellow",
    InterestLevel.LOW: "cyan",
    InterestLevel.NONE: "dim",
}

AgentOption = typer.Option(None, "--agent", "-a", help="Agent identifier (defaults to config)")
StateDirOption = typer.Option(None, "--state-dir", help="Override the state root directory")


def _heartbeat(state_dir: Path | None) -> AdaptiveHeartbeat:
    return AdaptiveHeartbeat(HeartbeatStateStore(state_dir=state_dir))


def _agent(agent: str | None) -> str:
    return agent or get_settings().default_agent


def _format_ts(ms: int | None) -> str:
    if not ms:
        return "[dim]never[/dim]"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Adaptive heartbeat scheduling for autonomous agents."""
    level = "DEBUG" if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"adaptbeat v{__version__}")


@app.command()
def status(
    agent: str = AgentOption,
    state_dir: Path = StateDirOption,
) -> None:
    """Show an agent's heartbeat state."""
    agent_id = _agent(agent)
    heartbeat = _heartbeat(state_dir)
    now = now_ms()
    state = heartbeat.load(agent_id, now)
    color = LEVEL_COLORS[state.interest_level]

    table = Table(title=f"Heartbeat - {agent_id}")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Interest", f"[{color}]{state.interest_level.value}[/{color}]")
    table.add_row("Reason", state.interest_reason)
    table.add_row("Since", _format_ts(state.interest_since))
    table.add_row("Interval", f"{state.current_interval} min")
    table.add_row("Last beat", _format_ts(state.last_beat))
    table.add_row("Next beat", _format_ts(state.next_beat))
    table.add_row("Last human message", _format_ts(state.last_human_message))
    table.add_row("Hibernating", "[yellow]yes[/yellow]" if state.hibernating else "no")
    table.add_row("Pending tasks", str(len(state.watchlist.pending_tasks)))
    table.add_row("Tracked posts", str(len(state.watchlist.moltbook_post_ids)))
    table.add_row(
        "Beat due",
        "[green]yes[/green]" if heartbeat.should_beat(state, now) else "no",
    )
    console.print(table)


@app.command()
def beat(
    agent: str = AgentOption,
    state_dir: Path = StateDirOption,
    replies: int = typer.Option(0, "--replies", "-r", help="Replies found this cycle"),
    interesting: bool = typer.Option(False, "--interesting", help="Found something interesting"),
    nothing: bool = typer.Option(False, "--nothing", help="Cycle found nothing"),
    error: bool = typer.Option(False, "--error", help="Cycle hit an error"),
    trigger: str = typer.Option("manual", "--trigger", "-t", help="What triggered this beat"),
    if_due: bool = typer.Option(False, "--if-due", help="Only record when a beat is due"),
) -> None:
    """Assess one heartbeat cycle and record it.

    Examples:
        adaptbeat beat -a main --replies 3
        adaptbeat beat -a main --nothing --if-due -t cron
    """
    agent_id = _agent(agent)
    heartbeat = _heartbeat(state_dir)
    now = now_ms()

    if if_due and not heartbeat.should_beat(heartbeat.load(agent_id, now), now):
        console.print("[dim]Not due yet - skipped.[/dim]")
        return

    context = AssessmentContext(
        found_replies=replies,
        found_interesting=interesting,
        found_nothing=nothing,
        error=error,
    )
    state, assessment = heartbeat.run_cycle(agent_id, context, trigger=trigger, now=now)
    color = LEVEL_COLORS[assessment.level]

    body = (
        f"[{color}]{assessment.level.value}[/{color}] - {assessment.reason}\n"
        f"Next beat in {assessment.interval} min ({_format_ts(state.next_beat)})"
    )
    if state.hibernating:
        body += "\n[yellow]Entering hibernation until a human returns.[/yellow]"
    console.print(Panel(body, title=f"Beat recorded - {agent_id}", border_style=color))


@app.command()
def human(
    agent: str = AgentOption,
    state_dir: Path = StateDirOption,
) -> None:
    """Record human activity: wake from hibernation and check soon."""
    agent_id = _agent(agent)
    heartbeat = _heartbeat(state_dir)
    now = now_ms()
    heartbeat.record_human_activity(agent_id, now)
    state = heartbeat.load(agent_id, now)
    console.print(f"[green]Human activity recorded for {agent_id}.[/green]")
    console.print(f"[dim]Next beat: {_format_ts(state.next_beat)}[/dim]")


@app.command()
def history(
    agent: str = AgentOption,
    state_dir: Path = StateDirOption,
    limit: int = typer.Option(10, "--limit", "-n", help="Number of entries to show"),
    level: str = typer.Option(None, "--level", "-l", help="Only show this interest level"),
) -> None:
    """Show recent scheduling decisions."""
    agent_id = _agent(agent)
    state = _heartbeat(state_dir).load(agent_id)

    entries = state.history
    if level:
        try:
            wanted = InterestLevel(level.lower())
        except ValueError:
            console.print(f"[red]Unknown interest level: {level}[/red]")
            raise typer.Exit(1)
        entries = [e for e in entries if e.interest_level == wanted]

    entries = entries[-limit:] if limit > 0 else []
    if not entries:
        console.print("[dim]No heartbeat history yet.[/dim]")
        return

    table = Table(title=f"Heartbeat History - {agent_id}")
    table.add_column("Time", style="dim")
    table.add_column("Trigger")
    table.add_column("Level")
    table.add_column("Interval", justify="right")
    table.add_column("Reason")
    for entry in entries:
        color = LEVEL_COLORS[entry.interest_level]
        table.add_row(
            _format_ts(entry.timestamp),
            entry.trigger,
            f"[{color}]{entry.interest_level.value}[/{color}]",
            f"{entry.interval_set} min",
            entry.reason,
        )
    console.print(table)


@app.command()
def context(
    workspace: Path = typer.Argument(None, help="Workspace directory (default: config or cwd)"),
) -> None:
    """Print the combined .shrimp/ workspace context."""
    from adaptbeat.context_engine import WorkspaceContextLoader

    if workspace is None:
        configured = get_settings().workspace_dir
        workspace = Path(configured).expanduser() if configured else Path.cwd()

    files = WorkspaceContextLoader(workspace).build_context_files()
    if not files:
        console.print(f"[dim]No .shrimp/ context found in {workspace}[/dim]")
        return

    for f in files:
        console.print(Panel(f["content"], title=f["path"], border_style="cyan"))


if __name__ == "__main__":
    app()
