"""Command-line interface for Claude Code Worktrees."""

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from claude_code_worktrees import __version__
from claude_code_worktrees.config import constants
from claude_code_worktrees.config.settings import Settings, load_settings
from claude_code_worktrees.core.lifecycle import AgentLifecycleManager
from claude_code_worktrees.errors import WorktreeFarmError
from claude_code_worktrees.integrations.git import find_repo_root
from claude_code_worktrees.models import AgentStatus
from claude_code_worktrees.utils import format_age

app = typer.Typer(
    rich_markup_mode="rich",
    help="Run parallel coding agents in isolated git worktrees",
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"Claude Code Worktrees v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Manage agents, their worktrees and their branches."""


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _manager(repo: Optional[Path]) -> AgentLifecycleManager:
    settings = load_settings()
    _configure_logging(settings)
    try:
        return AgentLifecycleManager(find_repo_root(repo or Path.cwd()), settings)
    except WorktreeFarmError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


RepoOption = typer.Option(
    None,
    "--repo", "-r",
    help="Path inside the repository (defaults to the current directory)",
    envvar="CWT_REPO",
)


@app.command("list")
def list_agents(
    repo: Optional[Path] = RepoOption,
    status: Optional[AgentStatus] = typer.Option(
        None,
        "--status", "-s",
        help="Only show agents with this status",
    ),
) -> None:
    """List recorded agents."""
    manager = _manager(repo)
    agents = manager.list_by_status(status) if status else manager.list_agents()

    if not agents:
        console.print("[yellow]No agents recorded[/yellow]")
        return

    table = Table(title="Agents", box=box.ROUNDED)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Status", style="green")
    table.add_column("Branch", style="magenta")
    table.add_column("Base", style="blue")
    table.add_column("Age", style="yellow")
    table.add_column("Task")

    for agent in agents:
        emoji = constants.STATUS_EMOJIS.get(agent.status.value, "")
        table.add_row(
            agent.id,
            f"{emoji} {agent.status.value}",
            agent.branch,
            agent.base_branch,
            format_age(agent.created_at),
            agent.task,
        )
    console.print(table)


@app.command()
def new(
    task: str = typer.Argument(..., help="Task description for the agent"),
    repo: Optional[Path] = RepoOption,
) -> None:
    """Create a worktree and branch for a new agent."""
    manager = _manager(repo)
    try:
        agent = manager.create_agent(task)
    except (WorktreeFarmError, ValueError, OSError) as e:
        console.print(f"[red]Failed to create agent: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓ Created agent {agent.id}[/green]")
    console.print(f"  Branch:   {agent.branch}")
    console.print(f"  Worktree: {agent.worktree_path}")


@app.command()
def close(
    agent_id: str = typer.Argument(..., help="Agent identifier"),
    repo: Optional[Path] = RepoOption,
) -> None:
    """Remove an agent's worktree and branch and forget it."""
    manager = _manager(repo)
    try:
        manager.remove_agent(agent_id)
    except WorktreeFarmError as e:
        console.print(f"[red]Failed to close agent: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓ Closed agent {agent_id}[/green]")


@app.command()
def merge(
    agent_id: str = typer.Argument(..., help="Agent identifier"),
    repo: Optional[Path] = RepoOption,
    keep: bool = typer.Option(
        False,
        "--keep",
        help="Keep the worktree and branch after merging",
    ),
) -> None:
    """Merge an agent's branch into its base branch, then close it."""
    manager = _manager(repo)
    try:
        agent = manager.merge_agent(agent_id)
    except WorktreeFarmError as e:
        console.print(f"[red]Merge failed: {e}[/red]")
        console.print("[yellow]The agent stays in 'merging'; resolve the repository and retry[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]✓ Merged {agent.branch} into {agent.base_branch}[/green]")

    if not keep:
        manager.remove_agent(agent_id)
        console.print(f"[green]✓ Closed agent {agent_id}[/green]")


@app.command()
def diff(
    agent_id: str = typer.Argument(..., help="Agent identifier"),
    repo: Optional[Path] = RepoOption,
) -> None:
    """Show changes on an agent's branch since it left its base."""
    manager = _manager(repo)
    try:
        output = manager.diff(agent_id)
    except WorktreeFarmError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    typer.echo(output)


@app.command()
def commits(
    agent_id: str = typer.Argument(..., help="Agent identifier"),
    repo: Optional[Path] = RepoOption,
) -> None:
    """List commits on an agent's branch that its base lacks."""
    manager = _manager(repo)
    try:
        output = manager.commits(agent_id)
    except WorktreeFarmError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    if output:
        typer.echo(output)
    else:
        console.print("[yellow]No new commits[/yellow]")


@app.command()
def conflicts(
    agent_id: str = typer.Argument(..., help="Agent identifier"),
    repo: Optional[Path] = RepoOption,
) -> None:
    """Check whether merging an agent's branch would conflict."""
    manager = _manager(repo)
    try:
        conflicting = manager.has_conflicts(agent_id)
    except WorktreeFarmError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if conflicting:
        console.print(f"[red]✗ {agent_id} conflicts with its base branch[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓ {agent_id} merges cleanly[/green]")


@app.command("set-status")
def set_status(
    agent_id: str = typer.Argument(..., help="Agent identifier"),
    status: AgentStatus = typer.Argument(..., help="New status"),
    repo: Optional[Path] = RepoOption,
) -> None:
    """Overwrite an agent's recorded status."""
    manager = _manager(repo)
    try:
        agent = manager.update_status(agent_id, status)
    except WorktreeFarmError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓ {agent.id} is now {agent.status.value}[/green]")


@app.command()
def show_config() -> None:
    """Show current configuration from all sources."""
    settings = load_settings()

    table = Table(
        title="Current Configuration",
        box=box.ROUNDED,
        show_lines=True,
    )
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Source", style="dim")

    prefix = settings.model_config.get("env_prefix", "CWT_")
    for field_name in type(settings).model_fields:
        value = getattr(settings, field_name)
        env_key = f"{prefix}{field_name.upper()}"
        source = f"env: {env_key}" if os.getenv(env_key) is not None else "default"
        if field_name in settings.model_fields_set and source == "default":
            source = "explicit"

        display_value = ", ".join(str(v) for v in value) if isinstance(value, list) else str(value)
        table.add_row(field_name, display_value, source)

    console.print(table)
    console.print("\n[dim]Environment:[/dim]")
    console.print(f"  Config file: {settings.model_config.get('env_file', '.env')}")
    console.print(f"  Prefix: {prefix}")


if __name__ == "__main__":
    app()
