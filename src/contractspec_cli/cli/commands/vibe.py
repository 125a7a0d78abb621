"""CLI commands for ``contractspec vibe``.

``vibe run`` walks a guided workflow; ``vibe list`` shows the workflows
available in the current project.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from contractspec_cli.core.config import (
    ConfigError,
    default_track,
    load_workspace_config,
    locate_project_root,
)
from contractspec_cli.vibe.checkpoint import (
    CheckpointChoice,
    CheckpointController,
    InteractiveCheckpointController,
    StaticCheckpointController,
    is_interactive,
)
from contractspec_cli.vibe.engine import run_workflow_sync
from contractspec_cli.vibe.errors import WorkflowNotFoundError
from contractspec_cli.vibe.loader import find_workflow, load_workflows
from contractspec_cli.vibe.models import Track, WorkflowContext, WorkflowResult
from contractspec_cli.vibe.reporter import ConsoleReporter, NullReporter

console = Console()

app = typer.Typer(
    name="vibe",
    help="""
    Guided workflows that chain contractspec commands.

    \b
    USAGE EXAMPLES:
      contractspec vibe list
      contractspec vibe run validate
      contractspec vibe run release --track regulated
      contractspec vibe run spec-first --dry-run --json
    """,
    no_args_is_help=True,
)


def _resolve_root(root: Optional[Path]) -> Path:
    return root.resolve() if root is not None else locate_project_root()


def _fail(message: str, json_output: bool) -> NoReturn:
    """Report a pre-run error (as JSON when requested) and exit 1."""
    if json_output:
        print(json.dumps({"success": False, "error": message}, indent=2))
    else:
        console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def _print_summary(result: WorkflowResult) -> None:
    console.print()
    if result.success:
        console.print(f"[bold green]✓ Workflow '{result.workflow_id}' completed[/bold green]")
    elif result.aborted:
        console.print(f"[bold yellow]Workflow '{result.workflow_id}' aborted by operator[/bold yellow]")
    else:
        console.print(
            f"[bold red]✗ Workflow '{result.workflow_id}' failed at step '{result.failed_step}'[/bold red]"
        )
        if result.error is not None:
            console.print(f"[red]{result.error}[/red]")

    if result.steps_executed:
        console.print(f"[dim]Steps executed: {', '.join(result.steps_executed)}[/dim]")
    if result.artifacts_touched:
        console.print(f"[dim]Artifacts: {', '.join(result.artifacts_touched)}[/dim]")


@app.command("run")
def run(
    workflow_id: Annotated[str, typer.Argument(help="Workflow id (see 'contractspec vibe list')")],
    track: Annotated[Optional[str], typer.Option("--track", "-t", help="quick | product | regulated")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Walk the steps without running anything")] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output the result as JSON")] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Proceed through manual checkpoints without asking")] = False,
    root: Annotated[Optional[Path], typer.Option("--root", help="Project root (auto-detected if omitted)")] = None,
) -> None:
    """Run a guided workflow step by step."""
    project_root = _resolve_root(root)
    try:
        config = load_workspace_config(project_root)
        active_track = Track.parse(track) if track is not None else default_track(config)
    except (ConfigError, ValueError) as exc:
        _fail(str(exc), json_output)

    workflows = load_workflows(project_root)
    workflow = find_workflow(workflows, workflow_id)
    if workflow is None:
        _fail(str(WorkflowNotFoundError(workflow_id, [w.id for w in workflows])), json_output)

    checkpoint: CheckpointController
    if yes:
        checkpoint = StaticCheckpointController(CheckpointChoice.PROCEED)
    else:
        if workflow.has_checkpoints and not dry_run and (json_output or not is_interactive()):
            _fail(
                f"workflow '{workflow.id}' has manual checkpoints and no terminal is available. "
                "Re-run with --yes to proceed through them.",
                json_output,
            )
        checkpoint = InteractiveCheckpointController(console=console)

    context = WorkflowContext(
        root=project_root,
        config=config,
        dry_run=dry_run,
        track=active_track,
        json=json_output,
    )
    reporter = NullReporter() if json_output else ConsoleReporter(console)

    result = run_workflow_sync(workflow, context, checkpoint=checkpoint, reporter=reporter)

    if json_output:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_summary(result)

    if not result.success:
        raise typer.Exit(1)


@app.command("list")
def list_workflows(
    json_output: Annotated[bool, typer.Option("--json", help="Output JSON")] = False,
    root: Annotated[Optional[Path], typer.Option("--root", help="Project root (auto-detected if omitted)")] = None,
) -> None:
    """List built-in and project workflows."""
    project_root = _resolve_root(root)
    workflows = load_workflows(project_root)

    if json_output:
        payload = [
            {
                "id": w.id,
                "name": w.name,
                "description": w.description,
                "source": "builtin" if w.is_builtin else str(w.source),
                "steps": len(w.steps),
            }
            for w in workflows
        ]
        print(json.dumps(payload, indent=2))
        return

    table = Table(title="Workflows", show_lines=False)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Steps", justify="right")
    table.add_column("Source", style="dim")
    for w in workflows:
        table.add_row(w.id, w.name, str(len(w.steps)), "builtin" if w.is_builtin else str(w.source))
    console.print(table)


__all__ = ["app", "list_workflows", "run"]
