"""Progress reporting for workflow runs.

The engine reports events; how they are shown is up to the reporter.
``ConsoleReporter`` prints human progress lines, ``NullReporter`` stays
silent so ``--json`` output is not interleaved with progress text.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Protocol

from rich.console import Console

from contractspec_cli.vibe.models import Workflow, WorkflowContext, WorkflowResult, WorkflowStep

logger = logging.getLogger(__name__)


class SkipReason(StrEnum):
    TRACK = "track"
    CONDITION = "condition"
    OPERATOR = "operator"


class WorkflowReporter(Protocol):
    """Observer for workflow lifecycle events."""

    def workflow_started(self, workflow: Workflow, context: WorkflowContext) -> None: ...

    def step_started(self, step: WorkflowStep, context: WorkflowContext) -> None: ...

    def step_skipped(self, step: WorkflowStep, reason: SkipReason) -> None: ...

    def checkpoint_dry_run(self, step: WorkflowStep) -> None: ...

    def step_completed(self, step: WorkflowStep, context: WorkflowContext) -> None: ...

    def step_failed(self, step: WorkflowStep, error: BaseException) -> None: ...

    def workflow_aborted(self, step: WorkflowStep) -> None: ...

    def workflow_finished(self, result: WorkflowResult) -> None: ...


class NullReporter:
    """No-op reporter."""

    def workflow_started(self, workflow: Workflow, context: WorkflowContext) -> None:
        return None

    def step_started(self, step: WorkflowStep, context: WorkflowContext) -> None:
        return None

    def step_skipped(self, step: WorkflowStep, reason: SkipReason) -> None:
        return None

    def checkpoint_dry_run(self, step: WorkflowStep) -> None:
        return None

    def step_completed(self, step: WorkflowStep, context: WorkflowContext) -> None:
        return None

    def step_failed(self, step: WorkflowStep, error: BaseException) -> None:
        return None

    def workflow_aborted(self, step: WorkflowStep) -> None:
        return None

    def workflow_finished(self, result: WorkflowResult) -> None:
        return None


class ConsoleReporter:
    """Render workflow progress on a Rich console and mirror events to the log."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def workflow_started(self, workflow: Workflow, context: WorkflowContext) -> None:
        logger.debug(f"workflow_started id={workflow.id} track={context.track} dry_run={context.dry_run}")
        self.console.print(f"\n[bold cyan]▶ {workflow.name}[/bold cyan] [dim](track: {context.track})[/dim]")
        if workflow.description:
            self.console.print(f"[dim]{workflow.description}[/dim]")
        if context.dry_run:
            self.console.print("[yellow]Dry run: no commands will be executed[/yellow]")

    def step_started(self, step: WorkflowStep, context: WorkflowContext) -> None:
        logger.debug(f"step_started id={step.id}")
        self.console.print(f"\n[bold]● {step.label}[/bold]")
        if context.dry_run and step.command:
            self.console.print(f"  [dim]would run:[/dim] {step.command}")

    def step_skipped(self, step: WorkflowStep, reason: SkipReason) -> None:
        logger.debug(f"step_skipped id={step.id} reason={reason}")
        if reason == SkipReason.OPERATOR:
            self.console.print(f"  [yellow]○ Skipped {step.label}[/yellow]")

    def checkpoint_dry_run(self, step: WorkflowStep) -> None:
        logger.debug(f"checkpoint_dry_run id={step.id}")
        self.console.print("  [yellow]⏸ Would pause for a manual checkpoint[/yellow]")

    def step_completed(self, step: WorkflowStep, context: WorkflowContext) -> None:
        logger.debug(f"step_completed id={step.id}")
        marker = "○ simulated" if context.dry_run else "✓ done"
        self.console.print(f"  [green]{marker}[/green]")

    def step_failed(self, step: WorkflowStep, error: BaseException) -> None:
        logger.debug(f"step_failed id={step.id} error={error!r}")
        self.console.print(f"  [red]✗ {step.label} failed:[/red] {error}")

    def workflow_aborted(self, step: WorkflowStep) -> None:
        logger.debug(f"workflow_aborted at={step.id}")
        self.console.print(f"\n[yellow]Workflow aborted at '{step.label}'[/yellow]")

    def workflow_finished(self, result: WorkflowResult) -> None:
        logger.debug(f"workflow_finished id={result.workflow_id} success={result.success}")


__all__ = ["ConsoleReporter", "NullReporter", "SkipReason", "WorkflowReporter"]
