"""Manual checkpoints: ask the operator to proceed, skip the step, or abort.

The engine only talks to the ``CheckpointController`` protocol. The CLI
injects ``InteractiveCheckpointController`` for a terminal session, and
tests or non-interactive callers inject a deterministic stub. Detecting a
missing TTY is the caller's job (see ``is_interactive``).
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Iterable, Mapping
from enum import StrEnum
from typing import Protocol

import typer
from rich.console import Console
from rich.panel import Panel

from contractspec_cli.cli.ui import select_with_arrows
from contractspec_cli.vibe.models import WorkflowContext, WorkflowStep

logger = logging.getLogger(__name__)


class CheckpointChoice(StrEnum):
    """Operator decision at a manual checkpoint."""

    PROCEED = "proceed"
    SKIP = "skip"
    ABORT = "abort"


CHECKPOINT_OPTIONS: dict[str, str] = {
    CheckpointChoice.PROCEED.value: "Proceed",
    CheckpointChoice.SKIP.value: "Skip Step",
    CheckpointChoice.ABORT.value: "Abort Workflow",
}


class CheckpointController(Protocol):
    """Decides what happens at a manual checkpoint."""

    async def ask(self, step: WorkflowStep, context: WorkflowContext) -> CheckpointChoice: ...


Selector = Callable[..., str]


class InteractiveCheckpointController:
    """Prompt the operator with an arrow-key selection."""

    def __init__(self, console: Console | None = None, selector: Selector = select_with_arrows):
        self.console = console or Console()
        self._selector = selector

    async def ask(self, step: WorkflowStep, context: WorkflowContext) -> CheckpointChoice:
        if step.manual_message:
            self.console.print(
                Panel(
                    step.manual_message,
                    title=f"[bold yellow]Manual checkpoint: {step.label}[/bold yellow]",
                    border_style="yellow",
                )
            )

        # Blocks the event loop; must not move to a worker thread, which Ctrl-C
        # cannot interrupt while readchar waits for a key.
        try:
            answer = self._selector(
                CHECKPOINT_OPTIONS,
                prompt_text=f"{step.label}: how do you want to continue?",
                default_key=CheckpointChoice.PROCEED.value,
                console=self.console,
            )
        except typer.Exit:
            logger.info(f"Checkpoint '{step.id}' cancelled; treating as abort")
            return CheckpointChoice.ABORT

        return CheckpointChoice(answer)


class StaticCheckpointController:
    """Answer every checkpoint with the same choice."""

    def __init__(self, choice: CheckpointChoice | str):
        self.choice = CheckpointChoice(choice)
        self.asked: list[str] = []

    async def ask(self, step: WorkflowStep, context: WorkflowContext) -> CheckpointChoice:
        self.asked.append(step.id)
        return self.choice


class ScriptedCheckpointController:
    """Answer checkpoints from a fixed script, in order, keyed by step id or sequence."""

    def __init__(self, choices: Iterable[CheckpointChoice | str] | Mapping[str, CheckpointChoice | str]):
        if isinstance(choices, Mapping):
            self._by_step = {k: CheckpointChoice(v) for k, v in choices.items()}
            self._queue: list[CheckpointChoice] = []
        else:
            self._by_step = {}
            self._queue = [CheckpointChoice(c) for c in choices]
        self.asked: list[str] = []

    async def ask(self, step: WorkflowStep, context: WorkflowContext) -> CheckpointChoice:
        self.asked.append(step.id)
        if step.id in self._by_step:
            return self._by_step[step.id]
        if not self._queue:
            raise LookupError(f"No scripted checkpoint answer left for step '{step.id}'")
        return self._queue.pop(0)


_CI_ENV_VARS = [
    "CI",
    "GITHUB_ACTIONS",
    "JENKINS_HOME",
    "GITLAB_CI",
    "CIRCLECI",
    "BUILDKITE",
]


def is_interactive() -> bool:
    """Return True when stdin is a TTY and no CI environment is detected."""
    if not sys.stdin.isatty():
        return False

    for var in _CI_ENV_VARS:
        if os.getenv(var):
            return False

    return True


__all__ = [
    "CHECKPOINT_OPTIONS",
    "CheckpointChoice",
    "CheckpointController",
    "InteractiveCheckpointController",
    "ScriptedCheckpointController",
    "StaticCheckpointController",
    "is_interactive",
]
