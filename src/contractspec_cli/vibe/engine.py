"""Workflow execution engine.

Runs the steps of a workflow strictly in order. For each step:

1. Track gate: skip unless the step applies to ``context.track``.
2. Condition gate: skip when ``step.condition`` resolves to False.
3. Announce the step to the reporter.
4. Manual checkpoint: under dry-run only report that the run would pause;
   otherwise ask the checkpoint controller (proceed / skip / abort).
5. Execute ``execute`` or ``command`` (nothing under dry-run, where the step
   is recorded as ``"<id> (dry-run)"``).

The first failing step stops the run; later steps are never attempted.
An operator abort stops the run without an error.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import replace
from types import MappingProxyType
from typing import Any

from transitions import Machine

from contractspec_cli.vibe.checkpoint import (
    CheckpointChoice,
    CheckpointController,
    InteractiveCheckpointController,
)
from contractspec_cli.vibe.models import Workflow, WorkflowContext, WorkflowResult, WorkflowStep
from contractspec_cli.vibe.reporter import NullReporter, SkipReason, WorkflowReporter
from contractspec_cli.vibe.shell import CommandRunner, run_command

logger = logging.getLogger(__name__)

__all__ = [
    "RunLifecycle",
    "WorkflowEngine",
    "run_workflow",
    "run_workflow_sync",
]


class RunLifecycle:
    """Run status: ``running`` until it ends as succeeded, failed or aborted.

    The machine only defines transitions out of ``running``, so a finished run
    cannot change state again (``MachineError``).
    """

    STATES = ["running", "succeeded", "failed", "aborted"]
    TRANSITIONS = [
        {"trigger": "complete", "source": "running", "dest": "succeeded"},
        {"trigger": "fail", "source": "running", "dest": "failed"},
        {"trigger": "abort", "source": "running", "dest": "aborted"},
    ]

    def __init__(self) -> None:
        # Machine replaces this with the initial state.
        self.state: str = ""
        self._machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="running",
            auto_transitions=False,
        )

    @property
    def finished(self) -> bool:
        return self.state != "running"


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class WorkflowEngine:
    """Sequential step runner with track/condition gating and checkpoints.

    Args:
        checkpoint: Controller consulted at manual checkpoints (not used under
            dry-run). Defaults to an interactive terminal prompt.
        command_runner: Runs ``command`` steps. Defaults to ``run_command``.
        reporter: Receives progress events. Defaults to ``NullReporter``.
    """

    def __init__(
        self,
        checkpoint: CheckpointController | None = None,
        command_runner: CommandRunner | None = None,
        reporter: WorkflowReporter | None = None,
    ) -> None:
        self.checkpoint = checkpoint or InteractiveCheckpointController()
        self.command_runner = command_runner or run_command
        self.reporter = reporter or NullReporter()

    async def run(self, workflow: Workflow, context: WorkflowContext) -> WorkflowResult:
        """Run *workflow* and return a fresh result."""
        result = WorkflowResult(workflow_id=workflow.id)
        lifecycle = RunLifecycle()
        # Steps see earlier outputs through a read-only view; the caller's
        # context object is left untouched.
        run_context = replace(context, outputs=MappingProxyType(result.outputs))

        logger.info(f"Running workflow '{workflow.id}' ({len(workflow.steps)} steps, track={run_context.track})")
        self.reporter.workflow_started(workflow, run_context)

        for step in workflow.steps:
            if not step.applies_to(run_context.track):
                self.reporter.step_skipped(step, SkipReason.TRACK)
                continue

            if step.condition is not None:
                try:
                    should_run = await _resolve(step.condition(run_context))
                except Exception as exc:
                    return self._fail(result, lifecycle, step, exc)
                if not should_run:
                    self.reporter.step_skipped(step, SkipReason.CONDITION)
                    continue

            self.reporter.step_started(step, run_context)

            if step.manual_checkpoint:
                if run_context.dry_run:
                    self.reporter.checkpoint_dry_run(step)
                else:
                    choice = await self.checkpoint.ask(step, run_context)
                    if choice == CheckpointChoice.ABORT:
                        return self._abort(result, lifecycle, step)
                    if choice == CheckpointChoice.SKIP:
                        self.reporter.step_skipped(step, SkipReason.OPERATOR)
                        continue

            if run_context.dry_run:
                result.steps_executed.append(f"{step.id} (dry-run)")
                self.reporter.step_completed(step, run_context)
                continue

            try:
                await self._execute(step, run_context, result)
            except Exception as exc:
                return self._fail(result, lifecycle, step, exc)

            result.steps_executed.append(step.id)
            self.reporter.step_completed(step, run_context)

        lifecycle.complete()
        result.success = True
        result.status = lifecycle.state
        logger.info(f"Workflow '{workflow.id}' completed: {result.steps_executed}")
        self.reporter.workflow_finished(result)
        return result

    async def _execute(self, step: WorkflowStep, context: WorkflowContext, result: WorkflowResult) -> None:
        if step.execute is not None:
            returned = await _resolve(step.execute(context))
            result.record_outcome(step.id, returned)
        elif step.command is not None:
            await self.command_runner(step.command, context.root)

    def _fail(
        self,
        result: WorkflowResult,
        lifecycle: RunLifecycle,
        step: WorkflowStep,
        error: BaseException,
    ) -> WorkflowResult:
        lifecycle.fail()
        result.success = False
        result.status = lifecycle.state
        result.error = error
        result.failed_step = step.id
        logger.warning(f"Step '{step.id}' failed: {error}")
        self.reporter.step_failed(step, error)
        self.reporter.workflow_finished(result)
        return result

    def _abort(self, result: WorkflowResult, lifecycle: RunLifecycle, step: WorkflowStep) -> WorkflowResult:
        lifecycle.abort()
        result.success = False
        result.status = lifecycle.state
        result.aborted = True
        logger.info(f"Workflow '{result.workflow_id}' aborted by operator at '{step.id}'")
        self.reporter.workflow_aborted(step)
        self.reporter.workflow_finished(result)
        return result


async def run_workflow(
    workflow: Workflow,
    context: WorkflowContext,
    *,
    checkpoint: CheckpointController | None = None,
    command_runner: CommandRunner | None = None,
    reporter: WorkflowReporter | None = None,
) -> WorkflowResult:
    """Run *workflow* with a one-off engine."""
    engine = WorkflowEngine(checkpoint=checkpoint, command_runner=command_runner, reporter=reporter)
    return await engine.run(workflow, context)


def run_workflow_sync(workflow: Workflow, context: WorkflowContext, **kwargs: Any) -> WorkflowResult:
    """Blocking wrapper around :func:`run_workflow` for synchronous callers."""
    return asyncio.run(run_workflow(workflow, context, **kwargs))
