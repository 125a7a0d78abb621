"""Guided workflows ("vibe") -- sequenced CLI steps with checkpoints.

This subpackage provides:
- Workflow / WorkflowStep / WorkflowContext / WorkflowResult value objects
- load_workflows / get_workflow: built-in plus project-local workflows
- WorkflowEngine / run_workflow: sequential, fail-fast execution
- Checkpoint controllers: interactive prompt and deterministic stubs
"""

from __future__ import annotations

from contractspec_cli.vibe.errors import (
    CommandExitError,
    CommandSpawnError,
    StepCommandError,
    VibeError,
    WorkflowDefinitionError,
    WorkflowNotFoundError,
)
from contractspec_cli.vibe.models import (
    StepOutcome,
    Track,
    Workflow,
    WorkflowContext,
    WorkflowResult,
    WorkflowStep,
)
from contractspec_cli.vibe.builtin import BUILTIN_WORKFLOWS, builtin_workflows
from contractspec_cli.vibe.checkpoint import (
    CheckpointChoice,
    CheckpointController,
    InteractiveCheckpointController,
    ScriptedCheckpointController,
    StaticCheckpointController,
    is_interactive,
)
from contractspec_cli.vibe.engine import WorkflowEngine, run_workflow, run_workflow_sync
from contractspec_cli.vibe.loader import find_workflow, get_workflow, load_workflows
from contractspec_cli.vibe.reporter import ConsoleReporter, NullReporter, SkipReason, WorkflowReporter
from contractspec_cli.vibe.shell import run_command, split_command

__all__ = [
    "BUILTIN_WORKFLOWS",
    "CheckpointChoice",
    "CheckpointController",
    "CommandExitError",
    "CommandSpawnError",
    "ConsoleReporter",
    "InteractiveCheckpointController",
    "NullReporter",
    "ScriptedCheckpointController",
    "SkipReason",
    "StaticCheckpointController",
    "StepCommandError",
    "StepOutcome",
    "Track",
    "VibeError",
    "Workflow",
    "WorkflowContext",
    "WorkflowDefinitionError",
    "WorkflowEngine",
    "WorkflowNotFoundError",
    "WorkflowReporter",
    "WorkflowResult",
    "WorkflowStep",
    "builtin_workflows",
    "find_workflow",
    "get_workflow",
    "is_interactive",
    "load_workflows",
    "run_command",
    "run_workflow",
    "run_workflow_sync",
    "split_command",
]
