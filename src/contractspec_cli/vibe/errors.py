"""Exception hierarchy for guided workflows."""

from __future__ import annotations

from pathlib import Path


class VibeError(Exception):
    """Base exception for workflow errors."""
    pass


class WorkflowDefinitionError(VibeError):
    """A user workflow document is malformed.

    The loader catches this, logs a warning and skips the file.
    """

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class WorkflowNotFoundError(VibeError):
    """No loaded workflow has the requested id."""

    def __init__(self, workflow_id: str, available: list[str] | None = None):
        self.workflow_id = workflow_id
        self.available = available or []
        message = f"Workflow '{workflow_id}' not found"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)


class StepCommandError(VibeError):
    """A step's shell command did not complete successfully."""

    def __init__(self, command: str, message: str):
        self.command = command
        super().__init__(message)


class CommandExitError(StepCommandError):
    """The command exited with a non-zero code."""

    def __init__(self, command: str, exit_code: int):
        self.exit_code = exit_code
        super().__init__(command, f"Command failed with exit code {exit_code}: {command}")


class CommandSpawnError(StepCommandError):
    """The command could not be started."""

    def __init__(self, command: str, reason: str):
        self.reason = reason
        super().__init__(command, f"Could not start command '{command}': {reason}")
