"""Pytest fixtures for workflow engine tests."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from contractspec_cli.vibe.checkpoint import CheckpointChoice, StaticCheckpointController
from contractspec_cli.vibe.models import Track, WorkflowContext, WorkflowStep


@pytest.fixture
def context(tmp_path: Path) -> WorkflowContext:
    """Non-dry-run context on the product track."""
    return WorkflowContext(root=tmp_path, config={"name": "demo"}, dry_run=False, track=Track.PRODUCT)


@pytest.fixture
def dry_context(context: WorkflowContext) -> WorkflowContext:
    return WorkflowContext(root=context.root, config=context.config, dry_run=True, track=context.track)


@pytest.fixture
def reporter():
    """Reporter double recording every event."""
    return MagicMock()


@pytest.fixture
def command_runner():
    return AsyncMock(return_value=None)


@pytest.fixture
def proceed():
    return StaticCheckpointController(CheckpointChoice.PROCEED)


@pytest.fixture
def ok_step():
    """Factory for steps whose execute callback resolves immediately."""

    def _make(step_id: str, **kwargs) -> WorkflowStep:
        if "command" not in kwargs:
            kwargs.setdefault("execute", AsyncMock(return_value=None))
        return WorkflowStep(id=step_id, label=f"Step {step_id}", **kwargs)

    return _make
