"""Workflow discovery: built-in workflows plus project-local workflow files.

User workflows live in ``<root>/.contractspec/workflows/`` as JSON or YAML
documents::

    id: api-review
    name: API review
    steps:
      - id: lint
        label: Validate specs
        command: contractspec validate
      - id: approve
        label: Product approval
        manualCheckpoint: true
        manualMessage: Ask the API owner to approve the change.
        tracks: [product, regulated]

A file that cannot be read or does not describe a workflow is logged and
skipped; it never aborts the rest of the load.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from contractspec_cli.core.constants import CONTRACTSPEC_DIR, WORKFLOW_SUFFIXES, WORKFLOWS_DIR
from contractspec_cli.vibe.builtin import builtin_workflows
from contractspec_cli.vibe.errors import WorkflowDefinitionError
from contractspec_cli.vibe.models import Track, Workflow, WorkflowStep

logger = logging.getLogger(__name__)


class StepDocument(BaseModel):
    """One step as written in a workflow file."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    label: str | None = None
    command: str | None = None
    manual_checkpoint: bool = Field(default=False, alias="manualCheckpoint")
    manual_message: str | None = Field(default=None, alias="manualMessage")
    tracks: list[Track] | None = None

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("step id must be a non-empty string")
        return value.strip()

    @field_validator("tracks", mode="before")
    @classmethod
    def _parse_tracks(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            raise ValueError("tracks must be a list of track names")
        return [Track.parse(item) for item in value]


class WorkflowDocument(BaseModel):
    """Top-level shape of a workflow file."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str | None = None
    description: str | None = None
    steps: list[StepDocument]

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("workflow id must be a non-empty string")
        return value.strip()


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "<document>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def parse_workflow_document(data: Any, *, source: Path | None = None) -> Workflow:
    """Build a Workflow from a decoded JSON/YAML document.

    Raises:
        WorkflowDefinitionError: If the document lacks an ``id`` or a ``steps``
            list, or any step is malformed.
    """
    if not isinstance(data, dict):
        raise WorkflowDefinitionError("workflow document must be a mapping", source)

    try:
        document = WorkflowDocument.model_validate(data)
    except ValidationError as exc:
        raise WorkflowDefinitionError(_describe_validation_error(exc), source) from exc

    steps = [
        WorkflowStep(
            id=step.id,
            label=step.label or step.id,
            command=step.command or None,
            manual_checkpoint=step.manual_checkpoint,
            manual_message=step.manual_message,
            tracks=frozenset(step.tracks) if step.tracks is not None else None,
        )
        for step in document.steps
    ]

    return Workflow(
        id=document.id,
        name=document.name or document.id,
        description=document.description or "",
        steps=tuple(steps),
        source=source,
        extra=dict(document.model_extra or {}),
    )


def load_workflow_file(path: Path) -> Workflow:
    """Read, decode and parse one workflow file."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise WorkflowDefinitionError(f"unable to read file ({exc})", path) from exc

    if path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise WorkflowDefinitionError(f"invalid JSON ({exc})", path) from exc
    else:
        try:
            data = YAML(typ="safe").load(text)
        except YAMLError as exc:
            raise WorkflowDefinitionError(f"invalid YAML ({exc})", path) from exc

    return parse_workflow_document(data, source=path)


def workflows_dir(root: Path) -> Path:
    """Return the project-local workflow directory for *root*."""
    return root / CONTRACTSPEC_DIR / WORKFLOWS_DIR


def discover_workflow_files(root: Path) -> list[Path]:
    """List candidate workflow files in sorted filename order."""
    directory = workflows_dir(root)
    if not directory.is_dir():
        return []
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        logger.warning(f"Cannot read workflow directory {directory}: {exc}")
        return []
    return sorted(p for p in entries if p.is_file() and p.suffix.lower() in WORKFLOW_SUFFIXES)


def load_user_workflows(root: Path) -> list[Workflow]:
    """Load every well-formed user workflow under *root*, skipping bad files."""
    loaded: list[Workflow] = []
    for path in discover_workflow_files(root):
        try:
            loaded.append(load_workflow_file(path))
        except WorkflowDefinitionError as exc:
            logger.warning(f"Skipping workflow file: {exc}")
    return loaded


def load_workflows(root: Path) -> list[Workflow]:
    """Return built-in workflows followed by user workflows in discovery order.

    Duplicate ids are kept, with a warning: lookups are first-match-wins, so
    a user file reusing a built-in id is shadowed by the built-in.
    """
    workflows = builtin_workflows()
    seen = {w.id for w in workflows}
    for workflow in load_user_workflows(root):
        if workflow.id in seen:
            logger.warning(
                f"Workflow '{workflow.id}' in {workflow.source} duplicates an earlier "
                f"workflow id and is shadowed by it"
            )
        seen.add(workflow.id)
        workflows.append(workflow)
    return workflows


def find_workflow(workflows: list[Workflow], workflow_id: str) -> Workflow | None:
    """Return the first workflow with *workflow_id*, or None."""
    for workflow in workflows:
        if workflow.id == workflow_id:
            return workflow
    return None


def get_workflow(root: Path, workflow_id: str) -> Workflow | None:
    """Load workflows for *root* and look one up by id."""
    return find_workflow(load_workflows(root), workflow_id)


__all__ = [
    "StepDocument",
    "WorkflowDocument",
    "discover_workflow_files",
    "find_workflow",
    "get_workflow",
    "load_user_workflows",
    "load_workflow_file",
    "load_workflows",
    "parse_workflow_document",
    "workflows_dir",
]
