"""Value objects for guided workflows.

Workflows and steps are built once (from the built-in table or a user file)
and never mutated. ``WorkflowContext`` carries per-invocation parameters and
``WorkflowResult`` is the single value a run produces.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Union

__all__ = [
    "StepCallable",
    "StepCondition",
    "StepOutcome",
    "Track",
    "Workflow",
    "WorkflowContext",
    "WorkflowResult",
    "WorkflowStep",
]


class Track(StrEnum):
    """Operating profile that gates which steps apply to a run."""

    QUICK = "quick"
    PRODUCT = "product"
    REGULATED = "regulated"

    @classmethod
    def parse(cls, value: "Track | str") -> "Track":
        """Coerce *value* to a Track, ignoring case and surrounding whitespace."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise ValueError(f"Unknown track '{value}'. Valid tracks: {valid}") from None


@dataclass(frozen=True)
class StepOutcome:
    """Optional return value of an in-process step."""

    artifacts: tuple[str, ...] = ()
    output: Any = None


StepCallable = Callable[["WorkflowContext"], Union[Awaitable[Any], Any]]
StepCondition = Callable[["WorkflowContext"], Union[Awaitable[bool], bool]]


@dataclass(frozen=True)
class WorkflowStep:
    """One unit of work inside a workflow.

    A step runs either ``command`` (out of process) or ``execute`` (in
    process). A step with neither is a no-op that still counts as executed.
    """

    id: str
    label: str
    command: str | None = None
    execute: StepCallable | None = None
    manual_checkpoint: bool = False
    manual_message: str | None = None
    condition: StepCondition | None = None
    tracks: frozenset[Track] | None = None

    def __post_init__(self) -> None:
        if self.command is not None and self.execute is not None:
            raise ValueError(f"Step '{self.id}' declares both 'command' and 'execute'")
        if self.tracks is not None and not isinstance(self.tracks, frozenset):
            object.__setattr__(self, "tracks", frozenset(Track.parse(t) for t in self.tracks))

    def applies_to(self, track: Track) -> bool:
        """Return True unless the step is restricted to other tracks."""
        return self.tracks is None or track in self.tracks


@dataclass(frozen=True)
class Workflow:
    """An ordered, named pipeline of steps."""

    id: str
    name: str
    steps: tuple[WorkflowStep, ...]
    description: str = ""
    source: Path | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.steps, tuple):
            object.__setattr__(self, "steps", tuple(self.steps))

    @property
    def is_builtin(self) -> bool:
        return self.source is None

    @property
    def has_checkpoints(self) -> bool:
        return any(step.manual_checkpoint for step in self.steps)


@dataclass(frozen=True)
class WorkflowContext:
    """Per-invocation execution parameters shared by every step.

    Attributes:
        root: Working directory for shelled-out commands.
        config: Opaque project configuration; forwarded, never inspected.
        dry_run: When True no step has real side effects.
        track: The active track.
        json: Only affects how the caller renders the result.
        outputs: Read-only view of outputs produced by earlier steps.
    """

    root: Path
    config: Any = None
    dry_run: bool = False
    track: Track = Track.PRODUCT
    json: bool = False
    outputs: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass
class WorkflowResult:
    """Outcome of a single workflow run.

    ``success`` False with no ``error`` means the operator aborted at a
    checkpoint; False with ``error`` set means a step failed. ``status`` is
    the final run state: ``succeeded``, ``failed`` or ``aborted``.
    """

    workflow_id: str
    success: bool = False
    steps_executed: list[str] = field(default_factory=list)
    artifacts_touched: list[str] = field(default_factory=list)
    error: BaseException | None = None
    failed_step: str | None = None
    aborted: bool = False
    status: str = "running"
    outputs: dict[str, Any] = field(default_factory=dict)

    def record_outcome(self, step_id: str, returned: Any) -> None:
        """Fold whatever an in-process step returned into the accumulators."""
        if returned is None:
            return
        if isinstance(returned, StepOutcome):
            self.artifacts_touched.extend(returned.artifacts)
            if returned.output is not None:
                self.outputs[step_id] = returned.output
            return
        if isinstance(returned, str):
            self.artifacts_touched.append(returned)
            return
        if isinstance(returned, (Mapping, bytes, bytearray)):
            return
        if isinstance(returned, Iterable):
            self.artifacts_touched.extend(str(item) for item in returned)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "workflow": self.workflow_id,
            "success": self.success,
            "status": self.status,
            "aborted": self.aborted,
            "stepsExecuted": list(self.steps_executed),
            "artifactsTouched": list(self.artifacts_touched),
            "failedStep": self.failed_step,
            "error": str(self.error) if self.error is not None else None,
        }
