"""Workflows shipped with the CLI.

Each workflow sequences ``contractspec`` sub-commands. Steps restricted to
``product``/``regulated`` are skipped on the ``quick`` track; compliance
checkpoints only appear on ``regulated``.
"""

from __future__ import annotations

from contractspec_cli.vibe.models import Track, Workflow, WorkflowStep

_PRODUCT_UP = frozenset({Track.PRODUCT, Track.REGULATED})
_REGULATED = frozenset({Track.REGULATED})


BUILTIN_WORKFLOWS: tuple[Workflow, ...] = (
    Workflow(
        id="validate",
        name="Validate contracts",
        description="Validate every contract spec and check implementation integrity.",
        steps=(
            WorkflowStep(id="validate", label="Validate specs", command="contractspec validate"),
            WorkflowStep(
                id="integrity",
                label="Check spec/implementation integrity",
                command="contractspec integrity",
                tracks=_PRODUCT_UP,
            ),
            WorkflowStep(
                id="compliance-review",
                label="Compliance review",
                manual_checkpoint=True,
                manual_message="Confirm the validation report has been filed with your compliance owner.",
                tracks=_REGULATED,
            ),
        ),
    ),
    Workflow(
        id="spec-first",
        name="Spec-first feature",
        description="Author a contract before writing code, then generate and verify the implementation.",
        steps=(
            WorkflowStep(
                id="create",
                label="Create a new spec",
                command="contractspec create",
                manual_checkpoint=True,
                manual_message="A spec skeleton will be created. Fill in its fields before continuing.",
            ),
            WorkflowStep(id="validate", label="Validate specs", command="contractspec validate"),
            WorkflowStep(id="generate", label="Generate implementation", command="contractspec generate"),
            WorkflowStep(
                id="verify",
                label="Verify implementation against spec",
                command="contractspec impl verify",
                tracks=_PRODUCT_UP,
            ),
        ),
    ),
    Workflow(
        id="brownfield",
        name="Adopt an existing API",
        description="Import an existing OpenAPI document and bring it under contract.",
        steps=(
            WorkflowStep(id="import", label="Import OpenAPI sources", command="contractspec import"),
            WorkflowStep(id="validate", label="Validate imported specs", command="contractspec validate"),
            WorkflowStep(
                id="review",
                label="Review imported specs",
                manual_checkpoint=True,
                manual_message="Review owners, stability and auth levels of the imported specs.",
            ),
            WorkflowStep(id="generate", label="Generate code from specs", command="contractspec generate"),
        ),
    ),
    Workflow(
        id="release",
        name="Release contract changes",
        description="Diff, version and publish contract changes.",
        steps=(
            WorkflowStep(id="diff", label="Diff specs against the base branch", command="contractspec diff"),
            WorkflowStep(id="impact", label="Detect change impact", command="contractspec impact"),
            WorkflowStep(id="version", label="Bump spec versions", command="contractspec version bump"),
            WorkflowStep(
                id="changelog",
                label="Generate changelogs",
                command="contractspec changelog",
                tracks=_PRODUCT_UP,
            ),
            WorkflowStep(
                id="sign-off",
                label="Release sign-off",
                manual_checkpoint=True,
                manual_message="Breaking changes require sign-off before the release continues.",
                tracks=_REGULATED,
            ),
            WorkflowStep(id="ci", label="Run contract CI checks", command="contractspec ci"),
        ),
    ),
)


def builtin_workflows() -> list[Workflow]:
    """Return the built-in workflows in their shipped order."""
    return list(BUILTIN_WORKFLOWS)


__all__ = ["BUILTIN_WORKFLOWS", "builtin_workflows"]
