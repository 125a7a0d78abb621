"""Tests for the sequential workflow engine."""

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock

import pytest
from transitions import MachineError

from contractspec_cli.vibe.checkpoint import (
    CheckpointChoice,
    ScriptedCheckpointController,
    StaticCheckpointController,
)
from contractspec_cli.vibe.engine import RunLifecycle, WorkflowEngine, run_workflow, run_workflow_sync
from contractspec_cli.vibe.errors import CommandExitError
from contractspec_cli.vibe.models import StepOutcome, Track, Workflow, WorkflowStep
from contractspec_cli.vibe.reporter import SkipReason


def _workflow(*steps: WorkflowStep, workflow_id: str = "w") -> Workflow:
    return Workflow(id=workflow_id, name="Test workflow", steps=steps)


class TestOrdering:
    @pytest.mark.asyncio
    async def test_steps_run_in_definition_order(self, ok_step, context, proceed):
        calls = []
        steps = [
            ok_step(step_id, execute=AsyncMock(side_effect=lambda ctx, s=step_id: calls.append(s)))
            for step_id in ("s1", "s2", "s3")
        ]

        result = await run_workflow(_workflow(*steps), context, checkpoint=proceed)

        assert result.success is True
        assert result.steps_executed == ["s1", "s2", "s3"]
        assert calls == ["s1", "s2", "s3"]
        assert result.error is None

    @pytest.mark.asyncio
    async def test_two_step_scenario(self, ok_step, context, proceed):
        workflow = _workflow(ok_step("a"), ok_step("b"))

        result = await run_workflow(workflow, context, checkpoint=proceed)

        assert result.success is True
        assert result.steps_executed == ["a", "b"]

    @pytest.mark.asyncio
    async def test_step_without_execution_means_counts_as_executed(self, context, proceed):
        step = WorkflowStep(id="noop", label="Nothing to do")

        result = await run_workflow(_workflow(step), context, checkpoint=proceed)

        assert result.success is True
        assert result.steps_executed == ["noop"]

    @pytest.mark.asyncio
    async def test_sync_execute_callback_is_supported(self, context, proceed):
        execute = MagicMock(return_value=None)
        step = WorkflowStep(id="sync", label="Sync step", execute=execute)

        result = await run_workflow(_workflow(step), context, checkpoint=proceed)

        assert result.steps_executed == ["sync"]
        execute.assert_called_once()

    @pytest.mark.asyncio
    async def test_empty_workflow_succeeds(self, context, proceed):
        result = await run_workflow(_workflow(), context, checkpoint=proceed)

        assert result.success is True
        assert result.steps_executed == []


class TestTrackGate:
    @pytest.mark.asyncio
    async def test_steps_for_other_tracks_are_skipped(self, ok_step, context, proceed):
        quick_context = replace(context, track=Track.QUICK)
        step1 = ok_step("1", tracks=["quick"])
        step2 = ok_step("2", tracks=["product"])

        result = await run_workflow(_workflow(step1, step2), quick_context, checkpoint=proceed)

        assert result.success is True
        assert result.steps_executed == ["1"]
        step2.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_regulated_only_step_on_quick_track(self, ok_step, context, proceed):
        quick_context = replace(context, track=Track.QUICK)

        result = await run_workflow(
            _workflow(ok_step("x", tracks=["regulated"])), quick_context, checkpoint=proceed
        )

        assert result.success is True
        assert result.steps_executed == []

    @pytest.mark.asyncio
    async def test_track_skip_is_reported(self, ok_step, context, proceed, reporter):
        step = ok_step("x", tracks=["regulated"])

        await run_workflow(_workflow(step), context, checkpoint=proceed, reporter=reporter)

        reporter.step_skipped.assert_called_once_with(step, SkipReason.TRACK)
        reporter.step_started.assert_not_called()


class TestConditionGate:
    @pytest.mark.asyncio
    async def test_false_condition_skips_step(self, ok_step, context, proceed):
        skipped = ok_step("skipped", condition=lambda ctx: False)
        kept = ok_step("kept", condition=lambda ctx: True)

        result = await run_workflow(_workflow(skipped, kept), context, checkpoint=proceed)

        assert result.steps_executed == ["kept"]
        skipped.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_async_condition_is_awaited(self, ok_step, context, proceed):
        condition = AsyncMock(return_value=False)
        step = ok_step("a", condition=condition)

        result = await run_workflow(_workflow(step), context, checkpoint=proceed)

        assert result.steps_executed == []
        condition.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_condition_sees_context(self, ok_step, context, proceed):
        step = ok_step("a", condition=lambda ctx: ctx.config.get("name") == "demo")

        result = await run_workflow(_workflow(step), context, checkpoint=proceed)

        assert result.steps_executed == ["a"]

    @pytest.mark.asyncio
    async def test_condition_not_evaluated_when_track_excludes_step(self, ok_step, context, proceed):
        condition = MagicMock(return_value=True)
        step = ok_step("a", tracks=["quick"], condition=condition)

        await run_workflow(_workflow(step), context, checkpoint=proceed)

        condition.assert_not_called()

    @pytest.mark.asyncio
    async def test_raising_condition_fails_the_run(self, ok_step, context, proceed):
        boom = RuntimeError("cannot evaluate")
        first = ok_step("first", condition=MagicMock(side_effect=boom))
        second = ok_step("second")

        result = await run_workflow(_workflow(first, second), context, checkpoint=proceed)

        assert result.success is False
        assert result.error is boom
        assert result.failed_step == "first"
        second.execute.assert_not_called()


class TestFailFast:
    @pytest.mark.asyncio
    async def test_rejecting_step_halts_workflow(self, ok_step, context, proceed):
        reason = ValueError("validation failed")
        s1 = ok_step("s1", execute=AsyncMock(side_effect=reason))
        s2 = ok_step("s2")

        result = await run_workflow(_workflow(s1, s2), context, checkpoint=proceed)

        assert result.success is False
        assert result.error is reason
        assert result.aborted is False
        assert result.steps_executed == []
        s2.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_keeps_earlier_steps(self, ok_step, context, proceed):
        s1 = ok_step("s1")
        s2 = ok_step("s2", execute=AsyncMock(side_effect=RuntimeError("boom")))
        s3 = ok_step("s3")

        result = await run_workflow(_workflow(s1, s2, s3), context, checkpoint=proceed)

        assert result.steps_executed == ["s1"]
        assert result.failed_step == "s2"
        s3.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_command_halts_workflow(self, ok_step, context, proceed):
        runner = AsyncMock(side_effect=CommandExitError("contractspec validate", 2))
        s1 = WorkflowStep(id="validate", label="Validate", command="contractspec validate")
        s2 = ok_step("generate")

        result = await run_workflow(_workflow(s1, s2), context, checkpoint=proceed, command_runner=runner)

        assert result.success is False
        assert isinstance(result.error, CommandExitError)
        assert result.error.exit_code == 2
        s2.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_is_reported(self, ok_step, context, proceed, reporter):
        reason = RuntimeError("boom")
        step = ok_step("s1", execute=AsyncMock(side_effect=reason))

        result = await run_workflow(_workflow(step), context, checkpoint=proceed, reporter=reporter)

        reporter.step_failed.assert_called_once_with(step, reason)
        reporter.workflow_finished.assert_called_once_with(result)
        reporter.step_completed.assert_not_called()


class TestCommandSteps:
    @pytest.mark.asyncio
    async def test_command_runs_in_context_root(self, context, proceed, command_runner):
        step = WorkflowStep(id="validate", label="Validate", command="contractspec validate")

        result = await run_workflow(_workflow(step), context, checkpoint=proceed, command_runner=command_runner)

        assert result.steps_executed == ["validate"]
        command_runner.assert_awaited_once_with("contractspec validate", context.root)


class TestDryRun:
    @pytest.mark.asyncio
    async def test_dry_run_never_invokes_side_effects(self, ok_step, dry_context, proceed, command_runner):
        s1 = ok_step("a")
        s2 = WorkflowStep(id="b", label="Command", command="contractspec generate")

        result = await run_workflow(
            _workflow(s1, s2), dry_context, checkpoint=proceed, command_runner=command_runner
        )

        assert result.success is True
        assert result.steps_executed == ["a (dry-run)", "b (dry-run)"]
        s1.execute.assert_not_called()
        command_runner.assert_not_called()

    @pytest.mark.asyncio
    async def test_dry_run_still_applies_gates(self, ok_step, dry_context, proceed):
        steps = [
            ok_step("quick-only", tracks=["quick"]),
            ok_step("never", condition=lambda ctx: False),
            ok_step("kept"),
        ]

        result = await run_workflow(_workflow(*steps), dry_context, checkpoint=proceed)

        assert result.steps_executed == ["kept (dry-run)"]

    @pytest.mark.asyncio
    async def test_dry_run_checkpoint_does_not_prompt(self, ok_step, dry_context, reporter):
        controller = StaticCheckpointController(CheckpointChoice.ABORT)
        gate = ok_step("gate", manual_checkpoint=True, manual_message="Check it")
        after = ok_step("after")

        result = await run_workflow(_workflow(gate, after), dry_context, checkpoint=controller, reporter=reporter)

        assert result.success is True
        assert result.steps_executed == ["gate (dry-run)", "after (dry-run)"]
        assert controller.asked == []
        reporter.checkpoint_dry_run.assert_called_once_with(gate)

    @pytest.mark.asyncio
    async def test_dry_run_announces_every_running_step(self, ok_step, dry_context, proceed, reporter):
        steps = [ok_step("a"), ok_step("b")]

        await run_workflow(_workflow(*steps), dry_context, checkpoint=proceed, reporter=reporter)

        assert [c.args[0].id for c in reporter.step_started.call_args_list] == ["a", "b"]


class TestCheckpoints:
    @pytest.mark.asyncio
    async def test_abort_halts_immediately(self, ok_step, context):
        gate = ok_step("gate", manual_checkpoint=True)
        s2 = ok_step("s2")

        result = await run_workflow(
            _workflow(gate, s2), context, checkpoint=StaticCheckpointController("abort")
        )

        assert result.success is False
        assert result.aborted is True
        assert result.error is None
        assert result.steps_executed == []
        gate.execute.assert_not_called()
        s2.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_skip_continues_with_next_step(self, ok_step, context):
        gate = ok_step("gate", manual_checkpoint=True)
        s2 = ok_step("s2")

        result = await run_workflow(
            _workflow(gate, s2), context, checkpoint=StaticCheckpointController("skip")
        )

        assert result.success is True
        assert result.steps_executed == ["s2"]
        gate.execute.assert_not_called()
        s2.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_proceed_runs_the_step(self, ok_step, context, proceed):
        gate = ok_step("gate", manual_checkpoint=True)

        result = await run_workflow(_workflow(gate), context, checkpoint=proceed)

        assert result.steps_executed == ["gate"]
        assert proceed.asked == ["gate"]
        gate.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_only_checkpoint_steps_consult_controller(self, ok_step, context):
        controller = ScriptedCheckpointController(["skip", "proceed"])
        steps = [
            ok_step("a"),
            ok_step("b", manual_checkpoint=True),
            ok_step("c"),
            ok_step("d", manual_checkpoint=True),
        ]

        result = await run_workflow(_workflow(*steps), context, checkpoint=controller)

        assert controller.asked == ["b", "d"]
        assert result.steps_executed == ["a", "c", "d"]

    @pytest.mark.asyncio
    async def test_abort_is_reported(self, ok_step, context, reporter):
        gate = ok_step("gate", manual_checkpoint=True)

        await run_workflow(
            _workflow(gate), context, checkpoint=StaticCheckpointController("abort"), reporter=reporter
        )

        reporter.workflow_aborted.assert_called_once_with(gate)
        reporter.step_completed.assert_not_called()


class TestOutputs:
    @pytest.mark.asyncio
    async def test_step_outcome_feeds_result_accumulators(self, context, proceed):
        produce = WorkflowStep(
            id="generate",
            label="Generate",
            execute=AsyncMock(return_value=StepOutcome(artifacts=("src/api.ts",), output={"files": 1})),
        )
        consume_seen = {}

        def consume(ctx):
            consume_seen.update(ctx.outputs)
            return ["CHANGELOG.md"]

        consumer = WorkflowStep(id="changelog", label="Changelog", execute=consume)

        result = await run_workflow(_workflow(produce, consumer), context, checkpoint=proceed)

        assert result.artifacts_touched == ["src/api.ts", "CHANGELOG.md"]
        assert result.outputs == {"generate": {"files": 1}}
        assert consume_seen == {"generate": {"files": 1}}

    @pytest.mark.asyncio
    async def test_steps_cannot_mutate_outputs_view(self, context, proceed):
        def mutate(ctx):
            ctx.outputs["sneaky"] = True

        step = WorkflowStep(id="mutate", label="Mutate", execute=mutate)

        result = await run_workflow(_workflow(step), context, checkpoint=proceed)

        assert result.success is False
        assert isinstance(result.error, TypeError)

    @pytest.mark.asyncio
    async def test_caller_context_is_not_modified(self, ok_step, context, proceed):
        before = context.outputs

        await run_workflow(_workflow(ok_step("a")), context, checkpoint=proceed)

        assert context.outputs is before
        assert dict(context.outputs) == {}


class TestEngine:
    @pytest.mark.asyncio
    async def test_each_run_returns_fresh_result(self, ok_step, context, proceed):
        engine = WorkflowEngine(checkpoint=proceed)
        workflow = _workflow(ok_step("a"))

        first = await engine.run(workflow, context)
        second = await engine.run(workflow, context)

        assert first is not second
        assert first.steps_executed == ["a"]
        assert second.steps_executed == ["a"]

    @pytest.mark.asyncio
    async def test_workflow_start_is_reported_with_run_context(self, ok_step, context, proceed, reporter):
        workflow = _workflow(ok_step("a"))

        await run_workflow(workflow, context, checkpoint=proceed, reporter=reporter)

        reporter.workflow_started.assert_called_once()
        started_workflow, started_context = reporter.workflow_started.call_args.args
        assert started_workflow is workflow
        assert started_context.root == context.root
        assert started_context.track == context.track

    def test_run_workflow_sync(self, ok_step, context, proceed):
        result = run_workflow_sync(_workflow(ok_step("a"), ok_step("b")), context, checkpoint=proceed)

        assert result.success is True
        assert result.steps_executed == ["a", "b"]


class TestRunLifecycle:
    def test_starts_running(self):
        lifecycle = RunLifecycle()

        assert lifecycle.state == "running"
        assert lifecycle.finished is False

    @pytest.mark.parametrize("trigger,state", [("complete", "succeeded"), ("fail", "failed"), ("abort", "aborted")])
    def test_terminal_transitions(self, trigger, state):
        lifecycle = RunLifecycle()

        getattr(lifecycle, trigger)()

        assert lifecycle.state == state
        assert lifecycle.finished is True

    def test_terminal_states_cannot_be_left(self):
        lifecycle = RunLifecycle()
        lifecycle.fail()

        with pytest.raises(MachineError):
            lifecycle.complete()

    @pytest.mark.asyncio
    async def test_result_status_after_success(self, ok_step, context, proceed):
        result = await run_workflow(_workflow(ok_step("s1")), context, checkpoint=proceed)

        assert result.status == "succeeded"
        assert result.to_dict()["status"] == "succeeded"

    @pytest.mark.asyncio
    async def test_result_status_after_failure(self, ok_step, context, proceed):
        failing = ok_step("s1", execute=AsyncMock(side_effect=RuntimeError("boom")))

        result = await run_workflow(_workflow(failing), context, checkpoint=proceed)

        assert result.status == "failed"

    @pytest.mark.asyncio
    async def test_result_status_after_abort(self, ok_step, context):
        gate = ok_step("gate", manual_checkpoint=True)

        result = await run_workflow(_workflow(gate), context, checkpoint=StaticCheckpointController("abort"))

        assert result.status == "aborted"


class TestStepReturnValues:
    @pytest.mark.asyncio
    async def test_mapping_return_is_not_recorded_as_artifacts(self, context, proceed):
        step = WorkflowStep(id="report", label="Report", execute=lambda ctx: {"status": "ok"})

        result = await run_workflow(_workflow(step), context, checkpoint=proceed)

        assert result.success is True
        assert result.artifacts_touched == []
