"""Unit tests for outreach/pipeline/states.py and events.py"""

import pytest

from outreach.pipeline.events import EventKind, PipelineEvent, RunProgress
from outreach.pipeline.states import InvalidTransition, PipelineState, RunStateMachine, StageStatus


class TestRunStateMachine:
    """Tests for allowed and rejected transitions."""

    def test_starts_pending(self):
        assert RunStateMachine().state == PipelineState.PENDING

    def test_full_path(self):
        machine = RunStateMachine()
        for state in (
            PipelineState.CACHE_CHECKED,
            PipelineState.RESEARCHING,
            PipelineState.RESEARCH_DONE,
            PipelineState.VERIFYING,
            PipelineState.VERIFY_DONE,
            PipelineState.COMPOSING,
            PipelineState.DONE,
        ):
            machine.advance(state)
        assert machine.state.is_terminal

    def test_cache_hit_shortcut(self):
        machine = RunStateMachine()
        machine.advance(PipelineState.CACHE_CHECKED)
        machine.advance(PipelineState.VERIFY_DONE)
        assert machine.state == PipelineState.VERIFY_DONE

    def test_cannot_skip_cache_check(self):
        with pytest.raises(InvalidTransition):
            RunStateMachine().advance(PipelineState.RESEARCHING)

    def test_cannot_compose_before_verify(self):
        machine = RunStateMachine()
        machine.advance(PipelineState.CACHE_CHECKED)
        machine.advance(PipelineState.RESEARCHING)
        with pytest.raises(InvalidTransition):
            machine.advance(PipelineState.COMPOSING)

    def test_terminal_states_are_final(self):
        machine = RunStateMachine()
        machine.advance(PipelineState.FAILED)
        with pytest.raises(InvalidTransition):
            machine.advance(PipelineState.CACHE_CHECKED)

    def test_any_active_state_can_fail(self):
        machine = RunStateMachine()
        machine.advance(PipelineState.CACHE_CHECKED)
        machine.advance(PipelineState.RESEARCHING)
        machine.advance(PipelineState.FAILED)
        assert machine.history[-1] == PipelineState.FAILED


class TestRunProgress:
    """Tests for cumulative event construction."""

    def test_status_is_cumulative(self):
        progress = RunProgress()
        progress.status_event(research=StageStatus.RUNNING)
        event = progress.status_event(research=StageStatus.COMPLETE, verify=StageStatus.RUNNING)
        assert event.kind == EventKind.STATUS
        assert event.data == {"research": "complete", "verify": "running"}

    def test_event_data_is_a_snapshot(self):
        progress = RunProgress()
        first = progress.status_event(research=StageStatus.RUNNING)
        progress.status_event(research=StageStatus.COMPLETE)
        assert first.data == {"research": "running"}

    def test_intermediate_is_cumulative(self):
        progress = RunProgress()
        progress.intermediate_event(research="Acme brief")
        event = progress.intermediate_event(verified="Verified brief")
        assert event.data == {"research": "Acme brief", "verified": "Verified brief"}

    def test_final_carries_status_and_intermediate(self):
        progress = RunProgress()
        progress.status_event(research=StageStatus.FROM_CACHE)
        progress.intermediate_event(research="Acme brief")
        event = progress.final_event({"run_id": "run_1"})
        assert event.is_terminal
        assert event.data["_status"] == {"research": "from-cache"}
        assert event.data["_intermediate"] == {"research": "Acme brief"}

    def test_error_event(self):
        event = RunProgress.error_event("boom", "MessagingFailed", "messaging")
        assert event.is_terminal
        assert event.to_dict() == {
            "type": "error",
            "data": {"message": "boom", "tag": "MessagingFailed", "stage": "messaging"},
        }

    def test_non_terminal_kinds(self):
        assert not PipelineEvent(EventKind.STATUS, {}).is_terminal
        assert not PipelineEvent(EventKind.INTERMEDIATE, {}).is_terminal
