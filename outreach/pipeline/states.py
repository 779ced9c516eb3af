"""Run lifecycle states and per-stage status values."""

from enum import Enum
from typing import Dict, FrozenSet, List


class PipelineState(str, Enum):
    PENDING = "pending"
    CACHE_CHECKED = "cache_checked"
    RESEARCHING = "researching"
    RESEARCH_DONE = "research_done"
    VERIFYING = "verifying"
    VERIFY_DONE = "verify_done"
    COMPOSING = "composing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.FAILED)


class StageStatus(str, Enum):
    """Values carried in the cumulative status map of status events."""

    RUNNING = "running"
    COMPLETE = "complete"
    FROM_CACHE = "from-cache"


_S = PipelineState

TRANSITIONS: Dict[PipelineState, FrozenSet[PipelineState]] = {
    _S.PENDING: frozenset({_S.CACHE_CHECKED, _S.FAILED}),
    # A cache hit jumps straight to VERIFY_DONE
    _S.CACHE_CHECKED: frozenset({_S.RESEARCHING, _S.VERIFY_DONE, _S.FAILED}),
    _S.RESEARCHING: frozenset({_S.RESEARCH_DONE, _S.FAILED}),
    _S.RESEARCH_DONE: frozenset({_S.VERIFYING, _S.FAILED}),
    _S.VERIFYING: frozenset({_S.VERIFY_DONE, _S.FAILED}),
    _S.VERIFY_DONE: frozenset({_S.COMPOSING, _S.FAILED}),
    _S.COMPOSING: frozenset({_S.DONE, _S.FAILED}),
    _S.DONE: frozenset(),
    _S.FAILED: frozenset(),
}


class InvalidTransition(RuntimeError):
    pass


class RunStateMachine:
    """Tracks one run's state and rejects out-of-order transitions."""

    def __init__(self):
        self.state = PipelineState.PENDING
        self.history: List[PipelineState] = [self.state]

    def advance(self, target: PipelineState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)
