"""
Pipeline lifecycle events.

Status and intermediate events are cumulative: each one carries the full
map merged so far, so a client that only keeps the latest event of each
kind still has the whole picture.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class EventKind(str, Enum):
    STATUS = "status"
    INTERMEDIATE = "intermediate"
    FINAL = "final"
    ERROR = "error"


@dataclass(frozen=True)
class PipelineEvent:
    kind: EventKind
    data: Dict[str, Any]

    @property
    def is_terminal(self) -> bool:
        return self.kind in (EventKind.FINAL, EventKind.ERROR)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "data": self.data}


class RunProgress:
    """Accumulates status and intermediate content for one run."""

    def __init__(self):
        self.status: Dict[str, str] = {}
        self.intermediate: Dict[str, Any] = {}

    def status_event(self, **updates: Any) -> PipelineEvent:
        for stage, value in updates.items():
            self.status[stage] = value.value if isinstance(value, Enum) else value
        return PipelineEvent(EventKind.STATUS, dict(self.status))

    def intermediate_event(self, **updates: Any) -> PipelineEvent:
        self.intermediate.update(updates)
        return PipelineEvent(EventKind.INTERMEDIATE, dict(self.intermediate))

    def final_event(self, payload: Dict[str, Any]) -> PipelineEvent:
        return PipelineEvent(
            EventKind.FINAL,
            {**payload, "_status": dict(self.status), "_intermediate": dict(self.intermediate)},
        )

    @staticmethod
    def error_event(message: str, tag: str, stage: str) -> PipelineEvent:
        return PipelineEvent(EventKind.ERROR, {"message": message, "tag": tag, "stage": stage})
