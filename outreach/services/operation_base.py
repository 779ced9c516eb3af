"""
Base class for on-demand outreach operations.

Operations that run outside the streamed pipeline (message regeneration,
LinkedIn rephrase) extend this to get consistent run ids, timing and
result shapes.
"""

import logging
import time
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    """Result from an operation execution."""

    success: bool
    run_id: str
    operation: str
    data: Dict[str, Any]
    duration_ms: int
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "run_id": self.run_id,
            "operation": self.operation,
            "data": self.data,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "warnings": self.warnings,
            "timestamp": self.timestamp.isoformat(),
        }


class OperationService(ABC):
    """Base class for on-demand operations."""

    operation_name: str  # Override in subclass

    @abstractmethod
    async def execute(self, **kwargs) -> OperationResult:
        """Execute the operation. Override in subclass."""

    def create_run_id(self) -> str:
        """
        Generate unique run ID for tracking.

        Returns:
            Unique run ID string in format "op_{operation}_{random_hex}"
        """
        return f"op_{self.operation_name}_{uuid.uuid4().hex[:12]}"

    def create_success_result(
        self,
        run_id: str,
        data: Dict[str, Any],
        duration_ms: int,
        warnings: Optional[List[str]] = None,
    ) -> OperationResult:
        return OperationResult(
            success=True,
            run_id=run_id,
            operation=self.operation_name,
            data=data,
            duration_ms=duration_ms,
            warnings=warnings or [],
        )

    def create_error_result(self, run_id: str, error: str, duration_ms: int) -> OperationResult:
        return OperationResult(
            success=False,
            run_id=run_id,
            operation=self.operation_name,
            data={},
            duration_ms=duration_ms,
            error=error,
        )

    @contextmanager
    def timed_execution(self) -> Generator["OperationTimer", None, None]:
        """
        Context manager for timing operation execution.

        Usage:
            with self.timed_execution() as timer:
                # do work
                pass
            duration_ms = timer.duration_ms
        """
        timer = OperationTimer()
        try:
            yield timer
        finally:
            timer.stop()


@dataclass
class OperationTimer:
    """Wall-clock timer started on construction."""

    start_time: float = field(default_factory=time.monotonic)
    end_time: Optional[float] = None

    def stop(self) -> None:
        if self.end_time is None:
            self.end_time = time.monotonic()

    @property
    def duration_ms(self) -> int:
        end = self.end_time if self.end_time is not None else time.monotonic()
        return int((end - self.start_time) * 1000)
