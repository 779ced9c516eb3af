"""
Centralized error handling for the outreach pipeline.

Provides the structured error sink used for non-fatal failures
(persistence writes, cache reads) and small helpers for logging
exceptions consistently across stages.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class PipelineError:
    """
    Structured error information for pipeline failures.

    Provides consistent error tracking with severity and recoverability.
    """

    stage: str  # e.g., "research", "verify", "messaging", "cache"
    operation: str  # e.g., "merge_stage", "insert_history"
    severity: str  # "critical", "high", "medium", "low"
    message: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    recoverable: bool = True
    exception_type: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "stage": self.stage,
            "operation": self.operation,
            "severity": self.severity,
            "message": self.message,
            "timestamp": self.timestamp,
            "recoverable": self.recoverable,
            "exception_type": self.exception_type,
        }


class ErrorCollector:
    """
    Collects errors during pipeline execution.

    Every non-fatal failure of a run ends up here and in the log, so a run
    that completed with degraded persistence can still be diagnosed.
    """

    def __init__(self, run_id: Optional[str] = None):
        self.run_id = run_id
        self.errors: List[PipelineError] = []

    def add(self, error: PipelineError) -> None:
        self.errors.append(error)

    def add_error(
        self,
        stage: str,
        operation: str,
        message: str,
        severity: str = "medium",
        recoverable: bool = True,
        exception: Optional[BaseException] = None,
    ) -> PipelineError:
        """Record an error and log it at WARNING (or ERROR when not recoverable)."""
        error = PipelineError(
            stage=stage,
            operation=operation,
            message=message,
            severity=severity,
            recoverable=recoverable,
            exception_type=type(exception).__name__ if exception else None,
        )
        self.errors.append(error)
        prefix = f"[run:{self.run_id[-8:]}] " if self.run_id else ""
        logger.log(
            logging.WARNING if recoverable else logging.ERROR,
            f"{prefix}[{stage}] [{operation}] {message}",
        )
        return error

    def has_errors(self) -> bool:
        return bool(self.errors)

    def get_error_messages(self) -> List[str]:
        return [e.message for e in self.errors]

    def summary(self) -> dict:
        """Get error summary statistics."""
        by_severity = {"critical": 0, "high": 0, "medium": 0, "low": 0}
        for error in self.errors:
            if error.severity in by_severity:
                by_severity[error.severity] += 1
        return {
            "total": len(self.errors),
            "by_severity": by_severity,
            "recoverable": sum(1 for e in self.errors if e.recoverable),
            "non_recoverable": sum(1 for e in self.errors if not e.recoverable),
        }


async def persist_best_effort(
    collector: ErrorCollector,
    stage: str,
    operation: str,
    func: Callable[..., T],
    *args,
    fallback: Any = None,
    **kwargs,
) -> Any:
    """
    Run a blocking store call in a worker thread without failing the caller.

    Any exception is recorded in the collector and ``fallback`` is returned.
    Cancellation is not intercepted.

    Usage:
        record_id = await persist_best_effort(
            errors, "research", "merge_stage", merger.merge_stage, None, "research", payload
        )
    """
    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except Exception as e:
        collector.add_error(
            stage=stage,
            operation=operation,
            message=f"{operation} failed: {e}",
            severity="medium",
            recoverable=True,
            exception=e,
        )
        return fallback


def log_on_exception(
    logger: logging.Logger,
    operation: str,
    level: int = logging.WARNING,
    include_traceback: bool = False,
):
    """
    Context manager for logging exceptions without swallowing them.

    Usage:
        with log_on_exception(logger, "Mongo index creation", level=logging.ERROR):
            collection.create_index(...)
    """

    class ExceptionLogger:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None:
                logger.log(level, f"[{operation}] Failed: {exc_val}", exc_info=include_traceback)
            return False

    return ExceptionLogger()
