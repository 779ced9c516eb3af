"""
Centralized logging configuration for the outreach pipeline.

Provides structured logging with run_id and stage tagging so that the
research, verify and messaging steps of one run can be correlated.
"""

import logging
import os
import sys
from typing import Optional


# Global debug mode flag, set via environment
_GLOBAL_DEBUG_MODE = os.getenv("DEBUG_MODE", "false").lower() == "true"


def is_debug_mode() -> bool:
    """Check if debug mode is enabled globally."""
    return _GLOBAL_DEBUG_MODE


class PipelineLogger:
    """
    Structured logger for pipeline execution.

    Adds contextual information like run_id and stage to all log messages.
    """

    def __init__(
        self,
        name: str,
        run_id: Optional[str] = None,
        stage: Optional[str] = None,
        debug_mode: Optional[bool] = None
    ):
        """
        Initialize pipeline logger.

        Args:
            name: Logger name (usually __name__)
            run_id: Optional run identifier for correlation
            stage: Optional stage name ("research", "verify", "messaging")
            debug_mode: If True, enables DEBUG level for this logger.
                       If None, uses global debug mode setting.
        """
        self.logger = logging.getLogger(name)
        self.run_id = run_id
        self.stage = stage

        self._debug_mode = debug_mode if debug_mode is not None else is_debug_mode()
        if self._debug_mode:
            self.logger.setLevel(logging.DEBUG)

    def bind(self, stage: Optional[str]) -> "PipelineLogger":
        """Return a logger for the same run tagged with another stage."""
        return PipelineLogger(self.logger.name, self.run_id, stage, self._debug_mode)

    def _format_message(self, message: str) -> str:
        prefix_parts = []
        if self.run_id:
            prefix_parts.append(f"[run:{self.run_id[-8:]}]")
        if self.stage:
            prefix_parts.append(f"[{self.stage}]")

        if prefix_parts:
            return f"{' '.join(prefix_parts)} {message}"
        return message

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format_message(message), **kwargs)

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message(message), **kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_message(message), **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(self._format_message(message), **kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with traceback."""
        self.logger.exception(self._format_message(message), **kwargs)


def setup_logging(level: str = "INFO", format: str = "simple") -> None:
    """
    Configure global logging settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Log format ("simple" or "json")
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    if format == "json":
        # Parseable by log aggregators
        formatter = logging.Formatter(
            '{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


def get_logger(
    name: str,
    run_id: Optional[str] = None,
    stage: Optional[str] = None,
    debug_mode: Optional[bool] = None
) -> PipelineLogger:
    """Get a pipeline logger instance."""
    return PipelineLogger(name, run_id, stage, debug_mode)
