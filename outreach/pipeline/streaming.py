"""
NDJSON progress stream.

Each pipeline event becomes one line ``{"type": ..., "data": ...}``. The
stream carries exactly one terminal line (final or error) and ends right
after it. The decoder side tolerates malformed or partial lines.
"""

import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterable, Iterator, List, Optional, Union

from outreach.pipeline.events import PipelineEvent, RunProgress

logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "application/x-ndjson"
STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}

INCOMPLETE_RUN_MESSAGE = "Pipeline ended without a result"


def encode_event(event: Union[PipelineEvent, Dict[str, Any]]) -> str:
    """Serialize one event as a single NDJSON line."""
    payload = event.to_dict() if isinstance(event, PipelineEvent) else event
    return json.dumps(payload, ensure_ascii=False, default=str) + "\n"


class ProgressStreamEncoder:
    """
    Turns an orchestrator event iterator into NDJSON lines.

    Guarantees, regardless of how the orchestrator behaves:
    - events are written in the order produced
    - at most one terminal line is written, and nothing after it
    - a synthetic error line is written if the orchestrator stops or
      raises before producing a terminal event
    - iteration stops when the client is gone; the orchestrator generator
      is closed so no further stage starts
    """

    def __init__(
        self,
        events: AsyncIterator[PipelineEvent],
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
        run_id: Optional[str] = None,
    ):
        self.events = events
        self.is_disconnected = is_disconnected
        self.run_id = run_id
        self.terminal_sent = False
        self.disconnected = False

    def _prefix(self) -> str:
        return f"[run:{self.run_id[-8:]}] " if self.run_id else ""

    async def stream(self) -> AsyncIterator[str]:
        try:
            async for event in self.events:
                if self.is_disconnected is not None and await self.is_disconnected():
                    self.disconnected = True
                    logger.info(f"{self._prefix()}Client disconnected, stopping stream")
                    return
                yield encode_event(event)
                if event.is_terminal:
                    self.terminal_sent = True
                    return
            logger.error(f"{self._prefix()}Event source ended without a terminal event")
            self.terminal_sent = True
            yield encode_event(RunProgress.error_event(INCOMPLETE_RUN_MESSAGE, "PipelineFailed", "pipeline"))
        except Exception as e:
            logger.exception(f"{self._prefix()}Unexpected pipeline error: {e}")
            if not self.terminal_sent:
                self.terminal_sent = True
                yield encode_event(RunProgress.error_event(str(e) or type(e).__name__, "PipelineFailed", "pipeline"))
        finally:
            aclose = getattr(self.events, "aclose", None)
            if aclose is not None:
                await aclose()

    def __aiter__(self) -> AsyncIterator[str]:
        return self.stream()


# ===== Decoding =====

def _decode_line(line: Union[str, bytes]) -> Optional[Dict[str, Any]]:
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    line = line.strip()
    if not line:
        return None
    try:
        obj = json.loads(line)
    except json.JSONDecodeError:
        logger.debug(f"Skipping malformed stream line: {line[:80]}")
        return None
    if not isinstance(obj, dict) or "type" not in obj:
        return None
    return obj


def decode_ndjson_lines(lines: Iterable[Union[str, bytes]]) -> Iterator[Dict[str, Any]]:
    """Yield decoded events from complete lines, skipping malformed ones."""
    for line in lines:
        obj = _decode_line(line)
        if obj is not None:
            yield obj


class NdjsonDecoder:
    """Incremental decoder for chunked NDJSON bodies."""

    def __init__(self):
        self._buffer = ""

    def feed(self, chunk: Union[str, bytes]) -> List[Dict[str, Any]]:
        if isinstance(chunk, bytes):
            chunk = chunk.decode("utf-8", errors="replace")
        self._buffer += chunk
        *complete, self._buffer = self._buffer.split("\n")
        return list(decode_ndjson_lines(complete))

    def flush(self) -> List[Dict[str, Any]]:
        remainder, self._buffer = self._buffer, ""
        return list(decode_ndjson_lines([remainder]))
