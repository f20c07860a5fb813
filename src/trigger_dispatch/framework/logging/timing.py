"""
Callback timing for dispatch logging.

One dispatched callback produces up to three log events, all named after
the callback:

- ``dispatch.<callback>.start`` (DEBUG) when the callback is entered
- ``dispatch.<callback>.end`` (INFO) with ``duration_ms`` on return
- ``dispatch.<callback>.error`` (ERROR) with the error's category, after
  which the exception propagates unchanged

While the callback runs, the log context carries its span id and step, so
anything the handler logs is tied to the callback.
"""

import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from trigger_dispatch.core.errors import categorize_error
from trigger_dispatch.framework.logging.context import get_context, get_logger, push_context


def _new_span_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class CallbackTiming:
    """Timing and outcome of one handler callback."""

    handler: str
    callback: str
    size: int = 0
    span_id: str = field(default_factory=_new_span_id)
    parent_span_id: str | None = None
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    error: Exception | None = None

    @property
    def event(self) -> str:
        return f"dispatch.{self.callback}"

    @property
    def duration_ms(self) -> float:
        end = self.ended_at if self.ended_at is not None else time.perf_counter()
        return (end - self.started_at) * 1000

    def finish(self, error: Exception | None = None) -> "CallbackTiming":
        """Record the end time (first call wins) and the error, if any."""
        if self.ended_at is None:
            self.ended_at = time.perf_counter()
        if error is not None:
            self.error = error
        return self

    def to_log_dict(self) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "handler": self.handler,
            "size": self.size,
            "span_id": self.span_id,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.parent_span_id:
            fields["parent_span_id"] = self.parent_span_id
        if self.error is not None:
            fields["status"] = "error"
            fields["error_type"] = type(self.error).__name__
            fields["error_message"] = str(self.error)
            fields["error_category"] = categorize_error(self.error).value
        return fields


@contextmanager
def log_callback(handler: str, callback: str, size: int = 0) -> Iterator[CallbackTiming]:
    """
    Time one handler callback and log its start, end or error.

    Args:
        handler: Handler class name
        callback: Callback name (e.g., "on_before_update")
        size: Number of records in the event

    Raises:
        Whatever the body raises, unchanged.
    """
    log = get_logger("trigger_dispatch.timing")

    timing = CallbackTiming(
        handler=handler,
        callback=callback,
        size=size,
        parent_span_id=get_context().span_id,
    )
    token = push_context(span_id=timing.span_id, parent_span_id=timing.parent_span_id, step=timing.event)

    try:
        log.debug(f"{timing.event}.start", handler=handler, size=size, span_id=timing.span_id)
        yield timing
    except Exception as e:
        log.error(f"{timing.event}.error", exc_info=True, **timing.finish(e).to_log_dict())
        raise
    finally:
        timing.finish()
        token.restore()

    log.info(f"{timing.event}.end", **timing.to_log_dict())
