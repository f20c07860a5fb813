"""
Logging context management using contextvars.

Every log entry emitted while an event is being delivered carries the
event's classification (entity, phase, operation, record count) and the
delivery id, without passing them through every call.

Design choice: contextvars
- Thread-safe and asyncio-compatible
- Clean integration with structlog processors
"""

import uuid
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Any

import structlog


def new_dispatch_id() -> str:
    """Generate a short delivery id (12 hex chars)."""
    return uuid.uuid4().hex[:12]


@dataclass
class LogContext:
    """
    Delivery context attached to all log entries.

    Event identifiers:
        dispatch_id: Unique id of one event delivery
        parent_dispatch_id: Delivery that was running when this one started
        entity: Entity type name (e.g., "Account")
        phase: "before" or "after"
        operation: "insert", "update", "delete" or "undelete"
        record_count: Number of records in the event

    Tracing (for nested timing blocks):
        span_id: Current span identifier
        parent_span_id: Parent span for nested steps
        step: Current step name
    """

    dispatch_id: str | None = None
    parent_dispatch_id: str | None = None
    entity: str | None = None
    phase: str | None = None
    operation: str | None = None
    record_count: int | None = None

    # Tracing
    span_id: str | None = None
    parent_span_id: str | None = None
    step: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merge(self, **kwargs) -> "LogContext":
        """Create new context with merged values."""
        current = asdict(self)
        current.update({k: v for k, v in kwargs.items() if v is not None and k in current})
        return LogContext(**current)


_log_context: ContextVar[LogContext] = ContextVar("trigger_log_context")  # noqa: B039


def get_context() -> LogContext:
    """Get the current log context."""
    return _log_context.get(LogContext())


def set_context(
    dispatch_id: str | None = None,
    parent_dispatch_id: str | None = None,
    entity: str | None = None,
    phase: str | None = None,
    operation: str | None = None,
    record_count: int | None = None,
    span_id: str | None = None,
    parent_span_id: str | None = None,
    step: str | None = None,
) -> LogContext:
    """
    Set the current log context.

    This replaces the current context. Use bind_context() to add to existing.
    """
    ctx = LogContext(
        dispatch_id=dispatch_id,
        parent_dispatch_id=parent_dispatch_id,
        entity=entity,
        phase=phase,
        operation=operation,
        record_count=record_count,
        span_id=span_id,
        parent_span_id=parent_span_id,
        step=step,
    )
    _log_context.set(ctx)
    return ctx


def bind_context(**kwargs) -> LogContext:
    """Merge values into the current context."""
    updated = get_context().merge(**kwargs)
    _log_context.set(updated)
    return updated


def clear_context() -> None:
    """Clear the current context (reset to empty)."""
    _log_context.set(LogContext())


class _ContextToken:
    """Token for restoring context after a scoped operation."""

    def __init__(self, token):
        self._token = token

    def restore(self):
        """Restore the previous context."""
        _log_context.reset(self._token)


def push_context(*, replace: bool = False, **kwargs) -> _ContextToken:
    """
    Push new context values, returning a token to restore later.

    With ``replace=True`` the pushed context starts empty instead of
    inheriting the current values.

    Usage:
        token = push_context(step="dispatch.on_before_insert")
        try:
            do_work()
        finally:
            token.restore()
    """
    base = LogContext() if replace else get_context()
    token = _log_context.set(base.merge(**kwargs))
    return _ContextToken(token)


def add_context_processor(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that adds the delivery context to every entry."""
    for key, value in get_context().to_dict().items():
        if key not in event_dict:
            event_dict[key] = value
    return event_dict


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)
