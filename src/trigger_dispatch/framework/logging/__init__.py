"""
Trigger Dispatch Logging - structured, delivery-aware logging.

Usage:
    from trigger_dispatch.framework.logging import configure_logging, get_logger, log_callback

    configure_logging()
    log = get_logger(__name__)

    with log_callback("AccountHandler", "on_before_insert", size=1):
        handler.on_before_insert()
"""

from trigger_dispatch.framework.logging.config import configure_logging, is_configured
from trigger_dispatch.framework.logging.context import (
    LogContext,
    bind_context,
    clear_context,
    get_context,
    get_logger,
    new_dispatch_id,
    push_context,
    set_context,
)
from trigger_dispatch.framework.logging.timing import CallbackTiming, log_callback

__all__ = [
    # Configuration
    "configure_logging",
    "is_configured",
    # Context
    "get_logger",
    "set_context",
    "clear_context",
    "get_context",
    "bind_context",
    "push_context",
    "new_dispatch_id",
    "LogContext",
    # Timing
    "CallbackTiming",
    "log_callback",
]
