"""Event-delivery entry point.

``run_trigger`` is what a host platform's per-entity hook calls once per
event delivery: build the entity's handler from the event, bind it to a
dispatcher, dispatch once.

Deliveries nest: an after-phase callback that writes related records
triggers another delivery. The inner delivery logs under its own
``dispatch_id`` with ``parent_dispatch_id`` pointing at the outer one, and
the outer context is restored when it returns.

Usage:
    from trigger_dispatch.framework.entrypoint import run_trigger

    ctx = TriggerContext.build("before", "update", new=new_rows, old=old_rows)
    run_trigger("Account", ctx)
"""

from __future__ import annotations

from trigger_dispatch.core.events import TriggerContext
from trigger_dispatch.core.protocols import KillSwitchLookup
from trigger_dispatch.framework.dispatcher import TriggerDispatcher
from trigger_dispatch.framework.logging import get_context, get_logger, new_dispatch_id, push_context
from trigger_dispatch.framework.registry import get_handler

log = get_logger(__name__)


def run_trigger(
    entity: str,
    context: TriggerContext,
    *,
    kill_switches: KillSwitchLookup | None = None,
) -> TriggerDispatcher:
    """
    Deliver one event to the entity's registered handler.

    Args:
        entity: Entity name the handler is registered under
        context: The event snapshot
        kill_switches: Optional lookup injected into the handler

    Returns:
        The dispatcher that handled the event

    Raises:
        HandlerNotFoundError: If no handler is registered for ``entity``
        HandlerConstructionError: If the records don't fit the handler
        Exception: Anything the selected callback raises, unchanged
    """
    flags = context.flags
    token = push_context(
        replace=True,
        dispatch_id=new_dispatch_id(),
        parent_dispatch_id=get_context().dispatch_id,
        entity=entity,
        phase=flags.phase.value if flags.phase else None,
        operation=flags.operation.value if flags.operation else None,
        record_count=flags.size,
    )
    try:
        log.debug("trigger.received", is_executing=flags.is_executing)

        handler_cls = get_handler(entity)
        handler = handler_cls.from_context(context, kill_switches=kill_switches)
        dispatcher = TriggerDispatcher.from_context(context, handler)
        dispatcher.dispatch()
        return dispatcher
    finally:
        token.restore()
