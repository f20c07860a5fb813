"""
Trigger dispatcher - routes one mutation event to one handler callback.

Manifesto:
    One event, one handler, at most one callback. The dispatcher owns the
    event's flags and a fixed reference to a handler. ``dispatch()`` checks
    the handler's kill switch, picks the callback from the routing table and
    calls it. It catches nothing: a failing before-phase callback must be
    able to abort the pending persistence operation.

Architecture:
    ::

        dispatch()
          │
          ├─ handler.is_active() ── False ──► return (dispatch.skipped)
          │
          ├─ route(flags) ────────── None ──► return (dispatch.unrouted)
          │
          └─ getattr(handler, callback)()  ── raises ──► propagates unchanged

        Routing table:
        ┌────────────────────┬────────────────────┐
        │ (BEFORE, INSERT)   │ on_before_insert   │
        │ (BEFORE, UPDATE)   │ on_before_update   │
        │ (BEFORE, DELETE)   │ on_before_delete   │
        │ (AFTER, INSERT)    │ on_after_insert    │
        │ (AFTER, UPDATE)    │ on_after_update    │
        │ (AFTER, DELETE)    │ on_after_delete    │
        │ (AFTER, UNDELETE)  │ on_after_undelete  │
        └────────────────────┴────────────────────┘

Examples:
    >>> dispatcher = TriggerDispatcher.from_flags(
    ...     handler, is_executing=True, is_before=True, is_insert=True, size=1
    ... )
    >>> dispatcher.dispatch()

Tags:
    dispatcher, routing, state-machine, kill-switch, trigger-dispatch
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from trigger_dispatch.core.events import Operation, Phase, TriggerContext, TriggerFlags
from trigger_dispatch.core.protocols import TriggerHandlerProtocol
from trigger_dispatch.framework.logging import get_logger, log_callback

log = get_logger(__name__)


ROUTES: Mapping[tuple[Phase, Operation], str] = MappingProxyType(
    {
        (Phase.BEFORE, Operation.INSERT): "on_before_insert",
        (Phase.BEFORE, Operation.UPDATE): "on_before_update",
        (Phase.BEFORE, Operation.DELETE): "on_before_delete",
        (Phase.AFTER, Operation.INSERT): "on_after_insert",
        (Phase.AFTER, Operation.UPDATE): "on_after_update",
        (Phase.AFTER, Operation.DELETE): "on_after_delete",
        (Phase.AFTER, Operation.UNDELETE): "on_after_undelete",
    }
)


def route(flags: TriggerFlags) -> str | None:
    """Name of the callback for ``flags``, or None if no row matches.

    A row matches only when exactly one phase flag and exactly one operation
    flag are set. Before-undelete has no row.
    """
    phase = flags.phase
    operation = flags.operation
    if phase is None or operation is None:
        return None
    return ROUTES.get((phase, operation))


class TriggerDispatcher:
    """
    Routes one event to one handler.

    The handler binding and the flags are fixed at construction. The
    dispatcher keeps no state between calls, so calling ``dispatch()`` twice
    runs the selected callback twice.
    """

    __slots__ = ("_handler", "_flags")

    def __init__(self, handler: TriggerHandlerProtocol, flags: TriggerFlags) -> None:
        if handler is None:
            raise ValueError("TriggerDispatcher requires a handler")
        self._handler = handler
        self._flags = flags

    @classmethod
    def from_flags(
        cls,
        handler: TriggerHandlerProtocol,
        *,
        is_executing: bool = False,
        is_before: bool = False,
        is_after: bool = False,
        is_insert: bool = False,
        is_update: bool = False,
        is_delete: bool = False,
        is_undelete: bool = False,
        size: int = 0,
    ) -> TriggerDispatcher:
        """Build from named event flags."""
        flags = TriggerFlags(
            is_executing=is_executing,
            is_before=is_before,
            is_after=is_after,
            is_insert=is_insert,
            is_update=is_update,
            is_delete=is_delete,
            is_undelete=is_undelete,
            size=size,
        )
        return cls(handler, flags)

    @classmethod
    def from_context(cls, context: TriggerContext, handler: TriggerHandlerProtocol) -> TriggerDispatcher:
        return cls(handler, context.flags)

    @property
    def handler(self) -> TriggerHandlerProtocol:
        return self._handler

    @property
    def flags(self) -> TriggerFlags:
        return self._flags

    @property
    def callback_name(self) -> str | None:
        """Callback this dispatcher would invoke if the handler is active."""
        return route(self._flags)

    def dispatch(self) -> None:
        """Invoke the single matching callback if the handler is active.

        Raises:
            Whatever the selected callback raises, unchanged.
        """
        handler_name = type(self._handler).__name__

        if not self._handler.is_active():
            log.info("dispatch.skipped", handler=handler_name, reason="inactive")
            return

        callback_name = route(self._flags)
        if callback_name is None:
            log.debug(
                "dispatch.unrouted",
                handler=handler_name,
                phase=self._flags.phase,
                operation=self._flags.operation,
            )
            return

        callback = getattr(self._handler, callback_name)
        with log_callback(handler_name, callback_name, size=self._flags.size):
            callback()

    def __repr__(self) -> str:
        return f"TriggerDispatcher(handler={type(self._handler).__name__}, callback={self.callback_name})"


__all__ = ["ROUTES", "route", "TriggerDispatcher"]
