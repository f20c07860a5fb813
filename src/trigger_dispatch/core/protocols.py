"""
Canonical protocol definitions for trigger dispatch.

Manifesto:
    Protocols define contracts without inheritance. A handler does not have
    to derive from ``TriggerHandler`` to be dispatched: any object with
    ``is_active()`` and the seven callbacks works. ``TriggerHandler`` is the
    embeddable no-op default, not a requirement.

Architecture:
    ::

        protocols.py
        ├── Activatable             : is_active() gate checked before routing
        ├── TriggerHandlerProtocol  : Activatable + seven lifecycle callbacks
        └── KillSwitchLookup        : name -> KillSwitchRecord | None

Tags:
    protocol, handler, kill-switch, contracts, trigger-dispatch
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from trigger_dispatch.core.kill_switch import KillSwitchRecord


@runtime_checkable
class Activatable(Protocol):
    """Something that can report whether it should run."""

    def is_active(self) -> bool:
        """Return False to skip every callback."""
        ...


@runtime_checkable
class TriggerHandlerProtocol(Activatable, Protocol):
    """Lifecycle callbacks of one entity handler.

    Before-phase callbacks may mutate the new records in place; after-phase
    callbacks see already persisted data.
    """

    def on_before_insert(self) -> None: ...

    def on_before_update(self) -> None: ...

    def on_before_delete(self) -> None: ...

    def on_after_insert(self) -> None: ...

    def on_after_update(self) -> None: ...

    def on_after_delete(self) -> None: ...

    def on_after_undelete(self) -> None: ...


@runtime_checkable
class KillSwitchLookup(Protocol):
    """Return the kill-switch record for a name, or None if none is configured."""

    def __call__(self, name: str) -> KillSwitchRecord | None: ...


__all__ = ["Activatable", "TriggerHandlerProtocol", "KillSwitchLookup"]
