"""
Trigger handlers: one class of business rules per entity type.

Manifesto:
    A handler reacts to one entity's mutation events. The base class is a
    complete no-op implementation of ``TriggerHandlerProtocol``, so an entity
    handler overrides only the callbacks it needs.

    - **Explicit context:** The event's records are passed to the
      constructor; handlers never reach for ambient globals
    - **Fail fast:** ``EntityTriggerHandler`` narrows the injected records to
      its record type at construction and refuses anything else
    - **Fail open:** A missing kill-switch record never disables a handler

Architecture:
    ::

        TriggerHandler                       (no-op callbacks, "all" switch)
            │
            └── EntityTriggerHandler         (record_type narrowing, entity switch)
                    │
                    └── AccountHandler       (your business rules)

Examples:
    >>> class Account(Record):
    ...     name: str
    ...     description: str | None = None
    >>> class AccountHandler(EntityTriggerHandler):
    ...     record_type = Account
    ...
    ...     def on_before_insert(self) -> None:
    ...         for acct in self.new:
    ...             acct.description = acct.description or acct.name
    >>> handler = AccountHandler.from_context(context)

Tags:
    handler, lifecycle-callbacks, kill-switch, trigger-dispatch
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

from trigger_dispatch.core.errors import HandlerConstructionError
from trigger_dispatch.core.kill_switch import ALL, default_lookup
from trigger_dispatch.core.records import Record, entity_name

if TYPE_CHECKING:
    from trigger_dispatch.core.events import TriggerContext
    from trigger_dispatch.core.protocols import KillSwitchLookup


class TriggerHandler:
    """
    No-op handler for every lifecycle callback.

    Construction takes the four event inputs, any of which may be absent
    (insert has no old records, delete has no new records). Absent inputs
    become an empty tuple or an empty mapping.

    Args:
        new: New record states
        old: Old record states
        new_map: Record id -> new state
        old_map: Record id -> old state
        kill_switches: Kill-switch lookup; defaults to the process-wide registry
    """

    def __init__(
        self,
        new: Sequence[Any] | None = None,
        old: Sequence[Any] | None = None,
        new_map: Mapping[str, Any] | None = None,
        old_map: Mapping[str, Any] | None = None,
        *,
        kill_switches: KillSwitchLookup | None = None,
    ) -> None:
        self.new: tuple[Any, ...] = tuple(new or ())
        self.old: tuple[Any, ...] = tuple(old or ())
        self.new_map: Mapping[str, Any] = MappingProxyType(dict(new_map or {}))
        self.old_map: Mapping[str, Any] = MappingProxyType(dict(old_map or {}))
        self._kill_switches = kill_switches or default_lookup

    @classmethod
    def from_context(cls, context: TriggerContext, **kwargs: Any) -> TriggerHandler:
        """Build a handler bound to one event's records."""
        return cls(context.new, context.old, context.new_map, context.old_map, **kwargs)

    def is_active(self) -> bool:
        """False only when the global ``"all"`` switch exists and is disabled."""
        record = self._kill_switches(ALL)
        return not (record is not None and record.disabled)

    def on_before_insert(self) -> None:
        pass

    def on_before_update(self) -> None:
        pass

    def on_before_delete(self) -> None:
        pass

    def on_after_insert(self) -> None:
        pass

    def on_after_update(self) -> None:
        pass

    def on_after_delete(self) -> None:
        pass

    def on_after_undelete(self) -> None:
        pass


class EntityTriggerHandler(TriggerHandler):
    """
    Base for handlers bound to one entity type.

    Subclasses set ``record_type``; ``entity`` defaults to the record type's
    entity name and doubles as the kill-switch key.

    Raises:
        HandlerConstructionError: If ``record_type`` is not set, or any
            injected record is not a ``record_type`` instance.
    """

    record_type: ClassVar[type[Record] | None] = None
    entity: ClassVar[str | None] = None

    def __init__(
        self,
        new: Sequence[Any] | None = None,
        old: Sequence[Any] | None = None,
        new_map: Mapping[str, Any] | None = None,
        old_map: Mapping[str, Any] | None = None,
        *,
        kill_switches: KillSwitchLookup | None = None,
    ) -> None:
        if self.record_type is None:
            raise HandlerConstructionError(
                f"{type(self).__name__} does not declare a record_type",
                expected="Record subclass",
                actual="None",
            )
        super().__init__(new, old, new_map, old_map, kill_switches=kill_switches)
        self._narrow("new", self.new)
        self._narrow("old", self.old)
        self._narrow("new_map", self.new_map.values())
        self._narrow("old_map", self.old_map.values())

    @classmethod
    def entity_name(cls) -> str:
        if cls.entity:
            return cls.entity
        if cls.record_type is None:
            return cls.__name__
        return entity_name(cls.record_type)

    def _narrow(self, source: str, records) -> None:
        for record in records:
            if not isinstance(record, self.record_type):
                raise HandlerConstructionError(
                    expected=self.record_type.__name__,
                    actual=type(record).__name__,
                    source=source,
                ).with_context(entity=self.entity_name())

    def is_active(self) -> bool:
        """Global check AND the entity's own switch (absent means enabled)."""
        if not super().is_active():
            return False
        record = self._kill_switches(self.entity_name())
        return not (record is not None and record.disabled)


__all__ = ["TriggerHandler", "EntityTriggerHandler"]
