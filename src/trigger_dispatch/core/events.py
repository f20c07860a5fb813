"""
Event classification and context for one mutation event delivery.

Manifesto:
    The host platform classifies every mutation event with seven booleans
    (executing, before, after, insert, update, delete, undelete) and a
    record count. ``TriggerFlags`` captures that tuple by name and derives
    the phase and operation from it. ``TriggerContext`` is the immutable
    snapshot of the event handed to a handler: the new and old record
    sequences, their id-keyed maps, and the flags.

    - **Named fields only:** Flags are never passed positionally
    - **Derived, not stored:** ``phase`` and ``operation`` are computed from
      the flags so the two can never disagree
    - **Frozen snapshot:** The context is never mutated after construction;
      the records it holds are

Examples:
    >>> flags = TriggerFlags(is_executing=True, is_before=True, is_insert=True, size=2)
    >>> flags.phase, flags.operation
    (<Phase.BEFORE: 'before'>, <Operation.INSERT: 'insert'>)
    >>> TriggerFlags(is_before=True, is_after=True, is_insert=True).phase is None
    True

Tags:
    events, trigger-context, flags, immutable, trigger-dispatch
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from trigger_dispatch.core.errors import InvalidEventError
from trigger_dispatch.core.records import Record


class Phase(str, Enum):
    """When the event fires relative to persistence."""

    BEFORE = "before"
    AFTER = "after"


class Operation(str, Enum):
    """Kind of mutation applied to the batch of records."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    UNDELETE = "undelete"


@dataclass(frozen=True)
class TriggerFlags:
    """Classification of one event as delivered by the host platform."""

    is_executing: bool = False
    is_before: bool = False
    is_after: bool = False
    is_insert: bool = False
    is_update: bool = False
    is_delete: bool = False
    is_undelete: bool = False
    size: int = 0

    @property
    def phase(self) -> Phase | None:
        """The single phase set, or None if zero or both are set."""
        if self.is_before and not self.is_after:
            return Phase.BEFORE
        if self.is_after and not self.is_before:
            return Phase.AFTER
        return None

    @property
    def operation(self) -> Operation | None:
        """The single operation set, or None if zero or several are set."""
        selected = [
            op
            for op, on in (
                (Operation.INSERT, self.is_insert),
                (Operation.UPDATE, self.is_update),
                (Operation.DELETE, self.is_delete),
                (Operation.UNDELETE, self.is_undelete),
            )
            if on
        ]
        if len(selected) != 1:
            return None
        return selected[0]

    @classmethod
    def for_event(
        cls,
        phase: Phase | str,
        operation: Operation | str,
        size: int = 0,
        is_executing: bool = True,
    ) -> TriggerFlags:
        """Build the flag tuple of a real event.

        Raises:
            InvalidEventError: For an unknown phase or operation, and for
                before-undelete, which is never delivered.
        """
        try:
            event_phase = Phase(phase)
            event_operation = Operation(operation)
        except ValueError as e:
            raise InvalidEventError(f"Unknown event: {phase!r} {operation!r}", cause=e) from e
        phase, operation = event_phase, event_operation
        if phase is Phase.BEFORE and operation is Operation.UNDELETE:
            raise InvalidEventError("undelete events have no before phase")
        return cls(
            is_executing=is_executing,
            is_before=phase is Phase.BEFORE,
            is_after=phase is Phase.AFTER,
            is_insert=operation is Operation.INSERT,
            is_update=operation is Operation.UPDATE,
            is_delete=operation is Operation.DELETE,
            is_undelete=operation is Operation.UNDELETE,
            size=size,
        )


def _freeze_map(records: Mapping[str, Record] | None) -> Mapping[str, Record]:
    return MappingProxyType(dict(records or {}))


def _index(records: Iterable[Record]) -> dict[str, Record]:
    return {r.id: r for r in records if r.id is not None}


@dataclass(frozen=True)
class TriggerContext:
    """Immutable snapshot of one mutation event.

    Attributes:
        new: New record states (empty for delete)
        old: Old record states (empty for insert and undelete)
        new_map: Record id -> new state
        old_map: Record id -> old state
        flags: Event classification
    """

    new: tuple[Record, ...] = ()
    old: tuple[Record, ...] = ()
    new_map: Mapping[str, Record] = field(default_factory=lambda: MappingProxyType({}))
    old_map: Mapping[str, Record] = field(default_factory=lambda: MappingProxyType({}))
    flags: TriggerFlags = field(default_factory=TriggerFlags)

    def __post_init__(self) -> None:
        object.__setattr__(self, "new", tuple(self.new or ()))
        object.__setattr__(self, "old", tuple(self.old or ()))
        object.__setattr__(self, "new_map", _freeze_map(self.new_map))
        object.__setattr__(self, "old_map", _freeze_map(self.old_map))

    @property
    def size(self) -> int:
        return self.flags.size

    @classmethod
    def build(
        cls,
        phase: Phase | str,
        operation: Operation | str,
        new: Sequence[Record] | None = None,
        old: Sequence[Record] | None = None,
    ) -> TriggerContext:
        """Build a context the way the host platform would populate it.

        Maps are keyed by record id; records without an id (new records in a
        before-insert event) are left out of the maps.
        """
        new = tuple(new or ())
        old = tuple(old or ())
        flags = TriggerFlags.for_event(phase, operation, size=max(len(new), len(old)))
        return cls(new=new, old=old, new_map=_index(new), old_map=_index(old), flags=flags)


__all__ = ["Phase", "Operation", "TriggerFlags", "TriggerContext"]
