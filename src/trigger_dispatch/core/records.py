"""Record shapes carried by mutation events.

Every entity record is a pydantic model deriving from ``Record``. Records
are deliberately mutable: before-phase handlers write fields back into the
"new" records and the host platform persists whatever the objects hold
when the callback returns.

Tags:
    records, pydantic, entity, trigger-dispatch
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Record(BaseModel):
    """Base record model.

    Subclasses declare the fields of one entity type. ``__entity__`` may be
    set to override the entity name derived from the class name.

    Example:
        >>> class Account(Record):
        ...     name: str
        ...     billing_city: str | None = None
        >>> acct = Account(id="001", name="Acme")
        >>> acct.billing_city = "Paris"
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    id: str | None = None


def entity_name(record_type: type[Record]) -> str:
    """Return the entity name for a record type."""
    return getattr(record_type, "__entity__", None) or record_type.__name__


__all__ = ["Record", "entity_name"]
