"""Trigger Dispatch Core -- event model, records, kill switches, errors.

Architecture::

    errors.py        Structured error hierarchy (TriggerError, HandlerConstructionError)
    events.py        Phase / Operation enums, TriggerFlags, TriggerContext
    records.py       Record base model for entity record shapes
    kill_switch.py   Kill-switch records, registry and lookups
    protocols.py     Activatable, TriggerHandlerProtocol, KillSwitchLookup
    settings.py      DispatchSettings (pydantic-settings)
"""

from trigger_dispatch.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    HandlerConstructionError,
    HandlerError,
    HandlerNotFoundError,
    InvalidConfigError,
    InvalidEventError,
    TriggerError,
    categorize_error,
)
from trigger_dispatch.core.events import Operation, Phase, TriggerContext, TriggerFlags
from trigger_dispatch.core.kill_switch import (
    ALL,
    KillSwitchRecord,
    KillSwitchRegistry,
    KillSwitches,
    default_lookup,
    fixed_lookup,
)
from trigger_dispatch.core.protocols import Activatable, KillSwitchLookup, TriggerHandlerProtocol
from trigger_dispatch.core.records import Record, entity_name

__all__ = [
    # Errors
    "TriggerError",
    "ErrorCategory",
    "ErrorContext",
    "HandlerError",
    "HandlerConstructionError",
    "HandlerNotFoundError",
    "InvalidEventError",
    "ConfigError",
    "InvalidConfigError",
    "categorize_error",
    # Events
    "Phase",
    "Operation",
    "TriggerFlags",
    "TriggerContext",
    # Records
    "Record",
    "entity_name",
    # Kill switches
    "ALL",
    "KillSwitchRecord",
    "KillSwitchRegistry",
    "KillSwitches",
    "default_lookup",
    "fixed_lookup",
    # Protocols
    "Activatable",
    "TriggerHandlerProtocol",
    "KillSwitchLookup",
]
