"""Kill switches for trigger handlers.

Operators disable business-rule execution without a deployment by flipping a
kill switch. Switches are keyed by name: ``"all"`` disables every handler,
an entity name (``"Account"``) disables that entity's handler.

Manifesto:
    - **Fail open:** No record for a name means enabled. Missing configuration
      must never silently switch business rules off
    - **Injected, not ambient:** Handlers receive a ``KillSwitchLookup``
      callable; the process-wide registry is only the default
    - **Environment-aware:** ``TRIGGER_KS_<NAME>=true`` disables a handler
      for a whole deployment
    - **Thread-safe:** Operators may flip switches from another thread

Architecture:
    ::

        lookup("Account")
             │
             ▼
        ┌──────────────────────────────────────────────────────┐
        │                 Resolution Order                       │
        │  1. Runtime record  (KillSwitches.disable("Account")) │
        │  2. Environment     (TRIGGER_KS_ACCOUNT=true)          │
        │  3. None            -> caller treats as enabled        │
        └──────────────────────────────────────────────────────┘

Examples:
    >>> from trigger_dispatch.core.kill_switch import KillSwitches, ALL
    >>> KillSwitches.disable("Account", reason="bad deploy")
    >>> KillSwitches.lookup("Account").disabled
    True
    >>> KillSwitches.lookup("Contact") is None
    True
    >>> with KillSwitches.override(ALL, True):
    ...     assert KillSwitches.is_disabled(ALL)

Tags:
    kill-switch, circuit-breaker, configuration, runtime, trigger-dispatch
"""

from __future__ import annotations

import os
import re
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from trigger_dispatch.core.errors import InvalidConfigError
from trigger_dispatch.core.settings import get_settings

logger = structlog.get_logger(__name__)

# Key of the switch that disables every handler
ALL = "all"

_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


@dataclass(frozen=True)
class KillSwitchRecord:
    """One configured kill switch.

    Attributes:
        name: ``"all"`` or an entity name
        disabled: True when the handler(s) must not run
        reason: Free-text note for operators
        source: "runtime" or "env"
        updated_at: When the record was set
    """

    name: str
    disabled: bool
    reason: str = ""
    source: str = "runtime"
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


def _validate_name(name: str) -> None:
    if not isinstance(name, str) or not _NAME_RE.match(name):
        raise InvalidConfigError("kill_switch.name", name, f"Invalid kill switch name: {name!r}")


def _parse_env_value(env_value: str) -> bool | None:
    lowered = env_value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


class KillSwitchRegistry:
    """Thread-safe store of kill-switch records.

    Use the ``KillSwitches`` static interface for the process-wide registry.
    """

    def __init__(self, env_prefix: str | None = None):
        self._records: dict[str, KillSwitchRecord] = {}
        self._env_cache: dict[tuple[str, str], KillSwitchRecord | None] = {}
        self._env_prefix = env_prefix
        self._lock = threading.RLock()

    @property
    def env_prefix(self) -> str:
        return self._env_prefix or get_settings().kill_switch_env_prefix

    def set(self, name: str, disabled: bool, reason: str = "") -> KillSwitchRecord:
        """Create or replace the runtime record for ``name``."""
        _validate_name(name)
        record = KillSwitchRecord(name=name, disabled=bool(disabled), reason=reason)
        with self._lock:
            self._records[name] = record
        logger.info("kill_switch.set", name=name, disabled=record.disabled, reason=reason)
        return record

    def disable(self, name: str, reason: str = "") -> KillSwitchRecord:
        return self.set(name, True, reason)

    def enable(self, name: str, reason: str = "") -> KillSwitchRecord:
        return self.set(name, False, reason)

    def remove(self, name: str) -> None:
        """Drop the runtime record; lookups fall back to the environment."""
        with self._lock:
            self._records.pop(name, None)

    def lookup(self, name: str) -> KillSwitchRecord | None:
        """Return the record for ``name`` or None if nothing is configured.

        Resolution order:
        1. Runtime record
        2. Environment variable (``<prefix><NAME>``), read once per prefix
           and name, absent values included, until ``clear_env_cache()``
        3. None
        """
        with self._lock:
            record = self._records.get(name)
            if record is not None:
                return record

            key = (self.env_prefix, name)
            if key not in self._env_cache:
                self._env_cache[key] = self._read_env(*key)
            return self._env_cache[key]

    def _read_env(self, prefix: str, name: str) -> KillSwitchRecord | None:
        env_name = f"{prefix}{name.upper()}"
        env_value = os.environ.get(env_name)
        if env_value is None:
            return None
        disabled = _parse_env_value(env_value)
        if disabled is None:
            # Unparseable values fail open
            logger.warning("kill_switch.env_invalid", env_var=env_name, value=env_value)
            return None
        return KillSwitchRecord(name=name, disabled=disabled, source="env")

    def is_disabled(self, name: str) -> bool:
        record = self.lookup(name)
        return record is not None and record.disabled

    def list_records(self) -> list[KillSwitchRecord]:
        """List runtime records."""
        with self._lock:
            return list(self._records.values())

    def clear_env_cache(self) -> None:
        """Forget cached environment reads.

        Call this if environment variables change at runtime.
        """
        with self._lock:
            self._env_cache.clear()

    def clear(self) -> None:
        """Clear records and env cache (mainly for testing)."""
        with self._lock:
            self._records.clear()
            self._env_cache.clear()

    @contextmanager
    def override(self, name: str, disabled: bool) -> Iterator[None]:
        """Temporarily set a switch, restoring the previous record afterwards."""
        with self._lock:
            previous = self._records.get(name)

        self.set(name, disabled, reason="override")
        try:
            yield
        finally:
            with self._lock:
                if previous is not None:
                    self._records[name] = previous
                else:
                    self._records.pop(name, None)


# Global registry instance
_registry = KillSwitchRegistry()


class KillSwitches:
    """Static interface for the process-wide kill-switch registry."""

    @staticmethod
    def set(name: str, disabled: bool, reason: str = "") -> KillSwitchRecord:
        return _registry.set(name, disabled, reason)

    @staticmethod
    def disable(name: str, reason: str = "") -> KillSwitchRecord:
        """Disable the handler(s) keyed by ``name``.

        Example:
            >>> KillSwitches.disable(ALL, reason="data migration running")
        """
        return _registry.disable(name, reason)

    @staticmethod
    def enable(name: str, reason: str = "") -> KillSwitchRecord:
        return _registry.enable(name, reason)

    @staticmethod
    def remove(name: str) -> None:
        _registry.remove(name)

    @staticmethod
    def lookup(name: str) -> KillSwitchRecord | None:
        return _registry.lookup(name)

    @staticmethod
    def is_disabled(name: str) -> bool:
        return _registry.is_disabled(name)

    @staticmethod
    def list_records() -> list[KillSwitchRecord]:
        return _registry.list_records()

    @staticmethod
    def clear_env_cache() -> None:
        _registry.clear_env_cache()

    @staticmethod
    def override(name: str, disabled: bool):
        """Temporarily override a switch.

        Example:
            >>> with KillSwitches.override("Account", True):
            ...     assert KillSwitches.is_disabled("Account")
        """
        return _registry.override(name, disabled)

    @staticmethod
    def _clear_for_testing() -> None:
        _registry.clear()


def default_lookup(name: str) -> KillSwitchRecord | None:
    """Lookup against the process-wide registry; the handlers' default."""
    return _registry.lookup(name)


def fixed_lookup(switches: Mapping[str, bool]):
    """Build a lookup from a fixed ``{name: disabled}`` mapping.

    Names not in the mapping have no record and therefore fail open.
    """
    records = {name: KillSwitchRecord(name=name, disabled=disabled, source="fixed") for name, disabled in switches.items()}

    def lookup(name: str) -> KillSwitchRecord | None:
        return records.get(name)

    return lookup


__all__ = [
    "ALL",
    "KillSwitchRecord",
    "KillSwitchRegistry",
    "KillSwitches",
    "default_lookup",
    "fixed_lookup",
]
