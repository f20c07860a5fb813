"""
Structured error types for trigger dispatch.

Errors raised by the dispatch layer carry a category and a small structured
context (entity, phase, operation, callback) so that the event-delivery
entry point can log them without string parsing.

Manifesto:
    - **Typed hierarchy:** Construction failures, registry misses and config
      problems are distinct types
    - **Rich context:** Errors carry the event classification they happened in
    - **No wrapping of callback failures:** Whatever a handler raises reaches
      the caller of ``dispatch()`` as the same object

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      TriggerError                            │
        │            (category, context, cause)                        │
        ├─────────────────────────────────────────────────────────────┤
        │  HandlerError          InvalidEventError     ConfigError     │
        │  (HANDLER)             (VALIDATION)          (CONFIG)        │
        │      │                                           │           │
        │  HandlerConstructionError                 InvalidConfigError │
        │  HandlerNotFoundError                                        │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = HandlerConstructionError(expected="Account", actual="Contact")
    >>> error.category
    <ErrorCategory.HANDLER: 'HANDLER'>
    >>> error.with_context(entity="Account").context.entity
    'Account'

Tags:
    error-handling, exception-hierarchy, error-context, trigger-dispatch
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    HANDLER = "HANDLER"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        entity: Entity type name the event was delivered for
        phase: "before" or "after"
        operation: "insert", "update", "delete" or "undelete"
        callback: Handler callback that was selected
        dispatch_id: Identifier of the event delivery
        metadata: Additional key-value pairs
    """

    entity: str | None = None
    phase: str | None = None
    operation: str | None = None
    callback: str | None = None
    dispatch_id: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["entity", "phase", "operation", "callback", "dispatch_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TriggerError(Exception):
    """
    Base exception for all trigger dispatch errors.

    Subclasses set ``default_category``. Instances carry a message, a
    category, an ``ErrorContext`` and an optional chained cause.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TriggerError:
        """
        Add context to this error (fluent API).

        Usage:
            raise HandlerNotFoundError("Account").with_context(dispatch_id=did)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# HANDLER ERRORS
# =============================================================================


class HandlerError(TriggerError):
    """Handler construction or lookup error."""

    default_category = ErrorCategory.HANDLER


class HandlerConstructionError(HandlerError):
    """
    Injected records do not match the handler's entity type.

    Raised from the handler constructor so the mismatch surfaces before any
    callback runs.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        expected: str | None = None,
        actual: str | None = None,
        source: str | None = None,
        **kwargs: Any,
    ):
        self.expected = expected
        self.actual = actual
        self.source = source
        if message is None:
            where = f" in {source}" if source else ""
            message = f"Expected {expected} records{where}, got {actual}"
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        for key in ("expected", "actual", "source"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


class HandlerNotFoundError(HandlerError):
    """No handler registered for an entity."""

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"No trigger handler registered for entity: {entity}")


# =============================================================================
# EVENT ERRORS
# =============================================================================


class InvalidEventError(TriggerError):
    """An event classification the host platform never delivers."""

    default_category = ErrorCategory.VALIDATION


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(TriggerError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, TriggerError):
        return error.category
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TriggerError",
    "HandlerError",
    "HandlerConstructionError",
    "HandlerNotFoundError",
    "InvalidEventError",
    "ConfigError",
    "InvalidConfigError",
    "categorize_error",
]
