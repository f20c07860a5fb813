"""Handler registry: entity name -> handler class.

Manifesto:
    The event-delivery entry point knows the entity name of the event, not
    the handler class. A central registry lets it find the one handler for
    that entity without import-time coupling.

Tags:
    registry, handler-discovery, lookup, trigger-dispatch
"""

from collections.abc import Callable

from trigger_dispatch.core.errors import HandlerNotFoundError
from trigger_dispatch.framework.handler import EntityTriggerHandler, TriggerHandler
from trigger_dispatch.framework.logging import get_logger

logger = get_logger(__name__)

_registry: dict[str, type[TriggerHandler]] = {}


def register_handler(entity: str | None = None) -> Callable[[type[TriggerHandler]], type[TriggerHandler]]:
    """Decorator to register a handler class for an entity.

    Without an explicit name, entity handlers register under their entity
    name and plain handlers under their class name.
    """

    def decorator(cls: type[TriggerHandler]) -> type[TriggerHandler]:
        if entity is not None:
            name = entity
        elif issubclass(cls, EntityTriggerHandler):
            name = cls.entity_name()
        else:
            name = cls.__name__

        if name in _registry:
            raise ValueError(f"Handler for entity '{name}' is already registered")
        _registry[name] = cls
        logger.debug("handler.registered", entity=name, cls=cls.__name__)
        return cls

    return decorator


def get_handler(entity: str) -> type[TriggerHandler]:
    """Get the handler class for an entity."""
    try:
        return _registry[entity]
    except KeyError:
        raise HandlerNotFoundError(entity) from None


def list_handlers() -> list[str]:
    """List registered entity names."""
    return sorted(_registry.keys())


def clear_registry() -> None:
    """Clear registry (for testing)."""
    _registry.clear()
