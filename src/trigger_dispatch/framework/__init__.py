"""
Trigger Dispatch Framework - handlers, routing and the delivery entry point.

This module provides:
- TriggerHandler / EntityTriggerHandler base classes
- TriggerDispatcher and the routing table
- Handler registration by entity name
- run_trigger(), the once-per-event entry point
- Structured logging with delivery context
"""

from trigger_dispatch.framework.dispatcher import ROUTES, TriggerDispatcher, route
from trigger_dispatch.framework.entrypoint import run_trigger
from trigger_dispatch.framework.handler import EntityTriggerHandler, TriggerHandler
from trigger_dispatch.framework.registry import clear_registry, get_handler, list_handlers, register_handler

__all__ = [
    # Handlers
    "TriggerHandler",
    "EntityTriggerHandler",
    # Dispatcher
    "TriggerDispatcher",
    "ROUTES",
    "route",
    # Registry
    "register_handler",
    "get_handler",
    "list_handlers",
    "clear_registry",
    # Entry point
    "run_trigger",
]
