"""
Trigger Dispatch - one dispatcher, one handler per entity type.

Routes a platform mutation event (insert/update/delete/undelete, before or
after persistence) to the single matching callback of the entity's handler,
behind an operator kill switch.

- trigger_dispatch.core: event model, records, kill switches, errors, settings
- trigger_dispatch.framework: handlers, dispatcher, registry, logging
"""

__version__ = "0.1.0"

from trigger_dispatch.core import *  # noqa
from trigger_dispatch.framework import (  # noqa
    EntityTriggerHandler,
    TriggerDispatcher,
    TriggerHandler,
    register_handler,
    route,
    run_trigger,
)
