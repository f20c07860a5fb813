"""
Tests for trigger_dispatch.framework.dispatcher.

Tests cover:
- The routing table, row by row
- Flag combinations outside the table
- The kill-switch gate
- Repeated dispatch on one instance
- Error propagation
"""

from itertools import product

import pytest

from tests._support.handlers import CALLBACKS, RecordingHandler
from trigger_dispatch.core.events import Operation, Phase, TriggerContext, TriggerFlags
from trigger_dispatch.framework.dispatcher import ROUTES, TriggerDispatcher, route
from trigger_dispatch.framework.handler import TriggerHandler

ROUTING_TABLE = [
    ({"is_before": True, "is_insert": True}, "on_before_insert"),
    ({"is_before": True, "is_update": True}, "on_before_update"),
    ({"is_before": True, "is_delete": True}, "on_before_delete"),
    ({"is_after": True, "is_insert": True}, "on_after_insert"),
    ({"is_after": True, "is_update": True}, "on_after_update"),
    ({"is_after": True, "is_delete": True}, "on_after_delete"),
    ({"is_after": True, "is_undelete": True}, "on_after_undelete"),
]

FLAG_NAMES = ("is_before", "is_after", "is_insert", "is_update", "is_delete", "is_undelete")


def _all_flag_combinations():
    for values in product((False, True), repeat=len(FLAG_NAMES)):
        yield dict(zip(FLAG_NAMES, values))


def _expected_callback(flags: dict) -> str | None:
    for row, callback in ROUTING_TABLE:
        if {k: v for k, v in flags.items() if v} == row:
            return callback
    return None


class TestRoute:
    """Tests for the pure routing function."""

    def test_routes_has_seven_rows(self):
        assert len(ROUTES) == 7
        assert set(ROUTES.values()) == set(CALLBACKS)

    @pytest.mark.parametrize("flags,callback", ROUTING_TABLE)
    def test_table_rows(self, flags, callback):
        assert route(TriggerFlags(is_executing=True, **flags)) == callback

    def test_every_combination_matches_table(self):
        """All 64 combinations: table rows route, everything else does not."""
        for flags in _all_flag_combinations():
            assert route(TriggerFlags(**flags)) == _expected_callback(flags), flags

    def test_before_undelete_not_routed(self):
        assert route(TriggerFlags(is_before=True, is_undelete=True)) is None

    def test_no_flags_not_routed(self):
        assert route(TriggerFlags()) is None

    def test_is_executing_does_not_affect_routing(self):
        assert route(TriggerFlags(is_after=True, is_update=True)) == "on_after_update"
        assert route(TriggerFlags(is_executing=True, is_after=True, is_update=True)) == "on_after_update"

    def test_size_does_not_affect_routing(self):
        assert route(TriggerFlags(is_before=True, is_delete=True, size=0)) == "on_before_delete"
        assert route(TriggerFlags(is_before=True, is_delete=True, size=200)) == "on_before_delete"

    def test_routes_is_read_only(self):
        with pytest.raises(TypeError):
            ROUTES[(Phase.BEFORE, Operation.UNDELETE)] = "on_before_undelete"  # type: ignore[index]


class TestDispatchRouting:
    """Each table row fires exactly its callback."""

    @pytest.mark.parametrize("flags,callback", ROUTING_TABLE)
    def test_fires_only_designated_callback(self, flags, callback):
        handler = RecordingHandler()
        TriggerDispatcher.from_flags(handler, is_executing=True, size=1, **flags).dispatch()

        assert handler.calls[callback] == 1
        assert sum(handler.calls.values()) == 1

    def test_unrouted_combinations_fire_nothing(self):
        for flags in _all_flag_combinations():
            if _expected_callback(flags) is not None:
                continue
            handler = RecordingHandler()
            TriggerDispatcher.from_flags(handler, **flags).dispatch()
            assert sum(handler.calls.values()) == 0, flags

    def test_both_phases_fire_nothing(self, recording_handler):
        TriggerDispatcher.from_flags(
            recording_handler, is_before=True, is_after=True, is_insert=True
        ).dispatch()
        assert not recording_handler.calls

    def test_before_insert_scenario(self, recording_handler):
        dispatcher = TriggerDispatcher.from_flags(
            recording_handler, is_executing=True, is_before=True, is_insert=True, size=3
        )
        assert dispatcher.dispatch() is None
        assert dict(recording_handler.calls) == {"on_before_insert": 1}

    def test_after_undelete_scenario(self, recording_handler):
        TriggerDispatcher.from_flags(
            recording_handler, is_executing=True, is_after=True, is_undelete=True
        ).dispatch()
        assert dict(recording_handler.calls) == {"on_after_undelete": 1}


class TestDispatchGate:
    """The handler's is_active() is checked before routing."""

    @pytest.mark.parametrize("flags,callback", ROUTING_TABLE)
    def test_inactive_handler_fires_nothing(self, flags, callback):
        handler = RecordingHandler(active=False)
        TriggerDispatcher.from_flags(handler, is_executing=True, **flags).dispatch()
        assert not handler.calls

    def test_inactive_before_update_no_error(self):
        handler = RecordingHandler(active=False)
        dispatcher = TriggerDispatcher.from_flags(handler, is_before=True, is_update=True)
        assert dispatcher.dispatch() is None
        assert not handler.calls
        assert handler.active_checks == 1

    def test_gate_checked_even_when_unrouted(self, recording_handler):
        TriggerDispatcher.from_flags(recording_handler).dispatch()
        assert recording_handler.active_checks == 1


class TestDispatchRepeat:
    def test_second_dispatch_fires_again(self, recording_handler):
        dispatcher = TriggerDispatcher.from_flags(recording_handler, is_after=True, is_insert=True)
        dispatcher.dispatch()
        dispatcher.dispatch()
        assert recording_handler.calls["on_after_insert"] == 2
        assert sum(recording_handler.calls.values()) == 2


class TestDispatchErrors:
    def test_callback_error_propagates_unmodified(self):
        error = RuntimeError("downstream persistence failed")
        handler = RecordingHandler(raises=error)
        dispatcher = TriggerDispatcher.from_flags(handler, is_before=True, is_update=True)

        with pytest.raises(RuntimeError) as excinfo:
            dispatcher.dispatch()

        assert excinfo.value is error
        assert handler.calls["on_before_update"] == 1

    def test_custom_exception_type_is_not_wrapped(self):
        class ValidationFailed(Exception):
            pass

        error = ValidationFailed("name required")
        handler = RecordingHandler(raises=error)

        with pytest.raises(ValidationFailed) as excinfo:
            TriggerDispatcher.from_flags(handler, is_before=True, is_insert=True).dispatch()
        assert excinfo.value is error

    def test_is_active_error_propagates(self):
        class Broken(TriggerHandler):
            def is_active(self) -> bool:
                raise LookupError("kill switch store unavailable")

        with pytest.raises(LookupError):
            TriggerDispatcher.from_flags(Broken(), is_after=True, is_insert=True).dispatch()


class TestDispatcherConstruction:
    def test_requires_handler(self):
        with pytest.raises(ValueError, match="requires a handler"):
            TriggerDispatcher(None, TriggerFlags())  # type: ignore[arg-type]

    def test_binding_is_fixed(self, recording_handler):
        dispatcher = TriggerDispatcher.from_flags(recording_handler, is_before=True, is_insert=True)
        assert dispatcher.handler is recording_handler
        with pytest.raises(AttributeError):
            dispatcher.handler = RecordingHandler()  # type: ignore[misc]
        with pytest.raises(AttributeError):
            dispatcher._other = 1  # type: ignore[attr-defined]

    def test_from_flags_keyword_only(self, recording_handler):
        with pytest.raises(TypeError):
            TriggerDispatcher.from_flags(recording_handler, True, True)  # type: ignore[misc]

    def test_from_context(self, recording_handler, accounts):
        ctx = TriggerContext.build("after", "update", new=accounts, old=accounts)
        dispatcher = TriggerDispatcher.from_context(ctx, recording_handler)
        assert dispatcher.flags is ctx.flags
        assert dispatcher.callback_name == "on_after_update"

    def test_base_handler_dispatch_is_noop(self):
        dispatcher = TriggerDispatcher.from_flags(TriggerHandler(), is_before=True, is_insert=True)
        assert dispatcher.dispatch() is None

    def test_duck_typed_handler(self):
        """Any object satisfying the protocol can be dispatched."""
        seen = []

        class Plain:
            def is_active(self):
                return True

            def on_after_delete(self):
                seen.append("deleted")

        TriggerDispatcher.from_flags(Plain(), is_after=True, is_delete=True).dispatch()
        assert seen == ["deleted"]

    def test_repr(self, recording_handler):
        dispatcher = TriggerDispatcher.from_flags(recording_handler, is_after=True, is_delete=True)
        assert "RecordingHandler" in repr(dispatcher)
        assert "on_after_delete" in repr(dispatcher)
