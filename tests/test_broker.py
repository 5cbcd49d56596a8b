"""Tests for the PropertyBroker facade and Accessor snapshots."""
import types

import pytest

from propbroker import Accessor, PropertyBroker, PropertyKind, PropertyRegistry, ReadinessEngine

from conftest import TEST_POLL_INTERVAL


class TestAccessLookup:

    @pytest.mark.parametrize("path", ["", " ", "   \t"])
    def test_blank_path_returns_none_without_registering(self, broker, path):
        assert broker(path) is None
        assert broker(path, {}) is None
        assert len(broker.registry) == 0

    @pytest.mark.parametrize("arg", [None, 1.5, ["a"], True])
    def test_unsupported_argument_returns_none(self, broker, arg):
        assert broker(arg) is None

    def test_no_argument_returns_none(self, broker):
        assert broker() is None

    def test_existing_value(self, broker, host):
        acc = broker("settings.flags", host)
        assert isinstance(acc, Accessor)
        assert acc.value == {"beta": False}
        assert acc.get_value() is host.settings["flags"]
        assert acc.get_value("default") is host.settings["flags"]
        assert acc.kind is PropertyKind.OBJECT

    def test_missing_value(self, broker, host):
        acc = broker("settings.missing.child", host)
        assert acc.get_value() is None
        assert acc.get_value("fallback") == "fallback"
        assert acc.get_kind() is PropertyKind.UNDEFINED

    def test_stored_none_is_present(self, broker, host):
        acc = broker("sdk.client", host)
        assert acc.get_value("fallback") is None
        assert acc.get_kind() is PropertyKind.NONE
        assert acc.when_ready() is True

    def test_every_path_lookup_creates_a_record(self, broker, host):
        first = broker("sdk.version", host)
        second = broker("sdk.version", host)
        assert first.id != second.id
        assert len(broker.registry) == 2

    @pytest.mark.parametrize("context", [None, 5, "text", b"raw", False])
    def test_primitive_context_falls_back_to_root(self, broker, context):
        broker.root.greeting = "hello"
        acc = broker("greeting", context)
        assert acc.get_value() == "hello"
        assert acc.context is broker.root

    def test_missing_context_uses_root(self, broker):
        broker.root.app = {"name": "demo"}
        assert broker("app.name").get_value() == "demo"


class TestLookupById:

    def test_round_trip(self, broker, host):
        acc = broker("sdk.version", host)
        again = broker(acc.id)
        assert again.id == acc.id
        assert again.get_value() == acc.get_value() == 3
        assert len(broker.registry) == 1

    def test_reflects_intervening_updates(self, broker):
        ctx = {}
        acc = broker("later", ctx)
        ctx["later"] = "now"
        assert broker(acc.id).get_value() == "now"

    @pytest.mark.parametrize("bad_id", [-1, 999999])
    def test_unknown_ids(self, broker, bad_id):
        broker("anything", {})
        assert broker(bad_id) is None


class TestSnapshotIsolation:

    def test_mutating_snapshot_does_not_touch_record(self, broker):
        mock = {"existent": True}
        acc = broker("existent", mock)
        acc.value = False
        acc.path = "elsewhere"
        assert broker(acc.id).value is True
        assert broker(acc.id).path == "existent"

    def test_mutating_snapshot_does_not_touch_context(self, broker):
        mock = {"existent": True}
        broker("existent", mock).value = False
        assert mock["existent"] is True
        assert broker("existent", mock).value is True


class TestExtend:

    def test_default_extension_is_empty_dict(self, broker):
        mock = {}
        created = broker("missing.child", mock).extend()
        assert created == {}
        assert mock == {"missing": {"child": {}}}
        assert broker("missing.child", mock).kind is PropertyKind.OBJECT

    def test_each_default_extension_is_fresh(self, broker):
        first, second = {}, {}
        assert broker("x", first).extend() is not broker("x", second).extend()

    def test_extend_with_value(self, broker):
        mock = types.SimpleNamespace()
        assert broker("a.b.c", mock).extend(True) is True
        assert broker("a.b.c", mock).get_value() is True

    def test_extend_existing_returns_it_unchanged(self, broker):
        mock = {"existent": False}
        assert broker("existent", mock).extend(True) is False
        assert broker("existent", mock).value is False

    def test_extend_updates_record_and_snapshot(self, broker):
        mock = {}
        acc = broker("lazy", mock)
        assert acc.kind is PropertyKind.UNDEFINED
        acc.extend([1, 2])
        assert acc.kind is PropertyKind.OBJECT
        assert broker(acc.id).value == [1, 2]
        assert acc.when_ready() is True


class TestInvoke:

    def test_invoke_binds_receiver_and_forwards_args(self, broker):
        calls = []

        def handler(receiver, a, b):
            calls.append((receiver, a, b))

        receiver = object()
        acc = broker("handler", {"handler": handler})
        assert acc.invoke(receiver, [1, 2]) is True
        assert acc.invoke_with_args(receiver, 3, 4) is True
        assert calls == [(receiver, 1, 2), (receiver, 3, 4)]

    def test_invoke_without_receiver(self, broker):
        calls = []
        acc = broker("log", {"log": calls.append})
        assert acc.invoke(None, ["entry"]) is True
        assert acc.invoke_with_args(None, "again") is True
        assert calls == ["entry", "again"]

    def test_non_callable_reports_failure(self, broker):
        assert broker("value", {"value": 1}).invoke(None, [1]) is False
        assert broker("missing", {}).invoke_with_args(None, 1) is False

    def test_receiver_ignored_for_builtins_and_bound_methods(self, broker):
        calls = []
        receiver = object()
        assert broker("log", {"log": calls.append}).invoke(receiver, ["entry"]) is True
        assert broker("size", {"size": len}).invoke_with_args(receiver, "abc") is True
        assert calls == ["entry"]

    def test_function_without_receiver_parameter_raises(self, broker):
        def add(a, b):
            return a + b

        with pytest.raises(TypeError):
            broker("add", {"add": add}).invoke(object(), [1, 2])
        assert broker("add", {"add": add}).invoke(None, [1, 2]) is True

    def test_callee_errors_propagate(self, broker):
        def fail():
            raise KeyError("inner")

        with pytest.raises(KeyError):
            broker("fail", {"fail": fail}).invoke()


class TestWhenReady:

    def test_ready_without_callback(self, broker):
        assert broker("a", {"a": 1}).when_ready() is True
        assert broker("a", {}).when_ready() is False

    def test_ready_runs_callback_synchronously(self, broker):
        seen = []
        acc = broker("a", {"a": 1})
        assert acc.when_ready(seen.append) is True
        assert seen == [acc]

    def test_non_callable_callback_only_reports(self, broker):
        acc = broker("a", {})
        assert acc.when_ready("nope") is False
        assert len(broker.engine) == 0

    def test_not_ready_defers_to_later_tick(self, broker, manual_scheduler):
        seen = []
        ctx = {}
        assert broker("a.b", ctx).when_ready(seen.append) is False
        assert seen == []

        ctx["a"] = {"b": 42}
        assert seen == []
        manual_scheduler.advance(TEST_POLL_INTERVAL)

        assert len(seen) == 1
        assert isinstance(seen[0], Accessor)
        assert seen[0].get_value() == 42
        assert seen[0].value == 42

        manual_scheduler.advance(TEST_POLL_INTERVAL * 3)
        assert len(seen) == 1

    def test_deferred_resolution_updates_record(self, broker):
        ctx = {}
        acc = broker("late", ctx)
        acc.when_ready(lambda _: None)
        ctx["late"] = print
        broker.tick()
        assert broker(acc.id).kind is PropertyKind.FUNCTION
        assert broker(acc.id).when_ready() is True


class TestInjectedComponents:

    def test_injected_engine_shares_its_registry(self, manual_scheduler):
        engine = ReadinessEngine(PropertyRegistry(), scheduler=manual_scheduler)
        broker = PropertyBroker(engine=engine)
        assert broker.registry is engine.registry

        seen = []
        ctx = {}
        assert broker("a", ctx).when_ready(seen.append) is False
        assert len(engine) == 1
        ctx["a"] = 1
        assert broker.tick() == 1
        assert len(seen) == 1
        assert seen[0].get_value() == 1

    def test_matching_registry_and_engine_accepted(self, manual_scheduler):
        registry = PropertyRegistry()
        engine = ReadinessEngine(registry, scheduler=manual_scheduler)
        assert PropertyBroker(registry=registry, engine=engine).registry is registry

    def test_mismatched_registry_and_engine_rejected(self, manual_scheduler):
        engine = ReadinessEngine(PropertyRegistry(), scheduler=manual_scheduler)
        with pytest.raises(ValueError):
            PropertyBroker(registry=PropertyRegistry(), engine=engine)


def test_shutdown_stops_polling(broker, manual_scheduler):
    broker("a", {}).when_ready(lambda _: None)
    assert broker.engine.is_running
    broker.shutdown()
    assert not broker.engine.is_running
    assert manual_scheduler.pending == 0
