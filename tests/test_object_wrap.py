# ==============================================
# Tests for Object Wrap (Mutation Tracking)
# ==============================================

import asyncio

import pytest

from backedstore.tracking.object_wrap import TrackedDict, unwrap, wrap


class Counter:
    """Callback that counts notifications and remembers what it was given."""

    def __init__(self):
        self.calls = []

    def __call__(self, obj):
        self.calls.append(obj)

    @property
    def count(self):
        return len(self.calls)


@pytest.fixture
def counter():
    return Counter()


class TestMutations:
    """Every mutating call notifies exactly once, after the change."""

    def test_assignment(self, counter):
        obj = {"a": 1}
        handle = wrap(obj, counter)
        handle["a"] = 2
        assert counter.count == 1
        assert obj["a"] == 2

    def test_new_key(self, counter):
        obj = {"a": 1}
        handle = wrap(obj, counter)
        handle["b"] = "new prop"
        assert counter.count == 1
        assert obj["b"] == "new prop"

    def test_attribute_assignment(self, counter):
        obj = {"a": 1}
        handle = wrap(obj, counter)
        handle.a = 5
        handle.c = 3
        assert counter.count == 2
        assert obj == {"a": 5, "c": 3}

    def test_define(self, counter):
        obj = {"c": 3}
        handle = wrap(obj, counter)
        handle.define("c", 3)
        assert counter.count == 1
        assert obj["c"] == 3

    def test_delete(self, counter):
        obj = {"a": 1, "b": 2}
        handle = wrap(obj, counter)
        del handle["b"]
        del handle.a
        assert counter.count == 2
        assert obj == {}

    def test_delete_then_set_notifies_twice(self, counter):
        obj = {"a": 1}
        handle = wrap(obj, counter)
        del handle["a"]
        handle["a"] = 1
        assert counter.count == 2
        assert obj == {"a": 1}

    def test_nested_assignment(self, counter):
        obj = {}
        handle = wrap(obj, counter)
        handle["nest"] = {"d": 1}
        handle["nest"]["d"] = 2
        handle.nest.e = 3
        assert counter.count == 3
        assert obj["nest"] == {"d": 2, "e": 3}

    def test_nested_handle_shares_object(self, counter):
        obj = {"nest": {"deeper": {"x": 1}}}
        handle = wrap(obj, counter)
        assert unwrap(handle["nest"]["deeper"]) is obj["nest"]["deeper"]
        handle["nest"]["deeper"]["x"] = 2
        assert counter.count == 1
        assert obj["nest"]["deeper"]["x"] == 2

    def test_callback_receives_top_level_object(self, counter):
        obj = {"nest": {"d": 1}}
        handle = wrap(obj, counter)
        handle["nest"]["d"] = 2
        assert counter.calls[0] is obj

    def test_no_batching(self, counter):
        handle = wrap({}, counter)
        for i in range(3):
            handle["a"] = i
        assert counter.count == 3

    def test_update_notifies_per_key(self, counter):
        obj = {}
        handle = wrap(obj, counter)
        handle.update({"a": 1, "b": 2})
        assert counter.count == 2
        assert obj == {"a": 1, "b": 2}

    def test_pop(self, counter):
        obj = {"a": 1}
        handle = wrap(obj, counter)
        assert handle.pop("a") == 1
        assert handle.pop("missing", None) is None
        assert counter.count == 1
        assert obj == {}

    def test_setdefault_only_notifies_on_insert(self, counter):
        obj = {"a": 1}
        handle = wrap(obj, counter)
        assert handle.setdefault("a", 9) == 1
        assert counter.count == 0
        assert handle.setdefault("b", 2) == 2
        assert counter.count == 1

    def test_failed_delete_does_not_notify(self, counter):
        handle = wrap({}, counter)
        with pytest.raises(KeyError):
            del handle["missing"]
        with pytest.raises(AttributeError):
            del handle.missing
        assert counter.count == 0

    def test_assigning_a_handle_stores_raw_dict(self, counter):
        inner = {"x": 1}
        obj = {}
        handle = wrap(obj, counter)
        handle["inner"] = wrap(inner, counter)
        assert obj["inner"] is inner
        assert not isinstance(obj["inner"], TrackedDict)


class TestReads:
    """Reads behave like the underlying dict and never notify."""

    def test_reads_pass_through(self, counter):
        obj = {"a": 1, "b": "two", "nest": {"c": 3}}
        handle = wrap(obj, counter)
        assert handle["a"] == 1
        assert handle.b == "two"
        assert handle.get("missing") is None
        assert "a" in handle
        assert len(handle) == 3
        assert sorted(handle) == ["a", "b", "nest"]
        assert handle == obj
        assert handle["nest"] == {"c": 3}
        assert counter.count == 0

    def test_missing_attribute(self, counter):
        handle = wrap({}, counter)
        with pytest.raises(AttributeError):
            handle.nope

    def test_method_names_win_over_keys(self, counter):
        handle = wrap({"keys": 1}, counter)
        assert handle["keys"] == 1
        assert callable(handle.keys)


class TestUnsupportedValues:
    """Anything that is not a dict comes back unchanged."""

    @pytest.mark.parametrize("value", [[1, 2], "text", 42, 1.5, None, True])
    def test_passthrough(self, counter, value):
        assert wrap(value, counter) is value

    def test_list_mutation_not_tracked(self, counter):
        items = [1, 2]
        result = wrap(items, counter)
        result.append(3)
        assert counter.count == 0

    def test_unwrap_is_identity_for_plain_values(self):
        obj = {"a": 1}
        assert unwrap(obj) is obj
        assert unwrap(5) == 5


class TestAsyncNotification:
    """async_notify=True defers delivery to the running event loop."""

    def test_deferred_until_after_mutation(self):
        events = []

        async def scenario():
            loop = asyncio.get_running_loop()
            handle = wrap({}, lambda obj: events.append("notify"), async_notify=True)
            handle["a"] = 1
            assert events == []
            loop.call_soon(events.append, "later")
            handle["b"] = 2
            assert events == []
            await asyncio.sleep(0)

        asyncio.run(scenario())
        assert events == ["notify", "later", "notify"]

    def test_requires_running_loop(self):
        with pytest.raises(RuntimeError):
            wrap({}, lambda obj: None, async_notify=True)

    def test_non_dict_needs_no_loop(self):
        assert wrap([1], lambda obj: None, async_notify=True) == [1]
