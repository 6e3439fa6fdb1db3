# ==============================================
# Object Wrap (Mutation Tracking)
# ==============================================
#
# PURPOSE:
#   Wrap a plain dict so that every structural change made through
#   the wrapper calls a notification callback. The store uses this
#   to flip its dirty flag without callers having to say "I changed
#   something".
#
# WHY THIS MODULE EXISTS:
#   Callers get values from the store and edit them in place:
#       user = store.get("alice")
#       user["visits"] += 1
#   Nothing in that code talks to the store, yet the change has to
#   reach disk on the next flush.
#
# FUNCTIONS:
# ----------
# - wrap(value, on_mutate, async_notify=False) -> TrackedDict | value
#     Return a TrackedDict around `value` if it is a dict, otherwise
#     return `value` unchanged (lists, strings, numbers, None are not
#     tracked).
#
# - unwrap(value) -> value
#     Return the raw object behind a TrackedDict (identity otherwise).
#
# CLASS: TrackedDict
# ------------------
#   MutableMapping view over a real dict. Reads pass through,
#   nested dicts come back wrapped (same object, no copy), and
#   every mutation calls the notifier once after it is applied:
#
#     handle["a"] = 1          → 1 notification
#     handle.a = 1             → 1 notification
#     del handle["a"]          → 1 notification
#     handle.define("a", 1)    → 1 notification
#     handle["nest"]["d"] = 2  → 1 notification
#
#   update()/pop()/clear() come from MutableMapping and go through
#   the primitives above, so they notify once per key they change.
#
#   Attribute access (handle.a) only reaches keys that do not clash
#   with a method name such as `keys`, `items` or `get`.
#
# ==============================================

import asyncio
from collections.abc import MutableMapping
from typing import Any, Callable, Iterator


class TrackedDict(MutableMapping):
    """Dict wrapper that reports every mutation to a callback."""

    __slots__ = ("_target", "_notify")

    def __init__(self, target: dict, notify: Callable[[], None]):
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_notify", notify)

    # --- Mapping protocol -------------------------------------------------

    def __getitem__(self, key):
        value = self._target[key]
        if isinstance(value, dict):
            return TrackedDict(value, self._notify)
        return value

    def __setitem__(self, key, value) -> None:
        self._target[key] = unwrap(value)
        self._notify()

    def __delitem__(self, key) -> None:
        del self._target[key]
        self._notify()

    def __iter__(self) -> Iterator:
        return iter(self._target)

    def __len__(self) -> int:
        return len(self._target)

    def __contains__(self, key) -> bool:
        return key in self._target

    def __eq__(self, other) -> bool:
        return self._target == unwrap(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"TrackedDict({self._target!r})"

    def define(self, key, value) -> None:
        """(Re)define `key`, notifying even when the value is unchanged."""
        self._target[key] = unwrap(value)
        self._notify()

    def setdefault(self, key, default=None):
        if key in self._target:
            return self[key]
        self[key] = default
        return self[key]

    # --- Attribute-style access -------------------------------------------

    def __getattr__(self, name: str):
        # Only reached when normal lookup fails
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value) -> None:
        if name in TrackedDict.__slots__:
            object.__setattr__(self, name, value)
            return
        self[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None


def unwrap(value: Any) -> Any:
    """Return the raw object behind a TrackedDict; anything else as-is."""
    if isinstance(value, TrackedDict):
        return object.__getattribute__(value, "_target")
    return value


def wrap(value: Any, on_mutate: Callable[[Any], Any], async_notify: bool = False) -> Any:
    """
    Wrap a dict so mutations made through the result call `on_mutate`.

    Args:
        value: The object to track. Only dicts are wrapped.
        on_mutate: Called with the raw top-level dict after each mutation.
        async_notify: If True, deliver notifications with call_soon on the
            asyncio loop running at wrap time instead of inline.

    Returns:
        A TrackedDict, or `value` itself when it cannot be tracked.

    Raises:
        RuntimeError: async_notify=True and no event loop is running.
    """
    raw = unwrap(value)
    if not isinstance(raw, dict):
        return value

    if async_notify:
        loop = asyncio.get_running_loop()

        def notify() -> None:
            loop.call_soon_threadsafe(on_mutate, raw)
    else:
        def notify() -> None:
            on_mutate(raw)

    return TrackedDict(raw, notify)
