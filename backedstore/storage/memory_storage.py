# ==============================================
# MemoryStorage
# ==============================================
#
# PURPOSE:
#   The backed key-value store itself, with an in-memory backend.
#   FileStorage subclasses it and only swaps load()/flush.
#
# WHY THIS CLASS EXISTS:
#   Callers want a dict-like store whose values they can edit in
#   place, with writes to disk happening on their own. This class
#   owns everything except the backend:
#     - the key → value map
#     - the dirty flag, set by set()/delete() and by TrackedDict
#       handles returned from get()/set()/for_each()
#     - the periodic flush timer (SyncTimer)
#     - the error sink (last registration wins)
#     - the exit-hook registration and the ACTIVE → CLOSED lifecycle
#
# CLASS: MemoryStorage
# --------------------
#   Constructor:
#   ------------
#   - __init__(sync_interval_ms: int | None = None)
#       None → get_config().sync_interval_ms (default 30000 ms).
#       Arms the timer and registers the exit hook.
#
#   Methods:
#   --------
#   - get(key) -> TrackedDict | value | None
#   - set(key: str, value) -> TrackedDict | value
#   - delete(key) -> None
#   - for_each(cbk(handle, key)) -> self
#   - for_each_plain(cbk(raw_value, key)) -> self
#   - load() -> self                  (memory: clears the map)
#   - save(sync=False) -> self        (no-op once closed)
#   - close(sync=False, flush=True) -> self   (idempotent)
#   - error(cbk(StoreError)) -> self
#
#   THREADING:
#   ----------
#   The timer tick and background writes run on other threads, so
#   the map, the dirty flag and the generation counter are only
#   touched under self._lock. Every mutation bumps the generation;
#   a flush only clears the dirty flag if the generation it
#   snapshotted is still current.
#
# ==============================================

import logging
import threading
from typing import Any, Callable, Optional

from backedstore.config import get_config
from backedstore.lifecycle import exit_hooks
from backedstore.lifecycle.sync_timer import SyncTimer
from backedstore.storage.errors import InvalidKeyError, StoreError
from backedstore.tracking.object_wrap import unwrap, wrap

logger = logging.getLogger(__name__)


class MemoryStorage:
    """Dirty-tracking key-value store without durable backing."""

    def __init__(self, sync_interval_ms: Optional[int] = None):
        if sync_interval_ms is None:
            sync_interval_ms = get_config().sync_interval_ms
        self.sync_interval_ms = sync_interval_ms

        self._map: dict = {}
        self._lock = threading.RLock()
        self._dirty = False
        self._generation = 0
        self._closed = False
        self._on_error: Callable[[StoreError], Any] = self._default_error

        self._timer = SyncTimer(sync_interval_ms, self._tick, name=f"backedstore-sync[{self.name}]")
        self._timer.start()
        exit_hooks.register(self)

    @property
    def name(self) -> str:
        return "memory"

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def closed(self) -> bool:
        return self._closed

    # --- Key-value API -----------------------------------------------------

    def get(self, key):
        """Return the value for `key`, wrapped so in-place edits mark the store dirty."""
        with self._lock:
            raw = self._map.get(key)
        return wrap(raw, self._mark_dirty)

    def set(self, key: str, value):
        """
        Store `value` under `key` and return a tracked handle to it.

        Raises:
            InvalidKeyError: `key` is not a str. Nothing is stored.
        """
        if not isinstance(key, str):
            raise InvalidKeyError(f"key must be str, got {type(key).__name__}")
        with self._lock:
            self._map[key] = unwrap(value)
            self._mark_dirty()
        return self.get(key)

    def delete(self, key) -> None:
        """Remove `key` if present. Marks the store dirty either way."""
        with self._lock:
            self._map.pop(key, None)
            self._mark_dirty()

    def for_each(self, cbk: Callable[[Any, str], Any]) -> "MemoryStorage":
        """Call cbk(handle, key) for each entry of a snapshot of the store."""
        for key, value in self._entries():
            cbk(wrap(value, self._mark_dirty), key)
        return self

    def for_each_plain(self, cbk: Callable[[Any, str], Any]) -> "MemoryStorage":
        """Like for_each, but passes raw values; edits are not tracked."""
        for key, value in self._entries():
            cbk(value, key)
        return self

    def keys(self) -> list:
        with self._lock:
            return list(self._map)

    def __contains__(self, key) -> bool:
        with self._lock:
            return key in self._map

    def __len__(self) -> int:
        with self._lock:
            return len(self._map)

    # --- Backend API -------------------------------------------------------

    def load(self) -> "MemoryStorage":
        """Nothing to load from memory; start from an empty map."""
        with self._lock:
            self._map.clear()
        return self

    def save(self, sync: bool = False) -> "MemoryStorage":
        """
        Flush the store to its backend.

        Args:
            sync: Block until the write is done. Otherwise the write runs
                in the background and clears the dirty flag on success.

        Returns:
            self. After close() this does nothing.
        """
        if self._closed:
            return self
        return self._flush(sync)

    def close(self, sync: bool = False, flush: bool = True) -> "MemoryStorage":
        """
        Disarm the timer, flush one last time, and make save() a no-op.

        Args:
            sync: Block on the final write.
            flush: Skip the final write when False (read-only callers that
                must not touch the backing file).
        """
        with self._lock:
            if self._closed:
                return self
            self._closed = True
        self._timer.stop()
        exit_hooks.unregister(self)
        if flush:
            self._flush(sync)
        return self

    def error(self, cbk: Callable[[StoreError], Any]) -> "MemoryStorage":
        """Install `cbk` as the error sink, replacing the previous one."""
        with self._lock:
            self._on_error = cbk
        return self

    # --- Internals -----------------------------------------------------------

    def _flush(self, sync: bool) -> "MemoryStorage":
        logger.debug("memory storage: save, sync=%s", sync)
        with self._lock:
            self._dirty = False
        return self

    def _tick(self) -> None:
        if self._dirty:
            self.save(sync=False)

    def _mark_dirty(self, *_) -> None:
        with self._lock:
            self._dirty = True
            self._generation += 1

    def _clear_dirty(self, generation: int) -> None:
        with self._lock:
            if self._generation == generation:
                self._dirty = False

    def _entries(self) -> list:
        with self._lock:
            return list(self._map.items())

    def _report(self, err: StoreError) -> None:
        sink = self._on_error
        try:
            sink(err)
        except Exception:
            logger.exception("Error sink of backed-%s raised while handling: %s", self.name, err)

    def _default_error(self, err: StoreError) -> None:
        logger.error("Error: backed-%s: %s", self.name, err.message)

    # --- Context manager -----------------------------------------------------

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close(sync=True)
        return False

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("dirty" if self._dirty else "clean")
        return f"<{type(self).__name__} {self.name} keys={len(self)} {state}>"
