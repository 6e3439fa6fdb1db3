# ==============================================
# SyncTimer
# ==============================================
#
# PURPOSE:
#   Recurring background timer that asks a store to flush.
#   Each tick calls `on_tick()`; the store decides whether it is
#   dirty enough to write.
#
# CLASS: SyncTimer(threading.Thread)
# ----------------------------------
#   Daemon thread, so an armed timer never keeps the interpreter alive.
#
#   - __init__(interval_ms: int, on_tick: Callable[[], None], name: str)
#   - start()            → arm (inherited from Thread)
#   - stop(wait=True)    → disarm; optionally wait for a running tick
#   - interval_ms        → configured period
#   - ticks              → number of completed ticks
#
#   A tick that raises is logged and the timer keeps running.
#
# ==============================================

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class SyncTimer(threading.Thread):
    """Calls `on_tick` every `interval_ms` milliseconds until stopped."""

    def __init__(self, interval_ms: int, on_tick: Callable[[], None], name: str = "backedstore-sync"):
        super().__init__(name=name, daemon=True)
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self.interval_ms = interval_ms
        self.ticks = 0
        self._on_tick = on_tick
        self._stop_event = threading.Event()

    def run(self) -> None:
        interval = self.interval_ms / 1000.0
        while not self._stop_event.wait(interval):
            try:
                self._on_tick()
            except Exception:
                logger.exception("Periodic flush failed in %s", self.name)
            self.ticks += 1

    def stop(self, wait: bool = True) -> None:
        """Disarm the timer. Safe to call more than once, or from the tick itself."""
        self._stop_event.set()
        if wait and self.is_alive() and threading.current_thread() is not self:
            self.join()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()
