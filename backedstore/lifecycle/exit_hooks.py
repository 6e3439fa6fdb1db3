# ==============================================
# Exit Hooks
# ==============================================
#
# PURPOSE:
#   Flush every open store once when the interpreter exits normally.
#
# HOW IT WORKS:
#   Stores register themselves on construction and unregister on
#   close(). The first registration installs a single atexit handler,
#   flush_all(), which closes each store still registered with a
#   synchronous save. Because close() unregisters, a store is flushed
#   at most once, and never after it was closed by its owner.
#
#   Abnormal termination (SIGKILL, os._exit) skips atexit handlers;
#   mutations since the last tick are lost in that case.
#
# FUNCTIONS:
# ----------
# - register(store) -> None
# - unregister(store) -> None
# - registered() -> list       (snapshot, for diagnostics/tests)
# - flush_all() -> int         (number of stores closed)
#
# ==============================================

import atexit
import logging
import threading

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_stores = set()
_installed = False


def register(store) -> None:
    """Track `store` so it is closed with a synchronous flush at exit."""
    global _installed
    with _lock:
        _stores.add(store)
        if not _installed:
            atexit.register(flush_all)
            _installed = True


def unregister(store) -> None:
    with _lock:
        _stores.discard(store)


def registered() -> list:
    with _lock:
        return list(_stores)


def flush_all() -> int:
    """
    Close every registered store with save(sync=True).

    Returns:
        Number of stores that were closed.
    """
    stores = registered()
    for store in stores:
        try:
            store.close(sync=True)
        except Exception:
            logger.exception("Final flush failed for %s", getattr(store, "name", store))
    if stores:
        logger.debug("Flushed %d store(s) at exit", len(stores))
    return len(stores)
