# ==============================================
# TOPIC 3: LIFECYCLE (Autosave + Shutdown Flush)
# ==============================================
#
# This package decides WHEN a store writes:
#   - periodically, while the store is dirty
#   - once more, synchronously, when the interpreter exits
#
# Modules:
# --------
# - sync_timer.py  → SyncTimer, the periodic flush thread
# - exit_hooks.py  → process-wide registry flushed by atexit
#
# ==============================================

from . import exit_hooks
from .sync_timer import SyncTimer

__all__ = [
    "SyncTimer",
    "exit_hooks"
]
