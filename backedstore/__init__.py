# ==============================================
# backedstore: Embedded Dirty-Tracking Key-Value Store
# ==============================================
#
# Package Structure (3 Topics + CLI):
#
# backedstore/
# ├── tracking/     # Topic 1: Detect in-place mutation of stored dicts
# ├── storage/      # Topic 2: The store, its backends and errors
# ├── lifecycle/    # Topic 3: Periodic flush timer and exit hook
# ├── config.py     # Configuration management
# └── cli.py        # Command line entry point
#
# USAGE:
# ------
#   import backedstore
#
#   store = backedstore.file("users.json", sync_interval_ms=5000).load()
#   alice = store.get("alice") or store.set("alice", {"visits": 0})
#   alice["visits"] += 1       # marks the store dirty, flushed on next tick
#   store.close(sync=True)     # final synchronous flush
#
# ==============================================

from pathlib import Path
from typing import Optional, Union

from backedstore.storage import (
    AccessError,
    FileStorage,
    FormatError,
    InvalidKeyError,
    MemoryStorage,
    StoreError,
    WriteError,
)
from backedstore.tracking import TrackedDict, unwrap, wrap

__version__ = "0.1.0"


def memory(sync_interval_ms: Optional[int] = None) -> MemoryStorage:
    """Create a store with no durable backing."""
    return MemoryStorage(sync_interval_ms)


def file(path: Union[str, Path, None] = None, sync_interval_ms: Optional[int] = None) -> MemoryStorage:
    """
    Create a store backed by the JSON file at `path`.

    An empty or missing path gives an in-memory store instead.
    """
    if not path:
        return MemoryStorage(sync_interval_ms)
    return FileStorage(path, sync_interval_ms)


__all__ = [
    "AccessError",
    "FileStorage",
    "FormatError",
    "InvalidKeyError",
    "MemoryStorage",
    "StoreError",
    "TrackedDict",
    "WriteError",
    "file",
    "memory",
    "unwrap",
    "wrap"
]
