# ==============================================
# TOPIC 2: STORAGE (Backed Key-Value Store)
# ==============================================
#
# This package holds the store and its backends:
# the key → value map, the dirty flag, and how a flush
# reaches durable storage.
#
# Modules:
# --------
# - errors.py          → InvalidKeyError, StoreError and its kinds
# - memory_storage.py  → MemoryStorage, the store with a no-op backend
# - file_storage.py    → FileStorage, the store persisted as a JSON file
#
# ==============================================

from .errors import AccessError, FormatError, InvalidKeyError, StoreError, WriteError
from .memory_storage import MemoryStorage
from .file_storage import FileStorage

__all__ = [
    "AccessError",
    "FileStorage",
    "FormatError",
    "InvalidKeyError",
    "MemoryStorage",
    "StoreError",
    "WriteError"
]
