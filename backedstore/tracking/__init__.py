# ==============================================
# TOPIC 1: MUTATION TRACKING
# ==============================================
#
# This package turns plain dicts into handles that report
# every in-place change, so the store knows when to flush.
#
# Modules:
# --------
# - object_wrap.py  → wrap(), unwrap(), TrackedDict
#
# ==============================================

from .object_wrap import TrackedDict, unwrap, wrap

__all__ = [
    "TrackedDict",
    "unwrap",
    "wrap"
]
