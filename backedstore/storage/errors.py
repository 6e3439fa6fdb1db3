# ==============================================
# Store Errors
# ==============================================
#
# PURPOSE:
#   Classify everything that can go wrong in a store.
#
# HIERARCHY:
# ----------
# - InvalidKeyError(TypeError)
#     Raised directly from set() for non-string keys.
#     The only error that reaches the caller as an exception.
#
# - StoreError(Exception)
#     Operational failure of a backend. Never raised from load()/save();
#     delivered to the store's error sink instead.
#
#     Attributes:
#     -----------
#     - kind: str            → "access", "format" or "write"
#     - path: str | None     → backing file, if any
#     - code: str | None     → errno symbol, e.g. "ENOENT", "EACCES"
#     - syscall: str | None  → "access", "open", "read" or "write"
#
#     Subclasses:
#     -----------
#     - AccessError  → target missing or unreadable
#     - FormatError  → content is not a JSON object / map not serializable
#     - WriteError   → target could not be written
#
# ==============================================

import errno
from typing import Optional


class InvalidKeyError(TypeError):
    """Store keys must be strings."""


class StoreError(Exception):
    """Base class for failures reported through the error sink."""

    kind = "store"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        code: Optional[str] = None,
        syscall: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.path = path
        self.code = code
        self.syscall = syscall

    @classmethod
    def from_os_error(cls, exc: OSError, syscall: str, path: Optional[str] = None) -> "StoreError":
        """
        Build an error from an OSError, keeping its errno as a symbol.

        The OSError is attached as __cause__.
        """
        code = errno.errorcode.get(exc.errno) if exc.errno is not None else None
        message = f"{code or 'EIO'}: {exc.strerror or exc}, {syscall} '{path or exc.filename}'"
        err = cls(message, path=path, code=code, syscall=syscall)
        err.__cause__ = exc
        return err

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/CLI output."""
        return {
            "kind": self.kind,
            "message": self.message,
            "path": self.path,
            "code": self.code,
            "syscall": self.syscall
        }


class AccessError(StoreError):
    """The backing target is missing or not readable."""
    kind = "access"


class FormatError(StoreError):
    """The backing content is not well-formed."""
    kind = "format"


class WriteError(StoreError):
    """The backing target could not be written."""
    kind = "write"
