# ==============================================
# FileStorage
# ==============================================
#
# PURPOSE:
#   Persist a MemoryStorage to a single JSON file.
#
# FILE FORMAT:
# ------------
#   One UTF-8 JSON object, pretty-printed with 2-space indent:
#
#   {
#     "alice": {"visits": 3, "profile": {"lang": "en"}},
#     "bob": {"visits": 1}
#   }
#
#   Top-level keys are store keys. No header, no version, no checksum.
#
# CLASS: FileStorage(MemoryStorage)
# ---------------------------------
#   - __init__(path, sync_interval_ms=None)
#
#   - load() -> self
#       1. Not readable      → AccessError to the sink, map cleared.
#       2. Not a JSON object → FormatError to the sink, map untouched.
#       3. Otherwise         → map replaced by the file contents.
#
#   - save(sync=False) -> self
#       Serialize the whole map under the store lock, then write it to
#       "<path>.tmp" and rename over <path>. sync=True writes inline;
#       sync=False writes on a background thread. Failures go to the
#       sink as WriteError and leave the store dirty.
#
#   WRITE ORDERING:
#   ---------------
#   Each flush takes a sequence number with its snapshot. Writes are
#   serialized by self._write_lock and a write whose sequence is older
#   than the last one written is dropped, so a slow background write
#   never overwrites a newer snapshot (e.g. the final one from close()).
#
# ERRORS (delivered to the sink, never raised):
# ---------------------------------------------
#   AccessError  code=ENOENT/EACCES  syscall="access" | "read"
#   FormatError  invalid JSON, non-object top level, unserializable map
#   WriteError   code=EACCES/EPERM/...  syscall="write"
#
# ==============================================

import contextlib
import errno
import json
import logging
import os
import threading
from pathlib import Path
from typing import Optional, Union

from backedstore.storage.errors import AccessError, FormatError, WriteError
from backedstore.storage.memory_storage import MemoryStorage

logger = logging.getLogger(__name__)


class FileStorage(MemoryStorage):
    """Backed store persisted as one JSON object in a file."""

    def __init__(self, path: Union[str, Path], sync_interval_ms: Optional[int] = None):
        # Set up before the base class arms the timer
        self.path = Path(path)
        self._write_lock = threading.Lock()
        self._seq = 0
        self._last_written = 0
        super().__init__(sync_interval_ms)

    @property
    def name(self) -> str:
        return f"file: {self.path}"

    def load(self) -> "FileStorage":
        """
        Replace the in-memory map with the contents of the file.

        A missing or unreadable file is reported and leaves the store empty,
        which is the normal first-run case. Corrupt content is reported and
        leaves the store as it was.
        """
        path = str(self.path)

        if not os.access(path, os.R_OK):
            code = errno.EACCES if self.path.exists() else errno.ENOENT
            exc = OSError(code, os.strerror(code), path)
            self._report(AccessError.from_os_error(exc, "access", path))
            with self._lock:
                self._map.clear()
            return self

        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            self._report(AccessError.from_os_error(exc, "read", path))
            with self._lock:
                self._map.clear()
            return self
        except UnicodeDecodeError as exc:
            self._report(self._format_error(f"{path} is not valid UTF-8: {exc}", exc))
            return self

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            self._report(self._format_error(f"{path} is not valid JSON: {exc}", exc))
            return self

        if not isinstance(data, dict):
            self._report(self._format_error(
                f"{path} must hold a JSON object, found {type(data).__name__}"
            ))
            return self

        with self._lock:
            self._map.clear()
            self._map.update(data)

        logger.info("Loaded %d keys from %s", len(data), path)
        return self

    def _flush(self, sync: bool) -> "FileStorage":
        with self._lock:
            generation = self._generation
            try:
                content = json.dumps(self._map, indent=2, ensure_ascii=False)
            except (TypeError, ValueError) as exc:
                error = self._format_error(f"cannot serialize store: {exc}", exc)
            else:
                error = None
                self._seq += 1
                seq = self._seq

        if error is not None:
            self._report(error)
            return self

        if sync:
            self._write(content, seq, generation)
        else:
            # Non-daemon so a pending write finishes before interpreter exit
            threading.Thread(
                target=self._write,
                args=(content, seq, generation),
                name=f"backedstore-write[{self.path.name}]"
            ).start()
        return self

    def _write(self, content: str, seq: int, generation: int) -> None:
        with self._write_lock:
            if seq <= self._last_written:
                logger.debug("Skipping stale write #%d to %s", seq, self.path)
                return
            tmp = self.path.with_name(self.path.name + ".tmp")
            try:
                with open(tmp, "w", encoding="utf-8") as f:
                    f.write(content)
                tmp.replace(self.path)
            except OSError as exc:
                with contextlib.suppress(OSError):
                    tmp.unlink()
                self._report(WriteError.from_os_error(exc, "write", str(self.path)))
                return
            self._last_written = seq

        self._clear_dirty(generation)
        logger.debug("Wrote %d bytes to %s", len(content), self.path)

    def _format_error(self, message: str, cause: Optional[Exception] = None) -> FormatError:
        err = FormatError(message, path=str(self.path))
        err.__cause__ = cause
        return err
