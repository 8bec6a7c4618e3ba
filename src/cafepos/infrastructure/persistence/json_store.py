"""Shared plumbing for the JSON-file repositories.

Each file is guarded by a re-entrant lock shared by every repository
instance in the process that points at the same path, backed by an
exclusive ``flock`` on a ``<file>.lock`` sidecar so separate processes
(two CLI invocations) serialise too.  Read-modify-write sequences (stock
decrements, counter increments, inserts with a uniqueness check) are
therefore atomic across processes on one host.  Writes go through a
temporary file and ``os.replace`` so a crash never leaves half a file.
"""

from __future__ import annotations

import fcntl
import json
import os
import threading
from pathlib import Path
from typing import IO, Any


class _FileLock:
    """Re-entrant within a thread, exclusive across threads and processes."""

    def __init__(self, lock_path: Path) -> None:
        self._lock_path = lock_path
        self._thread_lock = threading.RLock()
        self._depth = 0
        self._handle: IO[str] | None = None

    def __enter__(self) -> _FileLock:
        self._thread_lock.acquire()
        try:
            if self._depth == 0:
                self._lock_path.parent.mkdir(parents=True, exist_ok=True)
                handle = open(self._lock_path, "a")
                try:
                    fcntl.flock(handle, fcntl.LOCK_EX)
                except BaseException:
                    handle.close()
                    raise
                self._handle = handle
            self._depth += 1
        except BaseException:
            self._thread_lock.release()
            raise
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._depth -= 1
        if self._depth == 0 and self._handle is not None:
            fcntl.flock(self._handle, fcntl.LOCK_UN)
            self._handle.close()
            self._handle = None
        self._thread_lock.release()


_locks: dict[Path, _FileLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> _FileLock:
    key = path.resolve()
    with _locks_guard:
        if key not in _locks:
            _locks[key] = _FileLock(key.with_name(key.name + ".lock"))
        return _locks[key]


class JsonFileStore:

    def __init__(self, file_path: Path, empty: Any) -> None:
        self._file_path = file_path
        self._empty = empty
        self._lock = _lock_for(file_path)
        self._ensure_file()

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> Any:
        with self._lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, data: Any) -> None:
        tmp = self._file_path.with_name(self._file_path.name + ".tmp")
        with self._lock:
            tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
            os.replace(tmp, self._file_path)

    def _ensure_file(self) -> None:
        with self._lock:
            if not self._file_path.exists():
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text(json.dumps(self._empty), encoding="utf-8")
