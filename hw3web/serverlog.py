"""A shared, append-only request log safe for concurrent use."""

from __future__ import annotations

from .rwlock import ReadWriteLock


class ServerLog:
    """Append-only byte log guarded by a writer-priority readers/writer lock."""

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._data = bytearray()

    def append(self, data: str | bytes | bytearray | memoryview) -> None:
        """Add an entry to the end of the log; empty entries are ignored."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        elif not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"log entries must be str or bytes, not {type(data).__name__}")
        if not data:
            return
        with self._lock.write_locked():
            self._data.extend(data)

    def contents(self) -> bytes:
        """Return a copy of the whole log."""
        with self._lock.read_locked():
            return bytes(self._data)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._data)