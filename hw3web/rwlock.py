"""A readers/writer lock that gives waiting writers priority over new readers."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ReadWriteLock:
    """Many readers or one writer at a time.

    A writer that is waiting blocks every reader that arrives after it,
    so a steady stream of readers cannot starve writers.
    """

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._can_read = threading.Condition(self._mutex)
        self._can_write = threading.Condition(self._mutex)
        self._readers = 0
        self._writers = 0
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        """Block until no writer holds or waits for the lock, then take a read share."""
        with self._mutex:
            while self._writers_waiting > 0 or self._writers > 0:
                self._can_read.wait()
            self._readers += 1

    def release_read(self) -> None:
        """Give back a read share; wake a writer when the last reader leaves."""
        with self._mutex:
            if self._readers == 0:
                raise RuntimeError("release_read called without a held read lock")
            self._readers -= 1
            if self._readers == 0:
                self._can_write.notify()

    def acquire_write(self) -> None:
        """Block until no reader or writer holds the lock, then take it exclusively."""
        with self._mutex:
            self._writers_waiting += 1
            try:
                while self._readers > 0 or self._writers > 0:
                    self._can_write.wait()
            except BaseException:
                self._writers_waiting -= 1
                if self._writers_waiting == 0 and self._writers == 0:
                    self._can_read.notify_all()
                raise
            self._writers_waiting -= 1
            self._writers += 1

    def release_write(self) -> None:
        """Give back the exclusive lock, preferring another waiting writer."""
        with self._mutex:
            if self._writers == 0:
                raise RuntimeError("release_write called without a held write lock")
            self._writers -= 1
            if self._writers_waiting > 0:
                self._can_write.notify()
            else:
                self._can_read.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold a read share for the duration of a with-block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the exclusive lock for the duration of a with-block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()