"""A multi-threaded web server: one acceptor feeding a bounded queue of worker threads."""

from __future__ import annotations

import socket
import sys
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Generic, TypeVar

from .netio import NetError, open_listen_socket
from .request import DEFAULT_PUBLIC_DIR, ThreadStats, handle_request
from .serverlog import ServerLog

T = TypeVar("T")

_POLL_SECONDS = 0.2
_JOIN_TIMEOUT = 5.0
_USAGE = "Usage: server <port> <threads> <queue_size>"


@dataclass
class PendingRequest:
    """An accepted connection waiting for a worker."""

    conn: socket.socket
    arrival: float


class RequestQueue(Generic[T]):
    """FIFO queue whose capacity counts both waiting and in-progress items.

    A slot taken by ``put`` is given back only by ``task_done``, so at most
    ``capacity`` items are queued or being handled at any time.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("queue capacity must be at least 1")
        self.capacity = capacity
        self._slots = threading.BoundedSemaphore(capacity)
        self._items: deque[T] = deque()
        self._ready = threading.Condition()
        self._closed = False

    def _reserve(self, timeout: float | None = None) -> bool:
        return self._slots.acquire(timeout=timeout)

    def _push(self, item: T) -> None:
        with self._ready:
            if self._closed:
                raise RuntimeError("queue is closed")
            self._items.append(item)
            self._ready.notify()

    def _close(self) -> None:
        with self._ready:
            self._closed = True
            self._ready.notify_all()

    def put(self, item: T) -> None:
        """Wait for a free slot, then append item."""
        self._reserve()
        try:
            self._push(item)
        except BaseException:
            self._slots.release()
            raise

    def get(self) -> T | None:
        """Remove and return the oldest item; None once the queue is closed and empty."""
        with self._ready:
            while not self._items and not self._closed:
                self._ready.wait()
            if self._items:
                return self._items.popleft()
            return None

    def task_done(self) -> None:
        """Give back the slot of an item that has been fully handled."""
        self._slots.release()


class WebServer:
    """Accepts connections and hands them to a fixed pool of worker threads."""

    def __init__(
        self,
        port: int,
        threads: int,
        queue_size: int,
        public_dir: str = DEFAULT_PUBLIC_DIR,
    ) -> None:
        if threads < 1:
            raise ValueError("thread count must be at least 1")
        self.port = port
        self.public_dir = public_dir
        self.log = ServerLog()
        self.stats = [ThreadStats(id=index + 1) for index in range(threads)]
        self._queue: RequestQueue[PendingRequest] = RequestQueue(queue_size)
        self._workers: list[threading.Thread] = []
        self._listener: socket.socket | None = None
        self._stopping = threading.Event()

    def start(self) -> None:
        """Start the worker threads and open the listening socket."""
        if self._listener is not None:
            raise RuntimeError("server already started")
        for stats in self.stats:
            worker = threading.Thread(
                target=self._work, args=(stats,), name=f"worker-{stats.id}", daemon=True
            )
            worker.start()
            self._workers.append(worker)
        self._listener = open_listen_socket(self.port)
        self._listener.settimeout(_POLL_SECONDS)
        self.port = self._listener.getsockname()[1]

    def _work(self, stats: ThreadStats) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                return
            dispatch = max(0.0, time.time() - item.arrival)
            try:
                handle_request(item.conn, item.arrival, dispatch, stats, self.log, self.public_dir)
            except Exception as exc:
                print(f"request error: {exc}", file=sys.stderr)
            finally:
                item.conn.close()
                self._queue.task_done()

    def _accept(self, listener: socket.socket) -> socket.socket | None:
        while not self._stopping.is_set():
            try:
                conn, _ = listener.accept()
            except socket.timeout:
                continue
            except OSError:
                if self._stopping.is_set():
                    return None
                raise
            return conn
        return None

    def serve_forever(self) -> None:
        """Accept connections until shutdown is called."""
        listener = self._listener
        if listener is None:
            raise RuntimeError("server not started")
        try:
            while not self._stopping.is_set():
                if not self._queue._reserve(timeout=_POLL_SECONDS):
                    continue
                conn = self._accept(listener)
                if conn is None:
                    self._queue.task_done()
                    break
                try:
                    self._queue._push(PendingRequest(conn, time.time()))
                except RuntimeError:
                    conn.close()
                    self._queue.task_done()
                    break
        finally:
            listener.close()

    def shutdown(self) -> None:
        """Stop accepting, let workers finish queued requests and wait for them."""
        self._stopping.set()
        self._queue._close()
        if self._listener is not None:
            self._listener.close()
        for worker in self._workers:
            worker.join(_JOIN_TIMEOUT)


def parse_args(argv: list[str]) -> tuple[int, int, int]:
    """Return (port, threads, queue_size) from the command-line arguments."""
    if len(argv) < 3:
        raise ValueError(_USAGE)
    try:
        port, threads, queue_size = (int(value) for value in argv[:3])
    except ValueError as exc:
        raise ValueError(f"arguments must be integers; {_USAGE}") from exc
    if threads < 1:
        raise ValueError("threads must be at least 1")
    if queue_size < 1:
        raise ValueError("queue_size must be at least 1")
    return port, threads, queue_size


def main(argv: list[str] | None = None) -> int:
    """Run the server: <port> <threads> <queue_size>."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        port, threads, queue_size = parse_args(args)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1

    server = WebServer(port, threads, queue_size)
    try:
        server.start()
    except NetError as exc:
        print(f"Open_listenfd error: {exc}", file=sys.stderr)
        server.shutdown()
        return 1
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nReceived SIGINT, cleaning up...")
    finally:
        server.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())