"""Buffered socket reading and socket setup helpers."""

from __future__ import annotations

import socket

MAXLINE = 8192
MAXBUF = 8192
LISTENQ = 1024
RIO_BUFSIZE = 8192


class NetError(OSError):
    """A socket operation failed."""


class LineReader:
    """Buffered reader over a connected socket, for lines and fixed-size reads."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._buf = b""

    def _fill(self) -> bool:
        """Refill the internal buffer; return False at end of stream."""
        while not self._buf:
            try:
                chunk = self._sock.recv(RIO_BUFSIZE)
            except InterruptedError:
                continue
            except OSError as exc:
                raise NetError(f"read error: {exc}") from exc
            if not chunk:
                return False
            self._buf = chunk
        return True

    def _take(self, count: int) -> bytes:
        piece, self._buf = self._buf[:count], self._buf[count:]
        return piece

    def readline(self, maxlen: int = MAXLINE) -> bytes:
        """Read one line including its newline, at most maxlen - 1 bytes.

        Returns b"" at end of stream when nothing was read.
        """
        if maxlen < 2:
            raise ValueError("maxlen must be at least 2")
        limit = maxlen - 1
        out = bytearray()
        while len(out) < limit:
            if not self._fill():
                break
            room = limit - len(out)
            newline = self._buf.find(b"\n", 0, room)
            if newline >= 0:
                out += self._take(newline + 1)
                break
            out += self._take(room)
        return bytes(out)

    def read(self, n: int) -> bytes:
        """Read up to n bytes, fewer only at end of stream."""
        if n < 0:
            raise ValueError("n must not be negative")
        out = bytearray()
        while len(out) < n:
            if not self._fill():
                break
            out += self._take(n - len(out))
        return bytes(out)


def open_listen_socket(port: int, backlog: int = LISTENQ) -> socket.socket:
    """Return a TCP socket listening on port on every local IPv4 address."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(("", port))
        sock.listen(backlog)
    except (OSError, OverflowError) as exc:
        sock.close()
        raise NetError(f"cannot listen on port {port}: {exc}") from exc
    return sock


def open_client_socket(hostname: str, port: int) -> socket.socket:
    """Return a TCP socket connected to hostname:port."""
    try:
        address = socket.gethostbyname(hostname)
    except (socket.gaierror, socket.herror, UnicodeError) as exc:
        raise NetError(f"DNS error for {hostname}: {exc}") from exc
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.connect((address, port))
    except (OSError, OverflowError) as exc:
        sock.close()
        raise NetError(f"cannot connect to {hostname}:{port}: {exc}") from exc
    return sock