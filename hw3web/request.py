"""Request handling: URI parsing, static files, CGI programs, log retrieval and errors."""

from __future__ import annotations

import os
import socket
import stat
import subprocess
import sys
from dataclasses import dataclass
from datetime import timedelta

from .netio import MAXLINE, LineReader
from .serverlog import ServerLog

SERVER_NAME = "OS-HW3 Web Server"
DEFAULT_PUBLIC_DIR = "./public"

Timestamp = float | timedelta


@dataclass
class ThreadStats:
    """Request counters kept by one worker thread."""

    id: int
    stat_req: int = 0
    dynm_req: int = 0
    post_req: int = 0
    total_req: int = 0


def _format_time(value: Timestamp) -> str:
    seconds = value.total_seconds() if isinstance(value, timedelta) else value
    micros = round(seconds * 1_000_000)
    whole, frac = divmod(micros, 1_000_000)
    return f"{whole}.{frac:06d}"


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def format_stats(stats: ThreadStats, arrival: Timestamp, dispatch: Timestamp) -> str:
    """Return the statistics header block, ending with the blank line that closes the headers."""
    return (
        f"Stat-Req-Arrival:: {_format_time(arrival)}\r\n"
        f"Stat-Req-Dispatch:: {_format_time(dispatch)}\r\n"
        f"Stat-Thread-Id:: {stats.id}\r\n"
        f"Stat-Thread-Count:: {stats.total_req}\r\n"
        f"Stat-Thread-Static:: {stats.stat_req}\r\n"
        f"Stat-Thread-Dynamic:: {stats.dynm_req}\r\n"
        f"Stat-Thread-Post:: {stats.post_req}\r\n\r\n"
    )


def parse_uri(uri: str, public_dir: str = DEFAULT_PUBLIC_DIR) -> tuple[bool, str, str]:
    """Map a URI to (is_static, filename, cgiargs).

    URIs containing ".." are answered with the home page; URIs containing
    "cgi" name a program, with anything after "?" passed as its arguments.
    """
    if ".." in uri:
        return True, f"{public_dir}/home.html", ""
    if "cgi" not in uri:
        filename = f"{public_dir}/{uri}"
        if uri.endswith("/"):
            filename += "home.html"
        return True, filename, ""
    path, sep, cgiargs = uri.partition("?")
    return False, f"{public_dir}/{path}", cgiargs if sep else ""


def get_filetype(filename: str) -> str:
    """Guess the content type of a file from its name."""
    if ".html" in filename:
        return "text/html"
    if ".gif" in filename:
        return "image/gif"
    if ".jpg" in filename:
        return "image/jpeg"
    return "text/plain"


def serve_error(
    conn: socket.socket,
    cause: str,
    errnum: str,
    shortmsg: str,
    longmsg: str,
    arrival: Timestamp,
    dispatch: Timestamp,
    stats: ThreadStats,
) -> None:
    """Send an HTML error response."""
    body = _encode(
        "<html><title>OS-HW3 Error</title>"
        "<body bgcolor=fffff>\r\n"
        f"{errnum}: {shortmsg}\r\n"
        f"<p>{longmsg}: {cause}\r\n"
        f"<hr>{SERVER_NAME}\r\n"
    )
    header = (
        f"HTTP/1.0 {errnum} {shortmsg}\r\n"
        "Content-Type: text/html\r\n"
        f"Content-Length: {len(body)}\r\n"
        + format_stats(stats, arrival, dispatch)
    )
    conn.sendall(_encode(header))
    conn.sendall(body)


def serve_static(
    conn: socket.socket,
    filename: str,
    filesize: int,
    arrival: Timestamp,
    dispatch: Timestamp,
    stats: ThreadStats,
) -> None:
    """Send the contents of a regular file."""
    with open(filename, "rb") as source:
        content = source.read(filesize)
    header = (
        "HTTP/1.0 200 OK\r\n"
        f"Server: {SERVER_NAME}\r\n"
        f"Content-Length: {filesize}\r\n"
        f"Content-Type: {get_filetype(filename)}\r\n"
        + format_stats(stats, arrival, dispatch)
    )
    conn.sendall(_encode(header))
    conn.sendall(content)


def serve_dynamic(
    conn: socket.socket,
    filename: str,
    cgiargs: str,
    arrival: Timestamp,
    dispatch: Timestamp,
    stats: ThreadStats,
) -> None:
    """Send the start of a response and run a CGI program that writes the rest."""
    header = (
        "HTTP/1.0 200 OK\r\n"
        f"Server: {SERVER_NAME}\r\n"
        + format_stats(stats, arrival, dispatch)
    )
    conn.sendall(_encode(header))
    env = dict(os.environ, QUERY_STRING=cgiargs)
    try:
        subprocess.run([filename], env=env, stdout=conn.fileno(), check=False)
    except OSError as exc:
        print(f"Execve error: {exc}", file=sys.stderr)


def serve_post(
    conn: socket.socket,
    arrival: Timestamp,
    dispatch: Timestamp,
    stats: ThreadStats,
    log: ServerLog,
) -> None:
    """Send the whole server log as plain text."""
    body = log.contents()
    header = (
        "HTTP/1.0 200 OK\r\n"
        f"Server: {SERVER_NAME}\r\n"
        f"Content-Length: {len(body)}\r\n"
        "Content-Type: text/plain\r\n"
        + format_stats(stats, arrival, dispatch)
    )
    conn.sendall(_encode(header))
    conn.sendall(body)


def _skip_headers(reader: LineReader) -> None:
    while True:
        line = reader.readline(MAXLINE)
        if not line or line == b"\r\n":
            return


def handle_request(
    conn: socket.socket,
    arrival: Timestamp,
    dispatch: Timestamp,
    stats: ThreadStats,
    log: ServerLog,
    public_dir: str = DEFAULT_PUBLIC_DIR,
) -> None:
    """Read one request from conn, answer it and update the thread's counters."""
    reader = LineReader(conn)
    fields = reader.readline(MAXLINE).decode("utf-8", "surrogateescape").split()
    method = fields[0] if fields else ""
    uri = fields[1] if len(fields) > 1 else ""

    stats.total_req += 1

    if method.upper() == "GET":
        _skip_headers(reader)
        is_static, filename, cgiargs = parse_uri(uri, public_dir)
        try:
            info = os.stat(filename)
        except OSError:
            serve_error(conn, filename, "404", "Not found",
                        "OS-HW3 Server could not find this file",
                        arrival, dispatch, stats)
            return

        if is_static:
            if not stat.S_ISREG(info.st_mode) or not info.st_mode & stat.S_IRUSR:
                serve_error(conn, filename, "403", "Forbidden",
                            "OS-HW3 Server could not read this file",
                            arrival, dispatch, stats)
                return
            stats.stat_req += 1
            serve_static(conn, filename, info.st_size, arrival, dispatch, stats)
        else:
            if not stat.S_ISREG(info.st_mode) or not info.st_mode & stat.S_IXUSR:
                serve_error(conn, filename, "403", "Forbidden",
                            "OS-HW3 Server could not run this CGI program",
                            arrival, dispatch, stats)
                return
            stats.dynm_req += 1
            serve_dynamic(conn, filename, cgiargs, arrival, dispatch, stats)

        log.append(format_stats(stats, arrival, dispatch))

    elif method.upper() == "POST":
        stats.post_req += 1
        serve_post(conn, arrival, dispatch, stats, log)

    else:
        serve_error(conn, method, "501", "Not Implemented",
                    "OS-HW3 Server does not implement this method",
                    arrival, dispatch, stats)