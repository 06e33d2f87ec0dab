"""A CGI program that sleeps for a while and reports how long it took."""

from __future__ import annotations

import os
import re
import sys
import time

DEFAULT_SPIN = 5.0

_FLOAT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*([+-]?(?:inf(?:inity)?|nan|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?))",
    re.IGNORECASE,
)


def parse_spin(query: str | None, default: float = DEFAULT_SPIN) -> float:
    """Return the seconds to spin, read from the first '&'-separated field of query.

    A missing query or one with no fields gives default; a field that does not
    start with a number gives 0.0.
    """
    if query is None:
        return default
    fields = [field for field in query.split("&") if field]
    if not fields:
        return default
    match = _FLOAT_PREFIX.match(fields[0])
    return float(match.group(1)) if match else 0.0


def render_body(seconds: float) -> str:
    """Return the HTML body reporting the time spent."""
    return (
        "<p>Welcome to the CGI program</p>\r\n"
        "<p>My only purpose is to waste time on the server!</p>\r\n"
        f"<p>I spun for {seconds:.2f} seconds</p>\r\n"
    )


def render_response(seconds: float) -> str:
    """Return the CGI output: header lines, blank line and body."""
    body = render_body(seconds)
    return (
        f"Content-length: {len(body.encode())}\r\n"
        "Content-type: text/html\r\n\r\n"
        f"{body}"
    )


def main(argv: list[str] | None = None) -> int:
    """Sleep for the time given in QUERY_STRING and print the CGI response."""
    spin = parse_spin(os.environ.get("QUERY_STRING"))
    start = time.time()
    time.sleep(max(spin, 0.0))
    elapsed = time.time() - start
    sys.stdout.write(render_response(elapsed))
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())