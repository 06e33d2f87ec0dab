"""Multi-threaded HTTP/1.0 server with per-thread statistics, a shared request log and a spin CGI program."""

__version__ = "0.1.0"