# hw3web

hw3web is a small HTTP/1.0 web server. A fixed pool of worker threads handles connections. The connections wait in a bounded queue until a worker takes them. Each worker keeps its own request statistics. A shared log records a statistics block for every GET request that is served. The log is guarded by a readers–writer lock that gives writers priority.

## Features

- **Static files.** GET requests for files under `./public` are served. The `Content-Type` comes from the file name:
  - a name containing `.html` is sent as `text/html`;
  - `.gif` as `image/gif`;
  - `.jpg` as `image/jpeg`;
  - anything else as `text/plain`.

  A URI ending in `/` serves `home.html` from that directory. A URI containing `..` serves `./public/home.html`.
- **Dynamic content.** A URI that contains `cgi` names a program to run. Anything after `?` is passed to the program in `QUERY_STRING`. The program's standard output is sent to the client after the server's header block.
- **Log retrieval.** A POST request returns the accumulated log as `text/plain`.
- **Errors.**
  - `404` when the file does not exist.
  - `403` when a static file is not a readable regular file, or a CGI program is not an executable regular file.
  - `501` for any other method.
- **Statistics headers.** Every response carries these headers:
  - `Stat-Req-Arrival::`
  - `Stat-Req-Dispatch::`
  - `Stat-Thread-Id::`
  - `Stat-Thread-Count::`
  - `Stat-Thread-Static::`
  - `Stat-Thread-Dynamic::`
  - `Stat-Thread-Post::`

## Installation

```
pip install .
```

## Running the server

```
hw3web-server <port> <threads> <queue_size>
```

For example, `hw3web-server 7777 4 8` starts four workers. At most eight connections can be waiting or in progress at once.

Press Ctrl-C to stop the server. Workers finish the requests they already hold before it exits.

## The spin program

`hw3web-spin` is a CGI-style program for testing concurrency. It sleeps for the number of seconds in the first `&`-separated field of `QUERY_STRING`, or 5 seconds when there is none. It then prints a short HTML response that reports how long it actually slept.

## Library use

- `hw3web.rwlock.ReadWriteLock` is a writer-priority readers–writer lock. It has `acquire_read`, `release_read`, `acquire_write` and `release_write`. The `read_locked()` and `write_locked()` context managers wrap them.
- `hw3web.serverlog.ServerLog` is a thread-safe append-only byte log. It has `append`, `contents` and `len()`.
- `hw3web.netio` provides the following:
  - `LineReader`, a buffered socket reader with `readline` and `read`;
  - `open_listen_socket` and `open_client_socket`;
  - `NetError`.
- `hw3web.request` provides `handle_request`, `parse_uri`, `get_filetype`, `format_stats` and `ThreadStats`.
- `hw3web.server` provides three classes:
  - `WebServer`, with `start`, `serve_forever` and `shutdown`;
  - `RequestQueue`;
  - `PendingRequest`.

## What is not included

The package has no command-line HTTP client. You can send requests to the server with any HTTP client. You can also write a small script that uses `hw3web.netio.open_client_socket` to connect and `LineReader` to read the reply.

## Tests

```
pip install .[test]
pytest
```