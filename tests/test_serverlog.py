import threading

import pytest

from hw3web.serverlog import ServerLog


def test_new_log_is_empty():
    log = ServerLog()
    assert log.contents() == b""
    assert len(log) == 0


def test_append_concatenates_entries():
    log = ServerLog()
    log.append("first\r\n")
    log.append(b"second\r\n")
    assert log.contents() == b"first\r\nsecond\r\n"
    assert len(log) == len(b"first\r\nsecond\r\n")


def test_empty_entry_is_ignored():
    log = ServerLog()
    log.append("abc")
    log.append("")
    log.append(b"")
    assert log.contents() == b"abc"


def test_non_text_entry_rejected():
    log = ServerLog()
    with pytest.raises(TypeError):
        log.append(42)
    assert log.contents() == b""


def test_large_entries_are_kept_whole():
    log = ServerLog()
    chunk = b"x" * 3000
    log.append(chunk)
    log.append(chunk)
    assert log.contents() == chunk + chunk
    assert len(log) == 2 * len(chunk)


def test_contents_is_a_snapshot():
    log = ServerLog()
    log.append("one")
    snapshot = log.contents()
    log.append("two")
    assert snapshot == b"one"
    assert log.contents() == b"onetwo"


def test_concurrent_appends_keep_every_entry_intact():
    log = ServerLog()
    entries = [f"Stat-Thread-Id:: {i}\r\n".encode() * 3 for i in range(8)]

    def writer(entry):
        for _ in range(50):
            log.append(entry)

    threads = [threading.Thread(target=writer, args=(e,)) for e in entries]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(10)

    data = log.contents()
    assert len(data) == sum(len(e) * 50 for e in entries)
    for entry in entries:
        assert data.count(entry) == 50


def test_readers_during_writes_see_whole_entries():
    log = ServerLog()
    entry = b"ABCDEFGH"
    stop = threading.Event()
    bad = []

    def reader():
        while not stop.is_set():
            snapshot = log.contents()
            if len(snapshot) % len(entry):
                bad.append(snapshot)

    thread = threading.Thread(target=reader)
    thread.start()
    for _ in range(500):
        log.append(entry)
    stop.set()
    thread.join(10)
    assert bad == []
    assert log.contents() == entry * 500