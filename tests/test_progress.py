from __future__ import annotations

import io
import json

import pytest

from lfs_s3.messages import ResponseWriter
from lfs_s3.progress import ProgressTracker


def _events(out: io.BytesIO) -> list[dict]:
    return [json.loads(line) for line in out.getvalue().splitlines()]


def test_reads_report_every_chunk():
    payload = bytes(range(256)) * 40
    out = io.BytesIO()
    tracker = ProgressTracker(io.BytesIO(payload), "abcd", ResponseWriter(out))

    got = b"".join(iter(lambda: tracker.read(1000), b""))

    assert got == payload
    events = _events(out)
    assert len(events) == 11
    assert sum(e["bytesSinceLast"] for e in events) == len(payload)
    assert events[-1]["bytesSoFar"] == len(payload)
    assert all(e["event"] == "progress" and e["oid"] == "abcd" for e in events)
    assert tracker.bytes_so_far == len(payload)


def test_writes_report_running_total():
    dest = io.BytesIO()
    out = io.BytesIO()
    tracker = ProgressTracker(dest, "abcd", ResponseWriter(out))

    for chunk in (b"aaa", b"", b"bb", b"c"):
        tracker.write(chunk)

    assert dest.getvalue() == b"aaabbc"
    assert [(e["bytesSoFar"], e["bytesSinceLast"]) for e in _events(out)] == [(3, 3), (5, 2), (6, 1)]


def test_eof_emits_nothing():
    out = io.BytesIO()
    tracker = ProgressTracker(io.BytesIO(b""), "abcd", ResponseWriter(out))
    assert tracker.read(10) == b""
    assert out.getvalue() == b""


class _Broken(io.RawIOBase):
    def readable(self):
        return True

    def read(self, size=-1):
        raise OSError("disk on fire")


def test_underlying_error_passes_through():
    out = io.BytesIO()
    tracker = ProgressTracker(_Broken(), "abcd", ResponseWriter(out))
    with pytest.raises(OSError, match="disk on fire"):
        tracker.read(10)
    assert out.getvalue() == b""
    assert tracker.bytes_so_far == 0


def test_lost_sink_does_not_stop_transfer():
    out = io.BytesIO()
    out.close()
    dest = io.BytesIO()
    tracker = ProgressTracker(dest, "abcd", ResponseWriter(out))
    assert tracker.write(b"data") == 4
    assert dest.getvalue() == b"data"
    assert tracker.bytes_so_far == 4


def test_never_seekable():
    tracker = ProgressTracker(io.BytesIO(b"x"), "abcd", ResponseWriter(io.BytesIO()))
    assert tracker.seekable() is False
    assert tracker.readable() is True
