from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Union

from .constants import EVENT_COMPLETE, EVENT_PROGRESS
from .errors import ProtocolDecodeError, ResponseEncodeError

_REQUEST_FIELDS = (
    "event",
    "oid",
    "size",
    "path",
    "action",
    "operation",
    "remote",
    "concurrent",
    "concurrenttransfers",
)


@dataclass(frozen=True, slots=True)
class Request:
    event: str
    oid: str | None = None
    size: int | None = None
    path: str | None = None
    action: dict[str, Any] | None = None
    operation: str | None = None
    remote: str | None = None
    concurrent: bool | None = None
    concurrenttransfers: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"event": self.event}
        for name in _REQUEST_FIELDS[1:]:
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        out.update(self.extra)
        return out

    @staticmethod
    def from_dict(raw: dict[str, Any]) -> "Request":
        # a missing or null event decodes to "" and is ignored by the dispatcher
        event = raw.get("event")
        if event is None:
            event = ""
        if not isinstance(event, str):
            raise ProtocolDecodeError(f"event must be a string, got {type(event).__name__}")

        oid = raw.get("oid")
        if oid is not None and not isinstance(oid, str):
            raise ProtocolDecodeError(f"oid must be a string, got {type(oid).__name__}")

        size = raw.get("size")
        if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
            raise ProtocolDecodeError(f"size must be an integer, got {size!r}")

        return Request(
            event=event,
            oid=oid,
            size=size,
            path=raw.get("path"),
            action=raw.get("action"),
            operation=raw.get("operation"),
            remote=raw.get("remote"),
            concurrent=raw.get("concurrent"),
            concurrenttransfers=raw.get("concurrenttransfers"),
            extra={k: v for k, v in raw.items() if k not in _REQUEST_FIELDS},
        )


@dataclass(frozen=True, slots=True)
class Error:
    code: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True, slots=True)
class InitResponse:
    error: Error | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.error is None:
            return {}
        return {"error": self.error.to_dict()}


@dataclass(frozen=True, slots=True)
class ProgressResponse:
    oid: str
    bytes_so_far: int
    bytes_since_last: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": EVENT_PROGRESS,
            "oid": self.oid,
            "bytesSoFar": self.bytes_so_far,
            "bytesSinceLast": self.bytes_since_last,
        }


@dataclass(frozen=True, slots=True)
class TransferResponse:
    oid: str
    path: str | None = None
    error: Error | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"event": EVENT_COMPLETE, "oid": self.oid}
        if self.path is not None:
            out["path"] = self.path
        if self.error is not None:
            out["error"] = self.error.to_dict()
        return out


Response = Union[InitResponse, ProgressResponse, TransferResponse]


def decode_request(line: bytes | str) -> Request:
    try:
        raw = json.loads(line)
    except ValueError as exc:
        raise ProtocolDecodeError(f"invalid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ProtocolDecodeError(f"expected a JSON object, got {type(raw).__name__}")
    return Request.from_dict(raw)


def _encode(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8") + b"\n"


def encode_request(req: Request) -> bytes:
    return _encode(req.to_dict())


def encode_response(resp: Response) -> bytes:
    try:
        return _encode(resp.to_dict())
    except (TypeError, ValueError) as exc:
        raise ResponseEncodeError(f"cannot encode {type(resp).__name__}: {exc}") from exc


class ResponseWriter:
    """Writes one response per line and flushes it straight away.

    The peer blocks on the next line, so nothing may sit in a buffer. Progress
    events can come from the transfer layer's worker threads, hence the lock:
    a line is written whole or not at all.
    """

    def __init__(self, out: BinaryIO):
        self.out = out
        self._lock = threading.Lock()

    def send(self, resp: Response) -> None:
        line = encode_response(resp)
        with self._lock:
            try:
                self.out.write(line)
                self.out.flush()
            except (OSError, ValueError) as exc:
                raise ResponseEncodeError(f"cannot write {type(resp).__name__}: {exc}") from exc
