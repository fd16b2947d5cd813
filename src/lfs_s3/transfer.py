from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable

from .config import StorageConfig
from .constants import DEFAULT_OBJECTS_DIR
from .errors import LocalIOError, ResponseEncodeError
from .messages import ResponseWriter, TransferResponse
from .progress import ProgressTracker
from .storage import ObjectStorage

logger = logging.getLogger(__name__)

StorageFactory = Callable[[StorageConfig], ObjectStorage]


@dataclass(slots=True)
class TransferMetrics:
    oid: str
    expected_bytes: int = 0
    bytes_transferred: int = 0
    start_ts: float = field(default_factory=time.monotonic)
    end_ts: float | None = None

    @property
    def duration_s(self) -> float:
        if self.end_ts is None:
            return 0.0
        return max(0.0, self.end_ts - self.start_ts)

    @property
    def throughput_mibps(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return self.bytes_transferred / self.duration_s / (1024 * 1024)

    def finish(self, bytes_transferred: int) -> None:
        self.bytes_transferred = bytes_transferred
        self.end_ts = time.monotonic()


def local_object_path(oid: str, objects_dir: str = DEFAULT_OBJECTS_DIR) -> str:
    """Sharded cache location: ``<objects_dir>/ab/cd/abcd...``."""
    if len(oid) < 4:
        raise LocalIOError(f"object id too short for cache layout: {oid!r}")
    return os.path.join(objects_dir, oid[:2], oid[2:4], oid)


def _log_done(direction: str, metrics: TransferMetrics) -> None:
    logger.info(
        "%s done; oid=%s bytes=%d throughput=%.2f MiB/s",
        direction,
        metrics.oid,
        metrics.bytes_transferred,
        metrics.throughput_mibps,
    )
    if metrics.expected_bytes and metrics.bytes_transferred != metrics.expected_bytes:
        logger.warning(
            "size mismatch; oid=%s expected=%d got=%d",
            metrics.oid,
            metrics.expected_bytes,
            metrics.bytes_transferred,
        )


def _send_complete(writer: ResponseWriter, resp: TransferResponse) -> None:
    try:
        writer.send(resp)
    except ResponseEncodeError as exc:
        logger.error("Unable to send completion message; oid=%s err=%s", resp.oid, exc)


def download(
    oid: str,
    size: int,
    writer: ResponseWriter,
    config: StorageConfig,
    storage_factory: StorageFactory,
    objects_dir: str = DEFAULT_OBJECTS_DIR,
) -> TransferMetrics:
    """Fetch ``oid`` into the local object cache, reporting progress as it lands."""
    config.validate()
    storage = storage_factory(config)
    path = local_object_path(oid, objects_dir)
    metrics = TransferMetrics(oid=oid, expected_bytes=size)

    try:
        f = open(path, "wb")
    except OSError as exc:
        raise LocalIOError(f"cannot create {path}: {exc}") from exc

    completed = False
    try:
        with f:
            tracker = ProgressTracker(f, oid, writer)
            try:
                storage.download(oid, tracker)
                f.flush()
                os.fsync(f.fileno())
            except OSError as exc:
                raise LocalIOError(f"cannot write {path}: {exc}") from exc
        completed = True
    finally:
        if not completed:
            _discard_partial(path)

    metrics.finish(tracker.bytes_so_far)
    _log_done("download", metrics)
    _send_complete(writer, TransferResponse(oid, path=path))
    return metrics


def upload(
    oid: str,
    size: int,
    writer: ResponseWriter,
    config: StorageConfig,
    storage_factory: StorageFactory,
    objects_dir: str = DEFAULT_OBJECTS_DIR,
) -> TransferMetrics:
    """Push the cached copy of ``oid`` to the bucket under the key ``oid``."""
    config.validate()
    path = local_object_path(oid, objects_dir)
    metrics = TransferMetrics(oid=oid, expected_bytes=size)

    try:
        f = open(path, "rb")
    except OSError as exc:
        raise LocalIOError(f"cannot open {path}: {exc}") from exc

    with f:
        storage = storage_factory(config)
        tracker = ProgressTracker(f, oid, writer)
        try:
            storage.upload(oid, tracker)
        except OSError as exc:
            raise LocalIOError(f"cannot read {path}: {exc}") from exc

    metrics.finish(tracker.bytes_so_far)
    _log_done("upload", metrics)
    _send_complete(writer, TransferResponse(oid))
    return metrics


def _discard_partial(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        logger.debug("no partial object to discard; path=%s", path)
    else:
        logger.debug("discarded partial object; path=%s", path)
