from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterable

from .config import StorageConfig
from .constants import (
    DEFAULT_OBJECTS_DIR,
    EVENT_DOWNLOAD,
    EVENT_INIT,
    EVENT_TERMINATE,
    EVENT_UPLOAD,
    EXIT_INIT_FAILED,
    EXIT_OK,
    EXIT_PROTOCOL_ERROR,
)
from .errors import AgentError, ConfigurationError, ProtocolDecodeError, ResponseEncodeError
from .messages import Error, InitResponse, Request, Response, ResponseWriter, TransferResponse, decode_request
from .storage import S3Storage
from .transfer import StorageFactory, TransferMetrics, download, upload

logger = logging.getLogger(__name__)


class AgentState(enum.Enum):
    AWAITING_INIT = "awaiting_init"
    READY = "ready"
    TERMINATED = "terminated"


@dataclass(slots=True)
class Agent:
    """Custom transfer agent state machine.

    Requests are handled strictly one at a time: a download or upload runs to
    completion before the next line is read, since the protocol has no request
    ids to tell interleaved completions apart.

    With ``report_errors`` off, a failed transfer is only logged and the peer
    receives nothing for it. With it on, the peer gets a ``complete`` line
    carrying the error.
    """

    config: StorageConfig
    writer: ResponseWriter
    storage_factory: StorageFactory = S3Storage.from_config
    objects_dir: str = DEFAULT_OBJECTS_DIR
    report_errors: bool = False
    state: AgentState = field(default=AgentState.AWAITING_INIT)

    def run(self, lines: Iterable[bytes | str]) -> int:
        for line in lines:
            try:
                req = decode_request(line)
            except ProtocolDecodeError as exc:
                logger.error("Error reading input: %s", exc)
                self.state = AgentState.TERMINATED
                return EXIT_PROTOCOL_ERROR

            status = self.handle(req)
            if self.state is AgentState.TERMINATED:
                return status
        return EXIT_OK

    def handle(self, req: Request) -> int:
        if req.event == EVENT_INIT:
            return self._init(req)
        if req.event == EVENT_DOWNLOAD:
            logger.info("Received download request for %s", req.oid)
            self._transfer(req, download)
        elif req.event == EVENT_UPLOAD:
            logger.info("Received upload request for %s", req.oid)
            self._transfer(req, upload)
        elif req.event == EVENT_TERMINATE:
            logger.info("Terminating custom transfer agent gracefully.")
            self.state = AgentState.TERMINATED
        else:
            logger.debug("ignoring unknown event; event=%s", req.event)
        return EXIT_OK

    def _init(self, req: Request) -> int:
        try:
            self.config.validate()
        except ConfigurationError as exc:
            logger.error("init failed; %s", exc)
            self._send(InitResponse(error=Error(exc.code, f"Initialization error: {exc}.")))
            self.state = AgentState.TERMINATED
            return EXIT_INIT_FAILED

        logger.debug("init ok; operation=%s remote=%s", req.operation, req.remote)
        self._send(InitResponse())
        self.state = AgentState.READY
        return EXIT_OK

    def _transfer(self, req: Request, operation: Callable[..., TransferMetrics]) -> None:
        try:
            if self.state is not AgentState.READY:
                raise ConfigurationError("transfer requested before init")
            operation(
                req.oid or "",
                req.size or 0,
                self.writer,
                self.config,
                self.storage_factory,
                self.objects_dir,
            )
        except AgentError as exc:
            logger.error("%s failed; oid=%s err=%s", req.event, req.oid, exc)
            if self.report_errors:
                self._send(TransferResponse(req.oid or "", error=Error(exc.code, str(exc))))

    def _send(self, resp: Response) -> None:
        try:
            self.writer.send(resp)
        except ResponseEncodeError as exc:
            logger.error("response not sent; err=%s", exc)


def serve(
    stdin: BinaryIO,
    stdout: BinaryIO,
    config: StorageConfig,
    **kwargs,
) -> int:
    agent = Agent(config=config, writer=ResponseWriter(stdout), **kwargs)
    return agent.run(stdin)
