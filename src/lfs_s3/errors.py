from __future__ import annotations

from .constants import CODE_CONFIGURATION, CODE_LOCAL_IO, CODE_REMOTE_TRANSFER


class AgentError(Exception):
    """Base class for every failure the agent knows how to report."""

    code = 0


class ProtocolDecodeError(AgentError):
    pass


class ResponseEncodeError(AgentError):
    pass


class ConfigurationError(AgentError):
    code = CODE_CONFIGURATION


class LocalIOError(AgentError):
    code = CODE_LOCAL_IO


class RemoteTransferError(AgentError):
    code = CODE_REMOTE_TRANSFER
