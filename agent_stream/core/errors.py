"""Error taxonomy shared by the stream producer and the stream consumer."""

from __future__ import annotations


class AgentStreamError(Exception):
    """Base class for errors raised while opening or consuming an agent stream."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AgentStreamError):
    """The request is malformed and must be corrected by the caller."""

    status_code = 400


class NotFoundError(AgentStreamError):
    """The requested agent id does not resolve to a registered executor."""

    status_code = 404


class UpstreamExecutionError(AgentStreamError):
    """The executor failed mid-stream; delivered to clients as an error frame."""

    status_code = 502


class NetworkError(AgentStreamError):
    """Transport failure or non-success HTTP status seen by the consumer."""

    status_code = 502


class FrameParseError(AgentStreamError, ValueError):
    """A single SSE frame could not be decoded. Never fatal to a stream."""

    status_code = 400
