from agent_stream.client.context import LocalStreamContext, StreamContextProtocol, StreamProvider
from agent_stream.client.local_stream import CancellationToken, LocalStream
from agent_stream.client.types import InterruptState, MessageMetadata, StreamStatus, StreamValues

__all__ = [
    "CancellationToken",
    "InterruptState",
    "LocalStream",
    "LocalStreamContext",
    "MessageMetadata",
    "StreamContextProtocol",
    "StreamProvider",
    "StreamStatus",
    "StreamValues",
]
