from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from agent_stream.agents.metadata import AGENT_METADATA
from agent_stream.client.local_stream import LocalStream, ThreadIdCallback
from agent_stream.client.types import (
    BranchTree,
    InterruptState,
    Message,
    MessageMetadata,
    StreamValues,
    SubmitOptions,
    SubmitPayload,
)
from agent_stream.core.errors import AgentStreamError
from agent_stream.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"


class StreamContextProtocol(Protocol):
    """Field set shared by every stream context a UI can bind to."""

    @property
    def values(self) -> StreamValues: ...

    @property
    def messages(self) -> list[Message]: ...

    @property
    def error(self) -> AgentStreamError | None: ...

    @property
    def is_loading(self) -> bool: ...

    @property
    def interrupt(self) -> InterruptState | None: ...

    @property
    def branch(self) -> str: ...

    @property
    def history(self) -> list[Any]: ...

    @property
    def experimental_branch_tree(self) -> BranchTree: ...

    @property
    def client(self) -> Any: ...

    @property
    def assistant_id(self) -> str: ...

    async def submit(self, payload: SubmitPayload | None = None, options: SubmitOptions | None = None) -> None: ...

    def stop(self) -> None: ...

    def set_branch(self, branch: str) -> None: ...

    def get_messages_metadata(self, message: Message, index: int | None = None) -> MessageMetadata: ...


class LocalStreamContext(StreamContextProtocol):
    """Presents a LocalStream through the stream context field set.

    Branching and history need a persistent checkpoint store, so those fields hold
    fixed placeholder values and ``client`` is always ``None``.
    """

    def __init__(self, stream: LocalStream) -> None:
        self._stream = stream

    @property
    def values(self) -> StreamValues:
        return self._stream.values

    @property
    def messages(self) -> list[Message]:
        return self._stream.messages

    @property
    def error(self) -> AgentStreamError | None:
        return self._stream.error

    @property
    def is_loading(self) -> bool:
        return self._stream.is_loading

    @property
    def interrupt(self) -> InterruptState | None:
        return self._stream.interrupt

    @property
    def branch(self) -> str:
        return DEFAULT_BRANCH

    @property
    def history(self) -> list[Any]:
        return []

    @property
    def experimental_branch_tree(self) -> BranchTree:
        return BranchTree()

    @property
    def client(self) -> Any:
        return None

    @property
    def assistant_id(self) -> str:
        return self._stream.assistant_id

    async def submit(self, payload: SubmitPayload | None = None, options: SubmitOptions | None = None) -> None:
        await self._stream.submit(payload, options)

    def stop(self) -> None:
        self._stream.stop()

    def set_branch(self, branch: str) -> None:
        self._stream.set_branch(branch)

    def get_messages_metadata(self, message: Message, index: int | None = None) -> MessageMetadata:
        return self._stream.get_messages_metadata(message, index)


def resolve_assistant_id(candidate: str | None, default: str) -> str:
    if candidate and candidate in AGENT_METADATA:
        return candidate
    return default


class StreamProvider:
    """Owns the thread id of one chat session and hands out its stream context."""

    def __init__(
        self,
        *,
        assistant_id: str | None = None,
        thread_id: str | None = None,
        on_thread_id: ThreadIdCallback | None = None,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
    ) -> None:
        settings = settings or get_settings()
        resolved_assistant_id = resolve_assistant_id(assistant_id, settings.default_agent_id)
        if assistant_id and resolved_assistant_id != assistant_id:
            logger.warning(
                "unknown assistant id, falling back to default",
                extra={"assistant_id": assistant_id, "default_agent_id": resolved_assistant_id},
            )

        self._thread_id = thread_id or None
        self._on_thread_id = on_thread_id
        self._stream = LocalStream(
            assistant_id=resolved_assistant_id,
            thread_id=self._thread_id,
            on_thread_id=self._set_thread_id,
            settings=settings,
            http_client=http_client,
            base_url=base_url,
        )
        self.context = LocalStreamContext(self._stream)

    @property
    def assistant_id(self) -> str:
        return self._stream.assistant_id

    @property
    def thread_id(self) -> str | None:
        return self._thread_id

    def _set_thread_id(self, thread_id: str) -> None:
        self._thread_id = thread_id
        if self._on_thread_id is not None:
            self._on_thread_id(thread_id)
