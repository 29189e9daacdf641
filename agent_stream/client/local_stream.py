"""Client side of the agent stream: submits a run and folds its frames into state."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import replace
import logging
from typing import Any
from urllib.parse import quote

import httpx

from agent_stream.agents.metadata import known_agent_ids
from agent_stream.client.frames import decode_line, parse_frame
from agent_stream.client.messages import HUMAN_TYPE, normalize_message
from agent_stream.client.reconcile import merge_messages
from agent_stream.client.types import (
    InterruptState,
    Message,
    MessageMetadata,
    StreamStatus,
    StreamValues,
    SubmitOptions,
    SubmitPayload,
)
from agent_stream.core.errors import (
    AgentStreamError,
    FrameParseError,
    NetworkError,
    UpstreamExecutionError,
    ValidationError,
)
from agent_stream.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

ThreadIdCallback = Callable[[str], None]


class CancellationToken:
    """Cancels one in-flight submission; a fresh token is issued per submit."""

    def __init__(self) -> None:
        self._cancelled = False
        self._task: asyncio.Future[None] | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def bind(self, task: asyncio.Future[None]) -> None:
        self._task = task

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()


class LocalStream:
    def __init__(
        self,
        *,
        assistant_id: str,
        thread_id: str | None = None,
        on_thread_id: ThreadIdCallback | None = None,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        known_agents: Iterable[str] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._assistant_id = assistant_id
        self._thread_id = thread_id or None
        self._on_thread_id = on_thread_id
        self._http_client = http_client
        self._base_url = (base_url or self._settings.stream_api_base_url).rstrip("/")
        self._known_agents = frozenset(known_agents if known_agents is not None else known_agent_ids())

        self._values = StreamValues()
        self._status = StreamStatus.IDLE
        self._error: AgentStreamError | None = None
        self._interrupt: InterruptState | None = None
        self._cancellation: CancellationToken | None = None

    @property
    def assistant_id(self) -> str:
        return self._assistant_id

    @property
    def thread_id(self) -> str | None:
        return self._thread_id

    @property
    def values(self) -> StreamValues:
        return self._values

    @property
    def messages(self) -> list[Message]:
        return self._values.messages

    @property
    def error(self) -> AgentStreamError | None:
        return self._error

    @property
    def interrupt(self) -> InterruptState | None:
        return self._interrupt

    @property
    def status(self) -> StreamStatus:
        return self._status

    @property
    def is_loading(self) -> bool:
        return self._status.is_loading

    async def submit(self, payload: SubmitPayload | None = None, options: SubmitOptions | None = None) -> None:
        """Run the assistant on ``payload`` and stream the result into state.

        Returns once the stream has finished, failed or been stopped. Failures are
        recorded on ``error`` instead of raised. A submit issued while another one is
        in flight is ignored.
        """

        if self.is_loading:
            logger.debug("submit ignored while a stream is in flight", extra={"assistant_id": self._assistant_id})
            return

        payload = payload or {}
        options = options or {}
        self._error = None
        self._interrupt = None

        if self._assistant_id not in self._known_agents:
            available = ", ".join(sorted(self._known_agents))
            self._error = ValidationError(f'Agent "{self._assistant_id}" not found. Available agents: {available}')
            self._status = StreamStatus.ERRORED
            logger.warning("submit rejected for unknown agent", extra={"assistant_id": self._assistant_id})
            return

        token = CancellationToken()
        self._cancellation = token
        self._status = StreamStatus.SUBMITTING

        raw_messages = list(payload.get("messages") or [])
        self._append_human_messages(raw_messages)
        body = self._build_request_body(raw_messages, options)

        task = asyncio.ensure_future(self._run(token, body))
        token.bind(task)
        try:
            await task
        except asyncio.CancelledError:
            if token.cancelled:
                return
            raise

    def stop(self) -> None:
        token = self._cancellation
        self._cancellation = None
        if token is not None and not token.cancelled:
            token.cancel()
            logger.info("stream stopped", extra={"assistant_id": self._assistant_id, "thread_id": self._thread_id})
        if self.is_loading:
            self._status = StreamStatus.ABORTED

    def get_messages_metadata(self, message: Message, index: int | None = None) -> MessageMetadata:
        return MessageMetadata(message_id=str(message.get("id") or ""))

    def set_branch(self, branch: str) -> None:
        logger.info(
            "branch switching is unavailable without a persistent checkpoint store",
            extra={"branch": branch},
        )

    async def _run(self, token: CancellationToken, body: dict[str, Any]) -> None:
        status = StreamStatus.ERRORED
        try:
            await self._stream(token, body)
            status = StreamStatus.COMPLETED
        except asyncio.CancelledError:
            status = StreamStatus.ABORTED
            raise
        except httpx.HTTPError as exc:
            self._record_error(token, NetworkError(f"Request failed: {exc}"))
        except AgentStreamError as exc:
            self._record_error(token, exc)
        finally:
            self._finish(token, status)

    async def _stream(self, token: CancellationToken, body: dict[str, Any]) -> None:
        client = self._http_client or httpx.AsyncClient()
        try:
            async with client.stream("POST", self._stream_url(), json=body, timeout=self._timeout()) as response:
                if token.cancelled:
                    return
                if not response.is_success:
                    raise NetworkError(
                        f"API request failed: {response.status_code} {response.reason_phrase}",
                        status_code=response.status_code,
                    )
                if response.status_code == 204:
                    raise NetworkError("No response body received")

                self._status = StreamStatus.STREAMING
                self._resolve_thread_id(response.headers.get(self._settings.thread_id_header))
                line_count = await self._consume(token, response)
                if line_count == 0 and not token.cancelled:
                    raise NetworkError("No response body received")
        finally:
            if self._http_client is None:
                await client.aclose()

    async def _consume(self, token: CancellationToken, response: httpx.Response) -> int:
        """Fold frames into state; returns the number of lines read."""

        line_count = 0
        first_frame_seen = False
        async for line in response.aiter_lines():
            if token.cancelled:
                break
            line_count += 1
            try:
                payload = decode_line(line)
            except FrameParseError as exc:
                logger.warning("skipping malformed frame", extra={"error": exc.message})
                continue
            if payload is None:
                continue

            frame = parse_frame(payload)
            if not first_frame_seen:
                first_frame_seen = True
                self._resolve_thread_id(frame.thread_id)
            if frame.error is not None:
                raise UpstreamExecutionError(frame.error)
            if frame.messages:
                self._apply_messages(frame.messages)
            if frame.has_interrupt:
                self._interrupt = InterruptState(value=frame.interrupt)
            if frame.end:
                break
        return line_count

    def _apply_messages(self, raw_messages: list[Any]) -> None:
        incoming = [message for message in map(normalize_message, raw_messages) if message is not None]
        self._values = replace(self._values, messages=merge_messages(self._values.messages, incoming))

    def _append_human_messages(self, raw_messages: list[Any]) -> None:
        human = [
            message
            for message in map(normalize_message, raw_messages)
            if message is not None and message.get("type") == HUMAN_TYPE
        ]
        if human:
            self._values = replace(self._values, messages=[*self._values.messages, *human])

    def _resolve_thread_id(self, candidate: str | None) -> None:
        if self._thread_id or not candidate:
            return
        self._thread_id = candidate
        logger.info("thread id resolved", extra={"assistant_id": self._assistant_id, "thread_id": candidate})
        if self._on_thread_id is None:
            return
        try:
            self._on_thread_id(candidate)
        except Exception:
            logger.exception(
                "thread id callback failed", extra={"assistant_id": self._assistant_id, "thread_id": candidate}
            )

    def _record_error(self, token: CancellationToken, error: AgentStreamError) -> None:
        if token.cancelled or self._cancellation is not token:
            return
        self._error = error
        logger.warning("stream failed", extra={"assistant_id": self._assistant_id, "error": error.message})

    def _finish(self, token: CancellationToken, status: StreamStatus) -> None:
        if token.cancelled or self._cancellation is not token:
            return
        self._cancellation = None
        self._status = status

    def _build_request_body(self, raw_messages: list[Any], options: SubmitOptions) -> dict[str, Any]:
        body: dict[str, Any] = {"messages": raw_messages}
        if self._thread_id:
            body["threadId"] = self._thread_id
        configurable = options.get("configurable")
        if configurable is not None:
            body["configurable"] = configurable
        return body

    def _stream_url(self) -> str:
        return f"{self._base_url}/api/agents/{quote(self._assistant_id, safe='')}/stream"

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self._settings.stream_read_timeout_seconds,
            connect=self._settings.stream_connect_timeout_seconds,
        )
