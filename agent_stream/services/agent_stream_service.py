from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any
import logging
import uuid

from langchain_core.runnables import RunnableConfig
from langgraph.checkpoint.memory import InMemorySaver
from langgraph.store.memory import InMemoryStore
from pydantic import ValidationError as PydanticValidationError

from agent_stream.agents.base import AgentExecutor
from agent_stream.agents.factory import AgentRegistry
from agent_stream.api.schemas.agents import AgentStreamRequest
from agent_stream.core.errors import NotFoundError, ValidationError
from agent_stream.core.settings import Settings
from agent_stream.services.sse import encode_frame, end_frame, error_frame, thread_frame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgentStream:
    """A validated stream whose thread id is fixed before the first frame is written."""

    agent_id: str
    thread_id: str
    frames: AsyncIterator[str]


class AgentStreamService:
    """Turns an executor's event sequence into SSE frames for one request."""

    def __init__(self, registry: AgentRegistry, settings: Settings) -> None:
        self._registry = registry
        self._settings = settings

    def open_stream(self, agent_id: str | None, body: Any) -> AgentStream:
        """Validate the request and prepare its frame stream.

        Raises ``ValidationError`` for an empty agent id or malformed body and
        ``NotFoundError`` for an unknown agent id, before any frame is produced.
        """

        if not agent_id or not agent_id.strip():
            raise ValidationError("Agent ID is required")

        request = self._parse_request(body)

        executor = self._registry.get(agent_id)
        if executor is None:
            raise NotFoundError(f'Agent "{agent_id}" not found')

        thread_id = request.thread_id or str(uuid.uuid4())
        config = self._build_config(thread_id, request.configurable)
        logger.info(
            "opening agent stream",
            extra={"agent_id": agent_id, "thread_id": thread_id, "message_count": len(request.messages)},
        )
        return AgentStream(
            agent_id=agent_id,
            thread_id=thread_id,
            frames=self._frames(agent_id, executor, {"messages": request.messages}, config, thread_id),
        )

    def _parse_request(self, body: Any) -> AgentStreamRequest:
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        if not isinstance(body.get("messages"), list):
            raise ValidationError("Messages array is required")
        try:
            return AgentStreamRequest.model_validate(body)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid request body: {exc.errors()[0]['msg']}") from exc

    def _build_config(self, thread_id: str, configurable: dict[str, Any] | None) -> RunnableConfig:
        overrides = dict(configurable or {})
        return {
            "configurable": {
                "user_id": thread_id,
                **overrides,
                "thread_id": thread_id,
                "model": overrides.get("model") or self._settings.default_model,
            }
        }

    async def _frames(
        self,
        agent_id: str,
        executor: AgentExecutor,
        input: dict[str, Any],
        config: RunnableConfig,
        thread_id: str,
    ) -> AsyncIterator[str]:
        yield thread_frame(thread_id)

        # Request-scoped; dropped when the response finishes.
        store = InMemoryStore()
        checkpointer = InMemorySaver()
        event_count = 0
        try:
            async for event in executor.astream(input, config, store=store, checkpointer=checkpointer):
                frame = encode_frame(event)
                event_count += 1
                yield frame
        except Exception as exc:
            logger.exception("agent stream failed", extra={"agent_id": agent_id, "thread_id": thread_id})
            yield error_frame(str(exc) or exc.__class__.__name__)
            return

        logger.info(
            "agent stream completed",
            extra={"agent_id": agent_id, "thread_id": thread_id, "event_count": event_count},
        )
        yield end_frame()
