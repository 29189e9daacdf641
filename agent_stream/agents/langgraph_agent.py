from __future__ import annotations

from collections.abc import AsyncIterator, Callable
import logging
from typing import Any

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.runnables import RunnableConfig
from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.store.base import BaseStore

from agent_stream.agents.base import AgentEvent, AgentExecutor

logger = logging.getLogger(__name__)

GraphFactory = Callable[[BaseChatModel, BaseCheckpointSaver, BaseStore], Any]
ModelFactory = Callable[[str], BaseChatModel]

_INTERRUPT_KEY = "__interrupt__"


class LangGraphAgent(AgentExecutor):
    """Executor backed by a LangGraph graph compiled per request.

    The graph is compiled against the store and checkpointer handed in by the caller,
    so nothing outlives the request that created it.
    """

    def __init__(
        self,
        *,
        name: str,
        graph_factory: GraphFactory,
        model_factory: ModelFactory,
        default_model: str,
    ) -> None:
        self._name = name
        self._graph_factory = graph_factory
        self._model_factory = model_factory
        self._default_model = default_model

    @property
    def name(self) -> str:
        return self._name

    async def astream(
        self,
        input: dict[str, Any],
        config: RunnableConfig,
        *,
        store: BaseStore,
        checkpointer: BaseCheckpointSaver,
    ) -> AsyncIterator[AgentEvent]:
        configurable = config.get("configurable") or {}
        model_name = str(configurable.get("model") or self._default_model)
        logger.debug(
            "streaming agent graph",
            extra={"agent": self._name, "model": model_name, "thread_id": configurable.get("thread_id")},
        )
        graph = self._graph_factory(self._model_factory(model_name), checkpointer, store)
        async for update in graph.astream(input, config, stream_mode="updates"):
            if not isinstance(update, dict):
                continue
            yield self._normalize_update(update)

    def _normalize_update(self, update: dict[str, Any]) -> AgentEvent:
        if _INTERRUPT_KEY not in update:
            return update

        raw = update[_INTERRUPT_KEY]
        items = list(raw) if isinstance(raw, (list, tuple)) else [raw]
        values = [getattr(item, "value", item) for item in items]
        logger.info("agent graph interrupted", extra={"agent": self._name, "interrupt_count": len(values)})
        return {"interrupt": values[0] if len(values) == 1 else values}
