from typing import Any, AsyncIterator, Protocol

from langchain_core.runnables import RunnableConfig
from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.store.base import BaseStore

AgentEvent = dict[str, Any]


class AgentExecutor(Protocol):
    """Contract for executors that stream loosely-shaped step events."""

    def astream(
        self,
        input: dict[str, Any],
        config: RunnableConfig,
        *,
        store: BaseStore,
        checkpointer: BaseCheckpointSaver,
    ) -> AsyncIterator[AgentEvent]:
        """Stream step events for ``input``.

        Events are arbitrary keyed objects. Messages appear either under a top-level
        ``messages`` key or nested one level under a step-specific key.
        """
