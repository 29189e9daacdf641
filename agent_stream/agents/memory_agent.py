"""Memory agent graph.

``call_model`` answers with the user's stored memories in its system prompt and may
request ``UpsertMemory`` tool calls; ``store_memory`` writes those calls into the
store under ``("memories", user_id)`` and loops back to the model.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import uuid
from typing import Any

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, SystemMessage, ToolMessage
from langchain_core.runnables import RunnableConfig
from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.graph import END, START, MessagesState, StateGraph
from langgraph.store.base import BaseStore, SearchItem
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

MEMORY_SEARCH_LIMIT = 10

_SYSTEM_PROMPT = """You are a helpful and friendly chat assistant. Get to know the user! \
Ask questions! Be spontaneous!

{user_info}

System Time: {time}"""


class UpsertMemory(BaseModel):
    """Upsert a memory about the user.

    If a memory conflicts with an existing one, update the existing one by passing its
    memory_id. If the user corrects a memory, update it.
    """

    content: str = Field(
        ...,
        description="The main content of the memory, e.g. 'User expressed interest in learning French.'",
    )
    context: str = Field(
        ...,
        description="Additional context, e.g. 'This was mentioned while discussing career options in Europe.'",
    )
    memory_id: str | None = Field(default=None, description="Only provide when updating an existing memory.")


def memory_namespace(config: RunnableConfig) -> tuple[str, str]:
    user_id = (config.get("configurable") or {}).get("user_id") or "anonymous"
    return ("memories", str(user_id))


def format_memories(memories: list[SearchItem]) -> str:
    if not memories:
        return ""
    lines = "\n".join(f"[{item.key}]: {item.value}" for item in memories)
    return f"<memories>\n{lines}\n</memories>"


def build_memory_graph(
    model: BaseChatModel,
    checkpointer: BaseCheckpointSaver,
    store: BaseStore,
    *,
    bind_tools: bool = True,
) -> Any:
    bound_model = model.bind_tools([UpsertMemory]) if bind_tools else model

    async def call_model(state: MessagesState, config: RunnableConfig, *, store: BaseStore) -> dict[str, Any]:
        memories = await store.asearch(memory_namespace(config), limit=MEMORY_SEARCH_LIMIT)
        prompt = _SYSTEM_PROMPT.format(
            user_info=format_memories(memories),
            time=datetime.now(timezone.utc).isoformat(),
        )
        response = await bound_model.ainvoke([SystemMessage(content=prompt), *state["messages"]], config)
        return {"messages": [response]}

    async def store_memory(state: MessagesState, config: RunnableConfig, *, store: BaseStore) -> dict[str, Any]:
        namespace = memory_namespace(config)
        tool_messages: list[ToolMessage] = []
        for tool_call in getattr(state["messages"][-1], "tool_calls", None) or []:
            args = tool_call.get("args") or {}
            memory_id = str(args.get("memory_id") or uuid.uuid4())
            await store.aput(
                namespace,
                memory_id,
                {"content": str(args.get("content", "")), "context": str(args.get("context", ""))},
            )
            logger.debug("stored memory", extra={"namespace": namespace, "memory_id": memory_id})
            tool_messages.append(ToolMessage(content=f"Stored memory {memory_id}", tool_call_id=tool_call["id"]))
        return {"messages": tool_messages}

    def route_message(state: MessagesState) -> str:
        last_message = state["messages"][-1]
        if isinstance(last_message, AIMessage) and last_message.tool_calls:
            return "store_memory"
        return END

    builder = StateGraph(MessagesState)
    builder.add_node("call_model", call_model)
    builder.add_node("store_memory", store_memory)
    builder.add_edge(START, "call_model")
    builder.add_conditional_edges("call_model", route_message, ["store_memory", END])
    builder.add_edge("store_memory", "call_model")
    return builder.compile(checkpointer=checkpointer, store=store)
