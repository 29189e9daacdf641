from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from langchain.agents import create_agent
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.tools import BaseTool, StructuredTool
from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.store.base import BaseStore

_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. Think step by step, call a tool whenever you need "
    "information you do not have, and answer concisely once you are done."
)


def _current_time() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_react_tools() -> list[BaseTool]:
    return [
        StructuredTool.from_function(
            func=_current_time,
            name="current_time",
            description="Return the current UTC date and time in ISO 8601 format.",
        ),
    ]


def build_react_graph(
    model: BaseChatModel,
    checkpointer: BaseCheckpointSaver,
    store: BaseStore,
    *,
    bind_tools: bool = True,
) -> Any:
    return create_agent(
        model=model,
        tools=build_react_tools() if bind_tools else [],
        system_prompt=_SYSTEM_PROMPT,
        checkpointer=checkpointer,
        store=store,
    )
