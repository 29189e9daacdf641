"""Client-safe agent metadata, free of executor imports."""

from __future__ import annotations

from typing import NamedTuple


class AgentMetadata(NamedTuple):
    name: str
    description: str = ""


AGENT_METADATA: dict[str, AgentMetadata] = {
    "memory-agent": AgentMetadata(
        name="Memory Agent",
        description=(
            "A ReAct-style agent with a tool to save memories. Memories are scoped to the "
            "configurable `user_id`, so the agent can recall a user's preferences across "
            "conversational threads."
        ),
    ),
    "react-agent": AgentMetadata(
        name="React Agent",
        description=(
            "A prototypical ReAct agent that reasons step by step and calls tools when it "
            "needs information it does not have."
        ),
    ),
}


def known_agent_ids() -> list[str]:
    return list(AGENT_METADATA)
