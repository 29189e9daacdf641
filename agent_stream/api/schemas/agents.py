from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AgentStreamRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: list[dict[str, Any]] = Field(..., description="Conversation messages passed to the executor as input")
    thread_id: str | None = Field(
        default=None,
        alias="threadId",
        description="Existing thread id; a fresh UUIDv4 is generated when omitted or empty",
    )
    configurable: dict[str, Any] | None = Field(
        default=None,
        description="Caller overrides merged into the executor's configurable mapping",
    )


class AgentSummary(BaseModel):
    id: str = Field(..., description="Agent id used in /api/agents/{agent_id}/stream")
    name: str = Field(..., description="Human-readable agent name")
    description: str = Field(default="", description="Short description of the agent")


class AgentListResponse(BaseModel):
    agents: list[AgentSummary]
    count: int
