from agent_stream.api.schemas.agents import AgentListResponse, AgentStreamRequest, AgentSummary

__all__ = [
    "AgentListResponse",
    "AgentStreamRequest",
    "AgentSummary",
]
