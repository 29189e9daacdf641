"""Service layer producing agent streams."""

from agent_stream.services.agent_stream_service import AgentStream, AgentStreamService

__all__ = ["AgentStream", "AgentStreamService"]
