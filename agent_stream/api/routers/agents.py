import logging

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from agent_stream.agents.factory import AgentRegistry
from agent_stream.api.schemas.agents import AgentListResponse, AgentSummary
from agent_stream.core.errors import ValidationError
from agent_stream.core.settings import Settings
from agent_stream.dependency_injection import get_container
from agent_stream.services.agent_stream_service import AgentStreamService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/agents", tags=["agents"])


@router.get(
    "",
    response_model=AgentListResponse,
    summary="List available agents",
)
async def list_agents(request: Request) -> AgentListResponse:
    registry: AgentRegistry = get_container(request).resolve(AgentRegistry)
    agents = [
        AgentSummary(id=agent_id, name=metadata.name, description=metadata.description)
        for agent_id, metadata in registry.list_agents()
    ]
    return AgentListResponse(agents=agents, count=len(agents))


@router.post(
    "/{agent_id}/stream",
    summary="Stream an agent run as server-sent events",
    description=(
        "Runs the agent with the posted messages. The resolved thread id is returned in the "
        "thread-id header and as the first frame; the stream ends with an `__end__` frame or a "
        "single `error` frame."
    ),
)
async def stream_agent(agent_id: str, request: Request) -> StreamingResponse:
    return await _stream_response(agent_id, request)


# An empty path segment never matches `{agent_id}`; route it so it gets the 400.
@router.post("//stream", include_in_schema=False)
async def stream_agent_without_id(request: Request) -> StreamingResponse:
    return await _stream_response("", request)


async def _stream_response(agent_id: str, request: Request) -> StreamingResponse:
    try:
        body = await request.json()
    except ValueError as exc:
        raise ValidationError("Invalid JSON in request body") from exc

    container = get_container(request)
    service: AgentStreamService = container.resolve(AgentStreamService)
    settings: Settings = container.resolve(Settings)
    stream = service.open_stream(agent_id, body)
    logger.info("streaming agent response", extra={"agent_id": stream.agent_id, "thread_id": stream.thread_id})

    return StreamingResponse(
        stream.frames,
        media_type="text/event-stream",
        headers={
            settings.thread_id_header: stream.thread_id,
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
