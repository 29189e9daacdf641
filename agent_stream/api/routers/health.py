from fastapi import APIRouter, Request

from agent_stream.agents.factory import AgentRegistry
from agent_stream.dependency_injection import get_container

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
def readyz(request: Request) -> dict[str, object]:
    registry = get_container(request).resolve(AgentRegistry)
    agent_count = len(registry.list_agents())
    return {"status": "ok" if agent_count else "degraded", "agents": agent_count}
