from __future__ import annotations

import punq
from fastapi import Request

from agent_stream.agents.factory import AgentRegistry, build_agent_registry
from agent_stream.core.settings import Settings
from agent_stream.services.agent_stream_service import AgentStreamService


def build_container(settings: Settings, registry: AgentRegistry | None = None) -> punq.Container:
    container = punq.Container()
    container.register(Settings, instance=settings)

    if registry is not None:
        container.register(AgentRegistry, instance=registry)
    else:
        container.register(
            AgentRegistry,
            factory=lambda: build_agent_registry(settings),
            scope=punq.Scope.singleton,
        )
    container.register(AgentStreamService, factory=AgentStreamService, scope=punq.Scope.singleton)

    return container


def get_container(request: Request) -> punq.Container:
    return request.app.state.container
