from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
import punq

from agent_stream.agents.factory import AgentRegistry
from agent_stream.api.errors import register_error_handlers
from agent_stream.api.router import api_router
from agent_stream.api.routers.health import router as health_router
from agent_stream.core.logging import configure_logging
from agent_stream.core.settings import Settings, get_settings
from agent_stream.dependency_injection import build_container

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, container: punq.Container | None = None) -> FastAPI:
    settings = settings or get_settings()
    container = container or build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("starting agent stream service", extra={"app_env": settings.app_env})
        registry: AgentRegistry = container.resolve(AgentRegistry)
        logger.info("agents available", extra={"agents": [agent_id for agent_id, _ in registry.list_agents()]})
        app.state.settings = settings
        app.state.container = container
        try:
            yield
        finally:
            logger.info("agent stream service shutdown complete")

    app = FastAPI(
        title="Agent Stream Service",
        version="0.1.0",
        docs_url="/docs" if settings.enable_swagger else None,
        redoc_url="/redoc" if settings.enable_swagger else None,
        openapi_url="/openapi.json" if settings.enable_swagger else None,
        lifespan=lifespan,
    )
    # ASGITransport does not run lifespan events.
    app.state.container = container
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(api_router, prefix="/api")
    return app


def _build_default_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.effective_log_level)
    return create_app(settings)


app = _build_default_app()
