from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from agent_stream.core.errors import AgentStreamError

logger = logging.getLogger(__name__)


async def agent_stream_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = getattr(exc, "status_code", 500)
    message = getattr(exc, "message", None) or "Internal server error"
    logger.info(
        "agent stream request rejected",
        extra={"path": request.url.path, "status_code": status_code, "error": message},
    )
    return JSONResponse({"error": message}, status_code=status_code)


def register_error_handlers(app: FastAPI) -> None:
    """Render ``AgentStreamError`` subclasses as ``{"error": message}`` bodies."""

    app.add_exception_handler(AgentStreamError, agent_stream_error_handler)
