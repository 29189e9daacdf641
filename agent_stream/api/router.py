from fastapi import APIRouter

from agent_stream.api.routers.agents import router as agents_router

api_router = APIRouter()
api_router.include_router(agents_router)
