from fastapi import APIRouter, Depends

from api.v1.routes import (
    health,
)
from packages.auth.dependencies import get_current_active_user
from packages.credits.routes import credits
from packages.generation.routes import generation, websocket

api_router = APIRouter()

# Health check (no auth required)
api_router.include_router(health.router, prefix="/health", tags=["health"])

# Protected routes
api_router.include_router(
    credits.router,
    prefix="/credits",
    tags=["credits"],
    dependencies=[Depends(get_current_active_user)],
)
api_router.include_router(
    generation.router,
    prefix="/generation",
    tags=["generation"],
    dependencies=[Depends(get_current_active_user)],
)

# WebSocket auth is handled at the endpoint via the token query parameter
api_router.include_router(websocket.router, prefix="/generation", tags=["generation"])
