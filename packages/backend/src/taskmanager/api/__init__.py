"""API route aggregation.

All routers registered here get mounted in main.py under /api/v1.
Authentication is applied per route with Depends(get_current_user),
since the users router mixes open routes (signup, login, public
avatars) with protected ones.
"""

from fastapi import APIRouter

from taskmanager.api.health import router as health_router
from taskmanager.api.tasks import router as tasks_router
from taskmanager.api.users import router as users_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(tasks_router, tags=["tasks"])
