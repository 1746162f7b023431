"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in the todos router
without relying on each handler. The users router mixes open routes
(signup, login) with protected ones, so it declares auth per route.
"""

from fastapi import APIRouter, Depends

from todoapp.api.health import router as health_router
from todoapp.api.todos import router as todos_router
from todoapp.api.users import router as users_router
from todoapp.auth.dependencies import get_auth_context

# All protected routers require authentication
_auth = [Depends(get_auth_context)]

api_router = APIRouter()

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(users_router, tags=["users"])

# Protected routes — require a valid session token
api_router.include_router(todos_router, tags=["todos"], dependencies=_auth)
