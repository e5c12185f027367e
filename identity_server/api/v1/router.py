"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from identity_server.api.v1.dependencies (no manual
repo/service construction).
"""

from fastapi import APIRouter

from identity_server.api.v1.endpoints import health, profile, roles, users

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(roles.router, prefix="/roles", tags=["roles"])
