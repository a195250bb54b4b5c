"""
API Router

Every resource lives under the API prefix (``/api`` by default); auth is
mounted separately at ``{prefix}/auth`` by the app factory.
"""

from fastapi import APIRouter
from . import committees, organizations, roles, tasks, users

router = APIRouter()

router.include_router(organizations.router, prefix="/organizations", tags=["Organizations"])
router.include_router(roles.router, prefix="/roles", tags=["Roles"])
router.include_router(committees.router, prefix="/committees", tags=["Committees"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(users.router, prefix="/users", tags=["Users"])


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "orgboard",
        "version": "0.1.0",
        "endpoints": [
            "/auth",
            "/organizations",
            "/roles",
            "/committees",
            "/tasks",
            "/users",
        ],
    }
