"""
User endpoints.

GET  /api/users/me               — Own profile with roles and grants
GET  /api/users                  — Users of the admin's org (admin only)
GET  /api/users/{id}             — Self, or a user of the admin's org
PUT  /api/users/{id}             — Update name (self or admin)
POST /api/users/{id}/deactivate  — Admin only; effective on the user's next request
POST /api/users/{id}/activate    — Admin only
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.core.auth import AuthenticatedUser, get_authenticated_user
from orgboard.core.database import get_session
from orgboard.core.permissions import OrgAdmin, require_org_admin
from orgboard.services import users as user_service
from orgboard_shared.schemas.users import (
    UserListResponse,
    UserProfileResponse,
    UserResponse,
    UserUpdateRequest,
)

router = APIRouter()


@router.get("/me", response_model=UserProfileResponse)
async def get_me(
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    return await user_service.get_profile(session, auth.user)


@router.get("", response_model=UserListResponse)
async def list_users(
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    """List role holders of the admin's org, plus the admin."""
    items = await user_service.list_org_users(session, admin.org)
    return UserListResponse(data=items)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    user = await user_service.get_user(session, auth.user_id, user_id)
    return user_service.to_response(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdateRequest,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    user = await user_service.update_user(session, auth.user_id, user_id, body)
    await session.commit()
    await session.refresh(user)
    return user_service.to_response(user)


@router.post("/{user_id}/deactivate", response_model=UserResponse)
async def deactivate_user(
    user_id: uuid.UUID,
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    user = await user_service.set_active(session, admin.org, user_id, active=False)
    await session.commit()
    await session.refresh(user)
    return user_service.to_response(user)


@router.post("/{user_id}/activate", response_model=UserResponse)
async def activate_user(
    user_id: uuid.UUID,
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    user = await user_service.set_active(session, admin.org, user_id, active=True)
    await session.commit()
    await session.refresh(user)
    return user_service.to_response(user)
