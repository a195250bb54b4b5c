"""
Organization API endpoints.

GET    /api/organizations        — List orgs the caller administers or holds a role in
POST   /api/organizations        — Create an org; the caller becomes its admin
GET    /api/organizations/me     — The caller's org
GET    /api/organizations/{id}   — Org details (members only)
PUT    /api/organizations/{id}   — Update name/description/logo (admin only)
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.core.auth import AuthenticatedUser, get_authenticated_user
from orgboard.core.database import get_session
from orgboard.services import organizations as org_service
from orgboard_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgDetailResponse,
    OrgListResponse,
    OrgResponse,
    OrgUpdateRequest,
)

log = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=OrgListResponse)
async def list_orgs(
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """List orgs the authenticated user belongs to."""
    items = await org_service.list_user_orgs(auth.user_id, session)
    return OrgListResponse(data=items)


@router.post("", response_model=OrgResponse, status_code=201)
async def create_org(
    body: OrgCreateRequest,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Create a new organization. The creator becomes its admin."""
    org = await org_service.create_org(body, auth.user_id, session)
    await session.commit()
    await session.refresh(org)
    return org_service.to_response(org)


@router.get("/me", response_model=OrgDetailResponse)
async def get_my_org(
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """The org the caller administers, else the org of their first role."""
    org, is_admin = await org_service.get_my_org(auth.user_id, session)
    return await org_service.to_detail(org, session, is_admin=is_admin)


@router.get("/{org_id}", response_model=OrgDetailResponse)
async def get_org(
    org_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    org, is_admin = await org_service.get_org_for_member(org_id, auth.user_id, session)
    return await org_service.to_detail(org, session, is_admin=is_admin)


@router.put("/{org_id}", response_model=OrgResponse)
async def update_org(
    org_id: uuid.UUID,
    body: OrgUpdateRequest,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Update org details (admin of this org only)."""
    org = await org_service.update_org(org_id, body, auth.user_id, session)
    await session.commit()
    await session.refresh(org)
    return org_service.to_response(org)
