"""
Role endpoints: role CRUD, assignment to users, and per-committee grants.

Everything but the listing requires the organization admin.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.core.auth import AuthenticatedUser, get_authenticated_user
from orgboard.core.database import get_session
from orgboard.core.errors import NotFoundError
from orgboard.core.permissions import OrgAdmin, get_user_organization, require_org_admin
from orgboard.services.roles import (
    assign_role,
    create_role,
    delete_role,
    enrich_role,
    enrich_roles,
    get_role_or_404,
    list_roles,
    remove_role,
    set_permissions,
    update_role,
)
from orgboard_shared.schemas.common import MessageResponse
from orgboard_shared.schemas.roles import (
    RoleAssignmentRead,
    RoleAssignRequest,
    RoleCreateRequest,
    RoleListResponse,
    RoleRead,
    RoleUpdateRequest,
    SetPermissionsRequest,
)

router = APIRouter()


@router.get("", response_model=RoleListResponse)
async def list_roles_endpoint(
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Roles of the caller's organization with grants and holders."""
    org, _is_admin = await get_user_organization(session, auth.user_id)
    if org is None:
        raise NotFoundError("No organization found")
    roles = await list_roles(session, org.id)
    return RoleListResponse(data=await enrich_roles(session, roles))


@router.post("", response_model=RoleRead, status_code=201)
async def create_role_endpoint(
    role_in: RoleCreateRequest,
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    role = await create_role(session, role_in, admin.org_id)
    await session.commit()
    await session.refresh(role)
    return await enrich_role(session, role)


# ---------------------------------------------------------------------------
# Assignments and permissions (declared before /{role_id})
# ---------------------------------------------------------------------------


@router.post("/assign", response_model=RoleAssignmentRead, status_code=201)
async def assign_role_endpoint(
    body: RoleAssignRequest,
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    """Give a user a role of the admin's organization."""
    assignment = await assign_role(session, body, admin.org_id)
    await session.commit()
    return assignment


@router.delete("/assign/{user_id}/{role_id}", response_model=MessageResponse)
async def remove_role_endpoint(
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    """Take a role away from a user. Idempotent."""
    await remove_role(session, user_id, role_id, admin.org_id)
    await session.commit()
    return MessageResponse(message="Role removed successfully")


@router.post("/permissions", response_model=RoleRead)
async def set_permissions_endpoint(
    body: SetPermissionsRequest,
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    """Replace the role's whole permission set. NONE entries mean "no grant"."""
    role = await set_permissions(session, body, admin.org_id)
    await session.commit()
    await session.refresh(role)
    return await enrich_role(session, role)


# ---------------------------------------------------------------------------
# Single role
# ---------------------------------------------------------------------------


@router.put("/{role_id}", response_model=RoleRead)
async def update_role_endpoint(
    role_id: uuid.UUID,
    role_in: RoleUpdateRequest,
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    role = await get_role_or_404(session, role_id, admin.org_id)
    role = await update_role(session, role, role_in)
    await session.commit()
    await session.refresh(role)
    return await enrich_role(session, role)


@router.delete("/{role_id}", response_model=MessageResponse)
async def delete_role_endpoint(
    role_id: uuid.UUID,
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    """Delete a role. Its grants and assignments go with it."""
    role = await get_role_or_404(session, role_id, admin.org_id)
    await delete_role(session, role)
    await session.commit()
    return MessageResponse(message="Role deleted successfully")
