"""
Organization service — business logic for org creation, lookup and updates.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from orgboard.core.errors import AuthorizationError, ConflictError, NotFoundError
from orgboard.core.permissions import get_admin_organization, get_user_organization
from orgboard.models.organization import Organization
from orgboard.models.role import Role, UserRole
from orgboard.models.user import User
from orgboard_shared.schemas.common import UserSummary
from orgboard_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgDetailResponse,
    OrgResponse,
    OrgUpdateRequest,
)

log = structlog.get_logger()


def to_response(org: Organization) -> OrgResponse:
    return OrgResponse.model_validate(org)


async def to_detail(
    org: Organization, session: AsyncSession, *, is_admin: bool
) -> OrgDetailResponse:
    admin = await session.get(User, org.admin_user_id)
    return OrgDetailResponse(
        **OrgResponse.model_validate(org).model_dump(),
        admin_user=UserSummary.model_validate(admin) if admin else None,
        is_admin=is_admin,
    )


async def list_user_orgs(
    user_id: uuid.UUID, session: AsyncSession
) -> list[dict]:
    """Orgs the user administers or holds a role in."""
    items: dict[uuid.UUID, dict] = {}

    admin_org = await get_admin_organization(session, user_id)
    if admin_org:
        items[admin_org.id] = {
            "id": admin_org.id,
            "name": admin_org.name,
            "description": admin_org.description,
            "is_admin": True,
        }

    result = await session.execute(
        select(Organization)
        .join(Role, Role.organization_id == Organization.id)
        .join(UserRole, UserRole.role_id == Role.id)
        .where(UserRole.user_id == user_id)
        .distinct()
    )
    for org in result.scalars().all():
        items.setdefault(
            org.id,
            {
                "id": org.id,
                "name": org.name,
                "description": org.description,
                "is_admin": False,
            },
        )
    return list(items.values())


async def create_org(
    req: OrgCreateRequest,
    creator_id: uuid.UUID,
    session: AsyncSession,
) -> Organization:
    """Create an org with the creator as its admin. One org per admin."""
    if await get_admin_organization(session, creator_id):
        raise ConflictError("Organization already exists for this user")

    org = Organization(
        name=req.name,
        description=req.description,
        logo_url=str(req.logo_url) if req.logo_url else None,
        admin_user_id=creator_id,
    )
    session.add(org)
    await session.flush()

    log.info("org.created", org_id=str(org.id), admin=str(creator_id))
    return org


async def get_my_org(
    user_id: uuid.UUID, session: AsyncSession
) -> tuple[Organization, bool]:
    org, is_admin = await get_user_organization(session, user_id)
    if org is None:
        raise NotFoundError("No organization found")
    return org, is_admin


async def get_org_for_member(
    org_id: uuid.UUID, user_id: uuid.UUID, session: AsyncSession
) -> tuple[Organization, bool]:
    """Get an org the caller belongs to; 404 if unknown, 403 if not a member."""
    org = await session.get(Organization, org_id)
    if not org:
        raise NotFoundError("Organization not found")
    if org.admin_user_id == user_id:
        return org, True

    result = await session.execute(
        select(UserRole.id)
        .join(Role, Role.id == UserRole.role_id)
        .where(UserRole.user_id == user_id, Role.organization_id == org_id)
        .limit(1)
    )
    if result.first() is None:
        raise AuthorizationError("Access denied")
    return org, False


async def update_org(
    org_id: uuid.UUID,
    req: OrgUpdateRequest,
    caller_id: uuid.UUID,
    session: AsyncSession,
) -> Organization:
    """Update name, description or logo (admin of this org only)."""
    org = await session.get(Organization, org_id)
    if not org:
        raise NotFoundError("Organization not found")
    if org.admin_user_id != caller_id:
        raise AuthorizationError("Admin access required")

    data = req.model_dump(exclude_unset=True)
    if data.get("name") is None:
        data.pop("name", None)
    if data.get("logo_url") is not None:
        data["logo_url"] = str(data["logo_url"])
    for key, value in data.items():
        setattr(org, key, value)

    org.updated_at = datetime.now(timezone.utc)
    session.add(org)
    await session.flush()

    log.info("org.updated", org_id=str(org.id))
    return org
