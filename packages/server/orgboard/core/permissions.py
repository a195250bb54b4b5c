"""
Committee permission resolution.

Every protected operation asks two questions:

- is the caller the admin of the organization that owns the committee?
- otherwise, what is the highest level granted on the committee by any of
  the caller's roles?

The admin is always LEADER on every committee of their organization. For
everybody else the effective level is the maximum over the permission rows
of their roles for that committee; no row means NONE. Nothing is cached,
so role and grant changes apply on the next request.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Optional

import structlog
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from orgboard.core.auth import AuthenticatedUser, get_authenticated_user
from orgboard.core.database import get_session
from orgboard.core.errors import AuthorizationError, BadRequestError
from orgboard.models.committee import Committee, RoleCommitteePermission
from orgboard.models.organization import Organization
from orgboard.models.role import Role, UserRole
from orgboard_shared.schemas.common import AccessRequirement, PermissionLevel

log = structlog.get_logger()

_REQUIRED_LEVEL = {
    AccessRequirement.NONE: PermissionLevel.NONE,
    AccessRequirement.MEMBER: PermissionLevel.MEMBER,
    AccessRequirement.LEADER: PermissionLevel.LEADER,
}

_DENIAL_MESSAGES = {
    AccessRequirement.MEMBER: "Insufficient permissions. Member access required.",
    AccessRequirement.LEADER: "Insufficient permissions. Leader access required.",
    AccessRequirement.ADMIN: "Admin access required",
}


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    level: PermissionLevel
    is_admin: bool = False


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def get_admin_organization(
    session: AsyncSession, user_id: uuid.UUID
) -> Optional[Organization]:
    """The organization this user administers, if any."""
    result = await session.execute(
        select(Organization).where(Organization.admin_user_id == user_id)
    )
    return result.scalars().first()


async def is_org_admin(
    session: AsyncSession,
    user_id: uuid.UUID,
    organization_id: Optional[uuid.UUID] = None,
) -> bool:
    """Whether the user is the admin of ``organization_id`` (or of any org when None)."""
    if organization_id is None:
        return await get_admin_organization(session, user_id) is not None
    org = await session.get(Organization, organization_id)
    return org is not None and org.admin_user_id == user_id


async def _committee_org_id(
    session: AsyncSession, committee_id: uuid.UUID
) -> Optional[uuid.UUID]:
    result = await session.execute(
        select(Committee.organization_id).where(Committee.id == committee_id)
    )
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def highest_level(levels) -> PermissionLevel:
    """Max over a collection of levels; LEADER is the ceiling so the scan stops there."""
    best = PermissionLevel.NONE
    for raw in levels:
        try:
            level = PermissionLevel(raw)
        except ValueError:
            continue
        if level > best:
            best = level
        if best == PermissionLevel.LEADER:
            break
    return best


async def role_levels(
    session: AsyncSession,
    user_id: uuid.UUID,
    committee_ids: Optional[Iterable[uuid.UUID]] = None,
) -> dict[uuid.UUID, PermissionLevel]:
    """Highest level granted by the user's roles, per committee, in one query.

    Committees without a grant are absent. The org-admin override is not applied.
    """
    stmt = (
        select(RoleCommitteePermission.committee_id, RoleCommitteePermission.permission_level)
        .join(UserRole, UserRole.role_id == RoleCommitteePermission.role_id)
        .where(UserRole.user_id == user_id)
    )
    if committee_ids is not None:
        stmt = stmt.where(RoleCommitteePermission.committee_id.in_(list(committee_ids)))
    result = await session.execute(stmt)

    grouped: dict[uuid.UUID, list[str]] = defaultdict(list)
    for committee_id, level in result.all():
        grouped[committee_id].append(level)
    return {cid: highest_level(levels) for cid, levels in grouped.items()}


async def _resolve(
    session: AsyncSession, user_id: uuid.UUID, committee_id: uuid.UUID
) -> Optional[AccessDecision]:
    """Resolved level and admin flag on a committee, None when it does not exist."""
    org_id = await _committee_org_id(session, committee_id)
    if org_id is None:
        return None
    if await is_org_admin(session, user_id, org_id):
        return AccessDecision(allowed=True, level=PermissionLevel.LEADER, is_admin=True)
    levels = await role_levels(session, user_id, [committee_id])
    return AccessDecision(allowed=True, level=levels.get(committee_id, PermissionLevel.NONE))


async def resolve_permission(
    session: AsyncSession, user_id: uuid.UUID, committee_id: uuid.UUID
) -> PermissionLevel:
    """Effective level of a user on a committee. Unknown ids resolve to NONE."""
    resolved = await _resolve(session, user_id, committee_id)
    return resolved.level if resolved is not None else PermissionLevel.NONE


async def check_access(
    session: AsyncSession,
    user_id: uuid.UUID,
    committee_id: Optional[uuid.UUID],
    required: AccessRequirement,
) -> AccessDecision:
    """Allow/deny a requirement on a committee and report the resolved level."""
    if committee_id is None:
        if required == AccessRequirement.ADMIN:
            admin = await is_org_admin(session, user_id)
            return AccessDecision(
                allowed=admin,
                level=PermissionLevel.LEADER if admin else PermissionLevel.NONE,
                is_admin=admin,
            )
        if required == AccessRequirement.NONE:
            return AccessDecision(allowed=True, level=PermissionLevel.NONE)
        raise BadRequestError("Committee ID required")

    resolved = await _resolve(session, user_id, committee_id)
    if resolved is None:
        return AccessDecision(allowed=required == AccessRequirement.NONE, level=PermissionLevel.NONE)
    if resolved.is_admin:
        return resolved
    if required == AccessRequirement.ADMIN:
        return AccessDecision(allowed=False, level=resolved.level)
    return AccessDecision(
        allowed=resolved.level >= _REQUIRED_LEVEL[required], level=resolved.level
    )


async def require_committee_access(
    session: AsyncSession,
    user_id: uuid.UUID,
    committee_id: Optional[uuid.UUID],
    required: AccessRequirement,
) -> AccessDecision:
    """Like check_access but raises AuthorizationError on denial."""
    decision = await check_access(session, user_id, committee_id, required)
    if not decision.allowed:
        log.info(
            "permission.denied",
            user_id=str(user_id),
            committee_id=str(committee_id),
            required=required.value,
            resolved=decision.level.value,
        )
        raise AuthorizationError(_DENIAL_MESSAGES.get(required, "Access denied"))
    return decision


# ---------------------------------------------------------------------------
# Organization scoping
# ---------------------------------------------------------------------------


async def get_user_organization(
    session: AsyncSession, user_id: uuid.UUID
) -> tuple[Optional[Organization], bool]:
    """The caller's organization and whether they administer it.

    Admin organization first, else the organization of the user's first role.
    """
    org = await get_admin_organization(session, user_id)
    if org is not None:
        return org, True

    result = await session.execute(
        select(Organization)
        .join(Role, Role.organization_id == Organization.id)
        .join(UserRole, UserRole.role_id == Role.id)
        .where(UserRole.user_id == user_id)
        .order_by(UserRole.created_at)
    )
    return result.scalars().first(), False


class OrgAdmin:
    """Caller verified as an organization admin, with the org they administer."""

    def __init__(self, auth: AuthenticatedUser, org: Organization):
        self.auth = auth
        self.user = auth.user
        self.user_id = auth.user_id
        self.org = org
        self.org_id = org.id


async def require_org_admin(
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
) -> OrgAdmin:
    """Requires the caller to administer an organization. LEADER is not enough."""
    org = await get_admin_organization(session, auth.user_id)
    if org is None:
        raise AuthorizationError("Admin access required")
    return OrgAdmin(auth=auth, org=org)
