"""
Role service layer: roles, role assignments and per-committee permission grants.

Handles:
- Role CRUD scoped to the admin's organization
- Assigning roles to users and removing them
- Replacing a role's permission set (NONE is stored as "no row")
- Enrichment of role data for API responses
"""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from orgboard.core.errors import BadRequestError, ConflictError, NotFoundError
from orgboard.models.committee import Committee, RoleCommitteePermission
from orgboard.models.role import Role, UserRole
from orgboard.models.user import User
from orgboard_shared.schemas.common import (
    GRANTABLE_LEVELS,
    CommitteeSummary,
    PermissionLevel,
    UserSummary,
)
from orgboard_shared.schemas.roles import (
    PermissionGrant,
    PermissionRead,
    RoleAssignmentRead,
    RoleAssignRequest,
    RoleCreateRequest,
    RoleRead,
    RoleSummary,
    RoleUpdateRequest,
    SetPermissionsRequest,
)

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_role_or_404(
    session: AsyncSession, role_id: uuid.UUID, org_id: uuid.UUID
) -> Role:
    role = await session.get(Role, role_id)
    if not role or role.organization_id != org_id:
        raise NotFoundError("Role not found")
    return role


async def _ensure_unique_name(
    session: AsyncSession,
    org_id: uuid.UUID,
    name: str,
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    stmt = select(Role.id).where(Role.organization_id == org_id, Role.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Role.id != exclude_id)
    result = await session.execute(stmt)
    if result.first() is not None:
        raise ConflictError(f"A role named '{name}' already exists")


async def get_permission_reads(
    session: AsyncSession, role_id: uuid.UUID
) -> list[PermissionRead]:
    result = await session.execute(
        select(RoleCommitteePermission, Committee)
        .join(Committee, Committee.id == RoleCommitteePermission.committee_id)
        .where(RoleCommitteePermission.role_id == role_id)
        .order_by(Committee.name)
    )
    return [
        PermissionRead(
            id=perm.id,
            role_id=perm.role_id,
            committee_id=perm.committee_id,
            permission_level=PermissionLevel(perm.permission_level),
            committee=CommitteeSummary.model_validate(committee),
        )
        for perm, committee in result.all()
    ]


async def _get_members(session: AsyncSession, role_id: uuid.UUID) -> list[UserSummary]:
    result = await session.execute(
        select(User)
        .join(UserRole, UserRole.user_id == User.id)
        .where(UserRole.role_id == role_id)
        .order_by(User.name)
    )
    return [UserSummary.model_validate(u) for u in result.scalars().all()]


async def enrich_role(session: AsyncSession, role: Role) -> RoleRead:
    """Convert a Role ORM object to a RoleRead with grants and holders."""
    return RoleRead(
        id=role.id,
        name=role.name,
        description=role.description,
        organization_id=role.organization_id,
        permissions=await get_permission_reads(session, role.id),
        members=await _get_members(session, role.id),
        created_at=role.created_at,
        updated_at=role.updated_at,
    )


async def enrich_roles(session: AsyncSession, roles: Sequence[Role]) -> list[RoleRead]:
    return [await enrich_role(session, r) for r in roles]


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def list_roles(session: AsyncSession, org_id: uuid.UUID) -> list[Role]:
    result = await session.execute(
        select(Role).where(Role.organization_id == org_id).order_by(Role.name)
    )
    return list(result.scalars().all())


async def create_role(
    session: AsyncSession, role_in: RoleCreateRequest, org_id: uuid.UUID
) -> Role:
    await _ensure_unique_name(session, org_id, role_in.name)
    role = Role(
        name=role_in.name,
        description=role_in.description,
        organization_id=org_id,
    )
    session.add(role)
    await session.flush()
    log.info("role.created", role_id=str(role.id), org_id=str(org_id), name=role.name)
    return role


async def update_role(
    session: AsyncSession,
    role: Role,
    role_in: RoleUpdateRequest,
) -> Role:
    data = role_in.model_dump(exclude_unset=True)
    if data.get("name") is None:
        data.pop("name", None)
    if "name" in data and data["name"] != role.name:
        await _ensure_unique_name(session, role.organization_id, data["name"], role.id)

    for key, value in data.items():
        setattr(role, key, value)

    session.add(role)
    await session.flush()
    log.info("role.updated", role_id=str(role.id))
    return role


async def delete_role(session: AsyncSession, role: Role) -> None:
    """Delete a role; its grants and user assignments cascade."""
    await session.delete(role)
    await session.flush()
    log.info("role.deleted", role_id=str(role.id))


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------


async def assign_role(
    session: AsyncSession, body: RoleAssignRequest, org_id: uuid.UUID
) -> RoleAssignmentRead:
    role = await get_role_or_404(session, body.role_id, org_id)
    user = await session.get(User, body.user_id)
    if not user:
        raise NotFoundError("User not found")

    existing = await session.execute(
        select(UserRole).where(UserRole.user_id == user.id, UserRole.role_id == role.id)
    )
    if existing.scalar_one_or_none():
        raise ConflictError("User already has this role")

    user_role = UserRole(user_id=user.id, role_id=role.id)
    session.add(user_role)
    await session.flush()

    log.info("role.assigned", role_id=str(role.id), user_id=str(user.id))
    return RoleAssignmentRead(
        id=user_role.id,
        user=UserSummary.model_validate(user),
        role=RoleSummary.model_validate(role),
        created_at=user_role.created_at,
    )


async def remove_role(
    session: AsyncSession,
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    org_id: uuid.UUID,
) -> None:
    """Remove a role from a user. Removing an absent assignment is a no-op."""
    role = await get_role_or_404(session, role_id, org_id)
    await session.execute(
        delete(UserRole).where(UserRole.user_id == user_id, UserRole.role_id == role.id)
    )
    await session.flush()
    log.info("role.unassigned", role_id=str(role_id), user_id=str(user_id))


# ---------------------------------------------------------------------------
# Permissions
# ---------------------------------------------------------------------------


def normalize_grants(grants: Sequence[PermissionGrant]) -> dict[uuid.UUID, PermissionLevel]:
    """One level per committee (last entry wins), NONE entries dropped."""
    levels: dict[uuid.UUID, PermissionLevel] = {}
    for grant in grants:
        levels[grant.committee_id] = grant.permission_level
    return {cid: level for cid, level in levels.items() if level in GRANTABLE_LEVELS}


async def set_permissions(
    session: AsyncSession, body: SetPermissionsRequest, org_id: uuid.UUID
) -> Role:
    """Replace a role's whole permission set."""
    role = await get_role_or_404(session, body.role_id, org_id)
    levels = normalize_grants(body.permissions)

    # Every granted committee must live in the role's organization.
    if levels:
        result = await session.execute(
            select(Committee.id, Committee.organization_id).where(
                Committee.id.in_(list(levels))
            )
        )
        owners = {cid: oid for cid, oid in result.all()}
        for committee_id in levels:
            if committee_id not in owners:
                raise NotFoundError(f"Committee {committee_id} not found")
            if owners[committee_id] != role.organization_id:
                raise BadRequestError(
                    "Permissions can only reference committees of the role's organization"
                )

    await session.execute(
        delete(RoleCommitteePermission).where(RoleCommitteePermission.role_id == role.id)
    )
    await session.flush()

    for committee_id, level in levels.items():
        session.add(
            RoleCommitteePermission(
                role_id=role.id,
                committee_id=committee_id,
                permission_level=level.value,
            )
        )
    await session.flush()

    log.info(
        "role.permissions_set",
        role_id=str(role.id),
        grants={str(cid): lvl.value for cid, lvl in levels.items()},
    )
    return role
