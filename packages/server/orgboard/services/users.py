"""
User service — profiles, the admin's user listing, and account activation.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from orgboard.core.errors import AuthorizationError, BadRequestError, NotFoundError
from orgboard.core.permissions import get_admin_organization
from orgboard.models.organization import Organization
from orgboard.models.role import Role, UserRole
from orgboard.models.user import User
from orgboard.services.roles import get_permission_reads
from orgboard_shared.schemas.roles import RoleSummary
from orgboard_shared.schemas.users import (
    OrgUserResponse,
    UserProfileResponse,
    UserResponse,
    UserRoleDetail,
    UserUpdateRequest,
)

log = structlog.get_logger()


def to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        is_active=user.is_active,
        created_at=user.created_at,
    )


async def get_user_or_404(session: AsyncSession, user_id: uuid.UUID) -> User:
    user = await session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def is_org_user(
    session: AsyncSession, org: Organization, user_id: uuid.UUID
) -> bool:
    """Whether the user is the org's admin or holds one of its roles."""
    if org.admin_user_id == user_id:
        return True
    result = await session.execute(
        select(UserRole.id)
        .join(Role, Role.id == UserRole.role_id)
        .where(UserRole.user_id == user_id, Role.organization_id == org.id)
        .limit(1)
    )
    return result.first() is not None


async def _managing_org(
    session: AsyncSession, caller_id: uuid.UUID, target_id: uuid.UUID
) -> Optional[Organization]:
    """The caller's admin org when the target belongs to it, else None."""
    org = await get_admin_organization(session, caller_id)
    if org is not None and await is_org_user(session, org, target_id):
        return org
    return None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_profile(session: AsyncSession, user: User) -> UserProfileResponse:
    """The caller's profile with every role and that role's grants."""
    result = await session.execute(
        select(Role)
        .join(UserRole, UserRole.role_id == Role.id)
        .where(UserRole.user_id == user.id)
        .order_by(UserRole.created_at)
    )
    roles = [
        UserRoleDetail(
            id=role.id,
            name=role.name,
            description=role.description,
            permissions=await get_permission_reads(session, role.id),
        )
        for role in result.scalars().all()
    ]
    admin_org = await get_admin_organization(session, user.id)
    return UserProfileResponse(
        **to_response(user).model_dump(),
        roles=roles,
        admin_organization_id=admin_org.id if admin_org else None,
    )


async def list_org_users(
    session: AsyncSession, org: Organization
) -> list[OrgUserResponse]:
    """Role holders of the org, grouped per user, plus the admin."""
    result = await session.execute(
        select(User, Role)
        .join(UserRole, UserRole.user_id == User.id)
        .join(Role, Role.id == UserRole.role_id)
        .where(Role.organization_id == org.id)
        .order_by(User.name, Role.name)
    )

    users: dict[uuid.UUID, User] = {}
    roles: dict[uuid.UUID, list[RoleSummary]] = defaultdict(list)
    for user, role in result.all():
        users.setdefault(user.id, user)
        roles[user.id].append(RoleSummary.model_validate(role))

    if org.admin_user_id not in users:
        admin = await session.get(User, org.admin_user_id)
        if admin:
            users[admin.id] = admin

    return [
        OrgUserResponse(
            **to_response(user).model_dump(),
            roles=roles.get(user.id, []),
            is_admin=user.id == org.admin_user_id,
        )
        for user in users.values()
    ]


async def get_user(
    session: AsyncSession, caller_id: uuid.UUID, user_id: uuid.UUID
) -> User:
    """Self, or a user of the caller's admin org."""
    user = await get_user_or_404(session, user_id)
    if user.id != caller_id and await _managing_org(session, caller_id, user.id) is None:
        raise AuthorizationError("Access denied")
    return user


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def update_user(
    session: AsyncSession,
    caller_id: uuid.UUID,
    user_id: uuid.UUID,
    body: UserUpdateRequest,
) -> User:
    user = await get_user_or_404(session, user_id)
    if user.id != caller_id and await _managing_org(session, caller_id, user.id) is None:
        raise AuthorizationError("You can only update your own profile")

    data = body.model_dump(exclude_unset=True)
    if data.get("name") is not None:
        user.name = data["name"]

    session.add(user)
    await session.flush()
    log.info("user.updated", user_id=str(user.id), by=str(caller_id))
    return user


async def set_active(
    session: AsyncSession,
    org: Organization,
    user_id: uuid.UUID,
    active: bool,
) -> User:
    """Activate or deactivate a user of the admin's org. Takes effect on the next request."""
    user = await get_user_or_404(session, user_id)
    if not await is_org_user(session, org, user.id):
        raise NotFoundError("User not found")
    if not active and user.id == org.admin_user_id:
        raise BadRequestError("You cannot deactivate your own account")

    user.is_active = active
    session.add(user)
    await session.flush()
    log.info(
        "user.activated" if active else "user.deactivated",
        user_id=str(user.id),
        org_id=str(org.id),
    )
    return user
