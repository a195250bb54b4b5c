"""
Committee service — CRUD plus the caller-specific committee views.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Optional

import structlog
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from orgboard.core.errors import ConflictError, NotFoundError
from orgboard.core.permissions import role_levels
from orgboard.models.committee import Committee
from orgboard.models.task import Task
from orgboard_shared.schemas.common import PermissionLevel, TaskStatus
from orgboard_shared.schemas.committees import (
    CommitteeCreateRequest,
    CommitteeListItem,
    CommitteeRead,
    CommitteeUpdateRequest,
)

log = structlog.get_logger()


def to_read(committee: Committee) -> CommitteeRead:
    return CommitteeRead(
        id=committee.id,
        organization_id=committee.organization_id,
        name=committee.name,
        description=committee.description,
        created_at=committee.created_at,
        updated_at=committee.updated_at,
    )


async def get_committee_or_404(
    session: AsyncSession,
    committee_id: uuid.UUID,
    org_id: Optional[uuid.UUID] = None,
) -> Committee:
    committee = await session.get(Committee, committee_id)
    if not committee or (org_id is not None and committee.organization_id != org_id):
        raise NotFoundError("Committee not found")
    return committee


async def _ensure_unique_name(
    session: AsyncSession,
    org_id: uuid.UUID,
    name: str,
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    stmt = select(Committee.id).where(
        Committee.organization_id == org_id, Committee.name == name
    )
    if exclude_id is not None:
        stmt = stmt.where(Committee.id != exclude_id)
    result = await session.execute(stmt)
    if result.first() is not None:
        raise ConflictError(f"A committee named '{name}' already exists")


async def _task_counts(
    session: AsyncSession, committee_ids: list[uuid.UUID]
) -> dict[uuid.UUID, dict[str, int]]:
    counts: dict[uuid.UUID, dict[str, int]] = defaultdict(
        lambda: {s.value: 0 for s in TaskStatus}
    )
    if not committee_ids:
        return counts
    result = await session.execute(
        select(Task.committee_id, Task.status, func.count(Task.id))
        .where(Task.committee_id.in_(committee_ids))
        .group_by(Task.committee_id, Task.status)
    )
    for committee_id, status, count in result.all():
        counts[committee_id][status] = count
    return counts


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def list_visible_committees(
    session: AsyncSession,
    org_id: uuid.UUID,
    user_id: uuid.UUID,
    is_admin: bool,
) -> list[CommitteeListItem]:
    """Admin sees every committee as LEADER; others only where they resolve to MEMBER+."""
    result = await session.execute(
        select(Committee)
        .where(Committee.organization_id == org_id)
        .order_by(Committee.name)
    )
    committees = list(result.scalars().all())
    levels = {} if is_admin else await role_levels(session, user_id)
    counts = await _task_counts(session, [c.id for c in committees])

    items = []
    for committee in committees:
        level = PermissionLevel.LEADER if is_admin else levels.get(committee.id, PermissionLevel.NONE)
        if level == PermissionLevel.NONE:
            continue
        items.append(
            CommitteeListItem(
                **to_read(committee).model_dump(),
                user_permission=level,
                task_counts=counts[committee.id],
            )
        )
    return items


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_committee(
    session: AsyncSession, body: CommitteeCreateRequest, org_id: uuid.UUID
) -> Committee:
    await _ensure_unique_name(session, org_id, body.name)
    committee = Committee(
        name=body.name,
        description=body.description,
        organization_id=org_id,
    )
    session.add(committee)
    await session.flush()
    log.info("committee.created", committee_id=str(committee.id), org_id=str(org_id))
    return committee


async def update_committee(
    session: AsyncSession, committee: Committee, body: CommitteeUpdateRequest
) -> Committee:
    data = body.model_dump(exclude_unset=True)
    if data.get("name") is None:
        data.pop("name", None)
    if "name" in data and data["name"] != committee.name:
        await _ensure_unique_name(
            session, committee.organization_id, data["name"], committee.id
        )

    for key, value in data.items():
        setattr(committee, key, value)

    session.add(committee)
    await session.flush()
    log.info("committee.updated", committee_id=str(committee.id))
    return committee


async def delete_committee(session: AsyncSession, committee: Committee) -> None:
    """Delete a committee; its tasks (with their assignments and comments) and grants cascade."""
    await session.delete(committee)
    await session.flush()
    log.info("committee.deleted", committee_id=str(committee.id))
