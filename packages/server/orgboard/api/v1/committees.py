"""
Committee endpoints.

Listing and detail are filtered through the permission resolver; create,
update and delete are reserved to the organization admin.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.core.auth import AuthenticatedUser, get_authenticated_user
from orgboard.core.database import get_session
from orgboard.core.errors import NotFoundError
from orgboard.core.permissions import (
    OrgAdmin,
    get_user_organization,
    require_committee_access,
    require_org_admin,
)
from orgboard.services.committees import (
    create_committee,
    delete_committee,
    get_committee_or_404,
    list_visible_committees,
    to_read,
    update_committee,
)
from orgboard.services.tasks import enrich_tasks, list_committee_tasks
from orgboard_shared.schemas.common import AccessRequirement, MessageResponse
from orgboard_shared.schemas.committees import (
    CommitteeCreateRequest,
    CommitteeDetail,
    CommitteeListResponse,
    CommitteeRead,
    CommitteeUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=CommitteeListResponse)
async def list_committees_endpoint(
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Committees the caller can see, with their level and task counts."""
    org, is_admin = await get_user_organization(session, auth.user_id)
    if org is None:
        raise NotFoundError("No organization found")
    items = await list_visible_committees(session, org.id, auth.user_id, is_admin)
    return CommitteeListResponse(data=items)


@router.get("/{committee_id}", response_model=CommitteeDetail)
async def get_committee_endpoint(
    committee_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Committee with the caller's level and its board."""
    committee = await get_committee_or_404(session, committee_id)
    decision = await require_committee_access(
        session, auth.user_id, committee.id, AccessRequirement.MEMBER
    )
    tasks = await list_committee_tasks(session, committee.id)
    return CommitteeDetail(
        **to_read(committee).model_dump(),
        user_permission=decision.level,
        tasks=await enrich_tasks(session, tasks, with_comments=False),
    )


@router.post("", response_model=CommitteeRead, status_code=201)
async def create_committee_endpoint(
    body: CommitteeCreateRequest,
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    committee = await create_committee(session, body, admin.org_id)
    await session.commit()
    await session.refresh(committee)
    return to_read(committee)


@router.put("/{committee_id}", response_model=CommitteeRead)
async def update_committee_endpoint(
    committee_id: uuid.UUID,
    body: CommitteeUpdateRequest,
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    committee = await get_committee_or_404(session, committee_id, admin.org_id)
    committee = await update_committee(session, committee, body)
    await session.commit()
    await session.refresh(committee)
    return to_read(committee)


@router.delete("/{committee_id}", response_model=MessageResponse)
async def delete_committee_endpoint(
    committee_id: uuid.UUID,
    admin: OrgAdmin = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    """Delete a committee together with its tasks and grants."""
    committee = await get_committee_or_404(session, committee_id, admin.org_id)
    await delete_committee(session, committee)
    await session.commit()
    return MessageResponse(message="Committee deleted successfully")
