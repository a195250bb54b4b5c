"""
Task endpoints: board listing, CRUD, column moves, comments.

Status columns: TODO → IN_PROGRESS → DONE, any-to-any.
- Reading, moving and commenting need MEMBER on the task's committee.
- Creating, editing and deleting need LEADER.
- Positions are whatever the client sends; nothing is renumbered.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.core.auth import AuthenticatedUser, get_authenticated_user
from orgboard.core.database import get_session
from orgboard.core.permissions import require_committee_access
from orgboard.services.committees import get_committee_or_404
from orgboard.services.tasks import (
    add_comment,
    create_task,
    delete_task,
    enrich_task,
    enrich_tasks,
    get_task_or_404,
    list_committee_tasks,
    move_task,
    update_task,
)
from orgboard_shared.schemas.common import AccessRequirement, MessageResponse, TaskStatus
from orgboard_shared.schemas.tasks import (
    CommentCreate,
    CommentRead,
    TaskCreate,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)

router = APIRouter()


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------


@router.get("/committee/{committee_id}", response_model=List[TaskRead])
async def list_committee_tasks_endpoint(
    committee_id: uuid.UUID,
    status: Optional[TaskStatus] = None,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Tasks of a committee in board order, optionally one column only."""
    committee = await get_committee_or_404(session, committee_id)
    await require_committee_access(
        session, auth.user_id, committee.id, AccessRequirement.MEMBER
    )
    tasks = await list_committee_tasks(session, committee.id, status)
    return await enrich_tasks(session, tasks)


# ---------------------------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------------------------


@router.post("", response_model=TaskRead, status_code=201)
async def create_task_endpoint(
    task_in: TaskCreate,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Create a task at the bottom of the TODO column."""
    committee = await get_committee_or_404(session, task_in.committee_id)
    await require_committee_access(
        session, auth.user_id, committee.id, AccessRequirement.LEADER
    )
    task = await create_task(session, task_in, auth.user_id)
    await session.commit()
    await session.refresh(task)
    return await enrich_task(session, task)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task_endpoint(
    task_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Get a single task with assignees and comments."""
    task = await get_task_or_404(session, task_id)
    await require_committee_access(
        session, auth.user_id, task.committee_id, AccessRequirement.MEMBER
    )
    return await enrich_task(session, task)


@router.put("/{task_id}", response_model=TaskRead)
async def update_task_endpoint(
    task_id: uuid.UUID,
    task_in: TaskUpdate,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Update task fields; ``assignee_ids`` replaces the whole assignee set."""
    task = await get_task_or_404(session, task_id)
    await require_committee_access(
        session, auth.user_id, task.committee_id, AccessRequirement.LEADER
    )
    task = await update_task(session, task, task_in)
    await session.commit()
    await session.refresh(task)
    return await enrich_task(session, task)


@router.patch("/{task_id}/status", response_model=TaskRead)
async def move_task_endpoint(
    task_id: uuid.UUID,
    body: TaskStatusUpdate,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Move a task to another column and/or position."""
    task = await get_task_or_404(session, task_id)
    await require_committee_access(
        session, auth.user_id, task.committee_id, AccessRequirement.MEMBER
    )
    task = await move_task(session, task, body)
    await session.commit()
    await session.refresh(task)
    return await enrich_task(session, task)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task_endpoint(
    task_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    task = await get_task_or_404(session, task_id)
    await require_committee_access(
        session, auth.user_id, task.committee_id, AccessRequirement.LEADER
    )
    await delete_task(session, task)
    await session.commit()
    return MessageResponse(message="Task deleted successfully")


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


@router.post("/{task_id}/comments", response_model=CommentRead, status_code=201)
async def add_comment_endpoint(
    task_id: uuid.UUID,
    body: CommentCreate,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    task = await get_task_or_404(session, task_id)
    await require_committee_access(
        session, auth.user_id, task.committee_id, AccessRequirement.MEMBER
    )
    comment = await add_comment(session, task, body, auth.user)
    await session.commit()
    return comment
