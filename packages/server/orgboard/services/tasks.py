"""
Task service layer: business logic for the committee task board.

Handles:
- Task CRUD with assignee sets
- Column moves (status + caller-supplied position, no renumbering)
- Comments
- Enrichment of task data for API responses
"""

from __future__ import annotations

import uuid
from typing import List, Optional, Sequence

import structlog
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from orgboard.core.errors import NotFoundError
from orgboard.models.committee import Committee
from orgboard.models.organization import Organization
from orgboard.models.role import Role, UserRole
from orgboard.models.task import Comment, Task, TaskAssignment
from orgboard.models.user import User
from orgboard_shared.schemas.common import TaskStatus, UserSummary
from orgboard_shared.schemas.tasks import (
    CommentCreate,
    CommentRead,
    TaskCreate,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_task_or_404(session: AsyncSession, task_id: uuid.UUID) -> Task:
    task = await session.get(Task, task_id)
    if not task:
        raise NotFoundError("Task not found")
    return task


async def _get_assignees(session: AsyncSession, task_id: uuid.UUID) -> list[UserSummary]:
    result = await session.execute(
        select(User)
        .join(TaskAssignment, TaskAssignment.user_id == User.id)
        .where(TaskAssignment.task_id == task_id)
        .order_by(TaskAssignment.created_at)
    )
    return [UserSummary.model_validate(u) for u in result.scalars().all()]


async def _get_comments(session: AsyncSession, task_id: uuid.UUID) -> list[CommentRead]:
    result = await session.execute(
        select(Comment, User)
        .join(User, User.id == Comment.user_id)
        .where(Comment.task_id == task_id)
        .order_by(Comment.created_at.desc())
    )
    return [_comment_read(c, u) for c, u in result.all()]


def _comment_read(comment: Comment, author: User) -> CommentRead:
    return CommentRead(
        id=comment.id,
        task_id=comment.task_id,
        content=comment.content,
        user=UserSummary.model_validate(author),
        created_at=comment.created_at,
    )


async def _ensure_assignable(
    session: AsyncSession, committee_id: uuid.UUID, user_ids: Sequence[uuid.UUID]
) -> None:
    """Assignees must belong to the committee's organization: its admin or a role holder."""
    if not user_ids:
        return
    org = (
        await session.execute(
            select(Organization)
            .join(Committee, Committee.organization_id == Organization.id)
            .where(Committee.id == committee_id)
        )
    ).scalars().first()
    found: set[uuid.UUID] = set()
    if org is not None:
        result = await session.execute(
            select(UserRole.user_id)
            .join(Role, Role.id == UserRole.role_id)
            .where(Role.organization_id == org.id, UserRole.user_id.in_(list(user_ids)))
        )
        found.update(result.scalars().all())
        found.add(org.admin_user_id)
    missing = [str(uid) for uid in user_ids if uid not in found]
    if missing:
        raise NotFoundError(f"Assignee not found: {', '.join(missing)}")


def _dedupe(ids: Sequence[uuid.UUID]) -> list[uuid.UUID]:
    return list(dict.fromkeys(ids))


async def enrich_task(
    session: AsyncSession, task: Task, *, with_comments: bool = True
) -> TaskRead:
    """Convert a Task ORM object to a TaskRead with creator, assignees and comments."""
    creator = await session.get(User, task.created_by_id)
    return TaskRead(
        id=task.id,
        committee_id=task.committee_id,
        title=task.title,
        description=task.description,
        status=TaskStatus(task.status),
        position=task.position,
        due_date=task.due_date,
        created_by=UserSummary.model_validate(creator) if creator else None,
        assignees=await _get_assignees(session, task.id),
        comments=await _get_comments(session, task.id) if with_comments else [],
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


async def enrich_tasks(
    session: AsyncSession, tasks: Sequence[Task], *, with_comments: bool = True
) -> list[TaskRead]:
    """Enrich a list of tasks. TODO: batch the assignee and comment queries."""
    return [await enrich_task(session, t, with_comments=with_comments) for t in tasks]


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def list_committee_tasks(
    session: AsyncSession,
    committee_id: uuid.UUID,
    status: Optional[TaskStatus] = None,
) -> List[Task]:
    """Board order: status column, then position, ties broken by age then id."""
    stmt = select(Task).where(Task.committee_id == committee_id)
    if status:
        stmt = stmt.where(Task.status == status.value)
    stmt = stmt.order_by(Task.status, Task.position, Task.created_at, Task.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def next_position(
    session: AsyncSession, committee_id: uuid.UUID, status: TaskStatus
) -> int:
    """One past the highest position in the column, 0 for an empty column."""
    result = await session.execute(
        select(func.max(Task.position)).where(
            Task.committee_id == committee_id, Task.status == status.value
        )
    )
    highest = result.scalar_one_or_none()
    return 0 if highest is None else highest + 1


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_task(
    session: AsyncSession,
    task_in: TaskCreate,
    creator_id: uuid.UUID,
) -> Task:
    assignee_ids = _dedupe(task_in.assignee_ids)
    await _ensure_assignable(session, task_in.committee_id, assignee_ids)

    task = Task(
        committee_id=task_in.committee_id,
        title=task_in.title,
        description=task_in.description,
        status=TaskStatus.TODO.value,
        position=await next_position(session, task_in.committee_id, TaskStatus.TODO),
        due_date=task_in.due_date,
        created_by_id=creator_id,
    )
    session.add(task)
    await session.flush()

    for uid in assignee_ids:
        session.add(TaskAssignment(task_id=task.id, user_id=uid))

    await session.flush()
    log.info(
        "task.created",
        task_id=str(task.id),
        committee_id=str(task.committee_id),
        position=task.position,
    )
    return task


async def update_task(
    session: AsyncSession,
    task: Task,
    task_in: TaskUpdate,
) -> Task:
    """Update fields and, when given, replace the assignee set in the same transaction."""
    data = task_in.model_dump(exclude_unset=True)

    if "assignee_ids" in data:
        assignee_ids = data.pop("assignee_ids")
        if assignee_ids is not None:
            assignee_ids = _dedupe(assignee_ids)
            await _ensure_assignable(session, task.committee_id, assignee_ids)
            await session.execute(
                delete(TaskAssignment).where(TaskAssignment.task_id == task.id)
            )
            for uid in assignee_ids:
                session.add(TaskAssignment(task_id=task.id, user_id=uid))

    # Non-nullable columns ignore explicit nulls.
    for key in ("title", "status", "position"):
        if key in data and data[key] is None:
            data.pop(key)

    if "status" in data:
        data["status"] = TaskStatus(data["status"]).value

    for key, value in data.items():
        if hasattr(task, key):
            setattr(task, key, value)

    session.add(task)
    await session.flush()
    log.info("task.updated", task_id=str(task.id), fields=sorted(data))
    return task


async def move_task(
    session: AsyncSession,
    task: Task,
    body: TaskStatusUpdate,
) -> Task:
    """Move a task to a column. Any status may follow any other; position is kept if omitted."""
    old_status = task.status
    task.status = body.status.value
    if body.position is not None:
        task.position = body.position

    session.add(task)
    await session.flush()
    log.info(
        "task.status_changed",
        task_id=str(task.id),
        from_status=old_status,
        to_status=task.status,
        position=task.position,
    )
    return task


async def delete_task(session: AsyncSession, task: Task) -> None:
    """Delete a task; assignments and comments cascade."""
    await session.delete(task)
    await session.flush()
    log.info("task.deleted", task_id=str(task.id))


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


async def add_comment(
    session: AsyncSession,
    task: Task,
    body: CommentCreate,
    author: User,
) -> CommentRead:
    comment = Comment(task_id=task.id, user_id=author.id, content=body.content)
    session.add(comment)
    await session.flush()
    log.info("task.comment_added", task_id=str(task.id), comment_id=str(comment.id))
    return _comment_read(comment, author)
