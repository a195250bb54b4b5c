"""Task, assignment and comment models."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, TimestampMixin, UUIDMixin


class Task(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "tasks"

    committee_id: uuid.UUID = Field(
        foreign_key="committees.id", ondelete="CASCADE", nullable=False, index=True
    )
    title: str = Field(nullable=False)
    description: Optional[str] = None
    status: str = Field(nullable=False, default="TODO")  # TODO | IN_PROGRESS | DONE
    # Ordering within a status column; not renumbered on moves.
    position: int = Field(nullable=False, default=0)
    due_date: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    created_by_id: uuid.UUID = Field(
        foreign_key="users.id", ondelete="RESTRICT", nullable=False
    )


class TaskAssignment(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "task_assignments"
    __table_args__ = (
        UniqueConstraint("task_id", "user_id", name="task_assignments_task_id_user_id_key"),
    )

    task_id: uuid.UUID = Field(
        foreign_key="tasks.id", ondelete="CASCADE", nullable=False, index=True
    )
    user_id: uuid.UUID = Field(
        foreign_key="users.id", ondelete="CASCADE", nullable=False, index=True
    )


class Comment(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    """Immutable once written."""

    __tablename__ = "comments"

    task_id: uuid.UUID = Field(
        foreign_key="tasks.id", ondelete="CASCADE", nullable=False, index=True
    )
    user_id: uuid.UUID = Field(
        foreign_key="users.id", ondelete="CASCADE", nullable=False, index=True
    )
    content: str = Field(nullable=False)
