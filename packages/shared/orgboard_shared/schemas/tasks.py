"""Task-related Pydantic schemas for shared use across server and frontend codegen."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic import UUID4

from .common import TaskStatus, UserSummary


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

class CommentCreate(BaseModel):
    content: str = Field(min_length=1)


class CommentRead(BaseModel):
    id: UUID4
    task_id: UUID4
    content: str
    user: UserSummary
    created_at: datetime


# ---------------------------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------------------------

class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    committee_id: UUID4
    due_date: Optional[datetime] = None
    assignee_ids: List[UUID4] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    position: Optional[int] = None
    assignee_ids: Optional[List[UUID4]] = None


class TaskRead(BaseModel):
    id: UUID4
    committee_id: UUID4
    title: str
    description: Optional[str] = None
    status: TaskStatus
    position: int
    due_date: Optional[datetime] = None
    created_by: Optional[UserSummary] = None
    assignees: List[UserSummary] = Field(default_factory=list)
    comments: List[CommentRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Status move
# ---------------------------------------------------------------------------

class TaskStatusUpdate(BaseModel):
    """Request body for PATCH /tasks/{taskId}/status (a board column move)."""
    status: TaskStatus
    position: Optional[int] = None
