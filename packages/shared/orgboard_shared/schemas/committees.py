"""Committee schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, UUID4

from .common import PermissionLevel
from .tasks import TaskRead


class CommitteeCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None


class CommitteeUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None


class CommitteeRead(BaseModel):
    id: UUID4
    organization_id: UUID4
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CommitteeListItem(CommitteeRead):
    """A committee as seen by the caller, with their effective permission."""
    user_permission: PermissionLevel
    task_counts: Dict[str, int] = Field(default_factory=dict)


class CommitteeListResponse(BaseModel):
    data: List[CommitteeListItem]


class CommitteeDetail(CommitteeRead):
    user_permission: PermissionLevel
    tasks: List[TaskRead] = Field(default_factory=list)
