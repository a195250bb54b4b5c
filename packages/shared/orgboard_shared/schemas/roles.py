"""Role, role assignment and committee permission schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, UUID4

from .common import CommitteeSummary, PermissionLevel, UserSummary


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class RoleCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None


class RoleUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None


class RoleAssignRequest(BaseModel):
    user_id: UUID4
    role_id: UUID4


class PermissionGrant(BaseModel):
    """One committee grant. NONE means "no row" and is dropped on save."""
    committee_id: UUID4
    permission_level: PermissionLevel


class SetPermissionsRequest(BaseModel):
    """Replaces the role's whole permission set."""
    role_id: UUID4
    permissions: List[PermissionGrant] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class PermissionRead(BaseModel):
    id: UUID4
    role_id: UUID4
    committee_id: UUID4
    permission_level: PermissionLevel
    committee: Optional[CommitteeSummary] = None


class RoleSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    name: str
    description: Optional[str] = None


class RoleRead(RoleSummary):
    organization_id: UUID4
    permissions: List[PermissionRead] = Field(default_factory=list)
    members: List[UserSummary] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class RoleListResponse(BaseModel):
    data: List[RoleRead]


class RoleAssignmentRead(BaseModel):
    id: UUID4
    user: UserSummary
    role: RoleSummary
    created_at: datetime
