"""User management schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, UUID4

from .roles import PermissionRead, RoleSummary


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class UserUpdateRequest(BaseModel):
    """Update a user's display name."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    """Single user response."""
    id: UUID4
    email: str
    name: str
    is_active: bool
    created_at: datetime


class UserRoleDetail(RoleSummary):
    permissions: List[PermissionRead] = Field(default_factory=list)


class UserProfileResponse(UserResponse):
    """The caller's own profile (GET /users/me)."""
    roles: List[UserRoleDetail] = Field(default_factory=list)
    admin_organization_id: Optional[UUID4] = None


class OrgUserResponse(UserResponse):
    """A user as listed for an org admin."""
    roles: List[RoleSummary] = Field(default_factory=list)
    is_admin: bool = False


class UserListResponse(BaseModel):
    """List of users in an org."""
    data: List[OrgUserResponse]
