"""
Organization-related Pydantic schemas shared between server and frontend codegen.

Covers: Org create/update requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, UUID4

from .common import UserSummary


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class OrgCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    logo_url: Optional[HttpUrl] = None


class OrgUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    logo_url: Optional[HttpUrl] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class OrgResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    name: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    admin_user_id: UUID4
    created_at: datetime
    updated_at: datetime


class OrgDetailResponse(OrgResponse):
    """Org with the admin user expanded (GET /organizations/me)."""
    admin_user: Optional[UserSummary] = None
    is_admin: bool = False


class OrgListItem(BaseModel):
    id: UUID4
    name: str
    description: Optional[str] = None
    is_admin: bool


class OrgListResponse(BaseModel):
    data: List[OrgListItem]
