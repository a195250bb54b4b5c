"""Committee and role-committee permission models."""

from typing import Optional
import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Committee(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "committees"
    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="committees_organization_id_name_key"),
    )

    name: str = Field(nullable=False)
    description: Optional[str] = None
    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", ondelete="CASCADE", nullable=False, index=True
    )


class RoleCommitteePermission(UUIDMixin, TimestampMixin, SQLModel, table=True):
    """A role's grant on one committee. Only MEMBER and LEADER are stored."""

    __tablename__ = "role_committee_permissions"
    __table_args__ = (
        UniqueConstraint(
            "role_id", "committee_id",
            name="role_committee_permissions_role_id_committee_id_key",
        ),
    )

    role_id: uuid.UUID = Field(
        foreign_key="roles.id", ondelete="CASCADE", nullable=False, index=True
    )
    committee_id: uuid.UUID = Field(
        foreign_key="committees.id", ondelete="CASCADE", nullable=False, index=True
    )
    permission_level: str = Field(nullable=False)  # MEMBER | LEADER
