"""Role and user-role membership models."""

from typing import Optional
import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, TimestampMixin, UUIDMixin


class Role(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="roles_organization_id_name_key"),
    )

    name: str = Field(nullable=False)
    description: Optional[str] = None
    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", ondelete="CASCADE", nullable=False, index=True
    )


class UserRole(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="user_roles_user_id_role_id_key"),
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id", ondelete="CASCADE", nullable=False, index=True
    )
    role_id: uuid.UUID = Field(
        foreign_key="roles.id", ondelete="CASCADE", nullable=False, index=True
    )
