"""Organization model."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Organization(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "organizations"

    name: str = Field(nullable=False)
    description: Optional[str] = None
    logo_url: Optional[str] = None
    # One org per admin is checked at creation time, not by a constraint.
    admin_user_id: uuid.UUID = Field(
        foreign_key="users.id", ondelete="RESTRICT", nullable=False, index=True
    )
