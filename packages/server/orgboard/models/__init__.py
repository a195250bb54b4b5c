# SQLModel definitions, imported here so the metadata is complete for Alembic.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .organization import Organization  # noqa: F401
from .role import Role, UserRole  # noqa: F401
from .committee import Committee, RoleCommitteePermission  # noqa: F401
from .task import Task, TaskAssignment, Comment  # noqa: F401
