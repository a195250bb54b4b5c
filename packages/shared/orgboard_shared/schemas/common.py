from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, UUID4


class PermissionLevel(str, Enum):
    """Per-committee access ceiling. Totally ordered NONE < MEMBER < LEADER."""

    NONE = "NONE"
    MEMBER = "MEMBER"
    LEADER = "LEADER"

    @property
    def rank(self) -> int:
        return PERMISSION_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank >= other.rank


# Ordered lowest to highest
PERMISSION_ORDER: list["PermissionLevel"] = [
    PermissionLevel.NONE,
    PermissionLevel.MEMBER,
    PermissionLevel.LEADER,
]

# Levels that are persisted as permission rows; NONE is the absence of a row.
GRANTABLE_LEVELS = (PermissionLevel.MEMBER, PermissionLevel.LEADER)


class AccessRequirement(str, Enum):
    NONE = "NONE"
    MEMBER = "MEMBER"
    LEADER = "LEADER"
    ADMIN = "ADMIN"


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class UserSummary(BaseModel):
    """Compact user reference embedded in other responses."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    email: str
    name: str


class CommitteeSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    name: str
    description: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
