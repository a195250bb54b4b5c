"""Initial schema: users, organizations, roles, committees, grants, tasks.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
    )


def _fk(name: str, target: str, ondelete: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=False,
    )


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "organizations",
        _uuid_pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("logo_url", sa.Text(), nullable=True),
        _fk("admin_user_id", "users.id", "RESTRICT"),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_organizations_admin_user_id", "organizations", ["admin_user_id"])

    op.create_table(
        "roles",
        _uuid_pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _fk("organization_id", "organizations.id", "CASCADE"),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("organization_id", "name", name="roles_organization_id_name_key"),
    )
    op.create_index("ix_roles_organization_id", "roles", ["organization_id"])

    op.create_table(
        "user_roles",
        _uuid_pk(),
        _fk("user_id", "users.id", "CASCADE"),
        _fk("role_id", "roles.id", "CASCADE"),
        _created_at(),
        sa.UniqueConstraint("user_id", "role_id", name="user_roles_user_id_role_id_key"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])
    op.create_index("ix_user_roles_role_id", "user_roles", ["role_id"])

    op.create_table(
        "committees",
        _uuid_pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _fk("organization_id", "organizations.id", "CASCADE"),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint(
            "organization_id", "name", name="committees_organization_id_name_key"
        ),
    )
    op.create_index("ix_committees_organization_id", "committees", ["organization_id"])

    op.create_table(
        "role_committee_permissions",
        _uuid_pk(),
        _fk("role_id", "roles.id", "CASCADE"),
        _fk("committee_id", "committees.id", "CASCADE"),
        sa.Column("permission_level", sa.Text(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint(
            "role_id", "committee_id",
            name="role_committee_permissions_role_id_committee_id_key",
        ),
        sa.CheckConstraint(
            "permission_level IN ('MEMBER', 'LEADER')",
            name="role_committee_permissions_level_check",
        ),
    )
    op.create_index(
        "ix_role_committee_permissions_role_id", "role_committee_permissions", ["role_id"]
    )
    op.create_index(
        "ix_role_committee_permissions_committee_id",
        "role_committee_permissions",
        ["committee_id"],
    )

    op.create_table(
        "tasks",
        _uuid_pk(),
        _fk("committee_id", "committees.id", "CASCADE"),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="TODO"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        _fk("created_by_id", "users.id", "RESTRICT"),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint(
            "status IN ('TODO', 'IN_PROGRESS', 'DONE')", name="tasks_status_check"
        ),
    )
    op.create_index("ix_tasks_committee_id", "tasks", ["committee_id"])
    op.create_index("ix_tasks_board_order", "tasks", ["committee_id", "status", "position"])

    op.create_table(
        "task_assignments",
        _uuid_pk(),
        _fk("task_id", "tasks.id", "CASCADE"),
        _fk("user_id", "users.id", "CASCADE"),
        _created_at(),
        sa.UniqueConstraint("task_id", "user_id", name="task_assignments_task_id_user_id_key"),
    )
    op.create_index("ix_task_assignments_task_id", "task_assignments", ["task_id"])
    op.create_index("ix_task_assignments_user_id", "task_assignments", ["user_id"])

    op.create_table(
        "comments",
        _uuid_pk(),
        _fk("task_id", "tasks.id", "CASCADE"),
        _fk("user_id", "users.id", "CASCADE"),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_comments_task_id", "comments", ["task_id"])
    op.create_index("ix_comments_user_id", "comments", ["user_id"])


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    for table in (
        "comments",
        "task_assignments",
        "tasks",
        "role_committee_permissions",
        "committees",
        "user_roles",
        "roles",
        "organizations",
        "users",
    ):
        op.drop_table(table)
