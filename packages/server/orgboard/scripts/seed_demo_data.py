"""
Seed a demo organization for local testing.

Creates an admin, three members, an organization with three committees,
three roles with grants, a few tasks and comments. Safe to re-run: rows
that already exist (matched by email or name) are reused.

    python -m orgboard.scripts.seed_demo_data --create-tables
"""

import argparse
import asyncio
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from orgboard.core.auth import hash_password
from orgboard.core.database import get_session_context, init_db
from orgboard.models.committee import Committee, RoleCommitteePermission
from orgboard.models.organization import Organization
from orgboard.models.role import Role, UserRole
from orgboard.models.task import Comment, Task, TaskAssignment
from orgboard.models.user import User

ADMIN = ("admin@university.edu", "admin123", "Admin User")
MEMBERS = [
    ("john@university.edu", "password123", "John Doe"),
    ("jane@university.edu", "password123", "Jane Smith"),
    ("bob@university.edu", "password123", "Bob Johnson"),
]
ORG_NAME = "Computer Science Student Association"
COMMITTEES = {
    "Events": "Plans and organizes student events and activities",
    "Marketing": "Handles social media and promotional activities",
    "Finance": "Manages budget and financial planning",
}
# role name -> (description, holder email, {committee: level})
ROLES = {
    "President": (
        "Organization president with full committee access",
        "john@university.edu",
        {"Events": "LEADER", "Marketing": "LEADER", "Finance": "LEADER"},
    ),
    "Committee Chair": (
        "Leads specific committees",
        "jane@university.edu",
        {"Events": "LEADER", "Marketing": "MEMBER"},
    ),
    "General Member": (
        "Regular member with basic access",
        "bob@university.edu",
        {"Events": "MEMBER", "Marketing": "MEMBER"},
    ),
}
# (title, description, committee, status, creator, due, assignees)
TASKS = [
    (
        "Plan Spring Hackathon",
        "Organize venue, sponsors, and schedule for the annual spring hackathon",
        "Events", "TODO", "john@university.edu", datetime(2025, 3, 15, tzinfo=timezone.utc),
        ["john@university.edu", "jane@university.edu"],
    ),
    (
        "Design promotional posters",
        "Create eye-catching posters for upcoming events",
        "Marketing", "IN_PROGRESS", "john@university.edu", datetime(2025, 2, 20, tzinfo=timezone.utc),
        ["bob@university.edu"],
    ),
    (
        "Update social media profiles",
        "Refresh all social media bios and profile pictures",
        "Marketing", "DONE", "jane@university.edu", None,
        ["jane@university.edu"],
    ),
    (
        "Review semester budget",
        "Go through all expenses and plan for next semester",
        "Finance", "TODO", "admin@university.edu", datetime(2025, 4, 1, tzinfo=timezone.utc),
        [],
    ),
]
COMMENTS = [
    ("Plan Spring Hackathon", "jane@university.edu",
     "I've reached out to potential sponsors. Waiting for responses."),
    ("Plan Spring Hackathon", "john@university.edu",
     "Great! Let me know if you need help with the venue."),
]


async def _get_or_create_user(session: AsyncSession, email: str, password: str, name: str) -> User:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        print(f"User {email} already exists.")
        return user
    user = User(email=email, name=name, password_hash=hash_password(password))
    session.add(user)
    await session.flush()
    print(f"Created user: {email}")
    return user


async def _get_by_name(session: AsyncSession, model, org_id, name: str):
    result = await session.execute(
        select(model).where(model.organization_id == org_id, model.name == name)
    )
    return result.scalar_one_or_none()


async def seed(session: AsyncSession) -> Organization:
    """Populate the demo data inside ``session``. Returns the organization."""
    admin = await _get_or_create_user(session, *ADMIN)
    users = {admin.email: admin}
    for email, password, name in MEMBERS:
        users[email] = await _get_or_create_user(session, email, password, name)

    result = await session.execute(
        select(Organization).where(Organization.admin_user_id == admin.id)
    )
    org: Optional[Organization] = result.scalar_one_or_none()
    if not org:
        org = Organization(
            name=ORG_NAME,
            description="The official student organization for CS students",
            admin_user_id=admin.id,
        )
        session.add(org)
        await session.flush()
        print(f"Created organization: {org.name}")

    committees = {}
    for name, description in COMMITTEES.items():
        committee = await _get_by_name(session, Committee, org.id, name)
        if not committee:
            committee = Committee(name=name, description=description, organization_id=org.id)
            session.add(committee)
            await session.flush()
            print(f"Created committee: {name}")
        committees[name] = committee

    for name, (description, holder, grants) in ROLES.items():
        role = await _get_by_name(session, Role, org.id, name)
        if not role:
            role = Role(name=name, description=description, organization_id=org.id)
            session.add(role)
            await session.flush()
            print(f"Created role: {name}")

        holder_id = users[holder].id
        result = await session.execute(
            select(UserRole).where(UserRole.user_id == holder_id, UserRole.role_id == role.id)
        )
        if not result.scalar_one_or_none():
            session.add(UserRole(user_id=holder_id, role_id=role.id))

        for committee_name, level in grants.items():
            committee_id = committees[committee_name].id
            result = await session.execute(
                select(RoleCommitteePermission).where(
                    RoleCommitteePermission.role_id == role.id,
                    RoleCommitteePermission.committee_id == committee_id,
                )
            )
            if not result.scalar_one_or_none():
                session.add(
                    RoleCommitteePermission(
                        role_id=role.id, committee_id=committee_id, permission_level=level
                    )
                )
    await session.flush()

    for title, description, committee_name, status, creator, due, assignees in TASKS:
        committee_id = committees[committee_name].id
        result = await session.execute(
            select(Task).where(Task.committee_id == committee_id, Task.title == title)
        )
        task = result.scalars().first()
        if not task:
            task = Task(
                committee_id=committee_id,
                title=title,
                description=description,
                status=status,
                position=0,
                due_date=due,
                created_by_id=users[creator].id,
            )
            session.add(task)
            await session.flush()
            for email in assignees:
                session.add(TaskAssignment(task_id=task.id, user_id=users[email].id))
            for comment_task, author, content in COMMENTS:
                if comment_task == title:
                    session.add(Comment(task_id=task.id, user_id=users[author].id, content=content))
            print(f"Created task: {title}")

    await session.flush()
    return org


async def main(create_tables: bool = False) -> None:
    if create_tables:
        await init_db()
    async with get_session_context() as session:
        await seed(session)

    print("Done.")
    print("\nTest Credentials:")
    print(f"Admin: {ADMIN[0]} / {ADMIN[1]}")
    for email, password, _name in MEMBERS:
        print(f"Member: {email} / {password}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a demo organization.")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables first (local development without migrations)",
    )
    args = parser.parse_args()

    asyncio.run(main(create_tables=args.create_tables))
