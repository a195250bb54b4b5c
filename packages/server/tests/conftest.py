"""
Shared fixtures: a throwaway SQLite database per test, an HTTP client wired
to it, and a small factory for users, orgs, committees, roles and tasks.
"""

from __future__ import annotations

import os
from typing import Iterable, Optional

os.environ.setdefault("ORGBOARD_SECRET_KEY", "orgboard-test-secret-key-0123456789abcdef")
os.environ.setdefault("ORGBOARD_LOG_FORMAT", "console")
os.environ.setdefault("ORGBOARD_LOG_LEVEL", "warning")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

import orgboard.models  # noqa: F401
from orgboard.core.auth import create_jwt, hash_password
from orgboard.core.database import build_engine, get_session
from orgboard.main import app
from orgboard.models.committee import Committee, RoleCommitteePermission
from orgboard.models.organization import Organization
from orgboard.models.role import Role, UserRole
from orgboard.models.task import Task, TaskAssignment
from orgboard.models.user import User

PASSWORD = "password123"
# bcrypt at cost 12 is slow; hash once and share it across fixtures.
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_jwt(user.id, user.email)}"}


class Factory:
    """Creates rows directly, each call in its own committed transaction."""

    def __init__(self, session_factory):
        self._session_factory = session_factory
        self._counter = 0

    async def _save(self, *rows):
        async with self._session_factory() as session:
            session.add_all(rows)
            await session.commit()
        return rows[0] if len(rows) == 1 else rows

    async def user(self, name: Optional[str] = None, *, is_active: bool = True) -> User:
        self._counter += 1
        name = name or f"user{self._counter}"
        return await self._save(
            User(
                email=f"{name.lower()}@example.com",
                name=name,
                password_hash=PASSWORD_HASH,
                is_active=is_active,
            )
        )

    async def org(self, admin: User, name: str = "Student Association") -> Organization:
        return await self._save(Organization(name=name, admin_user_id=admin.id))

    async def committee(self, org: Organization, name: str = "Events") -> Committee:
        return await self._save(Committee(name=name, organization_id=org.id))

    async def role(
        self,
        org: Organization,
        name: str,
        grants: Iterable[tuple[Committee, str]] = (),
        holders: Iterable[User] = (),
    ) -> Role:
        """A role with ``(committee, "MEMBER" | "LEADER")`` grants, given to ``holders``."""
        role = await self._save(Role(name=name, organization_id=org.id))
        rows = [
            RoleCommitteePermission(
                role_id=role.id, committee_id=committee.id, permission_level=level
            )
            for committee, level in grants
        ]
        rows += [UserRole(user_id=u.id, role_id=role.id) for u in holders]
        if rows:
            await self._save(*rows)
        return role

    async def task(
        self,
        committee: Committee,
        creator: User,
        title: str = "Book venue",
        *,
        status: str = "TODO",
        position: int = 0,
        assignees: Iterable[User] = (),
    ) -> Task:
        task = await self._save(
            Task(
                committee_id=committee.id,
                title=title,
                status=status,
                position=position,
                created_by_id=creator.id,
            )
        )
        rows = [TaskAssignment(task_id=task.id, user_id=u.id) for u in assignees]
        if rows:
            await self._save(*rows)
        return task


@pytest.fixture
def factory(session_factory) -> Factory:
    return Factory(session_factory)


@pytest.fixture
async def admin(factory) -> User:
    return await factory.user("Admin")


@pytest.fixture
async def org(factory, admin) -> Organization:
    return await factory.org(admin)


@pytest.fixture
async def events(factory, org) -> Committee:
    return await factory.committee(org, "Events")


@pytest.fixture
def password() -> str:
    return PASSWORD


@pytest.fixture
def headers_for():
    return auth_headers
