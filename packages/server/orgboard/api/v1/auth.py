"""
Authentication endpoints.

- Email/Password registration & login
- Bearer JWT returned in the response body (no cookies, no server-side sessions)
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from orgboard.core.auth import create_jwt, hash_password, verify_password
from orgboard.core.config import get_settings
from orgboard.core.database import get_session
from orgboard.core.errors import AuthenticationError, BadRequestError, ConflictError
from orgboard.models.user import User
from orgboard_shared.schemas.common import UserSummary

log = structlog.get_logger()
settings = get_settings()
router = APIRouter()


# ---------------------------------------------------------------------------
# Email/Password Registration
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    name: str = Field(min_length=1, max_length=200)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    token: str
    user: UserSummary


def _normalize_email(email: str) -> str:
    return email.strip().lower()


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    """Register a new user with email/password and return a session token."""
    email = _normalize_email(body.email)

    if len(body.password) < settings.password_min_length:
        raise BadRequestError(
            f"Password must be at least {settings.password_min_length} characters"
        )

    result = await session.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise ConflictError("User already exists")

    user = User(
        email=email,
        name=body.name,
        password_hash=hash_password(body.password),
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)

    token = create_jwt(user.id, user.email)
    log.info("user.registered", user_id=str(user.id), email=email)
    return AuthResponse(token=token, user=UserSummary.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    """Authenticate with email/password and receive a bearer JWT."""
    email = _normalize_email(body.email)
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(body.password, user.password_hash):
        log.warning("auth.login_failure", email=email, reason="bad_credentials")
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        log.warning("auth.login_failure", email=email, reason="deactivated")
        raise AuthenticationError("Account is deactivated")

    token = create_jwt(user.id, user.email)
    log.info("auth.login_success", user_id=str(user.id))
    return AuthResponse(token=token, user=UserSummary.model_validate(user))
