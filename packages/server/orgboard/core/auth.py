"""
Authentication for OrgBoard.

Supports:
- Email/Password login with bcrypt password hashes
- Bearer JWT carrying the user id (``sub``) and email, fixed expiry
- Per-request user lookup; deactivated users are rejected immediately
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
import structlog
from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from orgboard.core.config import get_settings
from orgboard.core.database import get_session
from orgboard.core.errors import AuthenticationError
from orgboard.models.user import User

log = structlog.get_logger()
settings = get_settings()

bearer_header = APIKeyHeader(name="Authorization", auto_error=False)

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with cost factor 12."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: uuid.UUID,
    email: str,
    *,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT for a user."""
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "email": email,
        "iat": now,
        "exp": exp,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def _extract_bearer(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Authentication required")
    token = authorization[7:].strip()
    if not token:
        raise AuthenticationError("Authentication required")
    return token


# ---------------------------------------------------------------------------
# Authentication dependency
# ---------------------------------------------------------------------------

class AuthenticatedUser:
    """Container for the verified caller."""

    def __init__(self, user: User):
        self.user = user
        self.user_id = user.id
        self.email = user.email


async def authenticate_token(token: str, session: AsyncSession) -> AuthenticatedUser:
    """Resolve a bearer JWT to an active user or raise AuthenticationError."""
    try:
        payload = decode_jwt(token)
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        raise AuthenticationError("Invalid or expired token")

    user = await session.get(User, user_id)
    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        log.info("auth.inactive_user_rejected", user_id=str(user_id))
        raise AuthenticationError("Account is deactivated")

    return AuthenticatedUser(user=user)


async def get_authenticated_user(
    authorization: Optional[str] = Depends(bearer_header),
    session: AsyncSession = Depends(get_session),
) -> AuthenticatedUser:
    """Main authentication dependency: ``Authorization: Bearer <jwt>``."""
    token = _extract_bearer(authorization)
    return await authenticate_token(token, session)
