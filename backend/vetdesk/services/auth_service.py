"""
VetDesk Backend — Authentication Service
==========================================

What:  Registration, login, logout and session resolution.
How:   Login creates a Session row keyed by the SHA-256 of a random token;
       the token itself goes to the client in an HttpOnly cookie. Each
       authenticated request looks the session up, rejects it once
       `expires_at` has passed and refreshes `last_accessed_at`.
Who:   Called by the auth routes and by the `get_current_user` dependency.
"""

import logging
from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.config import settings
from vetdesk.exceptions import AuthenticationError, ConflictError
from vetdesk.models import Session, User, utcnow
from vetdesk.models.base import to_utc
from vetdesk.schemas.auth import RegisterRequest, UpdateMeRequest
from vetdesk.services.security import (
    hash_password,
    hash_session_token,
    new_session_token,
    verify_password,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Stateless; every call receives the request's database session."""

    async def register(self, db: AsyncSession, data: RegisterRequest) -> User:
        existing = await db.execute(select(User.id).where(User.email == data.email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(message="An account with this email already exists")

        user = User(email=data.email, name=data.name, password_hash=hash_password(data.password))
        db.add(user)
        try:
            await db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            raise ConflictError(message="An account with this email already exists") from e
        logger.info("Registered user %s", user.id)
        return user

    async def login(self, db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
        """
        Verifies credentials and opens a session.

        Returns the user and the raw session token for the cookie. Unknown
        email and wrong password produce the same error.
        """
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError(message="Invalid email or password")

        token = new_session_token()
        now = utcnow()
        db.add(
            Session(
                id=hash_session_token(token),
                user_id=user.id,
                created_at=now,
                last_accessed_at=now,
                expires_at=now + timedelta(seconds=settings.session_ttl_seconds),
            )
        )
        await db.flush()
        logger.info("User %s logged in", user.id)
        return user, token

    async def logout(self, db: AsyncSession, token: Optional[str]) -> None:
        if not token:
            return
        await db.execute(delete(Session).where(Session.id == hash_session_token(token)))

    async def authenticate(self, db: AsyncSession, token: Optional[str]) -> User:
        """Resolves a session cookie to its user or raises AuthenticationError (401)."""
        if not token:
            raise AuthenticationError()

        result = await db.execute(
            select(Session, User)
            .join(User, User.id == Session.user_id)
            .where(Session.id == hash_session_token(token))
        )
        row = result.one_or_none()
        if row is None:
            raise AuthenticationError(message="Session is invalid or has expired")

        session, user = row
        now = utcnow()
        if to_utc(session.expires_at) <= now:
            raise AuthenticationError(message="Session is invalid or has expired")

        session.last_accessed_at = now
        return user

    async def update_me(self, db: AsyncSession, user: User, data: UpdateMeRequest) -> User:
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        if updates:
            for attr, value in updates.items():
                setattr(user, attr, value)
            user.updated_at = utcnow()
            await db.flush()
        return user


auth_service = AuthService()
