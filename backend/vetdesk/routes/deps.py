"""
VetDesk Backend — Shared Route Dependencies
=============================================

`get_current_user` turns the session cookie into a User or answers 401.
It shares the request's database session, so refreshing the session's
last_accessed_at commits together with the rest of the request.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.config import settings
from vetdesk.database import get_db_session
from vetdesk.models import User
from vetdesk.schemas.common import ErrorResponse
from vetdesk.services.auth_service import auth_service

# Error responses every authenticated endpoint can produce
AUTH_ERRORS = {
    401: {"description": "Missing or expired session", "model": ErrorResponse},
}
NOT_FOUND_ERRORS = {
    **AUTH_ERRORS,
    404: {"description": "Not found, or not owned by the current user", "model": ErrorResponse},
}


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> User:
    token = request.cookies.get(settings.session_cookie_name)
    return await auth_service.authenticate(db, token)
