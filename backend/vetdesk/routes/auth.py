"""
VetDesk Backend — Authentication Routes
=========================================

Session-cookie authentication for the dashboard. The cookie is HttpOnly
and SameSite=Lax; set SESSION_COOKIE_SECURE=true behind HTTPS.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.config import settings
from vetdesk.database import get_db_session
from vetdesk.models import User
from vetdesk.routes.deps import AUTH_ERRORS, get_current_user
from vetdesk.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    UpdateMeRequest,
    UserEnvelope,
    UserResponse,
)
from vetdesk.schemas.common import ErrorResponse, OkResponse
from vetdesk.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _envelope(user: User) -> UserEnvelope:
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post(
    "/register",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Create a clinic user account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    user = await auth_service.register(db, body)
    return _envelope(user)


@router.post(
    "/login",
    response_model=UserEnvelope,
    responses=AUTH_ERRORS,
    summary="Log in and receive a session cookie",
)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    user, token = await auth_service.login(db, body.email, body.password)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
        path="/",
    )
    return _envelope(user)


@router.post("/logout", response_model=OkResponse, summary="End the current session")
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> OkResponse:
    await auth_service.logout(db, request.cookies.get(settings.session_cookie_name))
    response.delete_cookie(settings.session_cookie_name, path="/")
    return OkResponse()


@router.get("/me", response_model=UserEnvelope, responses=AUTH_ERRORS, summary="Current user")
async def get_me(user: User = Depends(get_current_user)) -> UserEnvelope:
    return _envelope(user)


@router.put(
    "/me",
    response_model=UserEnvelope,
    responses=AUTH_ERRORS,
    summary="Update the current user's settings",
)
async def update_me(
    body: UpdateMeRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    user = await auth_service.update_me(db, user, body)
    return _envelope(user)
