"""
VetDesk Backend — Authentication Schemas
==========================================

Request/response models for registration, login and the current user's
settings. Emails are lower-cased so logins are case-insensitive.
"""

import uuid
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from vetdesk.schemas.common import CamelModel, RequiredName, UtcDateTime


class RegisterRequest(CamelModel):
    email: EmailStr = Field(description="Login email, unique per clinic user")
    name: RequiredName = Field(description="Display name")
    password: str = Field(min_length=8, max_length=256, description="Plain-text password")

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class UpdateMeRequest(CamelModel):
    name: Optional[RequiredName] = Field(default=None, description="New display name")


class UserResponse(CamelModel):
    id: uuid.UUID
    email: str
    name: str
    created_at: UtcDateTime


class UserEnvelope(CamelModel):
    user: UserResponse
