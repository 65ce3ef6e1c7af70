"""
VetDesk Backend — Shared Schema Building Blocks
=================================================

What:  Base model, field types and envelopes shared by every schema module.
Why:   The dashboard speaks camelCase JSON while the Python side stays
       snake_case; one base model configures the aliasing for all schemas.

Wire formats:
    datetime → "2025-08-02T09:00:00.000Z" (UTC, milliseconds)
    date     → "2025-08-02"
    Optional free text is trimmed; a blank string becomes null.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    StringConstraints,
)
from pydantic.alias_generators import to_camel

from vetdesk.models.base import to_utc


def format_utc(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z."""
    return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def clean_optional_text(value: Optional[str]) -> Optional[str]:
    """Trims surrounding whitespace; blank strings become None."""
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


# Naive datetimes from clients are taken to be UTC. The Z format applies to
# JSON output only; model_dump() in Python mode keeps datetime objects.
UtcDateTime = Annotated[
    datetime,
    AfterValidator(to_utc),
    PlainSerializer(format_utc, return_type=str, when_used="json"),
]

OptionalText = Annotated[Optional[str], AfterValidator(clean_optional_text)]

# Trimmed before length checks, so "   " fails min_length.
RequiredName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
NoteText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=10000)]


class CamelModel(BaseModel):
    """camelCase aliases on the wire, snake_case attributes in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OkResponse(BaseModel):
    """Returned by every delete endpoint."""
    ok: bool = Field(default=True)


class UploadUrlResponse(CamelModel):
    """
    Presigned upload target.

    The client PUTs the file to `url` (valid for 15 minutes) and then
    registers `key` with the API.
    """
    url: str = Field(description="Presigned PUT URL")
    key: str = Field(description="Object-storage key to register after upload")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "invalid_storage_key",
            "message": "Storage key does not belong to this resource",
            "details": {"field": "key"},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Object storage mode: s3, in_memory, unconfigured")
    uptime_seconds: float = Field(description="Seconds since service started")
