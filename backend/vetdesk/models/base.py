"""
VetDesk Backend — Shared Model Columns
========================================

What:  Column mixins reused by every table (UUID key, timestamps, soft delete).
Why:   Every mutable entity carries `updated_at` and an `is_deleted` flag;
       declaring them once keeps the tables consistent.

Portability:
    Models use the generic `Uuid` and `DateTime(timezone=True)` types with
    Python-side defaults so the same metadata runs on PostgreSQL and on the
    SQLite database used by the tests. PostgreSQL server defaults live in
    the Alembic migration.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalizes a datetime to aware UTC.

    SQLite hands back naive datetimes even for timezone=True columns;
    those are stored as UTC, so the zone is attached rather than converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UUIDPrimaryKeyMixin:
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    # Services set this explicitly as well, so bulk updates keep it current.
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class SoftDeleteMixin:
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
