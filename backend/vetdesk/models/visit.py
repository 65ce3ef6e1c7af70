"""
VetDesk Backend — Visit Models
================================

What:  A Visit and the three kinds of rows attached to it.
How:   Visit stores both customer_id and pet_id; the ownership check walks
       visit → customer → user, and the pet must belong to that customer.

Tables:
    visits            scheduled / completed / cancelled appointments
    visit_treatments  catalog treatment applied at a visit, with price charged
                      and the date the treatment is next due
    visit_notes       free-text notes
    visit_images      object-storage keys of images attached to the visit
"""

import enum
import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vetdesk.database import Base
from vetdesk.models.base import (
    SoftDeleteMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    utcnow,
)


class VisitStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Visit(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "visits"

    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False
    )
    pet_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[VisitStatus] = mapped_column(
        Enum(
            VisitStatus,
            name="visit_status",
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=VisitStatus.SCHEDULED,
    )
    scheduled_start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    scheduled_end_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    title: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("visit_pet_idx", "pet_id"),
        Index("visit_customer_idx", "customer_id"),
        Index("visit_status_idx", "status"),
        Index("visit_start_idx", "scheduled_start_at"),
    )

    def __repr__(self) -> str:
        return f"<Visit(id={self.id}, status='{self.status}', start='{self.scheduled_start_at}')>"


class VisitTreatment(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "visit_treatments"

    visit_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("visits.id", ondelete="CASCADE"), nullable=False
    )
    treatment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("treatments.id", ondelete="RESTRICT"), nullable=False
    )
    price_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    next_due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    __table_args__ = (Index("visit_treatment_visit_idx", "visit_id"),)


class VisitNote(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "visit_notes"

    visit_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("visits.id", ondelete="CASCADE"), nullable=False
    )
    note: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (Index("visit_note_visit_idx", "visit_id"),)


class VisitImage(UUIDPrimaryKeyMixin, SoftDeleteMixin, Base):
    """Images are immutable once registered, so there is no updated_at."""

    __tablename__ = "visit_images"

    visit_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("visits.id", ondelete="CASCADE"), nullable=False
    )
    storage_key: Mapped[str] = mapped_column(Text, nullable=False)
    original_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    content_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (Index("visit_image_visit_idx", "visit_id"),)
