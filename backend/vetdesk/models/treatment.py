"""
VetDesk Backend — Treatment Catalog Model
===========================================

A clinic user's catalog of services (vaccinations, check-ups, ...).
`price_cents` is the list price; each visit records the price actually
charged on its own VisitTreatment row.
"""

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vetdesk.database import Base
from vetdesk.models.base import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Treatment(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "treatments"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # Suggests the next due date when the treatment is added to a visit
    default_interval_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (Index("treatment_user_idx", "user_id"),)
