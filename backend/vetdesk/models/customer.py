"""
VetDesk Backend — Customer Model
==================================

A Customer is a pet owner, the root of the ownership chain below a user.
Soft-deleted customers disappear from every listing and ownership check;
their pets and visits become unreachable with them.
"""

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vetdesk.database import Base
from vetdesk.models.base import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Customer(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "customers"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("customer_user_idx", "user_id"),)

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name='{self.name}')>"
