"""
VetDesk Backend — Pet Model
=============================

`image_key` holds the object-storage key of the profile picture, never a
URL. Responses turn it into a short-lived presigned download URL.
"""

import enum
import uuid
from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vetdesk.database import Base
from vetdesk.models.base import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class PetType(str, enum.Enum):
    DOG = "dog"
    CAT = "cat"
    OTHER = "other"


class PetGender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Pet(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "pets"

    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[PetType] = mapped_column(
        Enum(PetType, name="pet_type", values_callable=_enum_values), nullable=False
    )
    gender: Mapped[PetGender] = mapped_column(
        Enum(PetGender, name="pet_gender", values_callable=_enum_values), nullable=False
    )
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    breed: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    is_sterilized: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    is_castrated: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    image_key: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("pet_customer_idx", "customer_id"),)

    def __repr__(self) -> str:
        return f"<Pet(id={self.id}, name='{self.name}', type='{self.type}')>"
