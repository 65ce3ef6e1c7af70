"""
VetDesk Backend — Customer and Pet Schemas
============================================

What:  API contract for customers (pet owners) and their pets.
How:   Update bodies are partial. Services read them with
       `model_dump(exclude_unset=True)`, so an omitted field is left alone
       while an explicit null clears a nullable column.

Pet images:
    `imageUrl` in a pet update body is the storage KEY returned by the
    upload-url endpoint (or null to remove the picture). In pet responses
    `imageUrl` is a presigned download URL.
"""

import uuid
from datetime import date
from typing import List, Optional

from pydantic import Field

from vetdesk.models.pet import PetGender, PetType
from vetdesk.schemas.common import CamelModel, OptionalText, RequiredName


# ══════════════════════════════════════════════════════════════════════════
# Customers
# ══════════════════════════════════════════════════════════════════════════


class CustomerCreate(CamelModel):
    name: RequiredName
    email: OptionalText = None
    phone: OptionalText = None
    address: OptionalText = None


class CustomerUpdate(CamelModel):
    name: Optional[RequiredName] = None
    email: OptionalText = None
    phone: OptionalText = None
    address: OptionalText = None


class CustomerResponse(CamelModel):
    id: uuid.UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    pets_count: int = Field(default=0, description="Number of pets that are not deleted")


class CustomerEnvelope(CamelModel):
    customer: CustomerResponse


class CustomerListResponse(CamelModel):
    customers: List[CustomerResponse]


# ══════════════════════════════════════════════════════════════════════════
# Pets
# ══════════════════════════════════════════════════════════════════════════


class PetCreate(CamelModel):
    name: RequiredName
    type: PetType
    gender: PetGender
    date_of_birth: Optional[date] = None
    breed: OptionalText = None
    is_sterilized: Optional[bool] = None
    is_castrated: Optional[bool] = None


class PetUpdate(CamelModel):
    name: Optional[RequiredName] = None
    type: Optional[PetType] = None
    gender: Optional[PetGender] = None
    date_of_birth: Optional[date] = None
    breed: OptionalText = None
    is_sterilized: Optional[bool] = None
    is_castrated: Optional[bool] = None
    image_url: Optional[str] = Field(
        default=None,
        description="Storage key from the upload-url endpoint, or null to remove the image",
    )


class PetResponse(CamelModel):
    id: uuid.UUID
    customer_id: uuid.UUID
    name: str
    type: PetType
    gender: PetGender
    date_of_birth: Optional[date] = None
    breed: Optional[str] = None
    is_sterilized: Optional[bool] = None
    is_castrated: Optional[bool] = None
    image_url: Optional[str] = Field(default=None, description="Presigned download URL")


class PetEnvelope(CamelModel):
    pet: PetResponse


class PetListResponse(CamelModel):
    pets: List[PetResponse]


class PetImageUploadUrlRequest(CamelModel):
    content_type: str = Field(description="MIME type of the image about to be uploaded")
