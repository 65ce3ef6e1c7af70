"""
VetDesk Backend — Pet Service
===============================

What:  CRUD for a customer's pets, plus the profile-image upload workflow.
How:   Every call first passes the customer → pet ownership chain.

Profile image workflow:
    1. POST .../image/upload-url {contentType}
         → {url, key}; key = <pet prefix>/profile-<epoch ms>
    2. Browser PUTs the file to `url`
    3. PUT .../pets/{petId} {imageUrl: key}
         → key is re-validated against the pet's prefix (400
           invalid_storage_key otherwise); the previous object is
           deleted once the transaction has committed
    `imageUrl: null` removes the picture and deletes the stored object.
"""

import logging
import uuid
from functools import partial
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.config import settings
from vetdesk.database import run_after_commit
from vetdesk.models import Customer, Pet, User, utcnow
from vetdesk.schemas.common import UploadUrlResponse
from vetdesk.schemas.customer import PetCreate, PetResponse, PetUpdate
from vetdesk.services import storage_keys
from vetdesk.services.ownership import ensure_customer, ensure_pet
from vetdesk.services.storage import StorageClient, delete_quietly

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = {"name", "type", "gender"}


def pet_storage_prefix(user: User, customer: Customer, pet: Pet) -> str:
    return storage_keys.pet_prefix(
        user_id=user.id,
        user_email=user.email,
        customer_id=customer.id,
        customer_name=customer.name,
        pet_id=pet.id,
        pet_name=pet.name,
    )


def serialize_pet(pet: Pet, storage: StorageClient) -> PetResponse:
    image_url: Optional[str] = None
    if pet.image_key:
        image_url = storage.presign_get(pet.image_key, settings.download_url_expires_seconds)
    return PetResponse(
        id=pet.id,
        customer_id=pet.customer_id,
        name=pet.name,
        type=pet.type,
        gender=pet.gender,
        date_of_birth=pet.date_of_birth,
        breed=pet.breed,
        is_sterilized=pet.is_sterilized,
        is_castrated=pet.is_castrated,
        image_url=image_url,
    )


class PetService:

    async def list_pets(
        self,
        db: AsyncSession,
        storage: StorageClient,
        user: User,
        customer_id: uuid.UUID,
    ) -> List[PetResponse]:
        customer = await ensure_customer(db, user.id, customer_id)
        result = await db.execute(
            select(Pet)
            .where(Pet.customer_id == customer.id, Pet.is_deleted.is_(False))
            .order_by(Pet.created_at)
        )
        return [serialize_pet(pet, storage) for pet in result.scalars().all()]

    async def create_pet(
        self,
        db: AsyncSession,
        storage: StorageClient,
        user: User,
        customer_id: uuid.UUID,
        data: PetCreate,
    ) -> PetResponse:
        customer = await ensure_customer(db, user.id, customer_id)
        pet = Pet(customer_id=customer.id, **data.model_dump())
        db.add(pet)
        await db.flush()
        logger.info("Pet %s created for customer %s", pet.id, customer.id)
        return serialize_pet(pet, storage)

    async def get_pet(
        self,
        db: AsyncSession,
        storage: StorageClient,
        user: User,
        customer_id: uuid.UUID,
        pet_id: uuid.UUID,
    ) -> PetResponse:
        customer = await ensure_customer(db, user.id, customer_id)
        pet = await ensure_pet(db, customer, pet_id)
        return serialize_pet(pet, storage)

    async def update_pet(
        self,
        db: AsyncSession,
        storage: StorageClient,
        user: User,
        customer_id: uuid.UUID,
        pet_id: uuid.UUID,
        data: PetUpdate,
    ) -> PetResponse:
        """
        Partial update. When `imageUrl` is present the key is validated
        before anything is written, and the replaced object is deleted
        (best-effort) after the request commits.
        """
        customer = await ensure_customer(db, user.id, customer_id)
        pet = await ensure_pet(db, customer, pet_id)

        updates = data.model_dump(exclude_unset=True)
        stale_key: Optional[str] = None
        if "image_url" in updates:
            new_key = updates.pop("image_url")
            if new_key is not None:
                storage_keys.ensure_pet_profile_key(new_key, user.id, customer.id, pet.id)
            if pet.image_key and pet.image_key != new_key:
                stale_key = pet.image_key
            pet.image_key = new_key

        for attr, value in updates.items():
            if value is None and attr in _REQUIRED_FIELDS:
                continue
            setattr(pet, attr, value)
        pet.updated_at = utcnow()
        await db.flush()

        if stale_key:
            run_after_commit(db, partial(delete_quietly, storage, stale_key))
        return serialize_pet(pet, storage)

    async def delete_pet(
        self,
        db: AsyncSession,
        user: User,
        customer_id: uuid.UUID,
        pet_id: uuid.UUID,
    ) -> None:
        customer = await ensure_customer(db, user.id, customer_id)
        pet = await ensure_pet(db, customer, pet_id)
        pet.is_deleted = True
        pet.updated_at = utcnow()
        await db.flush()
        logger.info("Pet %s soft-deleted", pet.id)

    async def create_image_upload_url(
        self,
        db: AsyncSession,
        storage: StorageClient,
        user: User,
        customer_id: uuid.UUID,
        pet_id: uuid.UUID,
        content_type: str,
    ) -> UploadUrlResponse:
        customer = await ensure_customer(db, user.id, customer_id)
        pet = await ensure_pet(db, customer, pet_id)
        content_type = storage_keys.validate_image_content_type(content_type)

        key = storage_keys.new_pet_profile_key(pet_storage_prefix(user, customer, pet))
        url = storage.presign_put(key, content_type, settings.upload_url_expires_seconds)
        return UploadUrlResponse(url=url, key=key)


pet_service = PetService()
