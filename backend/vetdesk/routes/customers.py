"""
VetDesk Backend — Customer and Pet Routes
===========================================

What:  CRUD for customers and their pets, plus the pet profile-image
       upload URL.
How:   Every handler resolves the current user and delegates to the
       service, which enforces the customer → pet ownership chain.
       Responses are wrapped: {customers}, {customer}, {pets}, {pet}.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.database import get_db_session
from vetdesk.models import User
from vetdesk.routes.deps import AUTH_ERRORS, NOT_FOUND_ERRORS, get_current_user
from vetdesk.schemas.common import ErrorResponse, OkResponse, UploadUrlResponse
from vetdesk.schemas.customer import (
    CustomerCreate,
    CustomerEnvelope,
    CustomerListResponse,
    CustomerUpdate,
    PetCreate,
    PetEnvelope,
    PetImageUploadUrlRequest,
    PetListResponse,
    PetUpdate,
)
from vetdesk.services.customer_service import customer_service
from vetdesk.services.pet_service import pet_service
from vetdesk.services.storage import StorageClient, get_storage_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Customers"])

BAD_KEY_ERRORS = {
    **NOT_FOUND_ERRORS,
    400: {"description": "Storage key or content type rejected", "model": ErrorResponse},
}


# ══════════════════════════════════════════════════════════════════════════
# Customers
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/customers",
    response_model=CustomerListResponse,
    responses=AUTH_ERRORS,
    summary="List customers",
    description="Customers of the current user ordered by name, each with its live pet count.",
)
async def list_customers(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CustomerListResponse:
    customers = await customer_service.list_customers(db, user)
    return CustomerListResponse(customers=customers)


@router.post(
    "/customers",
    response_model=CustomerEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=AUTH_ERRORS,
    summary="Create a customer",
)
async def create_customer(
    body: CustomerCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CustomerEnvelope:
    customer = await customer_service.create_customer(db, user, body)
    return CustomerEnvelope(customer=customer)


@router.get(
    "/customers/{customer_id}",
    response_model=CustomerEnvelope,
    responses=NOT_FOUND_ERRORS,
    summary="Get a customer",
)
async def get_customer(
    customer_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CustomerEnvelope:
    customer = await customer_service.get_customer(db, user, customer_id)
    return CustomerEnvelope(customer=customer)


@router.put(
    "/customers/{customer_id}",
    response_model=CustomerEnvelope,
    responses=NOT_FOUND_ERRORS,
    summary="Update a customer",
    description="Partial update: omitted fields are unchanged, null clears an optional field.",
)
async def update_customer(
    customer_id: UUID,
    body: CustomerUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CustomerEnvelope:
    customer = await customer_service.update_customer(db, user, customer_id, body)
    return CustomerEnvelope(customer=customer)


@router.delete(
    "/customers/{customer_id}",
    response_model=OkResponse,
    responses=NOT_FOUND_ERRORS,
    summary="Delete a customer (soft delete)",
)
async def delete_customer(
    customer_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OkResponse:
    await customer_service.delete_customer(db, user, customer_id)
    return OkResponse()


# ══════════════════════════════════════════════════════════════════════════
# Pets
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/customers/{customer_id}/pets",
    response_model=PetListResponse,
    responses=NOT_FOUND_ERRORS,
    summary="List a customer's pets",
)
async def list_pets(
    customer_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: StorageClient = Depends(get_storage_client),
) -> PetListResponse:
    pets = await pet_service.list_pets(db, storage, user, customer_id)
    return PetListResponse(pets=pets)


@router.post(
    "/customers/{customer_id}/pets",
    response_model=PetEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND_ERRORS,
    summary="Add a pet to a customer",
)
async def create_pet(
    customer_id: UUID,
    body: PetCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: StorageClient = Depends(get_storage_client),
) -> PetEnvelope:
    pet = await pet_service.create_pet(db, storage, user, customer_id, body)
    return PetEnvelope(pet=pet)


@router.get(
    "/customers/{customer_id}/pets/{pet_id}",
    response_model=PetEnvelope,
    responses=NOT_FOUND_ERRORS,
    summary="Get a pet",
)
async def get_pet(
    customer_id: UUID,
    pet_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: StorageClient = Depends(get_storage_client),
) -> PetEnvelope:
    pet = await pet_service.get_pet(db, storage, user, customer_id, pet_id)
    return PetEnvelope(pet=pet)


@router.put(
    "/customers/{customer_id}/pets/{pet_id}",
    response_model=PetEnvelope,
    responses=BAD_KEY_ERRORS,
    summary="Update a pet",
    description=(
        "Partial update. `imageUrl` takes the key returned by the upload-url endpoint "
        "(it must belong to this pet) or null to remove the profile image."
    ),
)
async def update_pet(
    customer_id: UUID,
    pet_id: UUID,
    body: PetUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: StorageClient = Depends(get_storage_client),
) -> PetEnvelope:
    pet = await pet_service.update_pet(db, storage, user, customer_id, pet_id, body)
    return PetEnvelope(pet=pet)


@router.delete(
    "/customers/{customer_id}/pets/{pet_id}",
    response_model=OkResponse,
    responses=NOT_FOUND_ERRORS,
    summary="Delete a pet (soft delete)",
)
async def delete_pet(
    customer_id: UUID,
    pet_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OkResponse:
    await pet_service.delete_pet(db, user, customer_id, pet_id)
    return OkResponse()


@router.post(
    "/customers/{customer_id}/pets/{pet_id}/image/upload-url",
    response_model=UploadUrlResponse,
    responses=BAD_KEY_ERRORS,
    summary="Get a presigned URL for a pet profile image",
    description="The URL accepts a PUT for 15 minutes. Allowed types: JPEG, PNG, WEBP.",
)
async def create_pet_image_upload_url(
    customer_id: UUID,
    pet_id: UUID,
    body: PetImageUploadUrlRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: StorageClient = Depends(get_storage_client),
) -> UploadUrlResponse:
    return await pet_service.create_image_upload_url(
        db, storage, user, customer_id, pet_id, body.content_type
    )
