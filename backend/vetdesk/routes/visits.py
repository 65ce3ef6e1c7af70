"""
VetDesk Backend — Visit Routes
================================

What:  Visits, the treatments and notes recorded on them, and the visit
       image upload workflow.
How:   Handlers delegate to VisitService / VisitImageService; the visit is
       always resolved through the ownership chain, so another user's
       visit id behaves exactly like an unknown one (404).
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.database import get_db_session
from vetdesk.models import User
from vetdesk.routes.deps import NOT_FOUND_ERRORS, get_current_user
from vetdesk.schemas.common import ErrorResponse, OkResponse, UploadUrlResponse
from vetdesk.schemas.visit import (
    VisitCreate,
    VisitDetailsEnvelope,
    VisitEnvelope,
    VisitImageEnvelope,
    VisitImageRegisterRequest,
    VisitImageUploadUrlRequest,
    VisitListResponse,
    VisitUpdate,
)
from vetdesk.services.storage import StorageClient, get_storage_client
from vetdesk.services.visit_image_service import visit_image_service
from vetdesk.services.visit_service import visit_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Visits"])

VALIDATION_ERRORS = {
    **NOT_FOUND_ERRORS,
    400: {"description": "Business rule violated", "model": ErrorResponse},
}


# ══════════════════════════════════════════════════════════════════════════
# Visits
# ══════════════════════════════════════════════════════════════════════════


@router.post(
    "/visits",
    response_model=VisitEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=VALIDATION_ERRORS,
    summary="Schedule or record a visit",
    description=(
        "Creates a visit for a customer's pet together with its initial treatments and "
        "notes, in one transaction. Every treatment must come from the user's catalog."
    ),
)
async def create_visit(
    body: VisitCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> VisitEnvelope:
    visit = await visit_service.create_visit(db, user, body)
    return VisitEnvelope(visit=visit)


@router.get(
    "/customers/{customer_id}/pets/{pet_id}/visits",
    response_model=VisitListResponse,
    responses=NOT_FOUND_ERRORS,
    summary="List a pet's visits, newest first",
)
async def list_pet_visits(
    customer_id: UUID,
    pet_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> VisitListResponse:
    visits = await visit_service.list_visits_for_pet(db, user, customer_id, pet_id)
    return VisitListResponse(visits=visits)


@router.get(
    "/visits/{visit_id}",
    response_model=VisitDetailsEnvelope,
    responses=NOT_FOUND_ERRORS,
    summary="Get a visit with treatments, notes and images",
)
async def get_visit(
    visit_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: StorageClient = Depends(get_storage_client),
) -> VisitDetailsEnvelope:
    visit = await visit_service.get_visit(db, storage, user, visit_id)
    return VisitDetailsEnvelope(visit=visit)


@router.put(
    "/visits/{visit_id}",
    response_model=VisitDetailsEnvelope,
    responses=VALIDATION_ERRORS,
    summary="Update a visit",
    description="Partial update of visit fields; `treatments` and `notes` are appended.",
)
async def update_visit(
    visit_id: UUID,
    body: VisitUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: StorageClient = Depends(get_storage_client),
) -> VisitDetailsEnvelope:
    visit = await visit_service.update_visit(db, storage, user, visit_id, body)
    return VisitDetailsEnvelope(visit=visit)


@router.delete(
    "/visits/{visit_id}",
    response_model=OkResponse,
    responses=NOT_FOUND_ERRORS,
    summary="Delete a visit (soft delete)",
)
async def delete_visit(
    visit_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OkResponse:
    await visit_service.delete_visit(db, user, visit_id)
    return OkResponse()


@router.delete(
    "/visits/{visit_id}/treatments/{visit_treatment_id}",
    response_model=OkResponse,
    responses=NOT_FOUND_ERRORS,
    summary="Remove a treatment from a visit",
)
async def delete_visit_treatment(
    visit_id: UUID,
    visit_treatment_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OkResponse:
    await visit_service.delete_visit_treatment(db, user, visit_id, visit_treatment_id)
    return OkResponse()


@router.delete(
    "/visits/{visit_id}/notes/{note_id}",
    response_model=OkResponse,
    responses=NOT_FOUND_ERRORS,
    summary="Remove a note from a visit",
)
async def delete_visit_note(
    visit_id: UUID,
    note_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OkResponse:
    await visit_service.delete_visit_note(db, user, visit_id, note_id)
    return OkResponse()


# ══════════════════════════════════════════════════════════════════════════
# Visit Images
# ══════════════════════════════════════════════════════════════════════════


@router.post(
    "/visits/{visit_id}/images/upload-url",
    response_model=UploadUrlResponse,
    responses=VALIDATION_ERRORS,
    summary="Get a presigned URL for a visit image",
    description="The URL accepts a PUT for 15 minutes. Allowed types: JPEG, PNG, WEBP.",
)
async def create_visit_image_upload_url(
    visit_id: UUID,
    body: VisitImageUploadUrlRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: StorageClient = Depends(get_storage_client),
) -> UploadUrlResponse:
    return await visit_image_service.create_upload_url(db, storage, user, visit_id, body)


@router.post(
    "/visits/{visit_id}/images",
    response_model=VisitImageEnvelope,
    responses=VALIDATION_ERRORS,
    summary="Attach an uploaded image to a visit",
    description="The key must come from this visit's upload-url endpoint (400 invalid_storage_key otherwise).",
)
async def register_visit_image(
    visit_id: UUID,
    body: VisitImageRegisterRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: StorageClient = Depends(get_storage_client),
) -> VisitImageEnvelope:
    image = await visit_image_service.register_image(db, storage, user, visit_id, body)
    return VisitImageEnvelope(image=image)


@router.delete(
    "/visits/{visit_id}/images/{image_id}",
    response_model=OkResponse,
    responses=NOT_FOUND_ERRORS,
    summary="Delete a visit image",
    description="Removes the stored object (best-effort) and soft-deletes the image.",
)
async def delete_visit_image(
    visit_id: UUID,
    image_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: StorageClient = Depends(get_storage_client),
) -> OkResponse:
    await visit_image_service.delete_image(db, storage, user, visit_id, image_id)
    return OkResponse()
