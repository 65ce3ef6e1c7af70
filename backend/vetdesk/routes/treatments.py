"""VetDesk Backend — Treatment Catalog Routes"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.database import get_db_session
from vetdesk.models import User
from vetdesk.routes.deps import AUTH_ERRORS, NOT_FOUND_ERRORS, get_current_user
from vetdesk.schemas.common import OkResponse
from vetdesk.schemas.treatment import (
    TreatmentCreate,
    TreatmentEnvelope,
    TreatmentListResponse,
    TreatmentUpdate,
)
from vetdesk.services.treatment_service import treatment_service

router = APIRouter(prefix="/api", tags=["Treatments"])


@router.get("/treatments", response_model=TreatmentListResponse, responses=AUTH_ERRORS)
async def list_treatments(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TreatmentListResponse:
    return TreatmentListResponse(treatments=await treatment_service.list_treatments(db, user))


@router.post(
    "/treatments",
    response_model=TreatmentEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=AUTH_ERRORS,
)
async def create_treatment(
    body: TreatmentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TreatmentEnvelope:
    return TreatmentEnvelope(treatment=await treatment_service.create_treatment(db, user, body))


@router.put("/treatments/{treatment_id}", response_model=TreatmentEnvelope, responses=NOT_FOUND_ERRORS)
async def update_treatment(
    treatment_id: UUID,
    body: TreatmentUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TreatmentEnvelope:
    treatment = await treatment_service.update_treatment(db, user, treatment_id, body)
    return TreatmentEnvelope(treatment=treatment)


@router.delete("/treatments/{treatment_id}", response_model=OkResponse, responses=NOT_FOUND_ERRORS)
async def delete_treatment(
    treatment_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OkResponse:
    await treatment_service.delete_treatment(db, user, treatment_id)
    return OkResponse()
