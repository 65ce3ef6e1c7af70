"""
VetDesk Backend — Treatment Catalog Service

CRUD for the clinic user's treatment catalog. Deleting a treatment is a
soft delete: visits that already used it keep their VisitTreatment rows,
but it can no longer be added to new visits.
"""

import logging
import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.exceptions import NotFoundError
from vetdesk.models import Treatment, User, utcnow
from vetdesk.schemas.treatment import TreatmentCreate, TreatmentResponse, TreatmentUpdate

logger = logging.getLogger(__name__)


class TreatmentService:

    async def _get_owned(self, db: AsyncSession, user: User, treatment_id: uuid.UUID) -> Treatment:
        result = await db.execute(
            select(Treatment).where(
                Treatment.id == treatment_id,
                Treatment.user_id == user.id,
                Treatment.is_deleted.is_(False),
            )
        )
        treatment = result.scalar_one_or_none()
        if treatment is None:
            raise NotFoundError(resource="treatment", resource_id=str(treatment_id))
        return treatment

    async def list_treatments(self, db: AsyncSession, user: User) -> List[TreatmentResponse]:
        result = await db.execute(
            select(Treatment)
            .where(Treatment.user_id == user.id, Treatment.is_deleted.is_(False))
            .order_by(Treatment.name)
        )
        return [TreatmentResponse.model_validate(t) for t in result.scalars().all()]

    async def create_treatment(self, db: AsyncSession, user: User, data: TreatmentCreate) -> TreatmentResponse:
        treatment = Treatment(user_id=user.id, **data.model_dump())
        db.add(treatment)
        await db.flush()
        logger.info("Treatment %s added to catalog of user %s", treatment.id, user.id)
        return TreatmentResponse.model_validate(treatment)

    async def update_treatment(
        self,
        db: AsyncSession,
        user: User,
        treatment_id: uuid.UUID,
        data: TreatmentUpdate,
    ) -> TreatmentResponse:
        treatment = await self._get_owned(db, user, treatment_id)
        for attr, value in data.model_dump(exclude_unset=True).items():
            if attr == "name" and value is None:
                continue
            setattr(treatment, attr, value)
        treatment.updated_at = utcnow()
        await db.flush()
        return TreatmentResponse.model_validate(treatment)

    async def delete_treatment(self, db: AsyncSession, user: User, treatment_id: uuid.UUID) -> None:
        treatment = await self._get_owned(db, user, treatment_id)
        treatment.is_deleted = True
        treatment.updated_at = utcnow()
        await db.flush()


treatment_service = TreatmentService()
