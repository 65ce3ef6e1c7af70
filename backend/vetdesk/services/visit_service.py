"""
VetDesk Backend — Visit Service
=================================

What:  Scheduling and recording visits, with the treatments administered
       and free-text notes.
How:   Every operation passes the ownership chain first: creation checks
       customer → pet and every referenced catalog treatment; later calls
       resolve the visit through `ensure_visit`.

Transactions:
    The visit row, its treatments and its notes are flushed on the
    request's single session. They are committed together by the session
    dependency, or not at all.

Ordering:
    Visits of a pet: scheduledStartAt, newest first.
    Treatments, notes and images of a visit: creation order.
"""

import logging
import uuid
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.config import settings
from vetdesk.exceptions import NotFoundError, ValidationError
from vetdesk.models import (
    Treatment,
    User,
    Visit,
    VisitImage,
    VisitNote,
    VisitStatus,
    VisitTreatment,
    utcnow,
)
from vetdesk.models.base import to_utc
from vetdesk.schemas.visit import (
    VisitCreate,
    VisitImageResponse,
    VisitNoteInput,
    VisitNoteResponse,
    VisitResponse,
    VisitTreatmentInput,
    VisitTreatmentResponse,
    VisitUpdate,
    VisitWithDetailsResponse,
)
from vetdesk.services.ownership import (
    ensure_customer,
    ensure_pet,
    ensure_treatments,
    ensure_visit,
)
from vetdesk.services.storage import StorageClient

logger = logging.getLogger(__name__)

# Fields of VisitUpdate that are appended rather than assigned
_APPEND_FIELDS = {"treatments", "notes"}
_REQUIRED_FIELDS = {"scheduled_start_at", "status"}


def serialize_image(image: VisitImage, storage: StorageClient) -> VisitImageResponse:
    return VisitImageResponse(
        id=image.id,
        visit_id=image.visit_id,
        original_name=image.original_name,
        content_type=image.content_type,
        url=storage.presign_get(image.storage_key, settings.download_url_expires_seconds),
        created_at=image.created_at,
    )


def _check_schedule(start: datetime, end: Optional[datetime]) -> None:
    if end is not None and to_utc(end) < to_utc(start):
        raise ValidationError(
            message="scheduledEndAt must not be earlier than scheduledStartAt",
            field="scheduledEndAt",
        )


class VisitService:

    # ── Children ──────────────────────────────────────────────────────────

    def _add_treatments(self, db: AsyncSession, visit: Visit, items: Iterable[VisitTreatmentInput]) -> None:
        for item in items:
            db.add(
                VisitTreatment(
                    visit_id=visit.id,
                    treatment_id=item.treatment_id,
                    price_cents=item.price_cents,
                    next_due_date=item.next_due_date,
                )
            )

    def _add_notes(self, db: AsyncSession, visit: Visit, items: Iterable[VisitNoteInput]) -> None:
        for item in items:
            db.add(VisitNote(visit_id=visit.id, note=item.note))

    async def _details(
        self,
        db: AsyncSession,
        storage: StorageClient,
        visit: Visit,
    ) -> VisitWithDetailsResponse:
        treatment_rows = await db.execute(
            select(VisitTreatment, Treatment.name)
            .join(Treatment, Treatment.id == VisitTreatment.treatment_id)
            .where(VisitTreatment.visit_id == visit.id, VisitTreatment.is_deleted.is_(False))
            .order_by(VisitTreatment.created_at)
        )
        treatments = [
            VisitTreatmentResponse(
                id=vt.id,
                visit_id=vt.visit_id,
                treatment_id=vt.treatment_id,
                treatment_name=name,
                price_cents=vt.price_cents,
                next_due_date=vt.next_due_date,
                created_at=vt.created_at,
                updated_at=vt.updated_at,
            )
            for vt, name in treatment_rows.all()
        ]

        note_rows = await db.execute(
            select(VisitNote)
            .where(VisitNote.visit_id == visit.id, VisitNote.is_deleted.is_(False))
            .order_by(VisitNote.created_at)
        )
        notes = [VisitNoteResponse.model_validate(n) for n in note_rows.scalars().all()]

        image_rows = await db.execute(
            select(VisitImage)
            .where(VisitImage.visit_id == visit.id, VisitImage.is_deleted.is_(False))
            .order_by(VisitImage.created_at)
        )
        images = [serialize_image(i, storage) for i in image_rows.scalars().all()]

        return VisitWithDetailsResponse.model_validate(visit).model_copy(
            update={"treatments": treatments, "notes": notes, "images": images}
        )

    # ── Visits ────────────────────────────────────────────────────────────

    async def create_visit(self, db: AsyncSession, user: User, data: VisitCreate) -> VisitResponse:
        """
        Creates a visit with its initial treatments and notes.

        Raises:
            NotFoundError: customer, pet or a treatment is not the user's
            ValidationError: the visit ends before it starts
        """
        customer = await ensure_customer(db, user.id, data.customer_id)
        pet = await ensure_pet(db, customer, data.pet_id)
        await ensure_treatments(db, user.id, (t.treatment_id for t in data.treatments))
        _check_schedule(data.scheduled_start_at, data.scheduled_end_at)

        visit = Visit(
            customer_id=customer.id,
            pet_id=pet.id,
            status=data.status or VisitStatus.SCHEDULED,
            scheduled_start_at=data.scheduled_start_at,
            scheduled_end_at=data.scheduled_end_at,
            completed_at=data.completed_at,
            title=data.title,
            description=data.description,
        )
        db.add(visit)
        await db.flush()

        self._add_treatments(db, visit, data.treatments)
        self._add_notes(db, visit, data.notes)
        await db.flush()

        logger.info(
            "Visit %s created for pet %s (%d treatments, %d notes)",
            visit.id, pet.id, len(data.treatments), len(data.notes),
        )
        return VisitResponse.model_validate(visit)

    async def list_visits_for_pet(
        self,
        db: AsyncSession,
        user: User,
        customer_id: uuid.UUID,
        pet_id: uuid.UUID,
    ) -> List[VisitResponse]:
        customer = await ensure_customer(db, user.id, customer_id)
        pet = await ensure_pet(db, customer, pet_id)
        result = await db.execute(
            select(Visit)
            .where(
                Visit.pet_id == pet.id,
                Visit.customer_id == customer.id,
                Visit.is_deleted.is_(False),
            )
            .order_by(Visit.scheduled_start_at.desc())
        )
        return [VisitResponse.model_validate(v) for v in result.scalars().all()]

    async def get_visit(
        self,
        db: AsyncSession,
        storage: StorageClient,
        user: User,
        visit_id: uuid.UUID,
    ) -> VisitWithDetailsResponse:
        context = await ensure_visit(db, user.id, visit_id)
        return await self._details(db, storage, context.visit)

    async def update_visit(
        self,
        db: AsyncSession,
        storage: StorageClient,
        user: User,
        visit_id: uuid.UUID,
        data: VisitUpdate,
    ) -> VisitWithDetailsResponse:
        """Partial update of scalar fields; treatments and notes are appended."""
        context = await ensure_visit(db, user.id, visit_id)
        visit = context.visit
        await ensure_treatments(db, user.id, (t.treatment_id for t in data.treatments))

        # Fields present in the body; read as attributes so datetimes stay datetimes.
        for attr in sorted(data.model_fields_set - _APPEND_FIELDS):
            value = getattr(data, attr)
            if value is None and attr in _REQUIRED_FIELDS:
                continue
            setattr(visit, attr, value)
        _check_schedule(visit.scheduled_start_at, visit.scheduled_end_at)
        visit.updated_at = utcnow()

        self._add_treatments(db, visit, data.treatments)
        self._add_notes(db, visit, data.notes)
        await db.flush()
        return await self._details(db, storage, visit)

    async def delete_visit(self, db: AsyncSession, user: User, visit_id: uuid.UUID) -> None:
        context = await ensure_visit(db, user.id, visit_id)
        context.visit.is_deleted = True
        context.visit.updated_at = utcnow()
        await db.flush()
        logger.info("Visit %s soft-deleted", visit_id)

    # ── Attached rows ─────────────────────────────────────────────────────

    async def delete_visit_treatment(
        self,
        db: AsyncSession,
        user: User,
        visit_id: uuid.UUID,
        visit_treatment_id: uuid.UUID,
    ) -> None:
        await ensure_visit(db, user.id, visit_id)
        result = await db.execute(
            select(VisitTreatment).where(
                VisitTreatment.id == visit_treatment_id,
                VisitTreatment.visit_id == visit_id,
                VisitTreatment.is_deleted.is_(False),
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(resource="visit treatment", resource_id=str(visit_treatment_id))
        row.is_deleted = True
        row.updated_at = utcnow()
        await db.flush()

    async def delete_visit_note(
        self,
        db: AsyncSession,
        user: User,
        visit_id: uuid.UUID,
        note_id: uuid.UUID,
    ) -> None:
        await ensure_visit(db, user.id, visit_id)
        result = await db.execute(
            select(VisitNote).where(
                VisitNote.id == note_id,
                VisitNote.visit_id == visit_id,
                VisitNote.is_deleted.is_(False),
            )
        )
        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError(resource="visit note", resource_id=str(note_id))
        note.is_deleted = True
        note.updated_at = utcnow()
        await db.flush()


visit_service = VisitService()
