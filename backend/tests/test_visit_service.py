"""
VetDesk Backend — Visit Service Tests
=======================================

What we test:
    ✅ Visits are created with their treatments and notes
    ✅ Every treatment id goes through the ownership chain before any insert
    ✅ Pet visit lists are newest first and skip deleted visits
    ✅ Updates assign scalars and append treatments and notes
    ✅ Treatments and notes are removed individually
    ✅ A visit may not end before it starts
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from vetdesk.exceptions import NotFoundError, ValidationError
from vetdesk.models import Visit, VisitStatus
from vetdesk.schemas.visit import VisitCreate, VisitUpdate
from vetdesk.services.visit_service import visit_service


class TestCreateVisit:

    @pytest.mark.asyncio
    async def test_create_with_treatments_and_notes(
        self, db_session, storage, user, make_customer, make_pet, make_treatment, sample_dates
    ):
        customer = await make_customer(user)
        pet = await make_pet(customer)
        rabies = await make_treatment(user)
        data = VisitCreate.model_validate({
            "customerId": str(customer.id),
            "petId": str(pet.id),
            "scheduledStartAt": "2025-08-02T09:00:00.000Z",
            "title": "  Annual vaccine ",
            "treatments": [
                {"treatmentId": str(rabies.id), "priceCents": 12000, "nextDueDate": "2026-08-02"}
            ],
            "notes": [{"note": "  Calm during exam  "}],
        })

        visit = await visit_service.create_visit(db_session, user, data)
        details = await visit_service.get_visit(db_session, storage, user, visit.id)

        assert visit.status == VisitStatus.SCHEDULED
        assert visit.title == "Annual vaccine"
        assert visit.scheduled_start_at == sample_dates["start"]
        assert len(details.treatments) == 1
        assert details.treatments[0].treatment_name == "Rabies vaccine"
        assert details.treatments[0].price_cents == 12000
        assert details.treatments[0].next_due_date == sample_dates["due"]
        assert [n.note for n in details.notes] == ["Calm during exam"]
        assert details.images == []

    @pytest.mark.asyncio
    async def test_foreign_treatment_aborts_before_insert(
        self, db_session, user, other_user, make_customer, make_pet, make_treatment, sample_dates
    ):
        customer = await make_customer(user)
        pet = await make_pet(customer)
        theirs = await make_treatment(other_user)
        data = VisitCreate(
            customer_id=customer.id,
            pet_id=pet.id,
            scheduled_start_at=sample_dates["start"],
            treatments=[{"treatment_id": theirs.id}],
        )

        with pytest.raises(NotFoundError):
            await visit_service.create_visit(db_session, user, data)

        assert await db_session.scalar(select(func.count(Visit.id))) == 0

    @pytest.mark.asyncio
    async def test_pet_must_belong_to_customer(
        self, db_session, user, make_customer, make_pet, sample_dates
    ):
        dana = await make_customer(user, name="Dana")
        noa = await make_customer(user, name="Noa")
        pet = await make_pet(noa)

        with pytest.raises(NotFoundError):
            await visit_service.create_visit(
                db_session, user,
                VisitCreate(customer_id=dana.id, pet_id=pet.id, scheduled_start_at=sample_dates["start"]),
            )

    @pytest.mark.asyncio
    async def test_end_before_start_is_rejected(
        self, db_session, user, make_customer, make_pet, sample_dates
    ):
        pet = await make_pet(await make_customer(user))
        start = sample_dates["start"]

        with pytest.raises(ValidationError) as exc_info:
            await visit_service.create_visit(
                db_session, user,
                VisitCreate(
                    customer_id=pet.customer_id,
                    pet_id=pet.id,
                    scheduled_start_at=start,
                    scheduled_end_at=start - timedelta(minutes=30),
                ),
            )
        assert exc_info.value.field == "scheduledEndAt"


class TestListVisits:

    @pytest.mark.asyncio
    async def test_newest_first_without_deleted(
        self, db_session, user, make_customer, make_pet, make_visit, sample_dates
    ):
        customer = await make_customer(user)
        pet = await make_pet(customer)
        start = sample_dates["start"]
        older = await make_visit(pet, start - timedelta(days=30))
        newer = await make_visit(pet, start)
        await make_visit(pet, start + timedelta(days=1), is_deleted=True)

        visits = await visit_service.list_visits_for_pet(db_session, user, customer.id, pet.id)

        assert [v.id for v in visits] == [newer.id, older.id]


class TestUpdateVisit:

    @pytest.mark.asyncio
    async def test_scalars_assigned_children_appended(
        self, db_session, storage, user, make_customer, make_pet, make_visit, make_treatment, sample_dates
    ):
        pet = await make_pet(await make_customer(user))
        visit = await make_visit(pet, sample_dates["start"], title="Checkup")
        rabies = await make_treatment(user)
        await visit_service.update_visit(
            db_session, storage, user, visit.id,
            VisitUpdate.model_validate({"notes": [{"note": "first"}]}),
        )

        details = await visit_service.update_visit(
            db_session, storage, user, visit.id,
            VisitUpdate.model_validate({
                "status": "completed",
                "title": None,
                "treatments": [{"treatmentId": str(rabies.id)}],
                "notes": [{"note": "second"}],
            }),
        )

        assert details.status == VisitStatus.COMPLETED
        assert details.title is None
        assert details.scheduled_start_at == sample_dates["start"]
        assert len(details.treatments) == 1
        assert {n.note for n in details.notes} == {"first", "second"}

    @pytest.mark.asyncio
    async def test_reschedule_stores_datetimes(
        self, db_session, storage, user, make_customer, make_pet, make_visit, sample_dates
    ):
        start = sample_dates["start"]
        pet = await make_pet(await make_customer(user))
        visit = await make_visit(pet, start)

        details = await visit_service.update_visit(
            db_session, storage, user, visit.id,
            VisitUpdate.model_validate({
                "scheduledStartAt": "2025-08-03T09:00:00Z",
                "completedAt": "2025-08-03T09:45:00Z",
            }),
        )

        assert isinstance(visit.scheduled_start_at, datetime)
        assert details.scheduled_start_at == start + timedelta(days=1)
        assert details.completed_at == start + timedelta(days=1, minutes=45)
        assert details.model_dump(mode="json", by_alias=True)["scheduledStartAt"] == "2025-08-03T09:00:00.000Z"

    @pytest.mark.asyncio
    async def test_moving_start_after_end_is_rejected(
        self, db_session, storage, user, make_customer, make_pet, make_visit, sample_dates
    ):
        start = sample_dates["start"]
        pet = await make_pet(await make_customer(user))
        visit = await make_visit(pet, start, scheduled_end_at=start + timedelta(hours=1))

        with pytest.raises(ValidationError):
            await visit_service.update_visit(
                db_session, storage, user, visit.id,
                VisitUpdate(scheduled_start_at=start + timedelta(hours=2)),
            )

    @pytest.mark.asyncio
    async def test_foreign_visit_is_not_found(
        self, db_session, storage, user, other_user, make_customer, make_pet, make_visit, sample_dates
    ):
        pet = await make_pet(await make_customer(other_user))
        visit = await make_visit(pet, sample_dates["start"])

        with pytest.raises(NotFoundError):
            await visit_service.update_visit(db_session, storage, user, visit.id, VisitUpdate(title="x"))


class TestDeleteVisitParts:

    async def _visit_with_children(self, db_session, storage, user, make_customer, make_pet, make_treatment, start):
        pet = await make_pet(await make_customer(user))
        rabies = await make_treatment(user)
        created = await visit_service.create_visit(
            db_session, user,
            VisitCreate.model_validate({
                "customerId": str(pet.customer_id),
                "petId": str(pet.id),
                "scheduledStartAt": start.isoformat(),
                "treatments": [{"treatmentId": str(rabies.id)}],
                "notes": [{"note": "keep me out"}],
            }),
        )
        return await visit_service.get_visit(db_session, storage, user, created.id)

    @pytest.mark.asyncio
    async def test_delete_treatment_and_note(
        self, db_session, storage, user, make_customer, make_pet, make_treatment, sample_dates
    ):
        details = await self._visit_with_children(
            db_session, storage, user, make_customer, make_pet, make_treatment, sample_dates["start"]
        )

        await visit_service.delete_visit_treatment(db_session, user, details.id, details.treatments[0].id)
        await visit_service.delete_visit_note(db_session, user, details.id, details.notes[0].id)
        after = await visit_service.get_visit(db_session, storage, user, details.id)

        assert after.treatments == []
        assert after.notes == []

    @pytest.mark.asyncio
    async def test_note_of_another_visit_is_not_found(
        self, db_session, storage, user, make_customer, make_pet, make_treatment, make_visit, sample_dates
    ):
        details = await self._visit_with_children(
            db_session, storage, user, make_customer, make_pet, make_treatment, sample_dates["start"]
        )
        pet = await make_pet(await make_customer(user, name="Noa"), name="Mitzi")
        other_visit = await make_visit(pet, sample_dates["start"])

        with pytest.raises(NotFoundError):
            await visit_service.delete_visit_note(db_session, user, other_visit.id, details.notes[0].id)

    @pytest.mark.asyncio
    async def test_deleted_visit_is_gone(
        self, db_session, storage, user, make_customer, make_pet, make_visit, sample_dates
    ):
        pet = await make_pet(await make_customer(user))
        visit = await make_visit(pet, sample_dates["start"])

        await visit_service.delete_visit(db_session, user, visit.id)

        with pytest.raises(NotFoundError):
            await visit_service.get_visit(db_session, storage, user, visit.id)
