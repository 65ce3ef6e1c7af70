"""
VetDesk Backend — Customer and Pet Service Tests
==================================================

What we test:
    ✅ Customers are listed by name with a count of live pets
    ✅ Partial updates: omitted fields kept, null clears, blank names ignored
    ✅ Soft-deleted customers disappear from lists and lookups
    ✅ Pet profile images: key validation, stale object removed only after commit, presigned URLs
"""

import pytest

from vetdesk.database import run_after_commit_callbacks
from vetdesk.exceptions import InvalidStorageKeyError, NotFoundError, ValidationError
from vetdesk.models import PetType
from vetdesk.schemas.customer import CustomerCreate, CustomerUpdate, PetCreate, PetUpdate
from vetdesk.services import storage_keys
from vetdesk.services.customer_service import customer_service
from vetdesk.services.pet_service import pet_service, pet_storage_prefix


class TestCustomerService:

    @pytest.mark.asyncio
    async def test_list_orders_by_name_and_counts_live_pets(
        self, db_session, user, other_user, make_customer, make_pet
    ):
        noa = await make_customer(user, name="Noa")
        dana = await make_customer(user, name="Dana")
        await make_customer(other_user, name="Avi")
        await make_pet(dana, name="Rex")
        await make_pet(dana, name="Luna", is_deleted=True)
        await make_pet(noa, name="Mitzi")
        await make_pet(noa, name="Shadow")

        customers = await customer_service.list_customers(db_session, user)

        assert [c.name for c in customers] == ["Dana", "Noa"]
        assert [c.pets_count for c in customers] == [1, 2]

    @pytest.mark.asyncio
    async def test_create_normalizes_optional_text(self, db_session, user):
        data = CustomerCreate(name="  Dana Levi ", email="  ", phone=" 050-1234567 ")

        customer = await customer_service.create_customer(db_session, user, data)

        assert customer.name == "Dana Levi"
        assert customer.email is None
        assert customer.phone == "050-1234567"
        assert customer.pets_count == 0

    @pytest.mark.asyncio
    async def test_partial_update(self, db_session, user, make_customer):
        customer = await make_customer(user, phone="050-1234567", address="Herzl 1")

        updated = await customer_service.update_customer(
            db_session, user, customer.id, CustomerUpdate.model_validate({"address": None, "name": None})
        )

        assert updated.name == "Dana Levi"
        assert updated.phone == "050-1234567"
        assert updated.address is None

    @pytest.mark.asyncio
    async def test_delete_hides_customer(self, db_session, user, make_customer):
        customer = await make_customer(user)

        await customer_service.delete_customer(db_session, user, customer.id)

        assert await customer_service.list_customers(db_session, user) == []
        with pytest.raises(NotFoundError):
            await customer_service.get_customer(db_session, user, customer.id)

    @pytest.mark.asyncio
    async def test_update_of_foreign_customer_is_not_found(
        self, db_session, user, other_user, make_customer
    ):
        customer = await make_customer(other_user)
        with pytest.raises(NotFoundError):
            await customer_service.update_customer(
                db_session, user, customer.id, CustomerUpdate(name="Mine now")
            )


class TestPetService:

    @pytest.mark.asyncio
    async def test_create_and_list(self, db_session, storage, user, make_customer):
        customer = await make_customer(user)
        data = PetCreate.model_validate({"name": "Rex", "type": "dog", "gender": "male", "breed": " "})

        created = await pet_service.create_pet(db_session, storage, user, customer.id, data)
        pets = await pet_service.list_pets(db_session, storage, user, customer.id)

        assert created.breed is None
        assert created.image_url is None
        assert [p.id for p in pets] == [created.id]

    @pytest.mark.asyncio
    async def test_upload_url_key_sits_under_pet_prefix(
        self, db_session, storage, user, make_customer, make_pet
    ):
        customer = await make_customer(user)
        pet = await make_pet(customer)

        upload = await pet_service.create_image_upload_url(
            db_session, storage, user, customer.id, pet.id, "image/png"
        )

        assert upload.key.startswith(pet_storage_prefix(user, customer, pet) + "/profile-")
        assert "op=put" in upload.url
        assert "contentType=image/png" in upload.url
        assert "expires=900" in upload.url

    @pytest.mark.asyncio
    async def test_upload_url_rejects_unsupported_type(
        self, db_session, storage, user, make_customer, make_pet
    ):
        customer = await make_customer(user)
        pet = await make_pet(customer)
        with pytest.raises(ValidationError):
            await pet_service.create_image_upload_url(
                db_session, storage, user, customer.id, pet.id, "application/pdf"
            )

    @pytest.mark.asyncio
    async def test_setting_image_presigns_download(self, db_session, storage, user, make_customer, make_pet):
        customer = await make_customer(user)
        pet = await make_pet(customer)
        key = storage_keys.new_pet_profile_key(pet_storage_prefix(user, customer, pet))

        updated = await pet_service.update_pet(
            db_session, storage, user, customer.id, pet.id, PetUpdate.model_validate({"imageUrl": key})
        )

        assert pet.image_key == key
        assert updated.image_url == f"https://storage.test/bucket/{key}?op=get&expires=3600"
        assert storage.deleted_keys == []

    @pytest.mark.asyncio
    async def test_replacing_image_deletes_previous_object(
        self, db_session, storage, user, make_customer, make_pet
    ):
        customer = await make_customer(user)
        pet = await make_pet(customer)
        prefix = pet_storage_prefix(user, customer, pet)
        old_key = f"{prefix}/profile-1000"
        new_key = f"{prefix}/profile-2000"
        pet.image_key = old_key
        await db_session.flush()

        await pet_service.update_pet(
            db_session, storage, user, customer.id, pet.id, PetUpdate.model_validate({"imageUrl": new_key})
        )

        assert pet.image_key == new_key
        assert storage.deleted_keys == []

        await db_session.commit()
        await run_after_commit_callbacks(db_session)
        assert storage.deleted_keys == [old_key]

    @pytest.mark.asyncio
    async def test_null_image_clears_and_deletes(self, db_session, storage, user, make_customer, make_pet):
        customer = await make_customer(user)
        pet = await make_pet(customer)
        old_key = f"{pet_storage_prefix(user, customer, pet)}/profile-1000"
        pet.image_key = old_key
        await db_session.flush()

        updated = await pet_service.update_pet(
            db_session, storage, user, customer.id, pet.id, PetUpdate.model_validate({"imageUrl": None})
        )

        assert updated.image_url is None
        assert pet.image_key is None
        await db_session.commit()
        await run_after_commit_callbacks(db_session)
        assert storage.deleted_keys == [old_key]

    @pytest.mark.asyncio
    async def test_foreign_key_is_rejected_and_nothing_changes(
        self, db_session, storage, user, make_customer, make_pet
    ):
        customer = await make_customer(user)
        pet = await make_pet(customer)
        other_pet = await make_pet(customer, name="Luna")
        foreign_key = f"{pet_storage_prefix(user, customer, other_pet)}/profile-1000"

        with pytest.raises(InvalidStorageKeyError):
            await pet_service.update_pet(
                db_session, storage, user, customer.id, pet.id,
                PetUpdate.model_validate({"imageUrl": foreign_key, "name": "Renamed"}),
            )

        assert pet.image_key is None
        assert pet.name == "Rex"
        assert storage.deleted_keys == []

    @pytest.mark.asyncio
    async def test_partial_update_keeps_required_fields(
        self, db_session, storage, user, make_customer, make_pet
    ):
        customer = await make_customer(user)
        pet = await make_pet(customer, breed="Labrador")

        updated = await pet_service.update_pet(
            db_session, storage, user, customer.id, pet.id,
            PetUpdate.model_validate({"type": None, "breed": None, "isSterilized": True}),
        )

        assert updated.type == PetType.DOG
        assert updated.breed is None
        assert updated.is_sterilized is True

    @pytest.mark.asyncio
    async def test_pet_of_foreign_customer_is_not_found(
        self, db_session, storage, user, other_user, make_customer, make_pet
    ):
        customer = await make_customer(other_user)
        pet = await make_pet(customer)
        with pytest.raises(NotFoundError):
            await pet_service.get_pet(db_session, storage, user, customer.id, pet.id)

    @pytest.mark.asyncio
    async def test_delete_hides_pet(self, db_session, storage, user, make_customer, make_pet):
        customer = await make_customer(user)
        pet = await make_pet(customer)

        await pet_service.delete_pet(db_session, user, customer.id, pet.id)

        assert await pet_service.list_pets(db_session, storage, user, customer.id) == []
