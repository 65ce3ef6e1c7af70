"""
VetDesk Backend — Visit Image Workflow Tests
==============================================

What we test:
    ✅ Upload URLs point under <pet prefix>/visits/<visit id>/
    ✅ Registering re-validates the key against the visit
    ✅ Deleting removes the object and soft-deletes the row
    ✅ A storage failure does not keep the row alive
    ✅ Wrong visit or foreign user: 404 and no storage call
"""

import uuid
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from vetdesk.exceptions import InvalidStorageKeyError, NotFoundError, ValidationError
from vetdesk.schemas.visit import VisitImageRegisterRequest, VisitImageUploadUrlRequest
from vetdesk.services.pet_service import pet_storage_prefix
from vetdesk.services.visit_image_service import visit_image_service
from vetdesk.services.visit_service import visit_service


@pytest.fixture
def visit_setup(user, make_customer, make_pet, make_visit, sample_dates):
    async def _setup(owner=None, customer_name="Dana Levi"):
        owner = owner or user
        customer = await make_customer(owner, name=customer_name)
        pet = await make_pet(customer)
        visit = await make_visit(pet, sample_dates["start"])
        return owner, customer, pet, visit
    return _setup


class TestUploadAndRegister:

    @pytest.mark.asyncio
    async def test_full_workflow(self, db_session, storage, visit_setup):
        owner, customer, pet, visit = await visit_setup()

        upload = await visit_image_service.create_upload_url(
            db_session, storage, owner, visit.id,
            VisitImageUploadUrlRequest(content_type="image/jpeg", original_name="xray.jpg"),
        )
        prefix = f"{pet_storage_prefix(owner, customer, pet)}/visits/{visit.id}/"
        assert upload.key.startswith(prefix)
        assert upload.key.endswith(".jpg")

        image = await visit_image_service.register_image(
            db_session, storage, owner, visit.id,
            VisitImageRegisterRequest(key=upload.key, original_name="xray.jpg", content_type="image/jpeg"),
        )
        details = await visit_service.get_visit(db_session, storage, owner, visit.id)

        assert image.url == f"https://storage.test/bucket/{upload.key}?op=get&expires=3600"
        assert [i.id for i in details.images] == [image.id]
        assert details.images[0].original_name == "xray.jpg"

    @pytest.mark.asyncio
    async def test_upload_url_rejects_unsupported_type(self, db_session, storage, visit_setup):
        owner, _, _, visit = await visit_setup()
        with pytest.raises(ValidationError):
            await visit_image_service.create_upload_url(
                db_session, storage, owner, visit.id,
                VisitImageUploadUrlRequest(content_type="image/gif"),
            )

    @pytest.mark.asyncio
    async def test_key_from_another_visit_is_rejected(
        self, db_session, storage, visit_setup, make_visit, sample_dates
    ):
        owner, customer, pet, visit = await visit_setup()
        sibling = await make_visit(pet, sample_dates["start"])
        upload = await visit_image_service.create_upload_url(
            db_session, storage, owner, sibling.id,
            VisitImageUploadUrlRequest(content_type="image/png"),
        )

        with pytest.raises(InvalidStorageKeyError):
            await visit_image_service.register_image(
                db_session, storage, owner, visit.id, VisitImageRegisterRequest(key=upload.key)
            )

    @pytest.mark.asyncio
    async def test_key_outside_prefix_is_rejected(self, db_session, storage, visit_setup):
        owner, _, _, visit = await visit_setup()
        with pytest.raises(InvalidStorageKeyError):
            await visit_image_service.register_image(
                db_session, storage, owner, visit.id,
                VisitImageRegisterRequest(key=f"somebody/else/entirely/visits/{visit.id}/a.png"),
            )


class TestDeleteImage:

    async def _registered(self, db_session, storage, owner, visit):
        upload = await visit_image_service.create_upload_url(
            db_session, storage, owner, visit.id,
            VisitImageUploadUrlRequest(content_type="image/webp"),
        )
        image = await visit_image_service.register_image(
            db_session, storage, owner, visit.id, VisitImageRegisterRequest(key=upload.key)
        )
        return image, upload.key

    @pytest.mark.asyncio
    async def test_delete_removes_object_and_row(self, db_session, storage, visit_setup):
        owner, _, _, visit = await visit_setup()
        image, key = await self._registered(db_session, storage, owner, visit)

        await visit_image_service.delete_image(db_session, storage, owner, visit.id, image.id)
        details = await visit_service.get_visit(db_session, storage, owner, visit.id)

        assert storage.deleted_keys == [key]
        assert details.images == []

    @pytest.mark.asyncio
    async def test_storage_failure_still_soft_deletes(self, db_session, storage, visit_setup):
        owner, _, _, visit = await visit_setup()
        image, _ = await self._registered(db_session, storage, owner, visit)
        failing = MagicMock()
        failing.delete_object.side_effect = ClientError(
            {"Error": {"Code": "InternalError", "Message": "boom"}}, "DeleteObject"
        )

        await visit_image_service.delete_image(db_session, failing, owner, visit.id, image.id)
        details = await visit_service.get_visit(db_session, storage, owner, visit.id)

        assert details.images == []

    @pytest.mark.asyncio
    async def test_image_of_another_visit_is_not_found(
        self, db_session, storage, visit_setup, make_visit, sample_dates
    ):
        owner, _, pet, visit = await visit_setup()
        image, _ = await self._registered(db_session, storage, owner, visit)
        sibling = await make_visit(pet, sample_dates["start"])

        with pytest.raises(NotFoundError):
            await visit_image_service.delete_image(db_session, storage, owner, sibling.id, image.id)
        assert storage.deleted_keys == []

    @pytest.mark.asyncio
    async def test_foreign_user_cannot_delete(self, db_session, storage, visit_setup, other_user):
        owner, _, _, visit = await visit_setup()
        image, _ = await self._registered(db_session, storage, owner, visit)

        with pytest.raises(NotFoundError):
            await visit_image_service.delete_image(db_session, storage, other_user, visit.id, image.id)
        assert storage.deleted_keys == []

    @pytest.mark.asyncio
    async def test_unknown_image_is_not_found(self, db_session, storage, visit_setup):
        owner, _, _, visit = await visit_setup()
        with pytest.raises(NotFoundError):
            await visit_image_service.delete_image(db_session, storage, owner, visit.id, uuid.uuid4())
