"""
VetDesk Backend — Visit Image Service
=======================================

What:  Presigned-upload workflow for images attached to a visit.

Workflow:
    1. POST /api/visits/{id}/images/upload-url {contentType, originalName?}
         → {url, key}; key = <pet prefix>/visits/<visit id>/<ms>-<hex><ext>
    2. Browser PUTs the file to `url` (valid 15 minutes)
    3. POST /api/visits/{id}/images {key, originalName?, contentType?}
         → key must sit under <pet prefix>/visits/<visit id>/, otherwise
           400 invalid_storage_key and nothing is written
    4. DELETE /api/visits/{id}/images/{imageId}
         → object removed from storage (best-effort), row soft-deleted

An image that does not belong to the addressed visit, or a visit the user
does not own, is a 404 before any storage call is made.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.config import settings
from vetdesk.exceptions import NotFoundError
from vetdesk.models import User, VisitImage
from vetdesk.schemas.common import UploadUrlResponse
from vetdesk.schemas.visit import (
    VisitImageRegisterRequest,
    VisitImageResponse,
    VisitImageUploadUrlRequest,
)
from vetdesk.services import storage_keys
from vetdesk.services.ownership import ensure_visit
from vetdesk.services.pet_service import pet_storage_prefix
from vetdesk.services.storage import StorageClient, delete_quietly
from vetdesk.services.visit_service import serialize_image

logger = logging.getLogger(__name__)


class VisitImageService:

    async def create_upload_url(
        self,
        db: AsyncSession,
        storage: StorageClient,
        user: User,
        visit_id: uuid.UUID,
        data: VisitImageUploadUrlRequest,
    ) -> UploadUrlResponse:
        context = await ensure_visit(db, user.id, visit_id)
        content_type = storage_keys.validate_image_content_type(data.content_type)

        prefix = pet_storage_prefix(user, context.customer, context.pet)
        key = storage_keys.new_visit_image_key(prefix, context.visit.id, content_type)
        url = storage.presign_put(key, content_type, settings.upload_url_expires_seconds)
        return UploadUrlResponse(url=url, key=key)

    async def register_image(
        self,
        db: AsyncSession,
        storage: StorageClient,
        user: User,
        visit_id: uuid.UUID,
        data: VisitImageRegisterRequest,
    ) -> VisitImageResponse:
        context = await ensure_visit(db, user.id, visit_id)
        storage_keys.ensure_visit_image_key(
            data.key,
            user_id=user.id,
            customer_id=context.customer.id,
            pet_id=context.pet.id,
            visit_id=context.visit.id,
        )
        content_type = None
        if data.content_type:
            content_type = storage_keys.validate_image_content_type(data.content_type)

        image = VisitImage(
            visit_id=context.visit.id,
            storage_key=data.key,
            original_name=data.original_name,
            content_type=content_type,
        )
        db.add(image)
        await db.flush()
        logger.info("Image %s registered on visit %s", image.id, visit_id)
        return serialize_image(image, storage)

    async def delete_image(
        self,
        db: AsyncSession,
        storage: StorageClient,
        user: User,
        visit_id: uuid.UUID,
        image_id: uuid.UUID,
    ) -> None:
        await ensure_visit(db, user.id, visit_id)
        result = await db.execute(
            select(VisitImage).where(
                VisitImage.id == image_id,
                VisitImage.visit_id == visit_id,
                VisitImage.is_deleted.is_(False),
            )
        )
        image = result.scalar_one_or_none()
        if image is None:
            raise NotFoundError(resource="image", resource_id=str(image_id))

        # The row is soft-deleted whether or not storage cooperated.
        await delete_quietly(storage, image.storage_key)
        image.is_deleted = True
        await db.flush()
        logger.info("Image %s removed from visit %s", image_id, visit_id)


visit_image_service = VisitImageService()
