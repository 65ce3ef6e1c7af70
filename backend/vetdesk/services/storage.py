"""
VetDesk Backend — Object Storage Clients
==========================================

What:  Presigned upload/download URLs and object deletion for pet and
       visit images.
Why:   Image bytes never pass through the API. The browser PUTs straight to
       S3 with a short-lived URL and the API only stores the key.
How:   `StorageClient` is the protocol the services depend on.
       `S3StorageClient` implements it with boto3; `InMemoryStorageClient`
       fabricates URLs for local development and tests.
Who:   Resolved per request through `get_storage_client()` (a FastAPI
       dependency the tests override).

Failure policy:
    Presigning failures raise StorageError (502); the request cannot
    continue without a URL. Deletes are best-effort: `delete_quietly()`
    retries transient S3 errors with exponential backoff + jitter, then
    logs and gives up so the database change still goes through.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from vetdesk.config import settings
from vetdesk.exceptions import StorageError

logger = logging.getLogger(__name__)


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def presign_put(self, key: str, content_type: str, expires_in: int) -> str:
        ...

    def presign_get(self, key: str, expires_in: int) -> str:
        ...

    def delete_object(self, key: str) -> None:
        ...


@dataclass
class InMemoryStorageClient:
    """
    Storage stand-in for local development and tests.

    URLs point at `base_url` and carry the operation and expiry in the query
    string; deletes are recorded in `deleted_keys`.
    """

    base_url: str = "https://storage.test/vetdesk"
    deleted_keys: List[str] = field(default_factory=list)

    def presign_put(self, key: str, content_type: str, expires_in: int) -> str:
        return f"{self.base_url}/{key}?op=put&contentType={content_type}&expires={expires_in}"

    def presign_get(self, key: str, expires_in: int) -> str:
        return f"{self.base_url}/{key}?op=get&expires={expires_in}"

    def delete_object(self, key: str) -> None:
        self.deleted_keys.append(key)


@dataclass
class S3StorageClient:
    """S3 (or S3-compatible) storage client."""

    bucket: str
    region: str
    endpoint_url: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None

    def __post_init__(self):
        config = Config(signature_version="s3v4")
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def presign_put(self, key: str, content_type: str, expires_in: int) -> str:
        # ContentType is signed, so the browser must send the same header.
        try:
            return self._client.generate_presigned_url(
                ClientMethod="put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(context={"key": key, "operation": "put", "error": str(e)}) from e

    def presign_get(self, key: str, expires_in: int) -> str:
        try:
            return self._client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(context={"key": key, "operation": "get", "error": str(e)}) from e

    @retry(
        retry=retry_if_exception_type((BotoCoreError, ClientError)),
        stop=stop_after_attempt(settings.storage_retry_max_attempts),
        # min_wait * 2^n, capped at max_wait, plus up to min_wait of jitter
        wait=wait_exponential(
            multiplier=settings.storage_retry_min_wait,
            max=settings.storage_retry_max_wait,
        ) + wait_random(0, settings.storage_retry_min_wait),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def delete_object(self, key: str) -> None:
        self._client.delete_object(Bucket=self.bucket, Key=key)


async def delete_quietly(storage: StorageClient, key: Optional[str]) -> bool:
    """
    Deletes `key` without letting a storage failure abort the request.

    Returns True when the object was deleted. The blocking boto3 call runs
    in the thread pool.
    """
    if not key:
        return False
    try:
        await run_in_threadpool(storage.delete_object, key)
    except Exception as e:
        logger.warning("Could not delete storage object %s: %s", key, str(e))
        return False
    logger.info("Deleted storage object %s", key)
    return True


@lru_cache
def _build_storage_client() -> StorageClient:
    if settings.use_in_memory_storage or not settings.s3_bucket:
        if not settings.use_in_memory_storage:
            logger.warning("S3_BUCKET is not set; falling back to in-memory storage")
        return InMemoryStorageClient(base_url=settings.in_memory_storage_base_url)
    return S3StorageClient(
        bucket=settings.s3_bucket,
        region=settings.s3_region,
        endpoint_url=settings.s3_endpoint_url,
        access_key_id=settings.s3_access_key_id,
        secret_access_key=settings.s3_secret_access_key,
    )


def get_storage_client() -> StorageClient:
    """FastAPI dependency returning the process-wide storage client."""
    return _build_storage_client()


def storage_mode() -> str:
    """Reported by the health check: s3 or in_memory."""
    return "in_memory" if isinstance(_build_storage_client(), InMemoryStorageClient) else "s3"
