"""
Object Store

Stores uploaded files (CVs) in a MinIO / S3-compatible bucket.

The MinIO SDK is synchronous, so every call runs in a worker thread to
keep the event loop free while the upload is in flight.
"""

import asyncio
import io
import logging
from typing import Protocol

from fastapi import Request
from minio import Minio
from minio.error import S3Error

from astro_api.core.config import Settings

logger = logging.getLogger(__name__)


class ObjectStoreError(Exception):
    """Raised when the object store cannot complete an operation."""


class ObjectStore(Protocol):
    """Anything that can persist raw bytes under a path."""

    async def save(self, path: str, data: bytes, content_type: str) -> None: ...


class MinioObjectStore:
    """ObjectStore backed by a MinIO bucket."""

    def __init__(self, client: Minio, bucket: str):
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls, settings: Settings) -> "MinioObjectStore":
        client = Minio(
            endpoint=settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure,
        )
        return cls(client, settings.minio_bucket)

    async def ensure_bucket(self) -> None:
        """Create the bucket if it does not exist yet."""
        try:
            exists = await asyncio.to_thread(self.client.bucket_exists, self.bucket)
            if not exists:
                await asyncio.to_thread(self.client.make_bucket, self.bucket)
                logger.info(f"Created object store bucket '{self.bucket}'")
        except S3Error as e:
            raise ObjectStoreError(f"Failed to prepare bucket '{self.bucket}': {e}") from e

    async def save(self, path: str, data: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(
                self.client.put_object,
                self.bucket,
                path,
                io.BytesIO(data),
                len(data),
                content_type=content_type,
            )
        except Exception as e:
            raise ObjectStoreError(f"Failed to upload '{path}': {e}") from e


async def init_object_store(settings: Settings) -> MinioObjectStore:
    """
    Build the object store and make sure its bucket exists.

    Call this on application startup.
    """
    store = MinioObjectStore.from_settings(settings)
    await store.ensure_bucket()
    return store


def get_object_store(request: Request) -> ObjectStore | None:
    """
    FastAPI dependency returning the object store created at startup.

    Returns None if the store failed to initialize (tolerated outside
    production); submissions without a file still go through.
    """
    return getattr(request.app.state, "object_store", None)
