"""
Tests for the MinIO-backed object store.
"""

from unittest.mock import MagicMock

import pytest

from astro_api.core.storage import MinioObjectStore, ObjectStoreError


@pytest.fixture
def minio_client():
    return MagicMock()


class TestMinioObjectStore:
    """Tests for MinioObjectStore."""

    @pytest.mark.asyncio
    async def test_save_puts_object(self, minio_client):
        store = MinioObjectStore(minio_client, "applications")

        await store.save("applications/cv/1-cv.pdf", b"%PDF", "application/pdf")

        minio_client.put_object.assert_called_once()
        args, kwargs = minio_client.put_object.call_args
        assert args[0] == "applications"
        assert args[1] == "applications/cv/1-cv.pdf"
        assert args[2].read() == b"%PDF"
        assert args[3] == 4
        assert kwargs["content_type"] == "application/pdf"

    @pytest.mark.asyncio
    async def test_save_failure_raises_object_store_error(self, minio_client):
        minio_client.put_object.side_effect = ConnectionError("refused")
        store = MinioObjectStore(minio_client, "applications")

        with pytest.raises(ObjectStoreError):
            await store.save("applications/cv/1-cv.pdf", b"%PDF", "application/pdf")

    @pytest.mark.asyncio
    async def test_ensure_bucket_creates_missing_bucket(self, minio_client):
        minio_client.bucket_exists.return_value = False
        store = MinioObjectStore(minio_client, "applications")

        await store.ensure_bucket()

        minio_client.make_bucket.assert_called_once_with("applications")

    @pytest.mark.asyncio
    async def test_ensure_bucket_keeps_existing_bucket(self, minio_client):
        minio_client.bucket_exists.return_value = True
        store = MinioObjectStore(minio_client, "applications")

        await store.ensure_bucket()

        minio_client.make_bucket.assert_not_called()
