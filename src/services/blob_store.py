"""Image storage on an S3-compatible object store (MinIO)."""

import base64
import binascii
import io
import logging
import mimetypes
import re
import uuid
from dataclasses import dataclass
from typing import Protocol

from minio import Minio

from src.config import get_settings
from src.exceptions import BlobStoreError, ValidationError

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(r"^data:(?P<content_type>image/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class StoredBlob:
    """Where an uploaded image lives: public URL plus the key to delete it."""

    url: str
    ref: str


class BlobStore(Protocol):
    def upload(self, data: str, folder: str) -> StoredBlob: ...

    def delete(self, ref: str) -> None: ...


def decode_image(data: str) -> tuple[bytes, str]:
    """Decode a base64 data URI (or bare base64) into bytes and a content type."""
    content_type = "application/octet-stream"
    payload = data.strip()
    match = DATA_URI_PATTERN.match(payload)
    if match:
        content_type = match.group("content_type")
        payload = match.group("data")

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("image is not valid base64 image data") from e
    if not raw:
        raise ValidationError("image is not valid base64 image data")
    return raw, content_type


class MinioBlobStore:
    """Blob store backed by a single MinIO bucket."""

    def __init__(self, client: Minio, bucket: str, base_url: str):
        self.client = client
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")

    def ensure_bucket(self) -> None:
        """Create the bucket if it does not exist yet."""
        if not self.client.bucket_exists(bucket_name=self.bucket):
            self.client.make_bucket(bucket_name=self.bucket)
            logger.info(f"Created bucket {self.bucket}")

    def upload(self, data: str, folder: str) -> StoredBlob:
        """Store an image and return its public URL and reference key."""
        raw, content_type = decode_image(data)
        extension = mimetypes.guess_extension(content_type) or ".bin"
        key = f"{folder}/{uuid.uuid4().hex}{extension}"

        try:
            self.client.put_object(
                bucket_name=self.bucket,
                object_name=key,
                data=io.BytesIO(raw),
                length=len(raw),
                content_type=content_type,
            )
        except Exception as e:
            logger.error(f"Failed to upload {key}: {e}")
            raise BlobStoreError(f"Image upload failed: {e}") from e

        logger.debug(f"Uploaded {len(raw)} bytes to {key}")
        return StoredBlob(url=f"{self.base_url}/{self.bucket}/{key}", ref=key)

    def delete(self, ref: str) -> None:
        """Remove a stored image."""
        try:
            self.client.remove_object(bucket_name=self.bucket, object_name=ref)
        except Exception as e:
            raise BlobStoreError(f"Image delete failed: {e}") from e


def delete_quietly(blobs: BlobStore, ref: str | None) -> None:
    """Delete a replaced blob; failures are logged and never block the caller."""
    if not ref:
        return
    try:
        blobs.delete(ref)
    except BlobStoreError as e:
        logger.warning(f"Could not delete old blob {ref}: {e.message}")


_blob_store: MinioBlobStore | None = None


def get_blob_store() -> BlobStore:
    """Get the shared MinIO blob store, creating the client on first use."""
    global _blob_store
    if _blob_store is None:
        settings = get_settings()
        client = Minio(
            settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure,
        )
        _blob_store = MinioBlobStore(client, settings.minio_bucket, settings.media_base_url)
    return _blob_store
