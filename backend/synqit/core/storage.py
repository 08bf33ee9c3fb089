# synqit/core/storage.py
"""
Image storage for profile pictures, project logos and banners.

Uploads are written through an `ImageStore`; the returned public URL is
what gets persisted on the user/project row. Removing a superseded image
is best effort.

The shipped store talks to S3 (or MinIO) through boto3. boto3 is
synchronous, so every client call runs in a worker thread.
"""
import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError
from fastapi import status

from synqit.core.errors import AppError

logger = logging.getLogger("uvicorn.error")

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

_MISSING_CODES = {"NoSuchKey", "NoSuchBucket", "404"}


class ImageStore(ABC):
    """Image store abstract base class"""

    @abstractmethod
    async def save(self, data: bytes, content_type: str, folder: str) -> str:
        """Persist the image and return its public URL"""
        pass

    @abstractmethod
    async def delete(self, url: str) -> None:
        """Remove a previously saved image by URL"""
        pass


def _normalize_endpoint(url: Optional[str]) -> Optional[str]:
    """boto3 wants a scheme on custom endpoints."""
    if not url:
        return None
    if url.startswith("http://") or url.startswith("https://"):
        return url.rstrip("/")
    return f"http://{url}".rstrip("/")


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3ImageStore(ImageStore):
    """
    Stores images as objects in one S3/MinIO bucket.

    Objects are keyed `<folder>/<uuid><ext>` and exposed at
    `<public_base_url>/<key>`. With no explicit public URL the store falls
    back to path-style addressing on the endpoint (`<endpoint>/<bucket>`),
    which is what MinIO serves for a public-read bucket.

    Args:
        bucket: Bucket name; created on first upload if missing
        endpoint_url: MinIO/S3-compatible endpoint, None for AWS S3
        public_base_url: Base of the URLs handed back to clients
        access_key, secret_key, region: Credentials for the boto3 session
        client: Pre-built S3 client (anything with the boto3 S3 methods)
    """

    def __init__(
        self,
        bucket: str,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        region: str = "us-east-1",
        client: Any = None,
    ):
        self.bucket = bucket
        self.endpoint_url = _normalize_endpoint(endpoint_url)
        if public_base_url:
            self.public_base_url = public_base_url.rstrip("/")
        elif self.endpoint_url:
            self.public_base_url = f"{self.endpoint_url}/{bucket}"
        else:
            self.public_base_url = f"https://{bucket}.s3.{region}.amazonaws.com"
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region
        self._client = client
        self._bucket_ready = False

    @property
    def client(self):
        if self._client is None:
            session = boto3.session.Session(
                aws_access_key_id=self.access_key,
                aws_secret_access_key=self.secret_key,
                region_name=self.region,
            )
            self._client = session.client(
                "s3",
                endpoint_url=self.endpoint_url,
                config=Config(signature_version="s3v4"),
            )
        return self._client

    def _ensure_bucket(self) -> None:
        if self._bucket_ready:
            return
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except ClientError as exc:
            if _error_code(exc) not in _MISSING_CODES:
                raise
            logger.info("[storage] creating bucket %s", self.bucket)
            self.client.create_bucket(Bucket=self.bucket)
        self._bucket_ready = True

    def _put(self, key: str, data: bytes, content_type: str) -> None:
        self._ensure_bucket()
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)

    def _remove(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _error_code(exc) not in _MISSING_CODES:
                raise

    def key_for(self, url: str) -> Optional[str]:
        """Object key behind one of our URLs, None for anything else."""
        prefix = self.public_base_url + "/"
        if not url.startswith(prefix):
            return None  # not ours (e.g. an external URL set through the profile form)
        key = url[len(prefix):]
        if not key or ".." in key.split("/"):
            return None
        return key

    async def save(self, data: bytes, content_type: str, folder: str) -> str:
        key = f"{folder.strip('/')}/{uuid.uuid4().hex}{_EXTENSIONS.get(content_type, '')}"
        await asyncio.to_thread(self._put, key, data, content_type)
        logger.info("[storage] stored %s (%d bytes)", key, len(data))
        return f"{self.public_base_url}/{key}"

    async def delete(self, url: str) -> None:
        key = self.key_for(url)
        if key is None:
            return
        await asyncio.to_thread(self._remove, key)


def build_image_store(settings) -> ImageStore:
    """Image store configured from application settings."""
    return S3ImageStore(
        bucket=settings.s3_bucket,
        endpoint_url=settings.s3_endpoint or None,
        public_base_url=settings.s3_public_url or None,
        access_key=settings.s3_access_key,
        secret_key=settings.s3_secret_key,
        region=settings.s3_region,
    )


def validate_image(data: bytes, content_type: str | None, allowed: list[str], max_mb: int) -> str:
    """Returns the content type when the upload is acceptable, raises AppError otherwise."""
    if not data:
        raise AppError("No file uploaded", status.HTTP_400_BAD_REQUEST)
    if content_type not in allowed:
        raise AppError(
            f"Unsupported file type; allowed: {', '.join(allowed)}",
            status.HTTP_400_BAD_REQUEST,
        )
    if len(data) > max_mb * 1024 * 1024:
        raise AppError(f"File too large; maximum is {max_mb}MB", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)
    return content_type


async def discard_quietly(store: ImageStore, url: str | None) -> None:
    """Delete a superseded image, logging rather than raising on failure."""
    if not url:
        return
    try:
        await store.delete(url)
    except Exception as exc:
        logger.warning("[storage] failed to delete superseded image %s: %s", url, exc)
