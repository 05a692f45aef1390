"""
Blob Storage - Where Uploaded Print Documents Live

Two interchangeable backends behind one protocol:
- LocalBlobStore: files on disk, served statically under /uploads
- S3BlobStore: S3-compatible bucket, referenced by object URL

Stored names are randomised (original extension kept); the original
filename is preserved on the DocumentReference for downloads.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Optional, Protocol

import aiofiles
import aiofiles.os
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from printdesk.errors import BlobStoreError, NotFoundError

logger = logging.getLogger(__name__)


# =============================================================================
# Storage Configuration
# =============================================================================

DEFAULT_UPLOAD_PATH: Final[str] = "data/uploads"
LOCAL_URL_PREFIX: Final[str] = "/uploads"

# Extension used when the client filename carries none we accept
EXTENSION_BY_MIME: Final[dict[str, str]] = {
    "application/pdf": ".pdf",
    "image/png": ".png",
    "image/jpeg": ".jpg",
}


@dataclass(frozen=True)
class StoredBlob:
    """Where a stored file can be found again."""

    locator: str
    filename: str
    size_bytes: int


def make_blob_name(originalname: str, content_type: str) -> str:
    """Random, filesystem-safe name that keeps a sensible extension."""
    ext = ""
    if "." in originalname:
        candidate = "." + originalname.rsplit(".", 1)[-1].lower()
        if candidate.isascii() and candidate[1:].isalnum() and len(candidate) <= 6:
            ext = candidate
    if not ext:
        ext = EXTENSION_BY_MIME.get(content_type, "")
    return f"{secrets.token_hex(12)}{ext}"


class BlobStore(Protocol):
    """Protocol for blob backends (local, S3-compatible)."""

    async def put(self, content: bytes, originalname: str, content_type: str) -> StoredBlob:
        """Store bytes and return their locator."""
        ...

    async def get(self, filename: str) -> bytes:
        """Return stored bytes. Raises NotFoundError if missing."""
        ...


# =============================================================================
# Local Disk
# =============================================================================


class LocalBlobStore:
    """
    Local filesystem blob storage.

    Files are written flat under storage_root and served by the web
    app's static mount at LOCAL_URL_PREFIX.
    """

    def __init__(self, storage_root: Optional[str] = None, url_prefix: str = LOCAL_URL_PREFIX):
        self._storage_root = Path(storage_root or DEFAULT_UPLOAD_PATH).resolve()
        self._url_prefix = url_prefix.rstrip("/")
        self._storage_root.mkdir(parents=True, exist_ok=True)

    @property
    def storage_root(self) -> Path:
        """Get storage root path."""
        return self._storage_root

    def _get_full_path(self, filename: str) -> Path:
        """Resolve a stored name, refusing anything outside storage_root."""
        full_path = (self._storage_root / filename).resolve()
        try:
            full_path.relative_to(self._storage_root)
        except ValueError as e:
            raise NotFoundError(f"Invalid blob name: {filename}") from e
        if full_path == self._storage_root:
            raise NotFoundError(f"Invalid blob name: {filename}")
        return full_path

    async def put(self, content: bytes, originalname: str, content_type: str) -> StoredBlob:
        filename = make_blob_name(originalname, content_type)
        path = self._get_full_path(filename)
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            raise BlobStoreError(f"Could not write {filename}: {e}") from e

        logger.debug("Stored %s (%d bytes) at %s", originalname, len(content), path)
        return StoredBlob(
            locator=f"{self._url_prefix}/{filename}",
            filename=filename,
            size_bytes=len(content),
        )

    async def get(self, filename: str) -> bytes:
        path = self._get_full_path(filename)
        if not await aiofiles.os.path.isfile(path):
            raise NotFoundError(f"File not found: {filename}")
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise BlobStoreError(f"Could not read {filename}: {e}") from e


# =============================================================================
# S3-Compatible Object Storage
# =============================================================================


class S3BlobStore:
    """
    S3-compatible blob storage (AWS S3, MinIO, Spaces).

    boto3 is synchronous; calls run in a worker thread.
    """

    def __init__(
        self,
        bucket: str,
        folder: str = "printing_documents",
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket
        self.folder = folder.strip("/")
        self.region = region
        self.endpoint_url = endpoint_url.rstrip("/") if endpoint_url else None
        if client is None:
            extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
            client = boto3.client(
                "s3",
                region_name=region,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                **extra,
            )
        self._client = client

    def _key(self, name: str) -> str:
        return f"{self.folder}/{name}" if self.folder else name

    def object_url(self, key: str) -> str:
        """Public URL for an object key."""
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def put(self, content: bytes, originalname: str, content_type: str) -> StoredBlob:
        key = self._key(make_blob_name(originalname, content_type))

        def _put() -> None:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
            )

        try:
            await asyncio.to_thread(_put)
        except (ClientError, BotoCoreError) as e:
            raise BlobStoreError(f"Upload of {key} failed: {e}") from e

        logger.debug("Uploaded %s to s3://%s/%s", originalname, self.bucket, key)
        return StoredBlob(locator=self.object_url(key), filename=key, size_bytes=len(content))

    async def get(self, filename: str) -> bytes:
        def _get() -> bytes:
            resp = self._client.get_object(Bucket=self.bucket, Key=filename)
            return resp["Body"].read()

        try:
            return await asyncio.to_thread(_get)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise NotFoundError(f"File not found: {filename}") from e
            raise BlobStoreError(f"Download of {filename} failed: {e}") from e
        except BotoCoreError as e:
            raise BlobStoreError(f"Download of {filename} failed: {e}") from e
