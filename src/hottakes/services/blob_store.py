# src/hottakes/services/blob_store.py
"""Object storage for uploaded profile pictures."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath

from hottakes.core.errors import STORAGE_FAILURE, DataServiceError

__all__ = ["BlobStore", "FileSystemBlobStore"]

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """Contract of the blob store used for profile pictures."""

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: str,
        overwrite: bool = False,
    ) -> None:
        """Store ``data`` under ``bucket/path``."""

    @abstractmethod
    def get_public_url(self, bucket: str, path: str) -> str:
        """Return the public URL of a stored object."""


class FileSystemBlobStore(BlobStore):
    """Local development store: blobs live below a media root that the web app
    serves statically. Hosted deployments plug an object-storage client in
    behind the same contract.
    """

    def __init__(self, root: str | Path, url_prefix: str = "/media") -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts or not relative.parts:
            raise DataServiceError(STORAGE_FAILURE, f"Invalid object path {path!r}")
        if not bucket or "/" in bucket or bucket in {".", ".."}:
            raise DataServiceError(STORAGE_FAILURE, f"Invalid bucket {bucket!r}")
        return self.root / bucket / Path(*relative.parts)

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: str,
        overwrite: bool = False,
    ) -> None:
        target = self._resolve(bucket, path)
        if target.exists() and not overwrite:
            raise DataServiceError(STORAGE_FAILURE, f"The resource {bucket}/{path} already exists")
        try:
            await asyncio.to_thread(self._write, target, data)
        except OSError as exc:
            raise DataServiceError(STORAGE_FAILURE, f"Upload failed: {exc}") from exc
        logger.info("Stored %s/%s (%s, %d bytes)", bucket, path, content_type, len(data))

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def get_public_url(self, bucket: str, path: str) -> str:
        self._resolve(bucket, path)
        return f"{self.url_prefix}/{bucket}/{path}"
