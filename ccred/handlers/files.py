"""
File-blob storage for field-data uploads.
"""

import logging
import uuid
from pathlib import Path
from typing import List

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from ccred.core.config import get_settings
from ccred.core.exceptions import ValidationError
from ccred.models.common import UploadedFile
from ccred.utils.hashing import sha256_hexdigest

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class FileStore:
    """Writes uploaded blobs under a root directory and describes them."""

    def __init__(self, root: str | Path, max_size_bytes: int):
        self.root = Path(root)
        self.max_size_bytes = max_size_bytes

    async def save(self, upload: UploadFile) -> UploadedFile:
        """
        Persist one uploaded file.

        The blob is stored under a random name so client file names never
        collide or escape the root. Files over the size limit are refused.
        """
        self.root.mkdir(parents=True, exist_ok=True)
        target = self.root / uuid.uuid4().hex

        data = bytearray()
        while chunk := await upload.read(CHUNK_SIZE):
            data.extend(chunk)
            if len(data) > self.max_size_bytes:
                raise ValidationError(
                    f"File {upload.filename} exceeds the {self.max_size_bytes // (1024 * 1024)} MB limit"
                )

        await run_in_threadpool(target.write_bytes, bytes(data))

        logger.debug("Stored %s (%d bytes) at %s", upload.filename, len(data), target)
        return UploadedFile(
            name=upload.filename or target.name,
            type=upload.content_type,
            size=len(data),
            path=str(target),
            checksum=sha256_hexdigest(bytes(data)),
        )

    async def save_all(self, uploads: List[UploadFile]) -> List[UploadedFile]:
        """Persist every file, or none: blobs already written are removed if one fails."""
        stored: List[UploadedFile] = []
        try:
            for upload in uploads:
                stored.append(await self.save(upload))
        except Exception:
            await self.discard(stored)
            raise
        return stored

    async def discard(self, stored: List[UploadedFile]) -> None:
        """Remove blobs written for an upload that was not recorded."""
        for item in stored:
            await run_in_threadpool(Path(item.path).unlink, missing_ok=True)
        if stored:
            logger.info("Discarded %d orphaned blob(s) under %s", len(stored), self.root)


def get_file_store() -> FileStore:
    """Dependency returning the configured file store."""
    settings = get_settings()
    return FileStore(settings.upload_dir, settings.max_upload_size_mb * 1024 * 1024)
