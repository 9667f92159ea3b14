"""Inbound file receiver

Spools multipart uploads into a per-call temporary directory and enforces
the count, name, type, and size limits before the upload handler sees them.
The directory is removed when the call finishes, whether or not it succeeded.
"""

import logging
import shutil
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List, Optional, Sequence

from fastapi import UploadFile

from ..domain.requests.errors import ValidationError
from ..domain.storage.ports.remote_file_store_port import InboundFile
from ..domain.uploads.validation import (
    is_supported_mime_type,
    sanitize_filename,
    validate_file_size,
    validate_filename,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class InboundFileReceiver:
    """Validates and spools uploaded files.

    Usage:
        async with receiver.receive(files) as inbound:
            await upload_service.submit_files(request_id, inbound)

    An empty upload is passed through as an empty list; the upload handler
    decides whether that is an error once it has checked the request state.
    """

    def __init__(self, max_file_size: int, max_files: int, tmp_dir: Optional[str] = None):
        self.max_file_size = max_file_size
        self.max_files = max_files
        self.tmp_dir = tmp_dir

    @asynccontextmanager
    async def receive(self, uploads: Optional[Sequence[UploadFile]]) -> AsyncIterator[List[InboundFile]]:
        uploads = [u for u in (uploads or []) if u is not None and (u.filename or u.size)]
        if len(uploads) > self.max_files:
            raise ValidationError(f"Too many files (max {self.max_files} per upload)")

        workdir = Path(tempfile.mkdtemp(prefix="orderdrop-", dir=self.tmp_dir))
        try:
            inbound = []
            for index, upload in enumerate(uploads):
                inbound.append(await self._spool(upload, index, workdir))
            yield inbound
        finally:
            shutil.rmtree(workdir, ignore_errors=True)

    async def _spool(self, upload: UploadFile, index: int, workdir: Path) -> InboundFile:
        valid, error = validate_filename(upload.filename)
        if not valid:
            raise ValidationError(f"Invalid file name: {error}")

        if not is_supported_mime_type(upload.content_type):
            raise ValidationError(
                f"{upload.filename}: unsupported file type {upload.content_type or 'unknown'}"
            )

        path = workdir / f"{index:03d}-{sanitize_filename(upload.filename)}"
        size_bytes = 0
        with path.open("wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size_bytes += len(chunk)
                if size_bytes > self.max_file_size:
                    break
                out.write(chunk)

        valid, error = validate_file_size(size_bytes, self.max_file_size)
        if not valid:
            raise ValidationError(f"{upload.filename}: {error}")

        logger.debug(f"Spooled upload {upload.filename} ({size_bytes} bytes)")
        return InboundFile(
            original_name=upload.filename,
            path=path,
            mime_type=upload.content_type.split(";", 1)[0].strip().lower(),
            size_bytes=size_bytes,
        )
