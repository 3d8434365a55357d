"""
Evidence File Intake

Checks every uploaded file against the type allow-list, the size limit and the
per-submission count before anything is written, then stores the accepted
files under the upload directory.
"""

from __future__ import annotations

import logging
import re
import secrets
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from poetracker.config import settings
from poetracker.core.errors import FileRejectedError, UpstreamFailure

logger = logging.getLogger(__name__)

# MIME type → classification
ALLOWED_FILE_TYPES: dict[str, str] = {
    "application/pdf": "pdf",
    "image/jpeg": "jpeg",
    "image/png": "png",
    "video/mp4": "mp4",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
}

READ_CHUNK_SIZE = 1024 * 1024


class Upload(Protocol):
    """The parts of an uploaded file the intake needs (FastAPI's UploadFile fits)."""

    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


@dataclass
class IncomingFile:
    """An upload that passed every check, held in memory until stored."""

    file_name: str
    file_type: str
    classification: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class StoredFile:
    file_name: str
    file_type: str
    file_path: str
    file_size: int


def classify(content_type: str | None) -> str | None:
    """Classification for a MIME type, or None if not on the allow-list."""
    if not content_type:
        return None
    return ALLOWED_FILE_TYPES.get(content_type.split(";")[0].strip().lower())


def safe_file_name(name: str) -> str:
    """Strip directories and unusual characters from a client-supplied name."""
    base = Path(name.replace("\\", "/")).name
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", base).strip("._")
    return cleaned or "evidence"


class FileIntake:
    """Validates and stores evidence uploads."""

    def __init__(
        self,
        upload_dir: Path | None = None,
        max_size: int | None = None,
        max_files: int | None = None,
    ):
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        self.max_size = max_size if max_size is not None else settings.MAX_UPLOAD_SIZE_BYTES
        self.max_files = max_files if max_files is not None else settings.MAX_FILES_PER_SUBMISSION

    async def accept(self, uploads: Sequence[Upload]) -> list[IncomingFile]:
        """Read and check every upload.

        Raises:
            FileRejectedError: On the first file breaking the type, size or
                count constraint; nothing has been stored at that point.
        """
        if len(uploads) > self.max_files:
            raise FileRejectedError(
                f"Too many files: at most {self.max_files} files per submission",
                constraint="count",
            )

        accepted: list[IncomingFile] = []
        for upload in uploads:
            file_name = upload.filename or "evidence"
            classification = classify(upload.content_type)
            if classification is None:
                raise FileRejectedError(
                    f"Invalid file type for {file_name!r}. "
                    "Only PDF, JPG, PNG, MP4, and DOCX are allowed.",
                    constraint="type",
                    file_name=file_name,
                )

            content = await self._read_bounded(upload, file_name)
            accepted.append(
                IncomingFile(
                    file_name=file_name,
                    file_type=(upload.content_type or "").split(";")[0].strip().lower(),
                    classification=classification,
                    content=content,
                )
            )
        return accepted

    async def _read_bounded(self, upload: Upload, file_name: str) -> bytes:
        """Read the upload, failing as soon as it exceeds the size limit."""
        chunks: list[bytes] = []
        total = 0
        while True:
            chunk = await upload.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > self.max_size:
                limit_mib = self.max_size / (1024 * 1024)
                raise FileRejectedError(
                    f"File {file_name!r} exceeds the maximum size of {limit_mib:g} MiB",
                    constraint="size",
                    file_name=file_name,
                )
            chunks.append(chunk)
        return b"".join(chunks)

    def store(self, files: Sequence[IncomingFile]) -> list[StoredFile]:
        """Write accepted files to the upload directory.

        Raises:
            UpstreamFailure: If the storage directory cannot be written; files
                already written by this call are removed.
        """
        stored: list[StoredFile] = []
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            for incoming in files:
                locator = self.upload_dir / (
                    f"{secrets.token_hex(8)}-{safe_file_name(incoming.file_name)}"
                )
                locator.write_bytes(incoming.content)
                stored.append(
                    StoredFile(
                        file_name=incoming.file_name,
                        file_type=incoming.file_type,
                        file_path=str(locator),
                        file_size=incoming.size,
                    )
                )
        except OSError as e:
            logger.error(f"Failed to store evidence files in {self.upload_dir}: {e}")
            self.discard(stored)
            raise UpstreamFailure("Failed to store uploaded files") from e

        return stored

    def discard(self, files: Sequence[StoredFile]) -> None:
        """Remove stored files (used when the submission could not be saved)."""
        for stored in files:
            try:
                Path(stored.file_path).unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove orphaned upload {stored.file_path}: {e}")
