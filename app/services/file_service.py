"""
app/services/file_service.py

Uploads a validated PDF to blob storage under a generated, unique key:

    uploads/{sanitized_email}_{epoch_millis}.{ext}

Failures are returned as a localized message on UploadResult, never
raised, and leave nothing behind in storage.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Callable, Optional

from app.backend.base import BlobStore
from app.backend.supabase_store import SupabaseBlobStore
from app.core import messages
from app.core.constants import UPLOAD_FOLDER
from app.core.exceptions import BackendError
from app.core.logger import get_logger
from app.services.validators import SelectedFile

logger = get_logger(__name__)

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_SAFE_EXTENSION = re.compile(r"[a-zA-Z0-9]+")

#: Used when the client-supplied extension could not be part of a key.
DEFAULT_EXTENSION = "pdf"


@dataclass
class UploadResult:
    path: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_storage_path(email: str, filename: str, epoch_millis: int) -> str:
    """
    >>> build_storage_path("jan.kowalski@example.com", "umowa.pdf", 1700000000000)
    'uploads/jan_kowalski_example_com_1700000000000.pdf'
    """
    sanitized = _NON_ALNUM.sub("_", email)
    extension = filename.rsplit(".", 1)[-1]
    if not _SAFE_EXTENSION.fullmatch(extension):
        extension = DEFAULT_EXTENSION
    return f"{UPLOAD_FOLDER}/{sanitized}_{epoch_millis}.{extension}"


class FileService:
    """
    Stores submitted files.

    ``clock`` returns seconds since the epoch; it is injectable so tests
    can pin the generated key.
    """

    def __init__(
        self,
        store: BlobStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store: BlobStore = store or SupabaseBlobStore()
        self._clock = clock

    async def upload(self, file: SelectedFile, email: str) -> UploadResult:
        path = build_storage_path(email, file.name, int(self._clock() * 1000))
        try:
            stored = await self._store.upload(path, file.content, file.content_type)
        except BackendError as exc:
            logger.error("Error uploading file '%s': %s", file.name, exc)
            return UploadResult(error=messages.UPLOAD_FAILED)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error uploading file '%s': %s", file.name, exc)
            return UploadResult(error=messages.UPLOAD_UNEXPECTED)

        logger.info("Uploaded '%s' (%d bytes) to '%s'.", file.name, file.size_bytes, stored)
        return UploadResult(path=stored)
