"""
app/services/validators.py

Field-level checks run before any external service is called.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from app.core import messages
from app.core.constants import MAX_FILE_SIZE_BYTES, PDF_MIME_MARKER

# local part, "@", domain, ".", suffix; no RFC-level parsing.
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class SelectedFile:
    """
    A file chosen by the visitor, held in memory until submission.

    Attributes:
        name         : Original filename as sent by the browser.
        content_type : Declared MIME type (not sniffed).
        content      : Raw bytes.
    """

    name: str
    content_type: str
    content: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        """Text after the last dot; the whole name when there is no dot."""
        return self.name.rsplit(".", 1)[-1]


def is_valid_email(email: str) -> bool:
    return bool(email) and _EMAIL_RE.fullmatch(email) is not None


def validate_file(file: SelectedFile) -> Optional[str]:
    """
    Return the user-facing reason ``file`` is unacceptable, or None.

    The declared MIME type decides PDF-ness; the extension is ignored.
    """
    if PDF_MIME_MARKER not in (file.content_type or ""):
        return messages.FILE_NOT_PDF
    if file.size_bytes > MAX_FILE_SIZE_BYTES:
        return messages.FILE_TOO_LARGE
    return None
