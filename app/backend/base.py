"""
app/backend/base.py

Abstract interfaces for the managed backend the form persists into.

Design goals:
  - Services depend only on these interfaces, never on Supabase.
  - The backend is consumed through two narrow contracts:
      BlobStore   — "store blob, return path" (write-once)
      RecordStore — "insert row, fail on duplicate key"
  - Every failure surfaces as BackendError carrying the backend's own
    error code, so callers can tell a unique violation from anything else.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


# ── Shared data-transfer objects ──────────────────────────────────────────────

@dataclass
class SubmissionRecord:
    """
    A row of the form_submissions table.

    Attributes:
        id                : Generated unique identifier (assigned by the store).
        email             : Submitter's email address.
        file_path         : Opaque storage key of the uploaded blob.
        ip_address        : Resolved client IP; unique across the table.
        webhook_triggered : Set once the outbound webhook has been fired.
        created_at        : Insert timestamp as reported by the store.
    """

    id: str
    email: str
    file_path: str
    ip_address: str
    webhook_triggered: bool = False
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SubmissionRecord":
        return cls(
            id=str(row["id"]),
            email=row["email"],
            file_path=row["file_path"],
            ip_address=row["ip_address"],
            webhook_triggered=bool(row.get("webhook_triggered", False)),
            created_at=row.get("created_at"),
        )


# ── Abstract bases ─────────────────────────────────────────────────────────────

class BlobStore(ABC):
    """Write-once object storage addressed by opaque string keys."""

    @abstractmethod
    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        """
        Store ``content`` under ``path``. Must never overwrite an existing object.

        Returns:
            The key the object was stored under.

        Raises:
            BackendError: The store rejected the write (including a key collision).
        """


class RecordStore(ABC):
    """Relational table of submissions with a unique ip_address column."""

    @abstractmethod
    async def find_by_ip(self, ip_address: str) -> Dict[str, Any]:
        """
        Fetch exactly one row for ``ip_address``.

        Raises:
            BackendError: code NO_ROWS_CODE when nothing matches, or any
                          other code when the query itself failed.
        """

    @abstractmethod
    async def insert(self, email: str, file_path: str, ip_address: str) -> SubmissionRecord:
        """
        Insert a submission and return the stored row.

        Raises:
            BackendError: code UNIQUE_VIOLATION_CODE when a row for the same
                          ip_address already exists.
        """

    @abstractmethod
    async def mark_webhook_triggered(self, record_id: str) -> None:
        """Flip webhook_triggered to true for ``record_id``."""
