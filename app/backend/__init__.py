"""app/backend/__init__.py — public API of the backend package."""

from app.backend.base import BlobStore, RecordStore, SubmissionRecord
from app.backend.supabase_store import SupabaseBlobStore, SupabaseRecordStore

__all__ = [
    "BlobStore",
    "RecordStore",
    "SubmissionRecord",
    "SupabaseBlobStore",
    "SupabaseRecordStore",
]
