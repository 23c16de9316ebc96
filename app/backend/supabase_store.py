"""
app/backend/supabase_store.py

Supabase implementations of the BlobStore and RecordStore interfaces,
built on the official async client (``supabase.acreate_client``):
  - Storage   → client.storage.from_(bucket).upload(...)
  - PostgREST → client.table(table)...execute()

All backend-specific details are fully contained here; the rest of the
application never sees a Supabase client or a Supabase exception type.
Client errors are re-raised as BackendError carrying the backend's code.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from postgrest.exceptions import APIError
from storage3.utils import StorageException
from supabase import AsyncClient, acreate_client

from app.backend.base import BlobStore, RecordStore, SubmissionRecord
from app.core.config import settings
from app.core.exceptions import BackendError
from app.core.logger import get_logger

logger = get_logger(__name__)


def _from_api_error(exc: APIError) -> BackendError:
    """PostgREST error: {"code", "message", "details", "hint"}."""
    return BackendError(exc.message or str(exc), code=exc.code)


def _from_storage_error(exc: StorageException) -> BackendError:
    """
    Storage error. Newer storage3 releases expose ``code``/``status``
    attributes; older ones pass the raw {"statusCode", "error", "message"}
    body as the only argument.
    """
    body = exc.args[0] if exc.args and isinstance(exc.args[0], dict) else {}
    code = getattr(exc, "code", None) or body.get("error")
    message = getattr(exc, "message", None) or body.get("message") or str(exc)
    status = getattr(exc, "status", None) or body.get("statusCode") or 0
    try:
        status = int(status)
    except (TypeError, ValueError):
        status = 0
    return BackendError(message, code=code, status=status)


class _SupabaseStore:
    """Lazily creates and shares one async Supabase client per store."""

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        client: Optional[AsyncClient] = None,
    ) -> None:
        """
        Args:
            url    : Project URL. Defaults to ``settings.supabase_url``.
            key    : API key. Defaults to ``settings.supabase_key``.
            client : Ready-made client (tests pass a fake). When omitted,
                     one is created on first use.
        """
        self._url = url or settings.supabase_url
        self._key = key or settings.supabase_key
        self._client = client

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            self._client = await acreate_client(self._url, self._key)
            logger.info("Supabase client initialised for %s.", self._url)
        return self._client


class SupabaseBlobStore(_SupabaseStore, BlobStore):
    """BlobStore backed by a Supabase Storage bucket."""

    def __init__(self, bucket: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._bucket = bucket or settings.storage_bucket

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Create the object; an existing key is rejected, never replaced."""
        client = await self._get_client()
        try:
            await client.storage.from_(self._bucket).upload(
                path,
                content,
                {
                    "content-type": content_type,
                    "cache-control": str(settings.storage_cache_control),
                    "upsert": "false",
                },
            )
        except StorageException as exc:
            raise _from_storage_error(exc) from exc
        except httpx.HTTPError as exc:
            raise BackendError(f"Upload to '{self._bucket}/{path}' failed: {exc}") from exc

        logger.debug("Stored %d byte(s) at '%s/%s'.", len(content), self._bucket, path)
        return path


class SupabaseRecordStore(_SupabaseStore, RecordStore):
    """RecordStore backed by a PostgREST table."""

    def __init__(self, table: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._table = table or settings.submissions_table

    async def _execute(self, query: Any) -> Any:
        """Run a built query; client failures become BackendError."""
        try:
            return await query.execute()
        except APIError as exc:
            raise _from_api_error(exc) from exc
        except httpx.HTTPError as exc:
            raise BackendError(f"Query on '{self._table}' failed: {exc}") from exc

    async def find_by_ip(self, ip_address: str) -> Dict[str, Any]:
        # .single() turns zero rows into an APIError with code PGRST116.
        client = await self._get_client()
        query = client.table(self._table).select("id").eq("ip_address", ip_address).single()
        response = await self._execute(query)
        return response.data

    async def insert(self, email: str, file_path: str, ip_address: str) -> SubmissionRecord:
        client = await self._get_client()
        query = client.table(self._table).insert(
            {"email": email, "file_path": file_path, "ip_address": ip_address}
        )
        response = await self._execute(query)
        if not response.data:
            raise BackendError(f"Insert into '{self._table}' returned no row")
        return SubmissionRecord.from_row(response.data[0])

    async def mark_webhook_triggered(self, record_id: str) -> None:
        client = await self._get_client()
        query = client.table(self._table).update({"webhook_triggered": True}).eq("id", record_id)
        await self._execute(query)
