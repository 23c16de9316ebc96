"""
app/services/webhook_notifier.py

Best-effort outbound notification fired after a submission is stored.

Each delivery runs as a detached asyncio task with its own exception
boundary: the caller gets control back immediately and never learns
whether the POST worked. A delivery that reaches the endpoint (whatever
the status code) flips webhook_triggered on the stored record.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

import httpx

from app.backend.base import RecordStore
from app.backend.supabase_store import SupabaseRecordStore
from app.core.config import settings
from app.core.constants import WEBHOOK_EVENT
from app.core.logger import get_logger

logger = get_logger(__name__)


def build_payload(submission_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    return {
        "submissionId": submission_id,
        "event": WEBHOOK_EVENT,
        # Millisecond precision with a trailing Z, as JavaScript clients emit.
        "timestamp": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


class WebhookNotifier:

    def __init__(
        self,
        store: RecordStore | None = None,
        url: str | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._store: RecordStore = store or SupabaseRecordStore()
        self._url = url if url is not None else settings.webhook_url
        self._transport = transport
        # Strong references so pending tasks are not garbage-collected.
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def dispatch(self, submission_id: str) -> Optional[asyncio.Task]:
        """Schedule delivery for ``submission_id`` and return immediately."""
        if not self._url:
            logger.info("No webhook URL configured — skipping notification for %s.", submission_id)
            return None

        task = asyncio.get_running_loop().create_task(self._deliver(submission_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every outstanding delivery to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _deliver(self, submission_id: str) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=settings.http_timeout, transport=self._transport
            ) as client:
                response = await client.post(self._url, json=build_payload(submission_id))
            logger.info("Webhook for %s delivered — HTTP %d.", submission_id, response.status_code)

            await self._store.mark_webhook_triggered(submission_id)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error triggering webhook for %s: %s", submission_id, exc)
