"""
app/services/form_service.py

Persists submission records and kicks off the webhook notification.

The ip_address unique constraint is the authoritative one-per-IP
guarantee. Its violation is reported distinctly (``duplicate=True``) so
the workflow can lock the session rather than offer a retry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.backend.base import RecordStore, SubmissionRecord
from app.backend.supabase_store import SupabaseRecordStore
from app.core import messages
from app.core.constants import UNIQUE_VIOLATION_CODE
from app.core.exceptions import BackendError
from app.core.logger import get_logger
from app.services.webhook_notifier import WebhookNotifier

logger = get_logger(__name__)


@dataclass
class SaveResult:
    success: bool
    error: Optional[str] = None
    duplicate: bool = False
    record: Optional[SubmissionRecord] = None


class FormService:

    def __init__(
        self,
        store: RecordStore | None = None,
        notifier: WebhookNotifier | None = None,
    ) -> None:
        self._store: RecordStore = store or SupabaseRecordStore()
        self._notifier = notifier or WebhookNotifier(store=self._store)

    async def save(self, email: str, file_path: str, ip_address: str) -> SaveResult:
        """
        Insert one submission.

        On success the webhook is dispatched detached; its outcome never
        changes the result returned here.
        """
        try:
            record = await self._store.insert(email, file_path, ip_address)
        except BackendError as exc:
            if exc.code == UNIQUE_VIOLATION_CODE:
                logger.info("Rejected duplicate submission from %s.", ip_address)
                return SaveResult(success=False, error=messages.ALREADY_SUBMITTED, duplicate=True)
            logger.error("Error saving form submission: %s", exc)
            return SaveResult(success=False, error=messages.SAVE_FAILED)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error saving form submission: %s", exc)
            return SaveResult(success=False, error=messages.SAVE_UNEXPECTED)

        logger.info("Stored submission %s (file '%s').", record.id, record.file_path)

        try:
            self._notifier.dispatch(record.id)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error scheduling webhook for %s: %s", record.id, exc)

        return SaveResult(success=True, record=record)
