"""
app/services/duplicate_checker.py

Advisory "has this IP already submitted?" lookup.

This check only saves the visitor a pointless upload. It fails open: the
authoritative guarantee is the unique constraint on ip_address, which
the insert in FormService runs into when the check is wrong or skipped.
"""

from __future__ import annotations

from app.backend.base import RecordStore
from app.backend.supabase_store import SupabaseRecordStore
from app.core.constants import NO_ROWS_CODE
from app.core.exceptions import BackendError
from app.core.logger import get_logger

logger = get_logger(__name__)


class DuplicateChecker:

    def __init__(self, store: RecordStore | None = None) -> None:
        self._store: RecordStore = store or SupabaseRecordStore()

    async def has_submitted(self, ip_address: str) -> bool:
        try:
            row = await self._store.find_by_ip(ip_address)
        except BackendError as exc:
            if exc.code != NO_ROWS_CODE:
                logger.error("Error checking IP submission: %s", exc)
            return False
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error checking IP submission: %s", exc)
            return False
        return bool(row)
