"""
app/services/submission_workflow.py

Orchestrates one form submission:

    FormSession
      └─ validate email / file           → field error, no external calls
           └─ BotVerifier.verify()        → verification error
                └─ DuplicateChecker       → conflict, session locked
                     └─ FileService.upload()   → infrastructure error, retryable
                          └─ FormService.save()    → conflict or infrastructure error
                               └─ webhook dispatched detached
                                    └─ fields cleared, session locked

Each step runs only if the previous one succeeded. Collaborators return
typed results instead of raising, so the workflow itself has no
exception handling beyond resetting the busy flag.

All collaborators are constructor-injected so tests can swap them out
with fakes; the module-level singleton wires in the real ones.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from app.backend.supabase_store import SupabaseRecordStore
from app.core import messages
from app.core.constants import MAX_TRACKED_SESSIONS, UNKNOWN_IP
from app.core.logger import get_logger
from app.services.duplicate_checker import DuplicateChecker
from app.services.file_service import FileService
from app.services.form_service import FormService
from app.services.validators import SelectedFile, is_valid_email, validate_file
from app.services.webhook_notifier import WebhookNotifier
from app.verification.base import BotVerifier
from app.verification.recaptcha_verifier import build_verifier

logger = get_logger(__name__)


# ── Session state ──────────────────────────────────────────────────────────────

class FormState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    BOT_VERIFYING = "bot_verifying"
    DUPLICATE_CHECKING = "duplicate_checking"
    UPLOADING = "uploading"
    PERSISTING = "persisting"
    NOTIFYING = "notifying"
    LOCKED = "locked"


@dataclass
class FormSession:
    """
    In-memory form state for one visitor.

    ``locked`` is terminal: nothing in this module ever clears it. It is
    not persisted either; a fresh session re-derives it through
    SubmissionWorkflow.load().
    """

    ip_address: str = UNKNOWN_IP
    email: str = ""
    file: Optional[SelectedFile] = None
    bot_token: Optional[str] = None
    email_error: str = ""
    file_error: str = ""
    state: FormState = FormState.IDLE
    busy: bool = False
    locked: bool = False

    def set_email(self, email: str) -> None:
        self.email = email
        self.email_error = ""

    def select_file(self, file: Optional[SelectedFile]) -> bool:
        """
        Validate and keep ``file``. A rejected file is dropped and the
        reason stored in ``file_error``; a later selection is always allowed.
        """
        self.file_error = ""
        if file is None:
            return False
        problem = validate_file(file)
        if problem:
            self.file_error = problem
            self.file = None
            return False
        self.file = file
        return True

    def set_bot_token(self, token: Optional[str]) -> None:
        self.bot_token = token or None

    def reset(self) -> None:
        """Drop the fields and the challenge, keeping only busy/locked state."""
        self.email = ""
        self.file = None
        self.bot_token = None
        self.email_error = ""
        self.file_error = ""

    def lock(self) -> None:
        self.locked = True
        self.state = FormState.LOCKED


# ── Outcome ────────────────────────────────────────────────────────────────────

class OutcomeKind(str, Enum):
    SUCCESS = "success"
    FIELD_ERROR = "field_error"
    VERIFICATION_ERROR = "verification_error"
    CONFLICT = "conflict"
    INFRASTRUCTURE_ERROR = "infrastructure_error"
    BUSY = "busy"


@dataclass
class SubmissionOutcome:
    kind: OutcomeKind
    message: str
    field: Optional[str] = None
    file_path: Optional[str] = None
    submission_id: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


# ── Workflow ───────────────────────────────────────────────────────────────────

class SubmissionWorkflow:

    def __init__(
        self,
        verifier: BotVerifier | None = None,
        checker: DuplicateChecker | None = None,
        files: FileService | None = None,
        forms: FormService | None = None,
    ) -> None:
        self._verifier: BotVerifier = verifier or build_verifier()
        self._checker = checker or DuplicateChecker()
        self._files = files or FileService()
        self._forms = forms or FormService()

    async def load(self, session: FormSession) -> bool:
        """Page-load check: lock the session if its IP already submitted."""
        if not session.locked and await self._checker.has_submitted(session.ip_address):
            logger.info("IP %s has already submitted — session locked.", session.ip_address)
            session.lock()
        return session.locked

    async def submit(self, session: FormSession) -> SubmissionOutcome:
        """
        Run the submission sequence, stopping at the first failure.

        Returns:
            SubmissionOutcome describing the result. Never raises for
            collaborator failures.
        """
        if session.locked:
            return SubmissionOutcome(OutcomeKind.CONFLICT, messages.ALREADY_SUBMITTED)
        if session.busy:
            return SubmissionOutcome(OutcomeKind.BUSY, messages.SUBMISSION_IN_PROGRESS)

        session.busy = True
        try:
            return await self._run(session)
        finally:
            session.busy = False
            if not session.locked:
                session.state = FormState.IDLE

    async def _run(self, session: FormSession) -> SubmissionOutcome:
        # ── 1. Validate fields ─────────────────────────────────────────────────
        session.state = FormState.VALIDATING
        session.email_error = ""
        if not is_valid_email(session.email):
            session.email_error = messages.EMAIL_INVALID
            return SubmissionOutcome(OutcomeKind.FIELD_ERROR, messages.EMAIL_INVALID, field="email")

        if session.file is None:
            session.file_error = session.file_error or messages.FILE_MISSING
            return SubmissionOutcome(OutcomeKind.FIELD_ERROR, session.file_error, field="file")

        # ── 2. Bot challenge ───────────────────────────────────────────────────
        session.state = FormState.BOT_VERIFYING
        if not session.bot_token:
            return SubmissionOutcome(OutcomeKind.VERIFICATION_ERROR, messages.BOT_CHECK_REQUIRED)
        if not await self._verifier.verify(session.bot_token):
            return SubmissionOutcome(OutcomeKind.VERIFICATION_ERROR, messages.BOT_CHECK_FAILED)

        # ── 3. Advisory duplicate check ────────────────────────────────────────
        session.state = FormState.DUPLICATE_CHECKING
        if await self._checker.has_submitted(session.ip_address):
            logger.info("Blocked repeat submission from %s before upload.", session.ip_address)
            session.lock()
            return SubmissionOutcome(OutcomeKind.CONFLICT, messages.ALREADY_SUBMITTED)

        # ── 4. Upload ──────────────────────────────────────────────────────────
        session.state = FormState.UPLOADING
        upload = await self._files.upload(session.file, session.email)
        if not upload.ok:
            return SubmissionOutcome(OutcomeKind.INFRASTRUCTURE_ERROR, upload.error)

        # ── 5. Persist (authoritative uniqueness) ──────────────────────────────
        session.state = FormState.PERSISTING
        saved = await self._forms.save(session.email, upload.path, session.ip_address)
        if saved.duplicate:
            session.lock()
            return SubmissionOutcome(OutcomeKind.CONFLICT, saved.error)
        if not saved.success:
            return SubmissionOutcome(OutcomeKind.INFRASTRUCTURE_ERROR, saved.error)

        # ── 6. Webhook already dispatched by FormService; finish up ────────────
        session.state = FormState.NOTIFYING
        session.reset()
        session.lock()
        return SubmissionOutcome(
            OutcomeKind.SUCCESS,
            messages.SUCCESS,
            file_path=upload.path,
            submission_id=saved.record.id if saved.record else None,
        )


# ── Session registry ───────────────────────────────────────────────────────────

@dataclass
class SessionRegistry:
    """
    Form sessions keyed by resolved IP, the identity the lock applies to.

    At most ``max_sessions`` are kept; the least recently used session that
    is not mid-submission is evicted first, so busy sessions can briefly push
    the count past the limit. An evicted lock is not lost for good: the next
    page load re-derives it from the backend.
    """

    max_sessions: int = MAX_TRACKED_SESSIONS
    sessions: OrderedDict[str, FormSession] = field(default_factory=OrderedDict)

    def get(self, ip_address: str) -> FormSession:
        session = self.sessions.get(ip_address)
        if session is not None:
            self.sessions.move_to_end(ip_address)
            return session

        session = FormSession(ip_address=ip_address)
        self.sessions[ip_address] = session
        self._evict(keep=ip_address)
        return session

    def _evict(self, keep: str) -> None:
        overflow = len(self.sessions) - self.max_sessions
        if overflow <= 0:
            return
        idle = [ip for ip, s in self.sessions.items() if ip != keep and not s.busy][:overflow]
        for ip in idle:
            del self.sessions[ip]


# ── Module-level singletons ────────────────────────────────────────────────────
# Controllers import these instances. Tests construct SubmissionWorkflow
# directly with injected fakes. One record store is shared so the checker,
# the insert and the webhook flag all talk to the same table.

record_store = SupabaseRecordStore()
webhook_notifier = WebhookNotifier(store=record_store)
submission_workflow = SubmissionWorkflow(
    checker=DuplicateChecker(store=record_store),
    forms=FormService(store=record_store, notifier=webhook_notifier),
)
session_registry = SessionRegistry()
