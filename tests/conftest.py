"""
tests/conftest.py

Shared pytest fixtures available to all test modules.

Fixtures defined here are auto-discovered by pytest — no import needed.
The required settings are injected into the environment before the app
is imported, so importing app.core.config never fails under test.
"""

import os

os.environ.setdefault("RECAPTCHA_SITE_KEY", "test-site-key")
os.environ.setdefault("RECAPTCHA_SECRET", "test-secret")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.test")
os.environ.setdefault("SUPABASE_KEY", "test-service-key")
os.environ["RECAPTCHA_RELAY_URL"] = ""
os.environ["IP_LOOKUP_URL"] = ""
os.environ["WEBHOOK_URL"] = ""

import io  # noqa: E402
import uuid  # noqa: E402
from typing import Any, Dict, List, Optional  # noqa: E402

import fitz  # PyMuPDF  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.backend.base import BlobStore, RecordStore, SubmissionRecord  # noqa: E402
from app.core.constants import NO_ROWS_CODE, UNIQUE_VIOLATION_CODE  # noqa: E402
from app.core.exceptions import BackendError  # noqa: E402
from app.main import app  # noqa: E402
from app.services.validators import SelectedFile  # noqa: E402
from app.verification.base import BotVerifier  # noqa: E402


# ── In-memory backend ──────────────────────────────────────────────────────────

class InMemoryBlobStore(BlobStore):
    """Write-once dict of objects. ``fail_with`` makes every upload raise."""

    def __init__(self) -> None:
        self.objects: Dict[str, bytes] = {}
        self.fail_with: Optional[Exception] = None

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        if path in self.objects:
            raise BackendError("The resource already exists", code="Duplicate", status=409)
        self.objects[path] = content
        return path


class InMemoryRecordStore(RecordStore):
    """form_submissions table with the unique ip_address constraint."""

    def __init__(self) -> None:
        self.rows: List[Dict[str, Any]] = []
        self.insert_error: Optional[Exception] = None
        self.find_error: Optional[Exception] = None
        self.marked: List[str] = []

    async def find_by_ip(self, ip_address: str) -> Dict[str, Any]:
        if self.find_error is not None:
            raise self.find_error
        for row in self.rows:
            if row["ip_address"] == ip_address:
                return {"id": row["id"]}
        raise BackendError("JSON object requested, multiple (or no) rows returned",
                           code=NO_ROWS_CODE, status=406)

    async def insert(self, email: str, file_path: str, ip_address: str) -> SubmissionRecord:
        if self.insert_error is not None:
            raise self.insert_error
        if any(row["ip_address"] == ip_address for row in self.rows):
            raise BackendError(
                'duplicate key value violates unique constraint "uq_form_submissions_ip_address"',
                code=UNIQUE_VIOLATION_CODE,
                status=409,
            )
        row = {
            "id": str(uuid.uuid4()),
            "email": email,
            "file_path": file_path,
            "ip_address": ip_address,
            "webhook_triggered": False,
        }
        self.rows.append(row)
        return SubmissionRecord.from_row(row)

    async def mark_webhook_triggered(self, record_id: str) -> None:
        self.marked.append(record_id)
        for row in self.rows:
            if row["id"] == record_id:
                row["webhook_triggered"] = True


class StubVerifier(BotVerifier):
    """Returns a fixed verdict and records every token it was asked about."""

    def __init__(self, verdict: bool = True) -> None:
        self.verdict = verdict
        self.tokens: List[Optional[str]] = []

    async def verify(self, token: Optional[str]) -> bool:
        self.tokens.append(token)
        return self.verdict


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def verifier() -> StubVerifier:
    return StubVerifier()


# ── Core client fixture ────────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def client() -> TestClient:
    """
    A synchronous TestClient wrapping the FastAPI app.

    session-scoped so the app is instantiated once per test run.
    The lifespan context (startup/shutdown events) is entered automatically.
    """
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


# ── Sample file fixtures ───────────────────────────────────────────────────────

def make_pdf(text: str = "Umowa najmu") -> bytes:
    """A real one-page PDF built with PyMuPDF."""
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), text, fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    return make_pdf()


@pytest.fixture
def sample_pdf(sample_pdf_bytes) -> SelectedFile:
    return SelectedFile(name="umowa.pdf", content_type="application/pdf", content=sample_pdf_bytes)


@pytest.fixture
def sample_pdf_upload(sample_pdf_bytes) -> tuple:
    """
    A (field_name, (filename, file_obj, content_type)) tuple ready for
    use with TestClient's `files=` parameter.
    """
    return ("file", ("umowa.pdf", io.BytesIO(sample_pdf_bytes), "application/pdf"))


@pytest.fixture
def sample_txt_upload() -> tuple:
    """A non-PDF upload tuple for negative-case tests."""
    return ("file", ("umowa.pdf", io.BytesIO(b"hello world"), "text/plain"))
