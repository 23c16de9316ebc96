"""
tests/services/test_file_service.py

Unit tests for FileService and the storage key format.
"""

from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest

from app.core import messages
from app.core.exceptions import BackendError
from app.services.file_service import FileService, build_storage_path


FIXED_NOW = 1_700_000_000.5  # seconds → 1700000000500 ms


class TestBuildStoragePath:

    def test_key_layout(self) -> None:
        path = build_storage_path("jan@example.com", "umowa.pdf", 1700000000123)
        assert path == "uploads/jan_example_com_1700000000123.pdf"

    def test_every_non_alphanumeric_character_is_replaced(self) -> None:
        path = build_storage_path("j.a-n+x@ex-ample.co.uk", "a.pdf", 1)
        assert path == "uploads/j_a_n_x_ex_ample_co_uk_1.pdf"

    def test_original_extension_is_kept(self) -> None:
        assert build_storage_path("a@b.cd", "Skan.PDF", 5).endswith("_5.PDF")

    @pytest.mark.parametrize("filename", ["x.pdf/../../etc", "a.p df", "umowa.", "../"])
    def test_unsafe_extension_falls_back_to_pdf(self, filename: str) -> None:
        assert build_storage_path("a@b.cd", filename, 5) == "uploads/a_b_cd_5.pdf"


class TestUpload:

    @pytest.mark.asyncio
    async def test_success_returns_path_and_stores_bytes(self, blob_store, sample_pdf) -> None:
        service = FileService(store=blob_store, clock=lambda: FIXED_NOW)

        result = await service.upload(sample_pdf, "jan@example.com")

        assert result.ok
        assert result.path == "uploads/jan_example_com_1700000000500.pdf"
        assert blob_store.objects[result.path] == sample_pdf.content

    @pytest.mark.asyncio
    async def test_existing_key_is_not_overwritten(self, blob_store, sample_pdf) -> None:
        """A key collision is a failure, never a silent replace."""
        service = FileService(store=blob_store, clock=lambda: FIXED_NOW)
        blob_store.objects["uploads/jan_example_com_1700000000500.pdf"] = b"original"

        result = await service.upload(sample_pdf, "jan@example.com")

        assert not result.ok
        assert result.error == messages.UPLOAD_FAILED
        assert blob_store.objects["uploads/jan_example_com_1700000000500.pdf"] == b"original"

    @pytest.mark.asyncio
    async def test_backend_rejection_returns_upload_failed(self, blob_store, sample_pdf) -> None:
        blob_store.fail_with = BackendError("Bucket not found", code="Not found", status=404)
        service = FileService(store=blob_store)

        result = await service.upload(sample_pdf, "jan@example.com")

        assert result.path == ""
        assert result.error == messages.UPLOAD_FAILED
        assert blob_store.objects == {}

    @pytest.mark.asyncio
    async def test_unexpected_fault_returns_unexpected_message(self, blob_store, sample_pdf) -> None:
        blob_store.fail_with = RuntimeError("boom")
        service = FileService(store=blob_store)

        result = await service.upload(sample_pdf, "jan@example.com")

        assert result.error == messages.UPLOAD_UNEXPECTED

    @pytest.mark.asyncio
    async def test_successive_uploads_get_distinct_keys(self, blob_store, sample_pdf) -> None:
        ticks = iter([1.0, 2.0])
        service = FileService(store=blob_store, clock=lambda: next(ticks))

        first = await service.upload(sample_pdf, "jan@example.com")
        second = await service.upload(sample_pdf, "jan@example.com")

        assert first.ok and second.ok
        assert first.path != second.path
        assert len(blob_store.objects) == 2

    @pytest.mark.asyncio
    async def test_network_error_from_real_store_is_reported(self, sample_pdf) -> None:
        from app.backend.supabase_store import SupabaseBlobStore

        class Unreachable:
            async def upload(self, *args):
                raise httpx.ConnectError("connection refused")

        client = SimpleNamespace(storage=SimpleNamespace(from_=lambda bucket: Unreachable()))
        store = SupabaseBlobStore(client=client)
        service = FileService(store=store)

        result = await service.upload(sample_pdf, "jan@example.com")

        assert result.error == messages.UPLOAD_FAILED
