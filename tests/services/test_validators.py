"""
tests/services/test_validators.py

Tests for the email pattern and the PDF type/size rules.
"""

import pytest

from app.core import messages
from app.core.constants import MAX_FILE_SIZE_BYTES
from app.services.validators import SelectedFile, is_valid_email, validate_file


def _file(content_type: str = "application/pdf", size: int = 10, name: str = "doc.pdf") -> SelectedFile:
    return SelectedFile(name=name, content_type=content_type, content=b"x" * size)


class TestEmailValidation:

    @pytest.mark.parametrize("email", [
        "jan@example.com",
        "jan.kowalski+umowy@poczta.example.pl",
        "a@b.co",
    ])
    def test_well_formed_emails_are_accepted(self, email: str) -> None:
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", [
        "",
        "jan.example.com",          # no "@"
        "jan@example",              # no dot in the domain
        "jan@@example.com",
        "jan kowalski@example.com",  # whitespace in the local part
        "@example.com",
        "jan@example.com\n",       # trailing newline
        "jan@example.com\nx@y.zz",
    ])
    def test_malformed_emails_are_rejected(self, email: str) -> None:
        assert not is_valid_email(email)


class TestFileValidation:

    def test_pdf_within_limit_is_accepted(self) -> None:
        assert validate_file(_file()) is None

    @pytest.mark.parametrize("content_type", ["text/plain", "image/png", "application/msword", ""])
    def test_non_pdf_mime_is_rejected_even_with_pdf_extension(self, content_type: str) -> None:
        """The declared MIME type decides; a .pdf name does not help."""
        assert validate_file(_file(content_type=content_type, name="looks-like.pdf")) == messages.FILE_NOT_PDF

    def test_pdf_mime_with_other_extension_is_accepted(self) -> None:
        assert validate_file(_file(name="scan.bin")) is None

    def test_mime_containing_pdf_is_accepted(self) -> None:
        assert validate_file(_file(content_type="application/x-pdf")) is None

    def test_exactly_fifteen_mib_is_accepted(self) -> None:
        assert validate_file(_file(size=MAX_FILE_SIZE_BYTES)) is None

    def test_one_byte_over_fifteen_mib_is_rejected(self) -> None:
        assert validate_file(_file(size=MAX_FILE_SIZE_BYTES + 1)) == messages.FILE_TOO_LARGE

    def test_type_is_checked_before_size(self) -> None:
        assert validate_file(_file(content_type="text/plain", size=MAX_FILE_SIZE_BYTES + 1)) == messages.FILE_NOT_PDF


class TestSelectedFile:

    def test_extension_is_text_after_last_dot(self) -> None:
        assert _file(name="archive.tar.pdf").extension == "pdf"

    def test_name_without_dot_is_its_own_extension(self) -> None:
        assert _file(name="README").extension == "README"

    def test_size_bytes_is_content_length(self) -> None:
        assert _file(size=1234).size_bytes == 1234
