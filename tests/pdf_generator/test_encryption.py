"""
Unit tests for pdf_generator/encryption.py
"""

import io

import pytest
from pypdf import PdfReader

from pdf_generator.encryption import EncryptionResult, protect_pdf


class TestProtectPdf:
    """Tests for best-effort PDF encryption."""

    def test_no_passwords_is_identity(self, pdf_bytes):
        result = protect_pdf(pdf_bytes)

        assert result == EncryptionResult(pdf_bytes=pdf_bytes, applied=False)
        assert result.pdf_bytes is pdf_bytes

    def test_empty_passwords_count_as_absent(self, pdf_bytes):
        result = protect_pdf(pdf_bytes, "", "")
        assert result.applied is False
        assert result.pdf_bytes is pdf_bytes

    def test_user_password_encrypts(self, pdf_bytes):
        result = protect_pdf(pdf_bytes, user_password="open-sesame")

        assert result.applied is True
        assert result.pdf_bytes != pdf_bytes

        reader = PdfReader(io.BytesIO(result.pdf_bytes))
        assert reader.is_encrypted
        assert reader.decrypt("wrong") == 0
        assert reader.decrypt("open-sesame") != 0
        assert len(reader.pages) == 1

    def test_owner_password_unlocks_full_access(self, pdf_bytes):
        result = protect_pdf(pdf_bytes, user_password="reader", owner_password="owner")

        reader = PdfReader(io.BytesIO(result.pdf_bytes))
        assert reader.is_encrypted
        assert reader.decrypt("owner") != 0

    def test_owner_only_opens_without_password(self, pdf_bytes):
        result = protect_pdf(pdf_bytes, owner_password="owner")

        assert result.applied is True
        reader = PdfReader(io.BytesIO(result.pdf_bytes))
        assert reader.is_encrypted
        assert reader.decrypt("") != 0

    @pytest.mark.parametrize("garbage", [b"", b"not a pdf", b"%PDF-1.4 truncated"])
    def test_invalid_pdf_returns_original_bytes(self, garbage):
        """Should never raise; failure yields the untouched input."""
        result = protect_pdf(garbage, user_password="secret")

        assert result.applied is False
        assert result.pdf_bytes is garbage
