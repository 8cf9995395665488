"""
Best-effort password protection for generated PDFs.

`protect_pdf` never raises: when encryption cannot be applied the
original bytes are returned with `applied=False`.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional

from pypdf import PdfReader, PdfWriter

logger = logging.getLogger(__name__)

ENCRYPTION_ALGORITHM = "AES-256"


@dataclass(frozen=True)
class EncryptionResult:
    pdf_bytes: bytes
    applied: bool


def protect_pdf(
    pdf_bytes: bytes,
    user_password: Optional[str] = None,
    owner_password: Optional[str] = None,
) -> EncryptionResult:
    """
    Apply password protection to a PDF.

    The owner password falls back to the user password when absent. An
    owner-only request produces a file that opens without a password but
    carries the owner's permission restrictions.

    Args:
        pdf_bytes: Rasterized PDF
        user_password: Password required to open the document
        owner_password: Password granting full permissions

    Returns:
        EncryptionResult with the protected bytes, or the untouched input
        and applied=False when nothing was requested or encryption failed
    """
    if not user_password and not owner_password:
        return EncryptionResult(pdf_bytes=pdf_bytes, applied=False)

    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        writer = PdfWriter(clone_from=reader)
        writer.encrypt(
            user_password=user_password or "",
            owner_password=owner_password or user_password,
            algorithm=ENCRYPTION_ALGORITHM,
        )
        buffer = io.BytesIO()
        writer.write(buffer)
    except Exception as e:
        logger.warning(f"PDF encryption failed, returning unprotected document: {e}")
        return EncryptionResult(pdf_bytes=pdf_bytes, applied=False)

    return EncryptionResult(pdf_bytes=buffer.getvalue(), applied=True)
