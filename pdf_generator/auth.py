"""
Authentication Module

Handles API authentication using a static key sent in the x-api-key header.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"


@dataclass(frozen=True)
class AuthResult:
    valid: bool
    status_code: int = 200
    message: Optional[str] = None


def authenticate(headers: Optional[Mapping[str, str]], expected_key: Optional[str]) -> AuthResult:
    """
    Verify the x-api-key header against the configured key.

    Header names are matched case-insensitively.

    Returns:
        AuthResult; 500 when no key is configured, 401 when the key is
        missing or wrong
    """
    if not expected_key:
        logger.error("API_KEY is not configured, rejecting request")
        return AuthResult(False, 500, "Server configuration error: API_KEY not set")

    normalized = {k.lower(): v for k, v in (headers or {}).items()}
    provided = normalized.get(API_KEY_HEADER)

    if not provided or not secrets.compare_digest(provided.encode(), expected_key.encode()):
        logger.warning("Rejected request with missing or invalid API key")
        return AuthResult(False, 401, "Unauthorized. Valid API key required.")

    return AuthResult(True)
