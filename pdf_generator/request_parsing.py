"""Request body decoding into a RenderRequest."""

import base64
import binascii
import json
from typing import Optional, Union

from pydantic import ValidationError

from .models import RenderRequest


class RequestParseError(Exception):
    """Request body could not be turned into a RenderRequest."""

    def __init__(self, message: str, error: str):
        super().__init__(f"{message}: {error}")
        self.message = message
        self.error = error


def parse_request_body(
    body: Optional[Union[str, bytes]],
    is_base64_encoded: bool = False,
) -> RenderRequest:
    """
    Decode a JSON (optionally base64-wrapped) body.

    An empty body is treated as an empty JSON object.

    Raises:
        RequestParseError: invalid base64/JSON or schema violation
    """
    if not body:
        data = {}
    else:
        try:
            raw = base64.b64decode(body, validate=True) if is_base64_encoded else body
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            data = json.loads(raw)
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RequestParseError("Invalid JSON in request body", str(e)) from e

    if not isinstance(data, dict):
        raise RequestParseError("Invalid JSON in request body", "Expected a JSON object")

    try:
        return RenderRequest.model_validate(data)
    except ValidationError as e:
        raise RequestParseError("Invalid request body", _summarize(e)) from e


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "body"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)
