"""
Pytest fixtures for PDF generator tests.
"""

import os

# IMPORTANT: Set environment variables BEFORE any imports from pdf_generator
# so GeneratorSettings is configured correctly when first loaded.
os.environ["ENVIRONMENT"] = "development"
os.environ["API_KEY"] = "test-api-key-1234"
os.environ["PDF_BUCKET"] = "test-bucket"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["SKIP_S3"] = "false"
os.environ["MAX_CONCURRENT_PDFS"] = "2"

import io
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest
from pypdf import PdfWriter

from pdf_generator.config import GeneratorSettings
from pdf_generator.renderer import (
    CONSOLE_EVENT,
    PAGE_ERROR_EVENT,
    ConsoleMessage,
    NavigationResponse,
    PageError,
)


def make_pdf_bytes() -> bytes:
    """A real single-page PDF."""
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class FakePage:
    """Scriptable stand-in for a rendered page."""

    def __init__(
        self,
        response: Optional[NavigationResponse] = NavigationResponse(ok=True, status=200, status_text="OK"),
        navigate_error: Optional[Exception] = None,
        events: Optional[List[Any]] = None,
        pdf_bytes: bytes = b"%PDF-1.4 fake pdf content",
    ):
        self.response = response
        self.navigate_error = navigate_error
        self.events = events or []
        self.pdf_bytes = pdf_bytes
        self.handlers: Dict[str, List[Callable]] = {}
        self.calls: List[str] = []
        self.injected = None
        self.navigate_kwargs = None
        self.rasterize_options = None
        self.close_count = 0

    def on_event(self, kind, handler):
        self.handlers.setdefault(kind, []).append(handler)

    def emit(self, event):
        kind = CONSOLE_EVENT if isinstance(event, ConsoleMessage) else PAGE_ERROR_EVENT
        for handler in self.handlers.get(kind, []):
            handler(event)

    async def inject_before_load(self, data):
        self.calls.append("inject")
        self.injected = data

    async def navigate(self, url, wait_until, timeout_ms):
        self.calls.append("navigate")
        self.navigate_kwargs = {"url": url, "wait_until": wait_until, "timeout_ms": timeout_ms}
        for event in self.events:
            self.emit(event)
        if self.navigate_error is not None:
            raise self.navigate_error
        return self.response

    async def rasterize(self, options):
        self.calls.append("rasterize")
        self.rasterize_options = options
        return self.pdf_bytes

    async def close(self):
        self.close_count += 1


class FakeRenderer:
    def __init__(self, page: Optional[FakePage] = None, error: Optional[Exception] = None):
        self.page = page or FakePage()
        self.error = error
        self.new_page_calls = 0

    async def new_page(self):
        self.new_page_calls += 1
        if self.error is not None:
            raise self.error
        return self.page


class RecordingUploader:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def put(self, bucket, key, body, content_type):
        self.calls.append(
            {"bucket": bucket, "key": key, "body": body, "content_type": content_type}
        )
        if self.error is not None:
            raise self.error


class FakeClock:
    """Fixed wall clock; monotonic time advances 250ms per reading."""

    def __init__(self, now: datetime = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)):
        self._now = now
        self._monotonic = 0.0

    def now(self):
        return self._now

    def monotonic_ms(self):
        value = self._monotonic
        self._monotonic += 250.0
        return value


@pytest.fixture
def settings():
    return GeneratorSettings(
        pdf_bucket="test-bucket",
        aws_region="us-east-1",
        skip_s3=False,
        memory_size_mb=1024,
        ephemeral_storage_mb=512,
        api_key="test-api-key-1234",
    )


@pytest.fixture
def uploader():
    return RecordingUploader()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def pdf_bytes():
    return make_pdf_bytes()
