"""
PDF Generator - FastAPI application.

Exposes the PDF generation pipeline over HTTP: authenticates the caller,
renders the requested page with Playwright/Chromium, stores the artifact
in S3 and answers with the pipeline's structured result.
"""

import asyncio
import logging
import time
import traceback
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from . import __version__
from .auth import authenticate
from .config import get_settings
from .pipeline import PdfPipeline, PipelineResult, StatusClass
from .renderer import PlaywrightRenderer
from .request_parsing import RequestParseError, parse_request_body
from .storage import PDF_CONTENT_TYPE, S3Uploader, UploadSink

logger = logging.getLogger(__name__)

app = FastAPI(
    title="PDF Generator",
    version=__version__,
    description="Renders web pages to PDF with Playwright/Chromium and stores them in S3"
)

settings = get_settings()

# Semaphore for rate limiting
_pdf_semaphore = asyncio.Semaphore(settings.max_concurrent_pdfs)

# Playwright readiness state
_playwright_ready = False
_playwright_error: Optional[str] = None

_uploader: Optional[UploadSink] = None


def _get_uploader() -> UploadSink:
    global _uploader
    if _uploader is None:
        _uploader = S3Uploader(region=settings.aws_region)
    return _uploader


def _json(status: StatusClass, payload: dict, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status.http_status, content=payload, headers=headers)


# ============================================================================
# Startup Event - Validate Playwright
# ============================================================================

@app.on_event("startup")
async def validate_playwright_on_startup():
    """
    Validate Playwright/Chromium is properly installed on startup.

    The service won't report as healthy if Playwright can't
    actually generate PDFs.
    """
    global _playwright_ready, _playwright_error

    logger.info("PDF Generator starting - validating Playwright installation...")

    try:
        from playwright.async_api import async_playwright

        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=settings.playwright_headless)
            try:
                page = await browser.new_page()
                await page.set_content("<html><body><h1>Test</h1></body></html>")
                test_pdf = await page.pdf(format="A4")
            finally:
                await browser.close()

        if test_pdf:
            _playwright_ready = True
            _playwright_error = None
            logger.info(f"Playwright validation successful - generated {len(test_pdf)} byte test PDF")
        else:
            _playwright_error = "Test PDF generation returned empty result"
            logger.error(f"Playwright validation failed: {_playwright_error}")

    except Exception as e:
        _playwright_error = str(e)
        logger.error(f"Playwright validation failed: {_playwright_error}")
        logger.error("PDF generation will not work until this is resolved.")


# ============================================================================
# Health Check Endpoint
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    timestamp: datetime
    active_renders: int
    max_concurrent: int
    skip_s3: bool
    playwright_ready: bool = True
    playwright_error: Optional[str] = None


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint for container orchestration.

    Returns HTTP 503 if Playwright validation failed on startup.
    """
    active = settings.max_concurrent_pdfs - _pdf_semaphore._value

    if not _playwright_ready:
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "active_renders": active,
                "max_concurrent": settings.max_concurrent_pdfs,
                "playwright_ready": False,
                "playwright_error": _playwright_error,
                "message": "PDF generator is unhealthy - Playwright/Chromium not available"
            }
        )

    return HealthResponse(
        timestamp=datetime.now(timezone.utc),
        active_renders=active,
        max_concurrent=settings.max_concurrent_pdfs,
        skip_s3=settings.skip_s3,
    )


# ============================================================================
# PDF Generation Endpoint
# ============================================================================

@app.api_route("/", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def generate_pdf(request: Request):
    """
    Render the requested page to PDF.

    Order: API key check, method check, capacity check, body parsing,
    pipeline run.

    Returns:
        JSON payload with the pipeline result, or the raw PDF when
        uploads are skipped
    """
    auth = authenticate(request.headers, settings.api_key)
    if not auth.valid:
        status = StatusClass.SERVER_ERROR if auth.status_code == 500 else StatusClass.UNAUTHORIZED
        return _json(status, {"message": auth.message})

    if request.method != "POST":
        return _json(
            StatusClass.METHOD_NOT_ALLOWED,
            {"message": "Method Not Allowed. Only POST requests are accepted."},
            headers={"Allow": "POST"},
        )

    # Check capacity
    if _pdf_semaphore.locked():
        logger.warning("PDF generator overloaded, rejecting request")
        return JSONResponse(
            status_code=503,
            content={"message": "Service overloaded. Too many concurrent PDF operations."},
        )

    async with _pdf_semaphore:
        body = await request.body()
        is_base64 = request.headers.get("content-transfer-encoding", "").lower() == "base64"
        try:
            render_request = parse_request_body(body, is_base64_encoded=is_base64)
        except RequestParseError as e:
            return _json(StatusClass.BAD_REQUEST, {"message": e.message, "error": e.error})

        logger.info(f"Generating PDF for: {render_request.page_url}")

        try:
            pipeline = PdfPipeline(settings, _get_uploader())
            viewport = {"width": settings.viewport_width, "height": settings.viewport_height}
            async with PlaywrightRenderer(headless=settings.playwright_headless, viewport=viewport) as renderer:
                result = await pipeline.run(render_request, renderer)
        except Exception as e:
            logger.error(f"PDF generation failed: {e}")
            payload = {"message": "Failed to generate or upload PDF", "error": str(e)}
            if settings.include_stack_traces:
                payload["stack"] = traceback.format_exc()
            return _json(StatusClass.SERVER_ERROR, payload)

    return _to_response(result)


def _to_response(result: PipelineResult) -> Response:
    if settings.skip_s3 and result.ok and result.pdf_bytes:
        filename = f"generated-{int(time.time() * 1000)}.pdf"
        return Response(
            content=result.pdf_bytes,
            media_type=PDF_CONTENT_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    return _json(result.status, result.payload)
