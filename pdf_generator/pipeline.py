"""
PDF Generation Pipeline

Runs one render request end to end:
- URL validation
- Page acquisition, error collection and data injection
- Navigation with timeout and failure capture
- Optional delay and page-error threshold
- Rasterization and best-effort encryption
- Artifact upload, cost estimation and progress record

Page-content failures (bad URL, failed navigation, runtime errors) are
returned as terminal results. Only renderer acquisition and uploads raise,
and the page is closed on every path.
"""

import asyncio
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .clock import Clock, SystemClock, epoch_ms, iso_utc
from .config import GeneratorSettings
from .cost import estimate_cost
from .encryption import EncryptionResult, protect_pdf
from .logger import get_run_logger
from .models import (
    OutcomeSummary,
    ProgressRecord,
    RenderRequest,
    SecurityOutcome,
    log_entries_payload,
)
from .page_errors import attach_error_collector
from .renderer import NavigationError, Renderer
from .storage import JSON_CONTENT_TYPE, PDF_CONTENT_TYPE, UploadSink, object_url
from .validation import is_valid_target

PROGRESS_FILE_NAME = "progress.json"


class StatusClass(str, Enum):
    """Transport-agnostic outcome classes and their HTTP status codes."""
    SUCCESS = "success"
    BAD_REQUEST = "badRequest"
    UNAUTHORIZED = "unauthorized"
    METHOD_NOT_ALLOWED = "methodNotAllowed"
    UPSTREAM_FAILURE = "upstreamFailure"
    UNPROCESSABLE = "unprocessable"
    SERVER_ERROR = "serverError"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    StatusClass.SUCCESS: 200,
    StatusClass.BAD_REQUEST: 400,
    StatusClass.UNAUTHORIZED: 401,
    StatusClass.METHOD_NOT_ALLOWED: 405,
    StatusClass.UNPROCESSABLE: 422,
    StatusClass.SERVER_ERROR: 500,
    StatusClass.UPSTREAM_FAILURE: 502,
}


@dataclass
class PipelineResult:
    """Outcome of a pipeline run."""

    status: StatusClass
    payload: Dict[str, Any]
    pdf_bytes: Optional[bytes] = None

    @property
    def ok(self) -> bool:
        return self.status is StatusClass.SUCCESS


def artifact_key(path_prefix: str, file_name: str) -> str:
    """Prefixes arrive normalized by StorageConfig (no leading or trailing slash)."""
    return f"{path_prefix}/{file_name}"


class PdfPipeline:
    """
    Orchestrates a render request into a stored PDF.

    Args:
        settings: Process-wide configuration (default bucket, region,
            upload-skip flag, reserved memory and disk)
        uploader: Upload sink used for the artifact and progress record
        clock: Time source; defaults to the system clock
    """

    def __init__(
        self,
        settings: GeneratorSettings,
        uploader: UploadSink,
        clock: Optional[Clock] = None,
    ):
        self.settings = settings
        self.uploader = uploader
        self.clock = clock or SystemClock()

    async def run(self, request: RenderRequest, renderer: Renderer) -> PipelineResult:
        started_at = self.clock.monotonic_ms()
        request_id = f"req-{uuid.uuid4()}"
        log = get_run_logger(__name__, request_id)

        if not is_valid_target(request.page_url):
            log.warning(f"Rejected invalid URL: {request.page_url!r}")
            return PipelineResult(
                StatusClass.BAD_REQUEST,
                {"message": "Invalid URL provided", "url": request.page_url},
            )

        options = request.pdf_options
        page = await renderer.new_page()
        try:
            collected = attach_error_collector(page)
            await page.inject_before_load(request.input_props)

            log.info(f"Navigating to {request.page_url} (waitUntil={options.wait_until.value})")
            navigation_error = None
            try:
                response = await page.navigate(
                    request.page_url,
                    wait_until=options.wait_until,
                    timeout_ms=options.navigation_timeout_ms,
                )
            except NavigationError as e:
                navigation_error = str(e)
                response = None

            if response is None or not response.ok:
                reason = navigation_error or (f"status {response.status}" if response else "no response")
                log.warning(f"Navigation failed: {reason}")
                payload: Dict[str, Any] = {
                    "message": "Failed to load the page",
                    "status": response.status if response else None,
                    "statusText": response.status_text if response else None,
                    "pageErrors": log_entries_payload(collected.error_log),
                }
                if navigation_error:
                    payload["error"] = navigation_error
                return PipelineResult(StatusClass.UPSTREAM_FAILURE, payload)

            if options.extra_wait_ms:
                await asyncio.sleep(options.extra_wait_ms / 1000)

            if options.fail_on_page_errors and collected.error_log:
                log.warning(f"Page emitted {len(collected.error_log)} error(s), aborting")
                return PipelineResult(
                    StatusClass.UNPROCESSABLE,
                    {
                        "message": "Page loaded with errors",
                        "pageErrors": log_entries_payload(collected.error_log),
                        "consoleLog": log_entries_payload(collected.console_log),
                    },
                )

            pdf_bytes = await page.rasterize(options)
            log.info(f"Rasterized {len(pdf_bytes)} bytes ({options.paper_format.value})")

            security = request.security
            encryption = EncryptionResult(pdf_bytes=pdf_bytes, applied=False)
            if security.requested:
                encryption = protect_pdf(pdf_bytes, security.password, security.owner_password)
                log.info(f"Password protection applied={encryption.applied}")
            pdf_bytes = encryption.pdf_bytes
            security_outcome = SecurityOutcome(requested=security.requested, applied=encryption.applied)

            storage = request.storage_target
            bucket = storage.bucket or self.settings.pdf_bucket
            file_name = storage.file_name or f"page-{epoch_ms(self.clock.now())}.pdf"
            key = artifact_key(storage.path_prefix, file_name)
            skip_upload = self.settings.skip_s3

            if skip_upload:
                log.info(f"Upload skipped for {key}")
            else:
                await self.uploader.put(bucket, key, pdf_bytes, PDF_CONTENT_TYPE)
                log.info(f"Uploaded s3://{bucket}/{key}")

            duration_ms = int(self.clock.monotonic_ms() - started_at)
            metrics = estimate_cost(
                duration_ms,
                memory_mb=self.settings.memory_size_mb,
                disk_mb=self.settings.ephemeral_storage_mb,
                region=self.settings.aws_region,
            )
            url = None if skip_upload else object_url(bucket, key)

            record = ProgressRecord(
                request_id=request_id,
                timestamp=iso_utc(self.clock.now()),
                request=request.redacted_echo(),
                response=OutcomeSummary(
                    bucket=bucket,
                    key=key,
                    url=url,
                    has_errors=bool(collected.error_log),
                    error_count=len(collected.error_log),
                ),
                security=security_outcome,
                metrics=metrics,
            )
            if not skip_upload:
                progress_key = artifact_key(storage.path_prefix, PROGRESS_FILE_NAME)
                await self.uploader.put(bucket, progress_key, record.to_json_bytes(), JSON_CONTENT_TYPE)

            log.info(
                f"Completed in {metrics.duration_ms}ms, "
                f"estimated cost ${metrics.estimated_cost_usd:.7f}"
            )

            payload = {
                "message": "PDF generated successfully",
                "requestId": request_id,
                "bucket": bucket,
                "key": key,
                "url": url,
                "security": security_outcome.to_payload(),
                "metrics": {
                    "durationMs": metrics.duration_ms,
                    "durationSeconds": metrics.duration_seconds,
                    "totalCostUSD": metrics.estimated_cost_usd,
                    "breakdown": metrics.breakdown.to_payload(),
                },
            }
            if collected.error_log:
                payload["pageErrors"] = log_entries_payload(collected.error_log)
            if options.include_console_logs:
                payload["consoleLog"] = log_entries_payload(collected.console_log)

            return PipelineResult(StatusClass.SUCCESS, payload, pdf_bytes=pdf_bytes)
        finally:
            await page.close()
