"""
Pydantic models for the PDF generator.

These models define the request shape accepted on the wire, the
diagnostic log entries captured from the page, cost metrics and the
progress record persisted next to each artifact.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, populated by either name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict using wire names, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================================================
# Request
# ============================================================================

class WaitUntil(str, Enum):
    """Navigation completion condition."""
    LOAD = "load"
    DOM_CONTENT_LOADED = "domcontentloaded"
    NETWORK_IDLE_QUIET = "networkidle0"
    NETWORK_IDLE_ALMOST_QUIET = "networkidle2"


class PaperFormat(str, Enum):
    A4 = "A4"
    LETTER = "Letter"
    LEGAL = "Legal"
    TABLOID = "Tabloid"
    A3 = "A3"
    A5 = "A5"


class Margins(CamelModel):
    """Page margins as CSS length strings (e.g. '0.5in', '10mm')."""
    top: Optional[str] = None
    right: Optional[str] = None
    bottom: Optional[str] = None
    left: Optional[str] = None


class RenderOptions(CamelModel):
    """Navigation and rasterization options."""

    wait_until: WaitUntil = Field(WaitUntil.NETWORK_IDLE_QUIET)
    navigation_timeout_ms: int = Field(
        30000, gt=0, alias="timeout", description="Navigation timeout in milliseconds"
    )
    extra_wait_ms: int = Field(
        0, ge=0, alias="waitTime", description="Fixed delay after navigation"
    )
    fail_on_page_errors: bool = Field(False, alias="failOnErrors")
    include_console_logs: bool = Field(False)
    paper_format: PaperFormat = Field(PaperFormat.A4, alias="pdfFormat")
    print_background: bool = Field(True)
    landscape: bool = Field(False)
    margins: Optional[Margins] = Field(None, alias="margin")


class StorageConfig(CamelModel):
    """Where the artifact is stored. Unset values are resolved by the pipeline."""

    bucket: Optional[str] = Field(None, description="Defaults to the configured bucket")
    path_prefix: str = Field("pdfs", alias="key", min_length=1)
    file_name: Optional[str] = Field(
        None, description="Defaults to page-<timestamp>.pdf"
    )

    @field_validator("path_prefix")
    @classmethod
    def strip_prefix_slashes(cls, v: str) -> str:
        """Keys are joined as <prefix>/<file>, so surrounding slashes are dropped."""
        v = v.strip("/")
        if not v:
            raise ValueError("path prefix must contain more than slashes")
        return v


class SecurityConfig(CamelModel):
    """Optional password protection."""

    password: Optional[str] = None
    owner_password: Optional[str] = None

    @property
    def requested(self) -> bool:
        return bool(self.password or self.owner_password)

    def redacted(self) -> Dict[str, Optional[str]]:
        """Echo form with password values masked."""
        return {
            "password": "***" if self.password else None,
            "ownerPassword": "***" if self.owner_password else None,
        }


class RenderRequest(CamelModel):
    """One caller-submitted page to convert to PDF."""

    page_url: str = Field(..., alias="url", description="Absolute http(s) URL to render")
    input_props: Dict[str, Any] = Field(
        default_factory=dict,
        alias="data",
        description="Injected into the page as window.__INJECTED_DATA__",
    )
    pdf_options: RenderOptions = Field(default_factory=RenderOptions, alias="options")
    storage_target: StorageConfig = Field(default_factory=StorageConfig, alias="s3")
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    def redacted_echo(self) -> Dict[str, Any]:
        """Request as it is echoed into the progress record."""
        echo = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        echo["security"] = self.security.redacted()
        return echo


# ============================================================================
# Diagnostics
# ============================================================================

class SourceLocation(CamelModel):
    url: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None


class LogEntry(CamelModel):
    """A console message or uncaught runtime error emitted by the page."""

    kind: Literal["console", "pageError"]
    message: str
    level: Optional[str] = Field(None, description="Console severity (log, warning, error...)")
    source_location: Optional[SourceLocation] = None
    stack_trace: Optional[str] = None


# ============================================================================
# Cost
# ============================================================================

class CostBreakdown(CamelModel):
    compute_cost: float
    storage_cost: float
    request_cost: float
    upload_cost: float
    total_cost: float


class CostMetrics(CamelModel):
    """Estimated cost of one run."""

    region: str
    duration_ms: int
    duration_seconds: float
    memory_mb: int = Field(..., alias="memoryMB")
    disk_mb: int = Field(..., alias="diskMB")
    estimated_gb_seconds: float = Field(..., alias="estimatedGBSeconds")
    estimated_cost_usd: float = Field(..., alias="estimatedCostUSD")
    breakdown: CostBreakdown


# ============================================================================
# Progress Record
# ============================================================================

class SecurityOutcome(CamelModel):
    requested: bool
    applied: bool


class OutcomeSummary(CamelModel):
    status: str = "success"
    bucket: str
    key: str
    url: Optional[str] = None
    has_errors: bool
    error_count: int


class ProgressRecord(CamelModel):
    """JSON side-document stored next to the artifact."""

    request_id: str
    timestamp: str
    request: Dict[str, Any]
    response: OutcomeSummary
    security: SecurityOutcome
    metrics: CostMetrics

    def to_json_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True, indent=2).encode("utf-8")


def log_entries_payload(entries: List[LogEntry]) -> List[Dict[str, Any]]:
    return [entry.to_payload() for entry in entries]
