"""
PDF Generator Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeneratorSettings(BaseSettings):
    """
    PDF generator configuration with validation.

    All settings can be overridden via environment variables.
    The pipeline receives an instance explicitly instead of reading
    environment state on its own.
    """

    model_config = SettingsConfigDict(
        env_prefix="",  # No prefix, use exact env var names
        case_sensitive=False,  # PDF_BUCKET = pdf_bucket
        extra="ignore",
    )

    # === Storage ===
    pdf_bucket: str = Field(
        default="pdf-storage-1",
        min_length=3,
        description="Default S3 bucket for generated PDFs"
    )
    aws_region: str = Field(
        default="ap-south-1",
        description="Region for the S3 client and cost estimation"
    )
    skip_s3: bool = Field(
        default=False,
        description="Skip uploads entirely (local/dev execution)"
    )

    # === Resource Reservation (used for cost estimation) ===
    memory_size_mb: int = Field(
        default=1024,
        ge=128,
        le=10240,
        validation_alias=AliasChoices("AWS_LAMBDA_FUNCTION_MEMORY_SIZE", "memory_size_mb"),
        description="Reserved memory in MB (128-10240)"
    )
    ephemeral_storage_mb: int = Field(
        default=512,
        ge=512,
        le=10240,
        description="Reserved ephemeral storage in MB (512-10240)"
    )

    # === Security ===
    api_key: Optional[str] = Field(
        default=None,
        description="Static API key expected in the x-api-key header"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )
    debug_mode: bool = Field(
        default=False,
        description="Include stack traces in server error responses"
    )

    # === Rendering ===
    max_concurrent_pdfs: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum concurrent PDF renders (1-50)"
    )
    playwright_headless: bool = Field(default=True)
    viewport_width: int = Field(default=1920, ge=320)
    viewport_height: int = Field(default=1080, ge=240)

    # === Dev Server ===
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000, ge=1, le=65535)

    # === Logging ===
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="simple")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(allowed))}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in {"simple", "json"}:
            raise ValueError("log_format must be 'simple' or 'json'")
        return v.lower()

    @field_validator("api_key")
    @classmethod
    def blank_api_key_is_unset(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty API_KEY as not configured."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def include_stack_traces(self) -> bool:
        """Stack traces are only exposed in debug mode."""
        return self.debug_mode

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration is suitable for production.

        Returns list of warning/error messages.
        """
        issues = []

        if self.is_production:
            if not self.api_key:
                issues.append("CRITICAL: API_KEY required in production")
            if self.skip_s3:
                issues.append("WARNING: SKIP_S3 enabled in production, PDFs will not be stored")
            if self.debug_mode:
                issues.append("WARNING: DEBUG_MODE enabled in production")

        return issues


@lru_cache()
def get_settings() -> GeneratorSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for performance.
    """
    return GeneratorSettings()


def validate_config_on_startup(settings: Optional[GeneratorSettings] = None) -> GeneratorSettings:
    """
    Validate configuration at application startup.

    Raises ValueError with details if config is invalid.
    Logs warnings for non-critical issues.
    """
    import logging
    logger = logging.getLogger(__name__)

    if settings is None:
        try:
            settings = get_settings()
        except Exception as e:
            raise ValueError(f"Configuration validation failed: {e}") from e

    for issue in settings.validate_production_config():
        if issue.startswith("CRITICAL"):
            raise ValueError(issue)
        logger.warning(issue)

    # Log loaded configuration (redact secrets)
    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  bucket={settings.pdf_bucket} region={settings.aws_region}")
    logger.info(f"  skip_s3={settings.skip_s3}")
    logger.info(f"  memory={settings.memory_size_mb}MB disk={settings.ephemeral_storage_mb}MB")
    logger.info(f"  max_concurrent_pdfs={settings.max_concurrent_pdfs}")
    logger.info(f"  api_key={'*****' if settings.api_key else 'not set'}")

    return settings
