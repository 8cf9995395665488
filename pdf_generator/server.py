"""
Dev server entrypoint - runs the PDF generator with uvicorn.

Probes for a free port starting at PORT so a second instance does not
fail on startup.
"""

import logging
import os
import socket

import uvicorn

from .config import get_settings, validate_config_on_startup
from .logger import setup_logging

logger = logging.getLogger(__name__)

DEV_API_KEY = "dev-api-key"
PORT_SEARCH_SPAN = 100


def is_port_available(port: int, host: str = "127.0.0.1") -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_available_port(start_port: int, host: str = "127.0.0.1") -> int:
    """
    First free port in [start_port, start_port + 100).

    Raises:
        RuntimeError: when every port in the range is taken
    """
    end_port = min(start_port + PORT_SEARCH_SPAN, 65536)
    for port in range(start_port, end_port):
        if is_port_available(port, host):
            return port
    raise RuntimeError(f"No available port found between {start_port} and {end_port}")


def main() -> None:
    """Run the development server."""
    os.environ.setdefault("API_KEY", DEV_API_KEY)
    get_settings.cache_clear()
    settings = get_settings()

    setup_logging(settings.log_level, settings.log_format)
    validate_config_on_startup(settings)

    port = find_available_port(settings.port, settings.host)
    if port != settings.port:
        logger.info(f"Port {settings.port} is in use, using port {port} instead")

    sample = (
        f"curl -X POST http://localhost:{port} "
        "-H 'Content-Type: application/json' "
        "-H 'x-api-key: $API_KEY' "
        "-d '{\"url\": \"https://example.com\"}'"
    )
    if settings.skip_s3:
        sample += " --output test.pdf"

    logger.info("PDF Generator Dev Server")
    logger.info(f"  URL:      http://localhost:{port}")
    logger.info(f"  API Key:  {(settings.api_key or '')[:4]}...")
    logger.info(f"  Skip S3:  {'Yes (returns PDF directly)' if settings.skip_s3 else 'No (uploads to S3)'}")
    logger.info(f"  Sample:   {sample}")

    from .app import app

    uvicorn.run(
        app,
        host=settings.host,
        port=port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
