"""
Logging setup and request-tagged loggers for the PDF generator.
"""

import logging
import sys


class RunLogAdapter(logging.LoggerAdapter):
    """Prefixes every message with ``[run:<short id>]`` for one pipeline run."""

    def process(self, msg, kwargs):
        return f"[run:{self.extra['run_id']}] {msg}", kwargs


def short_run_id(request_id: str) -> str:
    # "req-" prefix carries no information
    if request_id.startswith("req-"):
        request_id = request_id[4:]
    return request_id[:8]


def get_run_logger(name: str, request_id: str) -> RunLogAdapter:
    return RunLogAdapter(logging.getLogger(name), {"run_id": short_run_id(request_id)})


def setup_logging(level: str = "INFO", format: str = "simple") -> None:
    """
    Configure global logging settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Log format ("simple" or "json")
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    if format == "json":
        formatter = logging.Formatter(
            '{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)
