"""
Console and runtime error collection for a page.

`attach_error_collector` wires two listeners onto a page and returns the
buffers they append to. The buffers are live: read them once navigation
has completed.
"""

from dataclasses import dataclass, field
from typing import List

from .models import LogEntry, SourceLocation
from .renderer import CONSOLE_EVENT, PAGE_ERROR_EVENT, ConsoleMessage, Page, PageError

ERROR_LEVELS = {"error"}


@dataclass
class ErrorCollection:
    """Per-run diagnostic buffers owned by one pipeline run."""

    console_log: List[LogEntry] = field(default_factory=list)
    error_log: List[LogEntry] = field(default_factory=list)

    def on_console(self, message: ConsoleMessage) -> None:
        location = None
        if message.url or message.line is not None or message.column is not None:
            location = SourceLocation(url=message.url, line=message.line, column=message.column)

        entry = LogEntry(
            kind="console",
            message=message.text,
            level=message.level,
            source_location=location,
        )
        self.console_log.append(entry)
        if message.level in ERROR_LEVELS:
            self.error_log.append(entry)

    def on_page_error(self, error: PageError) -> None:
        self.error_log.append(
            LogEntry(kind="pageError", message=error.message, stack_trace=error.stack)
        )


def attach_error_collector(page: Page) -> ErrorCollection:
    """Register console and pageerror listeners for the lifetime of the page."""
    collection = ErrorCollection()
    page.on_event(CONSOLE_EVENT, collection.on_console)
    page.on_event(PAGE_ERROR_EVENT, collection.on_page_error)
    return collection
