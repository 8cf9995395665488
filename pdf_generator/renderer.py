"""
Render-capable page abstraction and its Playwright/Chromium implementation.

The pipeline only talks to the `Renderer` and `Page` protocols below, so
tests can drive it with stubs. `PlaywrightRenderer` is the production
implementation.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from .models import RenderOptions, WaitUntil

logger = logging.getLogger(__name__)

CONSOLE_EVENT = "console"
PAGE_ERROR_EVENT = "pageerror"

INJECTED_DATA_GLOBAL = "__INJECTED_DATA__"

# Playwright has a single network-idle condition (no connections for 500ms)
_PLAYWRIGHT_WAIT_UNTIL = {
    WaitUntil.LOAD: "load",
    WaitUntil.DOM_CONTENT_LOADED: "domcontentloaded",
    WaitUntil.NETWORK_IDLE_QUIET: "networkidle",
    WaitUntil.NETWORK_IDLE_ALMOST_QUIET: "networkidle",
}


class NavigationError(Exception):
    """Navigation raised instead of returning a response (DNS failure, timeout...)."""


@dataclass(frozen=True)
class ConsoleMessage:
    """Console output emitted by the page."""
    level: str
    text: str
    url: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None


@dataclass(frozen=True)
class PageError:
    """Uncaught runtime error thrown inside the page."""
    message: str
    stack: Optional[str] = None


@dataclass(frozen=True)
class NavigationResponse:
    ok: bool
    status: Optional[int] = None
    status_text: Optional[str] = None


class Page(Protocol):
    def on_event(self, kind: str, handler: Callable[[Any], None]) -> None: ...

    async def inject_before_load(self, data: Dict[str, Any]) -> None: ...

    async def navigate(
        self, url: str, wait_until: WaitUntil, timeout_ms: int
    ) -> Optional[NavigationResponse]: ...

    async def rasterize(self, options: RenderOptions) -> bytes: ...

    async def close(self) -> None: ...


class Renderer(Protocol):
    async def new_page(self) -> Page: ...


def build_injection_script(data: Dict[str, Any]) -> str:
    """Script run before any page script that exposes the injected data."""
    payload = json.dumps(data, default=str)
    return f"globalThis.{INJECTED_DATA_GLOBAL} = {payload};"


def pdf_kwargs(options: RenderOptions) -> Dict[str, Any]:
    """Translate render options to Playwright `page.pdf()` keyword arguments."""
    kwargs: Dict[str, Any] = {
        "format": options.paper_format.value,
        "print_background": options.print_background,
        "landscape": options.landscape,
    }
    if options.margins is not None:
        margin = options.margins.model_dump(exclude_none=True)
        if margin:
            kwargs["margin"] = margin
    return kwargs


class PlaywrightPage:
    """`Page` backed by a Playwright page."""

    def __init__(self, page):
        self._page = page

    def on_event(self, kind: str, handler: Callable[[Any], None]) -> None:
        if kind == CONSOLE_EVENT:
            self._page.on("console", lambda msg: handler(self._console_message(msg)))
        elif kind == PAGE_ERROR_EVENT:
            self._page.on("pageerror", lambda err: handler(self._page_error(err)))
        else:
            raise ValueError(f"Unsupported page event: {kind}")

    @staticmethod
    def _console_message(msg) -> ConsoleMessage:
        location = msg.location or {}
        return ConsoleMessage(
            level=msg.type,
            text=msg.text,
            url=location.get("url") or None,
            line=location.get("lineNumber"),
            column=location.get("columnNumber"),
        )

    @staticmethod
    def _page_error(err) -> PageError:
        return PageError(
            message=getattr(err, "message", None) or str(err),
            stack=getattr(err, "stack", None),
        )

    async def inject_before_load(self, data: Dict[str, Any]) -> None:
        await self._page.add_init_script(script=build_injection_script(data))

    async def navigate(
        self, url: str, wait_until: WaitUntil, timeout_ms: int
    ) -> Optional[NavigationResponse]:
        from playwright.async_api import Error as PlaywrightError

        try:
            response = await self._page.goto(
                url,
                wait_until=_PLAYWRIGHT_WAIT_UNTIL[wait_until],
                timeout=timeout_ms,
            )
        except PlaywrightError as e:
            # TimeoutError is a subclass of Error
            raise NavigationError(str(e)) from e

        if response is None:
            return None
        return NavigationResponse(
            ok=response.ok,
            status=response.status,
            status_text=response.status_text,
        )

    async def rasterize(self, options: RenderOptions) -> bytes:
        return await self._page.pdf(**pdf_kwargs(options))

    async def close(self) -> None:
        await self._page.close()


class PlaywrightRenderer:
    """
    Chromium browser session producing `PlaywrightPage` instances.

    Usage:
        async with PlaywrightRenderer(headless=True) as renderer:
            page = await renderer.new_page()
    """

    def __init__(self, headless: bool = True, viewport: Optional[Dict[str, int]] = None):
        self.headless = headless
        self.viewport = viewport or {"width": 1920, "height": 1080}
        self._playwright = None
        self._browser = None

    async def start(self) -> "PlaywrightRenderer":
        # Import here to avoid loading Playwright on startup
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=["--no-sandbox", "--disable-setuid-sandbox"],
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.debug("Chromium launched (headless=%s)", self.headless)
        return self

    async def new_page(self) -> PlaywrightPage:
        if self._browser is None:
            raise RuntimeError("Renderer not started")
        page = await self._browser.new_page(viewport=self.viewport)
        return PlaywrightPage(page)

    async def stop(self) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
                logger.debug("Browser closed")
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    async def __aenter__(self) -> "PlaywrightRenderer":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
