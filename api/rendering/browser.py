"""Headless Chromium rendering of certificate HTML into PDF.

The browser is a per-call resource: ``browser_session`` guarantees it is
closed on every exit path, and a failing close is logged rather than raised
so it never hides the error that caused the exit.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Protocol

from playwright.async_api import Browser, Playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from core.logger import get_logger

logger = get_logger(__name__)

PAGE_WIDTH_PX = 1828
PAGE_HEIGHT_PX = 1073
DEVICE_SCALE_FACTOR = 2

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
]

_WAIT_FOR_FONTS_JS = """
async () => {
    if (!document.fonts || !document.fonts.ready) {
        return false;
    }
    await document.fonts.ready;
    return true;
}
"""

# Resolves with the number of images still pending when the deadline hit.
_WAIT_FOR_IMAGES_JS = """
async (timeoutMs) => {
    const pending = Array.from(document.images || []).filter(img => !img.complete);
    if (pending.length === 0) {
        return 0;
    }
    let settled = 0;
    const loads = Promise.all(pending.map(img => new Promise(resolve => {
        const done = () => { settled += 1; resolve(); };
        img.addEventListener('load', done, { once: true });
        img.addEventListener('error', done, { once: true });
    })));
    const deadline = new Promise(resolve => setTimeout(resolve, timeoutMs));
    await Promise.race([loads, deadline]);
    return pending.length - settled;
}
"""


class RenderTimeoutError(Exception):
    """Raised when the page content does not settle within the timeout."""


class PageLike(Protocol):
    async def set_content(self, html: str, **kwargs: Any) -> None: ...

    async def evaluate(self, expression: str, arg: Any = None) -> Any: ...

    async def pdf(self, **kwargs: Any) -> bytes: ...


class BrowserLike(Protocol):
    async def new_page(self, **kwargs: Any) -> PageLike: ...

    async def close(self) -> None: ...


class BrowserLauncher(Protocol):
    async def launch(self) -> BrowserLike: ...


@dataclass(frozen=True)
class RenderOptions:
    """Timeouts for a single render, in seconds."""

    content_timeout: float = 30.0
    image_settle_timeout: float = 10.0


class _PlaywrightBrowser:
    """A launched Chromium together with the Playwright driver that owns it."""

    def __init__(self, playwright: Playwright, browser: Browser) -> None:
        self._playwright = playwright
        self._browser = browser

    async def new_page(self, **kwargs: Any) -> PageLike:
        return await self._browser.new_page(**kwargs)

    async def close(self) -> None:
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()


class PlaywrightLauncher:
    """Launches headless Chromium through Playwright."""

    def __init__(self, executable_path: str | None = None) -> None:
        self.executable_path = executable_path or None

    async def launch(self) -> BrowserLike:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=True,
                executable_path=self.executable_path,
                args=CHROMIUM_ARGS,
            )
        except BaseException:
            await playwright.stop()
            raise
        return _PlaywrightBrowser(playwright, browser)


@asynccontextmanager
async def browser_session(launcher: BrowserLauncher) -> AsyncIterator[BrowserLike]:
    """Launch a browser and close it on exit, whatever the outcome."""
    browser = await launcher.launch()
    try:
        yield browser
    finally:
        try:
            await browser.close()
        except Exception as e:
            logger.warning("browser.close.failed", error=str(e), exc_info=True)


async def _wait_for_fonts(page: PageLike) -> None:
    try:
        await page.evaluate(_WAIT_FOR_FONTS_JS)
    except PlaywrightError:
        logger.debug("browser.fonts.unsupported")


async def _wait_for_images(page: PageLike, timeout: float) -> None:
    unsettled = await page.evaluate(_WAIT_FOR_IMAGES_JS, int(timeout * 1000))
    if unsettled:
        logger.warning(
            "browser.images.unsettled",
            unsettled=unsettled,
            timeout_seconds=timeout,
        )


async def render_pdf(
    html: str,
    launcher: BrowserLauncher,
    options: RenderOptions | None = None,
) -> bytes:
    """Render self-contained HTML into a fixed-size PDF.

    Args:
        html: Complete HTML document with inlined assets
        launcher: Provides the browser for this render
        options: Content-load and image-settle timeouts

    Returns:
        PDF content as bytes

    Raises:
        RenderTimeoutError: If the content does not reach network idle in time
        playwright.async_api.Error: On launch, evaluation or export failures
    """
    options = options or RenderOptions()

    async with browser_session(launcher) as browser:
        page = await browser.new_page(
            viewport={"width": PAGE_WIDTH_PX, "height": PAGE_HEIGHT_PX},
            device_scale_factor=DEVICE_SCALE_FACTOR,
        )

        try:
            await page.set_content(
                html,
                wait_until="networkidle",
                timeout=options.content_timeout * 1000,
            )
        except PlaywrightTimeoutError as e:
            raise RenderTimeoutError(
                f"Timed out after {options.content_timeout:g}s "
                f"waiting for certificate content to load"
            ) from e

        await _wait_for_fonts(page)
        await _wait_for_images(page, options.image_settle_timeout)

        return await page.pdf(
            width=f"{PAGE_WIDTH_PX}px",
            height=f"{PAGE_HEIGHT_PX}px",
            print_background=True,
            landscape=False,
            margin={"top": "0px", "right": "0px", "bottom": "0px", "left": "0px"},
        )
