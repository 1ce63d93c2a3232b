"""
Browser session - a headless Chromium page holding the content tree.

Each pagination job owns its own browser, so parallel jobs never share
mutable state.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from playwright.async_api import Browser, BrowserContext, Error as PlaywrightError, Page, async_playwright

from ..config import PaginationOptions
from ..exceptions import CaptureFailure, ConfigurationError

logger = logging.getLogger(__name__)

VIEWPORT_HEIGHT = 1200


@dataclass
class ContentSource:
    """Where the content tree comes from and which element is its root."""

    html: Optional[str] = None
    url: Optional[str] = None
    selector: str = "body"

    @classmethod
    def from_file(cls, path: Union[str, Path], selector: str = "body") -> "ContentSource":
        path = Path(path)
        if not path.exists():
            raise ConfigurationError("Input file not found", str(path))
        return cls(url=path.resolve().as_uri(), selector=selector)

    @classmethod
    def from_html(cls, html: str, selector: str = "body") -> "ContentSource":
        return cls(html=html, selector=selector)

    def describe(self) -> str:
        return self.url or f"<inline html, {len(self.html or '')} chars>"


class BrowserSession:
    """Async context manager around one Playwright browser."""

    def __init__(self, options: PaginationOptions):
        self.options = options
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self) -> "BrowserSession":
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.options.headless)
            self._context = await self._browser.new_context(
                viewport={"width": int(self.options.logical_width_px), "height": VIEWPORT_HEIGHT},
                device_scale_factor=self.options.oversampling,
            )
        except PlaywrightError as exc:
            await self.close()
            raise CaptureFailure("Could not start headless browser", str(exc)) from exc
        logger.debug(
            f"Browser session started (width={self.options.logical_width_px}px, "
            f"scale={self.options.oversampling})"
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        for name in ("_context", "_browser"):
            resource = getattr(self, name)
            if resource is None:
                continue
            try:
                await resource.close()
            except PlaywrightError as exc:
                logger.debug(f"Ignoring error while closing {name.strip('_')}: {exc}")
            setattr(self, name, None)
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def open(self, source: ContentSource) -> Page:
        """Load the source document into a new page."""
        if self._context is None:
            raise RuntimeError("BrowserSession is not started")
        page = await self._context.new_page()
        page.set_default_timeout(self.options.navigation_timeout_ms)
        try:
            if source.url:
                await page.goto(source.url, wait_until="networkidle")
            elif source.html is not None:
                await page.set_content(source.html, wait_until="networkidle")
            else:
                raise ConfigurationError("Content source has neither html nor url")
        except PlaywrightError as exc:
            raise CaptureFailure("Could not load content", f"{source.describe()}: {exc}") from exc
        logger.info(f"Loaded {source.describe()}")
        return page
