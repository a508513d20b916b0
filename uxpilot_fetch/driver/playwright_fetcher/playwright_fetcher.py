"""Playwright fetcher implementation.

A UXPilot share page renders the generated design inside an iframe whose
``srcdoc`` attribute holds the complete HTML document. The fetcher:

1. Launches a browser and a fresh context
2. Navigates to the share URL and waits for DOMContentLoaded
3. Waits for ``iframe[srcdoc]`` to attach
4. Returns the raw (still entity-escaped) ``srcdoc`` value

The browser, context and Playwright instance are all released when the
``open()`` context exits, so callers should leave the context before
doing any further processing.
"""

from __future__ import annotations

import html
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import (
    TimeoutError as PlaywrightTimeoutError,
)

from uxpilot_fetch.common.exceptions import (
    BrowserTimeoutException,
    MissingSrcdocException,
    NavigationException,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

SRCDOC_SELECTOR = "iframe[srcdoc]"
DEFAULT_TIMEOUT_MS = 30000.0


class PlaywrightFetcher:
    """Reads preview HTML from UXPilot share pages.

    Args:
        browser_context: Playwright browser context used for navigation.
        timeout: Milliseconds to wait for navigation and for the iframe.
        selector: CSS selector of the preview iframe.

    Example:
        async with PlaywrightFetcher.open(headless=True) as fetcher:
            srcdoc = await fetcher.fetch_srcdoc(url)
    """

    def __init__(
        self,
        browser_context: BrowserContext,
        timeout: float = DEFAULT_TIMEOUT_MS,
        selector: str = SRCDOC_SELECTOR,
    ) -> None:
        self.browser_context = browser_context
        self.timeout = timeout
        self.selector = selector

    @classmethod
    @asynccontextmanager
    async def open(
        cls,
        browser_type: str = "chromium",
        headless: bool = True,
        viewport: dict[str, int] | None = None,
        user_agent: str | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[PlaywrightFetcher]:
        """Open a fetcher as an async context manager.

        Args:
            browser_type: "chromium", "firefox", or "webkit" (default: "chromium").
            headless: Run browser in headless mode (default: True).
            viewport: Browser viewport size (default: None = 1280x720).
            user_agent: Custom user agent string (default: None = browser default).
            **kwargs: Additional arguments passed to __init__.

        Yields:
            Initialized PlaywrightFetcher instance.
        """
        if viewport is None:
            viewport = {"width": 1280, "height": 720}

        playwright = await async_playwright().start()
        try:
            browser_launcher = getattr(playwright, browser_type)
            browser: Browser = await browser_launcher.launch(headless=headless)
            logger.info(
                f"Browser launched ({browser_type}, headless={headless})"
            )

            try:
                context_kwargs: dict[str, Any] = {"viewport": viewport}
                if user_agent:
                    context_kwargs["user_agent"] = user_agent

                browser_context = await browser.new_context(**context_kwargs)

                try:
                    yield cls(browser_context=browser_context, **kwargs)
                finally:
                    await browser_context.close()

            finally:
                await browser.close()
                logger.debug("Browser closed")

        finally:
            await playwright.stop()

    async def fetch_srcdoc(self, url: str) -> str:
        """Load a share page and return its iframe ``srcdoc`` attribute.

        Args:
            url: The design share URL.

        Returns:
            The raw srcdoc value, HTML entities still escaped.

        Raises:
            BrowserTimeoutException: If navigation or the iframe wait times out.
            NavigationException: If the page cannot be loaded at all.
            MissingSrcdocException: If the attribute is missing or empty.
        """
        page = await self.browser_context.new_page()
        try:
            try:
                await page.goto(
                    url, wait_until="domcontentloaded", timeout=self.timeout
                )
            except PlaywrightTimeoutError as e:
                logger.warning(f"Navigation timeout for {url}: {e}")
                raise BrowserTimeoutException(
                    url, "domcontentloaded", self.timeout
                ) from e
            except PlaywrightError as e:
                logger.warning(f"Navigation failed for {url}: {e.message}")
                raise NavigationException(url, e.message) from e

            logger.info("Page loaded, waiting for iframe to load...")

            iframe = page.locator(self.selector).first
            try:
                await iframe.wait_for(state="attached", timeout=self.timeout)
            except PlaywrightTimeoutError as e:
                logger.warning(f"Iframe wait timeout for {url}: {e}")
                raise BrowserTimeoutException(
                    url, self.selector, self.timeout
                ) from e

            logger.info("Iframe loaded, getting srcdoc...")
            srcdoc = await iframe.get_attribute("srcdoc")

        finally:
            await page.close()

        if not srcdoc:
            raise MissingSrcdocException(url, self.selector)

        return srcdoc


def unescape_html(srcdoc: str) -> str:
    """Decode HTML entities in a srcdoc value."""
    return html.unescape(srcdoc)
