"""Playwright-based fetcher for UXPilot design previews.

This module launches a browser, loads a design share page and reads the
rendered preview HTML out of its ``iframe[srcdoc]``.
"""

from uxpilot_fetch.driver.playwright_fetcher.playwright_fetcher import (
    PlaywrightFetcher,
    unescape_html,
)

__all__ = ["PlaywrightFetcher", "unescape_html"]
