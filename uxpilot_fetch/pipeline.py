"""Fetch pipeline: share URL to HTML and computed-styles JSON on disk.

Steps:

1. Validate the share URL
2. Read the preview ``srcdoc`` in a browser, then close the browser
3. Unescape the HTML and run computeHtmlStyles on it
4. Write the HTML and JSON artifacts concurrently
5. Start the Figma plugin mirror write in the background (optional)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from uxpilot_fetch.common.exceptions import InvalidDesignURLException
from uxpilot_fetch.common.naming import (
    create_output_dirs,
    generate_output_file_paths,
    is_valid_uxpilot_url,
)
from uxpilot_fetch.compute_styles import process_html_with_compute_html_styles
from uxpilot_fetch.driver.playwright_fetcher import (
    PlaywrightFetcher,
    unescape_html,
)
from uxpilot_fetch.writer import (
    write_design_artifacts,
    write_json_to_plugin_repo,
)

if TYPE_CHECKING:
    from uxpilot_fetch.config import UXPilotConfig

logger = logging.getLogger(__name__)

FetcherFactory = Callable[
    [bool], AbstractAsyncContextManager[PlaywrightFetcher]
]
ProgressCallback = Callable[[str], None]


def _default_fetcher_factory(
    headless: bool,
) -> AbstractAsyncContextManager[PlaywrightFetcher]:
    return PlaywrightFetcher.open(headless=headless)


def _no_progress(message: str) -> None:
    pass


@dataclass
class FetchResult:
    """Outcome of one design fetch.

    Attributes:
        url: The design share URL.
        html_path: Path of the written HTML file.
        json_path: Path of the written JSON file.
        html_bytes: Bytes written to the HTML file.
        json_bytes: Bytes written to the JSON file.
        plugin_task: Background write to the Figma plugin repo, if enabled.
    """

    url: str
    html_path: Path
    json_path: Path
    html_bytes: int
    json_bytes: int
    plugin_task: asyncio.Task[tuple[Path, int]] | None = field(
        default=None, repr=False
    )

    async def wait_for_plugin(self) -> tuple[Path, int] | None:
        """Wait for the plugin mirror write.

        A failed write is logged and reported as None; it never fails
        the fetch itself.

        Returns:
            ``(plugin_json_path, bytes_written)``, or None when the mirror
            is disabled or the write failed.
        """
        if self.plugin_task is None:
            return None
        try:
            return await self.plugin_task
        except OSError as e:
            logger.warning(f"Could not write JSON to plugin repo: {e}")
            return None


async def fetch_design(
    url: str,
    config: UXPilotConfig,
    fetcher_factory: FetcherFactory = _default_fetcher_factory,
    on_progress: ProgressCallback = _no_progress,
) -> FetchResult:
    """Fetch a UXPilot design and save its HTML and computed styles.

    Args:
        url: The design share URL.
        config: Run configuration.
        fetcher_factory: Builds the fetcher context from the headless flag.
        on_progress: Receives one human-readable message per step.

    Returns:
        FetchResult describing the written files.

    Raises:
        InvalidDesignURLException: If the URL is not a UXPilot design URL.
        MissingSrcdocException: If the preview iframe has no srcdoc.
        BrowserTimeoutException: If the page or iframe never loads.
        StyleComputationException: If computeHtmlStyles fails.
    """
    if not is_valid_uxpilot_url(url):
        raise InvalidDesignURLException(url)

    on_progress("Fetching UXPilot design...")
    async with fetcher_factory(config.options.headless_browser) as fetcher:
        on_progress("Browser launched")
        srcdoc = await fetcher.fetch_srcdoc(url)
        on_progress(
            "srcdoc found, closing browser and unescaping HTML entities..."
        )

    unescaped_html = unescape_html(srcdoc)

    on_progress("Computing styles JSON (using computeHtmlStyles)...")
    computed_styles_json = await process_html_with_compute_html_styles(
        unescaped_html, config
    )
    on_progress("Styles computed")

    create_output_dirs(config)
    html_path, json_path = generate_output_file_paths(url, config)

    on_progress("Writing to files...")
    html_bytes, json_bytes = await write_design_artifacts(
        unescaped_html, computed_styles_json, html_path, json_path
    )
    logger.info(f"Saved {html_path} and {json_path}")

    plugin_task = None
    if config.options.auto_write_to_plugin:
        plugin_task = asyncio.create_task(
            write_json_to_plugin_repo(computed_styles_json, config)
        )

    return FetchResult(
        url=url,
        html_path=html_path,
        json_path=json_path,
        html_bytes=html_bytes,
        json_bytes=json_bytes,
        plugin_task=plugin_task,
    )
