"""Artifact writers for fetched designs."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uxpilot_fetch.config import UXPilotConfig

logger = logging.getLogger(__name__)

DOCTYPE = "<!DOCTYPE html>"
PLUGIN_JSON_FILENAME = "preview-html.json"


def _write_text(path: Path, text: str) -> int:
    """Write UTF-8 text and return the number of bytes written."""
    data = text.encode("utf-8")
    path.write_bytes(data)
    return len(data)


async def write_design_artifacts(
    html: str,
    json_text: str,
    html_path: Path,
    json_path: Path,
) -> tuple[int, int]:
    """Write the HTML and JSON files concurrently.

    The HTML is prefixed with ``<!DOCTYPE html>``.

    Returns:
        ``(html_bytes, json_bytes)``.
    """
    html_bytes, json_bytes = await asyncio.gather(
        asyncio.to_thread(_write_text, html_path, f"{DOCTYPE}{html}"),
        asyncio.to_thread(_write_text, json_path, json_text),
    )
    logger.debug(f"Wrote {html_path} ({html_bytes} bytes)")
    logger.debug(f"Wrote {json_path} ({json_bytes} bytes)")
    return html_bytes, json_bytes


async def write_json_to_plugin_repo(
    json_text: str, config: UXPilotConfig
) -> tuple[Path, int]:
    """Mirror the computed JSON into the Figma plugin repository.

    The plugin directory must already exist.

    Returns:
        ``(plugin_json_path, bytes_written)``.

    Raises:
        OSError: If the plugin directory is missing or not writable.
    """
    plugin_json_path = config.figma_plugin_dir / PLUGIN_JSON_FILENAME
    bytes_written = await asyncio.to_thread(
        _write_text, plugin_json_path, json_text
    )
    return plugin_json_path, bytes_written
