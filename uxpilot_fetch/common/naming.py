"""URL validation and output file naming helpers.

Output files are named ``uxpilot-{slug}-{timestamp}.{ext}`` where the
timestamp uses ``YYYY-MM-DD_HH-MM-SS`` so names sort chronologically.
The listing command recovers the slug and timestamp with
``parse_file_name``.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

if TYPE_CHECKING:
    from uxpilot_fetch.config import UXPilotConfig

FILE_PREFIX = "uxpilot"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
DEFAULT_SLUG = "design"
UNKNOWN = "unknown"

FILE_NAME_PATTERN = re.compile(
    r"uxpilot-(.+)-(\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2})\.(html|json)"
)


def is_valid_url(url: str) -> bool:
    """Check that a string is an absolute URL with a scheme and host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def is_valid_uxpilot_url(url: str) -> bool:
    if not is_valid_url(url):
        return False
    return "uxpilot.ai" in url


def design_slug_from_url(url: str) -> str:
    """Return the last non-empty path segment of a design URL.

    Args:
        url: Design URL, e.g. ``https://uxpilot.ai/s/abc123``.

    Returns:
        The slug (``abc123``), or ``design`` when the path is empty.
    """
    segments = [s for s in urlparse(url).path.split("/") if s]
    return segments[-1] if segments else DEFAULT_SLUG


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(text: str) -> datetime:
    return datetime.strptime(text, TIMESTAMP_FORMAT)


def build_file_name(slug: str, timestamp: str, extension: str) -> str:
    return f"{FILE_PREFIX}-{slug}-{timestamp}.{extension}"


def generate_output_file_paths(
    url: str,
    config: UXPilotConfig,
    now: datetime | None = None,
) -> tuple[Path, Path]:
    """Build the HTML and JSON output paths for one extraction.

    Both files share the same slug and timestamp so the listing command
    can pair them.

    Args:
        url: The design URL.
        config: Configuration providing the output directories.
        now: Extraction time (default: current local time).

    Returns:
        ``(html_path, json_path)`` relative to the working directory.
    """
    slug = design_slug_from_url(url)
    timestamp = format_timestamp(now or datetime.now())

    return (
        Path(config.output.html_dir)
        / build_file_name(slug, timestamp, "html"),
        Path(config.output.json_dir)
        / build_file_name(slug, timestamp, "json"),
    )


def parse_file_name(file_name: str) -> tuple[str, str]:
    """Recover ``(slug, timestamp)`` from an output file name.

    Names that do not follow the naming scheme return
    ``("unknown", "unknown")``.
    """
    match = FILE_NAME_PATTERN.search(file_name)
    if match:
        return match.group(1), match.group(2)
    return UNKNOWN, UNKNOWN


def create_output_dirs(config: UXPilotConfig) -> None:
    config.html_output_dir.mkdir(parents=True, exist_ok=True)
    config.json_output_dir.mkdir(parents=True, exist_ok=True)


def format_size(size: int) -> str:
    """Format bytes to human-readable string."""
    if size < 1000:
        return f"{size} B"
    elif size < 1000 * 1000:
        return f"{size / 1000:.1f} kB"
    elif size < 1000 * 1000 * 1000:
        return f"{size / (1000 * 1000):.1f} MB"
    else:
        return f"{size / (1000 * 1000 * 1000):.1f} GB"


def format_display_time(timestamp: str) -> str:
    """Render a file-name timestamp as e.g. ``Mar 05, 2025 2:07 pm``."""
    if timestamp == UNKNOWN:
        return "Unknown"
    try:
        moment = parse_timestamp(timestamp)
    except ValueError:
        return "Invalid date"

    hour = moment.hour % 12 or 12
    meridiem = "am" if moment.hour < 12 else "pm"
    return f"{moment:%b %d, %Y} {hour}:{moment:%M} {meridiem}"
