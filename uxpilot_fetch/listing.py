"""Discovery and grouping of previously extracted designs.

Files are regrouped by the slug and timestamp encoded in their names, so
an extraction's HTML and JSON are paired even though they live in
different directories.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from uxpilot_fetch.common.naming import (
    UNKNOWN,
    format_display_time,
    parse_file_name,
)

if TYPE_CHECKING:
    from uxpilot_fetch.config import UXPilotConfig

logger = logging.getLogger(__name__)

FileType = Literal["html", "json"]


@dataclass
class DesignFile:
    """One output file on disk.

    Attributes:
        name: File name.
        path: Absolute path.
        size: Size in bytes.
        modified: Last modification time.
        type: "html" or "json".
        design_slug: Slug parsed from the name ("unknown" if unparseable).
        timestamp: Timestamp parsed from the name ("unknown" if unparseable).
    """

    name: str
    path: Path
    size: int
    modified: datetime
    type: FileType
    design_slug: str
    timestamp: str


@dataclass
class Extraction:
    """The files produced by one fetch of one design."""

    timestamp: str
    html: DesignFile | None = None
    json: DesignFile | None = None

    @property
    def display_time(self) -> str:
        return format_display_time(self.timestamp)

    @property
    def missing(self) -> FileType | None:
        if self.html is None:
            return "html"
        if self.json is None:
            return "json"
        return None


@dataclass
class DesignSummary:
    """All extractions of one design, newest first."""

    design_slug: str
    extractions: list[Extraction]

    @property
    def extraction_count(self) -> int:
        return len(self.extractions)

    def to_dict(self) -> dict[str, Any]:
        def _file(f: DesignFile | None) -> dict[str, Any] | None:
            if f is None:
                return None
            return {
                "path": str(f.path),
                "size": f.size,
                "modified": f.modified.isoformat(),
            }

        return {
            "design_slug": self.design_slug,
            "extraction_count": self.extraction_count,
            "extractions": [
                {
                    "timestamp": e.timestamp,
                    "display_time": e.display_time,
                    "html": _file(e.html),
                    "json": _file(e.json),
                    "missing": e.missing,
                }
                for e in self.extractions
            ],
        }


def _scan_directory(directory: Path, file_type: FileType) -> list[DesignFile]:
    files: list[DesignFile] = []
    for path in sorted(directory.iterdir()):
        if not path.name.endswith(f".{file_type}") or not path.is_file():
            continue
        stats = path.stat()
        design_slug, timestamp = parse_file_name(path.name)
        files.append(
            DesignFile(
                name=path.name,
                path=path,
                size=stats.st_size,
                modified=datetime.fromtimestamp(stats.st_mtime),
                type=file_type,
                design_slug=design_slug,
                timestamp=timestamp,
            )
        )
    return files


def get_design_files(config: UXPilotConfig) -> list[DesignFile]:
    """Collect HTML and JSON output files.

    Missing output directories are created. A read error is logged and
    yields an empty list.
    """
    html_dir = config.html_output_dir
    json_dir = config.json_output_dir

    try:
        for directory, label in ((html_dir, "HTML"), (json_dir, "JSON")):
            if not directory.exists():
                directory.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created {label} output directory: {directory}")

        return _scan_directory(html_dir, "html") + _scan_directory(
            json_dir, "json"
        )
    except OSError as e:
        logger.error(f"Error reading output directories: {e}")
        return []


def group_by_design(files: list[DesignFile]) -> dict[str, list[DesignFile]]:
    groups: dict[str, list[DesignFile]] = {}
    for f in files:
        groups.setdefault(f.design_slug, []).append(f)
    return groups


def summarize_designs(
    groups: dict[str, list[DesignFile]],
) -> list[DesignSummary]:
    """Pair files into extractions and order everything newest first.

    Designs are ordered by their most recently modified file. Within a
    design, extractions are ordered by timestamp, newest first.
    """
    ordered = sorted(
        groups.items(),
        key=lambda item: max(f.modified for f in item[1]),
        reverse=True,
    )

    summaries: list[DesignSummary] = []
    for design_slug, files in ordered:
        by_timestamp: dict[str, Extraction] = {}
        # unparseable "unknown" timestamps sort after every real one
        for f in sorted(
            files,
            key=lambda f: (f.timestamp != UNKNOWN, f.timestamp),
            reverse=True,
        ):
            extraction = by_timestamp.setdefault(
                f.timestamp, Extraction(timestamp=f.timestamp)
            )
            if f.type == "html":
                extraction.html = f
            else:
                extraction.json = f
        summaries.append(
            DesignSummary(
                design_slug=design_slug,
                extractions=list(by_timestamp.values()),
            )
        )
    return summaries
