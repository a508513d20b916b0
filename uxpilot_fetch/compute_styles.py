"""Adapter for the external computeHtmlStyles library.

The library lives outside this repository, in the directory configured
as ``paths.compute_html_styles``. It must contain ``html_to_json_utils.py``
exposing::

    def compute_styles(html: str, device_type: str) -> Mapping[str, Any]

The function may also be a coroutine function. Its result must carry the
layout/style tree under ``computed_styles``; everything else is ignored.
"""

from __future__ import annotations

import importlib.util
import inspect
import json
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from uxpilot_fetch.common.exceptions import StyleComputationException

if TYPE_CHECKING:
    from uxpilot_fetch.config import UXPilotConfig

logger = logging.getLogger(__name__)

STYLE_MODULE_FILENAME = "html_to_json_utils.py"
STYLE_FUNCTION_NAME = "compute_styles"
RESULT_KEY = "computed_styles"


def load_compute_styles(directory: Path) -> Callable[..., Any]:
    """Import ``compute_styles`` from the library directory.

    Args:
        directory: Directory containing ``html_to_json_utils.py``.

    Returns:
        The ``compute_styles`` callable.

    Raises:
        StyleComputationException: If the module file is missing, fails to
            import, or does not define ``compute_styles``.
    """
    module_path = Path(directory) / STYLE_MODULE_FILENAME
    if not module_path.is_file():
        raise StyleComputationException(
            "computeHtmlStyles module not found",
            {"path": str(module_path)},
        )

    spec = importlib.util.spec_from_file_location(
        "html_to_json_utils", module_path
    )
    if spec is None or spec.loader is None:
        raise StyleComputationException(
            "Could not load computeHtmlStyles module",
            {"path": str(module_path)},
        )

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise StyleComputationException(
            f"Could not import computeHtmlStyles module: "
            f"{type(e).__name__}: {e}",
            {"path": str(module_path)},
        ) from e

    compute_styles = getattr(module, STYLE_FUNCTION_NAME, None)
    if not callable(compute_styles):
        raise StyleComputationException(
            f"Module has no callable '{STYLE_FUNCTION_NAME}'",
            {"path": str(module_path)},
        )

    logger.debug(f"Loaded {STYLE_FUNCTION_NAME} from {module_path}")
    return compute_styles


async def process_html_with_compute_html_styles(
    html: str, config: UXPilotConfig
) -> str:
    """Run computeHtmlStyles on the HTML and serialize the result.

    Args:
        html: Unescaped preview HTML.
        config: Configuration providing the library path and device type.

    Returns:
        ``computed_styles`` as JSON text with 2-space indentation.

    Raises:
        StyleComputationException: If the library cannot be loaded, raises
            while computing, its result has no ``computed_styles``, or the value is not
            JSON-serializable.
    """
    compute_styles = load_compute_styles(config.compute_html_styles_dir)
    device_type = config.options.device_type

    try:
        result = compute_styles(html, device_type)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        raise StyleComputationException(
            f"{STYLE_FUNCTION_NAME} failed: {type(e).__name__}: {e}",
            {"device_type": device_type},
        ) from e

    if not isinstance(result, Mapping) or RESULT_KEY not in result:
        raise StyleComputationException(
            f"{STYLE_FUNCTION_NAME} returned no '{RESULT_KEY}'",
            {
                "device_type": device_type,
                "result_type": type(result).__name__,
            },
        )

    try:
        return json.dumps(result[RESULT_KEY], indent=2)
    except (TypeError, ValueError) as e:
        raise StyleComputationException(
            f"computed styles are not JSON-serializable: {e}",
            {"device_type": device_type},
        ) from e
