"""Shared fixtures for uxpilot_fetch tests."""

import asyncio
import socket
import textwrap
import threading
from collections.abc import AsyncIterator, Callable, Generator
from contextlib import asynccontextmanager, closing
from pathlib import Path

import pytest
from aiohttp import web
from click.testing import CliRunner

from uxpilot_fetch.common.exceptions import MissingSrcdocException
from uxpilot_fetch.config import (
    OptionsConfig,
    OutputConfig,
    PathsConfig,
    UXPilotConfig,
)

STYLE_LIBRARY_SOURCE = textwrap.dedent(
    '''
    """Stand-in for the computeHtmlStyles library."""


    def compute_styles(html, device_type):
        return {
            "computed_styles": {
                "device_type": device_type,
                "html_length": len(html),
                "children": [{"tag": "body", "styles": {"margin": "0px"}}],
            },
            "warnings": [],
        }
    '''
)

PREVIEW_SRCDOC = (
    "&lt;html&gt;&lt;body&gt;"
    "&lt;h1 class=&quot;title&quot;&gt;Hello &amp;amp; welcome&lt;/h1&gt;"
    "&lt;/body&gt;&lt;/html&gt;"
)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty project directory."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    for name in (
        "UXPILOT_OUTPUT__HTML_DIR",
        "UXPILOT_OUTPUT__JSON_DIR",
        "UXPILOT_OPTIONS__DEVICE_TYPE",
        "UXPILOT_OPTIONS__AUTO_WRITE_TO_PLUGIN",
        "UXPILOT_OPTIONS__HEADLESS_BROWSER",
    ):
        monkeypatch.delenv(name, raising=False)
    return project


@pytest.fixture
def style_library(tmp_path: Path) -> Path:
    """Directory containing a minimal html_to_json_utils.py."""
    library = tmp_path / "computeHtmlStyles"
    library.mkdir()
    (library / "html_to_json_utils.py").write_text(STYLE_LIBRARY_SOURCE)
    return library


@pytest.fixture
def plugin_dir(tmp_path: Path) -> Path:
    plugin = tmp_path / "uxpilot-figma-plugin"
    plugin.mkdir()
    return plugin


@pytest.fixture
def config(
    workspace: Path, style_library: Path, plugin_dir: Path
) -> UXPilotConfig:
    return UXPilotConfig(
        output=OutputConfig(html_dir="output/htmls", json_dir="output/json"),
        paths=PathsConfig(
            compute_html_styles=str(style_library),
            figma_plugin=str(plugin_dir),
        ),
        options=OptionsConfig(device_type="desktop"),
    )


@pytest.fixture
def config_file(
    workspace: Path, style_library: Path, plugin_dir: Path
) -> Path:
    """A uxpilot.toml equivalent to the ``config`` fixture."""
    path = workspace / "test-config.toml"
    path.write_text(
        textwrap.dedent(
            f"""
            [output]
            html_dir = "output/htmls"
            json_dir = "output/json"

            [paths]
            compute_html_styles = "{style_library.as_posix()}"
            figma_plugin = "{plugin_dir.as_posix()}"

            [options]
            device_type = "desktop"
            auto_write_to_plugin = true
            headless_browser = true
            """
        )
    )
    return path


class FakeFetcher:
    """Returns a canned srcdoc instead of driving a browser."""

    def __init__(self, srcdoc: str | None) -> None:
        self.srcdoc = srcdoc
        self.fetched: list[str] = []

    async def fetch_srcdoc(self, url: str) -> str:
        self.fetched.append(url)
        if not self.srcdoc:
            raise MissingSrcdocException(url, "iframe[srcdoc]")
        return self.srcdoc


@pytest.fixture
def fake_fetcher_factory() -> Callable[..., Callable]:
    """Build a fetcher factory serving a fixed srcdoc.

    The returned factory records the headless flag it was opened with
    on its ``calls`` attribute.
    """

    def make(srcdoc: str | None = PREVIEW_SRCDOC) -> Callable:
        fetcher = FakeFetcher(srcdoc)

        @asynccontextmanager
        async def factory(headless: bool) -> AsyncIterator[FakeFetcher]:
            factory.calls.append(headless)
            yield fetcher

        factory.calls = []
        factory.fetcher = fetcher
        return factory

    return make


# =============================================================================
# aiohttp preview server for browser integration tests
# =============================================================================


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


def create_preview_app() -> web.Application:
    """Pages shaped like UXPilot share links.

    /s/{design_id}  iframe with an entity-escaped srcdoc
    /s/empty        iframe with an empty srcdoc
    /s/missing      no iframe at all
    """

    async def design(request: web.Request) -> web.Response:
        design_id = request.match_info["design_id"]
        if design_id == "empty":
            iframe = '<iframe srcdoc=""></iframe>'
        elif design_id == "missing":
            iframe = "<p>Design not found</p>"
        else:
            iframe = f'<iframe srcdoc="{PREVIEW_SRCDOC}"></iframe>'
        body = f"<!DOCTYPE html><html><body>{iframe}</body></html>"
        return web.Response(text=body, content_type="text/html")

    app = web.Application()
    app.router.add_get("/s/{design_id}", design)
    return app


class AioHttpTestServer:
    """Wrapper to run aiohttp server in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        """Start the server in a background thread."""
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        self._started.wait(timeout=5.0)

    def _run_server(self) -> None:
        """Run the server in an asyncio event loop."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._started.set()
        self._loop.run_forever()

    def stop(self) -> None:
        """Stop the server and clean up resources."""
        if self._loop and self._runner:
            future = asyncio.run_coroutine_threadsafe(
                self._runner.cleanup(), self._loop
            )
            future.result(timeout=2.0)

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


@pytest.fixture
def preview_server() -> Generator[AioHttpTestServer, None, None]:
    """Start an aiohttp server serving UXPilot-like share pages.

    Yields:
        AioHttpTestServer instance with the preview app running.
    """
    server = AioHttpTestServer(create_preview_app(), find_free_port())
    server.start()
    yield server
    server.stop()
