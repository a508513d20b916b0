"""uxpilot CLI — fetch UXPilot designs and manage the saved outputs.

Usage:
    uxpilot fetch                             # Prompt for a design URL
    uxpilot fetch https://uxpilot.ai/s/<id>   # Fetch a design
    uxpilot fetch <url> --device-type mobile  # Override config options
    uxpilot list                              # List extracted designs
    uxpilot list --format json                # Same, as JSON
    uxpilot clear                             # Delete all outputs
    uxpilot --config my.toml fetch <url>      # Use an explicit config file
"""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
from pathlib import Path

import click

from uxpilot_fetch.common.exceptions import UXPilotException
from uxpilot_fetch.common.naming import format_size
from uxpilot_fetch.config import UXPilotConfig, load_config
from uxpilot_fetch.listing import (
    DesignSummary,
    get_design_files,
    group_by_design,
    summarize_designs,
)
from uxpilot_fetch.pipeline import FetchResult, fetch_design

logger = logging.getLogger(__name__)


def _relative(path: Path) -> str:
    """Render a path relative to the working directory when possible."""
    try:
        return str(Path(path).resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


@click.group()
@click.version_option(package_name="uxpilot-fetch")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML configuration file (default: ./uxpilot.toml if present).",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """Fetch UXPilot design previews as HTML and computed-styles JSON."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(config_path)
    except UXPilotException as e:
        raise click.ClickException(str(e)) from e

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.argument("url", required=False)
@click.option(
    "--device-type",
    type=click.Choice(["desktop", "mobile"]),
    default=None,
    help="Override options.device_type.",
)
@click.option(
    "--headless/--headed",
    default=None,
    help="Override options.headless_browser.",
)
@click.option(
    "--plugin/--no-plugin",
    default=None,
    help="Override options.auto_write_to_plugin.",
)
@click.pass_context
def fetch(
    ctx: click.Context,
    url: str | None,
    device_type: str | None,
    headless: bool | None,
    plugin: bool | None,
) -> None:
    """Fetch a design, compute its styles and save both.

    URL is a UXPilot share link; you are prompted for it when omitted.

    \b
    Examples:
        uxpilot fetch https://uxpilot.ai/s/abc123
        uxpilot fetch https://uxpilot.ai/s/abc123 --no-plugin --headed
    """
    config: UXPilotConfig = ctx.obj["config"]

    overrides = {
        "device_type": device_type,
        "headless_browser": headless,
        "auto_write_to_plugin": plugin,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        config = config.model_copy(
            update={"options": config.options.model_copy(update=overrides)}
        )

    if url is None:
        url = click.prompt(
            "Please enter the UXPilot design URL",
            prompt_suffix=" (https://uxpilot.ai/s/<design-id>): ",
        )

    def _progress(message: str) -> None:
        click.echo(click.style(message, dim=True))

    async def _go() -> None:
        result = await fetch_design(url, config, on_progress=_progress)
        _report_fetch(result)

        plugin_result = await result.wait_for_plugin()
        if plugin_result is not None:
            plugin_path, plugin_bytes = plugin_result
            click.echo(
                click.style(
                    f"JSON written to plugin repo: {plugin_path} "
                    f"({format_size(plugin_bytes)})",
                    dim=True,
                )
            )

    try:
        asyncio.run(_go())
    except UXPilotException as e:
        logger.debug("Fetch failed", exc_info=True)
        raise click.ClickException(str(e)) from e


def _report_fetch(result: FetchResult) -> None:
    click.echo(
        click.style("UXPilot design fetched and saved", fg="green", bold=True)
    )
    click.echo(f"HTML: {result.html_path} ({format_size(result.html_bytes)})")
    click.echo(f"JSON: {result.json_path} ({format_size(result.json_bytes)})")


@cli.command("list")
@click.option(
    "--format",
    "format_type",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
    help="Output format.",
)
@click.pass_context
def list_designs(ctx: click.Context, format_type: str) -> None:
    """List extracted designs grouped by design and extraction time."""
    config: UXPilotConfig = ctx.obj["config"]

    files = get_design_files(config)
    summaries = summarize_designs(group_by_design(files))

    if format_type == "json":
        click.echo(json.dumps([s.to_dict() for s in summaries], indent=2))
        return

    if not files:
        click.echo("No extracted designs found yet.")
        click.echo(
            "Run the extraction process first to generate HTML and JSON files."
        )
        return

    click.echo(f"Found {len(summaries)} unique design(s)")
    for summary in summaries:
        _echo_summary(summary)

    click.echo(
        "\n"
        + click.style('Use "uxpilot clear" to delete all outputs', dim=True)
    )


def _echo_summary(summary: DesignSummary) -> None:
    click.echo(
        "\n"
        + click.style(f"Design: {summary.design_slug}", fg="cyan", bold=True)
    )
    click.echo(
        click.style(
            f"   Total extractions: {summary.extraction_count}", dim=True
        )
    )

    for extraction in summary.extractions:
        click.echo(
            click.style(f"   └─ {extraction.display_time}", dim=True)
        )

        if extraction.html is not None:
            click.echo(
                click.style("      HTML: ", fg="green")
                + click.style(_relative(extraction.html.path), fg="cyan")
                + click.style(
                    f" ({format_size(extraction.html.size)})", fg="green"
                )
            )

        if extraction.json is not None:
            click.echo(
                click.style("      JSON: ", fg="blue")
                + click.style(_relative(extraction.json.path), fg="cyan")
                + click.style(
                    f" ({format_size(extraction.json.size)})", fg="blue"
                )
            )

        if extraction.missing is not None:
            click.echo(
                click.style(
                    f"      Missing {extraction.missing.upper()} file",
                    fg="yellow",
                )
            )


@cli.command()
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def clear(ctx: click.Context, yes: bool) -> None:
    """Permanently delete the HTML and JSON output directories."""
    config: UXPilotConfig = ctx.obj["config"]
    directories = [config.html_output_dir, config.json_output_dir]

    click.echo(
        click.style(
            "The following directories will be permanently deleted:",
            fg="yellow",
        )
    )
    for directory in directories:
        click.echo(f"  {directory}")

    if not yes and not click.confirm("Are you sure you want to continue?"):
        click.echo("Cancelled")
        return

    for directory in directories:
        if directory.exists():
            shutil.rmtree(directory)
            logger.debug(f"Removed {directory}")

    click.echo(click.style("Outputs cleared", fg="green"))


def main() -> None:
    """Entry point for the ``uxpilot`` console script."""
    cli()
