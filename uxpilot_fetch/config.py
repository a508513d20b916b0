"""Configuration for the UXPilot design fetcher.

Values come from, in increasing priority: the defaults below, a
``uxpilot.toml`` file in the working directory, and ``UXPILOT_``
environment variables (``__`` separates nested groups, e.g.
``UXPILOT_OPTIONS__DEVICE_TYPE=mobile``).

All paths are relative to the working directory.

Example ``uxpilot.toml``::

    [output]
    html_dir = "output/htmls"
    json_dir = "output/json"

    [paths]
    compute_html_styles = "../"
    figma_plugin = "../uxpilot-figma-plugin"

    [options]
    device_type = "desktop"
    auto_write_to_plugin = true
    headless_browser = true
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
    TomlConfigSettingsSource,
)

from uxpilot_fetch.common.exceptions import ConfigurationException

DEFAULT_CONFIG_FILE = "uxpilot.toml"


class OutputConfig(BaseModel):
    """Directories where generated HTML and JSON files are saved.

    Attributes:
        html_dir: Directory for HTML files.
        json_dir: Directory for computed-styles JSON files.
    """

    html_dir: str = "output/htmls"
    json_dir: str = "output/json"


class PathsConfig(BaseModel):
    """Locations of companion repositories.

    Attributes:
        compute_html_styles: Directory holding ``html_to_json_utils.py``.
        figma_plugin: Figma plugin repository; receives ``preview-html.json``
            when ``auto_write_to_plugin`` is enabled.
    """

    compute_html_styles: str = "../"
    figma_plugin: str = "../uxpilot-figma-plugin"


class OptionsConfig(BaseModel):
    """Processing behavior.

    Attributes:
        device_type: Target viewport passed to ``compute_styles``.
        auto_write_to_plugin: Mirror the JSON into the Figma plugin repo.
        headless_browser: Run the browser headless. Does not affect
            ``compute_styles``.
    """

    device_type: Literal["desktop", "mobile"] = "desktop"
    auto_write_to_plugin: bool = True
    headless_browser: bool = True


class UXPilotConfig(BaseSettings):
    """Top-level configuration record."""

    model_config = SettingsConfigDict(
        env_prefix="UXPILOT_",
        env_nested_delimiter="__",
        toml_file=DEFAULT_CONFIG_FILE,
        extra="ignore",
    )

    output: OutputConfig = OutputConfig()
    paths: PathsConfig = PathsConfig()
    options: OptionsConfig = OptionsConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @property
    def html_output_dir(self) -> Path:
        return Path(self.output.html_dir).resolve()

    @property
    def json_output_dir(self) -> Path:
        return Path(self.output.json_dir).resolve()

    @property
    def compute_html_styles_dir(self) -> Path:
        return Path(self.paths.compute_html_styles).resolve()

    @property
    def figma_plugin_dir(self) -> Path:
        return Path(self.paths.figma_plugin).resolve()


def _config_source(config_file: Path | None) -> str:
    """Describe where a configuration error may come from."""
    if config_file is not None:
        return f"{config_file} + environment"
    if Path(DEFAULT_CONFIG_FILE).is_file():
        return f"{DEFAULT_CONFIG_FILE} + environment"
    return "environment/defaults"


def load_config(config_file: Path | None = None) -> UXPilotConfig:
    """Load configuration, optionally from an explicit TOML file.

    Values in an explicit file take priority over the environment.

    Args:
        config_file: Path to a TOML file. None uses the default sources.

    Returns:
        The validated configuration.

    Raises:
        ConfigurationException: If the file is missing, is not valid TOML,
            an environment value cannot be parsed, or validation fails.
    """
    try:
        if config_file is None:
            return UXPilotConfig()

        if not config_file.is_file():
            raise ConfigurationException(
                "Configuration file not found", {"path": str(config_file)}
            )

        with config_file.open("rb") as f:
            data = tomllib.load(f)
        return UXPilotConfig(**data)

    except tomllib.TOMLDecodeError as e:
        raise ConfigurationException(
            f"Invalid TOML in configuration file: {e}",
            {"path": str(config_file or DEFAULT_CONFIG_FILE)},
        ) from e
    except SettingsError as e:
        raise ConfigurationException(
            f"Invalid configuration: {e}",
            {"source": _config_source(config_file)},
        ) from e
    except ValidationError as e:
        raise ConfigurationException(
            f"Invalid configuration: {e.error_count()} error(s)",
            {
                "source": _config_source(config_file),
                "errors": "; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ),
            },
        ) from e
