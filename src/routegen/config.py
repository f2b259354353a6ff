"""
Generator configuration models.

Parses routegen.toml and provides typed configuration for the router
generator.

Example routegen.toml:

    api_list = "api.toml"

    [layout]
    router_dir = "app/router"
    handler_package = "app.handler"
    router_package = "app.router"

    [options]
    sort_router = true
    snake_style_middleware = false

    [templates]
    directory = "templates/routegen"
    disabled = ["middleware.py.j2"]
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from routegen.core.errors import ConfigError

CONFIG_FILE_NAME = "routegen.toml"


class RouterLayout(BaseModel):
    """Where generated routers live and where handlers are imported from."""

    model_config = ConfigDict(extra="forbid")

    router_dir: str = "app/router"
    handler_package: str = "app.handler"
    router_package: str = "app.router"

    def router_path(self) -> Path:
        return Path(self.router_dir)


class GenerateOptions(BaseModel):
    """Switches that change the shape of the generated code."""

    model_config = ConfigDict(extra="forbid")

    sort_router: bool = True
    snake_style_middleware: bool = False


class TemplateConfig(BaseModel):
    """Template overrides."""

    model_config = ConfigDict(extra="forbid")

    directory: str | None = None
    disabled: list[str] = Field(default_factory=list)


class RoutegenConfig(BaseModel):
    """Complete routegen configuration."""

    model_config = ConfigDict(extra="forbid")

    api_list: str = "api.toml"
    layout: RouterLayout = Field(default_factory=RouterLayout)
    options: GenerateOptions = Field(default_factory=GenerateOptions)
    templates: TemplateConfig = Field(default_factory=TemplateConfig)

    def get_api_list_path(self, project_root: Path) -> Path:
        """Get absolute API list path."""
        path = Path(self.api_list)
        if path.is_absolute():
            return path
        return project_root / path

    def get_template_dir(self, project_root: Path) -> Path | None:
        """Get absolute template override directory, if configured."""
        if self.templates.directory is None:
            return None
        path = Path(self.templates.directory)
        if path.is_absolute():
            return path
        return project_root / path


def load_config(toml_path: Path) -> RoutegenConfig:
    """
    Load configuration from routegen.toml.

    Args:
        toml_path: Path to routegen.toml

    Returns:
        RoutegenConfig with parsed values, or defaults if the file is missing

    Raises:
        ConfigError: If the file is not valid TOML or has invalid values
    """
    if not toml_path.exists():
        return RoutegenConfig()

    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {toml_path}: {e}") from e

    try:
        return RoutegenConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration in {toml_path}: {e}") from e
