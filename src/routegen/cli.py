"""
routegen command line interface.

Commands:
- generate: Generate routers and merge them into the project
- routes: Show the named route table of an API list
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from routegen import __version__
from routegen.apilist import load_api_list
from routegen.config import CONFIG_FILE_NAME, RoutegenConfig, load_config
from routegen.core.errors import RoutegenError
from routegen.core.ir import ApiList
from routegen.fs import persist_files
from routegen.generator import RouterGenerator
from routegen.templates import TemplateRenderer

app = typer.Typer(
    help="routegen – FastAPI router generator with incremental merging",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"routegen {__version__}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.getenv("ROUTEGEN_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """routegen CLI main callback for global options."""
    _configure_logging(verbose)


def _load_project(
    project_dir: Path, config_path: Path | None, api_list_path: Path | None
) -> tuple[RoutegenConfig, ApiList]:
    """Load configuration and API list, exiting with code 1 on errors."""
    try:
        config = load_config(config_path or project_dir / CONFIG_FILE_NAME)
        api_list = load_api_list(api_list_path or config.get_api_list_path(project_dir))
    except RoutegenError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    return config, api_list


@app.command(name="generate")
def generate_command(
    project_dir: Path = typer.Option(  # noqa: B008
        Path("."),
        "--project",
        "-p",
        help="Project directory (default: current directory)",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Configuration file (default: <project>/{CONFIG_FILE_NAME})",
    ),
    api_list_path: Path | None = typer.Option(
        None,
        "--api-list",
        "-a",
        help="API list file (overrides the configured api_list)",
    ),
    sort_router: bool | None = typer.Option(
        None,
        "--sort/--no-sort",
        help="Sort routes deterministically (overrides config)",
    ),
    snake_style: bool | None = typer.Option(
        None,
        "--snake-style/--no-snake-style",
        help="Use snake_case middleware hook names (overrides config)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Preview what would be generated without writing files",
    ),
) -> None:
    """
    Generate routers, middleware hooks and router registration.

    Existing middleware.py and register.py files are patched in place;
    router modules are regenerated. Nothing is written unless the whole
    run succeeds.

    Examples:
        routegen generate                   # Use ./routegen.toml
        routegen generate -a api.json       # Explicit API list
        routegen generate --dry-run         # Preview changes
    """
    project_path = project_dir.resolve()
    config, api_list = _load_project(project_path, config_path, api_list_path)

    options = config.options.model_copy()
    if sort_router is not None:
        options.sort_router = sort_router
    if snake_style is not None:
        options.snake_style_middleware = snake_style

    try:
        renderer = TemplateRenderer(
            template_dir=config.get_template_dir(project_path),
            disabled=config.templates.disabled,
        )
        generator = RouterGenerator(
            config.layout, options, renderer=renderer, project_root=project_path
        )
        result = generator.generate(api_list.services)
    except RoutegenError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        err_console.print("No files were written.")
        raise typer.Exit(code=1)

    for warning in result.warnings:
        err_console.print(f"[yellow]Warning: {escape(warning)}[/yellow]")

    table = Table(title="Generated Files")
    table.add_column("File", style="cyan")
    table.add_column("Status")
    table.add_column("Template")
    for file in result.files:
        status = "[green]new[/green]" if file.is_new_file else "updated"
        table.add_row(str(file.path), status, file.template_name)
    console.print(table)

    if dry_run:
        console.print("No files were written (dry run mode)")
        return

    persist_files(result.files, project_path)
    console.print(f"[green]✓ Wrote {len(result.files)} file(s)[/green]")


@app.command(name="routes")
def routes_command(
    project_dir: Path = typer.Option(  # noqa: B008
        Path("."),
        "--project",
        "-p",
        help="Project directory (default: current directory)",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Configuration file (default: <project>/{CONFIG_FILE_NAME})",
    ),
    api_list_path: Path | None = typer.Option(
        None,
        "--api-list",
        "-a",
        help="API list file (overrides the configured api_list)",
    ),
) -> None:
    """List every route with its handler and middleware hook."""
    project_path = project_dir.resolve()
    config, api_list = _load_project(project_path, config_path, api_list_path)

    try:
        trees = RouterGenerator(config.layout, config.options).build_trees(api_list.services)
    except RoutegenError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="Routes")
    table.add_column("Service", style="cyan")
    table.add_column("Verb")
    table.add_column("Path")
    table.add_column("Handler")
    table.add_column("Hook", style="dim")
    for service_name, tree in trees.items():
        for leaf in tree.leaves():
            table.add_row(
                service_name,
                leaf.http_verb,
                leaf.full_path,
                leaf.handler.qualified if leaf.handler else "",
                f"{leaf.handler_middleware}_mw",
            )
    console.print(table)


def main() -> None:
    """Entry point for the routegen console script."""
    app()


if __name__ == "__main__":
    main()
