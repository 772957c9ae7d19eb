"""Commands for inspecting and persisting configuration."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.markup import escape

from iojs_bundler.core.config import AppConfig, default_config_file

logger = structlog.get_logger()


@click.group(name="config")
def config_group() -> None:
    """Inspect and save configuration."""


@config_group.command()
@click.pass_context
def show(ctx: click.Context) -> None:
    """Show the effective configuration as JSON."""
    config: AppConfig = ctx.obj["config"]
    print(json.dumps(config.model_dump(mode="json"), indent=2, default=str))


@config_group.command()
@click.option(
    "--path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="File to write (default: ~/.config/iojs-bundler/config.json)",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def save(ctx: click.Context, path: Path | None, force: bool) -> None:
    """Write the effective configuration to a file."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]
    path = path or default_config_file()

    if path.exists() and not force:
        console.print(f"[red]Error: {escape(str(path))} exists, use --force to overwrite[/red]")
        sys.exit(1)

    try:
        config.save(path)
    except OSError as e:
        logger.error("config_save_failed", path=str(path), error=str(e))
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(f"Saved configuration to {escape(str(path))}")
