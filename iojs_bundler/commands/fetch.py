"""Commands for resolving and fetching io.js releases."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click
import structlog
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from iojs_bundler import __version__
from iojs_bundler.core.config import AppConfig, PlatformConfig
from iojs_bundler.core.errors import BundlerError
from iojs_bundler.core.session import InstallSession
from iojs_bundler.core.types import InstallationResult

logger = structlog.get_logger()


def _get_context_objects(ctx: click.Context) -> tuple[AppConfig, Console, bool]:
    """Extract common context objects."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]
    verbose: bool = ctx.obj["verbose"]
    return config, console, verbose


def _output_json(data: dict[str, Any]) -> None:
    """Output data as JSON."""
    print(json.dumps(data, indent=2, default=str))


def _apply_overrides(
    config: AppConfig,
    platform: str | None,
    arch: str | None,
    cache_dir: Path | None,
) -> AppConfig:
    """Return a copy of ``config`` with CLI overrides applied."""
    update: dict[str, Any] = {}
    if platform or arch:
        update["platform"] = PlatformConfig(
            platform=platform or config.platform.platform,
            arch=arch or config.platform.arch,
        )
    if cache_dir:
        update["cache"] = config.cache.model_copy(update={"cache_dir": cache_dir})
    return config.model_copy(update=update) if update else config


async def _resolve(selector: str, config: AppConfig) -> str:
    async with InstallSession(Path.cwd(), selector, config, client_version=__version__) as session:
        return await session.resolve_version()


async def _fetch(
    selector: str, target: Path, config: AppConfig, deadline: float | None
) -> InstallationResult:
    async with InstallSession(target, selector, config, client_version=__version__) as session:
        return await session.install(deadline=deadline)


def _show_result(result: InstallationResult, console: Console) -> None:
    table = Table(title=f"io.js v{result.version}")
    table.add_column("Artifact", style="cyan")
    table.add_column("Path", style="magenta")
    table.add_column("SHA-256")
    table.add_column("Source")

    for artifact in (result.installer, result.source):
        table.add_row(
            artifact.kind.value,
            str(artifact.path),
            artifact.expected_digest,
            "downloaded" if artifact.downloaded else "cache",
        )

    console.print(table)


@click.command()
@click.argument("selector", type=str)
@click.pass_context
def resolve(ctx: click.Context, selector: str) -> None:
    """Resolve SELECTOR (an npm-style semver range) to a release version."""
    config, console, _ = _get_context_objects(ctx)

    try:
        version = asyncio.run(_resolve(selector, config))
    except BundlerError as e:
        logger.error("resolve_failed", selector=selector, stage=e.stage, error=str(e))
        console.print(f"[red]Error ({e.stage}): {escape(str(e))}[/red]")
        sys.exit(1)

    if config.output_format == "json":
        _output_json({"selector": selector, "version": version})
    else:
        console.print(version)


@click.command()
@click.argument("selector", type=str)
@click.argument("target", type=click.Path(path_type=Path))
@click.option("--platform", "platform", type=str, help="Target OS (default: current)")
@click.option("--arch", type=str, help="Target CPU architecture (default: current)")
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Download cache directory",
)
@click.option(
    "--deadline",
    type=click.FloatRange(min=0, min_open=True),
    help="Give up after this many seconds",
)
@click.pass_context
def fetch(
    ctx: click.Context,
    selector: str,
    target: Path,
    platform: str | None,
    arch: str | None,
    cache_dir: Path | None,
    deadline: float | None,
) -> None:
    """Fetch and verify the release matching SELECTOR for installing into TARGET."""
    config, console, verbose = _get_context_objects(ctx)

    try:
        config = _apply_overrides(config, platform, arch, cache_dir)
        result = asyncio.run(_fetch(selector, target, config, deadline))
    except BundlerError as e:
        logger.error("fetch_failed", selector=selector, stage=e.stage, error=str(e))
        console.print(f"[red]Error ({e.stage}): {escape(str(e))}[/red]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)
    except TimeoutError:
        logger.error("fetch_timed_out", selector=selector, deadline=deadline)
        console.print(f"[red]Error: timed out after {deadline} seconds[/red]")
        sys.exit(1)

    if config.output_format == "json":
        _output_json(result.model_dump(mode="json") | {"artifact_paths": result.artifact_paths})
    elif verbose or config.output_format == "rich":
        _show_result(result, console)
    else:
        for path in result.artifact_paths:
            console.print(str(path))
