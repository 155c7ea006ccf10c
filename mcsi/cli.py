"""
Command Line Interface for mcsi.

This module provides the main CLI interface using the Click framework.
Every subcommand stages a server install under ``<target>/.mcsi``, backs
up the files of the previous install and promotes the new one.
"""

import asyncio
import contextlib
import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, Tuple

import click
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeRemainingColumn
from rich.table import Table

from . import __version__
from .catalog.flame import FlameClient
from .catalog.ftb import FtbClient
from .config.logging_config import add_file_logging, console, setup_logging
from .config.settings import config
from .constants import LOG_LEVELS
from .context import ExecutionContext
from .exceptions import McsiError, ValidationError
from .modpack.flame import install_flame_pack
from .modpack.ftb import install_ftb_pack
from .modpack.pipeline import InstallResult
from .modpack.standalone import install_loader_server
from .utils.base_api import BaseDownloadClient
from .utils.stager import ArtifactStager
from .utils.validation import InstallValidator
from .version import LoaderKind

logger = logging.getLogger(__name__)

Installer = Callable[[ExecutionContext, ArtifactStager, Optional[Progress]], Awaitable[InstallResult]]


def _progress_display():
    """Rich progress display, or a null context when progress bars are off."""
    if not config.get("ui.progress_bar", True) or not sys.stdout.isatty():
        return contextlib.nullcontext(None)
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeRemainingColumn(),
        console=console,
        transient=True,
    )


async def _install_async(
    install: Installer,
    context: ExecutionContext,
    progress: Optional[Progress],
) -> InstallResult:
    """Async helper owning the download client for the whole run."""
    downloader = BaseDownloadClient(
        timeout=config.get("downloads.timeout"),
        max_retries=config.get("downloads.max_retries"),
        chunk_size=config.get("downloads.chunk_size"),
    )
    async with downloader:
        stager = ArtifactStager(downloader, progress)
        return await install(context, stager, progress)


def _show_log_file(log_file: Optional[Path]) -> None:
    if log_file is not None:
        console.print(f"[dim]Log file: {log_file}[/dim]")


def _fail(message: str) -> None:
    console.print(f"Error: {message}", style="red", markup=False)
    sys.exit(1)


def _validated_target(target_dir: str) -> Path:
    try:
        return InstallValidator.validate_target_directory(target_dir)
    except ValidationError as e:
        _fail(str(e))


def _run_install(target_dir: Path, install: Installer) -> None:
    """Run ``install`` against ``target_dir`` and report the outcome."""
    context = ExecutionContext.for_target(target_dir)
    log_level = click.get_current_context().find_root().params.get("log_level")

    log_file = None
    try:
        log_file = add_file_logging(context.logs_dir, log_level)
        with _progress_display() as progress:
            result = asyncio.run(_install_async(install, context, progress))
    except McsiError as e:
        logger.error(f"Install failed: {e}")
        logger.debug("Install failed", exc_info=True)
        _show_log_file(log_file)
        _fail(str(e))
    except OSError as e:
        logger.error(f"Install failed: {e}")
        logger.debug("Install failed", exc_info=True)
        _show_log_file(log_file)
        _fail(f"Filesystem error: {e}")

    lines = [
        f"[green]Successfully installed {result.description}![/green]",
        "",
        f"Target directory: {result.target_dir}",
        f"Files installed: {len(result.manifest.files)}",
    ]
    if result.backup_dir is not None:
        lines.append(f"Previous install backed up to: {result.backup_dir}")
    console.print(Panel("\n".join(lines), title="Installation Complete", border_style="green"))


@click.group()
@click.option(
    '--log-level',
    envvar='LOG_LEVEL',
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help='Log verbosity (default: info, or logging.level from the config file)',
)
@click.option('--no-color', is_flag=True, help='Disable colored output')
@click.version_option(version=__version__, prog_name="mcsi")
def main(log_level: Optional[str], no_color: bool) -> None:
    """mcsi - Install and update Minecraft modpack servers."""
    colored_output = False if no_color else None
    setup_logging(log_level=log_level, colored_output=colored_output)
    if no_color:
        console.no_color = True


@main.command()
@click.option('--api-key', envvar='API_KEY', required=True, help='CurseForge API key')
@click.option('--project-id', envvar='PROJECT_ID', required=True, type=int, help='CurseForge project id of the modpack')
@click.option('--version', 'version', envvar='VERSION', required=True,
              help="'latest', a file id or part of a file's display name")
@click.option('--target-dir', envvar='TARGET_DIR', required=True, type=click.Path(), help='Server directory')
def flame(api_key: str, project_id: int, version: str, target_dir: str) -> None:
    """Install a CurseForge modpack server."""
    try:
        api_key = InstallValidator.validate_non_empty_string(api_key, "API key")
        project_id = InstallValidator.validate_positive_integer(project_id, "Project id")
        version = InstallValidator.validate_release_version(version)
    except ValidationError as e:
        _fail(str(e))
    target = _validated_target(target_dir)

    console.print(f"[bold blue]Installing CurseForge project {project_id} ({version})[/bold blue]")
    java_executable = config.get("java.executable")

    async def install(context, stager, progress):
        async with FlameClient(api_key, timeout=config.get("api.timeout")) as catalog:
            return await install_flame_pack(
                context, catalog, stager, project_id, version, java_executable, progress
            )

    _run_install(target, install)


@main.command()
@click.option('--search-terms', envvar='SEARCH_TERMS', multiple=True, help='Terms to search FTB packs with')
@click.option('--id', 'pack_id', envvar='ID', type=int, default=None, help='FTB pack id')
@click.option('--mc-version', envvar='MC_VERSION', default=None,
              help='Only consider packs targeting this Minecraft version (requires --search-terms)')
@click.option('--version', 'version', envvar='VERSION', required=True, help="'latest' or an FTB version id")
@click.option('--target-dir', envvar='TARGET_DIR', required=True, type=click.Path(), help='Server directory')
def ftb(
    search_terms: Tuple[str, ...],
    pack_id: Optional[int],
    mc_version: Optional[str],
    version: str,
    target_dir: str,
) -> None:
    """Install an FTB modpack server."""
    if search_terms and pack_id is not None:
        raise click.UsageError("--search-terms and --id are mutually exclusive")
    if not search_terms and pack_id is None:
        raise click.UsageError("One of --search-terms or --id is required")
    if mc_version is not None and not search_terms:
        raise click.UsageError("--mc-version requires --search-terms")

    terms = None
    try:
        if search_terms:
            terms = InstallValidator.validate_search_terms(search_terms)
        if pack_id is not None:
            pack_id = InstallValidator.validate_positive_integer(pack_id, "Pack id")
        if mc_version is not None:
            mc_version = InstallValidator.validate_mc_version(mc_version).as_str()
        version = InstallValidator.validate_release_version(version)
    except ValidationError as e:
        _fail(str(e))
    target = _validated_target(target_dir)

    selection = f"pack {pack_id}" if pack_id is not None else f"search {' '.join(terms)!r}"
    console.print(f"[bold blue]Installing FTB {selection} ({version})[/bold blue]")

    async def install(context, stager, progress):
        async with FtbClient(timeout=config.get("api.timeout")) as client:
            return await install_ftb_pack(
                context, client, stager, version,
                pack_id=pack_id, search_terms=terms, mc_version=mc_version, progress=progress,
            )

    _run_install(target, install)


def _loader_command(kind: LoaderKind, mc_version: str, version: str, target_dir: str) -> None:
    try:
        parsed_mc = InstallValidator.validate_mc_version(mc_version)
        loader_version = InstallValidator.validate_loader_version(version)
    except ValidationError as e:
        _fail(str(e))
    target = _validated_target(target_dir)

    console.print(
        f"[bold blue]Installing {kind.value.title()} {loader_version} for Minecraft {parsed_mc}[/bold blue]"
    )
    java_executable = config.get("java.executable")

    async def install(context, stager, progress):
        return await install_loader_server(
            context, stager, kind, parsed_mc, loader_version, java_executable, progress
        )

    _run_install(target, install)


@main.command()
@click.option('--mc-version', envvar='MC_VERSION', required=True, help='Minecraft version')
@click.option('--version', 'version', envvar='VERSION', required=True, help='Forge version, e.g. 43.2.21')
@click.option('--target-dir', envvar='TARGET_DIR', required=True, type=click.Path(), help='Server directory')
def forge(mc_version: str, version: str, target_dir: str) -> None:
    """Install a Forge server."""
    _loader_command(LoaderKind.FORGE, mc_version, version, target_dir)


@main.command()
@click.option('--mc-version', envvar='MC_VERSION', required=True, help='Minecraft version')
@click.option('--version', 'version', envvar='VERSION', required=True, help='Fabric loader version, e.g. 0.14.21')
@click.option('--target-dir', envvar='TARGET_DIR', required=True, type=click.Path(), help='Server directory')
def fabric(mc_version: str, version: str, target_dir: str) -> None:
    """Install a Fabric server."""
    _loader_command(LoaderKind.FABRIC, mc_version, version, target_dir)


@main.command(name="config")
@click.option('--reset', is_flag=True, help='Reset configuration to defaults')
def config_cmd(reset: bool) -> None:
    """Show or reset configuration settings."""

    if reset:
        if click.confirm("Are you sure you want to reset configuration to defaults?"):
            config.reset_to_defaults()
            console.print("[green]Configuration reset to defaults.[/green]")
        return

    console.print(f"[blue]Configuration file: {config.config_file}[/blue]")

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for key, value in config.flatten():
        table.add_row(key, str(value))
    console.print(table)

    console.print("Use --reset to reset to defaults or edit the file directly.")


if __name__ == "__main__":
    main()
