# Path: jdk_provisioner/cli/provision_cli.py
"""
Provision CLI Interface

Command-line interface for fetching, verifying and inspecting cached JDK
archives.

Architecture:
- argparse subcommands: ensure, available, list, verify, check-layout
- ProvisioningPipeline does the work; the CLI only renders and decides
  the exit status
- RetryManager wraps whole ensure runs (transient failures only)
- rich console output and logging
- IPO logging throughout

Exit status:
    0  success
    1  provisioning failure (stage and reason printed)
    2  invalid arguments
    130  interrupted

Usage:
    jdk-provision ensure 21 --extract-to ./java
    python -m jdk_provisioner.provision available
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TransferSpeedColumn,
)
from rich.table import Table

from jdk_provisioner import __version__
from jdk_provisioner.core.config_loader import ConfigLoader
from jdk_provisioner.core.data_paths import DataPathsManager, check_project_structure
from jdk_provisioner.core.errors import CatalogMalformed, InvalidJavaVersion, ProvisioningError
from jdk_provisioner.core.logger import configure_logging, get_logger
from jdk_provisioner.engine.cache_store import CacheStore
from jdk_provisioner.engine.pipeline import ProvisioningPipeline
from jdk_provisioner.engine.release_catalog import ReleaseCatalog
from jdk_provisioner.engine.result import ProvisioningResult, validate_java_version
from jdk_provisioner.engine.retry_manager import RetryManager
from jdk_provisioner.engine.verifier import Verifier
from jdk_provisioner.constants import LOG_INPUT, LOG_OUTPUT

logger = get_logger(__name__, 'cli')

console = Console()
log_console = Console(stderr=True)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def setup_logging(config: ConfigLoader) -> None:
    """Route provisioner logging through a rich handler on stderr."""
    handler = RichHandler(rich_tracebacks=True, console=log_console, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    configure_logging(config, console_handler=handler)


def display_result(result: ProvisioningResult) -> None:
    """Display a provisioning result with rich formatting."""
    source = "cache" if result.cache_hit else "download"
    lines = [
        f"[green bold]✓ Java {result.version} ready[/green bold] (from {source})",
        f"Archive: {result.entry.path}",
    ]
    if result.verification:
        lines.append(f"SHA-256: {result.verification.digest}")
    if result.extraction:
        lines.append(f"Extracted to: {result.extraction.target_dir}")
        if result.extraction.java_home:
            lines.append(f"JAVA_HOME: {result.extraction.java_home}")
    lines.append(
        f"Catalog calls: {result.catalog_calls} | Downloads: {result.download_calls} | "
        f"{result.duration:.2f}s"
    )
    console.print(Panel("\n".join(lines), title="Provisioning Result", border_style="green"))


def display_error(error: ProvisioningError) -> None:
    stage = str(error.stage) if error.stage else "unknown"
    console.print(Panel(
        f"[red bold]✗ {type(error).__name__}[/red bold]\n"
        f"Stage: {stage}\n"
        f"Reason: {error.reason}",
        title="Provisioning Failed",
        border_style="red"
    ))


class ProvisionCLI:
    """
    Runs one CLI command.

    Components left as None are created from config; tests inject fakes.

    Example:
        cli = ProvisionCLI(config)
        exit_code = await cli.run(build_parser().parse_args(['ensure', '21']))
    """

    def __init__(
        self,
        config: Optional[ConfigLoader] = None,
        catalog=None,
        downloader=None,
        extractor=None,
        retry_manager: Optional[RetryManager] = None
    ):
        self.config = config if config else ConfigLoader()
        self.catalog = catalog
        self.downloader = downloader
        self.extractor = extractor
        self.retry_manager = retry_manager

    async def run(self, args: argparse.Namespace) -> int:
        """
        Dispatch a parsed command line.

        Returns:
            Process exit status
        """
        logger.info(f"{LOG_INPUT} Command: {args.command}")

        try:
            if args.command == 'ensure':
                return await self.ensure(args)
            if args.command == 'available':
                return await self.available()
            if args.command == 'list':
                return self.list_cache()
            if args.command == 'verify':
                return await self.verify(args)
            if args.command == 'check-layout':
                return self.check_layout(args)

        except InvalidJavaVersion as e:
            console.print(f"[red]Error:[/red] {e.reason}")
            return EXIT_USAGE

        except ProvisioningError as e:
            logger.error(f"{LOG_OUTPUT} {type(e).__name__}: {e}")
            display_error(e)
            return EXIT_FAILURE

        console.print(f"[red]Error:[/red] Unknown command: {args.command}")
        return EXIT_USAGE

    async def ensure(self, args: argparse.Namespace) -> int:
        version = validate_java_version(args.version)
        extract_to = Path(args.extract_to).expanduser() if args.extract_to else None

        paths = DataPathsManager(self.config).ensure_all_directories()
        for directory, reason in paths['failed']:
            logger.warning(f"Cannot prepare {directory}: {reason}")

        pipeline = ProvisioningPipeline(
            cache_store=CacheStore(config=self.config),
            catalog=self.catalog,
            downloader=self.downloader,
            extractor=self.extractor,
            config=self.config,
        )

        console.print(f"\n[bold]Provisioning Java {version}[/bold]")
        console.print(f"Cache: {pipeline.store.root}")
        if extract_to:
            console.print(f"Extract to: {extract_to}")
        console.print()

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            console=console,
            transient=True
        ) as progress:
            tasks = {}

            def on_progress(bytes_written: int, total: Optional[int]) -> None:
                if 'download' not in tasks:
                    tasks['download'] = progress.add_task(f"jdk-{version}.tar.gz", total=total)
                progress.update(tasks['download'], completed=bytes_written, total=total)

            async with pipeline:
                if args.retry:
                    retry_manager = self.retry_manager or RetryManager(config=self.config)
                    result = await retry_manager.retry_async(
                        pipeline.ensure, version, extract_to, on_progress
                    )
                else:
                    result = await pipeline.ensure(version, extract_to, on_progress)

        display_result(result)
        return EXIT_OK

    async def available(self) -> int:
        catalog = self.catalog or ReleaseCatalog(self.config)
        try:
            versions = await catalog.available_versions()
            try:
                lts = await catalog.most_recent_lts()
            except CatalogMalformed:
                lts = None
        finally:
            if catalog is not self.catalog:
                await catalog.close()

        table = Table(title="Available Java Releases", show_header=True, header_style="bold cyan")
        table.add_column("Version", justify="right")
        table.add_column("Note")
        for version in sorted(versions):
            table.add_row(str(version), "most recent LTS" if version == lts else "")
        console.print(table)
        return EXIT_OK

    def list_cache(self) -> int:
        store = CacheStore(config=self.config)
        entries = store.list_entries()

        if not entries:
            console.print(f"[yellow]No cached JDK archives in {store.root}[/yellow]")
            return EXIT_OK

        table = Table(title=f"Cached JDK Archives ({store.root})", show_header=True, header_style="bold cyan")
        table.add_column("Version", justify="right")
        table.add_column("Archive", style="cyan")
        table.add_column("Size (MB)", justify="right")
        for entry in entries:
            size_mb = entry.path.stat().st_size / (1024 * 1024)
            table.add_row(str(entry.version), entry.path.name, f"{size_mb:.1f}")
        console.print(table)
        return EXIT_OK

    async def verify(self, args: argparse.Namespace) -> int:
        """Re-verify a cached archive against the registry's checksums."""
        version = validate_java_version(args.version)
        store = CacheStore(config=self.config)

        if not store.exists(version):
            console.print(f"[red]Error:[/red] Java {version} is not cached in {store.root}")
            return EXIT_FAILURE

        catalog = self.catalog or ReleaseCatalog(self.config)
        try:
            checksums = await catalog.checksums_for(version)
        finally:
            if catalog is not self.catalog:
                await catalog.close()

        result = await asyncio.to_thread(Verifier().verify, store.path_for(version), checksums)

        if result.matched:
            console.print(f"[green]✓[/green] {result.artifact_path.name} matches {result.digest}")
            return EXIT_OK

        console.print(
            f"[red]✗[/red] {result.artifact_path.name} digest {result.digest} "
            f"matches no published checksum"
        )
        return EXIT_FAILURE

    def check_layout(self, args: argparse.Namespace) -> int:
        root = Path(args.directory) if args.directory else Path.cwd()
        report = check_project_structure(root)

        if report.valid:
            console.print(f"[green]✓[/green] Project layout is valid: {root}")
            return EXIT_OK

        for name in report.missing_files:
            console.print(f"[red]✗[/red] Missing file: {name}")
        for name in report.missing_dirs:
            console.print(f"[red]✗[/red] Missing directory: {name}/")
        return EXIT_FAILURE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='jdk-provision',
        description="JDK Provisioner - fetch, verify and cache Eclipse Temurin JDK archives",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Make sure Java 21 is cached
  jdk-provision ensure 21

  # Cache and unpack into an existing directory
  jdk-provision ensure 17 --extract-to ./java

  # Versions offered by the registry
  jdk-provision available

  # Re-check a cached archive
  jdk-provision verify 21
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'JDK Provisioner {__version__}'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    cache_parent = argparse.ArgumentParser(add_help=False)
    cache_parent.add_argument(
        '--cache-dir',
        type=Path,
        help='Cache directory (default: JDK_CACHE_DIR or ~/.cache)'
    )

    # Ensure command
    ensure_parser = subparsers.add_parser(
        'ensure',
        parents=[cache_parent],
        help='Download and verify a JDK unless already cached'
    )
    ensure_parser.add_argument('version', help='Java major version, e.g. 21')
    ensure_parser.add_argument(
        '--extract-to',
        type=Path,
        help='Existing directory to unpack the archive into'
    )
    ensure_parser.add_argument(
        '--retry',
        action=argparse.BooleanOptionalAction,
        default=True,
        help='Retry transient network failures with backoff (default: on)'
    )

    subparsers.add_parser('available', help='List Java versions offered by the registry')

    subparsers.add_parser('list', parents=[cache_parent], help='List cached JDK archives')

    verify_parser = subparsers.add_parser(
        'verify',
        parents=[cache_parent],
        help='Re-verify a cached archive against published checksums'
    )
    verify_parser.add_argument('version', help='Java major version')

    layout_parser = subparsers.add_parser(
        'check-layout',
        help='Check a server project directory for config.toml and required folders'
    )
    layout_parser.add_argument(
        'directory',
        nargs='?',
        type=Path,
        help='Project directory (default: current directory)'
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_OK

    overrides = {}
    if getattr(args, 'cache_dir', None):
        overrides['cache_root'] = args.cache_dir.expanduser()
    if args.verbose:
        overrides['log_level'] = 'DEBUG'
    config = ConfigLoader(overrides=overrides) if overrides else ConfigLoader()

    setup_logging(config)

    try:
        return asyncio.run(ProvisionCLI(config).run(args))

    except KeyboardInterrupt:
        console.print("\n[yellow]Provisioning interrupted by user[/yellow]")
        return EXIT_INTERRUPTED


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


__all__ = ['ProvisionCLI', 'build_parser', 'main', 'run']
