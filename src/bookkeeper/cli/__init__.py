# ABOUTME: CLI package for Bookkeeper, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from bookkeeper.cli.commands import extract_cmd, inspect_cmd, scan_cmd

_LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def _configure_logging(verbosity: int) -> None:
    """Send log records to stderr so JSON output on stdout stays clean."""
    level = _LOG_LEVELS[min(verbosity, len(_LOG_LEVELS) - 1)]
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(package_name="bookkeeper")
@click.option("-v", "--verbose", count=True, help="Increase log output (-v info, -vv debug).")
def cli(verbose: int) -> None:
    """Bookkeeper - metadata and page extraction for comic archives, PDFs and EPUBs."""
    _configure_logging(verbose)


cli.add_command(scan_cmd.scan)
cli.add_command(extract_cmd.extract)
cli.add_command(inspect_cmd.inspect)
