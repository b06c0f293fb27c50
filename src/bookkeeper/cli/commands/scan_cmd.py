# ABOUTME: The `bookkeeper scan` command for bulk metadata extraction.
# ABOUTME: Prints one JSON line per book file found under a directory.

import json
from pathlib import Path

import click

from bookkeeper.core.scanner import scan_books


@click.command("scan")
@click.argument(
    "path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--hash",
    "with_hash",
    is_flag=True,
    default=False,
    help="Include a SHA-256 hash of each file.",
)
def scan(path: Path, with_hash: bool) -> None:
    """Scan a folder recursively and print book metadata as JSON lines."""
    for record in scan_books(path, with_hash=with_hash):
        click.echo(json.dumps(record, ensure_ascii=False))
