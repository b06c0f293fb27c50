# ABOUTME: The `bookkeeper extract` command for page extraction.
# ABOUTME: Writes page images and a pages.json manifest into an output folder.

from pathlib import Path

import click
from rich.console import Console

from bookkeeper.cli.options import dpi_option, quality_option
from bookkeeper.core.dispatcher import Dispatcher
from bookkeeper.core.extractor import MANIFEST_NAME, extract_book
from bookkeeper.formats.errors import BookkeeperError
from bookkeeper.formats.pdf import PdfEngine


@click.command("extract")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_folder", type=click.Path(file_okay=False, path_type=Path))
@dpi_option
@quality_option
def extract(input_file: Path, output_folder: Path, dpi: int, jpeg_quality: int) -> None:
    """Extract page images from a comic archive or PDF."""
    console = Console()
    dispatcher = Dispatcher(PdfEngine(dpi=dpi, jpeg_quality=jpeg_quality))

    try:
        result = extract_book(input_file, output_folder, dispatcher=dispatcher)
    except BookkeeperError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    console.print(
        f"Extraction complete. {len(result.pages)} page(s) extracted to "
        f"{output_folder} ({MANIFEST_NAME} written)"
    )
    if result.skipped:
        console.print(f"[yellow]Skipped {result.dropped} unreadable image(s):[/yellow]")
        for rel_path in result.skipped:
            console.print(f"  {rel_path}")
