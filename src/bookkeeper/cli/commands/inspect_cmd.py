# ABOUTME: The `bookkeeper inspect` command for viewing book metadata.
# ABOUTME: Shows the normalized BookInfo for a single book file.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookkeeper.core.dispatcher import get_book_info
from bookkeeper.formats.errors import BookkeeperError


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inspect(path: Path) -> None:
    """Show metadata extracted from a comic archive, PDF or EPUB."""
    console = Console()
    try:
        info = get_book_info(path)
    except BookkeeperError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    table = Table(title=str(path.name), show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Title", info.title)
    if info.subtitle:
        table.add_row("Subtitle", "; ".join(info.subtitle))
    table.add_row("Author", info.author or "[dim]unknown[/dim]")
    table.add_row("Pages", str(info.pages))
    table.add_row("Language", ", ".join(info.language) or "[dim]unknown[/dim]")
    table.add_row("Publisher", info.publisher or "[dim]unknown[/dim]")
    table.add_row("Published", info.published_date or "[dim]unknown[/dim]")
    table.add_row("Description", info.description or "[dim]none[/dim]")
    if info.series:
        series_str = f"{info.series} #{info.series_index}" if info.series_index else info.series
        table.add_row("Series", series_str)
    if info.keywords:
        table.add_row("Keywords", ", ".join(info.keywords))

    console.print(table)
