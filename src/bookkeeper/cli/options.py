# ABOUTME: Shared Click options for Bookkeeper CLI commands.
# ABOUTME: Provides reusable decorators for PDF rendering settings.

import click

from bookkeeper.formats.pdf import JPEG_QUALITY, RENDER_DPI

dpi_option = click.option(
    "--dpi",
    type=click.IntRange(min=1),
    default=RENDER_DPI,
    show_default=True,
    help="Resolution PDF pages are rendered at.",
)

quality_option = click.option(
    "--quality",
    "jpeg_quality",
    type=click.IntRange(1, 95),
    default=JPEG_QUALITY,
    show_default=True,
    help="JPEG quality for rendered PDF pages.",
)
