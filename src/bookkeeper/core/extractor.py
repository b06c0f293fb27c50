# ABOUTME: Extraction orchestrator that writes page images plus a pages.json manifest.
# ABOUTME: Wraps the dispatcher's extract path for the `bookkeeper extract` command.

import json
import logging
from pathlib import Path

from bookkeeper.core.dispatcher import Dispatcher, default_dispatcher
from bookkeeper.formats.errors import OutputError
from bookkeeper.metadata.types import ExtractionResult, Page

logger = logging.getLogger(__name__)

MANIFEST_NAME = "pages.json"


def write_manifest(pages: list[Page], output_folder: Path) -> Path:
    """Write pages.json listing every page with its dimensions, in order.

    Args:
        pages: Pages in reading order. May be empty.
        output_folder: Existing folder the pages were extracted into.

    Returns:
        Path to the written manifest.

    Raises:
        OutputError: If the manifest cannot be written.
    """
    manifest_path = output_folder / MANIFEST_NAME
    payload = {"pages": [page.to_dict() for page in pages]}
    try:
        with open(manifest_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.write("\n")
    except OSError as exc:
        raise OutputError(f"Failed to write {manifest_path}: {exc}") from exc
    return manifest_path


def extract_book(
    input_file: Path,
    output_folder: Path,
    dispatcher: Dispatcher | None = None,
) -> ExtractionResult:
    """Extract a book's pages into output_folder and write the manifest.

    Args:
        input_file: Comic archive or PDF to extract.
        output_folder: Destination folder; created if missing.
        dispatcher: Dispatcher to use. Defaults to the process-wide one.

    Returns:
        The ExtractionResult, whose page order matches the manifest.

    Raises:
        BookkeeperError: If extraction or the manifest write fails.
    """
    result = (dispatcher or default_dispatcher()).extract(input_file, output_folder)
    manifest_path = write_manifest(result.pages, output_folder)
    logger.info("Wrote %d page(s) to %s", len(result.pages), manifest_path)
    return result
