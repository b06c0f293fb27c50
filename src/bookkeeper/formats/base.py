# ABOUTME: BookReader protocol defining the contract for per-format readers.
# ABOUTME: Comic archives, PDFs and EPUBs each implement metadata reading and page extraction.

from pathlib import Path
from typing import Protocol, runtime_checkable

from bookkeeper.metadata.types import BookInfo, ExtractionResult


@runtime_checkable
class BookReader(Protocol):
    """Protocol for format readers.

    Implementations open and close their own file handles inside each call.
    Readers that cannot render pages raise UnsupportedFormatError from
    extract_pages.
    """

    def get_metadata(self, path: Path) -> BookInfo: ...

    def extract_pages(self, path: Path, output_dir: Path) -> ExtractionResult: ...
