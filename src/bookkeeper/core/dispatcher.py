# ABOUTME: Routes book files to the right format reader by extension.
# ABOUTME: Single source of truth for which files are supported books.

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from bookkeeper.formats.archive import ComicArchiveReader
from bookkeeper.formats.base import BookReader
from bookkeeper.formats.epub import EpubReader
from bookkeeper.formats.errors import OutputError, UnsupportedFormatError
from bookkeeper.formats.pdf import PdfEngine, PdfReader
from bookkeeper.metadata.types import BookInfo, ExtractionResult, Page

logger = logging.getLogger(__name__)


class BookFormat(Enum):
    """The closed set of book formats Bookkeeper understands."""

    COMIC_ARCHIVE = "comic"
    PDF = "pdf"
    EPUB = "epub"

    @property
    def can_extract_pages(self) -> bool:
        return self is not BookFormat.EPUB


_FORMATS_BY_EXTENSION: dict[str, BookFormat] = {
    ".cbz": BookFormat.COMIC_ARCHIVE,
    ".cbr": BookFormat.COMIC_ARCHIVE,
    ".cb7": BookFormat.COMIC_ARCHIVE,
    ".cbt": BookFormat.COMIC_ARCHIVE,
    ".pdf": BookFormat.PDF,
    ".epub": BookFormat.EPUB,
}

BOOK_EXTENSIONS: frozenset[str] = frozenset(_FORMATS_BY_EXTENSION)


def file_extension(path: Path | str) -> str:
    """Lowercase extension from the last dot of the file name, dot included.

    Unlike Path.suffix, a dot-file such as ".cbz" has the extension ".cbz".
    """
    name = Path(path).name
    dot = name.rfind(".")
    return name[dot:].lower() if dot >= 0 else ""


def detect_format(path: Path | str) -> BookFormat:
    """Map a file's extension (case-insensitive) to its BookFormat.

    Raises:
        UnsupportedFormatError: If the extension is not a known book format.
    """
    extension = file_extension(path)
    try:
        return _FORMATS_BY_EXTENSION[extension]
    except KeyError:
        raise UnsupportedFormatError(path, extension=extension) from None


def is_valid_book_file(path: Path | str) -> bool:
    """Check whether a path has a supported book extension. Never touches the disk."""
    return file_extension(path) in BOOK_EXTENSIONS


class Dispatcher:
    """Holds one reader per BookFormat and routes calls to them.

    Args:
        pdf_engine: PDFium handle shared by all PDF calls. A new engine is
            created when omitted.
    """

    def __init__(self, pdf_engine: PdfEngine | None = None) -> None:
        self.pdf_engine = pdf_engine or PdfEngine()
        self._readers: dict[BookFormat, BookReader] = {
            BookFormat.COMIC_ARCHIVE: ComicArchiveReader(),
            BookFormat.PDF: PdfReader(self.pdf_engine),
            BookFormat.EPUB: EpubReader(),
        }

    def reader_for(self, path: Path) -> BookReader:
        return self._readers[detect_format(path)]

    def get_book_info(self, path: Path) -> BookInfo:
        """Read normalized metadata from any supported book file.

        Raises:
            UnsupportedFormatError: If the extension is not supported.
            BookkeeperError: Whatever the format reader raises.
        """
        return self.reader_for(path).get_metadata(path)

    def extract(self, input_file: Path, output_folder: Path) -> ExtractionResult:
        """Extract page images into output_folder, creating it if needed.

        Raises:
            UnsupportedFormatError: If the format is unknown or cannot be
                extracted (EPUB).
            OutputError: If output_folder cannot be created.
            BookkeeperError: Whatever the format reader raises.
        """
        book_format = detect_format(input_file)
        if not book_format.can_extract_pages:
            raise UnsupportedFormatError(
                input_file, f"Page extraction is not supported for {book_format.value}: {input_file}"
            )

        try:
            output_folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputError(f"Failed to create output folder {output_folder}: {exc}") from exc

        result = self._readers[book_format].extract_pages(input_file, output_folder)
        if result.skipped:
            logger.warning(
                "Skipped %d unreadable image(s) while extracting %s",
                result.dropped,
                input_file,
            )
        return result


_default_dispatcher: Dispatcher | None = None


def default_dispatcher() -> Dispatcher:
    """Process-wide Dispatcher, created on first use.

    Its PdfEngine lives for the rest of the process and is never torn down.
    Callers that want to own the engine construct their own Dispatcher.
    """
    global _default_dispatcher
    if _default_dispatcher is None:
        _default_dispatcher = Dispatcher()
    return _default_dispatcher


def get_book_info(path: Path | str, *, dispatcher: Dispatcher | None = None) -> BookInfo:
    """Read metadata from a book file using the given or default dispatcher."""
    return (dispatcher or default_dispatcher()).get_book_info(Path(path))


def extract(
    input_file: Path | str,
    output_folder: Path | str,
    *,
    dispatcher: Dispatcher | None = None,
) -> list[Page]:
    """Extract pages from a book file; returns pages in reading order."""
    result = (dispatcher or default_dispatcher()).extract(Path(input_file), Path(output_folder))
    return result.pages
