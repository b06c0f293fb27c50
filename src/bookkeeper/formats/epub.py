# ABOUTME: EPUB metadata extraction using ebooklib.
# ABOUTME: Maps Dublin Core fields to BookInfo; page count is approximated by spine length.

import logging
from collections.abc import Iterator
from pathlib import Path

from ebooklib import epub

from bookkeeper.formats.errors import BookOpenError, UnsupportedFormatError
from bookkeeper.metadata.types import BookInfo, ExtractionResult

logger = logging.getLogger(__name__)


class EpubReadError(BookOpenError):
    """Raised when an EPUB file cannot be read or parsed."""


def _get_dc_values(book: epub.EpubBook, name: str) -> list[tuple[str, dict]]:
    """Return (value, attributes) pairs for a Dublin Core element, skipping blanks."""
    entries = book.get_metadata("DC", name) or []
    return [(str(value).strip(), attrs or {}) for value, attrs in entries if value and str(value).strip()]


def _iter_meta(book: epub.EpubBook) -> Iterator[tuple[str | None, dict]]:
    """Yield (text, attributes) for every <meta> element in the package.

    ebooklib files <meta> tags under keys derived from their property or
    name prefix, so the whole metadata tree is walked and matched on
    attributes instead.
    """
    for entries_by_name in book.metadata.values():
        for entries in entries_by_name.values():
            for value, attrs in entries:
                if attrs and ("property" in attrs or "name" in attrs):
                    yield value, attrs


def _subtitle_ids(book: epub.EpubBook) -> set[str]:
    """IDs of title elements refined as subtitles (EPUB 3 title-type)."""
    ids = set()
    for value, attrs in _iter_meta(book):
        if attrs.get("property") == "title-type" and (value or "").strip() == "subtitle":
            ids.add(attrs.get("refines", "").lstrip("#"))
    return ids


def _get_titles(book: epub.EpubBook) -> tuple[list[str], list[str]]:
    """Split DC titles into (titles, subtitles)."""
    subtitle_ids = _subtitle_ids(book)
    titles: list[str] = []
    subtitles: list[str] = []
    for value, attrs in _get_dc_values(book, "title"):
        if attrs.get("id") and attrs["id"] in subtitle_ids:
            subtitles.append(value)
        else:
            titles.append(value)
    return titles, subtitles


def _get_series(book: epub.EpubBook) -> tuple[str | None, str | None]:
    """Find series name and position from Calibre or EPUB 3 collection metadata."""
    series = None
    series_index = None
    collection_id = None

    for value, attrs in _iter_meta(book):
        name = attrs.get("name")
        if name == "calibre:series" and series is None:
            series = (attrs.get("content") or "").strip() or None
        elif name == "calibre:series_index" and series_index is None:
            series_index = (attrs.get("content") or "").strip() or None
        elif attrs.get("property") == "belongs-to-collection" and series is None:
            series = (value or "").strip() or None
            collection_id = attrs.get("id")

    if series and series_index is None and collection_id:
        for value, attrs in _iter_meta(book):
            if (
                attrs.get("property") == "group-position"
                and attrs.get("refines", "").lstrip("#") == collection_id
            ):
                series_index = (value or "").strip() or None
                break

    if series is None:
        return None, None
    return series, series_index


def read_epub_metadata(path: Path) -> BookInfo:
    """Extract metadata from an EPUB file.

    Args:
        path: Path to the EPUB file.

    Returns:
        BookInfo populated with extracted fields. Page count is the number
        of spine items, which approximates but does not equal rendered pages.

    Raises:
        EpubReadError: If the file cannot be read or parsed.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    titles, subtitles = _get_titles(book)
    series, series_index = _get_series(book)

    publishers = _get_dc_values(book, "publisher")
    dates = _get_dc_values(book, "date")

    return BookInfo(
        title=titles[0] if titles else path.stem,
        subtitle=subtitles,
        language=[value for value, _ in _get_dc_values(book, "language")],
        description=", ".join(value for value, _ in _get_dc_values(book, "description")) or None,
        series=series,
        series_index=series_index,
        pages=len(book.spine),
        authors=[value for value, _ in _get_dc_values(book, "creator")],
        publisher=publishers[0][0] if publishers else None,
        published_date=dates[0][0] if dates else None,
        keywords=[value for value, _ in _get_dc_values(book, "subject")],
    )


class EpubReader:
    """Reads EPUB metadata. EPUB pages are reflowable, so nothing is extracted."""

    def get_metadata(self, path: Path) -> BookInfo:
        return read_epub_metadata(path)

    def extract_pages(self, path: Path, output_dir: Path) -> ExtractionResult:
        raise UnsupportedFormatError(path, f"Page extraction is not supported for EPUB: {path}")
