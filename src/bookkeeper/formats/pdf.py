# ABOUTME: PDF metadata extraction and page rendering using pypdfium2.
# ABOUTME: All PDFium access goes through one PdfEngine, which serializes document use.

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import pypdfium2 as pdfium

from bookkeeper.formats.errors import BookOpenError, OutputError, RenderError
from bookkeeper.metadata.types import BookInfo, ExtractionResult, Page

logger = logging.getLogger(__name__)

RENDER_DPI = 150
JPEG_QUALITY = 90

# PDF user space is 72 points per inch.
_POINTS_PER_INCH = 72.0

# Some producers write the bare extension as the document title.
_PLACEHOLDER_TITLE = ".pdf"


class PdfEngine:
    """Exclusive handle on the PDFium library.

    PDFium is not safe for concurrent use, so the engine behaves as a pool
    of exactly one worker: at most one document is open through it at any
    time and other callers block until it is released. Create one per
    process and pass it to every PdfReader.

    Args:
        dpi: Resolution pages are rendered at.
        jpeg_quality: JPEG quality (1-95) for rendered pages.
    """

    def __init__(self, *, dpi: int = RENDER_DPI, jpeg_quality: int = JPEG_QUALITY) -> None:
        if dpi <= 0:
            raise ValueError(f"dpi must be positive, got {dpi}")
        if not 1 <= jpeg_quality <= 95:
            raise ValueError(f"jpeg_quality must be between 1 and 95, got {jpeg_quality}")
        self.dpi = dpi
        self.jpeg_quality = jpeg_quality
        self._lock = threading.Lock()

    @property
    def scale(self) -> float:
        return self.dpi / _POINTS_PER_INCH

    @contextmanager
    def open(self, path: Path) -> Iterator[pdfium.PdfDocument]:
        """Open a PDF for the duration of the block, holding the engine.

        Raises:
            BookOpenError: If the file is missing or is not a readable PDF.
        """
        if not path.is_file():
            raise BookOpenError(f"File not found: {path}")

        with self._lock:
            try:
                doc = pdfium.PdfDocument(str(path))
            except (pdfium.PdfiumError, OSError) as exc:
                raise BookOpenError(f"Failed to open PDF document: {path}: {exc}") from exc
            try:
                yield doc
            finally:
                doc.close()


def _read_info_dict(doc: pdfium.PdfDocument, path: Path) -> dict[str, str]:
    """Read the document-info dictionary, or an empty dict if it is unreadable."""
    try:
        raw = doc.get_metadata_dict()
    except pdfium.PdfiumError as exc:
        logger.debug("No readable info dictionary in %s: %s", path, exc)
        return {}
    return {key: (value or "").strip() for key, value in raw.items()}


def _split_keywords(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _page_filename(index: int) -> str:
    """File name for a 0-based page index: page_01.jpg, page_02.jpg, ..."""
    return f"page_{index + 1:02d}.jpg"


class PdfReader:
    """Reads metadata and renders pages from PDF documents."""

    def __init__(self, engine: PdfEngine) -> None:
        self._engine = engine

    def get_metadata(self, path: Path) -> BookInfo:
        """Extract metadata from a PDF file.

        Title, Author, Subject and Keywords come from the document-info
        dictionary. Title falls back to the filename stem.

        Raises:
            BookOpenError: If the file cannot be opened as a PDF.
        """
        with self._engine.open(path) as doc:
            page_count = len(doc)
            info = _read_info_dict(doc, path)

        title = info.get("Title", "")
        if not title or title == _PLACEHOLDER_TITLE:
            title = path.stem

        author = info.get("Author", "")
        return BookInfo(
            title=title,
            pages=page_count,
            authors=[author] if author else [],
            description=info.get("Subject") or None,
            keywords=_split_keywords(info.get("Keywords", "")),
        )

    def extract_pages(self, path: Path, output_dir: Path) -> ExtractionResult:
        """Render every page to page_NN.jpg in output_dir.

        Pages are produced in document order. Any page that fails to render
        or encode aborts the whole extraction.

        Raises:
            BookOpenError: If the file cannot be opened as a PDF.
            RenderError: If a page cannot be rendered or encoded.
            OutputError: If a page file cannot be written.
        """
        result = ExtractionResult()
        with self._engine.open(path) as doc:
            for index in range(len(doc)):
                result.pages.append(self._render_page(doc, index, output_dir))
        logger.info("Rendered %d page(s) from %s", len(result.pages), path)
        return result

    def _render_page(self, doc: pdfium.PdfDocument, index: int, output_dir: Path) -> Page:
        filename = _page_filename(index)
        target = output_dir / filename
        page = None
        bitmap = None
        try:
            page = doc[index]
            bitmap = page.render(scale=self._engine.scale)
            # The PIL image shares the bitmap buffer; save before the bitmap is closed.
            image = bitmap.to_pil()
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            width, height = image.size
            image.save(target, "JPEG", quality=self._engine.jpeg_quality)
        except pdfium.PdfiumError as exc:
            raise RenderError(f"Failed to render page {index + 1}: {exc}") from exc
        except OSError as exc:
            raise OutputError(f"Failed to write {target}: {exc}") from exc
        except ValueError as exc:
            raise RenderError(f"Failed to encode page {index + 1} as JPEG: {exc}") from exc
        finally:
            if bitmap is not None:
                bitmap.close()
            if page is not None:
                page.close()

        return Page(path=filename, width=width, height=height)
