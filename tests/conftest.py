# ABOUTME: Shared pytest fixtures for Bookkeeper tests.
# ABOUTME: Provides sample comic archives, PDFs and EPUBs (valid and corrupt).

from pathlib import Path

import pytest
from ebooklib import epub

from bookkeeper.core.dispatcher import Dispatcher
from bookkeeper.formats.pdf import PdfEngine
from tests.fixtures.builders import (
    COMIC_INFO_FULL,
    build_cbz,
    build_pdf,
    image_bytes,
)


@pytest.fixture
def pdf_engine() -> PdfEngine:
    """A fresh PDFium engine owned by the test."""
    return PdfEngine()


@pytest.fixture
def dispatcher(pdf_engine: PdfEngine) -> Dispatcher:
    """A Dispatcher with its own engine, independent of the process default."""
    return Dispatcher(pdf_engine)


@pytest.fixture
def plain_cbz(tmp_path: Path) -> Path:
    """A CBZ without ComicInfo.xml: three pages out of natural order plus noise."""
    return build_cbz(
        tmp_path / "Full_of_Fun_001.cbz",
        {
            "2.jpg": image_bytes(40, 60, "JPEG"),
            "10.jpg": image_bytes(40, 60, "JPEG"),
            "1.jpg": image_bytes(40, 60, "JPEG"),
            "notes.txt": b"scanned by someone",
        },
        directories=("extras/",),
    )


@pytest.fixture
def tagged_cbz(tmp_path: Path) -> Path:
    """A CBZ with a complete ComicInfo.xml sidecar."""
    return build_cbz(
        tmp_path / "spider-man-001.cbz",
        {
            "ComicInfo.xml": COMIC_INFO_FULL.encode(),
            "01.png": image_bytes(),
            "02.png": image_bytes(),
        },
    )


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    """A single-page PDF with a populated info dictionary."""
    return build_pdf(
        tmp_path / "testfile.pdf",
        [(100, 50)],
        title="A Test Document",
        author="Jane Doe",
        subject="Testing things",
        keywords="alpha, beta, , gamma",
    )


@pytest.fixture
def corrupt_pdf(tmp_path: Path) -> Path:
    """A file with a .pdf extension that is not a PDF."""
    filepath = tmp_path / "corrupt.pdf"
    filepath.write_text("this is not a valid pdf file")
    return filepath


@pytest.fixture
def sample_epub(tmp_path: Path) -> Path:
    """Create a minimal valid EPUB file with known metadata."""
    book = epub.EpubBook()

    book.set_identifier("test-isbn-978-0-123456-47-2")
    book.set_title("The Name of the Rose")
    book.set_language("en")
    book.add_author("Umberto Eco")

    book.add_metadata("DC", "publisher", "Harcourt")
    book.add_metadata("DC", "description", "A mystery set in a medieval monastery.")
    book.add_metadata("DC", "description", "Translated from Italian.")
    book.add_metadata("DC", "date", "1980-10-01")
    book.add_metadata("DC", "subject", "Mystery")
    book.add_metadata("DC", "subject", "Historical fiction")
    book.add_metadata(None, "meta", "", {"name": "calibre:series", "content": "Monastery Tales"})
    book.add_metadata(None, "meta", "", {"name": "calibre:series_index", "content": "1"})

    # Add a minimal chapter so the EPUB is structurally valid
    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang="en")
    chapter.content = b"<html><body><h1>Chapter 1</h1><p>Content.</p></body></html>"
    book.add_item(chapter)

    # Add navigation
    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    filepath = tmp_path / "name_of_the_rose.epub"
    epub.write_epub(str(filepath), book)
    return filepath


@pytest.fixture
def corrupt_epub(tmp_path: Path) -> Path:
    """Create a corrupt file that is not a valid EPUB."""
    filepath = tmp_path / "corrupt.epub"
    filepath.write_text("this is not a valid epub file")
    return filepath


@pytest.fixture
def minimal_epub(tmp_path: Path) -> Path:
    """Create an EPUB with minimal metadata (only title)."""
    book = epub.EpubBook()
    book.set_identifier("minimal-id")
    book.set_title("Untitled Book")
    book.set_language("en")

    chapter = epub.EpubHtml(title="Content", file_name="content.xhtml", lang="en")
    chapter.content = b"<html><body><p>Minimal content.</p></body></html>"
    book.add_item(chapter)

    book.toc = [epub.Link("content.xhtml", "Content", "content")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    filepath = tmp_path / "minimal.epub"
    epub.write_epub(str(filepath), book)
    return filepath


@pytest.fixture
def library_tree(tmp_path: Path) -> Path:
    """Create a mixed library tree for scanning.

    Layout:
        Library/
            Comics/
                Full of Fun 001.cbz
                broken.cbr
            Docs/
                manual.PDF
                readme.txt
    """
    root = tmp_path / "Library"
    comics = root / "Comics"
    docs = root / "Docs"
    comics.mkdir(parents=True)
    docs.mkdir(parents=True)

    build_cbz(comics / "Full of Fun 001.cbz", {"01.jpg": image_bytes(fmt="JPEG")})
    (comics / "broken.cbr").write_bytes(b"not really an archive")
    build_pdf(docs / "manual.PDF", [(80, 120), (80, 120)], title="")
    (docs / "readme.txt").write_text("ignore me")
    return root
