# ABOUTME: Unit tests for the extraction orchestrator and pages.json manifest.
# ABOUTME: Checks manifest shape, ordering, and error propagation.

import json
from pathlib import Path

import pytest

from bookkeeper.core.dispatcher import Dispatcher
from bookkeeper.core.extractor import MANIFEST_NAME, extract_book, write_manifest
from bookkeeper.formats.errors import OutputError, UnsupportedFormatError
from bookkeeper.metadata import Page


class TestWriteManifest:
    """Tests for write_manifest."""

    def test_writes_pages_in_order(self, tmp_path: Path) -> None:
        pages = [Page("1.jpg", 40, 60), Page("sub/2.jpg", 800, 1200)]
        path = write_manifest(pages, tmp_path)
        assert path == tmp_path / MANIFEST_NAME
        assert json.loads(path.read_text(encoding="utf-8")) == {
            "pages": [
                {"path": "1.jpg", "width": 40, "height": 60},
                {"path": "sub/2.jpg", "width": 800, "height": 1200},
            ]
        }

    def test_empty_manifest(self, tmp_path: Path) -> None:
        path = write_manifest([], tmp_path)
        assert json.loads(path.read_text(encoding="utf-8")) == {"pages": []}

    def test_is_indented_with_trailing_newline(self, tmp_path: Path) -> None:
        text = write_manifest([Page("1.jpg", 1, 1)], tmp_path).read_text(encoding="utf-8")
        assert text.startswith('{\n  "pages": [')
        assert text.endswith("}\n")

    def test_unicode_paths_kept_verbatim(self, tmp_path: Path) -> None:
        text = write_manifest([Page("página 1.jpg", 1, 1)], tmp_path).read_text(encoding="utf-8")
        assert "página 1.jpg" in text

    def test_unwritable_folder_raises(self, tmp_path: Path) -> None:
        not_a_folder = tmp_path / "file"
        not_a_folder.write_text("x")
        with pytest.raises(OutputError):
            write_manifest([], not_a_folder)


class TestExtractBook:
    """Tests for extract_book."""

    def test_manifest_matches_result(
        self, dispatcher: Dispatcher, plain_cbz: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "out"
        result = extract_book(plain_cbz, out, dispatcher)
        manifest = json.loads((out / MANIFEST_NAME).read_text(encoding="utf-8"))
        assert manifest["pages"] == [page.to_dict() for page in result.pages]
        assert [p["path"] for p in manifest["pages"]] == ["1.jpg", "2.jpg", "10.jpg"]

    def test_every_listed_page_exists(
        self, dispatcher: Dispatcher, sample_pdf: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "out"
        result = extract_book(sample_pdf, out, dispatcher)
        for page in result.pages:
            assert (out / page.path).is_file()

    def test_epub_writes_nothing(
        self, dispatcher: Dispatcher, sample_epub: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "out"
        with pytest.raises(UnsupportedFormatError):
            extract_book(sample_epub, out, dispatcher)
        assert not (out / MANIFEST_NAME).exists()
