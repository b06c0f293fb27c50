# ABOUTME: Integration tests for page extraction across archive and PDF formats.
# ABOUTME: Validates files on disk, manifest contents, and dimension agreement end to end.

import json
from pathlib import Path

from PIL import Image

from bookkeeper.core.dispatcher import Dispatcher
from bookkeeper.core.extractor import MANIFEST_NAME, extract_book
from tests.fixtures.builders import build_cb7, build_cbt, build_cbz, build_pdf, image_bytes


def _load_manifest(folder: Path) -> list[dict]:
    return json.loads((folder / MANIFEST_NAME).read_text(encoding="utf-8"))["pages"]


def _assert_manifest_matches_disk(folder: Path) -> None:
    for entry in _load_manifest(folder):
        with Image.open(folder / entry["path"]) as img:
            assert img.size == (entry["width"], entry["height"])


class TestArchiveExtraction:
    """Every archive flavour extracts to the same ordered manifest."""

    MEMBERS = {
        "Issue/10.png": image_bytes(30, 45),
        "Issue/2.png": image_bytes(31, 46),
        "Issue/1.png": image_bytes(32, 47),
        "Issue/ComicInfo.xml": b"<ComicInfo><Series>Nested</Series><Number>3</Number></ComicInfo>",
    }
    EXPECTED = [
        {"path": "Issue/1.png", "width": 32, "height": 47},
        {"path": "Issue/2.png", "width": 31, "height": 46},
        {"path": "Issue/10.png", "width": 30, "height": 45},
    ]

    def test_cbz(self, dispatcher: Dispatcher, tmp_path: Path) -> None:
        book = build_cbz(tmp_path / "nested.cbz", self.MEMBERS)
        out = tmp_path / "cbz-out"
        extract_book(book, out, dispatcher)
        assert _load_manifest(out) == self.EXPECTED
        _assert_manifest_matches_disk(out)

    def test_cbt(self, dispatcher: Dispatcher, tmp_path: Path) -> None:
        book = build_cbt(tmp_path / "nested.cbt", self.MEMBERS)
        out = tmp_path / "cbt-out"
        extract_book(book, out, dispatcher)
        assert _load_manifest(out) == self.EXPECTED
        _assert_manifest_matches_disk(out)

    def test_cb7(self, dispatcher: Dispatcher, tmp_path: Path) -> None:
        book = build_cb7(tmp_path / "nested.cb7", self.MEMBERS, tmp_path / "staging")
        out = tmp_path / "cb7-out"
        extract_book(book, out, dispatcher)
        assert _load_manifest(out) == self.EXPECTED
        _assert_manifest_matches_disk(out)

    def test_metadata_and_extraction_agree_on_page_count(
        self, dispatcher: Dispatcher, tmp_path: Path
    ) -> None:
        book = build_cbz(tmp_path / "nested.cbz", self.MEMBERS)
        info = dispatcher.get_book_info(book)
        result = extract_book(book, tmp_path / "out", dispatcher)
        assert info.title == "Nested #3"
        assert info.pages == len(result.pages) == 3

    def test_archive_with_no_images(self, dispatcher: Dispatcher, tmp_path: Path) -> None:
        book = build_cbz(tmp_path / "text-only.cbz", {"readme.txt": b"hello"})
        out = tmp_path / "out"
        result = extract_book(book, out, dispatcher)
        assert result.pages == []
        assert _load_manifest(out) == []


class TestPdfExtraction:
    """PDF pages render to page_NN.jpg files listed in the manifest."""

    def test_pages_and_manifest(self, dispatcher: Dispatcher, tmp_path: Path) -> None:
        book = build_pdf(tmp_path / "doc.pdf", [(72, 144), (144, 72), (72, 72)], title="Doc")
        out = tmp_path / "out"
        result = extract_book(book, out, dispatcher)

        manifest = _load_manifest(out)
        assert [entry["path"] for entry in manifest] == ["page_01.jpg", "page_02.jpg", "page_03.jpg"]
        assert manifest == [page.to_dict() for page in result.pages]
        # 72 points at 150 dpi renders to about 150 pixels.
        assert 150 <= manifest[0]["width"] <= 151
        assert 300 <= manifest[0]["height"] <= 301
        _assert_manifest_matches_disk(out)

    def test_metadata_page_count_matches_extraction(
        self, dispatcher: Dispatcher, sample_pdf: Path, tmp_path: Path
    ) -> None:
        info = dispatcher.get_book_info(sample_pdf)
        result = extract_book(sample_pdf, tmp_path / "out", dispatcher)
        assert info.pages == len(result.pages) == 1

    def test_reextracting_overwrites(
        self, dispatcher: Dispatcher, sample_pdf: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "out"
        extract_book(sample_pdf, out, dispatcher)
        extract_book(sample_pdf, out, dispatcher)
        assert sorted(p.name for p in out.iterdir()) == [MANIFEST_NAME, "page_01.jpg"]
