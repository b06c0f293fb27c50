# ABOUTME: Comic book archive reader for CBZ, CBR, CB7 and CBT files.
# ABOUTME: Reads ComicInfo.xml when present and extracts naturally ordered page images.

import logging
from dataclasses import replace
from pathlib import Path

from bookkeeper.formats.containers import Archive, ArchiveEntry
from bookkeeper.formats.errors import ImageProbeError, MetadataParseError
from bookkeeper.formats.images import is_image, natural_key, probe_dimensions
from bookkeeper.metadata.comicinfo import COMIC_INFO_NAME, parse_comic_info
from bookkeeper.metadata.types import BookInfo, ExtractionResult, Page

logger = logging.getLogger(__name__)


def _is_directory(entry: ArchiveEntry) -> bool:
    return entry.is_dir or entry.name.endswith(("/", "\\"))


def _is_page(entry: ArchiveEntry) -> bool:
    return not _is_directory(entry) and is_image(entry.name)


def count_pages(entries: list[ArchiveEntry]) -> int:
    """Count image entries, never counting directories."""
    return sum(1 for entry in entries if _is_page(entry))


def find_comic_info(entries: list[ArchiveEntry]) -> ArchiveEntry | None:
    """Return the first ComicInfo.xml entry in listing order, at any depth."""
    for entry in entries:
        if not _is_directory(entry) and entry.basename.lower() == COMIC_INFO_NAME:
            return entry
    return None


def _safe_parts(name: str, backslash_is_separator: bool) -> list[str]:
    """Split an entry name the way archive extractors sanitize it.

    Empty, "." and ".." segments are dropped, so the result never climbs
    out of the folder it is joined to.
    """
    if backslash_is_separator:
        name = name.replace("\\", "/")
    return [part for part in name.split("/") if part not in ("", ".", "..")]


def clean_entry_path(name: str) -> str:
    """Normalize an entry name into a clean relative path.

    Backslashes become forward slashes, redundant separators and "." or
    ".." segments are removed, and leading slashes are dropped so the path
    is relative to the extraction folder.
    """
    return "/".join(_safe_parts(name, backslash_is_separator=True))


def locate_extracted(output_dir: Path, name: str) -> str | None:
    """Find the file an entry was extracted to, relative to output_dir.

    Backends disagree on backslashes: zipfile on POSIX keeps them as part
    of a single file name, others treat them as separators. Both layouts
    are tried. Only regular files inside output_dir are accepted.

    Returns:
        The relative path, components joined with "/", or None when the
        entry did not land on a file inside output_dir.
    """
    root = output_dir.resolve()
    candidates = dict.fromkeys(
        "/".join(_safe_parts(name, backslash_is_separator=flag)) for flag in (False, True)
    )
    for rel_path in candidates:
        if not rel_path:
            continue
        target = (root / rel_path).resolve()
        if target.is_relative_to(root) and target.is_file():
            return rel_path
    return None


class ComicArchiveReader:
    """Reads metadata and pages from comic book archives.

    Stateless: every call opens its own archive handle and closes it
    before returning.
    """

    def get_metadata(self, path: Path) -> BookInfo:
        """Extract metadata from a comic archive.

        Uses ComicInfo.xml when one is present and parses; otherwise falls
        back to the filename stem as title. Page count is the number of
        image entries whenever the sidecar does not state one.

        Raises:
            BookOpenError: If the archive cannot be opened.
            EntryListError: If the archive entries cannot be listed.
        """
        stem = path.stem
        with Archive(path) as archive:
            entries = archive.entries()
            info = self._read_comic_info(archive, entries, stem)
            if info is None:
                return BookInfo(title=stem, pages=count_pages(entries))
            if info.pages == 0:
                info = replace(info, pages=count_pages(entries))
            return info

    def _read_comic_info(
        self, archive: Archive, entries: list[ArchiveEntry], fallback_title: str
    ) -> BookInfo | None:
        entry = find_comic_info(entries)
        if entry is None:
            return None
        try:
            return parse_comic_info(archive.read(entry.name), fallback_title=fallback_title)
        except MetadataParseError as exc:
            logger.warning("Ignoring unreadable %s in %s: %s", entry.name, archive.path, exc)
            return None

    def extract_pages(self, path: Path, output_dir: Path) -> ExtractionResult:
        """Extract every page image from an archive into output_dir.

        The whole archive is extracted in one pass, keeping its internal
        folder layout. Image entries whose dimensions cannot be read, or that did not
        land on a file inside output_dir, are left out of the result and
        reported in ``skipped``.

        Returns:
            ExtractionResult with pages in natural order of their paths.

        Raises:
            BookOpenError: If the archive cannot be opened or decoded.
            EntryListError: If the archive entries cannot be listed.
            OutputError: If output_dir cannot be written.
        """
        with Archive(path) as archive:
            entries = archive.entries()
            archive.extract_all(output_dir)

        result = ExtractionResult()
        for entry in entries:
            if not _is_page(entry):
                continue
            rel_path = locate_extracted(output_dir, entry.name)
            if rel_path is None:
                logger.warning("Skipping page %s: not extracted inside %s", entry.name, output_dir)
                result.skipped.append(clean_entry_path(entry.name))
                continue
            try:
                width, height = probe_dimensions(output_dir / rel_path)
            except ImageProbeError as exc:
                logger.warning("Skipping page %s: %s", rel_path, exc)
                result.skipped.append(rel_path)
                continue
            result.pages.append(Page(path=rel_path, width=width, height=height))

        result.pages.sort(key=lambda page: natural_key(page.path))
        return result
