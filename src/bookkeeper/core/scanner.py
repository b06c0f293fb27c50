# ABOUTME: Directory scanner producing one metadata record per supported book file.
# ABOUTME: Failures are reported per file so one bad book never aborts a scan.

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from bookkeeper.core.dispatcher import Dispatcher, default_dispatcher, is_valid_book_file
from bookkeeper.core.hashing import compute_file_hash
from bookkeeper.formats.errors import BookkeeperError

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


def find_book_files(root: Path) -> list[Path]:
    """Recursively find supported book files under root, in sorted order."""
    return sorted(p for p in root.rglob("*") if p.is_file() and is_valid_book_file(p))


def _relative(root: Path, path: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def scan_book(
    root: Path,
    path: Path,
    *,
    dispatcher: Dispatcher | None = None,
    with_hash: bool = False,
) -> dict[str, Any]:
    """Build the scan record for a single book file.

    Returns:
        A success record with size, hash and book metadata, or a failed
        record carrying the error message.
    """
    rel_path = _relative(root, path)
    try:
        book = (dispatcher or default_dispatcher()).get_book_info(path)
        size = path.stat().st_size
        file_hash = compute_file_hash(path) if with_hash else ""
    except (BookkeeperError, OSError) as exc:
        logger.info("Failed to scan %s: %s", rel_path, exc)
        return {"path": rel_path, "status": STATUS_FAILED, "error": str(exc)}

    return {
        "path": rel_path,
        "status": STATUS_SUCCESS,
        "size": size,
        "hash": file_hash,
        "book": book.to_dict(),
    }


def scan_books(
    root: Path,
    *,
    dispatcher: Dispatcher | None = None,
    with_hash: bool = False,
) -> Iterator[dict[str, Any]]:
    """Walk root and yield one scan record per supported book file.

    Args:
        root: Directory to scan recursively.
        dispatcher: Dispatcher to use. Defaults to the process-wide one.
        with_hash: Whether to compute a SHA-256 hash of each file.

    Yields:
        Scan records in sorted path order.
    """
    root = root.resolve()
    for path in find_book_files(root):
        yield scan_book(root, path, dispatcher=dispatcher, with_hash=with_hash)
