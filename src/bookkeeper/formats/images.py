# ABOUTME: Page-image helpers: extension classifier, dimension probe, natural ordering.
# ABOUTME: Used by the comic archive reader to count, filter and order page images.

import re
from collections.abc import Iterable
from pathlib import Path

from PIL import Image

from bookkeeper.formats.errors import ImageProbeError

IMAGE_EXTENSIONS: frozenset[str] = frozenset({".jpg", ".jpeg", ".png", ".webp"})

_DIGITS_RE = re.compile(r"([0-9]+)")


def is_image(name: str) -> bool:
    """Check whether an entry name looks like a page image (case-insensitive)."""
    return name.lower().endswith(tuple(IMAGE_EXTENSIONS))


def probe_dimensions(path: Path) -> tuple[int, int]:
    """Read the pixel width and height of an image file.

    Only the image header is decoded; the pixel data is never loaded.

    Raises:
        ImageProbeError: If the file is missing, not an image, or reports
            non-positive dimensions.
    """
    try:
        with Image.open(path) as img:
            width, height = img.size
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise ImageProbeError(f"Cannot read image dimensions: {path}: {exc}") from exc

    if width <= 0 or height <= 0:
        raise ImageProbeError(f"Invalid image dimensions {width}x{height}: {path}")
    return width, height


def natural_key(name: str) -> tuple:
    """Sort key that compares embedded digit runs by numeric value.

    re.split with a capture group always alternates text and digit chunks,
    starting with text, so the tuple positions never mix types.
    """
    chunks = _DIGITS_RE.split(name)
    key = tuple(int(chunk) if i % 2 else chunk for i, chunk in enumerate(chunks))
    # Tie-break on the raw string so "01.jpg" and "1.jpg" still order stably.
    return (key, name)


def natural_sorted(names: Iterable[str]) -> list[str]:
    """Return names in human order: "2.jpg" before "10.jpg"."""
    return sorted(names, key=natural_key)
