# ABOUTME: Core data structures for book metadata and extracted pages.
# ABOUTME: BookInfo is the normalized record every format reader produces.

from dataclasses import dataclass, field, fields
from typing import Any

_ALWAYS_SERIALIZED = frozenset({"title", "pages"})


@dataclass(frozen=True)
class BookInfo:
    """Normalized metadata for a single book file.

    Every format reader (comic archive, PDF, EPUB) folds its own schema into
    this shape. Title is required and readers fall back to the filename stem,
    so it is never empty. Published date stays a string because source
    precision varies between YYYY, YYYY-MM and YYYY-MM-DD.
    """

    title: str
    subtitle: list[str] = field(default_factory=list)
    language: list[str] = field(default_factory=list)
    description: str | None = None
    series: str | None = None
    series_index: str | None = None
    pages: int = 0
    authors: list[str] = field(default_factory=list)
    publisher: str | None = None
    published_date: str | None = None
    keywords: list[str] = field(default_factory=list)

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(self.authors) if self.authors else ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape used by scan records.

        Title and page count are always present; every other field is
        omitted when empty.
        """
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _ALWAYS_SERIALIZED or value:
                data[f.name] = list(value) if isinstance(value, list) else value
        return data


@dataclass(frozen=True)
class Page:
    """One extracted page image, relative to the extraction folder."""

    path: str
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Page dimensions must be positive: {self.path} ({self.width}x{self.height})"
            )

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "width": self.width, "height": self.height}


@dataclass
class ExtractionResult:
    """Pages produced by an extraction, plus entries that were dropped.

    Attributes:
        pages: Extracted pages in reading order.
        skipped: Relative paths of image entries whose dimensions could not
            be determined and were left out of ``pages``.
    """

    pages: list[Page] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def dropped(self) -> int:
        """Number of image entries left out of the result."""
        return len(self.skipped)
