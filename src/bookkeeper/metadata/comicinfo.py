# ABOUTME: ComicInfo.xml sidecar parsing across the v1.0, v2.0 and v2.1 schemas.
# ABOUTME: Tries each schema newest-first and folds the first that decodes into a BookInfo.

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from bookkeeper.formats.errors import MetadataParseError
from bookkeeper.metadata.types import BookInfo

logger = logging.getLogger(__name__)

COMIC_INFO_NAME = "comicinfo.xml"

_ROOT_TAG = "ComicInfo"


@dataclass(frozen=True)
class SchemaVersion:
    """Describes which ComicInfo elements one schema generation defines.

    Decoding a document against a version only looks at the elements that
    version knows about. Integer and decimal elements must parse as numbers
    (empty text counts as zero) or the whole version is rejected.
    """

    name: str
    text_fields: frozenset[str]
    int_fields: frozenset[str]
    decimal_fields: frozenset[str] = frozenset()

    @property
    def author_fields(self) -> tuple[str, ...]:
        return tuple(f for f in _AUTHOR_ORDER if f in self.text_fields)

    @property
    def keyword_fields(self) -> tuple[str, ...]:
        return tuple(f for f in _KEYWORD_ORDER if f in self.text_fields)


_AUTHOR_ORDER = (
    "Writer", "Penciller", "Inker", "Colorist", "Letterer", "Editor", "Translator",
)
_KEYWORD_ORDER = ("Genre", "Tags", "Characters", "Teams", "Locations")

_V1_TEXT = frozenset({
    "Title", "Series", "AlternateSeries", "Summary", "Notes",
    "Writer", "Penciller", "Inker", "Colorist", "Letterer", "CoverArtist", "Editor",
    "Publisher", "Imprint", "Genre", "Web", "LanguageISO", "Format",
    "BlackAndWhite", "Manga",
})
_V1_INT = frozenset({
    "Number", "Count", "Volume", "AlternateNumber", "AlternateCount",
    "Year", "Month", "PageCount",
})

_V2_TEXT = _V1_TEXT | {
    "StoryArc", "SeriesGroup", "Characters", "Teams", "Locations",
    "ScanInformation", "AgeRating", "MainCharacterOrLocation", "Review",
}
_V2_INT = _V1_INT | {"Day"}

_V21_TEXT = _V2_TEXT | {"Translator", "Tags", "GTIN", "StoryArcNumber"}

# Newest first: the first version that decodes wins.
SCHEMA_VERSIONS: tuple[SchemaVersion, ...] = (
    SchemaVersion("2.1", _V21_TEXT, _V2_INT, frozenset({"CommunityRating"})),
    SchemaVersion("2.0", _V2_TEXT, _V2_INT, frozenset({"CommunityRating"})),
    SchemaVersion("1.0", _V1_TEXT, _V1_INT),
)


@dataclass
class ComicMetadataRecord:
    """Sidecar fields decoded under one schema version.

    Superset of every version's fields. Fields the version does not define
    stay at their zero value. Lives only until it is folded into a BookInfo.
    """

    version: str
    title: str = ""
    series: str = ""
    number: int = 0
    summary: str = ""
    year: int = 0
    month: int = 0
    day: int = 0
    publisher: str = ""
    language_iso: str = ""
    page_count: int = 0
    creators: dict[str, str] = field(default_factory=dict)
    tag_fields: dict[str, str] = field(default_factory=dict)

    def published_date(self) -> str | None:
        """Assemble YYYY, YYYY-MM or YYYY-MM-DD from whichever parts are set."""
        if self.year <= 0:
            return None
        date = str(self.year)
        if self.month > 0:
            date += f"-{self.month:02d}"
            if self.day > 0:
                date += f"-{self.day:02d}"
        return date

    def display_title(self) -> str:
        """Explicit title, else "<series> #<number>", else the series, else empty."""
        if self.title:
            return self.title
        if self.series and self.number > 0:
            return f"{self.series} #{self.number}"
        return self.series

    def to_book_info(self, fallback_title: str = "") -> BookInfo:
        authors: list[str] = []
        for value in self.creators.values():
            authors.extend(split_comma_delimited(value))

        keywords: list[str] = []
        for value in self.tag_fields.values():
            keywords.extend(split_comma_delimited(value))

        return BookInfo(
            title=self.display_title() or fallback_title,
            language=[self.language_iso] if self.language_iso else [],
            description=self.summary or None,
            series=self.series or None,
            series_index=str(self.number) if self.number > 0 else None,
            pages=self.page_count if self.page_count > 0 else 0,
            authors=remove_duplicates(authors),
            publisher=self.publisher or None,
            published_date=self.published_date(),
            keywords=remove_duplicates(keywords),
        )


def split_comma_delimited(value: str) -> list[str]:
    """Split on commas, trim whitespace, and drop empty fragments."""
    return [part.strip() for part in value.split(",") if part.strip()]


def remove_duplicates(values: list[str]) -> list[str]:
    """Deduplicate while keeping first-seen order."""
    return list(dict.fromkeys(values))


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _decode_int(raw: str) -> int:
    raw = raw.strip()
    return int(raw) if raw else 0


def _decode_decimal(raw: str) -> float:
    raw = raw.strip()
    return float(raw) if raw else 0.0


def _decode(elements: dict[str, str], schema: SchemaVersion) -> ComicMetadataRecord:
    """Decode element text against one schema version.

    Raises:
        ValueError: If a numeric element of this version holds non-numeric text.
    """
    ints = {name: _decode_int(elements[name]) for name in schema.int_fields if name in elements}
    for name in schema.decimal_fields:
        if name in elements:
            _decode_decimal(elements[name])

    def text(name: str) -> str:
        if name not in schema.text_fields:
            return ""
        return elements.get(name, "").strip()

    return ComicMetadataRecord(
        version=schema.name,
        title=text("Title"),
        series=text("Series"),
        number=ints.get("Number", 0),
        summary=text("Summary"),
        year=ints.get("Year", 0),
        month=ints.get("Month", 0),
        day=ints.get("Day", 0),
        publisher=text("Publisher"),
        language_iso=text("LanguageISO"),
        page_count=ints.get("PageCount", 0),
        creators={name: text(name) for name in schema.author_fields if text(name)},
        tag_fields={name: text(name) for name in schema.keyword_fields if text(name)},
    )


def decode_comic_info(xml_data: bytes | str) -> ComicMetadataRecord:
    """Decode sidecar XML into a ComicMetadataRecord using the first matching schema.

    Raises:
        MetadataParseError: If the XML is malformed, its root is not
            ComicInfo, or no schema version can decode it.
    """
    try:
        root = ET.fromstring(xml_data)
    except ET.ParseError as exc:
        raise MetadataParseError(f"Malformed ComicInfo.xml: {exc}") from exc

    if _local_name(root.tag) != _ROOT_TAG:
        raise MetadataParseError(
            f"Unexpected root element '{_local_name(root.tag)}' in ComicInfo.xml"
        )

    # First occurrence of each child element wins.
    elements: dict[str, str] = {}
    for child in root:
        elements.setdefault(_local_name(child.tag), child.text or "")

    for schema in SCHEMA_VERSIONS:
        try:
            return _decode(elements, schema)
        except ValueError as exc:
            logger.debug("ComicInfo does not decode as v%s: %s", schema.name, exc)

    raise MetadataParseError("ComicInfo.xml matches none of the known schema versions")


def parse_comic_info(xml_data: bytes | str, fallback_title: str = "") -> BookInfo:
    """Parse ComicInfo.xml content into a BookInfo.

    Args:
        xml_data: Raw sidecar content.
        fallback_title: Title to use when the sidecar has neither a title
            nor a series.

    Returns:
        BookInfo built from the sidecar. Page count is 0 when the sidecar
        does not state one.

    Raises:
        MetadataParseError: If no schema version can decode the document.
    """
    return decode_comic_info(xml_data).to_book_info(fallback_title)
