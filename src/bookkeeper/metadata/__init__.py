# ABOUTME: Metadata package for normalized book records and comic sidecar parsing.
# ABOUTME: Exports the BookInfo and Page dataclasses used throughout Bookkeeper.

from bookkeeper.metadata.comicinfo import ComicMetadataRecord, parse_comic_info
from bookkeeper.metadata.types import BookInfo, ExtractionResult, Page

__all__ = [
    "BookInfo",
    "ComicMetadataRecord",
    "ExtractionResult",
    "Page",
    "parse_comic_info",
]
