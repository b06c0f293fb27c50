# ABOUTME: Exception hierarchy shared by the format readers and the dispatcher.
# ABOUTME: Fatal conditions surface to callers; parse and probe errors are recovered locally.

from pathlib import Path


class BookkeeperError(Exception):
    """Base class for every error raised by Bookkeeper."""


class UnsupportedFormatError(BookkeeperError):
    """Raised when a file extension is not handled by any reader."""

    def __init__(
        self, path: Path | str, message: str | None = None, *, extension: str | None = None
    ) -> None:
        self.path = Path(path)
        self.extension = self.path.suffix.lower() if extension is None else extension
        super().__init__(
            message or f"Unsupported file format '{self.extension or '(none)'}': {self.path}"
        )


class BookOpenError(BookkeeperError):
    """Raised when a container or document cannot be opened."""


class EntryListError(BookkeeperError):
    """Raised when an opened container cannot enumerate its entries."""


class MetadataParseError(BookkeeperError):
    """Raised when a ComicInfo sidecar matches none of the known schema versions."""


class ImageProbeError(BookkeeperError):
    """Raised when an image's pixel dimensions cannot be determined."""


class RenderError(BookkeeperError):
    """Raised when a PDF page cannot be rendered or encoded."""


class OutputError(BookkeeperError):
    """Raised when the output folder or a file inside it cannot be written."""
