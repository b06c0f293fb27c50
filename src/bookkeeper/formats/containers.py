# ABOUTME: Uniform read access to the archive formats behind comic book files.
# ABOUTME: Detects ZIP, RAR, 7z and TAR by signature so mis-named archives still open.

import logging
import tarfile
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import py7zr
import rarfile

from bookkeeper.formats.errors import BookOpenError, EntryListError, OutputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveEntry:
    """A single member of an archive, as listed by the archive itself."""

    name: str
    is_dir: bool

    @property
    def basename(self) -> str:
        return self.name.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]


class Container(Protocol):
    """Operations every archive backend supports."""

    def entries(self) -> list[ArchiveEntry]: ...

    def read(self, name: str) -> bytes: ...

    def extract_all(self, dest: Path) -> None: ...

    def close(self) -> None: ...


class _ZipContainer:
    def __init__(self, path: Path) -> None:
        self._archive = zipfile.ZipFile(path)

    def entries(self) -> list[ArchiveEntry]:
        return [ArchiveEntry(info.filename, info.is_dir()) for info in self._archive.infolist()]

    def read(self, name: str) -> bytes:
        return self._archive.read(name)

    def extract_all(self, dest: Path) -> None:
        self._archive.extractall(dest)

    def close(self) -> None:
        self._archive.close()


class _RarContainer:
    def __init__(self, path: Path) -> None:
        self._archive = rarfile.RarFile(path)

    def entries(self) -> list[ArchiveEntry]:
        return [ArchiveEntry(info.filename, info.is_dir()) for info in self._archive.infolist()]

    def read(self, name: str) -> bytes:
        return self._archive.read(name)

    def extract_all(self, dest: Path) -> None:
        self._archive.extractall(path=dest)

    def close(self) -> None:
        self._archive.close()


class _SevenZipContainer:
    def __init__(self, path: Path) -> None:
        self._archive = py7zr.SevenZipFile(path, mode="r")

    def entries(self) -> list[ArchiveEntry]:
        return [ArchiveEntry(info.filename, info.is_directory) for info in self._archive.list()]

    def read(self, name: str) -> bytes:
        # 7z members are read by extracting them; the archive must be rewound first.
        with tempfile.TemporaryDirectory(prefix="bookkeeper-7z-") as tmp:
            self._archive.reset()
            self._archive.extract(path=tmp, targets=[name])
            target = Path(tmp) / name
            if not target.is_file():
                raise KeyError(name)
            return target.read_bytes()

    def extract_all(self, dest: Path) -> None:
        self._archive.reset()
        self._archive.extractall(path=dest)

    def close(self) -> None:
        self._archive.close()


class _TarContainer:
    def __init__(self, path: Path) -> None:
        self._archive = tarfile.open(path, mode="r:*")

    def entries(self) -> list[ArchiveEntry]:
        return [ArchiveEntry(member.name, member.isdir()) for member in self._archive.getmembers()]

    def read(self, name: str) -> bytes:
        member = self._archive.extractfile(name)
        if member is None:
            raise KeyError(name)
        with member:
            return member.read()

    def extract_all(self, dest: Path) -> None:
        self._archive.extractall(dest, filter="data")

    def close(self) -> None:
        self._archive.close()


# Signature probes in the order they are tried.
_BACKENDS = (
    ("zip", zipfile.is_zipfile, _ZipContainer),
    ("rar", rarfile.is_rarfile, _RarContainer),
    ("7z", py7zr.is_7zfile, _SevenZipContainer),
    ("tar", tarfile.is_tarfile, _TarContainer),
)


class Archive:
    """An open archive with entries listed once and released on close.

    Use as a context manager; the underlying handle is closed on every
    exit path.

    Raises on construction:
        BookOpenError: The file is missing, has no known archive signature,
            or its backend refuses to open it.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.kind, self._container = _open_container(path)
        self._entries: list[ArchiveEntry] | None = None

    def __enter__(self) -> "Archive":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def entries(self) -> list[ArchiveEntry]:
        """List every member in archive order.

        Raises:
            EntryListError: If the archive's directory cannot be read.
        """
        if self._entries is None:
            try:
                self._entries = self._container.entries()
            except Exception as exc:
                raise EntryListError(f"Failed to list entries: {self.path}: {exc}") from exc
        return self._entries

    def read(self, name: str) -> bytes:
        """Read one member fully into memory."""
        try:
            return self._container.read(name)
        except Exception as exc:
            raise BookOpenError(f"Failed to read '{name}' from {self.path}: {exc}") from exc

    def extract_all(self, dest: Path) -> None:
        """Extract every member under dest, keeping the archive's folder layout.

        Raises:
            OutputError: If dest cannot be written.
            BookOpenError: If the archive data cannot be decoded.
        """
        try:
            self._container.extract_all(dest)
        except OSError as exc:
            raise OutputError(f"Failed to extract {self.path} to {dest}: {exc}") from exc
        except Exception as exc:
            raise BookOpenError(f"Failed to extract {self.path}: {exc}") from exc

    def close(self) -> None:
        self._container.close()


def _open_container(path: Path) -> tuple[str, Container]:
    if not path.is_file():
        raise BookOpenError(f"File not found: {path}")

    for kind, probe, backend in _BACKENDS:
        try:
            matches = probe(path)
        except OSError as exc:
            raise BookOpenError(f"Failed to read archive: {path}: {exc}") from exc
        if not matches:
            continue
        logger.debug("Opening %s as %s archive", path, kind)
        try:
            return kind, backend(path)
        except Exception as exc:
            raise BookOpenError(f"Failed to open {kind} archive: {path}: {exc}") from exc

    raise BookOpenError(f"Not a recognized archive: {path}")

