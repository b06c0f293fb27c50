# ABOUTME: SHA-256 file hashing for scan records.
# ABOUTME: Streams the file through hashlib so large archives never load fully into memory.

import hashlib
from pathlib import Path

HASH_ALGORITHM = "sha256"


def compute_file_hash(path: Path) -> str:
    """Return the lowercase hex SHA-256 digest of a book file.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    with open(path, "rb") as f:
        return hashlib.file_digest(f, HASH_ALGORITHM).hexdigest()
