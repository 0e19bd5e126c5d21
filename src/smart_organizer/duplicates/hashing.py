"""Streaming content hashing."""

from __future__ import annotations

import hashlib
from pathlib import Path

from smart_organizer.errors import FilesystemError


class ContentHasher:
    """Compute whole-file digests without loading files into memory."""

    def __init__(self, algorithm: str = "md5", chunk_size: int = 65_536) -> None:
        self.algorithm = algorithm
        self.chunk_size = chunk_size

    def digest(self, path: Path) -> str:
        """Return the hex digest of the file at `path`.

        Raises:
            FilesystemError: If the file cannot be opened or read.
        """
        hasher = hashlib.new(self.algorithm)
        try:
            with path.open("rb") as handle:
                for chunk in iter(lambda: handle.read(self.chunk_size), b""):
                    hasher.update(chunk)
        except OSError as exc:
            raise FilesystemError(
                f"Cannot hash {path}: {exc.strerror or exc}",
                path=str(path),
            ) from exc
        return hasher.hexdigest()


__all__ = ["ContentHasher"]
