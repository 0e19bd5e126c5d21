"""File discovery utilities."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from smart_organizer.cancellation import CancellationToken
from smart_organizer.errors import FilesystemError

from .models import FileEntry

LOGGER = logging.getLogger(__name__)


class DirectoryScanner:
    """Discover regular files within a directory tree.

    Recursive scans walk depth-first, visiting entries in name order, and
    flatten every regular file into one list. Directories are never returned.
    Symbolic links are skipped unless `follow_symlinks` is set; followed
    directory links are guarded against cycles.
    """

    def __init__(
        self,
        *,
        recursive: bool,
        include_hidden: bool = True,
        follow_symlinks: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self.recursive = recursive
        self.include_hidden = include_hidden
        self.follow_symlinks = follow_symlinks
        self.cancel_token = cancel_token

    def scan(self, root: Path) -> list[FileEntry]:
        """Return file entries discovered under `root`.

        Args:
            root: Directory to scan.

        Returns:
            list[FileEntry]: Entries in depth-first, name-sorted order.

        Raises:
            FilesystemError: If the root is missing, not a directory, or any
                directory in the walk cannot be read.
            OperationCancelled: If the cancellation token fires mid-walk.
        """
        root = Path(root).expanduser().resolve()
        if not root.exists():
            raise FilesystemError(f"Directory not found: {root}", path=str(root))
        if not root.is_dir():
            raise FilesystemError(f"Not a directory: {root}", path=str(root))

        entries: list[FileEntry] = []
        visited: set[tuple[int, int]] = set()
        self._walk(root, entries, visited)
        LOGGER.debug("Scanned %s: %d file(s) (recursive=%s)", root, len(entries), self.recursive)
        return entries

    def _walk(self, directory: Path, entries: list[FileEntry], visited: set[tuple[int, int]]) -> None:
        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled("scan")

        try:
            stat = directory.stat()
            visited.add((stat.st_dev, stat.st_ino))
            with os.scandir(directory) as iterator:
                children = sorted(iterator, key=lambda item: item.name)
        except OSError as exc:
            raise FilesystemError(
                f"Cannot read directory {directory}: {exc.strerror or exc}",
                path=str(directory),
            ) from exc

        subdirectories: list[Path] = []
        for child in children:
            if not self.include_hidden and child.name.startswith("."):
                continue
            if child.is_symlink() and not self.follow_symlinks:
                continue
            try:
                if child.is_dir(follow_symlinks=self.follow_symlinks):
                    subdirectories.append(Path(child.path))
                    continue
                if not child.is_file(follow_symlinks=self.follow_symlinks):
                    continue
                child_stat = child.stat(follow_symlinks=self.follow_symlinks)
            except OSError as exc:
                LOGGER.warning("Skipping %s: %s", child.path, exc)
                continue
            entries.append(FileEntry.from_stat(Path(child.path), child_stat))

        if not self.recursive:
            return

        for subdirectory in subdirectories:
            try:
                sub_stat = subdirectory.stat()
            except OSError as exc:
                raise FilesystemError(
                    f"Cannot read directory {subdirectory}: {exc.strerror or exc}",
                    path=str(subdirectory),
                ) from exc
            if (sub_stat.st_dev, sub_stat.st_ino) in visited:
                LOGGER.debug("Skipping already visited directory %s", subdirectory)
                continue
            self._walk(subdirectory, entries, visited)


__all__ = ["DirectoryScanner"]
