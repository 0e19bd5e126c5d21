"""Rule-based strategies that map scanned files to move plans."""

from __future__ import annotations

import errno
import logging
import os
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional

from smart_organizer.config.models import ReviewFolders
from smart_organizer.errors import FilesystemError, InvalidRequestError
from smart_organizer.organization.models import MoveAction, OrganizePlan, RenameAction
from smart_organizer.scanning.models import FileEntry

from .naming import DestinationAllocator

LOGGER = logging.getLogger(__name__)

TEMP_SUFFIXES: tuple[str, ...] = (
    "tmp",
    "temp",
    "bak",
    "old",
    "log",
    "swp",
    "swo",
    "dmp",
    "cache",
    "ds_store",
    "thumbs.db",
    "crdownload",
    "part",
    "tempfile",
)


def is_temporary(name: str) -> bool:
    """Return True when a file name looks like a temporary or backup file."""
    lowered = name.lower()
    if lowered.startswith("~"):
        return True
    return any(lowered == suffix or lowered.endswith(f".{suffix}") for suffix in TEMP_SUFFIXES)


class OrganizeStrategy:
    """Base class for strategies that move files into folders under the root."""

    name = "base"

    def target_directory(self, entry: FileEntry, root: Path) -> Optional[Path]:
        raise NotImplementedError

    def build_plan(
        self,
        entries: Iterable[FileEntry],
        root: Path,
        *,
        allocator: Optional[DestinationAllocator] = None,
    ) -> OrganizePlan:
        """Produce a move plan for the given entries.

        Args:
            entries: Scan results, in scan order.
            root: Root directory the entries were scanned from.
            allocator: Optional allocator shared with other plan stages.

        Returns:
            OrganizePlan: Move actions in scan order.
        """

        allocator = allocator or DestinationAllocator()
        plan = OrganizePlan()
        for entry in entries:
            target_dir = self.target_directory(entry, root)
            if target_dir is None:
                continue
            move = self._build_move(entry, target_dir, allocator)
            if move is not None:
                plan.add(move)
        LOGGER.debug("%s strategy planned %d move(s) under %s", self.name, len(plan), root)
        return plan

    def _build_move(
        self,
        entry: FileEntry,
        target_dir: Path,
        allocator: DestinationAllocator,
    ) -> Optional[MoveAction]:
        if target_dir in entry.path.parents:
            return None

        destination = allocator.allocate(entry.path, target_dir / entry.name)
        if destination is None:
            return None

        return MoveAction(
            src=entry.path,
            dest=destination,
            reason=f"Move to '{target_dir.name}'",
        )


class ExtensionStrategy(OrganizeStrategy):
    """Group files into one folder per lowercase extension."""

    name = "extension"

    def __init__(self, review: ReviewFolders | None = None) -> None:
        self.review = review or ReviewFolders()

    def folder_for(self, entry: FileEntry) -> str:
        return entry.extension.lstrip(".") or self.review.no_extension

    def target_directory(self, entry: FileEntry, root: Path) -> Optional[Path]:
        return root / self.folder_for(entry)


class DateStrategy(OrganizeStrategy):
    """Group files into `YYYY-MM` folders using local time.

    Recursive organization is destructive to the original tree: `flatten_plan`
    lifts every nested file to the root, `prune_empty_directories` removes the
    emptied folders, and a bucket plan then runs over a fresh root listing.
    """

    name = "date"
    undated_folder = "undated"

    def folder_for(self, entry: FileEntry) -> str:
        timestamp = entry.timestamp
        if timestamp is None:
            return self.undated_folder
        return timestamp.astimezone().strftime("%Y-%m")

    def target_directory(self, entry: FileEntry, root: Path) -> Optional[Path]:
        return root / self.folder_for(entry)

    def flatten_plan(self, entries: Iterable[FileEntry], root: Path) -> OrganizePlan:
        """Plan moves that bring every nested file up to the root."""
        allocator = DestinationAllocator()
        plan = OrganizePlan()
        for entry in entries:
            if entry.path.parent == root:
                continue
            destination = allocator.allocate(entry.path, root / entry.name)
            if destination is None:
                continue
            plan.add(MoveAction(src=entry.path, dest=destination, reason="Flatten into root"))
        return plan


class TempStrategy(OrganizeStrategy):
    """Collect temporary and backup files for review."""

    name = "temp"

    def __init__(self, review: ReviewFolders | None = None) -> None:
        self.review = review or ReviewFolders()

    def target_directory(self, entry: FileEntry, root: Path) -> Optional[Path]:
        if not is_temporary(entry.name):
            return None
        return root / self.review.temp


class SizeStrategy(OrganizeStrategy):
    """Collect files strictly larger than a byte threshold."""

    name = "size"

    def __init__(self, threshold: Optional[int], review: ReviewFolders | None = None) -> None:
        if threshold is None:
            raise InvalidRequestError("A size threshold is required for size organization")
        if threshold < 0:
            raise InvalidRequestError(
                "Size threshold must be non-negative",
                details={"threshold": threshold},
            )
        self.threshold = threshold
        self.review = review or ReviewFolders()

    def target_directory(self, entry: FileEntry, root: Path) -> Optional[Path]:
        if entry.size <= self.threshold:
            return None
        return root / self.review.large


class ArchiveStrategy(OrganizeStrategy):
    """Move files not modified within `min_age_days` into an archive folder."""

    name = "archive"

    def __init__(
        self,
        min_age_days: int = 30,
        folder: str = "archive",
        *,
        now: Optional[datetime] = None,
    ) -> None:
        if min_age_days < 0:
            raise InvalidRequestError(
                "Minimum age must be non-negative",
                details={"min_age_days": min_age_days},
            )
        self.min_age_days = min_age_days
        self.folder = folder
        self.cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=min_age_days)

    def target_directory(self, entry: FileEntry, root: Path) -> Optional[Path]:
        timestamp = entry.modified_at
        if timestamp is None or timestamp >= self.cutoff:
            return None
        return root / self.folder


class PatternRenameStrategy(OrganizeStrategy):
    """Strip the first match of a pattern from each file name, in place.

    Literal patterns are matched verbatim; `use_regex` treats the pattern as a
    regular expression. Matching ignores case unless `case_sensitive` is set.
    Names that would become empty are left alone.
    """

    name = "rename"

    def __init__(
        self,
        pattern: Optional[str],
        *,
        use_regex: bool = False,
        case_sensitive: bool = False,
    ) -> None:
        if not pattern:
            raise InvalidRequestError("A pattern is required for rename organization")
        flags = 0 if case_sensitive else re.IGNORECASE
        try:
            self.regex = re.compile(pattern if use_regex else re.escape(pattern), flags)
        except re.error as exc:
            raise InvalidRequestError(
                f"Invalid rename pattern: {exc}",
                details={"pattern": pattern},
            ) from exc
        self.pattern = pattern

    def new_name_for(self, name: str) -> Optional[str]:
        new_name = self.regex.sub("", name, count=1)
        if new_name == name or new_name.strip() in {"", ".", ".."}:
            return None
        return new_name

    def target_directory(self, entry: FileEntry, root: Path) -> Optional[Path]:
        return entry.path.parent

    def build_plan(
        self,
        entries: Iterable[FileEntry],
        root: Path,
        *,
        allocator: Optional[DestinationAllocator] = None,
    ) -> OrganizePlan:
        """Produce rename actions for every entry whose name matches."""

        allocator = allocator or DestinationAllocator()
        plan = OrganizePlan()
        for entry in entries:
            new_name = self.new_name_for(entry.name)
            if new_name is None:
                continue
            destination = allocator.allocate(entry.path, entry.path.parent / new_name)
            if destination is None:
                continue
            plan.add(
                RenameAction(
                    src=entry.path,
                    new_name=destination.name,
                    reason=f"Strip '{self.pattern}'",
                )
            )
        LOGGER.debug("rename strategy planned %d rename(s) under %s", len(plan), root)
        return plan


def prune_empty_directories(root: Path) -> list[Path]:
    """Remove empty directories below `root`, deepest first.

    Directories that are not empty are left in place; the root itself is
    never removed.

    Returns:
        list[Path]: Directories that were removed.

    Raises:
        FilesystemError: If a directory cannot be removed for another reason.
    """

    removed: list[Path] = []
    for current, _dirs, _files in os.walk(root, topdown=False):
        directory = Path(current)
        if directory == root:
            continue
        try:
            directory.rmdir()
        except OSError as exc:
            if exc.errno in (errno.ENOTEMPTY, errno.EEXIST):
                continue
            raise FilesystemError(
                f"Cannot remove directory {directory}: {exc.strerror or exc}",
                path=str(directory),
            ) from exc
        removed.append(directory)
    LOGGER.debug("Removed %d empty director(ies) under %s", len(removed), root)
    return removed


__all__ = [
    "TEMP_SUFFIXES",
    "is_temporary",
    "OrganizeStrategy",
    "ExtensionStrategy",
    "DateStrategy",
    "TempStrategy",
    "SizeStrategy",
    "ArchiveStrategy",
    "PatternRenameStrategy",
    "prune_empty_directories",
]
