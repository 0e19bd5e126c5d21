"""Size-then-hash duplicate detection."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from smart_organizer.cancellation import CancellationToken
from smart_organizer.classification.naming import DestinationAllocator
from smart_organizer.config.models import DuplicateOptions
from smart_organizer.errors import FilesystemError
from smart_organizer.organization.models import MoveAction, OrganizePlan
from smart_organizer.scanning.models import FileEntry

from .hashing import ContentHasher

LOGGER = logging.getLogger(__name__)


class DuplicateGroup(BaseModel):
    """Files sharing identical size and content digest.

    Attributes:
        digest: Hex digest shared by every member.
        size: Shared file size in bytes.
        members: Members in scan order; the first is kept as the original.
    """

    digest: str
    size: int
    members: List[FileEntry] = Field(min_length=2)

    @property
    def original(self) -> FileEntry:
        return self.members[0]

    @property
    def duplicates(self) -> list[FileEntry]:
        return self.members[1:]


class DuplicateDetector:
    """Find byte-identical files and plan moving the copies aside.

    Candidates are bucketed by size first; only buckets with two or more
    members are hashed. Hashing runs on a bounded thread pool and results are
    joined before grouping, so group and member order follow scan order.
    """

    def __init__(
        self,
        options: DuplicateOptions | None = None,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self.options = options or DuplicateOptions()
        self.cancel_token = cancel_token
        self.hasher = ContentHasher(self.options.hash_algorithm, self.options.chunk_size)

    def find_groups(
        self,
        entries: Iterable[FileEntry],
        *,
        exclude_dir: Optional[Path] = None,
    ) -> list[DuplicateGroup]:
        """Return duplicate groups among `entries`.

        Args:
            entries: Scan results, in scan order.
            exclude_dir: Directory whose contents are never candidates.

        Returns:
            list[DuplicateGroup]: Groups ordered by their first member.

        Raises:
            OperationCancelled: If cancellation fires while hashing.
        """

        candidates = [
            entry
            for entry in entries
            if exclude_dir is None or exclude_dir not in entry.path.parents
        ]

        buckets: dict[int, list[FileEntry]] = {}
        for entry in candidates:
            buckets.setdefault(entry.size, []).append(entry)
        to_hash = [entry for entry in candidates if len(buckets[entry.size]) > 1]
        if not to_hash:
            return []

        digests = self._hash_all(to_hash)

        grouped: dict[tuple[int, str], list[FileEntry]] = {}
        for entry in to_hash:
            digest = digests.get(entry.path)
            if digest is None:
                continue
            grouped.setdefault((entry.size, digest), []).append(entry)

        groups = [
            DuplicateGroup(digest=digest, size=size, members=members)
            for (size, digest), members in grouped.items()
            if len(members) > 1
        ]
        LOGGER.debug(
            "Hashed %d candidate(s) from %d file(s); found %d duplicate group(s)",
            len(to_hash),
            len(candidates),
            len(groups),
        )
        return groups

    def build_plan(
        self,
        groups: Iterable[DuplicateGroup],
        root: Path,
        *,
        folder: str = "_duplicates_to_review",
        recursive: bool = False,
    ) -> OrganizePlan:
        """Plan moving every non-original member into the review folder.

        Duplicates are renamed `<stem>_duplicate<N><ext>`, where N counts from
        1 within the group. Recursive runs prefix the name with the file's
        root-relative folder path joined by underscores.
        """

        allocator = DestinationAllocator()
        target_dir = root / folder
        plan = OrganizePlan()
        for group in groups:
            for index, entry in enumerate(group.duplicates, start=1):
                name = f"{entry.path.stem}_duplicate{index}{entry.path.suffix}"
                if recursive:
                    name = self._folder_prefix(entry.path, root) + name
                destination = allocator.allocate(entry.path, target_dir / name)
                if destination is None:
                    continue
                plan.add(
                    MoveAction(
                        src=entry.path,
                        dest=destination,
                        reason=f"Duplicate of {group.original.name}",
                    )
                )
        return plan

    def _folder_prefix(self, path: Path, root: Path) -> str:
        try:
            relative_parent = path.parent.relative_to(root)
        except ValueError:
            return ""
        if not relative_parent.parts:
            return ""
        return "_".join(relative_parent.parts) + "_"

    def _hash_all(self, entries: list[FileEntry]) -> dict[Path, str]:
        futures: list[tuple[FileEntry, Future[Optional[str]]]] = []
        with ThreadPoolExecutor(max_workers=self.options.max_workers) as pool:
            for entry in entries:
                if self._cancelled():
                    break
                futures.append((entry, pool.submit(self._digest_unless_cancelled, entry.path)))

        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled("hash")

        digests: dict[Path, str] = {}
        for entry, future in futures:
            try:
                digest = future.result()
            except FilesystemError as exc:
                LOGGER.warning("Skipping unhashable file %s: %s", entry.path, exc)
                continue
            if digest is not None:
                digests[entry.path] = digest
        return digests

    def _digest_unless_cancelled(self, path: Path) -> Optional[str]:
        # Queued work checks the token again so a late cancel starts no new reads.
        if self._cancelled():
            return None
        return self.hasher.digest(path)

    def _cancelled(self) -> bool:
        return self.cancel_token is not None and self.cancel_token.cancelled


__all__ = ["DuplicateGroup", "DuplicateDetector"]
