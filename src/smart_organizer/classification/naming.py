"""Collision-free destination allocation."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class DestinationAllocator:
    """Assign destinations that collide neither on disk nor within a plan.

    One allocator is shared by every action of a plan so that two files
    aimed at the same name receive distinct `_1`, `_2`, ... suffixes.
    """

    def __init__(self) -> None:
        self._claimed: set[Path] = set()

    def claim(self, path: Path) -> None:
        self._claimed.add(path)

    def is_taken(self, path: Path) -> bool:
        return path in self._claimed or path.exists()

    def allocate(self, source: Path, candidate: Path) -> Optional[Path]:
        """Return a free destination for `source`, or None if it is already there.

        Args:
            source: Current file path.
            candidate: Preferred destination path.

        Returns:
            Optional[Path]: `candidate` or a suffixed variant; None when the
            preferred destination is the source itself.
        """

        if candidate == source:
            return None

        counter = 1
        final_candidate = candidate
        while self.is_taken(final_candidate):
            final_candidate = candidate.with_name(f"{candidate.stem}_{counter}{candidate.suffix}")
            counter += 1

        self._claimed.add(final_candidate)
        return final_candidate


__all__ = ["DestinationAllocator"]
