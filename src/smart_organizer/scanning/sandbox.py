"""Confine path references to a root directory."""

from __future__ import annotations

import os
from pathlib import Path

from smart_organizer.errors import PathViolationError


class PathSandbox:
    """Resolve file references against a root and reject escapes.

    Containment is checked on the lexical form after `..` segments are
    collapsed. Paths that would leave the root raise `PathViolationError`;
    they are never clamped back inside.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).expanduser().resolve()

    def resolve(self, candidate: object) -> Path:
        """Return the absolute, normalized form of `candidate`.

        Args:
            candidate: Absolute path, or path relative to the root.

        Returns:
            Path: Normalized absolute path inside the root.

        Raises:
            PathViolationError: If the candidate is empty, not path-like, or
                resolves outside the root.
        """
        if isinstance(candidate, Path):
            raw = str(candidate)
        elif isinstance(candidate, str):
            raw = candidate
        else:
            raise PathViolationError(candidate, self.root)
        if not raw.strip() or "\x00" in raw:
            raise PathViolationError(candidate, self.root)

        joined = os.path.join(self.root, raw)
        resolved = Path(os.path.normpath(joined))
        if not self.contains(resolved):
            raise PathViolationError(candidate, self.root)
        return resolved

    def contains(self, path: Path) -> bool:
        """Return True when `path` equals or nests under the root."""
        return path == self.root or self.root in path.parents

    def relative(self, path: Path) -> Path:
        """Return `path` relative to the root, or unchanged if outside it."""
        try:
            return path.relative_to(self.root)
        except ValueError:
            return path


__all__ = ["PathSandbox"]
