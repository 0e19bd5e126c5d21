"""Models describing scanned files."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FileEntry(BaseModel):
    """Metadata captured for a regular file during one scan.

    Attributes:
        path: Absolute path of the file; unique within a scan.
        name: Base name of the file.
        size: File size in bytes.
        modified_at: Last modification time (UTC).
        created_at: Creation time (birth time where the platform reports it,
            otherwise the inode change time).
        extension: Lowercase suffix including the leading dot, or empty.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    name: str
    size: int = Field(ge=0)
    modified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    extension: str = ""

    @classmethod
    def from_stat(cls, path: Path, stat: os.stat_result) -> "FileEntry":
        """Build an entry from a path and its `stat` result."""
        birth = getattr(stat, "st_birthtime", None)
        created = birth if birth is not None else stat.st_ctime
        return cls(
            path=path,
            name=path.name,
            size=stat.st_size,
            modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            created_at=datetime.fromtimestamp(created, tz=timezone.utc),
            extension=path.suffix.lower(),
        )

    @property
    def timestamp(self) -> Optional[datetime]:
        """Return the modification time, falling back to the creation time."""
        return self.modified_at or self.created_at


__all__ = ["FileEntry"]
