"""Classification strategies for organizing files."""

from .naming import DestinationAllocator
from .strategies import (
    TEMP_SUFFIXES,
    ArchiveStrategy,
    DateStrategy,
    ExtensionStrategy,
    OrganizeStrategy,
    PatternRenameStrategy,
    SizeStrategy,
    TempStrategy,
    is_temporary,
    prune_empty_directories,
)

__all__ = [
    "DestinationAllocator",
    "TEMP_SUFFIXES",
    "ArchiveStrategy",
    "DateStrategy",
    "ExtensionStrategy",
    "OrganizeStrategy",
    "PatternRenameStrategy",
    "SizeStrategy",
    "TempStrategy",
    "is_temporary",
    "prune_empty_directories",
]
