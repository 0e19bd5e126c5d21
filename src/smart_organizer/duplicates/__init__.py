"""Duplicate detection for organized directories."""

from .detector import DuplicateDetector, DuplicateGroup
from .hashing import ContentHasher

__all__ = ["ContentHasher", "DuplicateDetector", "DuplicateGroup"]
