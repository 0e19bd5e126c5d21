"""Directory scanning and path confinement."""

from .discovery import DirectoryScanner
from .models import FileEntry
from .sandbox import PathSandbox

__all__ = ["DirectoryScanner", "FileEntry", "PathSandbox"]
