"""Configuration models describing organizer settings."""

from __future__ import annotations

import hashlib
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrganizerBaseModel(BaseModel):
    """Shared configuration for organizer settings models."""

    model_config = ConfigDict(extra="forbid")


class ScanningOptions(OrganizerBaseModel):
    """Directory scanning options.

    Attributes:
        include_hidden: Whether dot-files and dot-directories are scanned.
        follow_symlinks: Whether symbolic links are followed. Symlinked
            directories are descended with a cycle guard when enabled.
    """

    include_hidden: bool = True
    follow_symlinks: bool = False


class DuplicateOptions(OrganizerBaseModel):
    """Duplicate detection options.

    Attributes:
        hash_algorithm: Name of the `hashlib` digest used for content hashing.
        chunk_size: Read buffer size in bytes while streaming file contents.
        max_workers: Upper bound on concurrent hashing threads.
    """

    hash_algorithm: str = "md5"
    chunk_size: int = Field(default=65_536, gt=0)
    max_workers: int = Field(default=4, ge=1)

    @field_validator("hash_algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in hashlib.algorithms_available:
            raise ValueError(f"Unsupported hash algorithm: {value}")
        return normalized


class ReviewFolders(OrganizerBaseModel):
    """Folder names (relative to the organized root) used by the strategies.

    Attributes:
        temp: Destination for temporary-looking files.
        large: Destination for files above the size threshold.
        duplicates: Destination for duplicate copies.
        no_extension: Extension bucket for files without a suffix.
    """

    temp: str = "_temp_files_to_review"
    large: str = "_large_files_to_review"
    duplicates: str = "_duplicates_to_review"
    no_extension: str = "no_extension"


class ArchiveOptions(OrganizerBaseModel):
    """Settings for the age-based archive strategy.

    Attributes:
        min_age_days: Files modified longer ago than this are archived.
        folder: Archive folder name relative to the root.
    """

    min_age_days: int = Field(default=30, ge=0)
    folder: str = "archive"


class AdvisorOptions(OrganizerBaseModel):
    """Settings for prompting the external advisor and validating its output.

    Attributes:
        max_listed_files: Number of files listed verbatim in the prompt.
        min_destination_length: Minimum length of a resolved destination path.
    """

    max_listed_files: int = Field(default=30, ge=1)
    min_destination_length: int = Field(default=3, ge=1)


class ExecutionOptions(OrganizerBaseModel):
    """Execution limits.

    Attributes:
        timeout_seconds: Optional overall deadline for one organize call.
    """

    timeout_seconds: Optional[float] = None


class LoggingSettings(OrganizerBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file path; enables a rotating file handler.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 5


class CLIOptions(OrganizerBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class OrganizerConfig(OrganizerBaseModel):
    """Top-level configuration struct for the organizer."""

    scanning: ScanningOptions = Field(default_factory=ScanningOptions)
    duplicates: DuplicateOptions = Field(default_factory=DuplicateOptions)
    review: ReviewFolders = Field(default_factory=ReviewFolders)
    archive: ArchiveOptions = Field(default_factory=ArchiveOptions)
    advisor: AdvisorOptions = Field(default_factory=AdvisorOptions)
    execution: ExecutionOptions = Field(default_factory=ExecutionOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "OrganizerBaseModel",
    "ScanningOptions",
    "DuplicateOptions",
    "ReviewFolders",
    "ArchiveOptions",
    "AdvisorOptions",
    "ExecutionOptions",
    "LoggingSettings",
    "CLIOptions",
    "OrganizerConfig",
]
