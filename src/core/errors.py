"""Error taxonomy for the upload check.

Every error here aborts the run. A checksum mismatch is not one of them: it
is a result (`IntegrityReport.passed is False`), reported by the CLI.
"""

from __future__ import annotations

from pathlib import Path


class CheckError(Exception):
    """Base class for failures that abort an upload check."""


class ConfigurationError(CheckError):
    """Required settings are missing or invalid."""


class SourceFileMissing(CheckError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Source file not found: {path}")
        self.path = path


class OutputFileMissing(CheckError):
    """The listener did not leave the expected output file behind."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Output file not found: {path}")
        self.path = path


class TransportError(CheckError):
    """Connecting to or talking with the listener failed."""


class OutputFileUnreadable(CheckError):
    """The output path exists but cannot be hashed (a directory, no permission)."""

    def __init__(self, path: Path, reason: OSError) -> None:
        super().__init__(f"Output file unreadable: {path} ({reason.strerror or reason})")
        self.path = path
