"""Exceptions raised while loading publication records.

Both concrete errors are fatal at build time: they carry the offending
file so the caller can report it and abort before anything is published.

Classes:
    RecordError: Base class with file context.
    ParseError: A record file is malformed or a field is missing/invalid.
    DuplicateIndexError: Two record files claim the same display index.
"""

from __future__ import annotations

from pathlib import Path


class RecordError(Exception):
    """Error in a publication record with file context.

    Attributes:
        source_path: Path to the record file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught, if any.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class ParseError(RecordError):
    """A record file could not be parsed into a PublicationRecord."""


class DuplicateIndexError(RecordError):
    """Two record files share the same index.

    Attributes:
        index: The index claimed by both files.
        other_path: The file that claimed the index first.
    """

    def __init__(self, index: int, source_path: Path, other_path: Path):
        self.index = index
        self.other_path = other_path
        super().__init__(
            source_path,
            f"index {index} is already used by {other_path}",
        )
