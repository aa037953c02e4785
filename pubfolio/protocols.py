"""Protocol definitions for Pubfolio.

This module defines the interfaces used between the loader components,
so that file discovery, field validation and record construction can be
replaced independently (for example with in-memory fakes in tests).
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .records import PublicationRecord


@runtime_checkable
class RecordSource(Protocol):
    """Protocol for discovering publication record files."""

    @abstractmethod
    def iter_files(self) -> list[Path]:
        """Return the record files to load, in a deterministic order."""
        ...


@runtime_checkable
class FieldExtractor(Protocol):
    """Protocol for validating and extracting fields from a parsed record.

    Implementations handle one field each. They raise ParseError when the
    field is missing or invalid.
    """

    @abstractmethod
    def extract(self, raw: Mapping[str, Any], path: Path) -> dict[str, Any]:
        """Extract fields from a parsed YAML mapping.

        Args:
            raw: The mapping loaded from the record file.
            path: Path to the record file, for error messages.

        Returns:
            Dictionary of validated field values.
        """
        ...


@runtime_checkable
class RecordParser(Protocol):
    """Protocol for building PublicationRecord objects from files."""

    @abstractmethod
    def build(self, path: Path) -> PublicationRecord:
        """Read and parse a single record file.

        Args:
            path: Path to the record file.

        Returns:
            The parsed record.
        """
        ...
