"""Publication record loading for Pubfolio.

This module handles discovering and parsing publication record files.
It validates every field, checks that display indices are unique and
returns the records ordered by index for an external site generator.

Key classes:
- PublicationRecord: Frozen dataclass describing one paper.
- RecordFileLoader: Discovers record files in a directory.
- RecordBuilder: Reads and parses a single record file.
- PublicationLoader: Facade that loads, validates and orders a directory.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .collections import PublicationCollection
from .errors import DuplicateIndexError, ParseError
from .fields import CompositeFieldExtractor, default_field_extractor, load_document
from .utils import format_authors, is_record_file

DOI_RESOLVER = "https://doi.org/"


@dataclass(frozen=True)
class PublicationRecord:
    """Represents one publication as authored in its record file.

    Attributes:
        index: Manual display index, unique across records.
        title: Paper title.
        authors: Author names in publication order.
        conference: Venue name or abbreviation.
        year: Publication year.
        abstract: Abstract text.
        doi: DOI identifier, or None when the paper has none.
        extra: Additional keys from the file, in file order (read-only).
        source_path: File the record was loaded from.
    """

    index: int
    title: str
    authors: tuple[str, ...]
    conference: str
    year: int
    abstract: str
    doi: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, hash=False)
    source_path: Path | None = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @property
    def slug(self) -> str:
        """Filename stem of the record, usable as a detail page slug."""
        if self.source_path is None:
            return ""
        return self.source_path.stem

    @property
    def doi_url(self) -> str | None:
        """Resolver link for the DOI, or None when there is no DOI."""
        if not self.doi:
            return None
        return f"{DOI_RESOLVER}{self.doi}"

    @property
    def author_line(self) -> str:
        return format_authors(self.authors)


class RecordFileLoader:
    """Discovers publication record files in a directory.

    Only the directory itself is scanned; records are a flat list.

    Attributes:
        directory: Directory containing record files.
    """

    def __init__(self, directory: Path):
        self.directory = directory

    def iter_files(self) -> list[Path]:
        """List all record files, sorted by filename.

        Returns:
            List of paths to record files.

        Raises:
            FileNotFoundError: If the directory does not exist.
        """
        if not self.directory.is_dir():
            raise FileNotFoundError(
                f"Expected publications directory at {self.directory}"
            )
        return sorted(
            path
            for path in self.directory.iterdir()
            if path.is_file() and is_record_file(path)
        )


def parse_record_text(
    text: str,
    path: Path,
    field_extractor: CompositeFieldExtractor | None = None,
) -> PublicationRecord:
    """Parse the text of a record file into a PublicationRecord.

    Args:
        text: Raw YAML content.
        path: Path the text came from, used in errors and as source_path.
        field_extractor: Optional custom field extractor.

    Returns:
        The parsed record.

    Raises:
        ParseError: If the text is malformed or a field is missing/invalid.
    """
    extractor = field_extractor or default_field_extractor
    raw = load_document(text, path)
    values = extractor.extract(raw, path)
    return PublicationRecord(source_path=path, **values)


class RecordBuilder:
    """Builds PublicationRecord objects from record files.

    Attributes:
        field_extractor: Composite extractor validating each field.
    """

    def __init__(self, field_extractor: CompositeFieldExtractor | None = None):
        self.field_extractor = field_extractor or default_field_extractor

    def build(self, path: Path) -> PublicationRecord:
        """Read and parse a single record file.

        Args:
            path: Path to the record file.

        Returns:
            The parsed record.

        Raises:
            ParseError: If the file cannot be read, decoded or parsed.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(path, f"file is not valid UTF-8: {exc}", exc) from exc
        except OSError as exc:
            raise ParseError(path, f"cannot read file: {exc}", exc) from exc
        return parse_record_text(text, path, self.field_extractor)


class PublicationLoader:
    """Facade that loads a directory of record files.

    Loading is a single synchronous pass. The first malformed file aborts
    the whole load; no partial result is ever returned.

    Attributes:
        directory: Directory containing record files.
    """

    def __init__(
        self,
        directory: Path,
        record_source: RecordFileLoader | None = None,
        record_builder: RecordBuilder | None = None,
    ):
        """Initialize the loader.

        Args:
            directory: Directory containing record files.
            record_source: Optional custom file discovery.
            record_builder: Optional custom record builder.
        """
        self.directory = directory
        self._record_source = record_source or RecordFileLoader(directory)
        self._record_builder = record_builder or RecordBuilder()

    def load(self) -> PublicationCollection:
        """Load, validate and order every record in the directory.

        Returns:
            PublicationCollection sorted ascending by index.

        Raises:
            ParseError: If any record file is malformed.
            DuplicateIndexError: If two records share an index.
        """
        records = [
            self._record_builder.build(path)
            for path in self._record_source.iter_files()
        ]
        _check_unique_indices(records)
        return PublicationCollection(sorted(records, key=lambda r: r.index))


def _check_unique_indices(records: list[PublicationRecord]) -> None:
    seen: dict[int, PublicationRecord] = {}
    for record in records:
        first = seen.get(record.index)
        if first is not None:
            raise DuplicateIndexError(
                record.index, record.source_path, first.source_path
            )
        seen[record.index] = record


def load_all(directory: Path | str) -> PublicationCollection:
    """Load every publication record in a directory, ordered by index.

    Args:
        directory: Directory containing ``*.yml``/``*.yaml`` record files.

    Returns:
        PublicationCollection sorted ascending by index.

    Raises:
        FileNotFoundError: If the directory does not exist.
        ParseError: If any record file is malformed.
        DuplicateIndexError: If two records share an index.
    """
    return PublicationLoader(Path(directory)).load()
