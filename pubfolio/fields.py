"""Field extractors for Pubfolio.

This module contains implementations of the FieldExtractor protocol.
Each extractor validates a single field of a publication record and raises
ParseError naming the file when the field is missing or has the wrong type.

Key classes:
- IndexExtractor, YearExtractor: Integer fields.
- TitleExtractor, ConferenceExtractor, AbstractExtractor: Text fields.
- AuthorsExtractor: Ordered, non-empty list of author names.
- DoiExtractor: Optional DOI identifier.
- ExtraFieldsExtractor: Keeps unknown keys so they survive a round-trip.
- CompositeFieldExtractor: Runs all extractors and merges their results.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .errors import ParseError

KNOWN_FIELDS = ("index", "title", "authors", "conference", "year", "abstract", "doi")
REQUIRED_FIELDS = KNOWN_FIELDS[:-1]

MIN_YEAR = 1000
MAX_YEAR = 9999

# names of derived record attributes, which an extra key would shadow
RESERVED_FIELDS = ("slug", "doi_url", "author_line", "extra", "source_path")


class _DuplicateFieldError(yaml.YAMLError):
    def __init__(self, key: Any, mark: Any):
        self.key = key
        self.mark = mark
        super().__init__(f"duplicate field {key!r} {mark}")


class _RecordLoader(yaml.SafeLoader):
    """SafeLoader that refuses mappings with a repeated key."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                if not isinstance(key_node, yaml.ScalarNode):
                    continue
                if key_node.tag == "tag:yaml.org,2002:merge":
                    continue
                key = self.construct_object(key_node)
                if key in seen:
                    raise _DuplicateFieldError(key, key_node.start_mark)
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def load_document(text: str, path: Path) -> dict[str, Any]:
    """Parse the YAML document of a record file into a mapping.

    Args:
        text: Raw file content.
        path: Path to the record file.

    Returns:
        The top-level mapping.

    Raises:
        ParseError: If the YAML is malformed, repeats a key, or is not a mapping
            with string keys.
    """
    try:
        data = yaml.load(text, Loader=_RecordLoader)
    except _DuplicateFieldError as exc:
        raise ParseError(path, f"duplicate field '{exc.key}'", exc) from exc
    except yaml.YAMLError as exc:
        raise ParseError(path, f"invalid YAML: {exc}", exc) from exc
    if data is None:
        raise ParseError(path, "record file is empty")
    if not isinstance(data, dict):
        raise ParseError(
            path, f"expected a mapping of fields, got {type(data).__name__}"
        )
    for key in data:
        if not isinstance(key, str):
            raise ParseError(path, f"field names must be strings, got {key!r}")
    return data


def _require(raw: Mapping[str, Any], key: str, path: Path) -> Any:
    if key not in raw or raw[key] is None:
        raise ParseError(path, f"missing required field '{key}'")
    return raw[key]


def _type_error(path: Path, key: str, expected: str, value: Any) -> ParseError:
    return ParseError(
        path, f"field '{key}' must be {expected}, got {type(value).__name__}"
    )


def _require_int(raw: Mapping[str, Any], key: str, path: Path) -> int:
    value = _require(raw, key, path)
    # YAML booleans load as bool, which is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int):
        raise _type_error(path, key, "an integer", value)
    return value


def _require_str(raw: Mapping[str, Any], key: str, path: Path) -> str:
    value = _require(raw, key, path)
    if not isinstance(value, str):
        raise _type_error(path, key, "a string", value)
    return value


class IndexExtractor:
    """Extracts the manual display index."""

    def extract(self, raw: Mapping[str, Any], path: Path) -> dict[str, Any]:
        return {"index": _require_int(raw, "index", path)}


class TitleExtractor:
    """Extracts the paper title, which must not be blank."""

    def extract(self, raw: Mapping[str, Any], path: Path) -> dict[str, Any]:
        title = _require_str(raw, "title", path)
        if not title.strip():
            raise ParseError(path, "field 'title' must not be empty")
        return {"title": title}


class AuthorsExtractor:
    """Extracts the ordered list of authors.

    The list keeps the order from the file, since author order carries
    meaning on a publication. At least one non-empty name is required.
    """

    def extract(self, raw: Mapping[str, Any], path: Path) -> dict[str, Any]:
        authors = _require(raw, "authors", path)
        if not isinstance(authors, list):
            raise _type_error(path, "authors", "a list of names", authors)
        if not authors:
            raise ParseError(path, "field 'authors' must list at least one author")
        for position, name in enumerate(authors, start=1):
            if not isinstance(name, str) or not name.strip():
                raise ParseError(
                    path, f"author #{position} must be a non-empty string, got {name!r}"
                )
        return {"authors": tuple(authors)}


class ConferenceExtractor:
    """Extracts the venue name or abbreviation."""

    def extract(self, raw: Mapping[str, Any], path: Path) -> dict[str, Any]:
        return {"conference": _require_str(raw, "conference", path)}


class YearExtractor:
    """Extracts the publication year as a four-digit integer."""

    def extract(self, raw: Mapping[str, Any], path: Path) -> dict[str, Any]:
        year = _require_int(raw, "year", path)
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ParseError(path, f"field 'year' must be a 4-digit year, got {year}")
        return {"year": year}


class AbstractExtractor:
    """Extracts the abstract text."""

    def extract(self, raw: Mapping[str, Any], path: Path) -> dict[str, Any]:
        return {"abstract": _require_str(raw, "abstract", path)}


class DoiExtractor:
    """Extracts the optional DOI.

    A missing or null ``doi`` yields None; preprints often have none.
    Anything present must be a string, so an unquoted ``doi: 10.1234``
    that YAML reads as a float is rejected instead of being mangled.
    """

    def extract(self, raw: Mapping[str, Any], path: Path) -> dict[str, Any]:
        doi = raw.get("doi")
        if doi is None:
            return {"doi": None}
        if not isinstance(doi, str):
            raise _type_error(path, "doi", "a string", doi)
        doi = doi.strip()
        return {"doi": doi or None}


class ExtraFieldsExtractor:
    """Collects keys that are not record fields, preserving file order.

    Keys named like a derived record attribute (``slug``, ``doi_url`` ...)
    are rejected, since templates could not tell the two apart.
    """

    def extract(self, raw: Mapping[str, Any], path: Path) -> dict[str, Any]:
        extra = {k: v for k, v in raw.items() if k not in KNOWN_FIELDS}
        for key in extra:
            if key in RESERVED_FIELDS:
                raise ParseError(path, f"field '{key}' is reserved")
        return {"extra": extra}


class CompositeFieldExtractor:
    """Combines multiple field extractors.

    Runs every registered extractor on the parsed mapping and merges their
    results. The first extractor to raise aborts the record.
    """

    def __init__(self, extractors: list | None = None):
        """Initialize with a list of extractors.

        Args:
            extractors: List of FieldExtractor implementations.
                       If None, uses one extractor per record field.
        """
        if extractors is None:
            self._extractors = [
                IndexExtractor(),
                TitleExtractor(),
                AuthorsExtractor(),
                ConferenceExtractor(),
                YearExtractor(),
                AbstractExtractor(),
                DoiExtractor(),
                ExtraFieldsExtractor(),
            ]
        else:
            self._extractors = list(extractors)

    def add_extractor(self, extractor) -> None:
        """Add an extractor to the composite.

        Args:
            extractor: A FieldExtractor implementation.
        """
        self._extractors.append(extractor)

    def extract(self, raw: Mapping[str, Any], path: Path) -> dict[str, Any]:
        """Extract all fields from a parsed record.

        Args:
            raw: The mapping loaded from the record file.
            path: Path to the record file.

        Returns:
            Dictionary with all extracted field values.
        """
        result: dict[str, Any] = {}
        for extractor in self._extractors:
            result.update(extractor.extract(raw, path))
        return result


# Default composite extractor instance
default_field_extractor = CompositeFieldExtractor()
