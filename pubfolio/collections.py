from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .records import PublicationRecord


class PublicationCollection(Sequence["PublicationRecord"]):
    """Lightweight helper for working with ordered publication records in templates and code."""

    def __init__(self, records: Iterable[PublicationRecord]):
        self._records = list(records)

    def __iter__(self) -> Iterator[PublicationRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, item):
        return self._records[item]

    def by_year(self, year: int) -> PublicationCollection:
        return PublicationCollection(r for r in self._records if r.year == year)

    def by_author(self, name: str) -> PublicationCollection:
        return PublicationCollection(r for r in self._records if name in r.authors)

    def at_venue(self, conference: str) -> PublicationCollection:
        return PublicationCollection(
            r for r in self._records if r.conference == conference
        )

    def with_doi(self) -> PublicationCollection:
        return PublicationCollection(r for r in self._records if r.doi)

    def by_index(self, index: int) -> PublicationRecord | None:
        for record in self._records:
            if record.index == index:
                return record
        return None

    def next_index(self) -> int:
        """Return the index to assign to a newly authored record."""
        if not self._records:
            return 1
        return max(r.index for r in self._records) + 1

    def sorted(self, reverse: bool = False) -> PublicationCollection:
        """Sort records by display index.

        Args:
            reverse: If True, highest index first. Defaults to ascending.

        Returns:
            A new PublicationCollection with sorted records.
        """
        return PublicationCollection(
            sorted(self._records, key=lambda r: r.index, reverse=reverse)
        )

    def latest(self, count: int = 5) -> PublicationCollection:
        """Newest publications first: by year, then by index."""
        ordered = sorted(self._records, key=lambda r: (r.year, r.index), reverse=True)
        return PublicationCollection(ordered[:count])

    def years(self) -> list[int]:
        return sorted({r.year for r in self._records}, reverse=True)

    def grouped_by_year(self) -> YearCollection:
        groups: dict[int, list[PublicationRecord]] = {}
        for year in self.years():
            groups[year] = []
        for record in self._records:
            groups[record.year].append(record)
        return YearCollection(groups)

    def to_template_data(self) -> list[dict[str, Any]]:
        """Plain dictionaries in display order, for generators that only take data.

        Record fields and derived values take precedence over extra keys of
        the same name.
        """
        return [
            {
                **r.extra,
                "index": r.index,
                "title": r.title,
                "authors": list(r.authors),
                "author_line": r.author_line,
                "conference": r.conference,
                "year": r.year,
                "abstract": r.abstract,
                "doi": r.doi,
                "doi_url": r.doi_url,
                "slug": r.slug,
            }
            for r in self._records
        ]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PublicationCollection({len(self._records)} records)"


class YearCollection(Mapping[int, PublicationCollection]):
    """Mapping of year to PublicationCollection, newest year first."""

    def __init__(self, mapping: dict[int, Iterable[PublicationRecord]]):
        self._mapping = {k: PublicationCollection(v) for k, v in mapping.items()}

    def __getitem__(self, key: int) -> PublicationCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[int]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"YearCollection({len(self._mapping)} years)"
