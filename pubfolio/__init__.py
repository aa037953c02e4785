"""Pubfolio publication records.

This package loads and validates the YAML publication records of a static blog
and hands them, ordered by their display index, to an external site generator.

The main entry points are ``load_all`` for library use and the CLI module, which
provides commands for checking, listing, exporting and creating records.

Architecture mirrors a small content pipeline:
- records: PublicationRecord model, file discovery and the loader facade
- fields: one extractor per record field, combined by a composite
- serialize: canonical YAML emission for round-trips and new records
- collections: sequence helpers for templates
"""

from .errors import DuplicateIndexError, ParseError, RecordError
from .records import PublicationRecord, load_all

__all__ = [
    "DuplicateIndexError",
    "ParseError",
    "PublicationRecord",
    "RecordError",
    "__version__",
    "load_all",
]
__version__ = "0.1.0"
