"""Utility functions for Pubfolio.

This module contains small string and path helpers used throughout the package.

Key functions:
    slugify: Convert free text to URL slugs.
    is_record_file: Check if a path is a publication record file.
    format_authors: Join author names into a human-readable line.
    fold_lines: Wrap text into lines for a folded YAML block.
    record_filename: Build the conventional filename for a new record.
"""

from __future__ import annotations

import re
import textwrap
from collections.abc import Sequence
from pathlib import Path

RECORD_SUFFIXES = (".yml", ".yaml")


def slugify(name: str) -> str:
    """Convert text to a lowercase, hyphen-separated slug.

    Args:
        name: Text to convert, e.g. a title or filename stem.

    Returns:
        URL-friendly slug, or "untitled" if nothing usable remains.

    Examples:
        >>> slugify("Graph Traversals for Regular Path Queries")
        'graph-traversals-for-regular-path-queries'
    """
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", name)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "untitled"


def is_record_file(path: Path) -> bool:
    """Check if a path is a publication record file.

    Hidden files (editor swap files, dotfiles) are never records.

    Args:
        path: Path to check.

    Returns:
        True if the file has a .yml or .yaml extension (case-insensitive).
    """
    if path.name.startswith("."):
        return False
    return path.suffix.lower() in RECORD_SUFFIXES


def format_authors(authors: Sequence[str], conjunction: str = "and") -> str:
    """Join author names the way a publication list prints them.

    Examples:
        >>> format_authors(["Frank Tetzel"])
        'Frank Tetzel'

        >>> format_authors(["A", "B", "C"])
        'A, B and C'
    """
    names = list(authors)
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return f"{', '.join(names[:-1])} {conjunction} {names[-1]}"


def fold_lines(text: str, width: int = 77) -> list[str]:
    """Wrap a single paragraph into lines of at most ``width`` characters.

    Words longer than ``width`` are kept whole so that folding the lines
    back together with single spaces restores the paragraph.

    Args:
        text: Paragraph without newlines.
        width: Maximum line width.

    Returns:
        List of wrapped lines, empty for empty text.
    """
    return textwrap.wrap(
        text,
        width=width,
        break_long_words=False,
        break_on_hyphens=False,
    )


def record_filename(year: int, conference: str, title: str, words: int = 2) -> str:
    """Build the conventional record filename ``<year>-<venue>-<slug>.yml``.

    Args:
        year: Publication year.
        conference: Venue name or abbreviation.
        title: Paper title; only the first ``words`` words are used.
        words: Number of title words to keep in the slug.

    Returns:
        Filename such as "2019-GRADES-NDA-graph-traversals.yml".
    """
    venue = re.sub(r"[^a-zA-Z0-9]+", "-", conference).strip("-") or "misc"
    short_title = " ".join(title.split()[:words])
    return f"{year}-{venue}-{slugify(short_title)}.yml"
