"""Canonical YAML emission for publication records.

Records are written the way they are authored by hand: plain ``key: value``
lines in a fixed field order, authors as an indented block sequence and the
abstract as a folded block scalar. Parsing the output of ``dump_record``
and dumping it again yields the same bytes.

Functions:
    dump_record: Serialize a record to its canonical text.
    write_new_record: Create a new record file, never overwriting one.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .fields import KNOWN_FIELDS
from .records import PublicationRecord
from .utils import fold_lines


class _RecordDumper(yaml.SafeDumper):
    """SafeDumper that indents block sequences under their key."""

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


def _dump_entry(key: str, value: Any) -> str:
    return yaml.dump(
        {key: value},
        Dumper=_RecordDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        indent=2,
        width=float("inf"),
    )


def _folded_block(key: str, text: str) -> str | None:
    """Render text as a folded block scalar, or None if it cannot round-trip."""
    if not text.strip():
        return None
    if text.endswith("\n"):
        body, indicator = text[:-1], ">"
    else:
        body, indicator = text, ">-"
    if body.startswith("\n") or body.endswith("\n"):
        return None

    lines: list[str] = []
    for position, paragraph in enumerate(body.split("\n")):
        # one blank line in a folded block stands for one newline
        if position:
            lines.append("")
        if not paragraph:
            continue
        if paragraph != paragraph.strip() or not paragraph.isprintable():
            return None
        wrapped = fold_lines(paragraph)
        if " ".join(wrapped) != paragraph:
            return None
        lines.extend(wrapped)

    rendered = "".join(f"  {line}\n" if line else "\n" for line in lines)
    return f"{key}: {indicator}\n{rendered}"


def dump_record(record: PublicationRecord) -> str:
    """Serialize a record in canonical field order.

    Args:
        record: Record to serialize.

    Returns:
        YAML text ending with a newline. ``doi`` is omitted when absent;
        extra keys follow the known fields in their original order.
    """
    values = {
        "index": record.index,
        "title": record.title,
        "authors": list(record.authors),
        "conference": record.conference,
        "year": record.year,
        "abstract": record.abstract,
        "doi": record.doi,
    }
    parts: list[str] = []
    for key in KNOWN_FIELDS:
        value = values[key]
        if key == "doi" and value is None:
            continue
        if key == "abstract":
            parts.append(_folded_block(key, value) or _dump_entry(key, value))
        else:
            parts.append(_dump_entry(key, value))
    for key, value in record.extra.items():
        parts.append(_dump_entry(key, value))
    return "".join(parts)


def write_new_record(
    record: PublicationRecord, directory: Path, filename: str
) -> Path:
    """Write a record to a new file in ``directory``.

    Records are authored once and never updated programmatically, so an
    existing file is never replaced.

    Args:
        record: Record to write.
        directory: Publications directory; created if missing.
        filename: Name of the new file.

    Returns:
        Path to the written file.

    Raises:
        FileExistsError: If the target file already exists.
    """
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / filename
    with open(target, "x", encoding="utf-8") as f:
        f.write(dump_record(record))
    return target
