"""Command-line interface for Pubfolio.

This module defines the CLI commands using Click framework.
It provides commands for validating, listing, exporting and creating publication records.

Commands:
- check: Validate every record in the publications directory.
- list: Print records in display order.
- export: Print records as JSON for a site generator.
- new: Create a new record file interactively.
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from pathlib import Path

import click
import questionary

from . import __version__
from .collections import PublicationCollection
from .config import load_config, publications_dir
from .errors import DuplicateIndexError, RecordError
from .records import PublicationRecord, load_all
from .utils import record_filename

_DIRECTORY_ARGUMENT = click.argument(
    "directory",
    required=False,
    type=click.Path(file_okay=False, path_type=Path),
)


@click.group()
@click.version_option(version=__version__, prog_name="pubfolio")
def cli():
    """Pubfolio publication records."""


@cli.command()
@_DIRECTORY_ARGUMENT
def check(directory: Path | None):
    """Validate every publication record."""
    target = _resolve_directory(directory)
    records = _load_or_exit(target)
    shown = _display_path(target, Path.cwd())
    click.echo(f"{len(records)} publication records in {shown} are valid")


@cli.command(name="list")
@_DIRECTORY_ARGUMENT
def list_records(directory: Path | None):
    """List publication records in display order."""
    records = _load_or_exit(_resolve_directory(directory))
    for record in records:
        click.echo(
            f"{record.index:>4}  {record.year}  {record.conference}  {record.title}"
        )


@cli.command()
@_DIRECTORY_ARGUMENT
def export(directory: Path | None):
    """Print publication records as JSON for a site generator."""
    records = _load_or_exit(_resolve_directory(directory))
    # dates and other YAML scalars in extra keys are exported as strings
    payload = json.dumps(
        records.to_template_data(), indent=2, ensure_ascii=False, default=str
    )
    click.echo(payload)


@cli.command()
@_DIRECTORY_ARGUMENT
def new(directory: Path | None):
    """Create a new publication record interactively."""
    project_root = Path.cwd()
    config = load_config(project_root)
    target = directory or publications_dir(project_root, config)
    try:
        words = int(config.get("filename_words", 2))
    except (TypeError, ValueError):
        raise click.ClickException(
            f"filename_words in pubfolio.yaml must be an integer, "
            f"got {config.get('filename_words')!r}"
        ) from None
    existing = _load_or_exit(target) if target.exists() else PublicationCollection([])

    title = questionary.text(
        "Title:",
        validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
        style=_questionary_style(),
    ).ask()
    if title is None:
        raise click.Abort()

    authors = questionary.text(
        "Authors (comma-separated, in publication order):",
        validate=lambda x: (
            bool(_split_authors(x)) or "At least one author is required"
        ),
        style=_questionary_style(),
    ).ask()
    if authors is None:
        raise click.Abort()

    conference = questionary.text(
        "Conference or journal:",
        validate=lambda x: len(x.strip()) > 0 or "Venue cannot be empty",
        style=_questionary_style(),
    ).ask()
    if conference is None:
        raise click.Abort()

    year = questionary.text(
        "Year:",
        default=str(datetime.now().year),
        validate=lambda x: (
            bool(re.fullmatch(r"[1-9]\d{3}", x.strip())) or "Enter a 4-digit year"
        ),
        style=_questionary_style(),
    ).ask()
    if year is None:
        raise click.Abort()

    doi = questionary.text(
        "DOI (leave empty for none):",
        style=_questionary_style(),
    ).ask()
    if doi is None:
        raise click.Abort()

    abstract = questionary.text(
        "Abstract (finish with Esc then Enter):",
        multiline=True,
        style=_questionary_style(),
    ).ask()
    if abstract is None:
        raise click.Abort()

    from .serialize import write_new_record

    record = PublicationRecord(
        index=existing.next_index(),
        title=title.strip(),
        authors=tuple(_split_authors(authors)),
        conference=conference.strip(),
        year=int(year.strip()),
        abstract=_normalize_abstract(abstract),
        doi=doi.strip() or None,
    )
    filename = record_filename(
        record.year,
        record.conference,
        record.title,
        words=words,
    )
    try:
        path = write_new_record(record, target, filename)
    except FileExistsError:
        raise click.ClickException(
            f"File already exists: {_display_path(target / filename, project_root)}"
        ) from None
    click.echo(f"Created {_display_path(path, project_root)} with index {record.index}")


def _resolve_directory(directory: Path | None) -> Path:
    if directory is not None:
        return directory
    project_root = Path.cwd()
    return publications_dir(project_root, load_config(project_root))


def _load_or_exit(directory: Path) -> PublicationCollection:
    """Load records, turning record errors into a failed exit."""
    project_root = Path.cwd()
    try:
        return load_all(directory)
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from None
    except RecordError as exc:
        click.echo(click.style("Validation failed:", fg="red", bold=True), err=True)
        click.echo(
            click.style(
                f"  File: {_display_path(exc.source_path, project_root)}", fg="yellow"
            ),
            err=True,
        )
        if isinstance(exc, DuplicateIndexError):
            click.echo(
                click.style(
                    f"  Also: {_display_path(exc.other_path, project_root)}",
                    fg="yellow",
                ),
                err=True,
            )
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None


def _display_path(path: Path, project_root: Path) -> Path:
    try:
        return path.resolve().relative_to(project_root.resolve())
    except ValueError:
        return path


def _split_authors(value: str) -> list[str]:
    """Split a comma-separated author list, dropping empty entries."""
    return [name.strip() for name in value.split(",") if name.strip()]


def _normalize_abstract(text: str) -> str:
    """Collapse pasted line breaks, keeping blank lines as paragraph breaks."""
    paragraphs = [
        " ".join(paragraph.split())
        for paragraph in re.split(r"\n\s*\n", text.strip())
        if paragraph.strip()
    ]
    return "\n".join(paragraphs) + "\n"


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
