"""Jinja2 integration for Pubfolio.

Site generators built on Jinja2 can expose the publication list to their
templates with ``install_globals``. Page layout stays with the generator;
this module only provides data and two small formatting filters.
"""

from __future__ import annotations

from collections.abc import Iterable

from jinja2 import Environment
from markupsafe import Markup

from .collections import PublicationCollection
from .records import PublicationRecord
from .utils import format_authors

__all__ = ["doi_link", "install_globals"]


def doi_link(record: PublicationRecord, label: str | None = None) -> Markup:
    """Render an anchor to the record's DOI.

    Args:
        record: Publication record.
        label: Link text; defaults to the DOI itself.

    Returns:
        Markup-safe anchor, or empty Markup when the record has no DOI.
    """
    if not record.doi_url:
        return Markup("")
    text = label if label is not None else record.doi
    return Markup('<a href="{}" class="doi">{}</a>').format(record.doi_url, text)


def _authors_filter(value, conjunction: str = "and") -> str:
    if isinstance(value, PublicationRecord):
        value = value.authors
    return format_authors(value, conjunction)


def install_globals(
    env: Environment, publications: Iterable[PublicationRecord]
) -> PublicationCollection:
    """Install the publication list and filters in a Jinja environment.

    Args:
        env: The generator's Jinja2 environment.
        publications: Loaded records, normally the result of ``load_all``.

    Returns:
        The PublicationCollection exposed as the ``publications`` global.
    """
    collection = (
        publications
        if isinstance(publications, PublicationCollection)
        else PublicationCollection(publications)
    )
    env.globals["publications"] = collection
    env.filters["doi_link"] = doi_link
    env.filters["authors"] = _authors_filter
    return collection
