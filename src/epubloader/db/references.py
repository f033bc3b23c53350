# ABOUTME: Lookup-or-create for the shared name tables (series, authors, languages, tags).
# ABOUTME: One resolver handles every table, described by a ReferenceTable.

import logging
import sqlite3
from dataclasses import dataclass
from enum import Enum

from epubloader.db.connection import execute
from epubloader.db.errors import AmbiguousReferenceError, MissingReferenceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceTable:
    """A name table shared between books, and the link table tying it to books."""

    label: str
    table: str
    key_column: str
    link_table: str
    link_column: str
    has_sort: bool = True


SERIES = ReferenceTable("series", "series", "name", "books_series_link", "series")
AUTHORS = ReferenceTable("author", "authors", "name", "books_authors_link", "author")
LANGUAGES = ReferenceTable(
    "language", "languages", "lang_code", "books_languages_link", "lang_code", has_sort=False,
)
TAGS = ReferenceTable("tag", "tags", "name", "books_tags_link", "tag")


class Resolution(Enum):
    FOUND = "found"
    CREATED = "created"


@dataclass(frozen=True)
class ResolvedReference:
    id: int
    resolution: Resolution

    @property
    def created(self) -> bool:
        return self.resolution is Resolution.CREATED


def _select_ids(conn: sqlite3.Connection, ref: ReferenceTable, value: str) -> list[int]:
    cursor = execute(
        conn,
        f"SELECT id FROM {ref.table} WHERE {ref.key_column} = ?",
        (value,),
    )
    return [row[0] for row in cursor.fetchall()]


def resolve_reference(
    conn: sqlite3.Connection,
    ref: ReferenceTable,
    value: str,
    sort: str | None = None,
) -> ResolvedReference:
    """Find the row whose natural key equals value, creating it if absent.

    Args:
        conn: Catalog connection.
        ref: The table to resolve against.
        value: Natural key (a name or a language code).
        sort: Sort key stored on creation, for tables that have one.

    Returns:
        The row id, and whether the row was found or created.

    Raises:
        MissingReferenceError: If the row cannot be found after inserting it.
        AmbiguousReferenceError: If more than one row matches after inserting it.
        StoreError: If a statement fails.
    """
    ids = _select_ids(conn, ref, value)
    if ids:
        return ResolvedReference(ids[0], Resolution.FOUND)

    if ref.has_sort:
        execute(
            conn,
            f"INSERT INTO {ref.table} ({ref.key_column}, sort) VALUES (?, ?)",
            (value, sort if sort is not None else value),
        )
    else:
        execute(conn, f"INSERT INTO {ref.table} ({ref.key_column}) VALUES (?)", (value,))

    ids = _select_ids(conn, ref, value)
    if not ids:
        raise MissingReferenceError(f"Cannot find {ref.label} id for {ref.key_column}: {value}")
    if len(ids) > 1:
        raise AmbiguousReferenceError(f"Multiple {ref.label} rows for {ref.key_column}: {value}")

    logger.debug("Created %s %r (id %d)", ref.label, value, ids[0])
    return ResolvedReference(ids[0], Resolution.CREATED)


def link_reference(
    conn: sqlite3.Connection,
    ref: ReferenceTable,
    book_id: int,
    ref_id: int,
    **extra: int,
) -> None:
    """Insert the link row between a book and a resolved reference row.

    Extra keyword arguments become additional link columns (e.g. item_order).
    """
    columns = ["book", ref.link_column, *extra]
    placeholders = ", ".join("?" for _ in columns)
    execute(
        conn,
        f"INSERT INTO {ref.link_table} ({', '.join(columns)}) VALUES ({placeholders})",
        (book_id, ref_id, *extra.values()),
    )
