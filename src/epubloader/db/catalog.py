# ABOUTME: Adds books and their linked names to a Calibre-compatible catalog database.
# ABOUTME: Reuses existing series, authors, languages, and tags; repairs duplicate uuids.

import logging
import os
import sqlite3
from dataclasses import dataclass, field

from epubloader.db.connection import execute
from epubloader.db.errors import (
    BookIdMismatchError,
    BookNotFoundError,
    UnreadableBookFileError,
)
from epubloader.db.mapping import (
    DEFAULT_COVER_PREFIX,
    CatalogBook,
    book_to_row,
    row_to_catalog_book,
)
from epubloader.db.references import (
    AUTHORS,
    LANGUAGES,
    SERIES,
    TAGS,
    link_reference,
    resolve_reference,
)
from epubloader.metadata.sorting import get_sort_string
from epubloader.metadata.types import BookInfos

logger = logging.getLogger(__name__)

# Formats looked for next to every book besides its own; missing ones are skipped.
DEFAULT_EXTRA_FORMATS: tuple[str, ...] = ("pdf",)

_BOOK_QUERY = (
    "SELECT b.id, b.title, b.sort, b.uuid, b.path, b.has_cover, b.cover, b.series_index, "
    "(SELECT s.name FROM series s JOIN books_series_link l ON l.series = s.id "
    " WHERE l.book = b.id) AS series, "
    "(SELECT group_concat(name, char(31)) FROM (SELECT a.name FROM authors a "
    " JOIN books_authors_link l ON l.author = a.id WHERE l.book = b.id ORDER BY l.id)) AS authors, "
    "(SELECT group_concat(name, char(31)) FROM (SELECT t.name FROM tags t "
    " JOIN books_tags_link l ON l.tag = t.id WHERE l.book = b.id ORDER BY t.name)) AS tags, "
    "(SELECT g.lang_code FROM languages g JOIN books_languages_link l ON l.lang_code = g.id "
    " WHERE l.book = b.id ORDER BY l.item_order LIMIT 1) AS language, "
    "(SELECT group_concat(format, char(31)) FROM (SELECT d.format FROM data d "
    " WHERE d.book = b.id ORDER BY d.id)) AS formats "
    "FROM books b"
)


@dataclass
class IngestResult:
    """Outcome of adding one book: its id and any non-fatal warnings."""

    book_id: int
    warnings: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        """All warnings joined into one line, or '' when there are none."""
        return " - ".join(self.warnings)


class CalibreCatalog:
    """Wraps a sqlite3 connection to a catalog and adds books to it.

    There is no rollback: when add_book raises, the rows already written for
    that book stay in the database.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        *,
        extra_formats: tuple[str, ...] = DEFAULT_EXTRA_FORMATS,
        cover_prefix: str = DEFAULT_COVER_PREFIX,
    ) -> None:
        self._conn = conn
        self.extra_formats = tuple(extra_formats)
        self.cover_prefix = cover_prefix

    def add_book(self, book: BookInfos, book_id: int = 0) -> IngestResult:
        """Add a book with its files, comment, identifiers, and linked names.

        Args:
            book: The book metadata. Its uuid is replaced if already taken.
            book_id: Id to give the book, or 0 to let the database assign one.

        Returns:
            IngestResult with the book id and warnings (duplicate uuid, missing
            cover, unparseable dates).

        Raises:
            UnreadableBookFileError: If the file in the book's own format is unreadable.
            BookNotFoundError: If the inserted book cannot be found again.
            BookIdMismatchError: If the database used another id than book_id.
            ReferenceResolutionError: If a linked name resolves to zero or several rows.
            StoreError: If any statement fails.
        """
        warnings: list[str] = []
        try:
            duplicate = self._check_uuid(book)
            if duplicate:
                warnings.append(duplicate)
            if not book.has_cover:
                warnings.append("Warning: Cover not found")

            new_id = self._insert_book(book, book_id, warnings)
            self._add_files(book, new_id)
            self._add_comment(book, new_id)
            self._add_identifiers(book, new_id)
            self._add_series(book, new_id)
            self._add_authors(book, new_id)
            self._add_language(book, new_id)
            self._add_tags(book, new_id)
        finally:
            self._conn.commit()

        for warning in warnings:
            logger.warning("%s: %s", book.name or book.title, warning)
        return IngestResult(book_id=new_id, warnings=warnings)

    def _check_uuid(self, book: BookInfos) -> str | None:
        """Give the book a new uuid if another book already uses it.

        Returns a warning naming the book that holds the uuid, or None.
        """
        if not book.uuid:
            book.create_uuid()
            return None

        cursor = execute(
            self._conn,
            "SELECT b.id, b.title, b.path, d.name, d.format FROM books AS b "
            "LEFT JOIN data AS d ON d.book = b.id WHERE b.uuid = ? LIMIT 1",
            (book.uuid,),
        )
        row = cursor.fetchone()
        if row is None:
            return None

        location = row["path"]
        if row["name"]:
            location = f"{row['path']}/{row['name']}.{row['format'].lower()}"
        old_uuid = book.uuid
        book.create_uuid()
        return (
            f"Warning: Multiple book id for uuid: {old_uuid} "
            f"(already in file \"{location}\" title \"{row['title']}\")"
        )

    def _insert_book(self, book: BookInfos, book_id: int, warnings: list[str]) -> int:
        row = book_to_row(book, book_id, self.cover_prefix, warnings)

        columns = ", ".join(row)
        placeholders = ", ".join(f":{name}" for name in row)
        execute(self._conn, f"INSERT INTO books ({columns}) VALUES ({placeholders})", row)

        cursor = execute(self._conn, "SELECT id FROM books WHERE uuid = ?", (book.uuid,))
        found = cursor.fetchone()
        if found is None:
            raise BookNotFoundError(f"Cannot find book id for uuid: {book.uuid}")
        new_id = found["id"]
        if book_id and new_id != book_id:
            raise BookIdMismatchError(
                f"Incorrect book id={new_id} vs {book_id} for uuid: {book.uuid}"
            )
        return new_id

    def _add_files(self, book: BookInfos, book_id: int) -> None:
        formats = [book.format]
        formats += [fmt for fmt in self.extra_formats if fmt.lower() != book.format.lower()]

        for fmt in formats:
            file_path = book.file_path(fmt)
            if not (file_path.is_file() and os.access(file_path, os.R_OK)):
                if fmt == book.format:
                    raise UnreadableBookFileError(f"Cannot read file: {file_path}")
                continue
            size = file_path.stat().st_size

            execute(
                self._conn,
                "INSERT INTO data (book, format, name, uncompressed_size) VALUES (?, ?, ?, ?)",
                (book_id, fmt.upper(), book.name, size),
            )

    def _add_comment(self, book: BookInfos, book_id: int) -> None:
        execute(
            self._conn,
            "INSERT INTO comments (book, text) VALUES (?, ?)",
            (book_id, book.description or ""),
        )

    def _add_identifiers(self, book: BookInfos, book_id: int) -> None:
        for id_type, value in (("URI", book.uri), ("ISBN", book.isbn)):
            if not value:
                continue
            execute(
                self._conn,
                "INSERT INTO identifiers (book, type, val) VALUES (?, ?, ?)",
                (book_id, id_type, value),
            )

    def _add_series(self, book: BookInfos, book_id: int) -> None:
        if not book.series:
            return
        series = resolve_reference(
            self._conn, SERIES, book.series, get_sort_string(book.series),
        )
        link_reference(self._conn, SERIES, book_id, series.id)

    def _add_authors(self, book: BookInfos, book_id: int) -> None:
        # Names match case-insensitively, so spelling variants share one row.
        linked: set[int] = set()
        for author in book.authors:
            if not author.name:
                continue
            resolved = resolve_reference(
                self._conn, AUTHORS, author.name, get_sort_string(author.sort or author.name),
            )
            if resolved.id in linked:
                continue
            linked.add(resolved.id)
            link_reference(self._conn, AUTHORS, book_id, resolved.id)

    def _add_language(self, book: BookInfos, book_id: int) -> None:
        if not book.language:
            return
        language = resolve_reference(self._conn, LANGUAGES, book.language)
        # One language per book, always at the first position.
        link_reference(self._conn, LANGUAGES, book_id, language.id, item_order=0)

    def _add_tags(self, book: BookInfos, book_id: int) -> None:
        linked: set[int] = set()
        for subject in book.subjects:
            if not subject:
                continue
            tag = resolve_reference(self._conn, TAGS, subject, get_sort_string(subject))
            if tag.id in linked:
                continue
            linked.add(tag.id)
            link_reference(self._conn, TAGS, book_id, tag.id)

    # --- Read helpers ---

    def get_by_id(self, book_id: int) -> CatalogBook | None:
        """Retrieve a book by its id."""
        cursor = execute(self._conn, f"{_BOOK_QUERY} WHERE b.id = ?", (book_id,))
        row = cursor.fetchone()
        return row_to_catalog_book(row) if row else None

    def get_by_uuid(self, uuid: str) -> CatalogBook | None:
        """Retrieve a book by its uuid."""
        cursor = execute(self._conn, f"{_BOOK_QUERY} WHERE b.uuid = ?", (uuid,))
        row = cursor.fetchone()
        return row_to_catalog_book(row) if row else None

    def list_books(self) -> list[CatalogBook]:
        """Return all books, ordered by sort key."""
        cursor = execute(self._conn, f"{_BOOK_QUERY} ORDER BY b.sort, b.id")
        return [row_to_catalog_book(row) for row in cursor.fetchall()]
