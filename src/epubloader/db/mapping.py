# ABOUTME: Converts BookInfos into books-table rows and catalog rows into CatalogBook.
# ABOUTME: Owns sort keys, timestamp fallbacks, and cover path rewriting for inserts.

from dataclasses import dataclass, field
from typing import Any

from epubloader.metadata.dates import DEFAULT_TIMESTAMP, to_timestamp
from epubloader.metadata.sorting import get_sort_string
from epubloader.metadata.types import BookInfos

# Directory that holds content inside an EPUB; replaced by the book's name in stored cover paths.
DEFAULT_COVER_PREFIX = "OEBPS/"


@dataclass
class CatalogBook:
    """A book as stored in the catalog, with its linked names."""

    id: int
    title: str
    sort: str
    uuid: str
    path: str
    has_cover: bool
    cover: str
    series: str | None = None
    series_index: float = 1.0
    authors: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    language: str | None = None
    formats: list[str] = field(default_factory=list)


def cover_path(book: BookInfos, cover_prefix: str = DEFAULT_COVER_PREFIX) -> str:
    """Stored cover path: the EPUB content prefix swapped for the book's name."""
    if not book.cover:
        return ""
    if cover_prefix:
        return book.cover.replace(cover_prefix, f"{book.name}/")
    return book.cover


def _timestamp(
    value: str, default: str | None, label: str, warnings: list[str] | None,
) -> str:
    """Normalize one book date, falling back to default when it cannot be parsed."""
    try:
        return to_timestamp(value, default)
    except ValueError as exc:
        if warnings is not None:
            warnings.append(f"Warning: {exc} in {label}, using default")
        return to_timestamp("", default)


def book_to_row(
    book: BookInfos,
    book_id: int = 0,
    cover_prefix: str = DEFAULT_COVER_PREFIX,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    """Build the books-table INSERT values for a book.

    The id column is only present when book_id is non-zero; otherwise the
    database assigns one. Dates that cannot be parsed are replaced like
    missing ones, with a note appended to warnings.
    """
    row: dict[str, Any] = {}
    if book_id:
        row["id"] = book_id
    row.update({
        "title": book.title,
        "sort": get_sort_string(book.title),
        "timestamp": _timestamp(book.timestamp, None, "timestamp", warnings),
        "pubdate": _timestamp(book.creation_date, DEFAULT_TIMESTAMP, "pubdate", warnings),
        "last_modified": _timestamp(
            book.modification_date, DEFAULT_TIMESTAMP, "last_modified", warnings,
        ),
        "series_index": book.series_index,
        "uuid": book.uuid,
        "path": book.path,
        "has_cover": 1 if book.has_cover else 0,
        "cover": cover_path(book, cover_prefix),
        "isbn": book.isbn,
    })
    return row


def _split_names(value: str | None) -> list[str]:
    return value.split("\x1f") if value else []


def row_to_catalog_book(row: Any) -> CatalogBook:
    """Convert a row from CalibreCatalog's book query to a CatalogBook."""
    return CatalogBook(
        id=row["id"],
        title=row["title"],
        sort=row["sort"] or "",
        uuid=row["uuid"] or "",
        path=row["path"],
        has_cover=bool(row["has_cover"]),
        cover=row["cover"],
        series=row["series"],
        series_index=row["series_index"],
        authors=_split_names(row["authors"]),
        tags=_split_names(row["tags"]),
        language=row["language"],
        formats=_split_names(row["formats"]),
    )
