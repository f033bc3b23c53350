# ABOUTME: Loads a directory of EPUBs into a new or existing Calibre-compatible catalog.
# ABOUTME: Owns the connection and the book id map for one run, and tracks per-file outcomes.

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType

from epubloader.db.book_ids import BookIdMap
from epubloader.db.catalog import DEFAULT_EXTRA_FORMATS, CalibreCatalog
from epubloader.db.connection import open_catalog, provision_catalog
from epubloader.db.errors import IngestError
from epubloader.db.mapping import DEFAULT_COVER_PREFIX
from epubloader.formats.epub import EpubReadError, read_book_infos

logger = logging.getLogger(__name__)


@dataclass
class LoadOutcome:
    """What happened to one EPUB file."""

    file_name: str
    book_id: int | None = None
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        """'' on full success, else the error or the joined warnings."""
        if self.error is not None:
            return self.error
        return " - ".join(self.warnings)


@dataclass
class LoadResult:
    """Summary of a load run."""

    added: int = 0
    warned: int = 0
    errors: int = 0
    outcomes: list[LoadOutcome] = field(default_factory=list)

    @property
    def error_details(self) -> list[tuple[str, str]]:
        return [(o.file_name, o.message) for o in self.outcomes if not o.ok]

    @property
    def warning_details(self) -> list[tuple[str, str]]:
        return [(o.file_name, o.message) for o in self.outcomes if o.ok and o.warnings]


def find_epubs(base_path: Path) -> list[str]:
    """Recursively find .epub files, as POSIX paths relative to base_path."""
    return sorted(p.relative_to(base_path).as_posix() for p in base_path.rglob("*.epub"))


class CatalogLoader:
    """Adds EPUB files to a catalog database for the length of one run.

    With create=True the database is provisioned from scratch. When a book id
    file is given, each EPUB file name keeps the id it had in earlier runs;
    the file is written back once, by close().
    """

    def __init__(
        self,
        db_path: Path,
        *,
        create: bool = False,
        book_ids_path: Path | None = None,
        schema_path: Path | None = None,
        extra_formats: tuple[str, ...] = DEFAULT_EXTRA_FORMATS,
        cover_prefix: str = DEFAULT_COVER_PREFIX,
    ) -> None:
        if create:
            self._conn = provision_catalog(db_path, schema_path)
        else:
            self._conn = open_catalog(db_path, must_exist=True)
        self.catalog = CalibreCatalog(
            self._conn, extra_formats=extra_formats, cover_prefix=cover_prefix,
        )
        self._book_ids_path = book_ids_path
        self.book_ids = BookIdMap.load(book_ids_path) if book_ids_path else None
        self._closed = False

    def add_epub(self, base_path: Path, file_name: str) -> LoadOutcome:
        """Read one EPUB and add it to the catalog.

        Fatal problems end up in the outcome's error; they do not raise.
        """
        outcome = LoadOutcome(file_name=file_name)
        try:
            book = read_book_infos(base_path, file_name)
            book_id = self.book_ids.resolve(file_name) if self.book_ids is not None else 0
            result = self.catalog.add_book(book, book_id)
        except (EpubReadError, IngestError) as exc:
            outcome.error = str(exc)
            logger.warning("Skipping %s: %s", file_name, exc)
            return outcome

        outcome.book_id = result.book_id
        outcome.warnings = result.warnings
        logger.debug("%s: added as book %d", file_name, result.book_id)
        return outcome

    def load_epubs(self, base_path: Path, file_names: list[str]) -> LoadResult:
        """Add each EPUB in turn and summarize the outcomes."""
        result = LoadResult()
        for file_name in file_names:
            outcome = self.add_epub(base_path, file_name)
            result.outcomes.append(outcome)
            if not outcome.ok:
                result.errors += 1
                continue
            result.added += 1
            if outcome.warnings:
                result.warned += 1
        return result

    def close(self) -> None:
        """Save the book id map and close the database. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        try:
            if self.book_ids is not None:
                self.book_ids.save(self._book_ids_path)
        finally:
            self._conn.close()

    def __enter__(self) -> "CatalogLoader":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
