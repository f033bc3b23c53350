# ABOUTME: Reads EPUB package metadata into BookInfos using ebooklib.
# ABOUTME: Defensive wrapper that handles malformed files gracefully.

import logging
import zipfile
from pathlib import Path

import ebooklib
from ebooklib import epub

from epubloader.metadata.sorting import author_sort_from_name
from epubloader.metadata.types import Author, BookInfos

logger = logging.getLogger(__name__)

_URN_UUID_PREFIX = "urn:uuid:"


class EpubReadError(Exception):
    """Raised when an EPUB file cannot be read or parsed."""


def _get_metadata_value(book: epub.EpubBook, namespace: str, name: str) -> str | None:
    """Extract a single metadata value from an EpubBook, or None if missing."""
    values = book.get_metadata(namespace, name)
    if not values:
        return None
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else None


def _get_attribute(attrs: dict | None, name: str) -> str | None:
    """Look up an attribute by local name, whatever its namespace prefix."""
    for key, value in (attrs or {}).items():
        local = key.rsplit("}", 1)[-1].rsplit(":", 1)[-1]
        if local == name and value:
            return str(value).strip()
    return None


def _get_authors(book: epub.EpubBook) -> list[Author]:
    """Extract authors with their file-as sort form, deriving one when absent."""
    authors = []
    for value, attrs in book.get_metadata("DC", "creator"):
        if not value:
            continue
        name = str(value).strip()
        sort = _get_attribute(attrs, "file-as") or author_sort_from_name(name)
        authors.append(Author(name=name, sort=sort))
    return authors


def _get_subjects(book: epub.EpubBook) -> list[str]:
    return [str(value).strip() for value, _ in book.get_metadata("DC", "subject") if value]


def _get_identifiers(book: epub.EpubBook) -> dict[str, str]:
    """Extract identifiers keyed by lowercased scheme (or element id)."""
    identifiers = {}
    for value, attrs in book.get_metadata("DC", "identifier"):
        if not value:
            continue
        scheme = _get_attribute(attrs, "scheme") or _get_attribute(attrs, "id") or "id"
        identifiers[scheme.lower()] = str(value).strip()
    return identifiers


def _detect_uuid(identifiers: dict[str, str]) -> str | None:
    for key in ("uuid", "uuid_id", "calibre_id"):
        if key in identifiers:
            return identifiers[key].removeprefix(_URN_UUID_PREFIX)
    for value in identifiers.values():
        if value.lower().startswith(_URN_UUID_PREFIX):
            return value[len(_URN_UUID_PREFIX):]
    return None


def _detect_isbn(identifiers: dict[str, str]) -> str | None:
    """Try to find an ISBN among the identifiers."""
    for key in ("isbn", "isbn13", "isbn-13", "isbn10", "isbn-10"):
        if key in identifiers:
            return identifiers[key]
    # Check if any identifier value looks like an ISBN
    for value in identifiers.values():
        cleaned = value.replace("-", "").replace(" ", "")
        if len(cleaned) in (10, 13) and cleaned.replace("X", "").isdigit():
            return value
    return None


def _detect_uri(identifiers: dict[str, str]) -> str | None:
    for key in ("uri", "url"):
        if key in identifiers:
            return identifiers[key]
    return None


def _get_dates(book: epub.EpubBook) -> tuple[str, str]:
    """Return (creation date, modification date) from dc:date entries."""
    creation = ""
    modification = ""
    for value, attrs in book.get_metadata("DC", "date"):
        if not value:
            continue
        event = (_get_attribute(attrs, "event") or "").lower()
        if event == "modification":
            modification = modification or str(value).strip()
        else:
            creation = creation or str(value).strip()
    if not modification:
        modification = _get_meta_content(book, "dcterms", "modified") or ""
    return creation, modification


def _get_meta_content(book: epub.EpubBook, prefix: str | None, name: str) -> str | None:
    """Read a <meta name="prefix:name"> value, wherever ebooklib filed it."""
    for namespace in (prefix, epub.NAMESPACES["OPF"], None):
        for value, attrs in book.metadata.get(namespace, {}).get(name, []):
            content = (attrs or {}).get("content") or value
            if content:
                return str(content).strip()
    return None


def _get_series(book: epub.EpubBook) -> tuple[str, float]:
    series = _get_meta_content(book, "calibre", "series") or ""
    index = 1.0
    raw_index = _get_meta_content(book, "calibre", "series_index")
    if raw_index:
        try:
            index = float(raw_index)
        except ValueError:
            logger.debug("Ignoring bad series index %r", raw_index)
    return series, index


def _find_cover_href(book: epub.EpubBook) -> str | None:
    """Find the href of the cover image item, relative to the package document."""
    cover_id = _get_meta_content(book, None, "cover")
    if cover_id:
        cover_item = book.get_item_with_id(cover_id)
        if cover_item:
            return cover_item.get_name()

    # Fallback: look for images with "cover" in the id or filename
    for item in book.get_items():
        item_id = item.get_id() or ""
        item_name = item.get_name() or ""
        if "cover" in item_id.lower() or "cover" in item_name.lower():
            if item.get_type() in (ebooklib.ITEM_IMAGE, ebooklib.ITEM_COVER):
                return item_name

    return None


def _archive_path(path: Path, href: str) -> str:
    """Full path of an item inside the EPUB archive (e.g. 'OEBPS/images/cover.jpg')."""
    with zipfile.ZipFile(path) as archive:
        for entry in archive.namelist():
            if entry == href or entry.endswith(f"/{href}"):
                return entry
    return href


def read_book_infos(base_path: Path, file_name: str) -> BookInfos:
    """Extract BookInfos from an EPUB file.

    Args:
        base_path: Library root directory.
        file_name: Path of the EPUB relative to base_path.

    Returns:
        BookInfos populated with extracted fields and the file's location.

    Raises:
        EpubReadError: If the file cannot be read or parsed.
    """
    path = base_path / file_name
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    relative = Path(file_name)
    title = _get_metadata_value(book, "DC", "title") or relative.stem
    identifiers = _get_identifiers(book)
    creation, modification = _get_dates(book)
    series, series_index = _get_series(book)

    cover = ""
    cover_href = _find_cover_href(book)
    if cover_href:
        try:
            cover = _archive_path(path, cover_href)
        except (OSError, zipfile.BadZipFile) as exc:
            raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    infos = BookInfos(
        title=title,
        authors=_get_authors(book),
        series=series,
        series_index=series_index,
        language=_get_metadata_value(book, "DC", "language") or "",
        subjects=_get_subjects(book),
        description=_get_metadata_value(book, "DC", "description") or "",
        uuid=_detect_uuid(identifiers) or "",
        isbn=_detect_isbn(identifiers) or "",
        uri=_detect_uri(identifiers) or "",
        format="epub",
        timestamp=_get_meta_content(book, "calibre", "timestamp") or "",
        creation_date=creation,
        modification_date=modification,
        cover=cover,
        base_path=str(base_path),
        path="" if relative.parent == Path(".") else relative.parent.as_posix(),
        name=relative.stem,
    )
    if not infos.uuid:
        infos.create_uuid()
    return infos
