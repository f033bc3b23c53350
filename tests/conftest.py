# ABOUTME: Shared pytest fixtures for epubloader tests.
# ABOUTME: Provides sample EPUB files, a book library tree, and provisioned catalogs.

import sqlite3
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from ebooklib import epub

from epubloader.db.catalog import CalibreCatalog
from epubloader.db.connection import provision_catalog
from epubloader.metadata.types import Author, BookInfos

EpubFactory = Callable[..., Path]


def _write_epub(
    path: Path,
    title: str,
    *,
    authors: tuple[str, ...] = (),
    identifier: str = "test-id",
    language: str = "en",
    subjects: tuple[str, ...] = (),
    description: str | None = None,
    with_cover: bool = False,
    isbn: str | None = None,
    date: str | None = None,
    calibre_meta: dict[str, str] | None = None,
) -> Path:
    """Create a minimal valid EPUB file with the given metadata."""
    book = epub.EpubBook()
    book.set_identifier(identifier)
    book.set_title(title)
    book.set_language(language)
    for author in authors:
        book.add_author(author)
    for subject in subjects:
        book.add_metadata("DC", "subject", subject)
    if description:
        book.add_metadata("DC", "description", description)
    if isbn:
        book.add_metadata("DC", "identifier", isbn, {"scheme": "ISBN"})
    if date:
        book.add_metadata("DC", "date", date)
    for name, content in (calibre_meta or {}).items():
        book.add_metadata(None, "meta", "", {"name": f"calibre:{name}", "content": content})

    if with_cover:
        book.add_item(epub.EpubItem(
            uid="cover-image",
            file_name="images/cover.jpg",
            media_type="image/jpeg",
            content=b"fake jpg",
        ))

    # Add a minimal chapter so the EPUB is structurally valid
    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang=language)
    chapter.content = b"<html><body><h1>Chapter 1</h1><p>Content.</p></body></html>"
    book.add_item(chapter)

    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    path.parent.mkdir(parents=True, exist_ok=True)
    epub.write_epub(str(path), book)
    return path


@pytest.fixture
def make_epub() -> EpubFactory:
    """Factory writing an EPUB at a given path."""
    return _write_epub


@pytest.fixture
def sample_epub(tmp_path: Path) -> Path:
    """A valid EPUB with full metadata, inside a Calibre-style folder."""
    return _write_epub(
        tmp_path / "library" / "Umberto Eco" / "The Name of the Rose.epub",
        "The Name of the Rose",
        authors=("Umberto Eco",),
        identifier="urn:uuid:0b5e4c6e-5f0c-4a43-9d4e-2c3b1f0e8a11",
        subjects=("Mystery", "Historical Fiction"),
        description="A mystery set in a medieval monastery.",
        with_cover=True,
    )


@pytest.fixture
def corrupt_epub(tmp_path: Path) -> Path:
    """A file with an .epub extension that is not a valid EPUB."""
    filepath = tmp_path / "library" / "corrupt.epub"
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text("this is not a valid epub file")
    return filepath


@pytest.fixture
def library(tmp_path: Path) -> Path:
    """A library tree with two EPUBs by different authors.

    Layout:
        library/
            Frank Herbert/Dune.epub
            Ursula K. Le Guin/The Dispossessed.epub
    """
    root = tmp_path / "library"
    _write_epub(
        root / "Frank Herbert" / "Dune.epub",
        "Dune",
        authors=("Frank Herbert",),
        identifier="urn:uuid:11111111-1111-4111-8111-111111111111",
        subjects=("Science Fiction",),
    )
    _write_epub(
        root / "Ursula K. Le Guin" / "The Dispossessed.epub",
        "The Dispossessed",
        authors=("Ursula K. Le Guin",),
        identifier="urn:uuid:22222222-2222-4222-8222-222222222222",
        subjects=("Science Fiction", "Utopia"),
    )
    return root


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Provide a temporary catalog database path."""
    return tmp_path / "metadata.db"


@pytest.fixture
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """A freshly provisioned catalog connection."""
    connection = provision_catalog(db_path)
    yield connection
    connection.close()


@pytest.fixture
def catalog(conn: sqlite3.Connection) -> CalibreCatalog:
    """A CalibreCatalog on a freshly provisioned database."""
    return CalibreCatalog(conn)


@pytest.fixture
def book_files(tmp_path: Path) -> Path:
    """Base directory holding placeholder book files for BookInfos-based tests.

    Layout:
        books/
            Frank Herbert/Dune.epub
            Frank Herbert/Dune Messiah.epub
            Frank Herbert/Dune Messiah.pdf
    """
    base = tmp_path / "books"
    author_dir = base / "Frank Herbert"
    author_dir.mkdir(parents=True)
    (author_dir / "Dune.epub").write_bytes(b"fake epub")
    (author_dir / "Dune Messiah.epub").write_bytes(b"fake epub 2")
    (author_dir / "Dune Messiah.pdf").write_bytes(b"fake pdf data")
    return base


@pytest.fixture
def dune(book_files: Path) -> BookInfos:
    """BookInfos for Dune, pointing at a placeholder file under book_files."""
    return BookInfos(
        title="Dune",
        authors=[Author(name="Frank Herbert", sort="Herbert, Frank")],
        series="Dune",
        series_index=1.0,
        language="eng",
        subjects=["Science Fiction"],
        description="Desert planet.",
        uuid="U1",
        isbn="000",
        format="epub",
        cover="OEBPS/images/cover.jpg",
        base_path=str(book_files),
        path="Frank Herbert",
        name="Dune",
    )


@pytest.fixture
def dune_messiah(book_files: Path) -> BookInfos:
    """BookInfos for Dune Messiah, which also has a PDF next to its EPUB."""
    return BookInfos(
        title="Dune Messiah",
        authors=[Author(name="Frank Herbert", sort="Herbert, Frank")],
        series="Dune",
        series_index=2.0,
        language="eng",
        subjects=["Science Fiction", "Politics"],
        uuid="U2",
        uri="http://example.com/dune-messiah",
        format="epub",
        cover="OEBPS/cover.jpeg",
        base_path=str(book_files),
        path="Frank Herbert",
        name="Dune Messiah",
    )
