# ABOUTME: Core data structures describing one book to be loaded into a catalog.
# ABOUTME: BookInfos is the interchange format between the EPUB reader and the catalog.

from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple
from uuid import uuid4


class Author(NamedTuple):
    """An author as shown to readers (name) and as filed (sort, e.g. 'Herbert, Frank')."""

    name: str
    sort: str = ""


@dataclass
class BookInfos:
    """Metadata for a single book file, as produced by a format reader.

    Only title is required. Location fields describe where the book file lives:
    the file for a given format is base_path/path/name.<format>.
    """

    title: str
    authors: list[Author] = field(default_factory=list)
    series: str = ""
    series_index: float = 1.0
    language: str = ""
    subjects: list[str] = field(default_factory=list)
    description: str = ""
    uuid: str = ""
    isbn: str = ""
    uri: str = ""
    format: str = "epub"
    timestamp: str = ""
    creation_date: str = ""
    modification_date: str = ""
    cover: str = ""
    base_path: str = ""
    path: str = ""
    name: str = ""

    @property
    def author(self) -> str:
        """Convenience property: joined author names for display."""
        return ", ".join(a.name for a in self.authors)

    @property
    def has_cover(self) -> bool:
        """Whether a cover image path was found in the source document."""
        return bool(self.cover)

    def create_uuid(self) -> str:
        """Replace the book uuid with a freshly generated one and return it."""
        self.uuid = str(uuid4())
        return self.uuid

    def file_path(self, fmt: str) -> Path:
        """Location of this book's file in the given format."""
        return Path(self.base_path) / self.path / f"{self.name}.{fmt}"
