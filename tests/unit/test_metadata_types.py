# ABOUTME: Unit tests for the BookInfos and Author data structures.
# ABOUTME: Validates display helpers, uuid generation, and file location.

from pathlib import Path

from epubloader.metadata.types import Author, BookInfos


class TestBookInfos:
    """Tests for BookInfos."""

    def test_defaults(self) -> None:
        infos = BookInfos(title="Dune")
        assert infos.authors == []
        assert infos.series_index == 1.0
        assert infos.format == "epub"
        assert infos.has_cover is False

    def test_author_joins_names(self) -> None:
        infos = BookInfos(
            title="Good Omens",
            authors=[Author("Terry Pratchett"), Author("Neil Gaiman")],
        )
        assert infos.author == "Terry Pratchett, Neil Gaiman"

    def test_has_cover(self) -> None:
        assert BookInfos(title="Dune", cover="OEBPS/cover.jpg").has_cover

    def test_create_uuid_replaces_uuid(self) -> None:
        infos = BookInfos(title="Dune", uuid="U1")
        new_uuid = infos.create_uuid()
        assert new_uuid == infos.uuid
        assert new_uuid != "U1"
        assert len(new_uuid) == 36

    def test_create_uuid_is_unique(self) -> None:
        infos = BookInfos(title="Dune")
        assert infos.create_uuid() != infos.create_uuid()

    def test_file_path(self) -> None:
        infos = BookInfos(
            title="Dune", base_path="/books", path="Frank Herbert", name="Dune",
        )
        assert infos.file_path("pdf") == Path("/books/Frank Herbert/Dune.pdf")

    def test_file_path_without_subfolder(self) -> None:
        infos = BookInfos(title="Dune", base_path="/books", name="Dune")
        assert infos.file_path("epub") == Path("/books/Dune.epub")
