# ABOUTME: Persistent map from book file names to catalog book ids.
# ABOUTME: Lets a rebuilt catalog give every book the same id it had before.

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class BookIdMap:
    """File name to book id map, stored as 'name<TAB>id' lines.

    New names get one more than the highest id handed out so far, so ids
    stay unique and increasing. The map only grows during a run; save() is
    meant to be called once, when the run ends.
    """

    def __init__(self, ids: dict[str, int] | None = None) -> None:
        self._ids: dict[str, int] = dict(ids or {})

    @classmethod
    def load(cls, path: Path | None) -> "BookIdMap":
        """Read a map file. A missing or empty path gives an empty map.

        Lines that do not hold exactly two tab-separated fields, or whose id
        is not an integer, are skipped.
        """
        book_ids = cls()
        if not path or not path.is_file():
            return book_ids

        with open(path, encoding="utf-8") as f:
            for line in f:
                fields = line.strip().split("\t")
                if len(fields) != 2:
                    continue
                try:
                    book_ids._ids[fields[0]] = int(fields[1])
                except ValueError:
                    continue

        logger.debug("Loaded %d book id(s) from %s", len(book_ids), path)
        return book_ids

    def save(self, path: Path | None) -> None:
        """Write the whole map to path, replacing the file. No-op without a path."""
        if not path:
            return
        lines = [f"{name}\t{book_id}\n" for name, book_id in self._ids.items()]
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(lines), encoding="utf-8")
        logger.debug("Saved %d book id(s) to %s", len(self._ids), path)

    def resolve(self, name: str) -> int:
        """Return the id stored for name, assigning the next free id if needed."""
        if name in self._ids:
            return self._ids[name]
        book_id = max(self._ids.values(), default=0) + 1
        self._ids[name] = book_id
        return book_id

    def as_dict(self) -> dict[str, int]:
        return dict(self._ids)

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._ids)
