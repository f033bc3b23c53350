# ABOUTME: Structural view of the canonical catalog schema script.
# ABOUTME: Splits the script into statements, drops unneeded ones, and adds patch columns.

import logging
import re
from dataclasses import dataclass, field

from epubloader.db.errors import SchemaAssetError

logger = logging.getLogger(__name__)

# Statements start at each upper-case CREATE keyword, as in the canonical script.
_CREATE_SPLIT_RE = re.compile(r"(?=\bCREATE\s)")
_HEADER_RE = re.compile(
    r"^CREATE\s+(?:TEMP(?:ORARY)?\s+)?(UNIQUE\s+INDEX|VIRTUAL\s+TABLE|TABLE|VIEW|INDEX|TRIGGER)\s+"
    r"(?:IF\s+NOT\s+EXISTS\s+)?[\"`\[]?(\w+)",
    re.IGNORECASE,
)
_COMMENT_RE = re.compile(r"--[^\n]*")
_CONSTRAINT_KEYWORDS = frozenset({"UNIQUE", "PRIMARY", "CHECK", "FOREIGN", "CONSTRAINT"})


@dataclass
class SchemaStatement:
    """One statement of the schema script.

    Plain tables are held as their list of column and constraint definitions
    so columns can be added without rewriting SQL text. Every other statement
    keeps its original text.
    """

    kind: str
    name: str
    sql: str
    columns: list[str] = field(default_factory=list)
    tail: str = ""

    @property
    def is_table(self) -> bool:
        return self.kind == "table"

    def column_names(self) -> list[str]:
        """Names of the declared columns, skipping table constraints."""
        return [name for name in (_column_name(c) for c in self.columns) if name]

    def add_column(self, definition: str, after: str) -> bool:
        """Insert a column definition right after an existing column.

        Returns False without changes when a column with the same name is
        already declared.

        Raises:
            SchemaAssetError: If the anchor column is not declared.
        """
        new_name = _column_name(definition)
        names = [_column_name(c) for c in self.columns]
        if new_name in names:
            return False
        try:
            position = names.index(after)
        except ValueError as exc:
            raise SchemaAssetError(
                f"Column {after!r} not found in table {self.name!r}"
            ) from exc
        self.columns.insert(position + 1, definition)
        return True

    def render(self) -> str:
        """SQL text for this statement, rebuilt from columns for tables."""
        if not self.is_table:
            return self.sql
        body = ",\n    ".join(self.columns)
        return f"CREATE TABLE {self.name} (\n    {body}\n){self.tail}"


@dataclass(frozen=True)
class ColumnPatch:
    """A column added to a canonical table, placed after an anchor column."""

    table: str
    after: str
    column: str


# Relative cover image path stored alongside the has_cover flag.
COVER_COLUMN_PATCH = ColumnPatch("books", "has_cover", "cover TEXT NOT NULL DEFAULT ''")
# Sort key for tags, matching the sort column of the other name tables.
TAG_SORT_COLUMN_PATCH = ColumnPatch("tags", "name", "sort TEXT COLLATE NOCASE")

SCHEMA_PATCHES = (COVER_COLUMN_PATCH, TAG_SORT_COLUMN_PATCH)


def _column_name(definition: str) -> str | None:
    """First identifier of a column definition, or None for a table constraint."""
    token = definition.split(None, 1)[0].strip("\"`[]")
    if token.upper() in _CONSTRAINT_KEYWORDS:
        return None
    return token


def _find_body(sql: str, start: int) -> tuple[int, int]:
    """Locate the parenthesized column list starting at or after start.

    Returns the offsets of the opening and the matching closing parenthesis.
    Parentheses inside single-quoted literals are ignored.
    """
    opening = sql.index("(", start)
    depth = 0
    in_quote = False
    for offset in range(opening, len(sql)):
        char = sql[offset]
        if char == "'":
            in_quote = not in_quote
        elif in_quote:
            continue
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return opening, offset
    raise SchemaAssetError(f"Unbalanced parentheses in: {sql[:60]!r}")


def _split_columns(body: str) -> list[str]:
    """Split a table body on top-level commas."""
    parts: list[str] = []
    depth = 0
    in_quote = False
    current: list[str] = []
    for char in body:
        if char == "'":
            in_quote = not in_quote
        elif not in_quote and char == "(":
            depth += 1
        elif not in_quote and char == ")":
            depth -= 1
        elif not in_quote and depth == 0 and char == ",":
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [" ".join(part.split()) for part in parts if part.strip()]


def _parse_statement(sql: str) -> SchemaStatement:
    match = _HEADER_RE.match(sql)
    if match is None:
        return SchemaStatement(kind="other", name="", sql=sql)

    kind = " ".join(match.group(1).lower().split())
    name = match.group(2)
    if kind != "table":
        return SchemaStatement(kind=kind, name=name, sql=sql)

    opening, closing = _find_body(sql, match.end())
    return SchemaStatement(
        kind=kind,
        name=name,
        sql=sql,
        columns=_split_columns(sql[opening + 1:closing]),
        tail=sql[closing + 1:],
    )


def parse_schema(script: str) -> list[SchemaStatement]:
    """Split a schema script into statements, one per CREATE block.

    Text before the first CREATE is kept as an 'other' statement unless it
    only holds comments and whitespace. Text following a statement (such as
    a trailing pragma) stays attached to it.
    """
    statements = []
    for block in _CREATE_SPLIT_RE.split(script):
        if not _COMMENT_RE.sub("", block).strip():
            continue
        statements.append(_parse_statement(block.strip()))
    return statements


def is_skipped(statement: SchemaStatement) -> bool:
    """Whether a statement is left out of a provisioned catalog.

    Views are not needed for loading. Anything calling title_sort() is
    dropped: sort keys are derived by the loader and the SQL function
    does not exist outside the desktop application.
    """
    return statement.kind == "view" or "title_sort" in statement.sql.lower()


def apply_patches(
    statements: list[SchemaStatement],
    patches: tuple[ColumnPatch, ...] = SCHEMA_PATCHES,
) -> list[SchemaStatement]:
    """Add patch columns to their tables, in place.

    Raises:
        SchemaAssetError: If a patched table or its anchor column is missing.
    """
    tables = {s.name: s for s in statements if s.is_table}
    for patch in patches:
        table = tables.get(patch.table)
        if table is None:
            raise SchemaAssetError(f"Table {patch.table!r} not found in schema")
        if table.add_column(patch.column, after=patch.after):
            logger.debug("Patched table %s: %s", patch.table, patch.column)
    return statements


def build_schema(
    script: str,
    patches: tuple[ColumnPatch, ...] = SCHEMA_PATCHES,
) -> list[SchemaStatement]:
    """Parse a canonical schema script into the statements to execute."""
    statements = [s for s in parse_schema(script) if not is_skipped(s)]
    return apply_patches(statements, patches)
