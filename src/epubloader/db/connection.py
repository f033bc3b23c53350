# ABOUTME: SQLite connection management for Calibre-compatible catalog databases.
# ABOUTME: Opens existing catalogs and provisions fresh ones from the canonical schema.

import logging
import sqlite3
from pathlib import Path
from typing import Any

from epubloader.db.errors import (
    CatalogOpenError,
    ProvisionError,
    SchemaAssetError,
    StoreError,
)
from epubloader.db.schema import SCHEMA_PATCHES, ColumnPatch, build_schema

logger = logging.getLogger(__name__)

# Canonical schema shipped with the package; the patches in db.schema match its tables.
DEFAULT_SCHEMA_PATH = Path(__file__).with_name("metadata_sqlite.sql")


def open_catalog(path: Path, *, must_exist: bool = False) -> sqlite3.Connection:
    """Open a catalog database, creating an empty file if needed.

    Synchronous writes are disabled: a crash during a bulk load is recovered
    by provisioning again, so durability is traded for throughput.

    Args:
        path: Path to the database file.
        must_exist: Refuse to create a new file when True.

    Returns:
        A sqlite3.Connection with the sqlite3.Row factory.

    Raises:
        CatalogOpenError: If the file is missing (with must_exist) or cannot be opened.
    """
    if must_exist and not path.is_file():
        raise CatalogOpenError(f"Database file not found: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        conn = sqlite3.connect(str(path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA synchronous=OFF")
    except sqlite3.Error as exc:
        raise CatalogOpenError(f"Cannot open database [{path}]: {exc}") from exc

    return conn


def read_schema_script(schema_path: Path | None = None) -> str:
    """Read the canonical schema script.

    Raises:
        SchemaAssetError: If the script cannot be read.
    """
    script_path = schema_path or DEFAULT_SCHEMA_PATH
    try:
        return script_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaAssetError(f"Cannot read sql file: {script_path}") from exc


def provision_catalog(
    path: Path,
    schema_path: Path | None = None,
    patches: tuple[ColumnPatch, ...] = SCHEMA_PATCHES,
) -> sqlite3.Connection:
    """Create a fresh, empty catalog database at path.

    Any existing file at path is removed first. The schema script is split
    into statements; views and title_sort() statements are skipped and the
    patch columns are added before each statement is executed.

    Args:
        path: Target database file.
        schema_path: Canonical schema script. Defaults to the packaged one.
        patches: Columns added to canonical tables.

    Returns:
        An open connection to the new catalog.

    Raises:
        SchemaAssetError: If the schema script is missing or does not fit the patches.
        ProvisionError: If the target cannot be removed or a statement fails.
    """
    script = read_schema_script(schema_path)
    statements = build_schema(script, patches)

    if path.exists():
        try:
            path.unlink()
        except OSError as exc:
            raise ProvisionError(f"Cannot remove database file: {path}") from exc

    conn = open_catalog(path)
    for statement in statements:
        try:
            conn.executescript(statement.render())
        except sqlite3.Error as exc:
            conn.close()
            raise ProvisionError(
                f"Cannot create database: {statement.kind} {statement.name}: {exc}"
            ) from exc

    logger.debug("Provisioned %s with %d statements", path, len(statements))
    return conn


def execute(
    conn: sqlite3.Connection, sql: str, params: dict[str, Any] | tuple = (),
) -> sqlite3.Cursor:
    """Run one statement, turning sqlite3 failures into StoreError."""
    try:
        return conn.execute(sql, params)
    except sqlite3.Error as exc:
        raise StoreError(f"{exc} ({sql})") from exc
