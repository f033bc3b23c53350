# ABOUTME: The `epubloader ls` command for listing cataloged books.
# ABOUTME: Displays a Rich table of all books in a catalog database.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from epubloader.cli.options import db_argument
from epubloader.db.catalog import CalibreCatalog
from epubloader.db.connection import open_catalog
from epubloader.db.errors import CatalogError

console = Console()


@click.command("ls")
@db_argument
def ls(db_path: Path) -> None:
    """List all books in the catalog at DB_PATH."""
    try:
        conn = open_catalog(db_path, must_exist=True)
    except CatalogError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    try:
        books = CalibreCatalog(conn).list_books()
    except CatalogError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc
    finally:
        conn.close()

    if not books:
        console.print("[yellow]No books in the catalog.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Series")
    table.add_column("Lang", width=5)
    table.add_column("Formats")

    for book in books:
        series_display = ""
        if book.series:
            series_display = f"{book.series} #{book.series_index:g}"

        table.add_row(
            str(book.id),
            book.title,
            ", ".join(book.authors) or "[dim]unknown[/dim]",
            series_display,
            book.language or "?",
            ", ".join(book.formats),
        )

    console.print(table)
    console.print(f"\n[dim]{len(books)} book(s)[/dim]")
