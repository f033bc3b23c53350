# ABOUTME: The `epubloader inspect` command for viewing what would be loaded from an EPUB.
# ABOUTME: Shows the BookInfos extracted from a single EPUB file.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from epubloader.formats.epub import EpubReadError, read_book_infos

console = Console()


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inspect(path: Path) -> None:
    """Show the metadata that would be loaded from an EPUB file."""
    try:
        book = read_book_infos(path.parent, path.name)
    except EpubReadError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    table = Table(title=str(path.name), show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Title", book.title)
    table.add_row("Author", book.author or "[dim]unknown[/dim]")
    if book.authors:
        table.add_row("Author Sort", " & ".join(a.sort for a in book.authors))
    table.add_row("Language", book.language or "[dim]unknown[/dim]")
    table.add_row("Series", book.series or "[dim]none[/dim]")
    if book.series:
        table.add_row("Series Index", f"{book.series_index:g}")
    table.add_row("Subjects", ", ".join(book.subjects) or "[dim]none[/dim]")
    table.add_row("UUID", book.uuid)
    table.add_row("ISBN", book.isbn or "[dim]none[/dim]")
    table.add_row("URI", book.uri or "[dim]none[/dim]")
    table.add_row("Cover", book.cover or "[dim]none[/dim]")
    table.add_row("Description", book.description or "[dim]none[/dim]")

    console.print(table)
