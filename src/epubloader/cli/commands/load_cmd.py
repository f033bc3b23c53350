# ABOUTME: The `epubloader load` command for adding a folder of EPUBs to a catalog.
# ABOUTME: Optionally rebuilds the catalog first, keeping book ids stable via an id file.

from pathlib import Path

import click
from rich.console import Console

from epubloader.cli.options import db_argument
from epubloader.core.loader import CatalogLoader, find_epubs
from epubloader.db.catalog import DEFAULT_EXTRA_FORMATS
from epubloader.db.errors import CatalogError
from epubloader.db.mapping import DEFAULT_COVER_PREFIX

console = Console()


@click.command("load")
@db_argument
@click.argument(
    "base_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--create/--append",
    default=False,
    help="Rebuild the catalog from scratch instead of adding to it.",
)
@click.option(
    "--book-ids",
    "book_ids_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="File mapping EPUB names to book ids, kept across rebuilds.",
)
@click.option(
    "--extra-format",
    "extra_formats",
    multiple=True,
    help=f"Other format to catalog when present next to the EPUB "
    f"(repeatable, default: {', '.join(DEFAULT_EXTRA_FORMATS)}).",
)
@click.option(
    "--no-extra-formats",
    is_flag=True,
    default=False,
    help="Only catalog the EPUB files themselves.",
)
@click.option(
    "--cover-prefix",
    default=DEFAULT_COVER_PREFIX,
    show_default=True,
    help="EPUB content directory replaced by the book name in cover paths.",
)
@click.option(
    "--schema",
    "schema_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Canonical schema script used with --create.",
)
def load(
    db_path: Path,
    base_dir: Path,
    create: bool,
    book_ids_path: Path | None,
    extra_formats: tuple[str, ...],
    no_extra_formats: bool,
    cover_prefix: str,
    schema_path: Path | None,
) -> None:
    """Add every EPUB under BASE_DIR to the catalog at DB_PATH."""
    if no_extra_formats:
        formats: tuple[str, ...] = ()
    else:
        formats = tuple(f.lower().lstrip(".") for f in extra_formats) or DEFAULT_EXTRA_FORMATS

    file_names = find_epubs(base_dir)
    if not file_names and not create:
        console.print(f"[yellow]No EPUB files found in {base_dir}[/yellow]")
        return

    try:
        loader = CatalogLoader(
            db_path,
            create=create,
            book_ids_path=book_ids_path,
            schema_path=schema_path,
            extra_formats=formats,
            cover_prefix=cover_prefix,
        )
    except CatalogError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    console.print(f"Found [bold]{len(file_names)}[/bold] EPUB file(s)\n")

    with loader:
        result = loader.load_epubs(base_dir, file_names)

    parts = [f"[green]{result.added} added[/green]"]
    if result.warned:
        parts.append(f"[yellow]{result.warned} with warnings[/yellow]")
    if result.errors:
        parts.append(f"[red]{result.errors} error(s)[/red]")
    console.print(", ".join(parts))

    if result.warning_details:
        console.print("\n[yellow]Warnings:[/yellow]")
        for name, msg in result.warning_details:
            console.print(f"  [dim]{name}:[/dim] {msg}", highlight=False)

    if result.error_details:
        console.print(f"\n[red]{result.errors} file(s) could not be loaded:[/red]")
        for name, msg in result.error_details:
            console.print(f"  [dim]{name}:[/dim] {msg}", highlight=False)
