# ABOUTME: Shared Click options for epubloader CLI commands.
# ABOUTME: Provides the reusable catalog database argument.

from pathlib import Path

import click

db_argument = click.argument(
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
)
