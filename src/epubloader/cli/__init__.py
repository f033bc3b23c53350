# ABOUTME: CLI package for epubloader, built on Click.
# ABOUTME: Defines the root command group and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from epubloader.cli.commands import inspect_cmd, load_cmd, ls_cmd


@click.group()
@click.version_option(package_name="epubloader")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """epubloader - build Calibre-compatible catalogs from EPUB folders."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


cli.add_command(load_cmd.load)
cli.add_command(ls_cmd.ls)
cli.add_command(inspect_cmd.inspect)
