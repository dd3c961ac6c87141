"""Main CLI entry point for sprout."""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from sprout import __version__
from sprout.commands.list import list_cmd
from sprout.commands.new import new_cmd
from sprout.commands.resume import resume_cmd
from sprout.config import load_config


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich; DEBUG with -v, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="sprout")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.option(
    "--config",
    "config_file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: $SPROUT_CONFIG or ~/.config/sprout/config.json)",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_file: Optional[Path]):
    """sprout - Scaffold projects from template directories.

    \b
    Quick Start:
      sprout list                     Show available templates
      sprout new lang/python my-lib   Create a project
      sprout resume                   Show paused snippet chains

    \b
    Templates:
      Files ending in .snip are filled in interactively.
      Files ending in .autosnip are rendered without asking.
      Everything else is copied as-is.
    """
    setup_logging(verbose)
    ctx.obj = load_config(config_file)


main.add_command(list_cmd, name="list")
main.add_command(new_cmd, name="new")
main.add_command(resume_cmd, name="resume")


if __name__ == "__main__":
    main()
