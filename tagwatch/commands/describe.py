"""Describe command implementation for tagwatch.

Shows the version fields tagwatch would substitute into a template,
either for the repository in the working directory or for a description
given on the command line.

Typical usage::

    $ tagwatch describe
    $ tagwatch describe --description v2.4.0~rc1-3-104-gffba103 --format env
    GIT_TAG_VERSION_FULL=2.4.0
    ...
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from tagwatch.core import RenderGate
from tagwatch.exceptions import TagWatchError
from tagwatch.context import pass_context, TagWatchContext
from tagwatch.commands import check_prefix
from tagwatch.utils import get_logger, print_error, print_fields_table

logger = get_logger("commands.describe")


@click.command()
@click.option(
    "--description",
    "-d",
    help="Parse this text instead of running git describe.",
)
@click.option(
    "--working-dir",
    "-C",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="TAGWATCH_WORKING_DIR",
    help="Directory git describe runs in [default: current directory].",
)
@click.option(
    "--git-executable",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="TAGWATCH_GIT_EXECUTABLE",
    help="Path to git [default: looked up on PATH].",
)
@click.option(
    "--prefix",
    envvar="TAGWATCH_PREFIX",
    callback=check_prefix,
    help="Prefix of field names [default: GIT_TAG_VERSION_].",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "env", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def describe(
    ctx: TagWatchContext,
    description: Optional[str],
    working_dir: Optional[Path],
    git_executable: Optional[Path],
    prefix: Optional[str],
    format: str,
) -> None:
    """Show the version fields for the repository or a given description."""
    config = ctx.config.merged(
        working_dir=working_dir,
        git_executable=git_executable,
        prefix=prefix,
    )

    try:
        gate = RenderGate(config)
        if description is None:
            description, fields = gate.describe()
        else:
            fields = gate.parser.parse(description.strip())

    except TagWatchError as e:
        print_error(f"{e}")
        sys.exit(1)

    logger.debug("Fields for %r: %s", description, fields.to_dict())
    formatter = gate.formatter

    if format == "json":
        click.echo(formatter.to_json(fields))
    elif format == "env":
        for line in formatter.to_lines(fields):
            click.echo(line)
    else:
        print_fields_table(formatter.format(fields), title=description)
