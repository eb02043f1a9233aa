"""Execute command implementation for tagwatch.

Runs the execution phase: describes the repository, parses the
description, renders the template, and rewrites the output only if its
content changed. Meant to be run by the build system before every build
action, usually as printed by ``tagwatch register``.

Typical usage::

    $ tagwatch execute --registration build/tagwatch-registration.json
    $ tagwatch execute -i src/version.h.in -o build/version.h
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from tagwatch.exceptions import TagWatchError
from tagwatch.core import ExecutionResult, RenderGate, load_registration
from tagwatch.context import pass_context, TagWatchContext
from tagwatch.commands import build_config, gate_options
from tagwatch.utils import get_logger, print_error, print_success

logger = get_logger("commands.execute")


@click.command()
@click.option(
    "--registration",
    "-r",
    "registration_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="TAGWATCH_REGISTRATION",
    help="Registration record written by 'tagwatch register'.",
)
@gate_options
@pass_context
def execute(
    ctx: TagWatchContext,
    registration_path: Optional[Path],
    template: Optional[Path],
    output: Optional[Path],
    working_dir: Optional[Path],
    git_executable: Optional[Path],
    build_dir: Optional[Path],
    prefix: Optional[str],
    timeout: Optional[float],
) -> None:
    """Render the template if the repository state changed.

    Settings come from ``--registration`` when given; any option passed
    alongside it overrides the recorded value.
    """
    try:
        base = (
            load_registration(registration_path)
            if registration_path is not None
            else ctx.config
        )
        config = build_config(
            base,
            template=template,
            output=output,
            working_dir=working_dir,
            git_executable=git_executable,
            build_dir=build_dir,
            prefix=prefix,
            timeout=timeout,
        )
        result = RenderGate(config).execute()

    except TagWatchError as e:
        print_error(f"{e}")
        sys.exit(1)

    report_execution(ctx, result)


def report_execution(ctx: TagWatchContext, result: ExecutionResult) -> None:
    """Print a one-line summary of an execution."""
    if result.changed:
        print_success(f"Updated {result.output} ({result.fields.any})")
    elif ctx.verbose > 0:
        print_success(f"{result.output} is up to date ({result.fields.any})")
