"""Register command implementation for tagwatch.

Runs the registration phase once per build configuration: validates the
template/output settings, locates git, writes the registration record to
the build directory, and prints the command that the build system must
run before every build action.

Typical usage::

    $ tagwatch register -i src/version.h.in -o build/version.h --build-dir build
    /usr/bin/python3 -m tagwatch execute --registration build/tagwatch-registration.json
"""

from __future__ import annotations

import sys
import shlex
from pathlib import Path
from typing import Optional

import click

from tagwatch.core import RenderGate
from tagwatch.exceptions import TagWatchError
from tagwatch.context import pass_context, TagWatchContext
from tagwatch.commands import build_config, gate_options
from tagwatch.utils import get_logger, print_error, print_success

logger = get_logger("commands.register")


@click.command()
@gate_options
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Print only the execution command.",
)
@pass_context
def register(
    ctx: TagWatchContext,
    template: Optional[Path],
    output: Optional[Path],
    working_dir: Optional[Path],
    git_executable: Optional[Path],
    build_dir: Optional[Path],
    prefix: Optional[str],
    timeout: Optional[float],
    quiet: bool,
) -> None:
    """Register a template for rendering before every build.

    Writes the registration record and prints the command the build
    system must run before each build action. The command is printed on
    stdout so it can be captured by build scripts.
    """
    try:
        config = build_config(
            ctx.config,
            template=template,
            output=output,
            working_dir=working_dir,
            git_executable=git_executable,
            build_dir=build_dir,
            prefix=prefix,
            timeout=timeout,
        )
        registration = RenderGate(config).register()

    except TagWatchError as e:
        print_error(f"{e}")
        sys.exit(1)

    if not quiet:
        print_success(
            f"Registered {registration.config.template} -> "
            f"{registration.config.output}"
        )
    click.echo(shlex.join(registration.command))
