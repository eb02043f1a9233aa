"""Run command implementation for tagwatch.

Single entry point selecting the phase with a flag, for build systems
that prefer to call the same command line at configure time and at
build time::

    # configure time
    $ tagwatch run -i version.h.in -o build/version.h --build-dir build

    # build time
    $ tagwatch run --build-time --registration build/tagwatch-registration.json
"""

from __future__ import annotations

import sys
import shlex
from pathlib import Path
from typing import Optional

import click

from tagwatch.exceptions import TagWatchError
from tagwatch.commands.execute import report_execution
from tagwatch.context import pass_context, TagWatchContext
from tagwatch.commands import build_config, gate_options
from tagwatch.core import Phase, Registration, RenderGate, load_registration
from tagwatch.utils import get_logger, print_error, print_success

logger = get_logger("commands.run")


@click.command()
@click.option(
    "--build-time",
    "build_time",
    is_flag=True,
    envvar="TAGWATCH_BUILD_TIME",
    help="Run the execution phase instead of registering.",
)
@click.option(
    "--registration",
    "-r",
    "registration_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="TAGWATCH_REGISTRATION",
    help="Registration record to execute from (build time only).",
)
@gate_options
@pass_context
def run(
    ctx: TagWatchContext,
    build_time: bool,
    registration_path: Optional[Path],
    template: Optional[Path],
    output: Optional[Path],
    working_dir: Optional[Path],
    git_executable: Optional[Path],
    build_dir: Optional[Path],
    prefix: Optional[str],
    timeout: Optional[float],
) -> None:
    """Register (default) or execute, depending on --build-time."""
    phase = Phase.EXECUTION if build_time else Phase.REGISTRATION
    logger.debug("Running %s phase", phase.value)

    try:
        base = ctx.config
        if build_time and registration_path is not None:
            base = load_registration(registration_path)

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
        result = RenderGate(config).run(phase)

    except TagWatchError as e:
        print_error(f"{e}")
        sys.exit(1)

    if isinstance(result, Registration):
        print_success(f"Registered {result.config.template} -> {result.config.output}")
        click.echo(shlex.join(result.command))
    else:
        report_execution(ctx, result)
