"""
CLI subcommands for tagwatch.

Options shared by ``register``, ``execute`` and ``run`` are declared once
in :func:`gate_options`. Each option can also be supplied through a
``TAGWATCH_*`` environment variable; values given on the command line win
over the environment, which wins over the configuration file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

import click

from tagwatch.config import GateConfig, validate_prefix
from tagwatch.exceptions import ConfigError

GATE_OPTION_NAMES = (
    "template",
    "output",
    "working_dir",
    "git_executable",
    "build_dir",
    "prefix",
    "timeout",
)


def check_prefix(
    ctx: click.Context, param: click.Parameter, value: Optional[str]
) -> Optional[str]:
    """Reject ``--prefix`` values that cannot form placeholder names."""
    if value is None:
        return None
    try:
        return validate_prefix(value)
    except ConfigError as exc:
        raise click.BadParameter(exc.message, ctx=ctx, param=param) from exc


def gate_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the configuration options shared by gate commands."""
    options = [
        click.option(
            "--template",
            "-i",
            type=click.Path(dir_okay=False, path_type=Path),
            envvar="TAGWATCH_TEMPLATE",
            help="Template to render (placeholders like @GIT_TAG_VERSION_FULL@).",
        ),
        click.option(
            "--output",
            "-o",
            type=click.Path(dir_okay=False, path_type=Path),
            envvar="TAGWATCH_OUTPUT",
            help="File the rendered template is written to.",
        ),
        click.option(
            "--working-dir",
            "-C",
            type=click.Path(file_okay=False, path_type=Path),
            envvar="TAGWATCH_WORKING_DIR",
            help="Directory git describe runs in [default: current directory].",
        ),
        click.option(
            "--git-executable",
            type=click.Path(dir_okay=False, path_type=Path),
            envvar="TAGWATCH_GIT_EXECUTABLE",
            help="Path to git [default: looked up on PATH].",
        ),
        click.option(
            "--build-dir",
            type=click.Path(file_okay=False, path_type=Path),
            envvar="TAGWATCH_BUILD_DIR",
            help="Directory for the registration record [default: current directory].",
        ),
        click.option(
            "--prefix",
            envvar="TAGWATCH_PREFIX",
            callback=check_prefix,
            help="Prefix of placeholder names [default: GIT_TAG_VERSION_].",
        ),
        click.option(
            "--timeout",
            type=click.FloatRange(min=0, min_open=True),
            envvar="TAGWATCH_TIMEOUT",
            help="Seconds before git describe is abandoned [default: 30].",
        ),
    ]

    for option in reversed(options):
        func = option(func)
    return func


def build_config(base: GateConfig, **overrides: Optional[Any]) -> GateConfig:
    """Merge command-line/environment overrides into ``base``."""
    return base.merged(
        **{name: overrides.get(name) for name in GATE_OPTION_NAMES}
    )
