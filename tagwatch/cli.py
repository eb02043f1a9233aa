"""
Command group and console-script entry point for tagwatch.

The group resolves the options every subcommand shares (configuration
file, verbosity, color) before dispatching. :func:`main` turns the outcome
into a process exit status, which is what the host build system acts on:
a non-zero status fails the build step.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from tagwatch.config import load_config
from tagwatch.__version__ import __version__
from tagwatch.context import TagWatchContext
from tagwatch.exceptions import ConfigError, TagWatchError
from tagwatch.utils.logger import get_logger, setup_logging
from tagwatch.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")

#: Log level for each count of ``-v`` flags; counts above 2 mean DEBUG.
_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="TAGWATCH_CONFIG",
    help="Configuration file [default: tagwatch.toml or pyproject.toml].",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Log progress to stderr (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "--color/--no-color",
    default=True,
    envvar="TAGWATCH_COLOR",
    help="Color status lines and log levels.",
)
@click.version_option(
    version=__version__,
    prog_name="tagwatch",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """Stamp git version fields into generated build files.

    \b
    Commands:
      register   record a template/output pair at configure time
      execute    re-render the output before a build step
      run        register or execute, chosen by --build-time
      describe   show the version fields for the repository

    \b
    Typical build integration:
      tagwatch register -i version.h.in -o build/version.h --build-dir build
      tagwatch execute -r build/tagwatch-registration.json
    """
    _apply_color_choice(color)
    setup_logging(
        level=_VERBOSITY_LEVELS[min(verbose, len(_VERBOSITY_LEVELS) - 1)],
        verbose=verbose > 1,
    )

    try:
        file_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(EXIT_FAILURE) from exc

    ctx.obj = TagWatchContext(
        config=file_config,
        config_path=file_config.source_path,
        verbose=verbose,
        color=color,
    )
    logger.debug(
        "tagwatch %s, config=%s, verbose=%d, color=%s",
        __version__,
        file_config.source_path or "<defaults>",
        verbose,
        color,
    )


def _apply_color_choice(color: bool) -> None:
    """Export the color choice as ``NO_COLOR`` so every console honors it."""
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()


from tagwatch.commands.describe import describe  # noqa: E402
from tagwatch.commands.execute import execute  # noqa: E402
from tagwatch.commands.register import register  # noqa: E402
from tagwatch.commands.run import run  # noqa: E402

for _command in (register, execute, run, describe):
    cli.add_command(_command)


def main() -> int:
    """Run the CLI and return its exit status.

    Returns:
        0 on success, 1 when tagwatch reports an error (the build step
        should fail), click's status for usage errors (2), and 130 when
        interrupted.
    """
    try:
        rv = cli(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except (click.Abort, KeyboardInterrupt):
        print_warning("\nInterrupted")
        return EXIT_INTERRUPTED
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_FAILURE
    except TagWatchError as exc:
        print_error(str(exc))
        logger.debug("Error details: %s", exc.details or "<none>", exc_info=True)
        return EXIT_FAILURE
    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception")
        return EXIT_FAILURE

    return rv if isinstance(rv, int) else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
