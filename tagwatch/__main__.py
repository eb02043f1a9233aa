"""
Executable module for tagwatch.

Running:
    python -m tagwatch

is equivalent to:
    tagwatch

The registration phase prints ``python -m tagwatch execute ...`` as the
build-time command, so this entry point must not depend on the console
script being on ``PATH``.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Report a broken installation on stderr."""
    try:
        from tagwatch.__version__ import __version__
    except ImportError:
        __version__ = "<unknown>"

    sys.stderr.write(f"tagwatch version: {__version__}\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    sys.stderr.write("\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """
    Main entrypoint when executing `python -m tagwatch`.

    Returns:
        Exit code returned by the CLI.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from tagwatch.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
