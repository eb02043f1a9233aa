"""
Support code shared by the core and the CLI.

- :mod:`~tagwatch.utils.logger`: the ``tagwatch`` logger hierarchy.
- :mod:`~tagwatch.utils.filesystem`: template reads and locked,
  content-compared writes of rendered files.
- :mod:`~tagwatch.utils.console`: rich status lines and the fields table.
"""

from __future__ import annotations

from tagwatch.utils.logger import (
    get_logger,
    setup_logging,
)
from tagwatch.utils.filesystem import (
    lock_path_for,
    safe_read_file,
    validate_path,
    write_if_changed,
)
from tagwatch.utils.console import (
    get_raw_console,
    print_error,
    print_fields_table,
    print_success,
    print_warning,
    reconfigure_console,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "safe_read_file",
    "write_if_changed",
    "validate_path",
    "lock_path_for",
    "print_error",
    "print_success",
    "print_warning",
    "print_fields_table",
    "get_raw_console",
    "reconfigure_console",
]
