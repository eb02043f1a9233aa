"""
Centralized constants for tagwatch.

This module defines immutable values used across tagwatch, including the
literals of the ``git describe`` grammar, the names of the formatted
version fields, probe settings, file names, and logging formats. All
values are intended to be treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Description grammar
# ---------------------------------------------------------------------------

#: Character separating the version from revision, commit count and SHA.
SEPARATOR: Final[str] = "-"

#: Literal marker preceding the abbreviated commit hash (``-g<sha>``).
SHA_MARKER: Final[str] = "g"

#: Minimum number of hex characters for a commit hash.
MIN_SHA_LENGTH: Final[int] = 4

#: Suffix appended by ``git describe --dirty`` for modified working trees.
DIRTY_SUFFIX: Final[str] = "-dirty"

#: Characters accepted in a commit hash.
HEX_DIGITS: Final[str] = "0123456789abcdef"

# ---------------------------------------------------------------------------
# Formatted fields
# ---------------------------------------------------------------------------

#: Field names in the order they are handed to templates.
FIELD_NAMES: Final[Sequence[str]] = (
    "FULL",
    "FULL_EXTRA",
    "MAJOR",
    "MINOR",
    "PATCH",
    "EXTRA",
    "REVISION",
    "COMMITS",
    "SHA",
    "DIRTY",
    "ANY",
)

#: Value emitted for integer fields absent from a description.
MISSING_INTEGER: Final[str] = "-1"

#: Value emitted for text fields absent from a description.
MISSING_TEXT: Final[str] = ""

#: Default prefix applied to field names when rendering templates.
DEFAULT_PREFIX: Final[str] = "GIT_TAG_VERSION_"

# ---------------------------------------------------------------------------
# Repository probe
# ---------------------------------------------------------------------------

#: Executable name searched on ``PATH`` when none is configured.
DEFAULT_GIT_EXECUTABLE: Final[str] = "git"

#: Arguments passed to the probe executable.
DESCRIBE_ARGS: Final[Sequence[str]] = ("describe", "--always", "--dirty")

#: Default probe timeout in seconds.
DEFAULT_TIMEOUT: Final[float] = 30.0

# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

#: Name of the registration record written to the build directory.
REGISTRATION_FILE_NAME: Final[str] = "tagwatch-registration.json"

#: Schema version of the registration record.
REGISTRATION_SCHEMA: Final[int] = 1

#: Suffix of the lock file guarding a rendered output.
LOCK_SUFFIX: Final[str] = ".lock"

#: Seconds to wait for another build action to release an output lock.
LOCK_TIMEOUT: Final[float] = 60.0

#: Maximum allowed template size in bytes.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

#: Stand-alone configuration file name.
CONFIG_FILE_NAME: Final[str] = "tagwatch.toml"

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
