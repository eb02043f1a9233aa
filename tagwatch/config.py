"""Configuration loader for tagwatch.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``tagwatch.toml``: settings under ``[tagwatch]`` table
- ``pyproject.toml``: settings under ``[tool.tagwatch]`` table

Discovery order:

1. Explicit path from ``--config`` or ``TAGWATCH_CONFIG``
2. ``tagwatch.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.tagwatch]`` section

Configuration precedence: defaults < config file < environment < CLI args.
Environment variables (``TAGWATCH_TEMPLATE`` etc.) are read by the CLI
options themselves, so they arrive here as overrides.

Relative paths in a configuration file are resolved against the file's
directory; relative paths given on the command line are resolved against
the current directory.

Example (``tagwatch.toml``)::

    [tagwatch]
    template = "src/version.h.in"
    output = "build/generated/version.h"
    working_dir = "."
"""

from __future__ import annotations

import re
import tomli as tomllib
from pathlib import Path
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional

from tagwatch.utils import get_logger, validate_path
from tagwatch.exceptions import ConfigError, ConfigurationMissing
from tagwatch.constants import (
    CONFIG_FILE_NAME,
    DEFAULT_PREFIX,
    DEFAULT_TIMEOUT,
)

logger = get_logger("config")

#: Options holding filesystem paths.
PATH_OPTIONS = ("template", "output", "working_dir", "git_executable", "build_dir")

#: A prefix must keep ``@<prefix>FULL@`` a valid placeholder name.
PREFIX_PATTERN = re.compile(r"(?:[A-Za-z_][A-Za-z0-9_]*)?")


@dataclass
class GateConfig:
    """Settings shared by the registration and execution phases.

    Attributes:
        template: Template file rendered on every execution.
        output: Destination of the rendered template.
        working_dir: Directory ``git describe`` runs in. Defaults to the
            current directory.
        git_executable: Path to git. Looked up on ``PATH`` if unset.
        build_dir: Directory holding the registration record. Defaults to
            the current directory.
        prefix: Prefix of the placeholder names (``@<prefix>FULL@``).
        timeout: Seconds before ``git describe`` is abandoned.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    template: Optional[Path] = None
    output: Optional[Path] = None
    working_dir: Optional[Path] = None
    git_executable: Optional[Path] = None
    build_dir: Optional[Path] = None
    prefix: str = DEFAULT_PREFIX
    timeout: float = DEFAULT_TIMEOUT

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "source_path"
        }

    def merged(self, **overrides: Any) -> "GateConfig":
        """Return a copy with every non-``None`` override applied.

        Path overrides are normalized against the current directory.
        """
        changes: Dict[str, Any] = {}
        for name, value in overrides.items():
            if value is None:
                continue
            if name == "git_executable":
                value = _normalize_executable(value)
            elif name in PATH_OPTIONS:
                value = validate_path(value)
            changes[name] = value
        return replace(self, **changes)

    def normalized(self) -> "GateConfig":
        """Return a copy with defaults filled in and all paths absolute."""
        cwd = Path.cwd()
        return replace(
            self,
            template=validate_path(self.template) if self.template else None,
            output=validate_path(self.output) if self.output else None,
            working_dir=validate_path(self.working_dir or cwd),
            build_dir=validate_path(self.build_dir or cwd),
            git_executable=(
                _normalize_executable(self.git_executable)
                if self.git_executable
                else None
            ),
        )

    def require(self, *names: str) -> None:
        """Raise :class:`ConfigurationMissing` for the first unset option."""
        for name in names:
            if getattr(self, name) is None:
                raise ConfigurationMissing(name)


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    standalone = cwd / CONFIG_FILE_NAME
    if standalone.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, standalone)
        return standalone

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_tagwatch_section(pyproject_toml):
        logger.debug("Found [tool.tagwatch] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_tagwatch_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.tagwatch] section.

    Parse errors are ignored here; an unrelated broken pyproject.toml
    must not stop tagwatch from running with defaults.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "tagwatch" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> GateConfig:
    """Load and validate tagwatch configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`GateConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return GateConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("tagwatch", {})
    else:
        section = raw.get("tagwatch", {})

    if not section:
        logger.debug("Config file found but no tagwatch section, using defaults")
        return GateConfig(source_path=resolved)

    config = _parse_section(section, config_path=resolved)
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: Path,
) -> GateConfig:
    """Parse and validate a ``[tagwatch]`` or ``[tool.tagwatch]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = GateConfig()
    path_str = str(config_path)

    known = set(PATH_OPTIONS) | {"prefix", "timeout"}
    unknown = set(section.keys()) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=path_str,
        )

    for name in PATH_OPTIONS:
        if name not in section:
            continue
        val = section[name]
        if not isinstance(val, str) or not val:
            raise ConfigError(
                f"{name} must be a non-empty string, got {val!r}",
                config_path=path_str,
                option=name,
            )
        if name == "git_executable":
            config.git_executable = _normalize_executable(
                val, base_dir=config_path.parent
            )
        else:
            setattr(config, name, validate_path(val, base_dir=config_path.parent))

    if "prefix" in section:
        val = section["prefix"]
        if not isinstance(val, str):
            raise ConfigError(
                f"prefix must be a string, got {type(val).__name__}",
                config_path=path_str,
                option="prefix",
            )
        config.prefix = validate_prefix(val, config_path=path_str)

    if "timeout" in section:
        val = section["timeout"]
        # bool is an int subclass; reject it explicitly
        if isinstance(val, bool) or not isinstance(val, (int, float)) or val <= 0:
            raise ConfigError(
                f"timeout must be a positive number, got {val!r}",
                config_path=path_str,
                option="timeout",
            )
        config.timeout = float(val)

    return config


def validate_prefix(prefix: str, *, config_path: Optional[str] = None) -> str:
    """Return ``prefix`` if placeholders built from it can be matched.

    Raises:
        ConfigError: The prefix contains characters other than letters,
            digits and underscores, or starts with a digit.
    """
    if PREFIX_PATTERN.fullmatch(prefix) is None:
        raise ConfigError(
            f"prefix must be letters, digits and underscores, not starting "
            f"with a digit, got {prefix!r}",
            config_path=config_path,
            option="prefix",
        )
    return prefix


def _normalize_executable(value: Any, base_dir: Optional[Path] = None) -> Path:
    """Normalize an executable setting.

    A bare command name (``"git"``) is kept as-is for a later ``PATH``
    lookup; anything with a directory component becomes absolute.
    """
    candidate = Path(value)
    if len(candidate.parts) == 1 and not candidate.is_absolute():
        return candidate
    return validate_path(candidate, base_dir=base_dir)
