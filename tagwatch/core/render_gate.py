"""Two-phase gate that keeps a rendered version file in sync with git.

tagwatch is invoked in one of two phases:

1. **Registration**: once per build configuration. Validates and
   normalizes the configuration, locates git, stores everything in a
   registration record inside the build directory, and hands back the
   command the host build system must run before every build action.
2. **Execution**: before every build action, including the first. Runs
   ``git describe``, parses and formats the result, renders the template,
   and writes the output file only if the rendered text changed.

Execution keeps no state between runs. It always probes and renders; an
unchanged repository produces byte-identical text, which the write step
recognizes, so the output's modification time is left alone and
dependent build steps are not invalidated.

Typical usage::

    gate = RenderGate(load_config().merged(template="version.h.in",
                                           output="build/version.h"))
    registration = gate.register()
    # host build system runs registration.command before each build

    result = RenderGate.from_registration(registration.record_path).execute()
    result.changed   # False when nothing changed since the last build
"""

from __future__ import annotations

import sys
import json
from enum import Enum
from pathlib import Path
from dataclasses import dataclass, replace
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from tagwatch.config import GateConfig, validate_prefix
from tagwatch.models import VersionFields
from tagwatch.core.parser import DescriptionParser
from tagwatch.core.formatter import FieldFormatter
from tagwatch.core.template import load_template, render
from tagwatch.core.probe import RepositoryProbe, find_git_executable
from tagwatch.utils import get_logger, validate_path, write_if_changed
from tagwatch.exceptions import (
    ConfigError,
    ConfigurationMissing,
    ProbeUnavailable,
)
from tagwatch.constants import REGISTRATION_FILE_NAME, REGISTRATION_SCHEMA

logger = get_logger("render_gate")

Renderer = Callable[[str, Mapping[str, str]], str]

#: Options stored in a registration record.
_RECORD_PATHS = ("template", "output", "working_dir", "git_executable", "build_dir")


class Phase(str, Enum):
    """Invocation phase selected by the caller."""

    REGISTRATION = "registration"
    EXECUTION = "execution"


@dataclass(frozen=True)
class Registration:
    """Outcome of the registration phase.

    Attributes:
        config: Fully normalized configuration shared with execution.
        record_path: Registration record written to the build directory.
        command: Command the host build must run before every build action.
    """

    config: GateConfig
    record_path: Path
    command: Tuple[str, ...]


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one execution phase.

    Attributes:
        description: Raw ``git describe`` output.
        fields: Parsed version fields.
        values: Formatted name/value pairs substituted into the template.
        output: Path of the rendered file.
        changed: Whether the output file was (re)written.
    """

    description: str
    fields: VersionFields
    values: Dict[str, str]
    output: Path
    changed: bool


class RenderGate:
    """Registration and execution entry points over one configuration.

    Args:
        config: Gate configuration (paths may still be relative).
        probe: Probe to use instead of one built from the configuration.
        parser: Description parser.
        formatter: Field formatter; defaults to one using ``config.prefix``.
        renderer: Template substitution function.
    """

    def __init__(
        self,
        config: GateConfig,
        *,
        probe: Optional[RepositoryProbe] = None,
        parser: Optional[DescriptionParser] = None,
        formatter: Optional[FieldFormatter] = None,
        renderer: Renderer = render,
    ) -> None:
        self.config = config.normalized()
        self._probe = probe
        self.parser = parser or DescriptionParser()
        self.formatter = formatter or FieldFormatter(prefix=self.config.prefix)
        self.renderer = renderer

    @classmethod
    def from_registration(cls, record_path: Union[str, Path], **kwargs) -> "RenderGate":
        """Build a gate from a record written by :meth:`register`."""
        return cls(load_registration(record_path), **kwargs)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def run(self, phase: Phase) -> Union[Registration, ExecutionResult]:
        """Dispatch to :meth:`register` or :meth:`execute`."""
        if Phase(phase) is Phase.EXECUTION:
            return self.execute()
        return self.register()

    def register(self) -> Registration:
        """Validate the configuration and record it for later executions.

        Returns:
            The stored configuration and the execution command.

        Raises:
            ConfigurationMissing: ``template`` or ``output`` is not set.
            ProbeUnavailable: git cannot be found.
            FileOperationError: The record cannot be written.
        """
        self.config.require("template", "output")
        config = replace(
            self.config,
            git_executable=_resolve_executable(self.config.git_executable),
        )
        self.config = config

        record_path = config.build_dir / REGISTRATION_FILE_NAME
        if write_if_changed(record_path, _dump_record(config)):
            logger.info("Registered %s -> %s", config.template, config.output)
        else:
            logger.debug("Registration record already up to date: %s", record_path)

        command = (
            sys.executable,
            "-m",
            "tagwatch",
            "execute",
            "--registration",
            str(record_path),
        )
        return Registration(config=config, record_path=record_path, command=command)

    def describe(self) -> Tuple[str, VersionFields]:
        """Probe the repository and parse the result without writing anything.

        Returns:
            The raw description and its parsed fields.
        """
        description = self.probe.describe(self.config.working_dir)
        return description, self.parser.parse(description)

    def execute(self) -> ExecutionResult:
        """Probe, parse, format and render; write the output only on change.

        Every step that can fail runs before the output file is touched,
        so a failure leaves any previous output exactly as it was.

        Raises:
            ConfigurationMissing: ``template`` or ``output`` is not set.
            ProbeUnavailable, ProbeFailed: git could not describe the repo.
            MalformedDescription: The description is not a version string.
            TemplateError: The template cannot be read.
            FileOperationError: The output cannot be written.
        """
        self.config.require("template", "output")

        description, fields = self.describe()
        values = self.formatter.format(fields)
        text = self.renderer(load_template(self.config.template), values)

        changed = write_if_changed(self.config.output, text)
        if changed:
            logger.info("Updated %s (%s)", self.config.output, fields.any)
        else:
            logger.info("%s is up to date (%s)", self.config.output, fields.any)

        return ExecutionResult(
            description=description,
            fields=fields,
            values=values,
            output=self.config.output,
            changed=changed,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def probe(self) -> RepositoryProbe:
        """Probe built lazily so registration-only use never needs git."""
        if self._probe is None:
            self._probe = RepositoryProbe(
                _resolve_executable(self.config.git_executable),
                timeout=self.config.timeout,
            )
        return self._probe


def _resolve_executable(executable: Optional[Path]) -> Path:
    """Return an absolute path to git, searching ``PATH`` for bare names."""
    if executable is None:
        return find_git_executable()
    if not executable.is_absolute():
        return find_git_executable(str(executable))
    if not executable.is_file():
        raise ProbeUnavailable(
            f"git executable not found: {executable}",
            executable=str(executable),
        )
    return executable


def _dump_record(config: GateConfig) -> str:
    record = {"schema": REGISTRATION_SCHEMA}
    for name in _RECORD_PATHS:
        record[name] = str(getattr(config, name))
    record["prefix"] = config.prefix
    record["timeout"] = config.timeout
    return json.dumps(record, indent=2, sort_keys=True) + "\n"


def load_registration(record_path: Union[str, Path]) -> GateConfig:
    """Read the configuration stored by :meth:`RenderGate.register`.

    Raises:
        ConfigurationMissing: The record does not exist.
        ConfigError: The record is unreadable or malformed.
    """
    path = validate_path(record_path)
    path_str = str(path)

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationMissing(
            "registration",
            message=f"No registration record at {path}; run 'tagwatch register' first.",
        ) from exc
    except (OSError, ValueError) as exc:
        raise ConfigError(
            f"Cannot read registration record: {exc}",
            config_path=path_str,
        ) from exc

    if not isinstance(raw, dict) or raw.get("schema") != REGISTRATION_SCHEMA:
        raise ConfigError(
            "Unsupported registration record",
            config_path=path_str,
        )

    missing = [
        name for name in (*_RECORD_PATHS, "prefix", "timeout") if name not in raw
    ]
    if missing:
        raise ConfigError(
            f"Registration record lacks: {', '.join(missing)}",
            config_path=path_str,
        )

    try:
        return GateConfig(
            prefix=validate_prefix(str(raw["prefix"]), config_path=path_str),
            timeout=float(raw["timeout"]),
            source_path=path,
            **{name: Path(raw[name]) for name in _RECORD_PATHS},
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid registration record: {exc}",
            config_path=path_str,
        ) from exc
