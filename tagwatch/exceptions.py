"""
Errors raised by tagwatch.

Every error derives from :class:`TagWatchError` and carries a ``details``
mapping (command line, path, option name, ...) that is appended to the
message and logged at DEBUG level by the CLI.

None of these errors is recovered locally: each one aborts the current
build action and is surfaced to the user by the CLI.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, MutableMapping, Optional


class TagWatchError(Exception):
    """Base class for tagwatch errors.

    Args:
        message: What went wrong, in words a build log reader understands.
        details: Extra context, rendered as ``key=value`` pairs.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details or {})

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"details={dict(self.details)!r})"
        )


def _compact(**items: Any) -> Dict[str, Any]:
    """Return ``items`` without the entries whose value is ``None``."""
    return {key: value for key, value in items.items() if value is not None}


def _truncate(text: str, max_length: int = 200) -> str:
    """Shorten ``text`` to ``max_length`` characters plus an ellipsis."""
    return text if len(text) <= max_length else text[:max_length] + "..."


class MalformedDescription(TagWatchError):
    """A description did not match the version grammar.

    Args:
        description: The offending description string.
        message: Optional override for the error message.
    """

    __slots__ = ("description",)

    def __init__(
        self,
        description: str,
        *,
        message: Optional[str] = None,
    ) -> None:
        super().__init__(
            message
            or f"The git tag '{description}' does not appear to be a version string",
        )
        self.description = description


class ProbeUnavailable(TagWatchError):
    """git could not be found or started.

    Args:
        message: Error description.
        executable: Path or name of the executable.
        original_error: Exception raised while launching it.
    """

    __slots__ = ("executable", "original_error")

    def __init__(
        self,
        message: str,
        *,
        executable: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            message,
            _compact(
                executable=executable,
                original_error=str(original_error) if original_error else None,
            ),
        )
        self.executable = executable
        self.original_error = original_error


class ProbeFailed(TagWatchError):
    """git ran but could not describe the repository.

    Args:
        message: Error description.
        command: Command line that was executed.
        returncode: Exit status, if the process exited.
        stderr: Captured standard error; shortened in ``details``.
        working_dir: Directory the command ran in.
    """

    __slots__ = ("command", "returncode", "stderr", "working_dir")

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
        working_dir: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            _compact(
                command=command,
                returncode=returncode,
                cwd=working_dir,
                stderr=_truncate(stderr.strip()) if stderr else None,
            ),
        )
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        self.working_dir = working_dir


class ProbeTimeout(ProbeFailed):
    """git did not finish within the configured timeout.

    Args:
        message: Error description.
        timeout: Seconds that elapsed.
        **kwargs: Forwarded to :class:`ProbeFailed`.
    """

    __slots__ = ("timeout",)

    def __init__(
        self,
        message: str,
        *,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.timeout = timeout
        self.details.update(_compact(timeout=timeout))


class ConfigurationMissing(TagWatchError):
    """A setting required by the requested phase is not set.

    Args:
        option: Name of the missing setting.
        message: Optional override for the error message.
    """

    __slots__ = ("option",)

    def __init__(
        self,
        option: str,
        *,
        message: Optional[str] = None,
    ) -> None:
        super().__init__(
            message or f'The "{option}" setting must be defined.',
            {"option": option},
        )
        self.option = option


class ConfigError(TagWatchError):
    """A configuration file or registration record is invalid.

    Args:
        message: Error description.
        config_path: File that was being read.
        option: Offending option name, if known.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        super().__init__(message, _compact(config_path=config_path, option=option))
        self.config_path = config_path
        self.option = option


class TemplateError(TagWatchError):
    """A template could not be loaded.

    Args:
        message: Error description.
        template_path: Path to the template file.
    """

    __slots__ = ("template_path",)

    def __init__(
        self,
        message: str,
        *,
        template_path: Optional[str] = None,
    ) -> None:
        super().__init__(message, _compact(template=template_path))
        self.template_path = template_path


class FileOperationError(TagWatchError):
    """Reading, writing or locking a file failed.

    Args:
        message: Error description.
        file_path: File involved.
        operation: ``read``, ``write`` or ``lock``.
        original_error: Underlying exception.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            message,
            _compact(
                path=file_path,
                operation=operation,
                original_error=str(original_error) if original_error else None,
            ),
        )
        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error
