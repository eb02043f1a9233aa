"""Repository probe: runs ``git describe`` in a working directory.

The probe is the only blocking operation in tagwatch. Every failure mode
(executable missing, non-zero exit, timeout) is raised as a
:class:`~tagwatch.exceptions.TagWatchError` subclass; the probe never
falls back to a default description.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from tagwatch.utils import get_logger
from tagwatch.exceptions import ProbeFailed, ProbeTimeout, ProbeUnavailable
from tagwatch.constants import (
    DEFAULT_GIT_EXECUTABLE,
    DEFAULT_TIMEOUT,
    DESCRIBE_ARGS,
)

logger = get_logger("probe")

PathLike = Union[str, Path]


def find_git_executable(name: str = DEFAULT_GIT_EXECUTABLE) -> Path:
    """Locate the git executable on ``PATH``.

    Args:
        name: Executable name or path to look up.

    Returns:
        Absolute path to the executable.

    Raises:
        ProbeUnavailable: No matching executable was found.
    """
    found = shutil.which(name)
    if found is None:
        raise ProbeUnavailable(
            f"Could not find the git executable '{name}' on PATH",
            executable=name,
        )
    return Path(found).resolve()


class RepositoryProbe:
    """Synchronous wrapper around ``git describe --always --dirty``.

    Args:
        executable: Path to the git executable.
        timeout: Seconds before the probe is abandoned.
        args: Arguments passed to the executable.
    """

    def __init__(
        self,
        executable: PathLike,
        *,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        args: Sequence[str] = DESCRIBE_ARGS,
    ) -> None:
        self.executable = Path(executable)
        self.timeout = timeout
        self.args = tuple(args)

    @property
    def command(self) -> List[str]:
        """Full command line run by :meth:`describe`."""
        return [str(self.executable), *self.args]

    def describe(self, working_dir: PathLike) -> str:
        """Run the probe and return its output without trailing whitespace.

        Args:
            working_dir: Directory inside the repository to describe.

        Returns:
            The raw description, e.g. ``"v1.2.3-4-gabcdef0-dirty"``.

        Raises:
            ProbeUnavailable: The executable or directory cannot be used.
            ProbeTimeout: The probe did not finish within :attr:`timeout`.
            ProbeFailed: The probe exited with a non-zero status.
        """
        command = self.command
        cwd = str(working_dir)
        logger.debug("Running %s in %s", " ".join(command), cwd)

        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ProbeTimeout(
                f"git describe did not finish within {self.timeout} seconds",
                timeout=self.timeout,
                command=" ".join(command),
                working_dir=cwd,
            ) from exc
        except OSError as exc:
            raise ProbeUnavailable(
                f"Cannot run {self.executable}: {exc.strerror or exc}",
                executable=str(self.executable),
                original_error=exc,
            ) from exc

        if completed.returncode != 0:
            raise ProbeFailed(
                f"git describe exited with status {completed.returncode}",
                command=" ".join(command),
                returncode=completed.returncode,
                stderr=completed.stderr,
                working_dir=cwd,
            )

        description = completed.stdout.rstrip()
        logger.debug("git describe output: %r", description)
        return description
