"""
Filesystem helpers for templates and rendered outputs.

Rendered outputs are build inputs: a rewrite with identical content would
still bump their modification time and trigger a rebuild. Writes therefore
go through :func:`write_if_changed`, which compares bytes first and only
replaces the file when they differ. The comparison and the replacement
happen under one exclusive lock, and the replacement is atomic, so
concurrent build steps never see a half-written file.

Every failure surfaces as :class:`~tagwatch.exceptions.FileOperationError`
with the ``operation`` that failed (``read``, ``write`` or ``lock``).
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import Optional, Union

from filelock import FileLock, Timeout

from tagwatch.utils.logger import get_logger
from tagwatch.exceptions import FileOperationError
from tagwatch.constants import LOCK_SUFFIX, LOCK_TIMEOUT, MAX_FILE_SIZE

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _require_file(path: Path) -> Path:
    """Return ``path`` resolved, or raise if it is not an existing file."""
    if path.is_file():
        return path.resolve()

    reason = "Not a file" if path.exists() else "File not found"
    raise FileOperationError(
        f"{reason}: {path}",
        file_path=str(path),
        operation="read",
    )


def _target_mode(target: Path) -> int:
    """Return the permission bits ``target`` has, or would get if created."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        pass
    # os.umask can only be read by setting it
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _atomic_write(target: Path, data: bytes) -> None:
    """Replace ``target`` with ``data`` via a sibling temporary file.

    The temporary file is created owner-only; it takes the mode of the file
    it replaces (or the umask default for a new file) before the swap.
    """
    mode = _target_mode(target)
    fd, temp_name = tempfile.mkstemp(
        dir=str(target.parent),
        prefix=f".{target.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(temp_name, mode)
        os.replace(temp_name, target)
    except OSError as exc:
        try:
            os.unlink(temp_name)
        except FileNotFoundError:
            pass
        raise FileOperationError(
            f"Cannot write {target.name}: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def _read_existing(path: Path) -> Optional[bytes]:
    """Return the current bytes of ``path``, or ``None`` if it is absent."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise FileOperationError(
            f"Cannot read {path.name}: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def lock_path_for(path: PathLike) -> Path:
    """Return the lock file guarding writes to ``path``."""
    target = Path(path)
    return target.with_name(target.name + LOCK_SUFFIX)


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing anything over ``max_size`` bytes.

    Newlines are returned untranslated so that a rendered file keeps the
    line endings of its template.
    """
    path = _require_file(Path(file_path))

    try:
        size = path.stat().st_size
        if max_size is not None and size > max_size:
            raise FileOperationError(
                f"File too large: {size} bytes (max {max_size})",
                file_path=str(path),
                operation="read",
            )
        with open(path, "r", encoding=encoding, newline="") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Cannot read {path.name}: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def write_if_changed(
    file_path: PathLike,
    content: str,
    *,
    lock_timeout: float = LOCK_TIMEOUT,
) -> bool:
    """Write ``content`` (UTF-8) unless the file already holds exactly it.

    Args:
        file_path: Destination path; missing parent directories are created.
        content: Text to store.
        lock_timeout: Seconds to wait for the sibling ``.lock`` file.

    Returns:
        ``True`` if the file was written, ``False`` if it was left alone.

    Raises:
        FileOperationError: Locking, reading or writing failed.
    """
    path = Path(file_path)
    lock_file = lock_path_for(path)
    data = content.encode("utf-8")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileOperationError(
            f"Cannot create directory {path.parent}: {exc}",
            file_path=str(path.parent),
            operation="write",
            original_error=exc,
        ) from exc

    try:
        with FileLock(str(lock_file), timeout=lock_timeout):
            if _read_existing(path) == data:
                logger.debug("Content unchanged, not writing %s", path)
                return False
            _atomic_write(path, data)
    except Timeout as exc:
        raise FileOperationError(
            f"Timed out after {lock_timeout}s waiting for {lock_file.name}",
            file_path=str(lock_file),
            operation="lock",
            original_error=exc,
        ) from exc

    logger.debug("Wrote %s", path)
    return True


def validate_path(
    path: PathLike,
    *,
    base_dir: Optional[PathLike] = None,
) -> Path:
    """Normalize a configured path to absolute form.

    Relative paths are resolved against ``base_dir`` when given, otherwise
    against the current directory. ``~`` is expanded.
    """
    candidate = Path(path).expanduser()

    if not candidate.is_absolute() and base_dir is not None:
        candidate = Path(base_dir).expanduser() / candidate

    return candidate.resolve(strict=False)
