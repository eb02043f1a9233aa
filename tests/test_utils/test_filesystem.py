from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest
from filelock import Timeout

from tagwatch.exceptions import FileOperationError
from tagwatch.utils.filesystem import (
    _atomic_write,
    _require_file,
    lock_path_for,
    safe_read_file,
    validate_path,
    write_if_changed,
)


@pytest.fixture
def temp_file(tmp_path: Path) -> Path:
    """Create a temporary file with sample content."""
    file_path = tmp_path / "test.txt"
    file_path.write_text("test content")
    return file_path


@pytest.mark.unit
class TestRequireFile:
    """Tests for _require_file internal helper."""

    def test_validates_existing_file(self, temp_file: Path) -> None:
        """Test existing files are returned resolved."""
        result = _require_file(temp_file)

        assert result.is_absolute()
        assert result.is_file()

    def test_rejects_nonexistent_file(self, tmp_path: Path) -> None:
        """Test a missing file raises FileOperationError."""
        with pytest.raises(FileOperationError) as exc_info:
            _require_file(tmp_path / "missing.txt")

        assert "not found" in str(exc_info.value).lower()
        assert exc_info.value.operation == "read"

    def test_rejects_directory(self, tmp_path: Path) -> None:
        """Test a directory is not accepted as a file."""
        with pytest.raises(FileOperationError) as exc_info:
            _require_file(tmp_path)

        assert "not a file" in str(exc_info.value).lower()


@pytest.mark.unit
class TestAtomicWrite:
    """Tests for _atomic_write internal helper."""

    def test_writes_content(self, tmp_path: Path) -> None:
        """Test the bytes are written to the target."""
        target = tmp_path / "out.txt"

        _atomic_write(target, b"hello\n")

        assert target.read_text(encoding="utf-8") == "hello\n"

    def test_preserves_line_endings(self, tmp_path: Path) -> None:
        """Test no newline translation happens."""
        target = tmp_path / "out.txt"

        _atomic_write(target, b"a\r\nb\n")

        assert target.read_bytes() == b"a\r\nb\n"

    def test_no_temp_file_left_on_failure(self, tmp_path: Path) -> None:
        """Test the temporary file is removed when the replace fails."""
        target = tmp_path / "out.txt"

        with patch("tagwatch.utils.filesystem.os.replace", side_effect=OSError("boom")):
            with pytest.raises(FileOperationError) as exc_info:
                _atomic_write(target, b"data")

        assert exc_info.value.operation == "write"
        assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
class TestSafeReadFile:
    """Tests for safe_read_file."""

    def test_reads_content(self, temp_file: Path) -> None:
        """Test file content is returned."""
        assert safe_read_file(temp_file) == "test content"

    def test_size_limit(self, temp_file: Path) -> None:
        """Test files above max_size are rejected."""
        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(temp_file, max_size=4)

        assert "too large" in str(exc_info.value).lower()

    def test_size_limit_disabled(self, temp_file: Path) -> None:
        """Test max_size=None disables the limit."""
        assert safe_read_file(temp_file, max_size=None) == "test content"


@pytest.mark.unit
class TestWriteIfChanged:
    """Tests for write_if_changed."""

    def test_creates_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file is written and reported as changed."""
        target = tmp_path / "gen" / "version.h"

        assert write_if_changed(target, "v1\n") is True
        assert target.read_text(encoding="utf-8") == "v1\n"

    def test_identical_content_is_skipped(self, tmp_path: Path) -> None:
        """Test identical content leaves the file and its mtime alone."""
        target = tmp_path / "version.h"
        target.write_bytes(b"v1\n")
        os.utime(target, ns=(1_000_000_000, 1_000_000_000))

        assert write_if_changed(target, "v1\n") is False
        assert target.stat().st_mtime_ns == 1_000_000_000

    def test_different_content_is_written(self, tmp_path: Path) -> None:
        """Test changed content replaces the file."""
        target = tmp_path / "version.h"
        target.write_text("v1\n", encoding="utf-8")

        assert write_if_changed(target, "v2\n") is True
        assert target.read_text(encoding="utf-8") == "v2\n"

    def test_line_ending_difference_counts(self, tmp_path: Path) -> None:
        """Test the comparison is byte-exact."""
        target = tmp_path / "version.h"
        target.write_bytes(b"v1\r\n")

        assert write_if_changed(target, "v1\n") is True
        assert target.read_bytes() == b"v1\n"

    def test_lock_timeout(self, tmp_path: Path) -> None:
        """Test a held lock surfaces as FileOperationError."""
        target = tmp_path / "version.h"

        with patch(
            "tagwatch.utils.filesystem.FileLock.__enter__",
            side_effect=Timeout(str(lock_path_for(target))),
        ):
            with pytest.raises(FileOperationError) as exc_info:
                write_if_changed(target, "v1\n", lock_timeout=0.1)

        assert exc_info.value.operation == "lock"
        assert not target.exists()

    def test_lock_path(self, tmp_path: Path) -> None:
        """Test the lock sits next to the output with a .lock suffix."""
        assert lock_path_for(tmp_path / "version.h") == tmp_path / "version.h.lock"


@pytest.fixture
def umask_022() -> Generator[None, None, None]:
    """Run the test with a 022 umask."""
    previous = os.umask(0o022)
    yield
    os.umask(previous)


@pytest.mark.unit
@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
@pytest.mark.usefixtures("umask_022")
class TestWritePermissions:
    """Tests for the permission bits of written files."""

    def test_new_file_follows_umask(self, tmp_path: Path) -> None:
        """Test a new output gets the umask default, not owner-only."""
        target = tmp_path / "version.h"

        write_if_changed(target, "v1\n")

        assert stat.S_IMODE(target.stat().st_mode) == 0o644

    def test_existing_mode_is_kept(self, tmp_path: Path) -> None:
        """Test rewriting an output keeps the mode it already had."""
        target = tmp_path / "version.h"
        target.write_text("v1\n", encoding="utf-8")
        target.chmod(0o640)

        assert write_if_changed(target, "v2\n") is True

        assert stat.S_IMODE(target.stat().st_mode) == 0o640

    def test_atomic_write_applies_mode(self, tmp_path: Path) -> None:
        """Test the replaced file is not left with the temp file's 0600."""
        target = tmp_path / "record.json"

        _atomic_write(target, b"{}\n")

        assert stat.S_IMODE(target.stat().st_mode) == 0o644


@pytest.mark.unit
class TestValidatePath:
    """Tests for validate_path."""

    def test_relative_to_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test relative paths resolve against the current directory."""
        monkeypatch.chdir(tmp_path)

        assert validate_path("a/b.txt") == (tmp_path / "a" / "b.txt").resolve()

    def test_relative_to_base_dir(self, tmp_path: Path) -> None:
        """Test relative paths resolve against base_dir when given."""
        assert validate_path("x.in", base_dir=tmp_path) == (tmp_path / "x.in").resolve()

    def test_absolute_ignores_base_dir(self, tmp_path: Path) -> None:
        """Test absolute paths are not joined to base_dir."""
        absolute = tmp_path / "abs.txt"

        assert validate_path(absolute, base_dir="/elsewhere") == absolute.resolve()

    def test_expands_user(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test ~ is expanded."""
        monkeypatch.setenv("HOME", str(tmp_path))

        assert validate_path("~/v.h") == (tmp_path / "v.h").resolve()
