"""
Version field data model for tagwatch.

This module defines the structured result of parsing a ``git describe``
string. A description is either *tag-rooted* (anchored to a reachable
version tag such as ``v1.2.3``) or a *bare commit* (just an abbreviated
hash, when no tag is reachable).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class VersionFields:
    """
    Fields extracted from a single tag description.

    Instances are immutable and validated on construction; an instance
    that violates the grammar's invariants cannot exist.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        extra: Text attached directly to the numeric version
            (e.g. ``"~rc1"`` in ``2.4.0~rc1``).
        revision: Packaging (e.g. Debian) revision number.
        commits: Number of commits since the nearest tag.
        sha: Abbreviated commit hash (lowercase hex).
        dirty: Whether the working tree had uncommitted changes.
    """

    major: Optional[int] = None
    minor: Optional[int] = None
    patch: Optional[int] = None
    extra: Optional[str] = None
    revision: Optional[int] = None
    commits: Optional[int] = None
    sha: Optional[str] = None
    dirty: bool = False

    def __post_init__(self) -> None:
        if (self.major is None) != (self.minor is None):
            raise ValueError("major and minor must be given together")

        if (self.commits is None) != (self.sha is None) and self.is_tag_rooted:
            raise ValueError("commits and sha must be given together")

        if not self.is_tag_rooted:
            if self.sha is None:
                raise ValueError("a description needs a version or a commit hash")
            for name in ("patch", "extra", "revision", "commits"):
                if getattr(self, name) is not None:
                    raise ValueError(f"{name} requires a major.minor version")

        for name in ("major", "minor", "patch", "revision", "commits"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        if self.extra == "":
            raise ValueError("extra must be omitted rather than empty")

    # ------------------------------------------------------------------
    # Derived fields
    # ------------------------------------------------------------------

    @property
    def is_tag_rooted(self) -> bool:
        """Return True if the description is anchored to a version tag."""
        return self.major is not None

    @property
    def full(self) -> Optional[str]:
        """``major.minor`` or ``major.minor.patch``; ``None`` for bare commits."""
        if not self.is_tag_rooted:
            return None
        if self.patch is None:
            return f"{self.major}.{self.minor}"
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def full_extra(self) -> Optional[str]:
        """:attr:`full` followed by :attr:`extra`, if any."""
        full = self.full
        if full is None:
            return None
        return full + (self.extra or "")

    @property
    def any(self) -> str:
        """The commit hash if present, otherwise :attr:`full`."""
        if self.sha is not None:
            return self.sha
        # A valid instance without a sha is always tag-rooted
        return self.full or ""

    def to_dict(self) -> Dict[str, Any]:
        """Return all stored and derived fields as a dictionary."""
        return {
            "major": self.major,
            "minor": self.minor,
            "patch": self.patch,
            "extra": self.extra,
            "revision": self.revision,
            "commits": self.commits,
            "sha": self.sha,
            "dirty": self.dirty,
            "full": self.full,
            "full_extra": self.full_extra,
            "any": self.any,
        }
