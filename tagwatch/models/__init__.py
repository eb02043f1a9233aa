"""
Data model exports for tagwatch.

Example:
    >>> from tagwatch.models import VersionFields
"""

from __future__ import annotations

from tagwatch.models.version_fields import VersionFields

__all__ = [
    "VersionFields",
]
