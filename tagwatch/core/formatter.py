"""Field formatting for template rendering.

Turns :class:`VersionFields` into the ordered name/value mapping handed to
templates. Absent integer fields become ``-1`` and absent text fields
become ``""``; no field is ever omitted, so templates can reference every
name unconditionally.
"""

from __future__ import annotations

import json
from typing import Dict, List, Optional

from tagwatch.models import VersionFields
from tagwatch.constants import FIELD_NAMES, MISSING_INTEGER, MISSING_TEXT


class FieldFormatter:
    """Format parsed fields as ``{NAME: text}`` pairs.

    Args:
        prefix: String prepended to every field name (for example
            ``"GIT_TAG_VERSION_"``). Defaults to no prefix.

    Example::

        >>> fields = DescriptionParser().parse("v1.2")
        >>> FieldFormatter().format(fields)["PATCH"]
        '-1'
    """

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix

    def format(self, fields: VersionFields) -> Dict[str, str]:
        """Return the formatted fields in :data:`FIELD_NAMES` order."""
        values = {
            "FULL": _text(fields.full),
            "FULL_EXTRA": _text(fields.full_extra),
            "MAJOR": _integer(fields.major),
            "MINOR": _integer(fields.minor),
            "PATCH": _integer(fields.patch),
            "EXTRA": _text(fields.extra),
            "REVISION": _integer(fields.revision),
            "COMMITS": _integer(fields.commits),
            "SHA": _text(fields.sha),
            "DIRTY": "1" if fields.dirty else "0",
            "ANY": fields.any,
        }
        return {f"{self.prefix}{name}": values[name] for name in FIELD_NAMES}

    def to_lines(self, fields: VersionFields) -> List[str]:
        """Return ``NAME=value`` lines, one per field."""
        return [f"{name}={value}" for name, value in self.format(fields).items()]

    def to_json(self, fields: VersionFields, *, indent: Optional[int] = 2) -> str:
        """Return the formatted fields as a JSON object."""
        return json.dumps(self.format(fields), indent=indent)


def _integer(value: Optional[int]) -> str:
    return MISSING_INTEGER if value is None else str(value)


def _text(value: Optional[str]) -> str:
    return MISSING_TEXT if value is None else value
