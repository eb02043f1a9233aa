"""Parser for ``git describe --always --dirty`` output.

Recognizes the descriptions git produces for repositories tagged with
semantic versions, for example::

    v1.2.3
    v1.2
    1.2.3
    1.2.3-4
    2f7c290
    v2.4.0~rc1-3
    v2.4.0~rc1-3-104-gffba103
    v1.2.3-dirty

A description is matched against two alternatives, in order:

1. **Tag-rooted**: optional one-letter prefix, ``major.minor[.patch]``,
   optional ``extra`` text (anything but ``-``), an optional packaging
   ``-revision`` and an optional ``-commits-g<sha>`` suffix.
2. **Bare commit**: just an abbreviated hash (``git describe --always``
   with no reachable tag).

Either may be followed by ``-dirty``. The whole string must be consumed.

The grammar is ambiguous: in ``v1.2.3-7-gabcd1234`` the ``7`` could be a
revision, but it is the commit count. A number after ``-`` is only taken
as the revision when it is not itself followed by ``-g<hex>``; when it
is, the matcher backtracks and reads it as the commit count instead::

    v1.2.3-7-gabcd1234     -> commits=7, sha=abcd1234
    v1.2.3-7               -> revision=7
    v1.2.3-9-7-gabcd1234   -> revision=9, commits=7, sha=abcd1234

Typical usage::

    from tagwatch.core import DescriptionParser

    fields = DescriptionParser().parse("v2.4.0~rc1-3")
    fields.full_extra   # '2.4.0~rc1'
    fields.revision     # 3
"""

from __future__ import annotations

import string
from typing import Any, Dict, Optional, Tuple

from tagwatch.utils import get_logger
from tagwatch.models import VersionFields
from tagwatch.exceptions import MalformedDescription
from tagwatch.constants import (
    DIRTY_SUFFIX,
    HEX_DIGITS,
    MIN_SHA_LENGTH,
    SEPARATOR,
    SHA_MARKER,
)

_DIGITS = "0123456789"
_PREFIX_LETTERS = string.ascii_letters

logger = get_logger("parser")


class DescriptionParser:
    """Stateless backtracking parser for tag descriptions.

    Each ``_match_*`` helper takes the text and a start offset and returns
    the matched value with the offset just past it, or ``None`` when
    nothing matches there. Alternatives are tried in priority order and
    the first one that consumes the whole input wins.

    Example::

        >>> parser = DescriptionParser()
        >>> parser.parse("v1.2.3-9-7-gabcd1234").revision
        9
        >>> parser.parse("abcd123-dirty").dirty
        True
    """

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self, description: str) -> VersionFields:
        """Parse a description into :class:`VersionFields`.

        Args:
            description: Single-line ``git describe`` output with trailing
                whitespace already removed.

        Returns:
            The parsed, validated fields.

        Raises:
            MalformedDescription: The description does not match the
                grammar or leaves unconsumed text.
        """
        dirty = description.endswith(DIRTY_SUFFIX)
        body = description[: -len(DIRTY_SUFFIX)] if dirty else description

        try:
            matched = self._match_tag_rooted(body)
        except ValueError as exc:
            # int() refuses digit runs beyond sys.get_int_max_str_digits()
            raise MalformedDescription(description) from exc
        if matched is None:
            matched = self._match_bare_commit(body)

        if matched is None:
            logger.debug("Description did not match the grammar: %r", description)
            raise MalformedDescription(description)

        fields = VersionFields(dirty=dirty, **matched)
        logger.debug("Parsed %r -> %s", description, fields)
        return fields

    # ------------------------------------------------------------------
    # Alternatives
    # ------------------------------------------------------------------

    def _match_tag_rooted(self, text: str) -> Optional[Dict[str, Any]]:
        """Match ``[prefix]major.minor[.patch][extra][-rev][-N-g<sha>]``."""
        pos = 0
        if text[:1] and text[0] in _PREFIX_LETTERS:
            pos = 1

        major = self._match_digits(text, pos)
        if major is None:
            return None
        major_value, pos = major

        if not text.startswith(".", pos):
            return None

        minor = self._match_digits(text, pos + 1)
        if minor is None:
            return None
        minor_value, pos = minor

        patch_value: Optional[int] = None
        if text.startswith(".", pos):
            patch = self._match_digits(text, pos + 1)
            if patch is not None:
                patch_value, pos = patch

        extra_value, pos = self._match_extra(text, pos)

        tail = self._match_tail(text, pos)
        if tail is None:
            return None

        return {
            "major": major_value,
            "minor": minor_value,
            "patch": patch_value,
            "extra": extra_value,
            **tail,
        }

    def _match_bare_commit(self, text: str) -> Optional[Dict[str, Any]]:
        """Match a lone abbreviated hash."""
        sha = self._match_sha(text, 0)
        if sha is None or sha[1] != len(text):
            return None
        return {"sha": sha[0]}

    # ------------------------------------------------------------------
    # Revision / commit facets
    # ------------------------------------------------------------------

    def _match_tail(self, text: str, pos: int) -> Optional[Dict[str, Any]]:
        """Match the optional revision and commit facets up to end of text.

        The revision reading is tried first; if it is forbidden by the
        lookahead, or the remainder does not match after it, the same
        position is retried without a revision.
        """
        revision = self._match_revision(text, pos)
        if revision is not None:
            revision_value, after = revision
            commit = self._match_commit_facet(text, after)
            if commit is not None:
                return {"revision": revision_value, **commit}

        commit = self._match_commit_facet(text, pos)
        if commit is not None:
            return {"revision": None, **commit}

        return None

    def _match_revision(self, text: str, pos: int) -> Optional[Tuple[int, int]]:
        """Match ``-<digits>`` unless the digits are a commit count."""
        if not text.startswith(SEPARATOR, pos):
            return None

        digits = self._match_digits(text, pos + len(SEPARATOR))
        if digits is None:
            return None

        if self._starts_sha_suffix(text, digits[1]):
            # Shadowed by "-g<sha>": these digits count commits instead
            return None

        return digits

    def _match_commit_facet(self, text: str, pos: int) -> Optional[Dict[str, Any]]:
        """Match an optional ``-<commits>-g<sha>`` that ends the text."""
        if pos == len(text):
            return {"commits": None, "sha": None}

        if not text.startswith(SEPARATOR, pos):
            return None

        commits = self._match_digits(text, pos + len(SEPARATOR))
        if commits is None:
            return None
        commits_value, pos = commits

        marker = SEPARATOR + SHA_MARKER
        if not text.startswith(marker, pos):
            return None

        sha = self._match_sha(text, pos + len(marker))
        if sha is None or sha[1] != len(text):
            return None

        return {"commits": commits_value, "sha": sha[0]}

    def _starts_sha_suffix(self, text: str, pos: int) -> bool:
        """Return True if ``-g`` and at least four hex digits start at ``pos``."""
        marker = SEPARATOR + SHA_MARKER
        if not text.startswith(marker, pos):
            return False
        return self._match_sha(text, pos + len(marker)) is not None

    # ------------------------------------------------------------------
    # Terminals
    # ------------------------------------------------------------------

    @staticmethod
    def _match_digits(text: str, pos: int) -> Optional[Tuple[int, int]]:
        """Match a run of ASCII digits."""
        end = pos
        while end < len(text) and text[end] in _DIGITS:
            end += 1
        if end == pos:
            return None
        return int(text[pos:end]), end

    @staticmethod
    def _match_sha(text: str, pos: int) -> Optional[Tuple[str, int]]:
        """Match at least :data:`MIN_SHA_LENGTH` lowercase hex digits."""
        end = pos
        while end < len(text) and text[end] in HEX_DIGITS:
            end += 1
        if end - pos < MIN_SHA_LENGTH:
            return None
        return text[pos:end], end

    @staticmethod
    def _match_extra(text: str, pos: int) -> Tuple[Optional[str], int]:
        """Match the free text up to the next separator (may be empty)."""
        end = text.find(SEPARATOR, pos)
        if end == -1:
            end = len(text)
        if end == pos:
            return None, pos
        return text[pos:end], end


def parse_description(description: str) -> VersionFields:
    """Parse ``description`` with a default :class:`DescriptionParser`."""
    return DescriptionParser().parse(description)
