"""Template substitution for rendered version files.

Templates use ``@NAME@`` placeholders, the same syntax as CMake's
``configure_file(... @ONLY)``::

    #define VERSION "@GIT_TAG_VERSION_FULL@"
    #define VERSION_DIRTY @GIT_TAG_VERSION_DIRTY@

Placeholders naming a known value are replaced; any other ``@...@`` text
is left as-is so that e-mail addresses and decorators survive rendering.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping, Union

from tagwatch.utils import get_logger, safe_read_file
from tagwatch.exceptions import FileOperationError, TemplateError

logger = get_logger("template")

PLACEHOLDER = re.compile(r"@([A-Za-z_][A-Za-z0-9_]*)@")


def render(template: str, values: Mapping[str, str]) -> str:
    """Substitute ``@NAME@`` placeholders in ``template`` with ``values``."""

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name in values:
            return values[name]
        logger.debug("Leaving unknown placeholder @%s@ untouched", name)
        return match.group(0)

    return PLACEHOLDER.sub(_replace, template)


def load_template(path: Union[str, Path]) -> str:
    """Read a template file.

    Raises:
        TemplateError: The template is missing, too large, or unreadable.
    """
    try:
        return safe_read_file(path)
    except FileOperationError as exc:
        raise TemplateError(
            f"Cannot read template: {exc.message}",
            template_path=str(path),
        ) from exc
