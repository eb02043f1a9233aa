"""
tagwatch: git version stamping for build pipelines

tagwatch turns ``git describe --always --dirty`` output such as
``v2.4.0~rc1-3-104-gffba103-dirty`` into named version fields and renders
them into a generated source file. The file is re-rendered before every
build but only rewritten when its content changes, so builds that depend
on it are not invalidated needlessly.

Example::

    from tagwatch import DescriptionParser, FieldFormatter

    fields = DescriptionParser().parse("v1.2.3-7-gabcd1234")
    FieldFormatter().format(fields)["COMMITS"]   # '7'
"""

from __future__ import annotations

from tagwatch.__version__ import __version__
from tagwatch.config import GateConfig, load_config
from tagwatch.models import VersionFields
from tagwatch.core import (
    DescriptionParser,
    ExecutionResult,
    FieldFormatter,
    Phase,
    Registration,
    RenderGate,
    RepositoryProbe,
    parse_description,
    render,
)

__author__ = "tagwatch Contributors"
__license__ = "MIT"
__description__ = "Stamp git describe version fields into generated source files."

__all__ = [
    "__version__",
    "VersionFields",
    "DescriptionParser",
    "parse_description",
    "FieldFormatter",
    "RepositoryProbe",
    "RenderGate",
    "Phase",
    "Registration",
    "ExecutionResult",
    "GateConfig",
    "load_config",
    "render",
]
