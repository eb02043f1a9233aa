"""
Core functionality exports for tagwatch.

Importing from here keeps user-facing imports clean and stable:

    from tagwatch.core import DescriptionParser, RenderGate
"""

from __future__ import annotations

from tagwatch.core.template import render
from tagwatch.core.formatter import FieldFormatter
from tagwatch.core.parser import DescriptionParser, parse_description
from tagwatch.core.probe import RepositoryProbe, find_git_executable
from tagwatch.core.render_gate import (
    ExecutionResult,
    Phase,
    Registration,
    RenderGate,
    load_registration,
)

__all__ = [
    "DescriptionParser",
    "parse_description",
    "FieldFormatter",
    "RepositoryProbe",
    "find_git_executable",
    "render",
    "RenderGate",
    "Phase",
    "Registration",
    "ExecutionResult",
    "load_registration",
]
