"""
tagwatch version information.

This module provides the single source of truth for the package version.
"""

from __future__ import annotations

__version__ = "0.3.0"
