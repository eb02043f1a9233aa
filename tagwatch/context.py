"""
Per-invocation state shared by tagwatch subcommands.

The command group builds one :class:`TagWatchContext` from the global
options and the loaded configuration file; subcommands receive it through
:data:`pass_context` and layer their own options on top of ``config``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from tagwatch.config import GateConfig


class TagWatchContext:
    """Global options and file configuration for one CLI invocation.

    Attributes:
        config_path: Configuration file in effect, if any.
        config: Settings from that file, or defaults.
        verbose: Number of ``-v`` flags (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
    """

    __slots__ = ("config_path", "config", "verbose", "color")

    def __init__(
        self,
        *,
        config: Optional[GateConfig] = None,
        config_path: Optional[Path] = None,
        verbose: int = 0,
        color: bool = True,
    ) -> None:
        self.config: GateConfig = config if config is not None else GateConfig()
        self.config_path: Optional[Path] = config_path
        self.verbose: int = verbose
        self.color: bool = color


#: Injects the :class:`TagWatchContext`, creating a default one if needed.
pass_context = click.make_pass_decorator(TagWatchContext, ensure=True)
