"""CLI commands for traitforge."""

from . import (
    info,
    generate,
    config_cmd,
)

__all__ = [
    "info",
    "generate",
    "config_cmd",
]
