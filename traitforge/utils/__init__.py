"""Pure utility helpers for traitforge."""

from .callbacks import ItemProgressCallback

__all__ = ["ItemProgressCallback"]
