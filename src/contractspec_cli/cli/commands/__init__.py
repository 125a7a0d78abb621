"""CLI command modules for contractspec."""

from . import vibe

__all__ = ["vibe"]
