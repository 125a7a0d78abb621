"""CLI helpers exposed for other modules."""

from .ui import get_key, select_with_arrows

__all__ = ["get_key", "select_with_arrows"]
