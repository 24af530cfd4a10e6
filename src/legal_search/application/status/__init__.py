"""Source connection status checks."""

from .checker import StatusChecker

__all__ = ["StatusChecker"]
