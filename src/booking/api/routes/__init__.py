"""Route group exports."""

from . import assignments, health, lookup

__all__ = ["assignments", "health", "lookup"]
