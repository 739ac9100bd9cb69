"""Route group exports."""

from . import drawing, export, health

__all__ = ["drawing", "export", "health"]
