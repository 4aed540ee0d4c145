"""Backend connection and path conversion."""

from .paths import PathConverter
from .protocol import HierarchyBackend

__all__ = ["HierarchyBackend", "PathConverter"]
