"""
The slice of the backend that hierarchy sessions depend on.

Sessions only ever send two kinds of query; anything that can answer them
(a live language server connection, or an in-memory fake) is a backend.
"""

from typing import Any, Protocol


class HierarchyBackend(Protocol):
    async def call_hierarchy(self, params: dict) -> Any:
        """Answer a call hierarchy query with a raw node payload."""
        ...

    async def inheritance_hierarchy(self, params: dict) -> Any:
        """Answer a type inheritance query with a raw node payload."""
        ...
