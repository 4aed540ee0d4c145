"""
Exception hierarchy for symtree.

Backend failures are local to the request that issued them: the node or
session being built is left as it was and the error is handed back to the
caller.
"""

from typing import Optional


class SymtreeError(Exception):
    """Base class for all symtree errors."""


class BackendError(SymtreeError):
    """A request to the code-intelligence backend failed."""

    def __init__(self, method: str, cause: Optional[BaseException] = None):
        self.method = method
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Request '{method}' failed{detail}")


class BackendNotStartedError(BackendError):
    """A request was attempted before the backend connection was started."""

    def __init__(self, method: str):
        super().__init__(method)
        self.args = (f"Backend not started; cannot send '{method}'",)


class MalformedResponseError(SymtreeError):
    """The backend answered with a payload that violates the node schema."""


class ConfigError(SymtreeError):
    """The configuration file could not be loaded."""
