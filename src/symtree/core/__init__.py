"""Core types, errors and notification primitives."""

from .errors import BackendError, ConfigError, MalformedResponseError, SymtreeError
from .events import ChangeNotifier
from .result import Err, Ok, Result
from .types import (
    BASE_GROUP_NAME,
    CallHierarchyNode,
    CallType,
    HierarchyNode,
    InheritanceHierarchyNode,
    ServerInfo,
)

__all__ = [
    "BASE_GROUP_NAME",
    "BackendError",
    "CallHierarchyNode",
    "CallType",
    "ChangeNotifier",
    "ConfigError",
    "Err",
    "HierarchyNode",
    "InheritanceHierarchyNode",
    "MalformedResponseError",
    "Ok",
    "Result",
    "ServerInfo",
    "SymtreeError",
]
