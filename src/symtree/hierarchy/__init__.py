"""Lazy call and inheritance hierarchy trees."""

from .call import CallHierarchySession
from .clicks import ClickDisambiguator
from .inheritance import InheritanceHierarchySession
from .render import CollapseState, collapse_state, render_label, to_tree_item
from .session import HierarchySession

__all__ = [
    "CallHierarchySession",
    "ClickDisambiguator",
    "CollapseState",
    "HierarchySession",
    "InheritanceHierarchySession",
    "collapse_state",
    "render_label",
    "to_tree_item",
]
