"""
Presentation helpers shared by both hierarchy kinds.

Pure functions over the node model: the label shown for a node, whether it
should be drawn collapsed or expanded, and the item a view renders.
"""

from enum import IntEnum
from pathlib import PurePosixPath
from typing import Any, Optional
from urllib.parse import unquote, urlparse

from pydantic import BaseModel

from ..core.types import CallHierarchyNode, CallType, HierarchyNode


class CollapseState(IntEnum):
    """Collapsible state of a tree item."""
    NONE = 0
    COLLAPSED = 1
    EXPANDED = 2


class IconTheme(BaseModel):
    """Icons for the call classifications that get one."""
    base: Optional[str] = None
    derived: Optional[str] = None


class TreeItem(BaseModel):
    """What a view needs to draw one node."""
    label: str
    collapsible_state: CollapseState
    icon: Optional[str] = None
    node_id: Any = None
    # Arguments of the activate command bound to the item.
    has_children: bool = False


def uri_basename(uri: str) -> str:
    """Return the last path segment of a URI (``file:///a/b.cpp`` -> ``b.cpp``)."""
    path = unquote(urlparse(uri).path)
    return PurePosixPath(path).name


def render_label(node: HierarchyNode) -> str:
    """
    Build the display label of a node.

    Real nodes with a location get a ``(file:line)`` suffix, the line shown
    1-based. Synthetic group nodes always show their bare name.
    """
    if node.synthetic or node.location is None:
        return node.name
    line = node.location.range.start.line + 1
    return f"{node.name} ({uri_basename(node.location.uri)}:{line})"


def collapse_state(node: HierarchyNode) -> CollapseState:
    if node.num_children == 0:
        return CollapseState.NONE
    if node.synthetic:
        # Group nodes start closed even though their children are present.
        return CollapseState.EXPANDED if node.revealed else CollapseState.COLLAPSED
    if node.is_expanded:
        return CollapseState.EXPANDED
    return CollapseState.COLLAPSED


def call_icon(node: HierarchyNode, icons: IconTheme) -> Optional[str]:
    if not isinstance(node, CallHierarchyNode):
        return None
    if node.call_type == CallType.BASE:
        return icons.base
    if node.call_type == CallType.DERIVED:
        return icons.derived
    return None


def to_tree_item(node: HierarchyNode, icons: Optional[IconTheme] = None) -> TreeItem:
    return TreeItem(
        label=render_label(node),
        collapsible_state=collapse_state(node),
        icon=call_icon(node, icons or IconTheme()),
        node_id=node.id,
        has_children=node.is_expandable,
    )
