"""
Inheritance hierarchy: one tree showing both subtypes and supertypes.

The backend answers one direction per query, so the root is built from two
queries. The derived answer becomes the root; the base answer, if it has
any supertypes, is wrapped in a synthetic ``[[Base]]`` group inserted as the
root's first child.

Each node carries the direction its own expansion uses. Nodes are tagged
when they join the tree: everything under the group asks for supertypes,
everything else for subtypes, and freshly fetched children inherit the
direction of the node they were fetched for.
"""

import logging
from typing import Any, List

from lsprotocol import types as lsp

from ..core.errors import MalformedResponseError
from ..core.types import InheritanceHierarchyNode, InheritanceRequest, position_fields
from .session import HierarchySession

logger = logging.getLogger(__name__)


class InheritanceHierarchySession(HierarchySession[InheritanceHierarchyNode]):
    """Session showing the type hierarchy around a symbol."""

    node_model = InheritanceHierarchyNode
    name = "inheritance"

    async def _request(self, params: dict) -> Any:
        return await self.backend.inheritance_hierarchy(params)

    def root_params(self, position: lsp.TextDocumentPositionParams) -> dict:
        return InheritanceRequest(**position_fields(position), derived=True, levels=1).to_params()

    def base_params(self, entry: InheritanceHierarchyNode) -> dict:
        return InheritanceRequest(id=entry.id, kind=entry.kind, derived=False, levels=1).to_params()

    def expansion_params(self, node: InheritanceHierarchyNode) -> dict:
        return InheritanceRequest(
            id=node.id,
            kind=node.kind,
            derived=node.wants_derived,
            levels=1,
        ).to_params()

    def _adopt_children(
        self, parent: InheritanceHierarchyNode, children: List[InheritanceHierarchyNode]
    ) -> List[InheritanceHierarchyNode]:
        return [child.with_direction(parent.wants_derived) for child in children]

    async def _build_root(self, position: lsp.TextDocumentPositionParams) -> InheritanceHierarchyNode:
        params = self.root_params(position)
        logger.debug(f"Requesting derived inheritance root with {params}")
        entry = (await self._fetch(params)).with_direction(True)

        params = self.base_params(entry)
        logger.debug(f"Requesting base inheritance view with {params}")
        parent_entry = await self._fetch(params)

        if parent_entry.num_children == 0:
            return entry

        if not entry.is_materialized:
            raise MalformedResponseError(
                f"derived view of {entry.name!r} reports {entry.num_children} children "
                "but none were materialized"
            )

        group = InheritanceHierarchyNode.base_group(parent_entry.children)
        entry.children.insert(0, group)
        entry.num_children += 1
        return entry
