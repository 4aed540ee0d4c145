"""
Call hierarchy: who calls a symbol.

The root query materializes two levels so the first view is not empty.
Expansions always ask for every call classification; the classification
carried by each child is only used to pick its icon.
"""

import logging
from typing import Any

from lsprotocol import types as lsp

from ..core.types import CallHierarchyNode, CallRequest, CallType, position_fields
from .session import HierarchySession

logger = logging.getLogger(__name__)

ROOT_LEVELS = 2


class CallHierarchySession(HierarchySession[CallHierarchyNode]):
    """Session showing the callers of a symbol."""

    node_model = CallHierarchyNode
    name = "call"

    async def _request(self, params: dict) -> Any:
        return await self.backend.call_hierarchy(params)

    def root_params(self, position: lsp.TextDocumentPositionParams) -> dict:
        return CallRequest(
            **position_fields(position),
            callee=False,
            call_type=CallType.BASE | CallType.DERIVED,
            levels=ROOT_LEVELS,
        ).to_params()

    def expansion_params(self, node: CallHierarchyNode) -> dict:
        return CallRequest(
            id=node.id,
            callee=False,
            call_type=CallType.ALL,
            levels=1,
        ).to_params()

    async def _build_root(self, position: lsp.TextDocumentPositionParams) -> CallHierarchyNode:
        params = self.root_params(position)
        logger.debug(f"Requesting call hierarchy root with {params}")
        return await self._fetch(params)
