"""
Hierarchy sessions and the on-demand expansion protocol.

A session owns at most one root node. Children beyond what the backend
materialized with the root are fetched one level at a time when a view asks
for them. Every mutation that changes what a view would show is followed by
a change notification.

Concurrency model: everything runs on one event loop. Requests are not
de-duplicated or cancelled; when two expansions of the same node are in
flight the last one to resolve wins. An expansion that resolves after the
root it started under was replaced or cleared still updates its (now
orphaned) node but is not announced.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, Type, TypeVar

from lsprotocol import types as lsp

from ..core.events import ChangeNotifier
from ..core.types import HierarchyNode

logger = logging.getLogger(__name__)

NodeT = TypeVar("NodeT", bound=HierarchyNode)


class HierarchySession(ABC, Generic[NodeT]):
    """
    Base class for one hierarchy view.

    Subclasses provide the query parameters for roots and expansions and the
    backend method that answers them.

    Attributes:
        root: The current root node, or None when the view is inactive.
        notifier: Channel announcing that the visible tree changed.
    """

    node_model: Type[NodeT]
    name: str = "hierarchy"

    def __init__(self, backend: Any, notifier: Optional[ChangeNotifier] = None) -> None:
        self.backend = backend
        self.notifier = notifier or ChangeNotifier()
        self.root: Optional[NodeT] = None
        # Bumped on every open/close so a late root can tell it is stale.
        self._generation = 0

    @property
    def is_active(self) -> bool:
        return self.root is not None

    # --- Backend seam ---

    @abstractmethod
    async def _request(self, params: dict) -> Any:
        """Send one query of this hierarchy kind to the backend."""

    @abstractmethod
    def expansion_params(self, node: NodeT) -> dict:
        """Parameters fetching exactly one more level below ``node``."""

    @abstractmethod
    async def _build_root(self, position: lsp.TextDocumentPositionParams) -> NodeT:
        """Issue the root queries for ``position`` and return the root."""

    def _adopt_children(self, parent: NodeT, children: List[NodeT]) -> List[NodeT]:
        """Hook to prepare freshly fetched children before they join the tree."""
        return children

    async def _fetch(self, params: dict) -> NodeT:
        raw = await self._request(params)
        return self.node_model.from_wire(raw)

    # --- Session lifecycle ---

    async def open(self, position: lsp.TextDocumentPositionParams) -> Optional[NodeT]:
        """
        Build a new root for ``position`` and make it the session root.

        If the session is reopened or closed while the root is being built,
        the result is discarded and None is returned.

        Raises:
            BackendError: If a root query failed.
            MalformedResponseError: If a root response violated the schema.
        """
        self._generation += 1
        generation = self._generation

        root = await self._build_root(position)

        if generation != self._generation:
            logger.debug(f"Discarding stale {self.name} root for {root.name!r}")
            return None

        self.root = root
        logger.info(f"Opened {self.name} hierarchy at {root.name!r} ({root.num_children} children)")
        self.notifier.fire()
        return root

    def close(self) -> None:
        self._generation += 1
        if self.root is None:
            return
        logger.info(f"Closed {self.name} hierarchy")
        self.root = None
        self.notifier.fire()

    # --- Expansion protocol ---

    async def expand(self, node: NodeT) -> List[NodeT]:
        """
        Return the children of ``node``, fetching them if not yet materialized.

        A fully materialized node (including a leaf) is answered without a
        backend round trip. Otherwise one request is sent and its children
        replace whatever the node held.

        Raises:
            BackendError: If the request failed; the node is left unchanged.
            MalformedResponseError: If the response violated the schema.
        """
        if node.is_materialized:
            return node.children

        root = self.root
        params = self.expansion_params(node)
        logger.debug(f"Expanding {self.name} node {node.id!r} with {params}")

        response = await self._fetch(params)
        children = self._adopt_children(node, response.children)

        node.children = children
        node.num_children = response.num_children

        if self.root is not None and self.root is root:
            self.notifier.fire()
        else:
            logger.debug(f"Expansion of {node.id!r} resolved after its root was replaced")
        return children

    async def get_children(self, node: Optional[NodeT] = None) -> List[NodeT]:
        """
        View-facing accessor: ``None`` asks for the root.

        Returns an empty list when the session is inactive.
        """
        if self.root is None:
            return []
        if node is None:
            return [self.root]
        if node.synthetic:
            node.revealed = True
        return await self.expand(node)
