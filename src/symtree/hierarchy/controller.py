"""
Command surface offered to view adapters.

The controller owns one session and one click disambiguator per hierarchy
kind, and routes view requests (open/close, children, activation,
navigation) to them. Opening reports failure as a Result so a broken
backend never takes the view down with it; child fetches propagate their
error to the view that asked.
"""

import logging
from enum import StrEnum
from typing import Callable, Dict, List, Optional, Protocol

from lsprotocol import types as lsp

from ..backend.paths import PathConverter
from ..backend.protocol import HierarchyBackend
from ..core.errors import SymtreeError
from ..core.result import Err, Ok, Result
from ..core.types import HierarchyNode
from .call import CallHierarchySession
from .clicks import DEFAULT_DOUBLE_CLICK_TIMEOUT_MS, ClickDisambiguator
from .inheritance import InheritanceHierarchySession
from .session import HierarchySession

logger = logging.getLogger(__name__)


class HierarchyKind(StrEnum):
    CALL = "call"
    INHERITANCE = "inheritance"


class Navigator(Protocol):
    def __call__(self, location: lsp.Location, preserve_focus: bool) -> None:
        """Open the document at ``location`` and move the selection there."""
        ...


class HierarchyController:
    """
    Entry point for view adapters.

    Args:
        backend: Answers the hierarchy queries.
        navigator: Opens a location in the editor.
        double_click_timeout_ms: Double-click window for activations.
        paths: Converts server URIs back to client URIs on navigation.
        clock: Millisecond clock shared by the disambiguators.
    """

    def __init__(
        self,
        backend: HierarchyBackend,
        navigator: Navigator,
        double_click_timeout_ms: float = DEFAULT_DOUBLE_CLICK_TIMEOUT_MS,
        paths: Optional[PathConverter] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.navigator = navigator
        self.paths = paths or PathConverter()
        self.sessions: Dict[HierarchyKind, HierarchySession] = {
            HierarchyKind.CALL: CallHierarchySession(backend),
            HierarchyKind.INHERITANCE: InheritanceHierarchySession(backend),
        }
        extra = {"clock": clock} if clock is not None else {}
        self.disambiguators: Dict[HierarchyKind, ClickDisambiguator] = {
            kind: ClickDisambiguator(self.navigate, double_click_timeout_ms, **extra)
            for kind in HierarchyKind
        }

    def session(self, kind: HierarchyKind) -> HierarchySession:
        return self.sessions[HierarchyKind(kind)]

    def subscribe(self, kind: HierarchyKind, listener: Callable[[], None]) -> Callable[[], None]:
        """Register for change notifications of one hierarchy; returns the disposer."""
        return self.session(kind).notifier.subscribe(listener)

    # --- Commands ---

    async def open_call_hierarchy(
        self, position: lsp.TextDocumentPositionParams
    ) -> Result[Optional[HierarchyNode], SymtreeError]:
        return await self._open(HierarchyKind.CALL, position)

    def close_call_hierarchy(self) -> None:
        self._close(HierarchyKind.CALL)

    async def open_inheritance_hierarchy(
        self, position: lsp.TextDocumentPositionParams
    ) -> Result[Optional[HierarchyNode], SymtreeError]:
        return await self._open(HierarchyKind.INHERITANCE, position)

    def close_inheritance_hierarchy(self) -> None:
        self._close(HierarchyKind.INHERITANCE)

    async def get_children(
        self, kind: HierarchyKind, node: Optional[HierarchyNode] = None
    ) -> List[HierarchyNode]:
        return await self.session(kind).get_children(node)

    def activate(self, kind: HierarchyKind, node: HierarchyNode, has_children: bool) -> bool:
        return self.disambiguators[HierarchyKind(kind)].activate(node, has_children)

    def navigate(self, node: HierarchyNode) -> None:
        """Go to the node's location without taking focus from the tree."""
        if node.location is None:
            return
        location = lsp.Location(
            uri=self.paths.to_client(node.location.uri),
            range=node.location.range,
        )
        logger.debug(f"Navigating to {location.uri}:{location.range.start.line + 1}")
        self.navigator(location, preserve_focus=True)

    async def _open(
        self, kind: HierarchyKind, position: lsp.TextDocumentPositionParams
    ) -> Result[Optional[HierarchyNode], SymtreeError]:
        try:
            root = await self.session(kind).open(position)
        except SymtreeError as e:
            logger.error(f"Failed to open {kind} hierarchy: {e}")
            return Err(e)
        return Ok(root)

    def _close(self, kind: HierarchyKind) -> None:
        self.session(kind).close()
        # A click on the closed tree cannot pair with one on its successor.
        self.disambiguators[kind].reset()
