"""
Click disambiguation for tree views.

Views report every click on a node as a single "activate" signal. A second
activation of the same node inside the double-click window is turned into a
navigation; a first activation only selects (and lets the view expand).
Leaves navigate on every activation.
"""

import logging
import time
from typing import Any, Callable, Optional

from ..core.types import HierarchyNode

logger = logging.getLogger(__name__)

DEFAULT_DOUBLE_CLICK_TIMEOUT_MS = 500


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class ClickDisambiguator:
    """
    Per-hierarchy-kind state machine over ``(last_id, last_timestamp)``.

    Args:
        navigate: Called with the node to open its location.
        double_click_timeout_ms: Width of the double-click window.
        clock: Millisecond clock, injectable for tests.
    """

    def __init__(
        self,
        navigate: Callable[[HierarchyNode], None],
        double_click_timeout_ms: float = DEFAULT_DOUBLE_CLICK_TIMEOUT_MS,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        self._navigate = navigate
        self.double_click_timeout_ms = double_click_timeout_ms
        self._clock = clock
        self.last_id: Any = None
        self.last_timestamp: Optional[float] = None

    def activate(self, node: HierarchyNode, has_children: bool) -> bool:
        """
        Handle one activation of ``node``.

        Returns:
            bool: True if the activation navigated to the node.
        """
        if node.location is None:
            return False

        if not has_children:
            self._navigate(node)
            return True

        now = self._clock()
        if self.last_timestamp is None or node.id != self.last_id:
            self.last_id = node.id
            self.last_timestamp = now
            return False

        elapsed = now - self.last_timestamp
        self.last_timestamp = now
        if elapsed < self.double_click_timeout_ms:
            logger.debug(f"Double activation of {node.id!r} after {elapsed:.0f}ms")
            self._navigate(node)
            return True
        return False

    def reset(self) -> None:
        self.last_id = None
        self.last_timestamp = None
