"""
Change notification.

Views subscribe to a notifier and are told, without payload, to re-read the
tree whenever a session opens, closes, or a node's children are replaced.
"""

from typing import Callable, List

Listener = Callable[[], None]


class ChangeNotifier:
    """Explicit observer registry; ``subscribe`` returns the matching disposer."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def fire(self) -> None:
        # Copy so a listener may dispose itself while being notified.
        for listener in list(self._listeners):
            listener()
