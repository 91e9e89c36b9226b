"""
Change queue - single-consumer channel between engine listeners and the registry

Listener shims only append; the registry is the only consumer and drains the
queue synchronously, so engine callbacks never mutate registry state
re-entrantly and per-property ordering matches emission order.

Items are (owner, event) pairs: owner is the AnimationInstance whose listener
produced the event, which lets the registry drop late events from instances
that were deregistered or replaced.
"""

import threading
from collections import deque
from typing import Any, Callable, Deque, List, Tuple

from animbind.models.events import Event

QueuedChange = Tuple[Any, Event]


class ChangeQueue:
    """
    Thread-safe FIFO of pending changes.

    Example:
        queue = ChangeQueue()
        queue.put(instance, PropertyChangedEvent("title", PropertyKind.STRING, "Hi"))
        for owner, event in queue.drain():
            ...
    """

    def __init__(self) -> None:
        self._items: Deque[QueuedChange] = deque()
        self._lock = threading.Lock()

    def put(self, owner: Any, event: Event) -> None:
        with self._lock:
            self._items.append((owner, event))

    def drain(self) -> List[QueuedChange]:
        """Remove and return every pending change (oldest first)"""
        with self._lock:
            items = list(self._items)
            self._items.clear()
        return items

    def discard(self, predicate: Callable[[Any, Event], bool]) -> int:
        """Drop pending changes matching predicate(owner, event); returns how many"""
        with self._lock:
            kept = [item for item in self._items if not predicate(*item)]
            dropped = len(self._items) - len(kept)
            self._items = deque(kept)
        return dropped

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
