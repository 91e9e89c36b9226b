"""Property graph models"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from animbind.models.enums import PropertyKind
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.DISCOVERY)


@dataclass(frozen=True)
class PropertyValue:
    """
    A value tagged with the kind it was normalized for.

    Produced by the ValueNormalizer and consumed by the native write step, so
    the write never has to guess what the value is.
    """
    kind: PropertyKind
    value: Any
    fallback: bool = False


@dataclass(eq=False)
class PropertyNode:
    """
    One discovered property.

    Attributes:
        name: Unique among siblings (list items use their index)
        kind: Declared property kind
        value: Canonical value; None for trigger and for image/font/artboard
               until first set; item count for lists
        handle: Engine handle (referenced, never owned)
        full_path: parent path + '/' + name
        children: Nested nodes (viewModel) or item sub-graphs (list)
        index: Position inside the parent list, for list items
        label: View-model name of a list item, when the engine reports one
        options: Declared enum option names, when the engine exposes them
    """
    name: str
    kind: PropertyKind
    value: Any = None
    handle: Any = None
    full_path: str = ""
    children: Optional[List['PropertyNode']] = None
    index: Optional[int] = None
    label: Optional[str] = None
    options: Optional[List[str]] = None

    # (handle, callback) pairs attached during discovery
    _listeners: List[Tuple[Any, Callable]] = field(default_factory=list, repr=False)

    @property
    def has_listeners(self) -> bool:
        return bool(self._listeners)

    def attach_listener(self, handle: Any, callback: Callable) -> None:
        handle.add_listener(callback)
        self._listeners.append((handle, callback))

    def detach(self) -> int:
        """
        Remove every listener attached to this node's handle.

        A handle that refuses to let go is logged and skipped: the listener is
        forgotten either way, and late callbacks from it are dropped by the
        registry because the node no longer has listeners.

        Returns:
            Number of listeners released (0 when called again)
        """
        removed = 0
        while self._listeners:
            handle, callback = self._listeners.pop()
            removed += 1
            try:
                handle.remove_listener(callback)
            except Exception as ex:
                log.error("Failed to remove listener", path=self.full_path,
                          error=str(ex), error_type=type(ex).__name__)
        return removed

    def detach_recursive(self) -> int:
        """Detach this node and every descendant"""
        removed = self.detach()
        for node in self.children or []:
            removed += node.detach_recursive()
        return removed

    def walk(self) -> Iterator['PropertyNode']:
        """This node followed by every descendant, depth first"""
        yield self
        for node in self.children or []:
            yield from node.walk()

    def snapshot(self) -> Any:
        """
        Plain value view: containers become {child name: snapshot}
        """
        if self.kind == PropertyKind.LIST:
            return [item.snapshot() for item in self.children or []]
        if self.kind == PropertyKind.VIEW_MODEL:
            return {node.name: node.snapshot() for node in self.children or []}
        return self.value


def walk_graph(graph: List[PropertyNode]) -> Iterator[PropertyNode]:
    """Every node of a graph, depth first"""
    for node in graph:
        yield from node.walk()


def graph_signature(graph: List[PropertyNode]) -> Dict[str, PropertyKind]:
    """{full_path: kind} for every node; used to compare discoveries"""
    return {node.full_path: node.kind for node in walk_graph(graph)}
