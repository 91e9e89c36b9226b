"""
Property graph discovery

Walks a bound view-model instance once and produces PropertyNodes, recursing
into nested view models and list items. Every scalar and trigger handle gets
a listener shim that turns engine change callbacks into PropertyChangedEvents.
"""

import threading
from typing import Any, Callable, Dict, List, Optional

from animbind.engine.protocols import INativeList, INativeProperty, INativeTrigger, INativeViewModel
from animbind.models.enums import PropertyKind, SCALAR_KINDS
from animbind.models.errors import DiscoveryInProgressError
from animbind.models.events import PropertyChangedEvent
from animbind.models.property_node import PropertyNode
from animbind.services.value_normalizer import ValueNormalizer
from animbind.utils.enum_helper import EnumHelper
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.DISCOVERY)

Emitter = Callable[[PropertyChangedEvent], None]

# Accessor method on the view model for each kind
_ACCESSORS: Dict[PropertyKind, str] = {
    PropertyKind.NUMBER: "number",
    PropertyKind.INTEGER: "number",
    PropertyKind.SYMBOL_LIST_INDEX: "number",
    PropertyKind.BOOLEAN: "boolean",
    PropertyKind.STRING: "string",
    PropertyKind.COLOR: "color",
    PropertyKind.ENUM_TYPE: "enumerator",
    PropertyKind.TRIGGER: "trigger",
    PropertyKind.IMAGE: "image",
    PropertyKind.FONT: "font",
    PropertyKind.ARTBOARD: "artboard",
    PropertyKind.VIEW_MODEL: "view_model",
    PropertyKind.LIST: "list",
}


def join_path(parent_path: str, name: str) -> str:
    return f"{parent_path}/{name}" if parent_path else name


class PropertyGraphDiscoverer:
    """
    Walks view-model property trees.

    Example:
        discoverer = PropertyGraphDiscoverer(ValueNormalizer())
        graph = discoverer.discover(view_model, on_change=queue.put)

    Without on_change, listener shims write new values straight into the
    nodes, which is enough for standalone use.
    """

    def __init__(self, normalizer: Optional[ValueNormalizer] = None):
        self.normalizer = normalizer or ValueNormalizer()
        self.walk_count = 0
        self.skipped_count = 0
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def discover(
        self,
        root: Optional[INativeViewModel],
        parent_path: str = "",
        on_change: Optional[Emitter] = None
    ) -> List[PropertyNode]:
        """
        Discover the property graph under root.

        Args:
            root: Bound view-model instance, or None when the animation has
                  no data binding
            on_change: Receives a PropertyChangedEvent for every engine-side
                       change
            parent_path: Prefix for every produced full_path

        Returns:
            Top-level nodes in engine order ([] when root is None)

        Raises:
            DiscoveryInProgressError: Another pass is running on this discoverer
        """
        if root is None:
            log.info("No view model bound, property graph is empty")
            return []

        if not self._lock.acquire(blocking=False):
            raise DiscoveryInProgressError()

        try:
            self.walk_count += 1
            emit = on_change or self._apply_in_place
            graph = self._walk(root, parent_path, emit)
        finally:
            self._lock.release()

        log.info(
            "Discovery complete",
            properties=len(graph),
            root_path=parent_path or "/"
        )
        return graph

    # ------------------------------------------------------------------
    # Walk
    # ------------------------------------------------------------------

    def _walk(self, view_model: Any, parent_path: str, emit: Emitter) -> List[PropertyNode]:
        try:
            descriptors = list(view_model.properties)
        except DiscoveryInProgressError:
            raise
        except Exception as ex:
            log.error("Cannot enumerate properties", path=parent_path or "/", error=str(ex))
            return []

        nodes: List[PropertyNode] = []
        seen = set()

        for descriptor in descriptors:
            name = getattr(descriptor, "name", None)
            try:
                kind = self._parse_kind(getattr(descriptor, "type", None))
                if kind is None:
                    self.skipped_count += 1
                    log.warn(
                        "Skipping property with unsupported kind",
                        path=join_path(parent_path, str(name)),
                        kind=EnumHelper.to_name(getattr(descriptor, "type", None))
                    )
                    continue

                if name in seen:
                    log.warn("Duplicate property name skipped", path=join_path(parent_path, name))
                    continue

                node = self._discover_property(view_model, name, kind, parent_path, emit)
                if node is not None:
                    nodes.append(node)
                    seen.add(name)
            except DiscoveryInProgressError:
                raise
            except Exception as ex:
                self.skipped_count += 1
                log.error(
                    "Failed to discover property",
                    path=join_path(parent_path, str(name)),
                    error=str(ex),
                    error_type=type(ex).__name__
                )

        return nodes

    @staticmethod
    def _parse_kind(tag: Any) -> Optional[PropertyKind]:
        if tag is None:
            return None
        try:
            return EnumHelper.to_enum(PropertyKind, tag)
        except (ValueError, TypeError):
            return None

    def _discover_property(
        self,
        view_model: Any,
        name: str,
        kind: PropertyKind,
        parent_path: str,
        emit: Emitter
    ) -> Optional[PropertyNode]:
        full_path = join_path(parent_path, name)
        handle = getattr(view_model, _ACCESSORS[kind])(name)
        if handle is None:
            self.skipped_count += 1
            log.warn("Accessor returned no handle", path=full_path, kind=kind.value)
            return None

        if kind in SCALAR_KINDS:
            return self._discover_scalar(name, kind, handle, full_path, emit)
        if kind == PropertyKind.TRIGGER:
            return self._discover_trigger(name, handle, full_path, emit)
        if kind == PropertyKind.VIEW_MODEL:
            children = self._walk(handle, full_path, emit)
            log.debug("Nested view model discovered", path=full_path, properties=len(children))
            return PropertyNode(name=name, kind=kind, handle=handle,
                                full_path=full_path, children=children)
        if kind == PropertyKind.LIST:
            return self._discover_list(name, handle, full_path, emit)

        # image, font, artboard: settable reference only
        log.debug("Reference property discovered", path=full_path, kind=kind.value)
        return PropertyNode(name=name, kind=kind, handle=handle, full_path=full_path)

    def _discover_scalar(
        self,
        name: str,
        kind: PropertyKind,
        handle: INativeProperty,
        full_path: str,
        emit: Emitter
    ) -> PropertyNode:
        node = PropertyNode(
            name=name,
            kind=kind,
            value=self.normalizer.from_native(kind, handle.value),
            handle=handle,
            full_path=full_path,
        )

        if kind == PropertyKind.ENUM_TYPE:
            options = getattr(handle, "values", None)
            if options is not None:
                node.options = [str(option) for option in options]

        normalizer = self.normalizer

        def on_native_change(native_value: Any) -> None:
            emit(PropertyChangedEvent(
                full_path, kind, normalizer.from_native(kind, native_value),
                node=node
            ))

        node.attach_listener(handle, on_native_change)
        return node

    def _discover_trigger(self, name: str, handle: INativeTrigger, full_path: str,
                          emit: Emitter) -> PropertyNode:
        node = PropertyNode(name=name, kind=PropertyKind.TRIGGER, handle=handle, full_path=full_path)

        def on_triggered(fired: Any = True) -> None:
            if fired:
                emit(PropertyChangedEvent(full_path, PropertyKind.TRIGGER, True, node=node))

        node.attach_listener(handle, on_triggered)
        return node

    def _discover_list(self, name: str, handle: INativeList, full_path: str,
                       emit: Emitter) -> PropertyNode:
        count = len(handle)
        items: List[PropertyNode] = []

        for index in range(count):
            item_path = join_path(full_path, str(index))
            try:
                item_vm = handle.instance_at(index)
            except Exception as ex:
                log.error("Cannot read list item", path=item_path, error=str(ex))
                continue
            if item_vm is None:
                log.warn("List item missing", path=item_path)
                continue

            items.append(PropertyNode(
                name=str(index),
                kind=PropertyKind.VIEW_MODEL,
                handle=item_vm,
                full_path=item_path,
                children=self._walk(item_vm, item_path, emit),
                index=index,
                label=getattr(item_vm, "name", None),
            ))

        log.debug("List discovered", path=full_path, items=count)
        return PropertyNode(name=name, kind=PropertyKind.LIST, value=count,
                            handle=handle, full_path=full_path, children=items)

    @staticmethod
    def _apply_in_place(event: PropertyChangedEvent) -> None:
        node = event.node
        if node is not None and event.kind != PropertyKind.TRIGGER:
            node.value = event.value
