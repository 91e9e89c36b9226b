"""
Instance registry - live animation instances by id

Host-facing operations never raise for expected failures (unknown id,
unknown path, kind mismatch, engine rejection): they return False / None /
empty and log a diagnostic. Engine change notifications flow through the
ChangeQueue and are drained here, in order, after every operation.
"""

import inspect
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional

from animbind.engine.protocols import IAssetSlot, INativeInput, INativeViewModel, ITextArtboard
from animbind.models.enums import InputKind, PropertyKind
from animbind.models.errors import (
    AnimBindError,
    AssetLoadError,
    InputNotFoundError,
    InstanceNotFoundError,
    KindMismatchError,
    NativeRejectionError,
    PropertyNotFoundError,
)
from animbind.models.events import (
    Event,
    EventSource,
    InputChangedEvent,
    InstanceLifecycleEvent,
    PropertiesDiscoveredEvent,
    PropertyChangedEvent,
    StateMachineEvent,
)
from animbind.models.instance import AnimationInstance
from animbind.models.property_node import PropertyNode, PropertyValue, walk_graph
from animbind.services.asset_loader import AssetLoader, needs_loading
from animbind.services.change_queue import ChangeQueue
from animbind.services.discovery import PropertyGraphDiscoverer
from animbind.services.event_bus import EventBus
from animbind.services.input_binding import InputBinding, bind_inputs
from animbind.services.path_resolver import PathResolver, split_path
from animbind.services.value_normalizer import ValueNormalizer
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.REGISTRY)
log_asset = get_logger().for_category(LogCategory.ASSET)
log_input = get_logger().for_category(LogCategory.INPUT)

# (instance_id, path, kind, value)
ChangeCallback = Callable[[str, str, PropertyKind, Any], None]

_FLOAT_KINDS = (PropertyKind.NUMBER, PropertyKind.INTEGER, PropertyKind.SYMBOL_LIST_INDEX)


class InstanceRegistry:
    """
    Registry of live instances.

    Example:
        registry = InstanceRegistry(on_change=lambda iid, path, kind, value: ...)
        registry.load("hero", view_model, inputs=state_machine.inputs)

        registry.update_nested_property("hero", "settings/theme", "light")   # True
        registry.update_property("hero", "visible", "yes")                   # False (kind mismatch)
        registry.get_property_value("hero", "settings.theme")                # "light"

        registry.deregister("hero")

    Thread model: operations are serialized with a re-entrant lock so native
    callbacks arriving on other threads only ever touch the ChangeQueue.
    """

    def __init__(
        self,
        normalizer: Optional[ValueNormalizer] = None,
        discoverer: Optional[PropertyGraphDiscoverer] = None,
        resolver: Optional[PathResolver] = None,
        asset_loader: Optional[AssetLoader] = None,
        event_bus: Optional[EventBus] = None,
        on_change: Optional[ChangeCallback] = None
    ):
        self.normalizer = normalizer or ValueNormalizer()
        self.discoverer = discoverer or PropertyGraphDiscoverer(self.normalizer)
        self.resolver = resolver or PathResolver()
        self.asset_loader = asset_loader or AssetLoader()
        self.event_bus = event_bus
        self.on_change = on_change

        self._instances: Dict[str, AnimationInstance] = {}
        self._queue = ChangeQueue()
        self._lock = threading.RLock()
        self._draining = False
        self.dropped_events = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def emitter_for(self, instance: AnimationInstance) -> Callable[[Event], None]:
        """
        Listener sink for an instance's graph.

        Pass it as on_change when discovering a graph outside load().
        """
        queue = self._queue

        def emit(event: Event) -> None:
            event.instance_id = instance.id
            queue.put(instance, event)

        return emit

    def register(self, instance_id: str, instance: AnimationInstance) -> AnimationInstance:
        """
        Insert or replace the entry under instance_id.

        The last register wins; a replaced entry is torn down first.
        """
        with self._lock:
            previous = self._instances.pop(instance_id, None)
            if previous is not None and previous is not instance:
                log.warn("Replacing registered instance", instance=instance_id)
                self._teardown(previous)

            instance.id = instance_id
            self._instances[instance_id] = instance
            log.info(
                "Instance registered",
                instance=instance_id,
                properties=len(instance.graph),
                inputs=len(instance.inputs)
            )
            self._publish(InstanceLifecycleEvent(instance_id, registered=True,
                                                 replaced=previous is not None))
        self._drain()
        return instance

    def load(
        self,
        instance_id: str,
        root: Optional[INativeViewModel],
        inputs: Optional[Iterable[INativeInput]] = None,
        image_handle: Optional[IAssetSlot] = None,
        font_handle: Optional[IAssetSlot] = None,
        artboards: Optional[Iterable[str]] = None,
        artboard: Optional[ITextArtboard] = None
    ) -> AnimationInstance:
        """
        Discover root's property graph and register the result.

        Args:
            instance_id: Host-chosen id
            root: Bound view-model instance (None: animation without data binding)
            inputs: State-machine input handles
            image_handle: Intercepted image asset slot
            font_handle: Intercepted font asset slot
            artboards: Artboard names exposed by the file
            artboard: Active artboard, for text runs

        Raises:
            DiscoveryInProgressError: Called from inside another discovery
        """
        instance = AnimationInstance(
            id=instance_id,
            root=root,
            image_handle=image_handle,
            font_handle=font_handle,
            artboard=artboard,
            artboards=list(artboards or []),
        )
        emit = self.emitter_for(instance)
        instance.graph = self.discoverer.discover(root, on_change=emit)
        instance.inputs = bind_inputs(inputs, on_change=emit)

        self.register(instance_id, instance)
        self._publish(PropertiesDiscoveredEvent(
            instance_id, [node.full_path for node in walk_graph(instance.graph)]
        ))
        return instance

    def deregister(self, instance_id: str) -> bool:
        """
        Tear down and drop an instance. Unknown ids are a logged no-op.

        Returns:
            True when an instance was removed
        """
        with self._lock:
            instance = self._instances.pop(instance_id, None)
            if instance is None:
                log.info("Deregister ignored, unknown instance", instance=instance_id)
                return False

            self._teardown(instance)
            log.info("Instance deregistered", instance=instance_id)
            self._publish(InstanceLifecycleEvent(instance_id, registered=False))
            return True

    def _teardown(self, instance: AnimationInstance) -> None:
        dropped = self._queue.discard(lambda owner, event: owner is instance)
        try:
            removed = instance.release()
        except Exception as ex:
            # Drop resources even when the engine throws mid-release
            log.error("Instance release failed", instance=instance.id, error=str(ex),
                      error_type=type(ex).__name__)
            instance.path_cache.clear()
            instance.image_cache.clear()
            instance.image_handle = None
            instance.font_handle = None
            instance.artboard = None
            instance.root = None
            removed = 0
        log.debug("Instance released", instance=instance.id, listeners=removed,
                  pending_dropped=dropped)

    def get_instance(self, instance_id: str) -> Optional[AnimationInstance]:
        return self._instances.get(instance_id)

    def instance_ids(self) -> List[str]:
        with self._lock:
            return list(self._instances)

    def __contains__(self, instance_id: str) -> bool:
        return instance_id in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    # ------------------------------------------------------------------
    # Property updates
    # ------------------------------------------------------------------

    def update_property(self, instance_id: str, name: str, value: Any) -> bool:
        """Set a top-level property; False on any expected failure"""
        return self._guarded_update(instance_id, name, value, nested=False)

    def update_nested_property(self, instance_id: str, path: str, value: Any) -> bool:
        """Set a property by '/' or '.' path; single segments use update_property"""
        segments = split_path(path)
        if segments is not None and len(segments) == 1:
            return self.update_property(instance_id, segments[0], value)
        return self._guarded_update(instance_id, path, value, nested=True)

    async def update_property_async(self, instance_id: str, name: str, value: Any) -> bool:
        """update_property that also fetches/reads image and font sources"""
        return await self._guarded_update_async(instance_id, name, value, nested=False)

    async def update_nested_property_async(self, instance_id: str, path: str, value: Any) -> bool:
        return await self._guarded_update_async(instance_id, path, value, nested=True)

    def _guarded_update(self, instance_id: str, path: str, value: Any, nested: bool) -> bool:
        try:
            with self._lock:
                instance = self._require(instance_id)
                node = self._find(instance, path, nested)
                if node.kind.is_asset and needs_loading(value):
                    value = self._decode_sync(node, value)
                self._apply(node, value)
            return True
        except AnimBindError as ex:
            self._log_failure(instance_id, path, ex)
            return False
        except Exception as ex:
            log.error("Unexpected update failure", instance=instance_id, path=path,
                      error=str(ex), error_type=type(ex).__name__)
            return False
        finally:
            self._drain()

    async def _guarded_update_async(self, instance_id: str, path: str, value: Any, nested: bool) -> bool:
        try:
            with self._lock:
                instance = self._require(instance_id)
                node = self._find(instance, path, nested)

            if node.kind.is_asset and needs_loading(value):
                # No lock across the await; the last fetch to complete wins
                value = await self.asset_loader.load(value)

            with self._lock:
                if self._instances.get(instance_id) is not instance:
                    log.warn("Instance went away during asset load", instance=instance_id, path=path)
                    return False
                self._apply(node, value)
            return True
        except AnimBindError as ex:
            self._log_failure(instance_id, path, ex)
            return False
        except Exception as ex:
            log.error("Unexpected update failure", instance=instance_id, path=path,
                      error=str(ex), error_type=type(ex).__name__)
            return False
        finally:
            self._drain()

    def _require(self, instance_id: str) -> AnimationInstance:
        instance = self._instances.get(instance_id)
        if instance is None:
            raise InstanceNotFoundError(instance_id)
        return instance

    def _find(self, instance: AnimationInstance, path: str, nested: bool) -> PropertyNode:
        if nested:
            node = self.resolver.resolve(instance, path)
        else:
            node = instance.top_level(path)
        if node is None:
            raise PropertyNotFoundError(instance.id, path)
        return node

    def _decode_sync(self, node: PropertyNode, value: Any) -> Any:
        if isinstance(value, str):
            raise AssetLoadError(value, "URL and file sources need update_property_async")
        decoder = self.asset_loader.decoder
        if decoder is None:
            raise AssetLoadError("bytes", "no decoder configured")

        try:
            decoded = decoder.decode(bytes(value))
        except Exception as ex:
            raise AssetLoadError("bytes", f"decode failed: {ex}") from ex
        if inspect.isawaitable(decoded):
            if inspect.iscoroutine(decoded):
                decoded.close()
            raise AssetLoadError("bytes", "decoder is async, use update_property_async")
        if decoded is None:
            raise AssetLoadError("bytes", "decoder returned nothing")
        return decoded

    def _apply(self, node: PropertyNode, value: Any) -> None:
        """Normalize, write to the engine, then store the canonical value"""
        normalized = self.normalizer.normalize(node.kind, value)
        self._write_native(node, normalized)

        if node.kind != PropertyKind.TRIGGER:
            node.value = normalized.value
        log.debug(
            "Property updated",
            path=node.full_path,
            kind=node.kind.value,
            value=normalized.value,
            fallback=normalized.fallback
        )

    @staticmethod
    def _write_native(node: PropertyNode, normalized: PropertyValue) -> None:
        handle = node.handle
        value = normalized.value
        try:
            if node.kind == PropertyKind.TRIGGER:
                if value:
                    handle.trigger()
            elif node.kind == PropertyKind.COLOR:
                handle.value = value.to_argb()
            elif node.kind in _FLOAT_KINDS:
                handle.value = float(value)
            else:
                handle.value = value
        except AnimBindError:
            raise
        except Exception as ex:
            raise NativeRejectionError(node.full_path, str(ex) or type(ex).__name__) from ex

    @staticmethod
    def _log_failure(instance_id: str, path: str, ex: AnimBindError) -> None:
        if isinstance(ex, (InstanceNotFoundError, PropertyNotFoundError, KindMismatchError)):
            log.warn(ex.message, instance=instance_id, path=path)
        else:
            log.error(ex.message, instance=instance_id, path=path, code=ex.code)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_property_value(self, instance_id: str, name: str) -> Any:
        """
        Stored value of a property (name or path), or None.

        Containers return snapshots: dict for view models, list for lists.
        """
        return self.get_nested_property_value(instance_id, name)

    def get_nested_property_value(self, instance_id: str, path: str) -> Any:
        self._drain()
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is None:
                log.debug("Value query for unknown instance", instance=instance_id)
                return None
            node = self.resolver.resolve(instance, path)
            return node.snapshot() if node is not None else None

    def get_all_property_values(self, instance_id: str) -> Dict[str, Any]:
        """{top-level name: snapshot}; {} for unknown ids"""
        self._drain()
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is None:
                return {}
            return {node.name: node.snapshot() for node in instance.graph}

    def get_properties(self, instance_id: str) -> List[PropertyNode]:
        """Top-level nodes of an instance; [] for unknown ids"""
        self._drain()
        with self._lock:
            instance = self._instances.get(instance_id)
            return list(instance.graph) if instance is not None else []

    def get_cache_stats(self) -> Dict[str, int]:
        with self._lock:
            instances = list(self._instances.values())
            return {
                "instance_count": len(instances),
                "total_cached_paths": sum(len(i.path_cache) for i in instances),
                "instances_with_path_cache": sum(1 for i in instances if i.path_cache),
                "image_assets": sum(1 for i in instances if i.image_handle is not None),
                "font_assets": sum(1 for i in instances if i.font_handle is not None),
                "cached_image_sets": sum(1 for i in instances if i.image_cache),
                "total_cached_images": sum(len(i.image_cache) for i in instances),
                "pending_events": len(self._queue),
            }

    def clear_property_cache(self, instance_id: str) -> bool:
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is None:
                return False
            cleared = self.resolver.clear(instance)
            log.debug("Path cache cleared", instance=instance_id, entries=cleared)
            return True

    def clear_all_property_caches(self) -> int:
        """Returns the number of cache entries removed"""
        with self._lock:
            cleared = sum(self.resolver.clear(i) for i in self._instances.values())
            log.info("All path caches cleared", entries=cleared)
            return cleared

    # ------------------------------------------------------------------
    # State-machine inputs and events
    # ------------------------------------------------------------------

    def get_inputs(self, instance_id: str) -> List[InputBinding]:
        with self._lock:
            instance = self._instances.get(instance_id)
            return list(instance.inputs.values()) if instance is not None else []

    def trigger_input(self, instance_id: str, name: str) -> bool:
        return self._update_input(instance_id, name, InputKind.TRIGGER, True)

    def update_bool(self, instance_id: str, name: str, value: bool) -> bool:
        return self._update_input(instance_id, name, InputKind.BOOLEAN, value)

    def update_number(self, instance_id: str, name: str, value: float) -> bool:
        return self._update_input(instance_id, name, InputKind.NUMBER, value)

    def _update_input(self, instance_id: str, name: str, kind: InputKind, value: Any) -> bool:
        try:
            with self._lock:
                instance = self._require(instance_id)
                binding = instance.inputs.get(name)
                if binding is None or binding.kind != kind:
                    raise InputNotFoundError(instance_id, name, kind.value)

                if kind == InputKind.TRIGGER:
                    binding.fire()
                elif kind == InputKind.BOOLEAN:
                    value = binding.set_bool(value)
                else:
                    value = binding.set_number(value)

            log_input.debug("Input updated", instance=instance_id, input=name, value=value)
            self._publish(InputChangedEvent(name, kind, value, instance_id=instance_id,
                                            source=EventSource.HOST))
            return True
        except AnimBindError as ex:
            log_input.warn(ex.message, instance=instance_id, input=name)
            return False
        except Exception as ex:
            log_input.error("Engine rejected input update", instance=instance_id, input=name,
                            error=str(ex))
            return False
        finally:
            self._drain()

    def handle_state_machine_event(
        self,
        instance_id: str,
        event_name: str,
        state_name: str,
        properties: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Record a state-machine event reported by the engine.

        The event is queued like any other engine notification, so it is
        delivered in order with property changes.
        """
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is None:
                log_input.debug("State-machine event for unknown instance", instance=instance_id,
                                event=event_name)
                return False
            self._queue.put(instance, StateMachineEvent(event_name, state_name, instance_id,
                                                        properties))
        self._drain()
        return True

    def get_current_state_name(self, instance_id: str) -> Optional[str]:
        self._drain()
        instance = self._instances.get(instance_id)
        return instance.current_state if instance is not None else None

    # ------------------------------------------------------------------
    # Text runs
    # ------------------------------------------------------------------

    def set_text_run_value(self, instance_id: str, name: str, value: str,
                           path: Optional[str] = None) -> bool:
        """
        Write a named text run on the instance's artboard.

        Args:
            path: Nested artboard holding the run (None: the artboard itself)
        """
        with self._lock:
            artboard = self._text_artboard(instance_id, name)
            if artboard is None:
                return False
            try:
                accepted = artboard.set_text(name, str(value), path=path)
            except Exception as ex:
                log.error("Text run update failed", instance=instance_id, run=name, path=path,
                          error=str(ex), error_type=type(ex).__name__)
                return False
        if accepted is False:
            log.warn("Engine rejected text run", instance=instance_id, run=name, path=path)
            return False

        log.debug("Text run updated", instance=instance_id, run=name, value=value, path=path)
        return True

    def get_text_run_value(self, instance_id: str, name: str,
                           path: Optional[str] = None) -> Optional[str]:
        with self._lock:
            artboard = self._text_artboard(instance_id, name)
            if artboard is None:
                return None
            try:
                return artboard.get_text(name, path=path)
            except Exception as ex:
                log.error("Text run query failed", instance=instance_id, run=name, path=path,
                          error=str(ex), error_type=type(ex).__name__)
                return None

    def _text_artboard(self, instance_id: str, name: str) -> Optional[ITextArtboard]:
        instance = self._instances.get(instance_id)
        if instance is None:
            log.warn("Text run on unknown instance", instance=instance_id, run=name)
            return None
        if instance.artboard is None:
            log.warn("Instance has no artboard for text runs", instance=instance_id, run=name)
            return None
        return instance.artboard

    # ------------------------------------------------------------------
    # Intercepted asset slots
    # ------------------------------------------------------------------

    def register_image_asset(self, instance_id: str, slot: IAssetSlot) -> bool:
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is None:
                log_asset.warn("Image slot for unknown instance", instance=instance_id)
                return False
            instance.image_handle = slot
            log_asset.debug("Image slot registered", instance=instance_id)
            return True

    def register_font_asset(self, instance_id: str, slot: IAssetSlot) -> bool:
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is None:
                log_asset.warn("Font slot for unknown instance", instance=instance_id)
                return False
            instance.font_handle = slot
            log_asset.debug("Font slot registered", instance=instance_id)
            return True

    async def update_image_from_bytes(self, instance_id: str, data: bytes) -> bool:
        return await self._update_image(instance_id, "bytes", lambda: _as_bytes(data))

    async def update_image_from_url(self, instance_id: str, url: str) -> bool:
        return await self._update_image(instance_id, url, lambda: self.asset_loader.fetch(url))

    async def update_image_from_file(self, instance_id: str, path: str) -> bool:
        return await self._update_image(instance_id, path,
                                        lambda: self.asset_loader.read_local_file(path))

    async def _update_image(self, instance_id: str, source: str, read) -> bool:
        instance = self._instances.get(instance_id)
        if instance is None or instance.image_handle is None:
            log_asset.warn("No image slot", instance=instance_id, source=source)
            return False

        slot = instance.image_handle
        try:
            data = await read()
            await self.asset_loader.decode_into(slot, data, source=source)
        except AssetLoadError as ex:
            log_asset.error(ex.message, instance=instance_id)
            return False
        except Exception as ex:
            log_asset.error("Unexpected image update failure", instance=instance_id, source=source,
                            error=str(ex), error_type=type(ex).__name__)
            return False

        log_asset.info("Image updated", instance=instance_id, source=source)
        return True

    async def preload_images(self, instance_id: str, urls: Iterable[str]) -> int:
        """
        Fetch and decode images for update_image_from_cache.

        Replaces the instance's image cache; failed URLs are skipped.

        Returns:
            Number of images cached
        """
        instance = self._instances.get(instance_id)
        if instance is None:
            log_asset.warn("Preload for unknown instance", instance=instance_id)
            return 0

        images: List[Any] = []
        for url in urls:
            try:
                images.append(await self.asset_loader.load(url))
            except AssetLoadError as ex:
                log_asset.warn(ex.message, instance=instance_id)
            except Exception as ex:
                log_asset.error("Unexpected preload failure", instance=instance_id, url=url,
                                error=str(ex), error_type=type(ex).__name__)

        with self._lock:
            if self._instances.get(instance_id) is not instance:
                log_asset.warn("Instance went away during preload", instance=instance_id)
                return 0
            instance.image_cache = images

        log_asset.info("Images preloaded", instance=instance_id, count=len(images))
        return len(images)

    def update_image_from_cache(self, instance_id: str, index: int) -> bool:
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is None or instance.image_handle is None:
                log_asset.warn("No image slot", instance=instance_id)
                return False
            if not 0 <= index < len(instance.image_cache):
                log_asset.warn("Cached image index out of range", instance=instance_id,
                               index=index, cached=len(instance.image_cache))
                return False
            try:
                instance.image_handle.render(instance.image_cache[index])
            except Exception as ex:
                log_asset.error("Image slot rejected cached image", instance=instance_id,
                                error=str(ex))
                return False
            return True

    # ------------------------------------------------------------------
    # Change delivery
    # ------------------------------------------------------------------

    def drain_events(self) -> int:
        """Deliver pending engine notifications; returns how many were delivered"""
        return self._drain()

    def _drain(self) -> int:
        with self._lock:
            if self._draining:
                return 0
            self._draining = True
            delivered = 0
            try:
                while True:
                    items = self._queue.drain()
                    if not items:
                        break
                    for owner, event in items:
                        if self._instances.get(owner.id) is not owner:
                            self.dropped_events += 1
                            continue
                        self._deliver(owner, event)
                        delivered += 1
            finally:
                self._draining = False
            return delivered

    def _deliver(self, instance: AnimationInstance, event: Event) -> None:
        if isinstance(event, PropertyChangedEvent):
            node = event.node
            if node is not None and not node.has_listeners:
                # Listener fired after detach
                self.dropped_events += 1
                return
            if node is not None and event.kind != PropertyKind.TRIGGER:
                node.value = event.value
            self._notify_host(instance.id, event)
        elif isinstance(event, StateMachineEvent):
            instance.current_state = event.state_name
            log_input.debug("State-machine event", instance=instance.id,
                            event=event.event_name, state=event.state_name)

        self._publish(event)

    def _notify_host(self, instance_id: str, event: PropertyChangedEvent) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(instance_id, event.path, event.kind, event.value)
        except Exception as ex:
            log.error("Change callback failed", instance=instance_id, path=event.path,
                      error=str(ex))

    def _publish(self, event: Event) -> None:
        if self.event_bus is not None:
            self.event_bus.dispatch(event)


async def _as_bytes(data: Any) -> bytes:
    if not isinstance(data, (bytes, bytearray)):
        raise AssetLoadError(type(data).__name__, "expected bytes")
    return bytes(data)
