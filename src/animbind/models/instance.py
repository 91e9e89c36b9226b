"""Registry entry for one loaded animation"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from animbind.engine.protocols import IAssetSlot, INativeViewModel, ITextArtboard
from animbind.models.property_node import PropertyNode


@dataclass(eq=False)
class AnimationInstance:
    """
    A live, addressable animation.

    Attributes:
        id: Registry key
        graph: Top-level discovered nodes
        path_cache: '/'-joined path -> node, filled lazily by the PathResolver
        root: Bound view-model instance the graph was discovered from
        artboard: Artboard handle used for text runs
        image_handle: Intercepted image asset slot
        font_handle: Intercepted font asset slot
        inputs: State-machine input name -> InputBinding
        current_state: Last state-machine state name reported by the engine
        image_cache: Decoded images preloaded for instant swapping
        artboards: Artboard names exposed by the loaded file
    """
    id: str
    graph: List[PropertyNode] = field(default_factory=list)
    path_cache: Dict[str, PropertyNode] = field(default_factory=dict)
    root: Optional[INativeViewModel] = None
    artboard: Optional[ITextArtboard] = None
    image_handle: Optional[IAssetSlot] = None
    font_handle: Optional[IAssetSlot] = None
    inputs: Dict[str, Any] = field(default_factory=dict)
    current_state: Optional[str] = None
    image_cache: List[Any] = field(default_factory=list)
    artboards: List[str] = field(default_factory=list)

    def top_level(self, name: str) -> Optional[PropertyNode]:
        for node in self.graph:
            if node.name == name:
                return node
        return None

    def release(self) -> int:
        """
        Detach every listener and drop every held resource.

        Returns:
            Number of listeners removed
        """
        removed = 0
        for node in self.graph:
            removed += node.detach_recursive()
        for binding in self.inputs.values():
            removed += binding.detach()

        self.path_cache.clear()
        self.image_cache.clear()
        self.image_handle = None
        self.font_handle = None
        self.artboard = None
        self.root = None
        return removed
