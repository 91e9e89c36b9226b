"""Services layer"""

from .value_normalizer import ValueNormalizer
from .discovery import PropertyGraphDiscoverer
from .path_resolver import PathResolver
from .asset_loader import AssetLoader
from .event_bus import EventBus
from .instance_registry import InstanceRegistry
from .service_container import ServiceContainer, build_container

__all__ = [
    "ValueNormalizer",
    "PropertyGraphDiscoverer",
    "PathResolver",
    "AssetLoader",
    "EventBus",
    "InstanceRegistry",
    "ServiceContainer",
    "build_container",
]
