"""
Path resolution with a per-instance cache

Paths are '/' or '.' delimited ("settings/theme", "settings.theme",
"items/0/title"). Multi-segment lookups are cached on the instance under the
'/'-joined key, so repeated access skips the tree walk.
"""

from typing import List, Optional

from animbind.models.instance import AnimationInstance
from animbind.models.property_node import PropertyNode
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.PATH)


def split_path(path: str) -> Optional[List[str]]:
    """
    Split a path into segments.

    Returns:
        Segments, or None when the path is empty or has an empty segment
    """
    if not path:
        return None
    separator = "/" if "/" in path else "."
    segments = path.split(separator)
    if any(segment == "" for segment in segments):
        return None
    return segments


class PathResolver:
    """
    Resolves paths to nodes.

    walk_count counts the tree descents performed, i.e. cache misses that
    had to look through children.
    """

    def __init__(self) -> None:
        self.walk_count = 0
        self.cache_hits = 0

    def resolve(self, instance: AnimationInstance, path: str) -> Optional[PropertyNode]:
        """Node at path, or None on any miss"""
        segments = split_path(path)
        if segments is None:
            log.debug("Malformed path", instance=instance.id, path=repr(path))
            return None

        if len(segments) == 1:
            return instance.top_level(segments[0])

        key = "/".join(segments)
        cached = instance.path_cache.get(key)
        if cached is not None:
            self.cache_hits += 1
            return cached

        self.walk_count += 1
        node = self._descend(instance.graph, segments)
        if node is None:
            log.debug("Path not found", instance=instance.id, path=key)
            return None

        instance.path_cache[key] = node
        log.debug("Path cached", instance=instance.id, path=key)
        return node

    @staticmethod
    def _descend(nodes: List[PropertyNode], segments: List[str]) -> Optional[PropertyNode]:
        current: Optional[PropertyNode] = None
        level: Optional[List[PropertyNode]] = nodes

        for segment in segments:
            if level is None:
                # Non-container in the middle of the path
                return None
            current = next((node for node in level if node.name == segment), None)
            if current is None:
                return None
            level = current.children

        return current

    @staticmethod
    def clear(instance: AnimationInstance) -> int:
        """Empty the instance's path cache; returns how many entries it held"""
        count = len(instance.path_cache)
        instance.path_cache.clear()
        return count
