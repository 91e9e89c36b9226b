"""
Serialization utilities - property values and graphs for the JSON API

Canonical values are mostly plain Python already; Color becomes a hex string
(or a channel dict) and opaque engine objects (decoded images, artboards)
are reported by type name only.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from animbind.models.color import Color
from animbind.models.enums import PropertyKind
from animbind.models.property_node import PropertyNode


class Serializer:
    """Central value and graph serialization for the JSON API"""

    # ========================================================================
    # VALUES
    # ========================================================================

    @staticmethod
    def enum_to_str(value: Optional[Enum]) -> Optional[str]:
        """Enum value for string-valued enums, otherwise its name"""
        if value is None:
            return None
        return value.value if isinstance(value.value, str) else value.name

    @staticmethod
    def value_to_json(value: Any, color_as_dict: bool = False) -> Any:
        """
        JSON-safe form of a canonical value.

        Args:
            value: Stored value or snapshot (dicts and lists are walked)
            color_as_dict: Emit {"r","g","b","a"} instead of '#AARRGGBB'
        """
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        if isinstance(value, Color):
            return value.to_dict() if color_as_dict else value.to_hex()
        if isinstance(value, Enum):
            return Serializer.enum_to_str(value)
        if isinstance(value, dict):
            return {str(k): Serializer.value_to_json(v, color_as_dict) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [Serializer.value_to_json(v, color_as_dict) for v in value]
        if isinstance(value, (bytes, bytearray)):
            return f"<{len(value)} bytes>"
        return f"<{type(value).__name__}>"

    # ========================================================================
    # GRAPH
    # ========================================================================

    @staticmethod
    def node_to_dict(node: PropertyNode) -> Dict[str, Any]:
        """
        Describe one node and its children

        Returns:
            Dict with name, path, kind, value (containers omit value except
            lists, which report their item count) and children
        """
        result: Dict[str, Any] = {
            "name": node.name,
            "path": node.full_path,
            "kind": node.kind.value,
        }
        if node.children is None or node.kind == PropertyKind.LIST:
            result["value"] = Serializer.value_to_json(node.value)
        if node.options is not None:
            result["options"] = list(node.options)
        if node.index is not None:
            result["index"] = node.index
        if node.label:
            result["label"] = node.label
        if node.children is not None:
            result["children"] = [Serializer.node_to_dict(child) for child in node.children]
        return result

    @staticmethod
    def graph_to_list(graph: List[PropertyNode]) -> List[Dict[str, Any]]:
        return [Serializer.node_to_dict(node) for node in graph]
