"""
Models package - Data models for the binding layer
"""

from .enums import PropertyKind, InputKind, ColorFormat, LogLevel, LogCategory
from .color import Color
from .property_node import PropertyNode, PropertyValue
from .instance import AnimationInstance

__all__ = [
    'PropertyKind',
    'InputKind',
    'ColorFormat',
    'LogLevel',
    'LogCategory',
    'Color',
    'PropertyNode',
    'PropertyValue',
    'AnimationInstance',
]
