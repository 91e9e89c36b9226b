"""
Utility functions for the binding layer
"""

from .colors import parse_color, hex_to_color

__all__ = [
    'parse_color',
    'hex_to_color',
]
