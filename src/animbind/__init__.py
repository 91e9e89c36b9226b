"""
animbind - property binding layer for data-bound animation instances

Discovers an animation's view-model property graph, resolves '/' or '.'
paths through a per-instance cache, normalizes loosely typed values per
property kind and keeps a registry of live instances by id.
"""

__version__ = "1.0.0"
