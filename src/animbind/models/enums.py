"""
Enums for the animation property-binding layer
"""

from enum import Enum, auto


class PropertyKind(Enum):
    """
    Tagged type of a discovered property.

    Values are the kind names reported by the animation engine so that
    descriptors carrying a plain string can be parsed with EnumHelper.
    """
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    STRING = "string"
    COLOR = "color"
    TRIGGER = "trigger"
    ENUM_TYPE = "enumType"
    IMAGE = "image"
    FONT = "font"
    LIST = "list"
    ARTBOARD = "artboard"
    VIEW_MODEL = "viewModel"
    SYMBOL_LIST_INDEX = "symbolListIndex"

    @property
    def is_container(self) -> bool:
        """True for kinds whose nodes carry children"""
        return self in (PropertyKind.VIEW_MODEL, PropertyKind.LIST)

    @property
    def is_asset(self) -> bool:
        """True for kinds whose values come from the asset layer"""
        return self in (PropertyKind.IMAGE, PropertyKind.FONT)


# Kinds read through a value accessor and watched with a change listener
SCALAR_KINDS = frozenset({
    PropertyKind.NUMBER,
    PropertyKind.INTEGER,
    PropertyKind.BOOLEAN,
    PropertyKind.STRING,
    PropertyKind.COLOR,
    PropertyKind.ENUM_TYPE,
    PropertyKind.SYMBOL_LIST_INDEX,
})


class InputKind(Enum):
    """State-machine input types"""
    TRIGGER = "trigger"
    BOOLEAN = "boolean"
    NUMBER = "number"


class ColorFormat(Enum):
    """Shape an external color value was recognized as"""
    NATIVE = auto()     # Color-like object with normalized r/g/b/a accessors
    HEX = auto()        # #RGB, #RRGGBB, #AARRGGBB (optional 0x prefix)
    RGB = auto()        # rgb(r, g, b)
    RGBA = auto()       # rgba(r, g, b, a)
    MAPPING = auto()    # {r/red, g/green, b/blue, a/alpha}
    SEQUENCE = auto()   # [r, g, b] or [r, g, b, a]
    NAMED = auto()      # "teal", "Red", " grey "
    FALLBACK = auto()   # Unrecognized, replaced with opaque white


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, validation
    DISCOVERY = auto()   # Property graph walks
    PATH = auto()        # Path resolution and path cache
    REGISTRY = auto()    # Instance register/deregister, updates
    COLOR = auto()       # Color normalization
    ASSET = auto()       # Image/font fetch and decode
    INPUT = auto()       # State-machine inputs and events
    EVENT = auto()       # Change queue and event bus
    API = auto()
    SYSTEM = auto()      # Startup, shutdown, errors

    GENERAL = auto()    # Default general category
