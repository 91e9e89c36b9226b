"""
Value normalizer - converts loosely typed external values per property kind

Write path: normalize(kind, value) -> PropertyValue, raising
KindMismatchError when the value cannot be applied to the kind.
Read path: from_native(kind, native_value) -> canonical stored value.

Color values never fail: unrecognized shapes become opaque white and the
substitution is logged as a warning.
"""

from numbers import Real
from typing import Any, Dict, Optional, Tuple

from animbind.managers.color_manager import ColorManager
from animbind.models.color import Color
from animbind.models.enums import ColorFormat, PropertyKind
from animbind.models.errors import KindMismatchError
from animbind.models.property_node import PropertyValue
from animbind.utils.colors import parse_color
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.COLOR)

# Write dispatch: every PropertyKind must have an entry
_WRITERS: Dict[PropertyKind, str] = {
    PropertyKind.NUMBER: "_write_number",
    PropertyKind.INTEGER: "_write_integer",
    PropertyKind.SYMBOL_LIST_INDEX: "_write_integer",
    PropertyKind.BOOLEAN: "_write_boolean",
    PropertyKind.STRING: "_write_string",
    PropertyKind.COLOR: "_write_color",
    PropertyKind.TRIGGER: "_write_trigger",
    PropertyKind.ENUM_TYPE: "_write_enum",
    PropertyKind.IMAGE: "_write_asset",
    PropertyKind.FONT: "_write_asset",
    PropertyKind.ARTBOARD: "_write_artboard",
    PropertyKind.LIST: "_write_read_only",
    PropertyKind.VIEW_MODEL: "_write_read_only",
}

_missing = set(PropertyKind) - set(_WRITERS)
if _missing:
    raise RuntimeError(f"No normalizer for kinds: {sorted(k.name for k in _missing)}")


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


class ValueNormalizer:
    """
    Per-kind value coercion.

    Example:
        normalizer = ValueNormalizer()

        normalizer.normalize(PropertyKind.NUMBER, 3)          # PropertyValue(NUMBER, 3.0)
        normalizer.normalize(PropertyKind.COLOR, "teal")      # Color(62, 194, 147, 255)
        normalizer.normalize(PropertyKind.BOOLEAN, "yes")     # raises KindMismatchError
    """

    def __init__(self, color_manager: Optional[ColorManager] = None):
        if color_manager is None:
            from animbind.managers.config_manager import load_default_color_manager
            color_manager = load_default_color_manager()
        self.color_manager = color_manager
        self.fallback_count = 0

    # ------------------------------------------------------------------
    # Color
    # ------------------------------------------------------------------

    def to_canonical_color(self, value: Any) -> Tuple[Color, bool]:
        """
        Normalize any supported color shape.

        Returns:
            (color, fallback) - fallback is True when the value was not
            understood and opaque white was substituted
        """
        try:
            color, fmt = parse_color(value, self.color_manager.named_colors)
        except (ValueError, TypeError, OverflowError) as ex:
            self.fallback_count += 1
            log.warn(
                "Unrecognized color value, using white",
                value=repr(value)[:80],
                reason=str(ex)
            )
            return Color.white(), True

        log.debug("Color normalized", format=fmt.name, rgba=color.to_rgba())
        return color, False

    def detect_color_format(self, value: Any) -> ColorFormat:
        """Shape a value would be parsed as, FALLBACK if unparseable"""
        try:
            return parse_color(value, self.color_manager.named_colors)[1]
        except (ValueError, TypeError, OverflowError):
            return ColorFormat.FALLBACK

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def normalize(self, kind: PropertyKind, value: Any) -> PropertyValue:
        """
        Convert an external value into the representation `kind` requires.

        Raises:
            KindMismatchError: value shape does not fit the kind
        """
        writer = getattr(self, _WRITERS[kind])
        return writer(kind, value)

    def _write_number(self, kind: PropertyKind, value: Any) -> PropertyValue:
        if not _is_number(value):
            raise KindMismatchError(kind.value, value)
        return PropertyValue(kind, float(value))

    def _write_integer(self, kind: PropertyKind, value: Any) -> PropertyValue:
        if not _is_number(value):
            raise KindMismatchError(kind.value, value)
        return PropertyValue(kind, int(round(value)))

    def _write_boolean(self, kind: PropertyKind, value: Any) -> PropertyValue:
        if not isinstance(value, bool):
            raise KindMismatchError(kind.value, value)
        return PropertyValue(kind, value)

    def _write_string(self, kind: PropertyKind, value: Any) -> PropertyValue:
        if not isinstance(value, str):
            raise KindMismatchError(kind.value, value)
        return PropertyValue(kind, value)

    def _write_color(self, kind: PropertyKind, value: Any) -> PropertyValue:
        color, fallback = self.to_canonical_color(value)
        return PropertyValue(kind, color, fallback=fallback)

    def _write_trigger(self, kind: PropertyKind, value: Any) -> PropertyValue:
        return PropertyValue(kind, bool(value))

    def _write_enum(self, kind: PropertyKind, value: Any) -> PropertyValue:
        if value is None:
            raise KindMismatchError(kind.value, value)
        return PropertyValue(kind, str(value))

    def _write_asset(self, kind: PropertyKind, value: Any) -> PropertyValue:
        # Strings and bytes are resolved by the asset loader before the write
        if value is None or isinstance(value, bool):
            raise KindMismatchError(kind.value, value)
        return PropertyValue(kind, value)

    def _write_artboard(self, kind: PropertyKind, value: Any) -> PropertyValue:
        if value is None:
            raise KindMismatchError(kind.value, value)
        return PropertyValue(kind, value)

    def _write_read_only(self, kind: PropertyKind, value: Any) -> PropertyValue:
        raise KindMismatchError(kind.value, value)

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def from_native(self, kind: PropertyKind, native_value: Any) -> Any:
        """
        Canonical stored value for a value read from the engine.

        Engine values are trusted; missing values get the kind's default.
        """
        if kind == PropertyKind.NUMBER:
            return float(native_value) if _is_number(native_value) else 0.0
        if kind in (PropertyKind.INTEGER, PropertyKind.SYMBOL_LIST_INDEX):
            return int(round(native_value)) if _is_number(native_value) else 0
        if kind == PropertyKind.BOOLEAN:
            return bool(native_value)
        if kind in (PropertyKind.STRING, PropertyKind.ENUM_TYPE):
            return "" if native_value is None else str(native_value)
        if kind == PropertyKind.COLOR:
            if native_value is None:
                return Color.transparent()
            if isinstance(native_value, int) and not isinstance(native_value, bool):
                return Color.from_argb(native_value)
            return self.to_canonical_color(native_value)[0]
        if kind == PropertyKind.TRIGGER:
            return None
        return native_value
