"""
Color parsing utilities

Pure functions turning loosely typed external color values into the canonical
Color model. Every parser raises ValueError on input it cannot handle; the
fallback-to-white policy and its logging belong to the ValueNormalizer.

Recognized shapes:
- Color-like objects exposing normalized r/g/b[/a] floats
- Hex strings: #RGB, #RRGGBB, #AARRGGBB, with or without a 0x prefix
- rgb(r, g, b) and rgba(r, g, b, a) strings
- Mappings with r/red, g/green, b/blue and optional a/alpha keys
- Sequences of 3 or 4 numbers
- Named colors from a lookup table
"""

import re
from collections.abc import Mapping, Sequence
from numbers import Real
from typing import Any, Optional, Tuple

from animbind.models.color import Color, clamp_channel
from animbind.models.enums import ColorFormat

_HEX_DIGITS = re.compile(r'^[0-9a-fA-F]+$')
_RGB_PATTERN = re.compile(r'^rgb\s*\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)$')
_RGBA_PATTERN = re.compile(
    r'^rgba\s*\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+(?:\.\d*)?|\.\d+)\s*\)$'
)

_MAPPING_KEYS = (
    ('r', 'red'),
    ('g', 'green'),
    ('b', 'blue'),
)
_ALPHA_KEYS = ('a', 'alpha')


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _scale_normalized(value: float) -> int:
    return clamp_channel(round(value * 255))


def is_normalized_tuple(r: Any, g: Any, b: Any) -> bool:
    """
    Detect the 0.0-1.0 range for a channel tuple.

    A tuple is normalized when any of R, G, B is a float no greater than 1.0.
    Integers are always read as 0-255 channels.

    Example:
        is_normalized_tuple(62, 194, 147)            # False
        is_normalized_tuple(0.2431, 0.7608, 0.5764)  # True
        is_normalized_tuple(1.0, 0, 0)               # True
    """
    return any(isinstance(c, float) and c <= 1.0 for c in (r, g, b))


def channels_to_color(r: Any, g: Any, b: Any, a: Optional[Any] = None) -> Color:
    """
    Build a Color from numeric channels with range auto-detection.

    Normalized tuples scale every channel (alpha included) by 255, round and
    clamp. Standard tuples truncate each channel to an int and clamp. A
    missing alpha means fully opaque; in a standard tuple a float alpha of at
    most 1.0 is read as an opacity fraction.
    """
    for channel in (r, g, b):
        if not _is_number(channel):
            raise ValueError(f"Color channel must be numeric, got {type(channel).__name__}")
    if a is not None and not _is_number(a):
        raise ValueError(f"Alpha channel must be numeric, got {type(a).__name__}")

    if is_normalized_tuple(r, g, b):
        alpha = 255 if a is None else _scale_normalized(a)
        return Color.from_rgba(_scale_normalized(r), _scale_normalized(g), _scale_normalized(b), alpha)

    if a is None:
        alpha = 255
    elif isinstance(a, float) and a <= 1.0:
        # opacity fraction; integer alpha stays a 0-255 channel
        alpha = _scale_normalized(max(0.0, a))
    else:
        alpha = clamp_channel(a)
    return Color.from_rgba(clamp_channel(r), clamp_channel(g), clamp_channel(b), alpha)


def hex_to_color(text: str) -> Color:
    """
    Parse a hex color string.

    Args:
        text: '#3EC', '#3EC293', '#FF3EC293', '0x3EC293', ...

    Returns:
        Color parsed as big-endian AARRGGBB (6-digit form is opaque)

    Example:
        hex_to_color('#3EC')       # Color(51, 238, 204, 255)
        hex_to_color('0x803EC293') # alpha = 128
    """
    clean = text.strip()
    if clean.startswith('#'):
        clean = clean[1:]
    if clean[:2].lower() == '0x':
        clean = clean[2:]

    if not clean or not _HEX_DIGITS.match(clean):
        raise ValueError(f"Invalid hex color: {text!r}")

    if len(clean) == 3:
        clean = ''.join(ch * 2 for ch in clean)
    if len(clean) == 6:
        clean = 'FF' + clean
    if len(clean) != 8:
        raise ValueError(f"Invalid hex length: {len(clean)}")

    return Color.from_argb(int(clean, 16))


def rgb_string_to_color(text: str) -> Color:
    """Parse 'rgb(r, g, b)' with integer channels; alpha is 255"""
    match = _RGB_PATTERN.match(text.strip().lower())
    if match is None:
        raise ValueError(f"Invalid RGB format: {text!r}")
    r, g, b = (int(group) for group in match.groups())
    return Color.from_rgb(r, g, b)


def rgba_string_to_color(text: str) -> Color:
    """
    Parse 'rgba(r, g, b, a)'.

    Alpha containing a decimal point is a 0.0-1.0 fraction (clamped, then
    scaled by 255 and truncated); otherwise it is a 0-255 integer.

    Example:
        rgba_string_to_color('rgba(62, 194, 147, 0.5)')  # a = 127
        rgba_string_to_color('rgba(62, 194, 147, 128)')  # a = 128
    """
    match = _RGBA_PATTERN.match(text.strip().lower())
    if match is None:
        raise ValueError(f"Invalid RGBA format: {text!r}")

    r, g, b = (int(group) for group in match.groups()[:3])
    alpha_text = match.group(4)
    if '.' in alpha_text:
        fraction = max(0.0, min(1.0, float(alpha_text)))
        a = int(fraction * 255)
    else:
        a = int(alpha_text)
    return Color.from_rgba(r, g, b, a)


def named_to_color(name: str, table: Mapping) -> Color:
    """
    Look up a named color (trimmed, case-insensitive).

    Args:
        name: Color name, e.g. ' Teal '
        table: {name: Color} lookup table with lowercase keys
    """
    key = name.strip().lower()
    if key not in table:
        raise ValueError(f"Unknown named color: {name!r}")
    return table[key]


def mapping_to_color(data: Mapping) -> Color:
    """
    Parse a channel mapping: {r|red, g|green, b|blue, [a|alpha]}.
    """
    channels = []
    for short, long in _MAPPING_KEYS:
        if short in data:
            channels.append(data[short])
        elif long in data:
            channels.append(data[long])
        else:
            raise ValueError(f"Color mapping is missing '{short}'/'{long}'")

    alpha = None
    for key in _ALPHA_KEYS:
        if key in data:
            alpha = data[key]
            break

    return channels_to_color(*channels, a=alpha)


def sequence_to_color(values: Sequence) -> Color:
    """Parse [R, G, B] or [R, G, B, A] positionally"""
    if len(values) not in (3, 4):
        raise ValueError(f"Color sequence must have 3 or 4 elements, got {len(values)}")
    alpha = values[3] if len(values) == 4 else None
    return channels_to_color(values[0], values[1], values[2], a=alpha)


def is_native_color(value: Any) -> bool:
    """Duck-type check for engine color objects with normalized accessors"""
    if isinstance(value, (str, bytes, Mapping, Sequence)):
        return False
    return all(hasattr(value, attr) for attr in ('r', 'g', 'b'))


def native_to_color(value: Any) -> Color:
    """Read normalized r/g/b[/a] accessors and scale by 255"""
    channels = [getattr(value, attr) for attr in ('r', 'g', 'b')]
    alpha = getattr(value, 'a', 1.0)
    if not all(_is_number(c) for c in channels + [alpha]):
        raise ValueError("Native color accessors must be numeric")
    return Color.from_normalized(*channels, alpha)


def string_to_color(text: str, named_colors: Mapping) -> Tuple[Color, ColorFormat]:
    """Dispatch a color string to the hex/rgb/rgba/named parser"""
    trimmed = text.strip().lower()

    if trimmed.startswith('#') or trimmed.startswith('0x'):
        return hex_to_color(trimmed), ColorFormat.HEX
    if trimmed.startswith('rgba'):
        return rgba_string_to_color(trimmed), ColorFormat.RGBA
    if trimmed.startswith('rgb'):
        return rgb_string_to_color(trimmed), ColorFormat.RGB

    return named_to_color(trimmed, named_colors), ColorFormat.NAMED


def parse_color(value: Any, named_colors: Mapping) -> Tuple[Color, ColorFormat]:
    """
    Parse any supported color shape.

    Args:
        value: External color value
        named_colors: {lowercase name: Color} table for named colors

    Returns:
        (Color, ColorFormat) - the canonical color and the detected shape

    Raises:
        ValueError: Shape not recognized or contents unparseable
    """
    if isinstance(value, Color):
        return value, ColorFormat.NATIVE
    if isinstance(value, str):
        return string_to_color(value, named_colors)
    if isinstance(value, Mapping):
        return mapping_to_color(value), ColorFormat.MAPPING
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return sequence_to_color(value), ColorFormat.SEQUENCE
    if is_native_color(value):
        return native_to_color(value), ColorFormat.NATIVE

    raise ValueError(f"Unsupported color value type: {type(value).__name__}")
