"""
Color model - Canonical 8-bit RGBA representation

Every color property value is stored as a Color, whatever shape the host
supplied it in. Parsing of external shapes lives in utils.colors; this module
only holds the canonical value and its conversions.
"""

from dataclasses import dataclass
from typing import Tuple


def clamp_channel(value: int) -> int:
    """Clamp an integer channel into the inclusive 0-255 range"""
    return max(0, min(255, int(value)))


@dataclass(frozen=True)
class Color:
    """
    Canonical color with 8-bit channels (0-255 each)

    Examples:
        color = Color.from_rgb(62, 194, 147)      # alpha = 255
        color = Color.from_argb(0xFF3EC293)       # same color
        color = Color.from_normalized(0.2431, 0.7608, 0.5764)

        color.to_hex()          # '#FF3EC293'
        color.to_normalized()   # (0.2431..., 0.7607..., 0.5764..., 1.0)
    """

    r: int
    g: int
    b: int
    a: int = 255

    # === CONSTRUCTORS ===

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> 'Color':
        """Opaque color from clamped 0-255 channels"""
        return cls(clamp_channel(r), clamp_channel(g), clamp_channel(b), 255)

    @classmethod
    def from_rgba(cls, r: int, g: int, b: int, a: int) -> 'Color':
        """Color from clamped 0-255 channels including alpha"""
        return cls(clamp_channel(r), clamp_channel(g), clamp_channel(b), clamp_channel(a))

    @classmethod
    def from_argb(cls, value: int) -> 'Color':
        """
        Create from a 32-bit big-endian AARRGGBB integer

        Args:
            value: e.g. 0xFF3EC293
        """
        value &= 0xFFFFFFFF
        return cls(
            r=(value >> 16) & 0xFF,
            g=(value >> 8) & 0xFF,
            b=value & 0xFF,
            a=(value >> 24) & 0xFF,
        )

    @classmethod
    def from_normalized(cls, r: float, g: float, b: float, a: float = 1.0) -> 'Color':
        """
        Create from 0.0-1.0 channels (scaled by 255, rounded, clamped)
        """
        return cls.from_rgba(
            round(r * 255), round(g * 255), round(b * 255), round(a * 255)
        )

    # === CONVERSIONS ===

    def to_rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_rgba(self) -> Tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    def to_argb(self) -> int:
        """32-bit AARRGGBB integer (the engine's native color word)"""
        return (self.a << 24) | (self.r << 16) | (self.g << 8) | self.b

    def to_normalized(self) -> Tuple[float, float, float, float]:
        """Channels as 0.0-1.0 floats (r, g, b, a)"""
        return (self.r / 255.0, self.g / 255.0, self.b / 255.0, self.a / 255.0)

    def to_hex(self) -> str:
        """'#AARRGGBB' string"""
        return f"#{self.to_argb():08X}"

    def close_to(self, other: 'Color', tolerance: int = 1) -> bool:
        """True when every channel differs by at most `tolerance`"""
        return all(
            abs(x - y) <= tolerance
            for x, y in zip(self.to_rgba(), other.to_rgba())
        )

    # === SERIALIZATION ===

    def to_dict(self) -> dict:
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}

    @classmethod
    def from_dict(cls, data: dict) -> 'Color':
        return cls.from_rgba(data["r"], data["g"], data["b"], data.get("a", 255))

    @staticmethod
    def white() -> 'Color':
        return Color(255, 255, 255, 255)

    @staticmethod
    def black() -> 'Color':
        return Color(0, 0, 0, 255)

    @staticmethod
    def transparent() -> 'Color':
        return Color(0, 0, 0, 0)

    # === STRING REPRESENTATION ===

    def __str__(self) -> str:
        return f"Color(r={self.r}, g={self.g}, b={self.b}, a={self.a})"
