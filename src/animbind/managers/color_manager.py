"""
Color Manager - Processes named color definitions

Processes color data from ConfigManager (does NOT load files).
Single responsibility: Parse and provide access to the named color table used
by the color normalizer.
"""

from typing import Dict, List

from animbind.models.color import Color
from animbind.utils.colors import hex_to_color


class ColorManager:
    """
    Named color table (data processor only)

    Responsibilities:
    - Parse named color data (hex strings or [r, g, b] lists)
    - Cache Color values under lowercase keys
    - Resolve aliases (grey/gray)

    Example:
        color_mgr = ColorManager({
            'named': {'teal': '#3EC293', 'red': [244, 67, 54]},
            'aliases': {'gray': 'grey'},
        })

        color_mgr.get('Teal')         # Color(62, 194, 147, 255)
        color_mgr.named_colors        # {'teal': Color(...), 'red': Color(...)}
    """

    def __init__(self, data: dict):
        """
        Initialize ColorManager with parsed config data

        Args:
            data: Config dict with 'named' and optional 'aliases' keys
                  Example: {
                      'named': {'teal': '#3EC293', 'grey': '#9E9E9E', ...},
                      'aliases': {'gray': 'grey'}
                  }
        """
        self.data = data
        self._named_cache: Dict[str, Color] = {}
        self._process_data()

    def _process_data(self):
        """Process color data and build the lookup cache"""
        self._named_cache = {
            name.strip().lower(): self._parse_entry(name, entry)
            for name, entry in (self.data.get('named') or {}).items()
        }

        for alias, target in (self.data.get('aliases') or {}).items():
            target_key = target.strip().lower()
            if target_key not in self._named_cache:
                raise KeyError(f"Alias '{alias}' points to unknown color '{target}'")
            self._named_cache[alias.strip().lower()] = self._named_cache[target_key]

    @staticmethod
    def _parse_entry(name: str, entry) -> Color:
        if isinstance(entry, str):
            return hex_to_color(entry)
        if isinstance(entry, (list, tuple)) and len(entry) in (3, 4):
            return Color.from_rgba(*entry) if len(entry) == 4 else Color.from_rgb(*entry)
        raise ValueError(f"Invalid definition for named color '{name}': {entry!r}")

    @property
    def named_colors(self) -> Dict[str, Color]:
        """Get all named colors as {lowercase name: Color}"""
        return self._named_cache

    @property
    def names(self) -> List[str]:
        return sorted(self._named_cache)

    def get(self, name: str) -> Color:
        """
        Get Color for a name (trimmed, case-insensitive)

        Raises:
            KeyError: If the name is not in the table
        """
        return self._named_cache[name.strip().lower()]

    def has(self, name: str) -> bool:
        return name.strip().lower() in self._named_cache
