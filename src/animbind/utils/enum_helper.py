"""Enum conversion utilities"""

from enum import Enum
from typing import TypeVar, Type, Optional, List, Any

# Generic type for any Enum subclass
E = TypeVar("E", bound=Enum)


def _fold(text: str) -> str:
    """Case- and separator-insensitive key: 'enumType' == 'ENUM_TYPE'"""
    return text.replace("_", "").replace("-", "").upper()


class EnumHelper:
    """
    Utility class for working with Enums:
    - Parse strings back to enum members (by name or value, case-insensitive)
    - Map foreign enum members (e.g. the engine's data-type enum) by name
    - List all member names
    """

    @staticmethod
    def from_string(enum_class: Type[E], name: str, case_insensitive: bool = True,
                    default: Optional[E] = None) -> Optional[E]:
        """
        Parse string to Enum member, matching member names and string values.

        Args:
            enum_class: Enum class to parse into
            name: 'enumType', 'ENUM_TYPE', 'viewModel', 'info', ...
            case_insensitive: If True, also ignores underscores
            default: Return value if not found (None = raise)

        Returns:
            Enum member or default if provided
        """
        if not issubclass(enum_class, Enum):
            raise TypeError(f"{enum_class} is not an Enum class")

        key = _fold(name.strip()) if case_insensitive else name

        for member in enum_class:
            candidates = [member.name]
            if isinstance(member.value, str):
                candidates.append(member.value)
            for candidate in candidates:
                if (_fold(candidate) if case_insensitive else candidate) == key:
                    return member

        if default is not None:
            return default
        raise ValueError(f"Invalid {enum_class.__name__} name: {name}")

    @staticmethod
    def list_names(enum_class: Type[E], lowercase: bool = False) -> List[str]:
        """
        List all Enum member names.

        Args:
            enum_class: Enum class to inspect
            lowercase: Return lowercase names

        Returns:
            List of member names (strings)
        """
        if not issubclass(enum_class, Enum):
            raise TypeError(f"{enum_class} is not an Enum class")

        if lowercase:
            return [member.name.lower() for member in enum_class]
        return [member.name for member in enum_class]

    @staticmethod
    def to_enum(enum_class: Type[E], value: Any) -> E:
        """
        Convert a string, our own member, or a foreign Enum member to enum_class.

        Foreign members are matched through their name, so the engine's
        DataType.enumType maps onto PropertyKind.ENUM_TYPE.
        """
        if isinstance(value, enum_class):
            return value
        if isinstance(value, Enum):
            return EnumHelper.from_string(enum_class, value.name)
        if isinstance(value, str):
            return EnumHelper.from_string(enum_class, value)
        raise TypeError(f"Expected str or {enum_class.__name__}, got {type(value)}")

    @staticmethod
    def to_name(value: Any) -> str:
        """Convert enum instance to string name"""
        if hasattr(value, "name"):
            return value.name
        return str(value)
