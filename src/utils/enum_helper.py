"""Enum conversion utilities"""

from enum import Enum
from typing import TypeVar, Type, Optional, List, Any

# Generic type for any Enum subclass
E = TypeVar("E", bound=Enum)


class EnumHelper:
    """
    Utility class for working with the engine's string-valued Enums:
    - Parse editor/config strings into members (by value or by name)
    - Fall back to a default member instead of raising
    - List member values for validation messages
    """

    @staticmethod
    def to_string(enum_value: E) -> str:
        """
        Convert Enum member to its external string form.

        String-valued members return their value ("ease-in-out"),
        auto-valued members return their lowercase name.
        """
        if not isinstance(enum_value, Enum):
            raise TypeError(f"Expected Enum, got {type(enum_value).__name__}")
        if isinstance(enum_value.value, str):
            return enum_value.value
        return enum_value.name.lower()

    @staticmethod
    def from_string(enum_class: Type[E], text: str, default: Optional[E] = None) -> Optional[E]:
        """
        Parse string to Enum member, case-insensitive.

        Matches member values first ("ease-in", "squash-stretch"), then
        member names ("EASE_IN"). Underscores and dashes are interchangeable.

        Args:
            enum_class: Enum class to parse into
            text: Input string
            default: Return value if not found (None = raise)

        Returns:
            Enum member or default if provided
        """
        if not issubclass(enum_class, Enum):
            raise TypeError(f"{enum_class} is not an Enum class")

        key = text.strip().lower().replace("_", "-")
        for member in enum_class:
            if isinstance(member.value, str) and member.value.lower().replace("_", "-") == key:
                return member
        for member in enum_class:
            if member.name.lower().replace("_", "-") == key:
                return member

        if default is not None:
            return default
        raise ValueError(f"Invalid {enum_class.__name__} value: {text!r}")

    @staticmethod
    def to_enum(enum_class: Type[E], value: Any, default: Optional[E] = None) -> Optional[E]:
        """Convert string or member to enum instance"""
        if isinstance(value, enum_class):
            return value
        if isinstance(value, str):
            return EnumHelper.from_string(enum_class, value, default)
        if default is not None:
            return default
        raise TypeError(f"Expected str or {enum_class.__name__}, got {type(value)}")

    @staticmethod
    def list_values(enum_class: Type[E]) -> List[Any]:
        """List all Enum member values"""
        if not issubclass(enum_class, Enum):
            raise TypeError(f"{enum_class} is not an Enum class")

        return [member.value for member in enum_class]
