"""Character rigs: factories and built-in registry"""

from .factories import create_human_rig, create_animal_rig
from .registry import (
    CHARACTER_RIGS,
    get_character_rig,
    find_character_rig,
    default_rig,
    list_rigs,
)

__all__ = [
    "create_human_rig",
    "create_animal_rig",
    "CHARACTER_RIGS",
    "get_character_rig",
    "find_character_rig",
    "default_rig",
    "list_rigs",
]
