"""
Built-in character rigs and lookup

The registry is read-only reference data. Lookups never raise: a missing
rig returns None and callers fall back to default_rig().
"""

from typing import List, Optional, Tuple

from models.enums import AnimalType, BodyVariant, RigCategory
from models.rig import CharacterRig, RigColors
from rig.factories import create_animal_rig, create_human_rig
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.RIG)


CHARACTER_RIGS: Tuple[CharacterRig, ...] = (
    # Main hero kids
    create_human_rig("kiara", "Kiara", RigCategory.CHILD, RigColors(
        primary="#FFB800",    # bright yellow shirt
        secondary="#FF6B00",  # orange accents
        skin="#F2C28B",
        hair="#3B1C0A",
        eyes="#2E3192",
    ), "An energetic girl who loves to sing and dance", BodyVariant.FEMININE),

    create_human_rig("jayden", "Jayden", RigCategory.CHILD, RigColors(
        primary="#00C2FF",    # cyan shirt
        secondary="#0074FF",  # deep blue shorts
        skin="#8D5A2B",
        hair="#1A1A1A",
        eyes="#1B75BC",
    ), "A playful boy who loves soccer and exploring", BodyVariant.MASCULINE),

    create_human_rig("luna", "Luna", RigCategory.CHILD, RigColors(
        primary="#FF6B9D",
        secondary="#FF8FB3",
        skin="#FFDAB9",
        hair="#8B4513",
        eyes="#4A90D9",
    ), "A curious and brave girl who loves adventures", BodyVariant.FEMININE),

    create_human_rig("max", "Max", RigCategory.CHILD, RigColors(
        primary="#3498DB",
        secondary="#2980B9",
        skin="#FFDAB9",
        hair="#2C3E50",
        eyes="#27AE60",
    ), "A friendly and adventurous boy", BodyVariant.MASCULINE),

    create_human_rig("emma", "Emma", RigCategory.CHILD, RigColors(
        primary="#9B59B6",
        secondary="#8E44AD",
        skin="#DEB887",
        hair="#1A1A1A",
        eyes="#8B4513",
    ), "A creative girl who loves to paint", BodyVariant.FEMININE),

    # Animal friends
    create_animal_rig("whiskers", "Whiskers", AnimalType.CAT, RigColors(
        primary="#FF9F43",
        secondary="#E17055",
        skin="#FFEAA7",
        hair="#FF9F43",
        eyes="#27AE60",
    ), "A playful orange cat"),

    create_animal_rig("buddy", "Buddy", AnimalType.DOG, RigColors(
        primary="#A0522D",
        secondary="#8B4513",
        skin="#DEB887",
        hair="#A0522D",
        eyes="#2C3E50",
    ), "A loyal and friendly dog"),

    create_animal_rig("cotton", "Cotton", AnimalType.BUNNY, RigColors(
        primary="#FFFFFF",
        secondary="#FFB6C1",
        skin="#FFF0F5",
        hair="#FFFFFF",
        eyes="#FF69B4",
    ), "A fluffy white bunny"),
)

# Generic words in character names -> rig id
NAME_DEFAULTS = (
    ("cat", "whiskers"),
    ("kitten", "whiskers"),
    ("dog", "buddy"),
    ("puppy", "buddy"),
    ("bunny", "cotton"),
    ("rabbit", "cotton"),
    ("girl", "kiara"),
    ("boy", "jayden"),
    ("kid", "kiara"),
    ("child", "kiara"),
)


def get_character_rig(identifier: str, rigs: Optional[Tuple[CharacterRig, ...]] = None) -> Optional[CharacterRig]:
    """
    Case-insensitive lookup: by id first, then by display name

    Returns:
        The rig, or None if nothing matches
    """
    rigs = CHARACTER_RIGS if rigs is None else rigs
    key = identifier.strip().lower()
    for rig in rigs:
        if rig.id.lower() == key:
            return rig
    for rig in rigs:
        if rig.name.lower() == key:
            return rig
    return None


def default_rig(rigs: Optional[Tuple[CharacterRig, ...]] = None) -> CharacterRig:
    """First child rig (or the first rig if there are no children)"""
    rigs = CHARACTER_RIGS if rigs is None else rigs
    for rig in rigs:
        if rig.category == RigCategory.CHILD:
            return rig
    return rigs[0]


def find_character_rig(name: str) -> CharacterRig:
    """
    Best rig for a free-form character name, never None

    1. exact id/name lookup
    2. rig name contained in the text (or vice versa)
    3. generic words (cat, puppy, girl, ...)
    4. default_rig()
    """
    rig = get_character_rig(name)
    if rig:
        return rig

    lower = name.lower()
    for candidate in CHARACTER_RIGS:
        rig_name = candidate.name.lower()
        if lower and (rig_name in lower or lower in rig_name):
            return candidate

    for word, rig_id in NAME_DEFAULTS:
        if word in lower:
            return get_character_rig(rig_id) or default_rig()

    fallback = default_rig()
    log.debug(f"No rig for '{name}', using {fallback.id}")
    return fallback


def list_rigs(category: Optional[RigCategory] = None) -> List[CharacterRig]:
    return [r for r in CHARACTER_RIGS if category is None or r.category == category]
