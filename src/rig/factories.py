"""
Rig factories

Pure builders for the two rig families (human, four-legged animal). Every
call returns a fully-populated CharacterRig; the part graph is validated by
CharacterRig itself, so a bad edit here fails at import time, not at render.

Pivots sit on the joints (shoulder, hip, neck, tail base) so limb rotation
swings around the joint, not around the limb's visual center.
"""

from typing import Dict, Optional, Sequence

from models.enums import AnimalType, BodyVariant, RigCategory
from models.rig import (
    CharacterRig,
    EllipseShape,
    GroupShape,
    PathShape,
    PolygonShape,
    RigColors,
    Shape,
    SpritePart,
)
from models.vector import Transform, Vector2
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.RIG)

OUTLINE = "#333"
BROW = "#3B2A2A"
SHOE = "#4a4a4a"


def _part(
    part_id: str,
    name: str,
    z_index: int,
    shape: Shape,
    parent_id: Optional[str] = None,
    children: Sequence[str] = (),
    position: Vector2 = Vector2.zero(),
    pivot: Vector2 = Vector2(0.5, 0.5),
    rotation: float = 0.0,
) -> SpritePart:
    return SpritePart(
        id=part_id,
        name=name,
        z_index=z_index,
        shape=shape,
        default_transform=Transform(position=position, rotation=rotation, pivot=pivot),
        parent_id=parent_id,
        children=tuple(children),
    )


# ---------------------------------------------------------------------------
# HUMAN
# ---------------------------------------------------------------------------

def _hair_path(rig_id: str, is_child: bool, variant: BodyVariant, hs: float) -> str:
    """Hair outline for a head of size hs, centred on the hair anchor"""
    h2, h3, h4 = hs / 2, hs / 3, hs / 4
    key = rig_id.lower()

    if is_child and variant == BodyVariant.FEMININE and key == "luna":
        # rounded top, shorter sides
        return (f"M {-h2 - 2} 0 Q {-h2 - 4} {-h2} 0 {-h2 - 4} "
                f"Q {h2 + 4} {-h2} {h2 + 2} 0 Q {h3} 12 0 16 Q {-h3} 12 {-h2 - 2} 0")
    if is_child and variant == BodyVariant.FEMININE and key == "emma":
        # bob with fringe
        return (f"M {-h2 - 3} 4 Q {-h2 - 5} {-h3} {-h4} {-h2 - 4} Q 0 {-h3} {h4} {-h2 - 6} "
                f"Q {h2 + 3} {-h3} {h2 + 2} 6 Q {h3} 16 0 20 Q {-h3} 16 {-h2 - 3} 4")
    if is_child and variant == BodyVariant.MASCULINE and key == "max":
        # side-swept
        return (f"M {-h2 - 4} 4 Q {-h4} {-h2} {h4} {-h2 - 2} "
                f"Q {h2 + 4} {-h3} {h2 + 2} 8 Q {h3} 14 0 18 Q {-h3} 14 {-h2 - 4} 4")
    if is_child and variant == BodyVariant.FEMININE:
        return (f"M {-h2 - 4} 6 Q {-h2 - 6} {-h3} 0 {-h2 - 6} "
                f"Q {h2 + 6} {-h3} {h2 + 4} 6 Q {h3} 14 0 18 Q {-h3} 14 {-h2 - 4} 6")
    if is_child and variant == BodyVariant.MASCULINE:
        return (f"M {-h2 - 3} 4 Q {-h3} {-h2} 0 {-h2 - 4} Q {h3} {-h2} {h2 + 3} 4 "
                f"Q {h2} 10 0 14 Q {h2} 5 {h3} 8 Q 0 {-h3} {-h3} 8 Q {-h2} 5 {-h2 - 3} 10")
    return (f"M {-h2 - 3} 10 Q {-h2 - 5} {-h3} 0 {-h2 - 5} Q {h2 + 5} {-h3} {h2 + 3} 10 "
            f"Q {h2} 5 {h3} 8 Q 0 {-h3} {-h3} 8 Q {-h2} 5 {-h2 - 3} 10")


def create_human_rig(
    rig_id: str,
    name: str,
    category: RigCategory,
    colors: RigColors,
    description: str = "",
    variant: BodyVariant = BodyVariant.NEUTRAL,
) -> CharacterRig:
    """
    Build a human rig (child or adult proportions)

    Children get a bigger head on a shorter body; the variant changes the
    child torso width and hair style.

    Parts:
        body -> head -> (eyes -> pupils, brows, mouth, hair)
             -> arms -> hands
             -> legs -> feet
    """
    is_child = category == RigCategory.CHILD
    head_size = 58 if is_child else 35
    body_height = 44 if is_child else 70
    leg_length = 36 if is_child else 55
    arm_length = 32 if is_child else 45

    if is_child:
        torso_rx = {BodyVariant.FEMININE: 22, BodyVariant.MASCULINE: 26}.get(variant, 24)
    else:
        torso_rx = 25

    parts: Dict[str, SpritePart] = {}

    def add(part: SpritePart) -> None:
        parts[part.id] = part

    add(_part(
        "body", "Body", 5,
        GroupShape((
            EllipseShape(0, 0, torso_rx, body_height / 2, colors.primary),
            EllipseShape(0, -10, 20, 15, colors.secondary),
        )),
        children=("head", "leftArm", "rightArm", "leftLeg", "rightLeg"),
        position=Vector2(60, 90 if is_child else 100),
        pivot=Vector2(0.5, 0.3),
    ))

    add(_part(
        "head", "Head", 10,
        GroupShape((
            EllipseShape(0, 0, head_size / 2, head_size / 2 * 1.05, colors.skin),
            EllipseShape(-(head_size / 2 - 2), 0, 5, 8, colors.skin),
            EllipseShape(head_size / 2 - 2, 0, 5, 8, colors.skin),
        )),
        parent_id="body",
        children=("leftEye", "rightEye", "mouth", "hair", "leftBrow", "rightBrow"),
        position=Vector2(0, -body_height / 2 - head_size / 2 + 5),
        pivot=Vector2(0.5, 0.8),
    ))

    add(_part(
        "hair", "Hair", 11,
        PathShape(_hair_path(rig_id, is_child, variant, head_size), colors.hair),
        parent_id="head",
        position=Vector2(0, -head_size / 3),
    ))

    for side, sign in (("left", -1), ("right", 1)):
        cap = side.capitalize()
        add(_part(
            f"{side}Eye", f"{cap} Eye", 12,
            EllipseShape(0, 0, 8, 10, "#FFFFFF", stroke=OUTLINE, stroke_width=1),
            parent_id="head",
            children=(f"{side}Pupil",),
            position=Vector2(10 * sign, -5),
        ))
        add(_part(
            f"{side}Pupil", f"{cap} Pupil", 13,
            GroupShape((
                EllipseShape(0, 0, 4, 5, colors.eyes),
                EllipseShape(1, -2, 1.5, 1.5, "#FFFFFF"),
            )),
            parent_id=f"{side}Eye",
        ))
        add(_part(
            f"{side}Brow", f"{cap} Brow", 13,
            PathShape("M -6 0 Q 0 -3 6 0", "none", stroke=BROW, stroke_width=2),
            parent_id="head",
            position=Vector2(10 * sign, -18),
        ))

    add(_part(
        "mouth", "Mouth", 12,
        PathShape("M -8 0 Q 0 8 8 0", "none", stroke=OUTLINE, stroke_width=2),
        parent_id="head",
        position=Vector2(0, 12),
    ))

    for side, sign in (("left", -1), ("right", 1)):
        cap = side.capitalize()
        add(_part(
            f"{side}Arm", f"{cap} Arm", 4,
            GroupShape((EllipseShape(0, arm_length / 4, 8, arm_length / 2.5, colors.primary),)),
            parent_id="body",
            children=(f"{side}Hand",),
            position=Vector2(28 * sign, -body_height / 2 + 15),
            # shoulder joint sits on the inner top edge
            pivot=Vector2(0.8 if sign < 0 else 0.2, 0.1),
            rotation=-15 * sign,
        ))
        add(_part(
            f"{side}Hand", f"{cap} Hand", 4,
            EllipseShape(0, 8, 7, 9, colors.skin),
            parent_id=f"{side}Arm",
            position=Vector2(0, arm_length / 2),
            pivot=Vector2(0.5, 0),
        ))
        add(_part(
            f"{side}Leg", f"{cap} Leg", 3,
            EllipseShape(0, leg_length / 2, 10, leg_length / 2, colors.secondary),
            parent_id="body",
            children=(f"{side}Foot",),
            position=Vector2(12 * sign, body_height / 2 - 5),
            pivot=Vector2(0.5, 0),
        ))
        add(_part(
            f"{side}Foot", f"{cap} Foot", 2,
            EllipseShape(3 * sign, 5, 12, 6, SHOE),
            parent_id=f"{side}Leg",
            position=Vector2(0, leg_length),
            pivot=Vector2(0.5, 0),
        ))

    rig = CharacterRig(
        id=rig_id,
        name=name,
        category=category,
        width=120,
        height=180 if is_child else 220,
        colors=colors,
        parts=parts,
        root_part_id="body",
        description=description,
    )
    log.debug(f"Built human rig {rig_id}", parts=len(parts), variant=variant.value)
    return rig


# ---------------------------------------------------------------------------
# ANIMAL
# ---------------------------------------------------------------------------

def _ear_shape(animal: AnimalType, fill: str) -> Shape:
    if animal == AnimalType.BUNNY:
        return EllipseShape(0, -20, 6, 25, fill)
    if animal == AnimalType.CAT:
        return PolygonShape("0,-20 -10,5 10,5", fill)
    return EllipseShape(0, -5, 12, 15, fill)


def create_animal_rig(
    rig_id: str,
    name: str,
    animal_type: AnimalType,
    colors: RigColors,
    description: str = "",
) -> CharacterRig:
    """
    Build a four-legged animal rig (cat, dog or bunny)

    Parts:
        body -> head -> (ears, eyes, nose, mouth)
             -> tail
             -> front/back legs
    """
    parts: Dict[str, SpritePart] = {}

    def add(part: SpritePart) -> None:
        parts[part.id] = part

    add(_part(
        "body", "Body", 5,
        EllipseShape(0, 0, 40, 25, colors.primary),
        children=("head", "tail", "frontLeftLeg", "frontRightLeg", "backLeftLeg", "backRightLeg"),
        position=Vector2(70, 70),
    ))

    add(_part(
        "head", "Head", 10,
        EllipseShape(0, 0, 22, 20, colors.primary),
        parent_id="body",
        children=("leftEar", "rightEar", "leftEye", "rightEye", "nose", "mouth"),
        position=Vector2(35, -10),
        pivot=Vector2(0.3, 0.5),
    ))

    for side, sign in (("left", -1), ("right", 1)):
        cap = side.capitalize()
        add(_part(
            f"{side}Ear", f"{cap} Ear", 11,
            _ear_shape(animal_type, colors.primary),
            parent_id="head",
            position=Vector2(12 * sign, -15),
            pivot=Vector2(0.5, 1),
            rotation=15 * sign,
        ))
        add(_part(
            f"{side}Eye", f"{cap} Eye", 12,
            GroupShape((
                EllipseShape(0, 0, 6, 7, "#FFFFFF"),
                EllipseShape(1, 0, 3, 4, colors.eyes),
                EllipseShape(2, -1, 1, 1, "#FFFFFF"),
            )),
            parent_id="head",
            position=Vector2(8 * sign, -3),
        ))

    add(_part(
        "nose", "Nose", 13,
        PolygonShape("0,-4 -5,3 5,3", colors.secondary),
        parent_id="head",
        position=Vector2(15, 3),
    ))
    add(_part(
        "mouth", "Mouth", 12,
        PathShape("M -6 0 Q 0 5 6 0", "none", stroke=OUTLINE, stroke_width=1.5),
        parent_id="head",
        position=Vector2(12, 10),
    ))

    is_bunny = animal_type == AnimalType.BUNNY
    tail_path = ("M 0 0 Q -10 -5 -12 0 Q -10 5 0 0" if is_bunny
                 else "M 0 0 Q -15 -20 -25 -15 Q -30 -10 -25 -5")
    add(_part(
        "tail", "Tail", 1,
        PathShape(tail_path, colors.primary if is_bunny else "none",
                  stroke=colors.primary, stroke_width=0 if is_bunny else 8),
        parent_id="body",
        position=Vector2(-40, -5),
        pivot=Vector2(1, 0.5),
        rotation=-20,
    ))

    legs = (
        ("frontLeftLeg", "Front Left Leg", 4, Vector2(20, 20), 6),
        ("frontRightLeg", "Front Right Leg", 6, Vector2(30, 20), 6),
        ("backLeftLeg", "Back Left Leg", 4, Vector2(-25, 18), 8),
        ("backRightLeg", "Back Right Leg", 6, Vector2(-15, 18), 8),
    )
    for part_id, part_name, z, pos, rx in legs:
        add(_part(
            part_id, part_name, z,
            EllipseShape(0, 15, rx, 18, colors.primary),
            parent_id="body",
            position=pos,
            pivot=Vector2(0.5, 0),
        ))

    rig = CharacterRig(
        id=rig_id,
        name=name,
        category=RigCategory.ANIMAL,
        width=140,
        height=120,
        colors=colors,
        parts=parts,
        root_part_id="body",
        description=description,
    )
    log.debug(f"Built animal rig {rig_id}", parts=len(parts), animal=animal_type.value)
    return rig
