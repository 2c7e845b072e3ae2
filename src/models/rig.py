"""
Rig domain models

A CharacterRig is an immutable, validated tree of SpritePart nodes. Every
part carries a default local Transform and one draw primitive (Shape).
Parts nest only through parent/child ids; a GroupShape nests shapes, never parts.

Validation happens once, at construction (__post_init__), and raises
RigValidationError for any inconsistent skeleton.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Mapping, Optional, Tuple, Union

from models.enums import RigCategory, ShapeKind
from models.vector import Transform


class RigValidationError(ValueError):
    """Raised when a rig's part graph is not a single rooted tree"""


# ---------------------------------------------------------------------------
# SHAPES (tagged variants)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EllipseShape:
    cx: float
    cy: float
    rx: float
    ry: float
    fill: str
    stroke: Optional[str] = None
    stroke_width: Optional[float] = None
    kind: ClassVar[ShapeKind] = ShapeKind.ELLIPSE


@dataclass(frozen=True)
class RectShape:
    x: float
    y: float
    width: float
    height: float
    fill: str
    rx: Optional[float] = None
    stroke: Optional[str] = None
    kind: ClassVar[ShapeKind] = ShapeKind.RECT


@dataclass(frozen=True)
class PathShape:
    d: str
    fill: str
    stroke: Optional[str] = None
    stroke_width: Optional[float] = None
    kind: ClassVar[ShapeKind] = ShapeKind.PATH


@dataclass(frozen=True)
class PolygonShape:
    points: str
    fill: str
    stroke: Optional[str] = None
    kind: ClassVar[ShapeKind] = ShapeKind.POLYGON


@dataclass(frozen=True)
class GroupShape:
    children: Tuple['Shape', ...] = ()
    kind: ClassVar[ShapeKind] = ShapeKind.GROUP


Shape = Union[EllipseShape, RectShape, PathShape, PolygonShape, GroupShape]


# ---------------------------------------------------------------------------
# PARTS & RIG
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SpritePart:
    """One node of the rig skeleton"""
    id: str
    name: str
    z_index: int
    shape: Shape
    default_transform: Transform = field(default_factory=Transform.identity)
    parent_id: Optional[str] = None
    children: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RigColors:
    primary: str
    secondary: str
    skin: str
    hair: str
    eyes: str


@dataclass(frozen=True)
class CharacterRig:
    """
    Immutable character rig

    Shared reference data: scenes reference a rig by id and layer their own
    per-part overrides on top (see world_transforms), never mutating it.
    """
    id: str
    name: str
    category: RigCategory
    width: float
    height: float
    colors: RigColors
    parts: Mapping[str, SpritePart]
    root_part_id: str
    description: str = ""

    def __post_init__(self):
        validate_part_graph(self.parts, self.root_part_id, rig_id=self.id)

    # === Queries ===

    @property
    def root(self) -> SpritePart:
        return self.parts[self.root_part_id]

    def get_part(self, part_id: str) -> Optional[SpritePart]:
        return self.parts.get(part_id)

    def paint_order(self) -> List[SpritePart]:
        """
        All parts in paint order: ascending zIndex across the whole rig.

        Ties keep declaration order.
        """
        return sorted(self.parts.values(), key=lambda p: p.z_index)

    def iter_depth_first(self) -> List[SpritePart]:
        """Parts from the root down, parents before children"""
        ordered: List[SpritePart] = []
        stack = [self.root_part_id]
        while stack:
            part = self.parts[stack.pop()]
            ordered.append(part)
            stack.extend(reversed(part.children))
        return ordered

    def world_transforms(
        self,
        overrides: Optional[Mapping[str, Transform]] = None,
        root_transform: Optional[Transform] = None,
    ) -> Dict[str, Transform]:
        """
        Resolve every part's transform in rig space

        Args:
            overrides: part_id -> local Transform replacing the default
            root_transform: placement of the whole rig (scene space)

        Returns:
            part_id -> composed Transform
        """
        overrides = overrides or {}
        resolved: Dict[str, Transform] = {}
        for part in self.iter_depth_first():
            local = overrides.get(part.id, part.default_transform)
            if part.parent_id is None:
                base = root_transform or Transform.identity()
                resolved[part.id] = base.compose(local)
            else:
                resolved[part.id] = resolved[part.parent_id].compose(local)
        return resolved


def validate_part_graph(parts: Mapping[str, SpritePart], root_part_id: str, rig_id: str = "?") -> None:
    """
    Check that parts form one tree rooted at root_part_id

    Raises:
        RigValidationError: missing/extra roots, dangling ids, parent/child
            disagreement, cycles, or parts unreachable from the root
    """
    if root_part_id not in parts:
        raise RigValidationError(f"Rig '{rig_id}': root part '{root_part_id}' not in parts")

    roots = [p.id for p in parts.values() if p.parent_id is None]
    if roots != [root_part_id]:
        raise RigValidationError(
            f"Rig '{rig_id}': expected single root '{root_part_id}', found {roots}"
        )

    for key, part in parts.items():
        if key != part.id:
            raise RigValidationError(f"Rig '{rig_id}': part key '{key}' != part id '{part.id}'")
        if part.parent_id is not None:
            parent = parts.get(part.parent_id)
            if parent is None:
                raise RigValidationError(
                    f"Rig '{rig_id}': part '{part.id}' has dangling parent '{part.parent_id}'"
                )
            if part.id not in parent.children:
                raise RigValidationError(
                    f"Rig '{rig_id}': parent '{parent.id}' does not list child '{part.id}'"
                )
        for child_id in part.children:
            child = parts.get(child_id)
            if child is None:
                raise RigValidationError(
                    f"Rig '{rig_id}': part '{part.id}' lists missing child '{child_id}'"
                )
            if child.parent_id != part.id:
                raise RigValidationError(
                    f"Rig '{rig_id}': child '{child_id}' has parent '{child.parent_id}', "
                    f"expected '{part.id}'"
                )

    visited = set()
    stack = [root_part_id]
    while stack:
        part_id = stack.pop()
        if part_id in visited:
            raise RigValidationError(f"Rig '{rig_id}': cycle through part '{part_id}'")
        visited.add(part_id)
        stack.extend(parts[part_id].children)

    orphans = sorted(set(parts) - visited)
    if orphans:
        raise RigValidationError(f"Rig '{rig_id}': parts unreachable from root: {orphans}")
