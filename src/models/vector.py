"""
2D geometry primitives - Vector2 and Transform

Positions, pivots and scale all use Vector2. Transform pivot is normalized
to the part's local bounding box and is clamped into [0,1] x [0,1].
"""

import math
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class Vector2:
    """Immutable 2D vector"""
    x: float = 0.0
    y: float = 0.0

    # === CONSTRUCTORS ===

    @classmethod
    def zero(cls) -> 'Vector2':
        return cls(0.0, 0.0)

    @classmethod
    def one(cls) -> 'Vector2':
        return cls(1.0, 1.0)

    # === ARITHMETIC ===

    def __add__(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> 'Vector2':
        return Vector2(self.x * k, self.y * k)

    __rmul__ = __mul__

    def scale_by(self, other: 'Vector2') -> 'Vector2':
        """Component-wise multiply"""
        return Vector2(self.x * other.x, self.y * other.y)

    def rotate(self, degrees: float) -> 'Vector2':
        """Rotate around the origin (clockwise in screen space, y down)"""
        rad = math.radians(degrees)
        cos, sin = math.cos(rad), math.sin(rad)
        return Vector2(self.x * cos - self.y * sin, self.x * sin + self.y * cos)

    def lerp(self, other: 'Vector2', t: float) -> 'Vector2':
        return Vector2(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def to_tuple(self) -> tuple:
        return (self.x, self.y)


def _clamp01(v: float) -> float:
    return max(0.0, min(1.0, v))


@dataclass(frozen=True)
class Transform:
    """
    Local transform of a rig part

    rotation is in degrees; pivot is the rotation/scale origin relative to
    the part's bounding box (0,0 = top-left, 1,1 = bottom-right).
    """
    position: Vector2 = field(default_factory=Vector2.zero)
    rotation: float = 0.0
    scale: Vector2 = field(default_factory=Vector2.one)
    pivot: Vector2 = field(default_factory=lambda: Vector2(0.5, 0.5))

    def __post_init__(self):
        clamped = Vector2(_clamp01(self.pivot.x), _clamp01(self.pivot.y))
        if clamped != self.pivot:
            object.__setattr__(self, "pivot", clamped)

    @classmethod
    def identity(cls) -> 'Transform':
        return cls()

    def with_changes(self, **changes) -> 'Transform':
        """Copy with some fields replaced (pivot stays clamped)"""
        return replace(self, **changes)

    def compose(self, child: 'Transform') -> 'Transform':
        """
        Resolve a child's local transform into this (parent) space.

        The child's position offset is scaled and rotated by the parent,
        rotations add up and scales multiply. The child keeps its own pivot.
        """
        offset = child.position.scale_by(self.scale).rotate(self.rotation)
        return Transform(
            position=self.position + offset,
            rotation=self.rotation + child.rotation,
            scale=self.scale.scale_by(child.scale),
            pivot=child.pivot,
        )
