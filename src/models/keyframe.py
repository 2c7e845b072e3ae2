"""
Keyframe and motion curve models

Keyframe values are explicit tagged variants: ScalarKeyframe carries a float,
VectorKeyframe carries a Vector2. Interpolation call sites dispatch on the
variant, never on the runtime type of a bare value.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from models.enums import CameraEasing, CurveType
from models.vector import Vector2


@dataclass(frozen=True)
class MotionCurve:
    """
    Motion curve configuration between two keyframes

    Pure configuration. Optional knobs only apply to their curve type:
    tension/damping (spring), overshoot (overshoot), anticipation (anticipation).

    Example:
        MotionCurve(CurveType.SPRING, tension=400, damping=15)
    """
    type: CurveType = CurveType.EASE_IN_OUT
    tension: Optional[float] = None
    damping: Optional[float] = None
    overshoot: Optional[float] = None
    anticipation: Optional[float] = None


@dataclass(frozen=True)
class ScalarKeyframe:
    time: float                       # ms, scene-relative
    value: float
    curve: Optional[MotionCurve] = None
    velocity: Optional[float] = None


@dataclass(frozen=True)
class VectorKeyframe:
    time: float                       # ms, scene-relative
    value: Vector2
    curve: Optional[MotionCurve] = None
    velocity: Optional[float] = None


Keyframe = Union[ScalarKeyframe, VectorKeyframe]


@dataclass(frozen=True)
class SquashStretch:
    squash: float = 1.0
    stretch: float = 1.0


@dataclass(frozen=True)
class InbetweenFrame:
    """One generated sample between two keyframes"""
    time: float
    value: Union[float, Vector2]
    squash: float = 1.0
    stretch: float = 1.0


# === Camera ===

@dataclass(frozen=True)
class CameraState:
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    rotation: float = 0.0


@dataclass(frozen=True)
class CameraKeyframe:
    time: float                       # ms, scene-relative
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    rotation: float = 0.0
    easing: CameraEasing = CameraEasing.EASE_IN_OUT

    def to_state(self) -> CameraState:
        return CameraState(self.zoom, self.pan_x, self.pan_y, self.rotation)


@dataclass
class CameraAnimation:
    """Ordered camera keyframes for one scene"""
    keyframes: List[CameraKeyframe] = field(default_factory=list)
    duration: float = 0.0             # ms
    loop: bool = False
