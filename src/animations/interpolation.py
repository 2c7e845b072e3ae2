"""
Keyframe interpolation

Pure functions of time: inbetween generation, squash/stretch deformation,
arc and bezier motion paths, frame-rate retargeting and keyframe sampling.
Nothing here keeps state between calls, so an exporter can sample any t in
any order.
"""

import math
from typing import Dict, List, Optional, Sequence, Union

from animations.easing import ease_out_quad, get_ease_function
from models.enums import CurveType
from models.keyframe import (
    InbetweenFrame,
    Keyframe,
    MotionCurve,
    ScalarKeyframe,
    SquashStretch,
    VectorKeyframe,
)
from models.vector import Vector2

KeyframeValue = Union[float, Vector2]

DEFAULT_CURVE = MotionCurve(CurveType.EASE_IN_OUT)


# === Squash & stretch ===

def calculate_squash_stretch(velocity: float, max_deformation: float = 0.3) -> SquashStretch:
    """
    Deformation from velocity

    Positive velocity stretches (stretch > 1, squash < 1), negative velocity
    compresses (squash > 1, stretch < 1). Magnitude is |velocity| * 0.01,
    clamped to max_deformation.
    """
    deformation = min(abs(velocity) * 0.01, max_deformation)

    if velocity > 0:
        return SquashStretch(squash=1 - deformation * 0.5, stretch=1 + deformation)
    if velocity < 0:
        return SquashStretch(squash=1 + deformation, stretch=1 - deformation * 0.5)
    return SquashStretch()


def impact_squash(t: float, intensity: float = 0.3) -> SquashStretch:
    """
    Landing impact: squash in over the first 30%, recover over the last 70%
    """
    if t < 0.3:
        curve = ease_out_quad(t / 0.3)
    else:
        curve = 1 - ease_out_quad((t - 0.3) / 0.7)
    amount = curve * intensity
    return SquashStretch(squash=1 + amount, stretch=1 - amount * 0.5)


# === Inbetweens ===

def _lerp_value(start: Keyframe, end: Keyframe, eased: float) -> KeyframeValue:
    if isinstance(start, VectorKeyframe) and isinstance(end, VectorKeyframe):
        return start.value.lerp(end.value, eased)
    if isinstance(start, ScalarKeyframe) and isinstance(end, ScalarKeyframe):
        return start.value + (end.value - start.value) * eased
    raise TypeError(
        f"Cannot interpolate {type(start).__name__} to {type(end).__name__}"
    )


def _value_delta(start: Keyframe, end: Keyframe) -> float:
    """Scalar delta, or the y component for vectors"""
    if isinstance(start, VectorKeyframe) and isinstance(end, VectorKeyframe):
        return end.value.y - start.value.y
    return end.value - start.value


def estimate_velocity(start: Keyframe, end: Keyframe, t: float) -> float:
    """
    Parabolic velocity estimate peaking at the segment midpoint

    (delta / duration) * 4t(1-t) * 1000. Feeds squash/stretch only.
    """
    duration = end.time - start.time
    if duration <= 0:
        return 0.0
    return (_value_delta(start, end) / duration) * 4 * t * (1 - t) * 1000


def generate_inbetweens(
    start: Keyframe,
    end: Keyframe,
    frame_count: int,
    curve: Optional[MotionCurve] = None,
) -> List[InbetweenFrame]:
    """
    Uniformly sampled frames between two keyframes, both ends included

    Args:
        start: First keyframe
        end: Second keyframe (same variant as start)
        frame_count: Number of steps; frame_count + 1 frames are returned
        curve: Motion curve (default ease-in-out)

    Returns:
        frame_count + 1 InbetweenFrames; squash/stretch only deviates from 1
        for the squash-stretch curve
    """
    if frame_count < 1:
        raise ValueError(f"frame_count must be >= 1, got {frame_count}")

    curve = curve or DEFAULT_CURVE
    ease = get_ease_function(curve)
    duration = end.time - start.time
    frames: List[InbetweenFrame] = []

    for i in range(frame_count + 1):
        t = i / frame_count
        value = _lerp_value(start, end, ease(t))

        squash, stretch = 1.0, 1.0
        if curve.type == CurveType.SQUASH_STRETCH:
            deform = calculate_squash_stretch(estimate_velocity(start, end, t))
            squash, stretch = deform.squash, deform.stretch

        time = end.time if i == frame_count else start.time + t * duration
        frames.append(InbetweenFrame(time=time, value=value, squash=squash, stretch=stretch))

    return frames


# === Motion paths ===

def arc_interpolation(start: Vector2, end: Vector2, t: float, arc_height: float = 0.3) -> Vector2:
    """
    Straight-line motion lifted by a sine arc (peak at t = 0.5)

    Arc height is proportional to horizontal travel distance; y grows downward.
    """
    linear = start.lerp(end, t)
    arc_offset = math.sin(t * math.pi) * arc_height * abs(end.x - start.x)
    return Vector2(linear.x, linear.y - arc_offset)


def bezier_interpolation(p0: Vector2, p1: Vector2, p2: Vector2, p3: Vector2, t: float) -> Vector2:
    """Cubic Bezier with control points p1, p2"""
    u = 1 - t
    b0 = u * u * u
    b1 = 3 * u * u * t
    b2 = 3 * u * t * t
    b3 = t * t * t
    return Vector2(
        b0 * p0.x + b1 * p1.x + b2 * p2.x + b3 * p3.x,
        b0 * p0.y + b1 * p1.y + b2 * p2.y + b3 * p3.y,
    )


# === Presets ===

MOTION_PRESETS: Dict[str, MotionCurve] = {
    "linear": MotionCurve(CurveType.LINEAR),
    "smooth": MotionCurve(CurveType.EASE_IN_OUT),
    "bouncy": MotionCurve(CurveType.SPRING, tension=400, damping=15),
    "elastic": MotionCurve(CurveType.ELASTIC),
    "bounce": MotionCurve(CurveType.BOUNCE),
    "snappy": MotionCurve(CurveType.ANTICIPATION, anticipation=0.15),
    "pop_in": MotionCurve(CurveType.OVERSHOOT, overshoot=0.2),
    "squash_stretch": MotionCurve(CurveType.SQUASH_STRETCH),
    "gentle": MotionCurve(CurveType.EASE_OUT),
    "slow_start": MotionCurve(CurveType.EASE_IN),
}

# Callers rely on this table for motion that feels right per action
ACTION_CURVES: Dict[str, MotionCurve] = {
    "walk": MOTION_PRESETS["smooth"],
    "run": MOTION_PRESETS["bouncy"],
    "jump": MotionCurve(CurveType.ANTICIPATION, anticipation=0.25),
    "land": MOTION_PRESETS["squash_stretch"],
    "wave": MOTION_PRESETS["elastic"],
    "talk": MOTION_PRESETS["gentle"],
    "surprised": MOTION_PRESETS["pop_in"],
    "dance": MOTION_PRESETS["bouncy"],
}


def get_motion_curve_for_action(action: str) -> MotionCurve:
    """Motion curve for an action name; unknown actions move smoothly"""
    return ACTION_CURVES.get(action.lower(), MOTION_PRESETS["smooth"])


# === Frame-rate retargeting ===

def convert_frame_rate(
    keyframes: Sequence[Keyframe],
    original_fps: float,
    target_fps: float,
) -> List[InbetweenFrame]:
    """
    Resample keyframes for a different frame rate

    Each consecutive pair gets round(target/original) steps of inbetweens
    using the start keyframe's curve (default ease-in-out). The shared
    boundary frame between segments is dropped and the last keyframe is
    appended unmodified.

    Returns:
        [] for fewer than two keyframes
    """
    if len(keyframes) < 2:
        return []
    if original_fps <= 0 or target_fps <= 0:
        raise ValueError("Frame rates must be positive")

    # Half-up rounding, never fewer than one step per segment
    steps = max(1, int(target_fps / original_fps + 0.5))
    result: List[InbetweenFrame] = []

    for start, end in zip(keyframes, keyframes[1:]):
        segment = generate_inbetweens(start, end, steps, start.curve or DEFAULT_CURVE)
        result.extend(segment[:-1])

    last = keyframes[-1]
    result.append(InbetweenFrame(time=last.time, value=last.value, squash=1.0, stretch=1.0))
    return result


def frames_to_keyframes(
    frames: Sequence[InbetweenFrame],
    curve: Optional[MotionCurve] = None,
) -> List[Keyframe]:
    """Turn generated frames back into tagged keyframes (e.g. for a second retarget)"""
    keyframes: List[Keyframe] = []
    for frame in frames:
        if isinstance(frame.value, Vector2):
            keyframes.append(VectorKeyframe(time=frame.time, value=frame.value, curve=curve))
        else:
            keyframes.append(ScalarKeyframe(time=frame.time, value=frame.value, curve=curve))
    return keyframes


# === Sampling ===

def validate_keyframes(keyframes: Sequence[Keyframe]) -> None:
    """
    Raises:
        ValueError: times decrease, or scalar and vector keyframes are mixed
    """
    for a, b in zip(keyframes, keyframes[1:]):
        if b.time < a.time:
            raise ValueError(f"Keyframe times must be non-decreasing ({a.time} > {b.time})")
        if type(a) is not type(b):
            raise ValueError("Keyframe track mixes scalar and vector keyframes")


def sample_keyframes(
    keyframes: Sequence[Keyframe],
    time: float,
    default_curve: Optional[MotionCurve] = None,
) -> KeyframeValue:
    """
    Value of a keyframe track at an arbitrary time (ms)

    Clamps before the first and after the last keyframe. Each segment uses
    its start keyframe's curve, or default_curve (ease-in-out) if it has none.
    """
    default_curve = default_curve or DEFAULT_CURVE
    if not keyframes:
        raise ValueError("Cannot sample an empty keyframe track")

    if time <= keyframes[0].time:
        return keyframes[0].value
    if time >= keyframes[-1].time:
        return keyframes[-1].value

    for start, end in zip(keyframes, keyframes[1:]):
        if start.time <= time <= end.time:
            span = end.time - start.time
            if span <= 0:
                return end.value
            ease = get_ease_function(start.curve or default_curve)
            return _lerp_value(start, end, ease((time - start.time) / span))

    return keyframes[-1].value
