"""
Easing functions

Every function maps normalized progress t (0.0 = start, 1.0 = end) to an
eased factor. All satisfy f(0) = 0 and f(1) = 1; anticipation dips below 0
and overshoot rises above 1 in between. spring converges to 1 and is within
1e-3 of it at t = 1 for the tension/damping values used by the presets.
"""

import math
from typing import Callable

from models.enums import CurveType
from models.keyframe import MotionCurve

EaseFn = Callable[[float], float]


def ease_linear(t: float) -> float:
    """Linear easing (constant speed)"""
    return t


# === Quadratic ===

def ease_in_quad(t: float) -> float:
    """Quadratic ease-in (slow start → fast end)"""
    return t * t


def ease_out_quad(t: float) -> float:
    """Quadratic ease-out (fast start → slow end)"""
    return t * (2 - t)


def ease_in_out_quad(t: float) -> float:
    """Quadratic ease-in-out (slow start → fast middle → slow end)"""
    return 2 * t * t if t < 0.5 else -1 + (4 - 2 * t) * t


# === Cubic ===

def ease_in_cubic(t: float) -> float:
    """Cubic ease-in (very slow start)"""
    return t * t * t


def ease_out_cubic(t: float) -> float:
    """Cubic ease-out (very slow end)"""
    return (t - 1) ** 3 + 1


def ease_in_out_cubic(t: float) -> float:
    """Cubic ease-in-out (very smooth acceleration/deceleration)"""
    return 4 * t ** 3 if t < 0.5 else (t - 1) * (2 * t - 2) ** 2 + 1


# === Physical / cartoon curves ===

def spring(t: float, tension: float = 300, damping: float = 20) -> float:
    """
    Closed-form damped spring response

    zeta = damping / (2 * sqrt(tension)). Underdamped (zeta < 1) oscillates
    around 1 with a decaying cosine + sine; otherwise the critically damped
    exponential approach is used.

    Args:
        t: Progress (seconds of spring time, normalized to the segment)
        tension: Spring stiffness
        damping: Damping coefficient
    """
    omega = math.sqrt(tension)
    zeta = damping / (2 * math.sqrt(tension))

    if zeta < 1:
        omega_d = omega * math.sqrt(1 - zeta * zeta)
        decay = math.exp(-zeta * omega * t)
        return 1 - decay * (math.cos(omega_d * t) + (zeta * omega / omega_d) * math.sin(omega_d * t))

    return 1 - (1 + omega * t) * math.exp(-omega * t)


def bounce_out(t: float) -> float:
    """Four-segment bouncing ball (standard bounce-out)"""
    n1 = 7.5625
    d1 = 2.75

    if t < 1 / d1:
        return n1 * t * t
    if t < 2 / d1:
        t -= 1.5 / d1
        return n1 * t * t + 0.75
    if t < 2.5 / d1:
        t -= 2.25 / d1
        return n1 * t * t + 0.9375
    t -= 2.625 / d1
    return n1 * t * t + 0.984375


def elastic_out(t: float) -> float:
    """Elastic snap past the target, settling with decaying oscillation"""
    if t == 0:
        return 0.0
    if t == 1:
        return 1.0
    c4 = (2 * math.pi) / 3
    return 2 ** (-10 * t) * math.sin((10 * t - 0.75) * c4) + 1


def anticipation(t: float, amount: float = 0.2) -> float:
    """
    Wind-up then release

    First 20%: pull back to -amount. Remaining 80%: ease out from -amount to 1.
    """
    if t < 0.2:
        return -amount * ease_out_quad(t / 0.2)
    return -amount + (1 + amount) * ease_out_cubic((t - 0.2) / 0.8)


def overshoot(t: float, amount: float = 0.15) -> float:
    """
    Pass the target then settle

    First 70%: ease up to 1 + amount. Remaining 30%: settle back to 1.
    """
    if t < 0.7:
        return (1 + amount) * ease_out_quad(t / 0.7)
    return 1 + amount * (1 - ease_out_quad((t - 0.7) / 0.3))


def camera_spring(t: float) -> float:
    """
    Lightweight wobble used by camera moves

    Ends at 1 - e^-4 (about 0.982) rather than exactly 1.
    """
    return 1 - math.cos(t * math.pi * 2) * math.exp(-t * 4)


# === Curve lookup ===

def get_ease_function(curve: MotionCurve) -> EaseFn:
    """
    Resolve a MotionCurve into a single-argument easing function

    squash-stretch moves along ease-in-out-cubic; the deformation itself is
    derived from velocity by the interpolation layer.
    """
    kind = curve.type
    if kind == CurveType.LINEAR:
        return ease_linear
    if kind == CurveType.EASE_IN:
        return ease_in_cubic
    if kind == CurveType.EASE_OUT:
        return ease_out_cubic
    if kind in (CurveType.EASE_IN_OUT, CurveType.SQUASH_STRETCH):
        return ease_in_out_cubic
    if kind == CurveType.SPRING:
        tension = curve.tension if curve.tension is not None else 300
        damping = curve.damping if curve.damping is not None else 20
        return lambda t: spring(t, tension, damping)
    if kind == CurveType.BOUNCE:
        return bounce_out
    if kind == CurveType.ELASTIC:
        return elastic_out
    if kind == CurveType.ANTICIPATION:
        amount = curve.anticipation if curve.anticipation is not None else 0.2
        return lambda t: anticipation(t, amount)
    if kind == CurveType.OVERSHOOT:
        amount = curve.overshoot if curve.overshoot is not None else 0.15
        return lambda t: overshoot(t, amount)
    raise ValueError(f"Unhandled curve type: {kind}")


def apply_curve(curve: MotionCurve, t: float) -> float:
    return get_ease_function(curve)(t)
