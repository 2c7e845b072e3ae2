"""
Camera keyframes

Virtual camera {zoom, pan_x, pan_y, rotation} animated across a scene.
Sampling is a pure function of time; presets are built from the scene
duration, and the shake preset takes an explicit seed so repeated exports
produce identical frames.
"""

import math
import random
from typing import Callable, Dict, List, Optional

from animations.easing import (
    bounce_out,
    camera_spring,
    ease_in_out_quad,
    ease_in_quad,
    ease_linear,
    ease_out_quad,
)
from models.enums import CameraEasing
from models.keyframe import CameraAnimation, CameraKeyframe, CameraState

EASING_FUNCTIONS: Dict[CameraEasing, Callable[[float], float]] = {
    CameraEasing.LINEAR: ease_linear,
    CameraEasing.EASE_IN: ease_in_quad,
    CameraEasing.EASE_OUT: ease_out_quad,
    CameraEasing.EASE_IN_OUT: ease_in_out_quad,
    CameraEasing.SPRING: camera_spring,
    CameraEasing.BOUNCE: bounce_out,
}


def create_camera_animation(
    keyframes: List[CameraKeyframe],
    duration: float,
    loop: bool = False,
) -> CameraAnimation:
    """Camera animation with keyframes sorted by time"""
    return CameraAnimation(
        keyframes=sorted(keyframes, key=lambda kf: kf.time),
        duration=duration,
        loop=loop,
    )


def get_camera_at_time(animation: CameraAnimation, time: float) -> CameraState:
    """
    Camera state at time (ms)

    - no keyframes: identity camera
    - looping animations wrap by duration, others clamp to it
    - before the first / after the last keyframe: hold that keyframe
    - between keyframes: interpolate with the *next* keyframe's easing
    """
    keyframes = animation.keyframes
    if not keyframes:
        return CameraState()
    if len(keyframes) == 1:
        return keyframes[0].to_state()

    if animation.loop and animation.duration > 0:
        adjusted = time % animation.duration
    else:
        adjusted = min(time, animation.duration)

    if adjusted < keyframes[0].time:
        return keyframes[0].to_state()
    if adjusted >= keyframes[-1].time:
        return keyframes[-1].to_state()

    prev_kf, next_kf = keyframes[0], keyframes[-1]
    for a, b in zip(keyframes, keyframes[1:]):
        if a.time <= adjusted < b.time:
            prev_kf, next_kf = a, b
            break

    span = next_kf.time - prev_kf.time
    progress = (adjusted - prev_kf.time) / span if span > 0 else 1.0
    eased = EASING_FUNCTIONS[next_kf.easing](progress)

    def mix(a: float, b: float) -> float:
        return a + (b - a) * eased

    return CameraState(
        zoom=mix(prev_kf.zoom, next_kf.zoom),
        pan_x=mix(prev_kf.pan_x, next_kf.pan_x),
        pan_y=mix(prev_kf.pan_y, next_kf.pan_y),
        rotation=mix(prev_kf.rotation, next_kf.rotation),
    )


# === Presets ===

def _kf(time: float, zoom: float = 1, pan_x: float = 0, pan_y: float = 0,
        rotation: float = 0, easing: CameraEasing = CameraEasing.EASE_IN_OUT) -> CameraKeyframe:
    return CameraKeyframe(time=time, zoom=zoom, pan_x=pan_x, pan_y=pan_y, rotation=rotation, easing=easing)


_OUT = CameraEasing.EASE_OUT
_IN_OUT = CameraEasing.EASE_IN_OUT
_LINEAR = CameraEasing.LINEAR


def slow_zoom_in(duration: float) -> List[CameraKeyframe]:
    return [_kf(0, 1, 0, 0, 0, _OUT), _kf(duration, 1.3, 0, -10, 0, _OUT)]


def slow_zoom_out(duration: float) -> List[CameraKeyframe]:
    return [_kf(0, 1.3, 0, -10, 0, _OUT), _kf(duration, 1, 0, 0, 0, _OUT)]


def pan_left_to_right(duration: float) -> List[CameraKeyframe]:
    return [_kf(0, 1, -30, 0, 0, _IN_OUT), _kf(duration, 1, 30, 0, 0, _IN_OUT)]


def pan_right_to_left(duration: float) -> List[CameraKeyframe]:
    return [_kf(0, 1, 30, 0, 0, _IN_OUT), _kf(duration, 1, -30, 0, 0, _IN_OUT)]


def dramatic_reveal(duration: float) -> List[CameraKeyframe]:
    return [
        _kf(0, 2, 0, -20, 0, _OUT),
        _kf(duration * 0.3, 1.5, 0, -10, 0, _OUT),
        _kf(duration, 1, 0, 0, 0, _OUT),
    ]


def focus_pull(duration: float) -> List[CameraKeyframe]:
    return [
        _kf(0, 1, 0, 0, 0, _IN_OUT),
        _kf(duration * 0.5, 1.4, 0, -15, 0, _IN_OUT),
        _kf(duration, 1, 0, 0, 0, _IN_OUT),
    ]


def ken_burns(duration: float) -> List[CameraKeyframe]:
    return [_kf(0, 1, -20, 0, 0, _LINEAR), _kf(duration, 1.2, 20, -10, 0, _LINEAR)]


def shake(duration: float, seed: Optional[int] = 0) -> List[CameraKeyframe]:
    """Jitter every 100ms, intensity fading in and out over the scene"""
    rng = random.Random(seed)
    shake_count = max(1, int(duration // 100))
    keyframes = []
    for i in range(shake_count + 1):
        progress = i / shake_count
        intensity = math.sin(progress * math.pi) * 5
        keyframes.append(_kf(
            progress * duration,
            1,
            (rng.random() - 0.5) * intensity,
            (rng.random() - 0.5) * intensity,
            (rng.random() - 0.5) * intensity * 0.5,
            _LINEAR,
        ))
    return keyframes


def dutch_angle(duration: float) -> List[CameraKeyframe]:
    return [
        _kf(0, 1, 0, 0, 0, _IN_OUT),
        _kf(duration * 0.3, 1.1, 5, -5, 10, _IN_OUT),
        _kf(duration * 0.7, 1.1, 5, -5, 10, _LINEAR),
        _kf(duration, 1, 0, 0, 0, _IN_OUT),
    ]


def conversation(duration: float) -> List[CameraKeyframe]:
    """Cut between two speakers, then settle"""
    return [
        _kf(0, 1.2, -15, -10, 0, _IN_OUT),
        _kf(duration * 0.25, 1.2, -15, -10, 0, _IN_OUT),
        _kf(duration * 0.35, 1.2, 15, -10, 0, _IN_OUT),
        _kf(duration * 0.6, 1.2, 15, -10, 0, _IN_OUT),
        _kf(duration * 0.7, 1.2, -15, -10, 0, _IN_OUT),
        _kf(duration, 1, 0, 0, 0, _OUT),
    ]


def establishing_shot(duration: float) -> List[CameraKeyframe]:
    return [
        _kf(0, 0.8, 0, 10, 0, _OUT),
        _kf(duration * 0.6, 0.8, 0, 10, 0, _LINEAR),
        _kf(duration, 1.2, 0, -10, 0, _IN_OUT),
    ]


CAMERA_PRESETS: Dict[str, Callable[[float], List[CameraKeyframe]]] = {
    "slow_zoom_in": slow_zoom_in,
    "slow_zoom_out": slow_zoom_out,
    "pan_left_to_right": pan_left_to_right,
    "pan_right_to_left": pan_right_to_left,
    "dramatic_reveal": dramatic_reveal,
    "focus_pull": focus_pull,
    "ken_burns": ken_burns,
    "shake": shake,
    "dutch_angle": dutch_angle,
    "conversation": conversation,
    "establishing_shot": establishing_shot,
}


def suggest_camera_preset(narration: str, character_count: int) -> str:
    """
    Preset name for a scene, first matching rule wins

    1. two or more characters talking -> conversation
    2. suddenly/surprise/shock        -> dramatic_reveal
    3. run/chase/fast                 -> shake
    4. found/discover/saw             -> slow_zoom_in
    5. once upon/one day/morning      -> establishing_shot
    6. happy/sad/love                 -> focus_pull
    7. otherwise                      -> ken_burns
    """
    text = narration.lower()

    def has(*words: str) -> bool:
        return any(w in text for w in words)

    if character_count >= 2 and has("said", "asked", "replied"):
        return "conversation"
    if has("suddenly", "surprise", "shock"):
        return "dramatic_reveal"
    if has("run", "chase", "fast"):
        return "shake"
    if has("found", "discover", "saw"):
        return "slow_zoom_in"
    if has("once upon", "one day", "morning"):
        return "establishing_shot"
    if has("happy", "sad", "love"):
        return "focus_pull"
    return "ken_burns"


def suggest_camera_animation(narration: str, character_count: int, duration: float) -> List[CameraKeyframe]:
    """Camera keyframes suggested by narration content"""
    return CAMERA_PRESETS[suggest_camera_preset(narration, character_count)](duration)
