"""
Action clips

Short keyframed clips per action (idle, walk, run, jump, wave, talk, sit,
dance, surprised, sad) plus animal variants. Tracks address rig parts by id;
a track whose part the rig does not have is skipped, so one clip serves
every human rig.

Position tracks are offsets from the part's default position. Rotation and
scale tracks replace the default value.

Segments without their own curve use the action's motion curve
(animations.interpolation.ACTION_CURVES), so "run" and "dance" get the
bouncy spring and "talk" the gentle ease-out.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Optional, Sequence, Tuple

from animations.interpolation import get_motion_curve_for_action, sample_keyframes
from models.enums import CurveType, MouthShape
from models.keyframe import Keyframe, MotionCurve, ScalarKeyframe, VectorKeyframe
from models.rig import CharacterRig
from models.vector import Transform, Vector2


class TrackProperty(Enum):
    POSITION = auto()
    ROTATION = auto()
    SCALE = auto()


@dataclass(frozen=True)
class ClipTrack:
    part_id: str
    property: TrackProperty
    keyframes: Tuple[Keyframe, ...]


@dataclass(frozen=True)
class AnimationClip:
    id: str
    duration: float      # ms
    loop: bool
    tracks: Tuple[ClipTrack, ...]

    def local_time(self, time: float) -> float:
        """Clip time for a scene-relative time (wraps when looping, else holds the end)"""
        if self.loop and self.duration > 0:
            return time % self.duration
        return min(time, self.duration)


_BOUNCE = MotionCurve(CurveType.BOUNCE)


def _pos(part_id: str, *keys: Tuple) -> ClipTrack:
    return ClipTrack(part_id, TrackProperty.POSITION, tuple(
        VectorKeyframe(time=k[0], value=Vector2(k[1], k[2]), curve=k[3] if len(k) > 3 else None)
        for k in keys
    ))


def _rot(part_id: str, *keys: Tuple) -> ClipTrack:
    return ClipTrack(part_id, TrackProperty.ROTATION, tuple(
        ScalarKeyframe(time=k[0], value=k[1], curve=k[2] if len(k) > 2 else None)
        for k in keys
    ))


def _scale(part_id: str, *keys: Tuple) -> ClipTrack:
    return ClipTrack(part_id, TrackProperty.SCALE, tuple(
        VectorKeyframe(time=k[0], value=Vector2(k[1], k[2])) for k in keys
    ))


def _blink(part_id: str) -> ClipTrack:
    return _scale(part_id, (0, 1, 1), (900, 1, 1), (1000, 1, 0.1), (1100, 1, 1), (2000, 1, 1))


def _pop_eye(part_id: str) -> ClipTrack:
    return _scale(part_id, (0, 1, 1), (150, 1.3, 1.3), (800, 1, 1))


CLIPS: Dict[str, AnimationClip] = {
    "idle": AnimationClip("idle", 2000, True, (
        _pos("body", (0, 0, 0), (1000, 0, -3), (2000, 0, 0)),
        _rot("head", (0, 0), (1500, 3), (2000, 0)),
        _blink("leftEye"),
        _blink("rightEye"),
    )),
    "walk": AnimationClip("walk", 800, True, (
        _pos("body", (0, 0, 0), (200, 2, -6), (400, 0, -2), (600, -2, -6), (800, 0, 0)),
        _rot("body", (0, 0), (200, 3), (400, 0), (600, -3), (800, 0)),
        _rot("head", (0, 0), (200, -2), (400, 0), (600, 2), (800, 0)),
        _rot("leftLeg", (0, -30), (400, 30), (800, -30)),
        _rot("rightLeg", (0, 30), (400, -30), (800, 30)),
        _rot("leftArm", (0, 35), (400, -20), (800, 35)),
        _rot("rightArm", (0, -20), (400, 35), (800, -20)),
    )),
    "run": AnimationClip("run", 500, True, (
        _pos("body", (0, 0, -5), (125, 3, -12), (250, 0, -5), (375, -3, -12), (500, 0, -5)),
        _rot("body", (0, -8), (125, -5), (250, -8), (375, -5), (500, -8)),
        _rot("head", (0, 5), (250, 8), (500, 5)),
        _rot("leftLeg", (0, -45), (250, 45), (500, -45)),
        _rot("rightLeg", (0, 45), (250, -45), (500, 45)),
        _rot("leftArm", (0, 50), (250, -40), (500, 50)),
        _rot("rightArm", (0, -40), (250, 50), (500, -40)),
    )),
    "wave": AnimationClip("wave", 1200, True, (
        _rot("rightArm", (0, -120), (200, -140), (400, -120), (600, -140),
             (800, -120), (1000, -140), (1200, -120)),
        _rot("rightHand", (0, 0), (200, 20), (400, -20), (600, 20),
             (800, -20), (1000, 20), (1200, 0)),
    )),
    "jump": AnimationClip("jump", 1000, False, (
        _pos("body", (0, 0, 0), (200, 0, 10), (400, 0, -50), (700, 0, -50),
             (900, 0, 5, _BOUNCE), (1000, 0, 0)),
        _rot("leftArm", (0, 15), (300, -150), (700, -150), (1000, 15)),
        _rot("rightArm", (0, -15), (300, 150), (700, 150), (1000, -15)),
        _rot("leftLeg", (0, 0), (200, 30), (400, -20), (900, 10, _BOUNCE), (1000, 0)),
        _rot("rightLeg", (0, 0), (200, 30), (400, -20), (900, 10, _BOUNCE), (1000, 0)),
    )),
    "talk": AnimationClip("talk", 600, True, (
        _rot("head", (0, 0), (150, -3), (300, 2), (450, -2), (600, 0)),
        _pos("body", (0, 0, 0), (300, 0, -2), (600, 0, 0)),
    )),
    "sit": AnimationClip("sit", 500, False, (
        _pos("body", (0, 0, 0), (500, 0, 30)),
        _rot("leftLeg", (0, 0), (500, -90)),
        _rot("rightLeg", (0, 0), (500, -90)),
    )),
    "dance": AnimationClip("dance", 1600, True, (
        _pos("body", (0, 0, 0), (200, -10, -10), (400, 0, 0), (600, 10, -10), (800, 0, 0),
             (1000, -10, -10), (1200, 0, 0), (1400, 10, -10), (1600, 0, 0)),
        _rot("body", (0, 0), (400, -8), (800, 0), (1200, 8), (1600, 0)),
        _rot("leftArm", (0, 15), (400, -100), (800, 15), (1200, -100), (1600, 15)),
        _rot("rightArm", (0, -15), (400, 100), (800, -15), (1200, 100), (1600, -15)),
        _rot("leftLeg", (0, 0), (200, -15), (400, 0), (600, 15), (800, 0)),
        _rot("rightLeg", (0, 0), (200, 15), (400, 0), (600, -15), (800, 0)),
    )),
    "surprised": AnimationClip("surprised", 800, False, (
        _pos("body", (0, 0, 0), (150, 0, -15), (800, 0, 0)),
        _rot("leftArm", (0, 15), (150, -60), (800, 15)),
        _rot("rightArm", (0, -15), (150, 60), (800, -15)),
        _pop_eye("leftEye"),
        _pop_eye("rightEye"),
    )),
    "sad": AnimationClip("sad", 2000, True, (
        _rot("head", (0, 15), (2000, 15)),
        _pos("body", (0, 0, 5), (1000, 0, 8), (2000, 0, 5)),
        _rot("leftArm", (0, 30), (2000, 30)),
        _rot("rightArm", (0, -30), (2000, -30)),
    )),
    # Animal variants
    "animal_idle": AnimationClip("animal_idle", 2000, True, (
        _rot("tail", (0, -20), (500, -10), (1000, -30), (1500, -10), (2000, -20)),
        _rot("head", (0, 0), (1000, 5), (2000, 0)),
    )),
    "animal_walk": AnimationClip("animal_walk", 600, True, (
        _pos("body", (0, 0, 0), (150, 1, -4), (300, 0, -1), (450, -1, -4), (600, 0, 0)),
        _rot("body", (0, 0), (150, 2), (300, 0), (450, -2), (600, 0)),
        _rot("head", (0, 0), (150, -3), (300, 0), (450, 3), (600, 0)),
        _rot("frontLeftLeg", (0, -25), (300, 25), (600, -25)),
        _rot("frontRightLeg", (0, 25), (300, -25), (600, 25)),
        _rot("backLeftLeg", (0, 20), (300, -20), (600, 20)),
        _rot("backRightLeg", (0, -20), (300, 20), (600, -20)),
        _rot("tail", (0, -30), (300, -10), (600, -30)),
    )),
    "animal_jump": AnimationClip("animal_jump", 800, False, (
        _pos("body", (0, 0, 0), (150, 0, 5), (350, 0, -40), (550, 0, -40),
             (750, 0, 3, _BOUNCE), (800, 0, 0)),
        _rot("body", (0, 0), (350, -10), (550, -10), (800, 0)),
        _rot("frontLeftLeg", (0, 0), (350, -30), (800, 0)),
        _rot("frontRightLeg", (0, 0), (350, -30), (800, 0)),
        _rot("backLeftLeg", (0, 0), (350, 30), (800, 0)),
        _rot("backRightLeg", (0, 0), (350, 30), (800, 0)),
    )),
}

_HUMAN_ACTIONS = {
    "idle": "idle", "walk": "walk", "run": "run", "jump": "jump", "wave": "wave",
    "talk": "talk", "sit": "sit", "dance": "dance", "surprised": "surprised", "sad": "sad",
}
_ANIMAL_ACTIONS = dict(_HUMAN_ACTIONS, idle="animal_idle", walk="animal_walk",
                       run="animal_walk", jump="animal_jump")


def get_clip_for_action(action: str, is_animal: bool = False) -> AnimationClip:
    """Clip for an action name; unknown actions idle"""
    table = _ANIMAL_ACTIONS if is_animal else _HUMAN_ACTIONS
    fallback = "animal_idle" if is_animal else "idle"
    return CLIPS[table.get(action.lower(), fallback)]


def sample_clip(
    clip: AnimationClip,
    rig: CharacterRig,
    time: float,
    curve: Optional[MotionCurve] = None,
) -> Dict[str, Transform]:
    """
    Local part transforms for a clip at scene time (ms)

    Returns:
        part_id -> Transform override (only parts the clip animates)
    """
    local = clip.local_time(time)
    overrides: Dict[str, Transform] = {}

    for track in clip.tracks:
        part = rig.get_part(track.part_id)
        if part is None:
            continue
        current = overrides.get(part.id, part.default_transform)
        value = sample_keyframes(track.keyframes, local, curve)

        if track.property == TrackProperty.POSITION:
            current = current.with_changes(position=part.default_transform.position + value)
        elif track.property == TrackProperty.ROTATION:
            current = current.with_changes(rotation=value)
        else:
            current = current.with_changes(scale=value)
        overrides[part.id] = current

    return overrides


def sample_action(
    action: str,
    rig: CharacterRig,
    time: float,
    is_animal: bool = False,
) -> Dict[str, Transform]:
    """sample_clip for an action, using the action's motion curve"""
    return sample_clip(
        get_clip_for_action(action, is_animal),
        rig,
        time,
        get_motion_curve_for_action(action),
    )


TALK_CYCLE: Sequence[Tuple[float, MouthShape]] = (
    (0, MouthShape.CLOSED),
    (100, MouthShape.OPEN),
    (200, MouthShape.WIDE),
    (300, MouthShape.OH),
    (400, MouthShape.EE),
    (500, MouthShape.OPEN),
)


def talk_mouth_shape(time: float) -> MouthShape:
    """Looping 600ms mouth flap used when no lip-sync track is available"""
    local = time % 600
    shape = MouthShape.CLOSED
    for start, candidate in TALK_CYCLE:
        if local >= start:
            shape = candidate
    return shape
