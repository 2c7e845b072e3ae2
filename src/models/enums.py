"""
Enums for the scene animation and audio engine
"""

from enum import Enum, auto


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, validation
    SYSTEM = auto()      # Startup, shutdown, errors
    RIG = auto()         # Rig construction and lookup
    MOTION = auto()      # Keyframes, inbetweens, retargeting
    CAMERA = auto()
    NARRATION = auto()   # Narration analysis and durations
    AUDIO = auto()       # Audio graph, mixing, music, sfx
    AMBIENT = auto()     # Ambient loops
    SPEECH = auto()      # TTS and lip sync
    TIMELINE = auto()    # Scene state machine and tick loop
    EVENT = auto()       # Event bus events and handling
    TASK = auto()

    GENERAL = auto()    # Default general category


# === Rig ===

class RigCategory(Enum):
    """Character rig categories"""
    CHILD = "child"
    ADULT = "adult"
    ANIMAL = "animal"
    FANTASY = "fantasy"


class BodyVariant(Enum):
    """Human rig body variants (torso width, hair style)"""
    NEUTRAL = "neutral"
    FEMININE = "feminine"
    MASCULINE = "masculine"


class AnimalType(Enum):
    CAT = "cat"
    DOG = "dog"
    BUNNY = "bunny"


class ShapeKind(Enum):
    """Tag of the draw primitive attached to a rig part"""
    ELLIPSE = "ellipse"
    RECT = "rect"
    PATH = "path"
    POLYGON = "polygon"
    GROUP = "group"


# === Motion ===

class CurveType(Enum):
    """Motion curve families used between two keyframes"""
    LINEAR = "linear"
    EASE_IN = "ease-in"
    EASE_OUT = "ease-out"
    EASE_IN_OUT = "ease-in-out"
    SPRING = "spring"
    BOUNCE = "bounce"
    ELASTIC = "elastic"
    ANTICIPATION = "anticipation"
    OVERSHOOT = "overshoot"
    SQUASH_STRETCH = "squash-stretch"


class CameraEasing(Enum):
    """Easing families available to camera keyframes"""
    LINEAR = "linear"
    EASE_IN = "ease-in"
    EASE_OUT = "ease-out"
    EASE_IN_OUT = "ease-in-out"
    SPRING = "spring"
    BOUNCE = "bounce"


class SceneTransitionType(Enum):
    FADE = "fade"
    SLIDE = "slide"
    ZOOM = "zoom"
    NONE = "none"


# === Audio ===

class Mood(Enum):
    """Coarse scene mood, drives procedural music"""
    HAPPY = "happy"
    SAD = "sad"
    EXCITING = "exciting"
    CALM = "calm"
    MYSTERIOUS = "mysterious"
    NEUTRAL = "neutral"


class MusicKey(Enum):
    MAJOR = "major"
    MINOR = "minor"


class MusicStyle(Enum):
    UPBEAT = "upbeat"
    SLOW = "slow"
    ENERGETIC = "energetic"
    GENTLE = "gentle"
    AMBIENT = "ambient"
    LIGHT = "light"


class AmbientType(Enum):
    """Ambient loop families, keyed by scene background"""
    MEADOW = "meadow"
    FOREST = "forest"
    BEACH = "beach"
    NIGHT = "night"
    BEDROOM = "bedroom"
    PARK = "park"
    RAIN = "rain"
    WIND = "wind"


class SFXType(Enum):
    """Synthesized one-shot sound effects"""
    BOING = "boing"
    FOOTSTEPS = "footsteps"
    FOOTSTEPS_FAST = "footsteps_fast"
    GIGGLE = "giggle"
    SOB = "sob"
    WHOOSH = "whoosh"
    MUSIC_NOTE = "music_note"
    MUNCH = "munch"
    SNORE = "snore"
    GASP = "gasp"
    CLAP = "clap"
    SPLASH = "splash"


class OscillatorType(Enum):
    SINE = "sine"
    SQUARE = "square"
    TRIANGLE = "triangle"
    SAWTOOTH = "sawtooth"


class FilterType(Enum):
    LOWPASS = "lowpass"
    HIGHPASS = "highpass"
    BANDPASS = "bandpass"


class MouthShape(Enum):
    """Mouth poses driven by lip sync"""
    CLOSED = "closed"
    HALF = "half"
    OPEN = "open"
    WIDE = "wide"
    ROUND = "round"
    EE = "ee"
    OH = "oh"


# === Timeline ===

class SceneState(Enum):
    """
    Per-scene playback state

    IDLE -> LOADING -> PLAYING <-> PAUSED -> FINISHED -> IDLE
    """
    IDLE = auto()
    LOADING = auto()
    PLAYING = auto()
    PAUSED = auto()
    FINISHED = auto()
