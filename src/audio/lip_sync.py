"""
Lip sync

Mouth-shape tracks from text (phoneme approximation) or from an audio
amplitude envelope. Both are approximations; frame-accurate visemes are
not attempted.
"""

from dataclasses import dataclass, field
from typing import List

import numpy as np

from models.enums import MouthShape

PHONEME_TO_MOUTH = {
    # Vowels
    "a": MouthShape.WIDE,
    "e": MouthShape.EE,
    "i": MouthShape.EE,
    "o": MouthShape.OH,
    "u": MouthShape.OH,
    # Teeth
    "f": MouthShape.EE,
    "v": MouthShape.EE,
    "s": MouthShape.EE,
    "z": MouthShape.EE,
    "th": MouthShape.EE,
    # Lips together
    "b": MouthShape.CLOSED,
    "p": MouthShape.CLOSED,
    "m": MouthShape.CLOSED,
    # Open
    "l": MouthShape.OPEN,
    "n": MouthShape.OPEN,
    "d": MouthShape.OPEN,
    "t": MouthShape.OPEN,
    "r": MouthShape.OPEN,
    "k": MouthShape.OPEN,
    "g": MouthShape.OPEN,
    "h": MouthShape.OPEN,
    "j": MouthShape.OPEN,
    "ch": MouthShape.OPEN,
    "sh": MouthShape.OPEN,
    # Rounded
    "w": MouthShape.OH,
    "y": MouthShape.EE,
}

DIGRAPHS = ("th", "ch", "sh")
PAUSE = "pause"
CLOSING_FRAME_MS = 100.0


@dataclass(frozen=True)
class LipSyncFrame:
    time: float          # ms from speech start
    shape: MouthShape
    duration: float      # ms
    intensity: float = 1.0


@dataclass(frozen=True)
class LipSyncTrack:
    frames: List[LipSyncFrame] = field(default_factory=list)
    total_duration: float = 0.0   # ms


def extract_phonemes(text: str) -> List[str]:
    """Letters, th/ch/sh digraphs, and a pause for space, comma or period"""
    phonemes: List[str] = []
    lower = text.lower()
    i = 0
    while i < len(lower):
        pair = lower[i:i + 2]
        if pair in DIGRAPHS:
            phonemes.append(pair)
            i += 2
            continue
        char = lower[i]
        if "a" <= char <= "z":
            phonemes.append(char)
        elif char in " ,.":
            phonemes.append(PAUSE)
        i += 1
    return phonemes


def generate_lip_sync(text: str, speech_rate: float = 0.9, words_per_minute: float = 150) -> LipSyncTrack:
    """
    Mouth-shape track for spoken text

    Each phoneme lasts a quarter of a word at words_per_minute, stretched by
    1/speech_rate; pauses last two phonemes. A 100ms closed frame ends the track.
    """
    phoneme_ms = (60.0 / words_per_minute / 4) * 1000 / speech_rate
    pause_ms = phoneme_ms * 2

    frames: List[LipSyncFrame] = []
    t = 0.0
    for phoneme in extract_phonemes(text):
        if phoneme == PAUSE:
            frames.append(LipSyncFrame(t, MouthShape.CLOSED, pause_ms, 0.0))
            t += pause_ms
        else:
            frames.append(LipSyncFrame(t, PHONEME_TO_MOUTH.get(phoneme, MouthShape.OPEN), phoneme_ms))
            t += phoneme_ms

    frames.append(LipSyncFrame(t, MouthShape.CLOSED, CLOSING_FRAME_MS, 0.0))
    return LipSyncTrack(frames=frames, total_duration=t + CLOSING_FRAME_MS)


def mouth_shape_at(track: LipSyncTrack, time: float) -> MouthShape:
    """Shape of the last frame starting at or before time (ms); closed before the first"""
    for frame in reversed(track.frames):
        if time >= frame.time:
            return frame.shape
    return MouthShape.CLOSED


def lip_sync_from_envelope(
    samples: np.ndarray,
    sample_rate: int,
    fps: float = 30.0,
    sensitivity: float = 0.5,
) -> LipSyncTrack:
    """
    Mouth shapes from per-frame RMS amplitude of rendered speech audio

    intensity = min(1, rms / sensitivity):
        > 0.7 open, > 0.5 wide, > 0.3 half, > 0.1 round, else closed
    """
    if sensitivity <= 0:
        raise ValueError("sensitivity must be > 0")

    data = np.asarray(samples, dtype=np.float64)
    if data.ndim > 1:
        data = data[:, 0]
    hop = max(1, int(sample_rate / fps))
    frame_ms = hop / sample_rate * 1000

    frames: List[LipSyncFrame] = []
    for start in range(0, len(data), hop):
        chunk = data[start:start + hop]
        rms = float(np.sqrt(np.mean(chunk * chunk)))
        intensity = min(1.0, rms / sensitivity)

        if intensity > 0.7:
            shape = MouthShape.OPEN
        elif intensity > 0.5:
            shape = MouthShape.WIDE
        elif intensity > 0.3:
            shape = MouthShape.HALF
        elif intensity > 0.1:
            shape = MouthShape.ROUND
        else:
            shape = MouthShape.CLOSED

        frames.append(LipSyncFrame(start / sample_rate * 1000, shape, frame_ms, intensity))

    return LipSyncTrack(frames=frames, total_duration=len(data) / sample_rate * 1000)
