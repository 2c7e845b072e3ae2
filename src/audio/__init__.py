"""Procedural audio: mixing graph, music/SFX synthesis, ambient beds, narration"""

from .engine import AudioEngine
from .export import export_wav
from .graph import AudioContext, InvalidAudioNodeState, ManualClock
from .lip_sync import LipSyncFrame, LipSyncTrack, generate_lip_sync, lip_sync_from_envelope, mouth_shape_at
from .speech import SimulatedSpeechService, SpeechError, SpeechInterruptedError, SpeechRequest, SpeechService

__all__ = [
    "AudioEngine",
    "export_wav",
    "AudioContext",
    "InvalidAudioNodeState",
    "ManualClock",
    "LipSyncFrame",
    "LipSyncTrack",
    "generate_lip_sync",
    "lip_sync_from_envelope",
    "mouth_shape_at",
    "SimulatedSpeechService",
    "SpeechError",
    "SpeechInterruptedError",
    "SpeechRequest",
    "SpeechService",
]
