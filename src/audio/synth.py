"""
Procedural music and sound effects

Everything is scheduled up-front against the context clock, so timing is
sample-accurate regardless of how late the calling coroutine runs.
"""

from typing import Dict, List, Optional, Union

import numpy as np

from audio.graph import AudioContext, AudioNode, OscillatorNode, ScheduledSourceNode
from models.enums import AmbientType, FilterType, Mood, MusicKey, MusicStyle, OscillatorType, SFXType
from models.scene import MoodMusicConfig
from utils.enum_helper import EnumHelper

MOOD_MUSIC_CONFIG: Dict[Mood, MoodMusicConfig] = {
    Mood.HAPPY: MoodMusicConfig(120, MusicKey.MAJOR, MusicStyle.UPBEAT),
    Mood.SAD: MoodMusicConfig(60, MusicKey.MINOR, MusicStyle.SLOW),
    Mood.EXCITING: MoodMusicConfig(140, MusicKey.MAJOR, MusicStyle.ENERGETIC),
    Mood.CALM: MoodMusicConfig(70, MusicKey.MAJOR, MusicStyle.GENTLE),
    Mood.MYSTERIOUS: MoodMusicConfig(80, MusicKey.MINOR, MusicStyle.AMBIENT),
    Mood.NEUTRAL: MoodMusicConfig(90, MusicKey.MAJOR, MusicStyle.LIGHT),
}

# C4-based seven-note scales (Hz)
SCALES: Dict[MusicKey, List[float]] = {
    MusicKey.MAJOR: [261.63, 293.66, 329.63, 349.23, 392.00, 440.00, 493.88],
    MusicKey.MINOR: [261.63, 293.66, 311.13, 349.23, 392.00, 415.30, 466.16],
}

BACKGROUND_AMBIENT: Dict[str, AmbientType] = {
    "meadow": AmbientType.MEADOW,
    "forest": AmbientType.FOREST,
    "beach": AmbientType.BEACH,
    "night": AmbientType.NIGHT,
    "park": AmbientType.PARK,
    "bedroom": AmbientType.BEDROOM,
}

ARPEGGIO = (0, 2, 4, 2)
PATTERN_STEPS = 32
NOTE_PEAK = 0.08
DRONE_GAIN = 0.1


def resolve_mood(mood: Union[Mood, str, None]) -> Mood:
    """Mood member for an enum or string; unknown moods are neutral"""
    if isinstance(mood, Mood):
        return mood
    if not mood:
        return Mood.NEUTRAL
    return EnumHelper.from_string(Mood, mood, default=Mood.NEUTRAL)


def mood_music_config(mood: Union[Mood, str, None]) -> MoodMusicConfig:
    return MOOD_MUSIC_CONFIG[resolve_mood(mood)]


def ambient_for_background(background: str) -> AmbientType:
    return BACKGROUND_AMBIENT.get((background or "").lower(), AmbientType.MEADOW)


def schedule_mood_music(
    ctx: AudioContext,
    destination: AudioNode,
    config: MoodMusicConfig,
    start: Optional[float] = None,
) -> List[OscillatorNode]:
    """
    Drone plus a 32-step arpeggio

    - drone: root one octave down, sine, gain 0.1, runs until stopped
    - arpeggio: scale indices 0,2,4,2 every half beat, 50ms attack to 0.08,
      exponential decay over 40% of a beat; square for upbeat, else sine

    Returns:
        Every oscillator created (drone first), for stop_music
    """
    now = ctx.current_time if start is None else start
    scale = SCALES[config.key]
    beat = 60.0 / config.tempo
    wave = OscillatorType.SQUARE if config.style == MusicStyle.UPBEAT else OscillatorType.SINE

    drone = ctx.create_oscillator(OscillatorType.SINE, scale[0] / 2)
    drone_gain = ctx.create_gain(DRONE_GAIN)
    drone.connect(drone_gain)
    drone_gain.connect(destination)
    drone.start(now)
    oscillators = [drone]

    for step in range(PATTERN_STEPS):
        osc = ctx.create_oscillator(wave, scale[ARPEGGIO[step % len(ARPEGGIO)]])
        env = ctx.create_gain(0.0)

        t0 = now + step * beat * 0.5
        env.gain.set_value_at_time(0, t0)
        env.gain.linear_ramp_to_value_at_time(NOTE_PEAK, t0 + 0.05)
        env.gain.exponential_ramp_to_value_at_time(0.001, t0 + beat * 0.4)

        osc.connect(env)
        env.connect(destination)
        osc.start(t0)
        osc.stop(t0 + beat * 0.5)
        oscillators.append(osc)

    return oscillators


def noise_buffer(rng: np.random.Generator, samples: int, envelope: np.ndarray, level: float = 1.0) -> np.ndarray:
    return (rng.random(samples) * 2 - 1) * envelope * level


def _tone(ctx: AudioContext, destination: AudioNode, wave: OscillatorType, freq: float,
          start: float, peak: float, decay_to: float, length: float) -> List[AudioNode]:
    osc = ctx.create_oscillator(wave, freq)
    gain = ctx.create_gain(0.0)
    gain.gain.set_value_at_time(peak, start)
    gain.gain.exponential_ramp_to_value_at_time(decay_to, start + length)
    osc.connect(gain)
    gain.connect(destination)
    return [osc, gain]


def schedule_sfx(
    ctx: AudioContext,
    destination: AudioNode,
    sfx: SFXType,
    rng: np.random.Generator,
    start: Optional[float] = None,
) -> List[ScheduledSourceNode]:
    """
    Synthesize one sound effect into destination

    boing: sine sweep 200 -> 800 -> 400 Hz over 300ms with decay
    footsteps / footsteps_fast: 2 or 4 triangle pulses at 100-150 Hz
    giggle: three rising sine chirps
    whoosh: fading white noise through a 1 kHz bandpass
    splash: exponentially decaying noise through a 2 kHz lowpass
    anything else: 440 Hz beep

    Returns:
        The source nodes that were started
    """
    now = ctx.current_time if start is None else start
    sources: List[ScheduledSourceNode] = []
    sr = ctx.sample_rate

    if sfx == SFXType.BOING:
        osc, gain = _tone(ctx, destination, OscillatorType.SINE, 200, now, 0.3, 0.01, 0.3)
        osc.frequency.set_value_at_time(200, now)
        osc.frequency.exponential_ramp_to_value_at_time(800, now + 0.1)
        osc.frequency.exponential_ramp_to_value_at_time(400, now + 0.2)
        osc.start(now)
        osc.stop(now + 0.3)
        sources.append(osc)

    elif sfx in (SFXType.FOOTSTEPS, SFXType.FOOTSTEPS_FAST):
        fast = sfx == SFXType.FOOTSTEPS_FAST
        count, interval = (4, 0.15) if fast else (2, 0.3)
        for i in range(count):
            t = now + i * interval
            osc, _ = _tone(ctx, destination, OscillatorType.TRIANGLE,
                           100 + rng.random() * 50, t, 0.2, 0.01, 0.1)
            osc.start(t)
            osc.stop(t + 0.15)
            sources.append(osc)

    elif sfx == SFXType.GIGGLE:
        for i in range(3):
            t = now + i * 0.15
            osc, _ = _tone(ctx, destination, OscillatorType.SINE, 400 + i * 100, t, 0.15, 0.01, 0.12)
            osc.frequency.set_value_at_time(400 + i * 100, t)
            osc.frequency.exponential_ramp_to_value_at_time(600 + i * 100, t + 0.1)
            osc.start(t)
            osc.stop(t + 0.15)
            sources.append(osc)

    elif sfx in (SFXType.WHOOSH, SFXType.SPLASH):
        if sfx == SFXType.WHOOSH:
            n = int(sr * 0.3)
            envelope = 1 - np.arange(n) / n
            filt = ctx.create_biquad_filter(FilterType.BANDPASS, 1000, 1)
            level = 0.3
        else:
            n = int(sr * 0.5)
            envelope = np.exp(-np.arange(n) / (sr * 0.1))
            filt = ctx.create_biquad_filter(FilterType.LOWPASS, 2000)
            level = 0.4
        source = ctx.create_buffer_source(noise_buffer(rng, n, envelope))
        gain = ctx.create_gain(level)
        source.connect(filt)
        filt.connect(gain)
        gain.connect(destination)
        source.start(now)
        sources.append(source)

    else:
        osc, _ = _tone(ctx, destination, OscillatorType.SINE, 440, now, 0.2, 0.01, 0.2)
        osc.start(now)
        osc.stop(now + 0.2)
        sources.append(osc)

    return sources
