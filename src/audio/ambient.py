"""
Ambient loops

Background beds per setting: filtered-noise loops (wind, waves, rain)
plus sparse one-shots (birds, crickets, owl, seagulls, music box, clock
tick). One-shots are scheduled up-front over a horizon window from a
seeded RNG, so a given seed always produces the same bed.
"""

import itertools
from typing import Callable, List, Optional

import numpy as np

from audio.graph import AudioContext, AudioNode, GainNode, ScheduledSourceNode
from models.enums import AmbientType, FilterType, OscillatorType
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.AMBIENT)

DEFAULT_VOLUME = 0.5
FADE_IN_S = 1.0
FADE_OUT_S = 0.5

MUSIC_BOX_NOTES = (523.25, 587.33, 659.25, 698.46, 783.99, 880.00)  # C5..A5


class AmbientController:
    """
    Plays one ambient type at a time into its own gain stage

    Args:
        context: Audio context to schedule on
        destination: Node the ambient stage feeds (usually the context destination)
        seed: RNG seed for one-shot timing and noise
        horizon: Seconds of one-shots scheduled per play()
    """

    def __init__(self, context: AudioContext, destination: AudioNode,
                 seed: Optional[int] = None, horizon: float = 60.0):
        self._ctx = context
        self._rng = np.random.default_rng(seed)
        self._horizon = horizon
        self._volume = DEFAULT_VOLUME

        self.output = context.create_gain(DEFAULT_VOLUME)
        self.output.connect(destination)

        self._sources: List[ScheduledSourceNode] = []
        self._nodes: List[AudioNode] = []
        self.current_type: Optional[AmbientType] = None

    @property
    def is_playing(self) -> bool:
        return self.current_type is not None

    @property
    def volume(self) -> float:
        return self._volume

    def set_volume(self, volume: float) -> None:
        """Target level, clamped to [0,1], reached over 100ms"""
        self._volume = max(0.0, min(1.0, volume))
        now = self._ctx.current_time
        current = self.output.gain.value_at(now)
        self.output.gain.cancel_scheduled_values(now)
        self.output.gain.set_value_at_time(current, now)
        self.output.gain.linear_ramp_to_value_at_time(self._volume, now + 0.1)

    def play(self, ambient: AmbientType, fade_in: bool = True) -> bool:
        """
        Start an ambient bed

        Returns:
            False if the same type is already playing (nothing changes)
        """
        if self.current_type == ambient:
            return False

        self._clear()
        self.current_type = ambient
        now = self._ctx.current_time

        if fade_in:
            self.output.gain.cancel_scheduled_values(now)
            self.output.gain.set_value_at_time(0, now)
            self.output.gain.linear_ramp_to_value_at_time(self._volume, now + FADE_IN_S)

        builder = _BUILDERS[ambient]
        builder(self, now)
        log.debug("Ambient started", ambient=ambient.value, sources=len(self._sources))
        return True

    def stop(self, fade_out: bool = True) -> None:
        if self.current_type is None:
            return
        now = self._ctx.current_time
        self.current_type = None

        if fade_out:
            self.output.gain.cancel_scheduled_values(now)
            self.output.gain.set_value_at_time(self.output.gain.value_at(now), now)
            self.output.gain.linear_ramp_to_value_at_time(0, now + FADE_OUT_S)
            # Sources end just after the fade; nodes are released on the next play()
            self._end_sources(now + FADE_OUT_S + 0.1)
        else:
            self._clear()

    def dispose(self) -> None:
        self._clear()
        self.output.disconnect()

    # === Internals ===

    def _end_sources(self, when: float) -> None:
        for source in self._sources:
            if source.started and not source.ended:
                if source.stop_time is None or source.stop_time > when:
                    source.stop(when)

    def _clear(self) -> None:
        self._end_sources(self._ctx.current_time)
        for node in self._sources + self._nodes:
            node.disconnect()
        self._sources.clear()
        self._nodes.clear()

    def _track(self, *nodes: AudioNode) -> None:
        for node in nodes:
            if isinstance(node, ScheduledSourceNode):
                self._sources.append(node)
            else:
                self._nodes.append(node)

    def _every(self, start: float, interval: float, chance: float, make: Callable[[float], None]) -> None:
        """Fire make(t) every interval seconds over the horizon with probability chance"""
        t = start + interval
        while t < start + self._horizon:
            if self._rng.random() < chance:
                make(t)
            t += interval

    # === Sound layers ===

    def _chirp(self, at: float, freq: float) -> None:
        osc = self._ctx.create_oscillator(OscillatorType.SINE, freq)
        gain = self._ctx.create_gain(0.0)
        osc.frequency.set_value_at_time(freq, at)
        osc.frequency.exponential_ramp_to_value_at_time(freq * 1.5, at + 0.1)
        osc.frequency.exponential_ramp_to_value_at_time(freq * 0.8, at + 0.2)
        gain.gain.set_value_at_time(0, at)
        gain.gain.linear_ramp_to_value_at_time(0.1, at + 0.02)
        gain.gain.linear_ramp_to_value_at_time(0, at + 0.2)
        osc.connect(gain)
        gain.connect(self.output)
        osc.start(at)
        osc.stop(at + 0.3)
        self._track(osc, gain)

    def _cricket(self, at: float) -> None:
        osc = self._ctx.create_oscillator(OscillatorType.SQUARE, 4000)
        gain = self._ctx.create_gain(0.0)
        for i in range(6):
            gain.gain.set_value_at_time(0.03, at + i * 0.05)
            gain.gain.set_value_at_time(0, at + i * 0.05 + 0.02)
        osc.connect(gain)
        gain.connect(self.output)
        osc.start(at)
        osc.stop(at + 0.4)
        self._track(osc, gain)

    def _tone(self, at: float, freq: float, peak: float, length: float) -> None:
        osc = self._ctx.create_oscillator(OscillatorType.SINE, freq)
        gain = self._ctx.create_gain(0.0)
        gain.gain.set_value_at_time(peak, at)
        gain.gain.exponential_ramp_to_value_at_time(0.001, at + length)
        osc.connect(gain)
        gain.connect(self.output)
        osc.start(at)
        osc.stop(at + length)
        self._track(osc, gain)

    def _noise_loop(self, at: float, seconds: float, level: float, filter_type: FilterType,
                    cutoff: float, gain_level: float, q: float = 1.0,
                    lfo_rate: Optional[float] = None, lfo_depth: float = 0.0) -> GainNode:
        sr = self._ctx.sample_rate
        buffer = (self._rng.random(int(sr * seconds)) * 2 - 1) * level
        source = self._ctx.create_buffer_source(buffer, loop=True)
        filt = self._ctx.create_biquad_filter(filter_type, cutoff, q)
        gain = self._ctx.create_gain(gain_level)
        source.connect(filt)
        filt.connect(gain)
        gain.connect(self.output)
        source.start(at)
        self._track(source, filt, gain)

        if lfo_rate is not None:
            lfo = self._ctx.create_oscillator(OscillatorType.SINE, lfo_rate)
            depth = self._ctx.create_gain(lfo_depth)
            lfo.connect(depth)
            depth.connect(gain.gain)
            lfo.start(at)
            self._track(lfo, depth)
        return gain

    def _wind(self, at: float, gain_level: float = 0.08) -> None:
        self._noise_loop(at, 3, 0.5, FilterType.BANDPASS, 400, gain_level, q=0.5,
                         lfo_rate=0.05, lfo_depth=0.05)

    def _waves(self, at: float) -> None:
        self._noise_loop(at, 2, 0.3, FilterType.LOWPASS, 500, 0.15, lfo_rate=0.1, lfo_depth=0.1)

    def _rain(self, at: float) -> None:
        self._noise_loop(at, 2, 0.3, FilterType.HIGHPASS, 1000, 0.1)

    # === Beds ===

    def _meadow(self, now: float) -> None:
        interval = 2 + self._rng.random() * 3
        self._every(now, interval, 0.7, lambda t: self._chirp(t, 1800 + self._rng.random() * 800))
        self._wind(now)

    def _forest(self, now: float) -> None:
        self._every(now, 3 + self._rng.random() * 4, 0.5,
                    lambda t: self._chirp(t, 1500 + self._rng.random() * 500))
        self._every(now, 1 + self._rng.random() * 2, 0.6, self._cricket)
        self._wind(now)

    def _beach(self, now: float) -> None:
        self._waves(now)
        self._every(now, 5 + self._rng.random() * 5, 0.3,
                    lambda t: self._chirp(t, 800 + self._rng.random() * 400))

    def _night(self, now: float) -> None:
        self._every(now, 0.8 + self._rng.random() * 1.5, 1.0, self._cricket)
        self._every(now, 8 + self._rng.random() * 7, 0.2,
                    lambda t: self._chirp(t, 300 + self._rng.random() * 100))
        self._wind(now, gain_level=0.03)

    def _bedroom(self, now: float) -> None:
        notes = itertools.count()
        self._every(now, 3.0, 1.0,
                    lambda t: self._tone(t, MUSIC_BOX_NOTES[next(notes) % len(MUSIC_BOX_NOTES)], 0.1, 2.0))
        self._every(now, 1.0, 1.0, lambda t: self._tone(t, 800, 0.02, 0.05))

    def _wind_bed(self, now: float) -> None:
        self._wind(now, gain_level=0.15)


_BUILDERS = {
    AmbientType.MEADOW: AmbientController._meadow,
    AmbientType.PARK: AmbientController._meadow,
    AmbientType.FOREST: AmbientController._forest,
    AmbientType.BEACH: AmbientController._beach,
    AmbientType.NIGHT: AmbientController._night,
    AmbientType.BEDROOM: AmbientController._bedroom,
    AmbientType.RAIN: AmbientController._rain,
    AmbientType.WIND: AmbientController._wind_bed,
}
