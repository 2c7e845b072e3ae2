"""
Audio graph

A small node graph in the shape of a browser audio subsystem: a context
with a clock, parameters with scheduled automation, gain, oscillator,
buffer-source and biquad-filter nodes, wired with connect()/disconnect().

The engine only *schedules* against the context clock (start/stop times,
parameter ramps). Samples are produced on demand by AudioContext.render(),
which pulls the whole graph into a float32 numpy buffer. Rendering never
mutates scheduling state, so the same window can be rendered twice.
"""

import math
import time
from bisect import insort
from enum import Enum, auto
from typing import Callable, List, Optional, Tuple, Union

import numpy as np

from models.enums import FilterType, OscillatorType

# Filter tails below this are treated as silence
SILENCE = 1e-9


class InvalidAudioNodeState(RuntimeError):
    """Node used in a way its lifecycle does not allow (double start, stop after end, closed context)"""


class ManualClock:
    """Clock for offline scheduling: time only moves when advanced"""

    def __init__(self, start: float = 0.0):
        self.now = start

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now

    def __call__(self) -> float:
        return self.now


class _Ramp(Enum):
    SET = auto()
    LINEAR = auto()
    EXPONENTIAL = auto()


class AudioParam:
    """
    Automatable value

    Assigning .value replaces any scheduled automation. Scheduled events are
    evaluated the browser way: a ramp runs from the previous event (or the
    intrinsic value at t=0) to its own time and value.
    """

    def __init__(self, context: 'AudioContext', default: float):
        self._context = context
        self._value = float(default)
        self._events: List[Tuple[float, int, _Ramp, float]] = []
        self._seq = 0
        self._inputs: List['AudioNode'] = []

    @property
    def value(self) -> float:
        if not self._events:
            return self._value
        return self.value_at(self._context.current_time)

    @value.setter
    def value(self, v: float) -> None:
        self._value = float(v)
        self._events.clear()

    def _add(self, kind: _Ramp, value: float, at: float) -> 'AudioParam':
        if at < 0:
            raise ValueError(f"Automation time must be >= 0, got {at}")
        self._seq += 1
        insort(self._events, (float(at), self._seq, kind, float(value)))
        return self

    def set_value_at_time(self, value: float, start_time: float) -> 'AudioParam':
        return self._add(_Ramp.SET, value, start_time)

    def linear_ramp_to_value_at_time(self, value: float, end_time: float) -> 'AudioParam':
        return self._add(_Ramp.LINEAR, value, end_time)

    def exponential_ramp_to_value_at_time(self, value: float, end_time: float) -> 'AudioParam':
        if value <= 0:
            raise ValueError("Exponential ramp target must be > 0")
        return self._add(_Ramp.EXPONENTIAL, value, end_time)

    def cancel_scheduled_values(self, cancel_time: float) -> 'AudioParam':
        self._events = [e for e in self._events if e[0] < cancel_time]
        return self

    def curve(self, times: np.ndarray) -> np.ndarray:
        """Automation value at each time (seconds), modulation inputs excluded"""
        out = np.full(times.shape, self._value, dtype=np.float64)
        prev_t, prev_v = 0.0, self._value

        for at, _seq, kind, target in self._events:
            seg = (times >= prev_t) & (times < at)
            if seg.any():
                span = at - prev_t
                frac = (times[seg] - prev_t) / span if span > 0 else np.ones(int(seg.sum()))
                if kind == _Ramp.LINEAR and span > 0:
                    out[seg] = prev_v + (target - prev_v) * frac
                elif kind == _Ramp.EXPONENTIAL and span > 0 and prev_v > 0:
                    out[seg] = prev_v * (target / prev_v) ** frac
                else:
                    out[seg] = prev_v
            prev_t, prev_v = at, target

        out[times >= prev_t] = prev_v
        return out

    def value_at(self, t: float) -> float:
        return float(self.curve(np.array([t], dtype=np.float64))[0])

    def render(self, times: np.ndarray) -> np.ndarray:
        values = self.curve(times)
        for node in self._inputs:
            values = values + node.render(times)
        return values


class AudioNode:
    """Base node: fan-out connections, pull-based rendering memoized per render pass"""

    def __init__(self, context: 'AudioContext'):
        context._check_open()
        self.context = context
        self._outputs: List[Union['AudioNode', AudioParam]] = []
        self._inputs: List['AudioNode'] = []
        self._cache: Tuple[int, Optional[np.ndarray]] = (-1, None)

    def connect(self, destination: Union['AudioNode', AudioParam]) -> Union['AudioNode', AudioParam]:
        if destination in self._outputs:
            return destination
        self._outputs.append(destination)
        destination._inputs.append(self)
        return destination

    def disconnect(self, destination: Union['AudioNode', AudioParam, None] = None) -> None:
        """
        Disconnect from one destination, or from everything when omitted

        Raises:
            InvalidAudioNodeState: destination given but not connected
        """
        if destination is None:
            for dest in self._outputs:
                if self in dest._inputs:
                    dest._inputs.remove(self)
            self._outputs.clear()
            return
        if destination not in self._outputs:
            raise InvalidAudioNodeState("Node is not connected to that destination")
        self._outputs.remove(destination)
        destination._inputs.remove(self)

    def disconnect_chain(self, stop_at: 'AudioNode') -> int:
        """
        Disconnect this node and every node it feeds that has no other input,
        up to (not including) stop_at

        Returns:
            Number of nodes disconnected
        """
        count = 0
        pending = [self]
        while pending:
            node = pending.pop()
            downstream = [d for d in node._outputs if isinstance(d, AudioNode) and d is not stop_at]
            node.disconnect()
            count += 1
            pending.extend(d for d in downstream if not d._inputs and d._outputs)
        return count

    @property
    def connected(self) -> bool:
        return bool(self._outputs)

    def _input_signal(self, times: np.ndarray) -> np.ndarray:
        signal = np.zeros(times.shape, dtype=np.float64)
        for node in self._inputs:
            signal = signal + node.render(times)
        return signal

    def render(self, times: np.ndarray) -> np.ndarray:
        render_pass = self.context._render_pass
        if self._cache[0] != render_pass:
            self._cache = (render_pass, self.process(times))
        return self._cache[1]

    def process(self, times: np.ndarray) -> np.ndarray:
        return self._input_signal(times)


class AudioDestinationNode(AudioNode):
    pass


class GainNode(AudioNode):
    def __init__(self, context: 'AudioContext', gain: float = 1.0):
        super().__init__(context)
        self.gain = AudioParam(context, gain)

    def process(self, times: np.ndarray) -> np.ndarray:
        return self._input_signal(times) * self.gain.render(times)


class ScheduledSourceNode(AudioNode):
    """Source with one-shot start/stop scheduling"""

    def __init__(self, context: 'AudioContext'):
        super().__init__(context)
        self.start_time: Optional[float] = None
        self.stop_time: Optional[float] = None

    def start(self, when: Optional[float] = None) -> None:
        if self.start_time is not None:
            raise InvalidAudioNodeState("Source already started")
        self.start_time = self.context.current_time if when is None else max(0.0, when)

    def stop(self, when: Optional[float] = None) -> None:
        """
        Raises:
            InvalidAudioNodeState: never started, or already stopped
        """
        if self.start_time is None:
            raise InvalidAudioNodeState("Source not started")
        now = self.context.current_time
        if self.ended:
            raise InvalidAudioNodeState("Source already stopped")
        self.stop_time = now if when is None else max(now, when)

    @property
    def started(self) -> bool:
        return self.start_time is not None

    @property
    def ended(self) -> bool:
        return self.stop_time is not None and self.stop_time <= self.context.current_time

    def _active(self, times: np.ndarray) -> np.ndarray:
        if self.start_time is None:
            return np.zeros(times.shape, dtype=bool)
        mask = times >= self.start_time
        if self.stop_time is not None:
            mask &= times < self.stop_time
        return mask


class OscillatorNode(ScheduledSourceNode):
    def __init__(self, context: 'AudioContext', type: OscillatorType = OscillatorType.SINE, frequency: float = 440.0):
        super().__init__(context)
        self.type = type
        self.frequency = AudioParam(context, frequency)

    def process(self, times: np.ndarray) -> np.ndarray:
        active = self._active(times)
        out = np.zeros(times.shape, dtype=np.float64)
        if not active.any():
            return out

        freq = self.frequency.render(times)
        # Phase accumulates from the start of the window
        phase = np.cumsum(freq) / self.context.sample_rate
        if times.size:
            phase += (times[0] - (self.start_time or 0.0)) * freq[0]
        cycle = phase - np.floor(phase)

        if self.type == OscillatorType.SINE:
            wave = np.sin(2 * math.pi * cycle)
        elif self.type == OscillatorType.SQUARE:
            wave = np.where(cycle < 0.5, 1.0, -1.0)
        elif self.type == OscillatorType.SAWTOOTH:
            wave = 2.0 * cycle - 1.0
        else:
            wave = 1.0 - 4.0 * np.abs(cycle - 0.5)

        out[active] = wave[active]
        return out


class AudioBufferSourceNode(ScheduledSourceNode):
    def __init__(self, context: 'AudioContext', buffer: Optional[np.ndarray] = None, loop: bool = False):
        super().__init__(context)
        self.buffer = buffer
        self.loop = loop

    @property
    def ended(self) -> bool:
        """Stopped, or a one-shot buffer that has played through"""
        if super().ended:
            return True
        if self.loop or self.start_time is None or self.buffer is None:
            return False
        return self.start_time + len(self.buffer) / self.context.sample_rate <= self.context.current_time

    def process(self, times: np.ndarray) -> np.ndarray:
        out = np.zeros(times.shape, dtype=np.float64)
        if self.buffer is None or len(self.buffer) == 0:
            return out
        active = self._active(times)
        if not active.any():
            return out

        idx = ((times[active] - self.start_time) * self.context.sample_rate).astype(np.int64)
        if self.loop:
            idx %= len(self.buffer)
            out[active] = self.buffer[idx]
        else:
            in_range = idx < len(self.buffer)
            values = np.zeros(idx.shape, dtype=np.float64)
            values[in_range] = self.buffer[idx[in_range]]
            out[active] = values
        return out


class BiquadFilterNode(AudioNode):
    """RBJ cookbook biquad; coefficients taken from the parameters at the window start"""

    def __init__(self, context: 'AudioContext', type: FilterType = FilterType.LOWPASS,
                 frequency: float = 350.0, q: float = 1.0):
        super().__init__(context)
        self.type = type
        self.frequency = AudioParam(context, frequency)
        self.Q = AudioParam(context, q)

    def _coefficients(self, t: float) -> Tuple[np.ndarray, np.ndarray]:
        sr = self.context.sample_rate
        f0 = min(max(self.frequency.value_at(t), 1.0), sr / 2 - 1)
        q = max(self.Q.value_at(t), 1e-4)
        w0 = 2 * math.pi * f0 / sr
        alpha = math.sin(w0) / (2 * q)
        cos_w0 = math.cos(w0)

        if self.type == FilterType.LOWPASS:
            b = [(1 - cos_w0) / 2, 1 - cos_w0, (1 - cos_w0) / 2]
        elif self.type == FilterType.HIGHPASS:
            b = [(1 + cos_w0) / 2, -(1 + cos_w0), (1 + cos_w0) / 2]
        else:
            b = [alpha, 0.0, -alpha]
        a = [1 + alpha, -2 * cos_w0, 1 - alpha]
        return np.array(b) / a[0], np.array(a) / a[0]

    def process(self, times: np.ndarray) -> np.ndarray:
        x = self._input_signal(times)
        if not times.size:
            return x
        y = np.zeros_like(x)
        nonzero = np.flatnonzero(x)
        if not nonzero.size:
            return y

        # Only the span where the input is non-zero, plus the decaying tail
        first, last = int(nonzero[0]), int(nonzero[-1])
        b, a = self._coefficients(float(times[0]))
        x1 = x2 = y1 = y2 = 0.0
        for n in range(first, x.size):
            xn = x[n]
            yn = b[0] * xn + b[1] * x1 + b[2] * x2 - a[1] * y1 - a[2] * y2
            x2, x1 = x1, xn
            y2, y1 = y1, yn
            y[n] = yn
            if n > last + 1 and abs(y1) < SILENCE and abs(y2) < SILENCE:
                break
        return y


class AudioContext:
    """
    Owns the clock, the destination and node creation

    Args:
        sample_rate: Render sample rate
        clock: Callable returning seconds; defaults to time.monotonic.
               current_time counts from context creation.
    """

    def __init__(self, sample_rate: int = 44100, clock: Optional[Callable[[], float]] = None):
        self.sample_rate = sample_rate
        self._clock = clock or time.monotonic
        self._origin = self._clock()
        self._render_pass = 0
        self.state = "running"
        self.destination = AudioDestinationNode(self)

    @property
    def current_time(self) -> float:
        return self._clock() - self._origin

    def _check_open(self) -> None:
        if self.state == "closed":
            raise InvalidAudioNodeState("AudioContext is closed")

    def create_gain(self, gain: float = 1.0) -> GainNode:
        return GainNode(self, gain)

    def create_oscillator(self, type: OscillatorType = OscillatorType.SINE, frequency: float = 440.0) -> OscillatorNode:
        return OscillatorNode(self, type, frequency)

    def create_buffer_source(self, buffer: Optional[np.ndarray] = None, loop: bool = False) -> AudioBufferSourceNode:
        return AudioBufferSourceNode(self, buffer, loop)

    def create_biquad_filter(self, type: FilterType = FilterType.LOWPASS,
                             frequency: float = 350.0, q: float = 1.0) -> BiquadFilterNode:
        return BiquadFilterNode(self, type, frequency, q)

    def render(self, duration: float, start: float = 0.0) -> np.ndarray:
        """
        Mix the graph into a mono float32 buffer

        Args:
            duration: Seconds to render
            start: Context time of the first sample

        Returns:
            Samples clipped to [-1, 1]
        """
        self._check_open()
        count = max(0, int(round(duration * self.sample_rate)))
        times = start + np.arange(count, dtype=np.float64) / self.sample_rate
        self._render_pass += 1
        mix = self.destination.render(times)
        return np.clip(mix, -1.0, 1.0).astype(np.float32)

    def close(self) -> None:
        self.state = "closed"

