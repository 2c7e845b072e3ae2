"""
Audio engine

Owns the mixing graph for one mounted scene player:

    narration ─┐
    music ─────┼─> master ─> destination
    sfx ───────┘
    ambient ───────────────> destination   (level = sfx * master * 0.5)

The engine is an explicit handle passed to whoever plays scenes. Use it as
an async context manager so the graph is always released:

    async with AudioEngine(settings, speech=tts, event_bus=bus) as audio:
        await audio.configure_for_scene(config)

Every public playback method is a no-op until initialize() has run.
"""

import asyncio
import inspect
from contextlib import suppress
from dataclasses import replace
from typing import Any, Callable, List, Mapping, Optional, Union

import numpy as np

from audio.ambient import AmbientController
from audio.graph import AudioContext, GainNode, InvalidAudioNodeState, OscillatorNode, ScheduledSourceNode
from audio.lip_sync import LipSyncTrack, generate_lip_sync, mouth_shape_at
from audio.speech import SimulatedSpeechService, SpeechInterruptedError, SpeechRequest, SpeechService
from audio.synth import ambient_for_background, mood_music_config, resolve_mood, schedule_mood_music, schedule_sfx
from lifecycle.task_registry import TaskCategory, create_tracked_task
from models.enums import AmbientType, Mood, MouthShape, SFXType
from models.events import (
    AmbientChangedEvent,
    AudioSettingsChangedEvent,
    Event,
    MouthShapeChangedEvent,
    MusicStartedEvent,
    MusicStoppedEvent,
    NarrationFinishedEvent,
    NarrationStartedEvent,
    SFXTriggeredEvent,
)
from models.scene import AudioSettings, SceneAudioConfig
from services.event_bus import EventBus
from services.narration_mapper import ACTION_SFX
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.AUDIO)

AMBIENT_LEVEL = 0.5
MOUTH_FPS = 30
LIP_SYNC_WPM = 150


class AudioEngine:
    """
    Mixing graph, procedural music/SFX, ambient beds and narration playback

    Args:
        settings: Initial mixing state (defaults if None)
        speech: TTS provider (silent simulated provider if None)
        event_bus: Optional bus for audio events
        sample_rate: Graph sample rate
        clock: Context clock (seconds); monotonic wall clock if None
        speech_rate / speech_pitch: Narration voice parameters
        seed: RNG seed for SFX and ambient randomness
    """

    def __init__(
        self,
        settings: Optional[AudioSettings] = None,
        speech: Optional[SpeechService] = None,
        event_bus: Optional[EventBus] = None,
        sample_rate: int = 44100,
        clock: Optional[Callable[[], float]] = None,
        speech_rate: float = 0.9,
        speech_pitch: float = 1.1,
        seed: Optional[int] = None,
    ):
        self._settings = settings or AudioSettings()
        self._speech = speech or SimulatedSpeechService()
        self._event_bus = event_bus
        self._sample_rate = sample_rate
        self._clock = clock
        self._speech_rate = speech_rate
        self._speech_pitch = speech_pitch
        self._seed = seed

        self._context: Optional[AudioContext] = None
        self._master_gain: Optional[GainNode] = None
        self._narration_gain: Optional[GainNode] = None
        self._music_gain: Optional[GainNode] = None
        self._sfx_gain: Optional[GainNode] = None
        self._ambient: Optional[AmbientController] = None
        self._rng = np.random.default_rng(seed)

        self._music_oscillators: List[OscillatorNode] = []
        self._sfx_sources: List[ScheduledSourceNode] = []
        self._narration_task: Optional[asyncio.Task] = None
        self.current_mood: Optional[Mood] = None

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._context is not None

    async def initialize(self) -> None:
        """Build the graph; returns immediately if it already exists"""
        if self._context is not None:
            return

        ctx = AudioContext(self._sample_rate, self._clock)
        s = self._settings

        self._master_gain = ctx.create_gain(s.master_volume)
        self._master_gain.connect(ctx.destination)

        self._narration_gain = ctx.create_gain(s.narration_volume)
        self._narration_gain.connect(self._master_gain)

        self._music_gain = ctx.create_gain(s.music_volume)
        self._music_gain.connect(self._master_gain)

        self._sfx_gain = ctx.create_gain(s.sfx_volume)
        self._sfx_gain.connect(self._master_gain)

        self._ambient = AmbientController(ctx, ctx.destination, seed=self._seed)
        self._context = ctx
        log.info("Audio graph initialized", sample_rate=self._sample_rate, **s.to_dict())

    async def dispose(self) -> None:
        """Stop everything and release the graph; initialize() again before reuse"""
        if self._context is None:
            return
        await self.stop_all()
        self._release_ended_sfx(force=True)
        self._ambient.dispose()
        self._context.close()

        self._context = None
        self._master_gain = self._narration_gain = self._music_gain = self._sfx_gain = None
        self._ambient = None
        self.current_mood = None
        log.info("Audio graph disposed")

    async def __aenter__(self) -> 'AudioEngine':
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    # ------------------------------------------------------------
    # Graph access
    # ------------------------------------------------------------

    @property
    def context(self) -> Optional[AudioContext]:
        return self._context

    @property
    def master_gain(self) -> Optional[GainNode]:
        return self._master_gain

    @property
    def narration_gain(self) -> Optional[GainNode]:
        return self._narration_gain

    @property
    def music_gain(self) -> Optional[GainNode]:
        return self._music_gain

    @property
    def sfx_gain(self) -> Optional[GainNode]:
        return self._sfx_gain

    @property
    def current_ambient(self) -> Optional[AmbientType]:
        return self._ambient.current_type if self._ambient else None

    @property
    def music_oscillator_count(self) -> int:
        return len(self._music_oscillators)

    @property
    def is_narrating(self) -> bool:
        return self._narration_task is not None and not self._narration_task.done()

    # ------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------

    def get_settings(self) -> AudioSettings:
        return replace(self._settings)

    async def update_settings(self, changes: Optional[Mapping[str, Any]] = None, **kwargs) -> None:
        """
        Merge a partial update and re-apply gains immediately

        Raises:
            ValueError: unknown setting name
        """
        merged = dict(changes or {}, **kwargs)
        updated = self._settings.merge(merged)
        self._apply_gains()
        log.debug("Audio settings updated", **{k: getattr(self._settings, k) for k in updated})
        await self._publish(AudioSettingsChangedEvent({k: getattr(self._settings, k) for k in updated}))

    def _apply_gains(self) -> None:
        if self._context is None:
            return
        s = self._settings
        self._master_gain.gain.value = s.master_volume
        self._narration_gain.gain.value = s.narration_volume
        self._music_gain.gain.value = s.music_volume
        self._sfx_gain.gain.value = s.sfx_volume
        if self._ambient.is_playing:
            self._ambient.set_volume(s.sfx_volume * s.master_volume * AMBIENT_LEVEL)

    # ------------------------------------------------------------
    # Music
    # ------------------------------------------------------------

    async def play_mood_music(self, mood: Union[Mood, str, None]) -> None:
        """Replace any generated music with the pattern for mood (unknown moods play neutral)"""
        if not self.is_initialized:
            return

        await self.stop_music()
        resolved = resolve_mood(mood)
        config = mood_music_config(resolved)
        self._music_oscillators = schedule_mood_music(self._context, self._music_gain, config)
        self.current_mood = resolved

        log.info("Mood music started", mood=resolved.value, tempo=config.tempo, key=config.key.value)
        await self._publish(MusicStartedEvent(resolved, config.tempo))

    async def stop_music(self) -> None:
        """Stop every generated oscillator and detach it with its envelope gain"""
        if not self.is_initialized:
            return

        count = len(self._music_oscillators)
        for osc in self._music_oscillators:
            try:
                osc.stop()
            except InvalidAudioNodeState:
                pass  # already stopped
            osc.disconnect_chain(self._music_gain)
        self._music_oscillators = []
        self.current_mood = None

        if count:
            log.debug("Music stopped", oscillators=count)
            await self._publish(MusicStoppedEvent(count))

    # ------------------------------------------------------------
    # SFX and ambient
    # ------------------------------------------------------------

    async def play_sfx(self, action: str) -> Optional[SFXType]:
        """
        Sound effect for an action keyword

        Returns:
            The effect played, or None for unmapped actions (silently ignored)
        """
        if not self.is_initialized:
            return None

        sfx = ACTION_SFX.get(action.lower())
        if sfx is None:
            return None

        self._release_ended_sfx()
        self._sfx_sources.extend(schedule_sfx(self._context, self._sfx_gain, sfx, self._rng))
        log.debug("SFX", action=action, sfx=sfx.value)
        await self._publish(SFXTriggeredEvent(action, sfx))
        return sfx

    def _release_ended_sfx(self, force: bool = False) -> int:
        """Detach effect chains whose sources have finished (all of them when force)"""
        kept, released = [], 0
        for source in self._sfx_sources:
            if force or source.ended:
                source.disconnect_chain(self._sfx_gain)
                released += 1
            else:
                kept.append(source)
        self._sfx_sources = kept
        return released

    async def play_ambient_sound(self, background: str) -> None:
        if not self.is_initialized:
            return

        ambient = ambient_for_background(background)
        s = self._settings
        self._ambient.set_volume(s.sfx_volume * s.master_volume * AMBIENT_LEVEL)
        if self._ambient.play(ambient, fade_in=True):
            await self._publish(AmbientChangedEvent(ambient))

    async def stop_ambient_sound(self) -> None:
        """Fade the ambient bed out"""
        if not self.is_initialized or not self._ambient.is_playing:
            return
        self._ambient.stop(fade_out=True)
        await self._publish(AmbientChangedEvent(None))

    # ------------------------------------------------------------
    # Narration
    # ------------------------------------------------------------

    async def play_narration(
        self,
        text: str,
        on_mouth_shape: Optional[Callable[[MouthShape], Any]] = None,
        on_complete: Optional[Callable[[], Any]] = None,
    ) -> LipSyncTrack:
        """
        Speak text through the TTS provider in the background

        With auto_narration off nothing is spoken and on_complete runs
        immediately. Any narration already in flight is stopped first.

        Returns:
            The lip-sync track driving on_mouth_shape
        """
        if not self.is_initialized:
            return LipSyncTrack()

        if not self._settings.auto_narration:
            await _call(on_complete)
            return LipSyncTrack()

        await self.stop_narration()

        s = self._settings
        track = generate_lip_sync(text, self._speech_rate, LIP_SYNC_WPM)
        request = SpeechRequest(
            text=text,
            rate=self._speech_rate,
            pitch=self._speech_pitch,
            volume=s.narration_volume * s.master_volume,
            voice=s.narrator_voice,
        )

        self._narration_task = create_tracked_task(
            self._speak(request, track, on_mouth_shape, on_complete),
            category=TaskCategory.SPEECH,
            description=f"narration ({len(text)} chars)",
        )
        await self._publish(NarrationStartedEvent(text, track.total_duration))
        return track

    async def stop_narration(self) -> None:
        if not self.is_initialized:
            return

        task, self._narration_task = self._narration_task, None
        if task is None or task.done():
            return

        self._speech.cancel()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        log.debug("Narration stopped")

    async def wait_narration(self) -> None:
        """Wait for in-flight narration to finish on its own"""
        task = self._narration_task
        if task is not None and not task.done():
            with suppress(asyncio.CancelledError):
                await asyncio.shield(task)

    async def _speak(self, request: SpeechRequest, track: LipSyncTrack,
                     on_mouth_shape: Optional[Callable[[MouthShape], Any]],
                     on_complete: Optional[Callable[[], Any]]) -> None:
        mouth = create_tracked_task(
            self._drive_mouth(track, on_mouth_shape),
            category=TaskCategory.SPEECH,
            description="lip sync",
        )
        interrupted, error = False, None
        try:
            await self._speech.speak(request)
        except SpeechInterruptedError:
            interrupted = True
            log.debug("Narration interrupted")
        except asyncio.CancelledError:
            interrupted = True
            raise
        except Exception as e:
            error = str(e)
            log.error(f"Narration failed, continuing silently: {e}")
        finally:
            mouth.cancel()
            with suppress(asyncio.CancelledError):
                await mouth
            await self._emit_mouth(MouthShape.CLOSED, on_mouth_shape)
            await self._publish(NarrationFinishedEvent(interrupted, error))

        await _call(on_complete)

    async def _drive_mouth(self, track: LipSyncTrack, callback: Optional[Callable[[MouthShape], Any]]) -> None:
        loop = asyncio.get_running_loop()
        start = loop.time()
        last: Optional[MouthShape] = None
        while True:
            elapsed_ms = (loop.time() - start) * 1000
            shape = mouth_shape_at(track, elapsed_ms)
            if shape != last:
                last = shape
                await self._emit_mouth(shape, callback)
            if elapsed_ms >= track.total_duration:
                return
            await asyncio.sleep(1 / MOUTH_FPS)

    async def _emit_mouth(self, shape: MouthShape, callback: Optional[Callable[[MouthShape], Any]]) -> None:
        try:
            await _call(callback, shape)
        except Exception as e:
            log.error(f"Mouth shape callback failed: {e}")
        await self._publish(MouthShapeChangedEvent(shape))

    # ------------------------------------------------------------
    # Scene helpers
    # ------------------------------------------------------------

    async def configure_for_scene(self, config: SceneAudioConfig) -> None:
        """Mount audio for a scene: ambient bed for the background, then mood music"""
        await self.initialize()
        await self.play_ambient_sound(config.background)
        await self.play_mood_music(config.mood or Mood.NEUTRAL)

    async def stop_all(self) -> None:
        await self.stop_narration()
        await self.stop_music()
        await self.stop_ambient_sound()

    def render(self, duration: float, start: Optional[float] = None) -> np.ndarray:
        """
        Offline mixdown of everything scheduled so far

        Args:
            duration: Seconds
            start: Context time to start from (default: now)
        """
        if not self.is_initialized:
            return np.zeros(0, dtype=np.float32)
        begin = self._context.current_time if start is None else start
        return self._context.render(duration, begin)

    async def _publish(self, event: Event) -> None:
        if self._event_bus is not None:
            await self._event_bus.publish(event)


async def _call(callback: Optional[Callable[..., Any]], *args) -> None:
    """Invoke a sync or async callback"""
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result
