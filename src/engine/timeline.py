"""
Timeline Coordinator

Per-scene animation clock that keeps narration, duration, character poses,
camera and audio consistent.

State machine:

    IDLE -> LOADING -> PLAYING <-> PAUSED
                          |           |
                          +-> FINISHED <+
    FINISHED / any loaded state -> IDLE (unload, or load of the next scene)

Entering FINISHED always stops narration and music, so nothing from the
previous scene is audible when the next one starts LOADING.

Frame sampling (sample / build_scene_timeline) is pure: a frame depends
only on the scene plan and t, so exporters can sample any time in any order.
"""

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Set, Tuple

from animations.camera import create_camera_animation, get_camera_at_time, suggest_camera_animation
from animations.clips import sample_action
from animations.interpolation import get_motion_curve_for_action
from audio.lip_sync import LipSyncTrack, generate_lip_sync, mouth_shape_at
from audio.synth import ambient_for_background
from lifecycle.task_registry import TaskCategory, create_tracked_task
from models.config import TimelineConfig
from models.enums import AmbientType, Mood, MouthShape, RigCategory, SceneState
from models.events import Event, SceneFinishedEvent, SceneLoadedEvent, SceneStateChangedEvent
from models.keyframe import CameraAnimation, CameraState, MotionCurve
from models.rig import CharacterRig
from models.scene import Scene, SceneAudioConfig, SceneCharacter
from models.vector import Transform, Vector2
from rig.registry import default_rig, get_character_rig
from services.event_bus import EventBus
from services.narration_mapper import (
    auto_enhance_scene,
    calculate_scene_duration,
    count_words,
    detect_actions_for_sfx,
    detect_mood,
)
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.TIMELINE)


class InvalidStateTransition(RuntimeError):
    """Operation not allowed in the current scene state"""


_TRANSITIONS = {
    SceneState.IDLE: {SceneState.LOADING},
    SceneState.LOADING: {SceneState.PLAYING, SceneState.IDLE},
    SceneState.PLAYING: {SceneState.PAUSED, SceneState.FINISHED, SceneState.IDLE},
    SceneState.PAUSED: {SceneState.PLAYING, SceneState.FINISHED, SceneState.IDLE},
    SceneState.FINISHED: {SceneState.IDLE},
}


# === Scene plan ===

@dataclass(frozen=True)
class SFXCue:
    time: float                       # ms
    action: str


@dataclass(frozen=True)
class CharacterPlan:
    character: SceneCharacter
    rig: CharacterRig
    action: str
    expression: str
    is_talking: bool
    curve: MotionCurve

    @property
    def is_animal(self) -> bool:
        return self.rig.category == RigCategory.ANIMAL


@dataclass(frozen=True)
class SceneTimeline:
    """Everything resolved at load time for one scene"""
    scene_id: str
    narration: str
    duration_ms: float
    camera: CameraAnimation
    cues: Tuple[SFXCue, ...]
    mood: Mood
    ambient: AmbientType
    background: str
    characters: Tuple[CharacterPlan, ...]
    lip_sync: LipSyncTrack = field(default_factory=LipSyncTrack)

    def audio_config(self) -> SceneAudioConfig:
        return SceneAudioConfig(narration=self.narration, mood=self.mood, background=self.background)


# === Frames ===

@dataclass(frozen=True)
class CharacterFrame:
    character_id: str
    rig_id: str
    action: str
    expression: str
    mouth: MouthShape
    transforms: Dict[str, Transform]
    paint_order: Tuple[str, ...]      # part ids, ascending zIndex across the rig


@dataclass(frozen=True)
class ActiveAudio:
    mood: Mood
    ambient: AmbientType
    cues_due: Tuple[SFXCue, ...]      # cues at or before t


@dataclass(frozen=True)
class TimelineFrame:
    time: float                       # ms
    characters: Tuple[CharacterFrame, ...]
    camera: CameraState
    audio: ActiveAudio


# === Planning (pure) ===

def _resolve_rig(rig_id: str, config: TimelineConfig) -> CharacterRig:
    rig = get_character_rig(rig_id)
    if rig is not None:
        return rig
    fallback = (get_character_rig(config.default_rig) if config.default_rig else None) or default_rig()
    log.warn(f"Unknown rig '{rig_id}', using {fallback.id}")
    return fallback


def _sfx_cues(narration: str, duration: float, config: TimelineConfig) -> Tuple[SFXCue, ...]:
    """
    One cue per SFX keyword, placed where the narrator reaches the keyword

    Offset = sfx_lead_ms + (keyword position / text length) * speaking time.
    """
    lower = narration.lower()
    speaking_ms = count_words(narration) / config.words_per_minute * 60_000
    cues = []
    for action in detect_actions_for_sfx(narration):
        fraction = lower.index(action) / max(1, len(lower))
        cues.append(SFXCue(min(duration, config.sfx_lead_ms + fraction * speaking_ms), action))
    return tuple(sorted(cues, key=lambda c: c.time))


def build_scene_timeline(
    scene: Scene,
    config: Optional[TimelineConfig] = None,
    auto_enhance: bool = False,
    speech_rate: float = 0.9,
) -> SceneTimeline:
    """
    Resolve a scene into a playable plan

    - duration: explicit override, else computed from narration
    - camera: explicit keyframes, else suggested from narration
    - mood: explicit mood, else detected from narration (neutral stays neutral)
    - per character: rig (with fallback), action, expression and motion curve
    """
    config = config or TimelineConfig()
    if auto_enhance:
        scene = auto_enhance_scene(scene)

    if scene.duration is not None:
        duration = float(scene.duration)
    else:
        duration = calculate_scene_duration(
            scene.narration,
            config.min_scene_duration_ms,
            config.words_per_minute,
            config.duration_buffer_ms,
        )

    keyframes = scene.camera_keyframes
    if keyframes is None:
        keyframes = suggest_camera_animation(scene.narration, len(scene.characters), duration)

    mood = scene.mood if scene.mood != Mood.NEUTRAL else detect_mood(scene.narration)

    characters = tuple(
        CharacterPlan(
            character=c,
            rig=_resolve_rig(c.rig_id, config),
            action=c.animation,
            expression=c.expression,
            is_talking=c.is_talking,
            curve=get_motion_curve_for_action(c.animation),
        )
        for c in scene.characters
    )

    return SceneTimeline(
        scene_id=scene.id,
        narration=scene.narration,
        duration_ms=duration,
        camera=create_camera_animation(list(keyframes), duration),
        cues=_sfx_cues(scene.narration, duration, config),
        mood=mood,
        ambient=ambient_for_background(scene.background),
        background=scene.background,
        characters=characters,
        lip_sync=generate_lip_sync(scene.narration, speech_rate) if scene.narration.strip() else LipSyncTrack(),
    )


def sample_timeline(timeline: SceneTimeline, t: float) -> TimelineFrame:
    """Frame at t (ms), clamped to [0, duration]"""
    t = max(0.0, min(timeline.duration_ms, t))

    frames = []
    for plan in timeline.characters:
        c = plan.character
        overrides = sample_action(plan.action, plan.rig, t, plan.is_animal)
        placement = Transform(
            position=Vector2(c.x, c.y),
            scale=Vector2(-c.scale if c.flip else c.scale, c.scale),
        )
        if plan.is_talking:
            mouth = mouth_shape_at(timeline.lip_sync, t)
        else:
            mouth = MouthShape.CLOSED

        frames.append(CharacterFrame(
            character_id=c.id,
            rig_id=plan.rig.id,
            action=plan.action,
            expression=plan.expression,
            mouth=mouth,
            transforms=plan.rig.world_transforms(overrides, placement),
            paint_order=tuple(p.id for p in plan.rig.paint_order()),
        ))

    return TimelineFrame(
        time=t,
        characters=tuple(frames),
        camera=get_camera_at_time(timeline.camera, t),
        audio=ActiveAudio(
            mood=timeline.mood,
            ambient=timeline.ambient,
            cues_due=tuple(c for c in timeline.cues if c.time <= t),
        ),
    )


# === Coordinator ===

class TimelineCoordinator:
    """
    Drives one scene at a time against an AudioEngine

    Args:
        audio_engine: Initialized or not; play() initializes it
        event_bus: Optional bus for scene events
        config: Timeline settings
        clock: Seconds source for the tick loop (time.monotonic)
        on_frame: Called with every TimelineFrame produced while playing
    """

    def __init__(
        self,
        audio_engine,
        event_bus: Optional[EventBus] = None,
        config: Optional[TimelineConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        on_frame: Optional[Callable[[TimelineFrame], Any]] = None,
    ):
        self._audio = audio_engine
        self._event_bus = event_bus
        self.config = config or TimelineConfig()
        self._clock = clock or time.monotonic
        self._on_frame = on_frame

        self._state = SceneState.IDLE
        self._timeline: Optional[SceneTimeline] = None
        self._time = 0.0
        self._fired: Set[int] = set()
        self._tick_task: Optional[asyncio.Task] = None
        self._finished = asyncio.Event()
        self._lock = asyncio.Lock()

        self.mouth_shape = MouthShape.CLOSED
        self.frame: Optional[TimelineFrame] = None

    # === Queries ===

    @property
    def state(self) -> SceneState:
        return self._state

    @property
    def timeline(self) -> Optional[SceneTimeline]:
        return self._timeline

    @property
    def current_time(self) -> float:
        return self._time

    def sample(self, t: float) -> TimelineFrame:
        """
        Pure frame sample of the loaded scene

        Raises:
            InvalidStateTransition: no scene loaded
        """
        if self._timeline is None:
            raise InvalidStateTransition("No scene loaded")
        return sample_timeline(self._timeline, t)

    # === Transitions ===

    async def load(self, scene: Scene, auto_enhance: bool = False) -> SceneTimeline:
        """Unload the current scene (if any), then resolve the new one"""
        async with self._lock:
            if self._state != SceneState.IDLE:
                await self._unload()

            await self._set_state(SceneState.LOADING)
            self._timeline = build_scene_timeline(scene, self.config, auto_enhance)
            self._time = 0.0
            self._fired.clear()
            self._finished.clear()

            log.info("Scene loaded", scene=scene.id, duration_ms=round(self._timeline.duration_ms),
                     mood=self._timeline.mood.value, cues=len(self._timeline.cues))
            await self._publish(SceneLoadedEvent(scene.id, self._timeline.duration_ms))
            return self._timeline

    async def play(self) -> None:
        """Start the loaded scene: audio bed, narration and the tick loop"""
        async with self._lock:
            if self._state != SceneState.LOADING:
                raise InvalidStateTransition(f"play() requires LOADING, state is {self._state.name}")
            timeline = self._timeline

            await self._audio.configure_for_scene(timeline.audio_config())
            await self._set_state(SceneState.PLAYING)
            if timeline.narration.strip():
                await self._audio.play_narration(timeline.narration, on_mouth_shape=self._on_mouth_shape)
            await self._fire_due_cues()
            self._start_tick()

    async def pause(self) -> None:
        """
        Freeze the clock

        Speech cannot resume mid-utterance, so narration is stopped; music
        restarts on resume. The ambient bed keeps playing.
        """
        async with self._lock:
            self._require(SceneState.PAUSED)
            await self._cancel_tick()
            await self._set_state(SceneState.PAUSED)
            await self._audio.stop_narration()
            await self._audio.stop_music()

    async def resume(self) -> None:
        async with self._lock:
            if self._state != SceneState.PAUSED:
                raise InvalidStateTransition(f"resume() requires PAUSED, state is {self._state.name}")
            await self._set_state(SceneState.PLAYING)
            await self._audio.play_mood_music(self._timeline.mood)
            self._start_tick()

    async def seek(self, t: float) -> None:
        """
        Jump to t (ms), clamped to the scene

        Cues before t are treated as already played.
        """
        async with self._lock:
            if self._timeline is None or self._state == SceneState.FINISHED:
                raise InvalidStateTransition(f"seek() not allowed in {self._state.name}")
            self._time = max(0.0, min(self._timeline.duration_ms, t))
            self._fired = {i for i, cue in enumerate(self._timeline.cues) if cue.time < self._time}
            self.frame = self.sample(self._time)
            log.debug("Seek", t=round(self._time))

    async def stop(self) -> None:
        """End playback early; the scene finishes at the current time"""
        async with self._lock:
            self._require(SceneState.FINISHED)
            await self._finish()

    async def unload(self) -> None:
        """Tear the scene down completely (including the ambient bed) and go IDLE"""
        async with self._lock:
            await self._unload()

    async def advance(self, delta_ms: float) -> Optional[TimelineFrame]:
        """
        Move the clock forward while PLAYING

        Fires due SFX cues, publishes the frame, and finishes the scene once
        t reaches the duration. The tick loop calls this; offline drivers
        may call it directly.
        """
        if self._state != SceneState.PLAYING:
            return None

        self._time = min(self._timeline.duration_ms, self._time + delta_ms)
        await self._fire_due_cues()
        self.frame = self.sample(self._time)
        if self._on_frame is not None:
            result = self._on_frame(self.frame)
            if inspect.isawaitable(result):
                await result

        if self._time >= self._timeline.duration_ms:
            async with self._lock:
                if self._state == SceneState.PLAYING:
                    await self._finish()
        return self.frame

    async def run(self) -> None:
        """Play the loaded scene (if not already playing) and wait until it finishes"""
        if self._state == SceneState.LOADING:
            await self.play()
        elif self._state not in (SceneState.PLAYING, SceneState.PAUSED, SceneState.FINISHED):
            raise InvalidStateTransition(f"run() not allowed in {self._state.name}")
        await self._finished.wait()

    # === Internals ===

    def _require(self, target: SceneState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise InvalidStateTransition(f"{self._state.name} -> {target.name} not allowed")

    async def _set_state(self, new: SceneState) -> None:
        self._require(new)
        old, self._state = self._state, new
        scene_id = self._timeline.scene_id if self._timeline else None
        log.debug("State", scene=scene_id, old=old.name, new=new.name)
        await self._publish(SceneStateChangedEvent(scene_id, old, new))

    async def _finish(self) -> None:
        await self._cancel_tick()
        await self._audio.stop_narration()
        await self._audio.stop_music()
        await self._set_state(SceneState.FINISHED)
        self.mouth_shape = MouthShape.CLOSED

        log.info("Scene finished", scene=self._timeline.scene_id, elapsed_ms=round(self._time))
        await self._publish(SceneFinishedEvent(self._timeline.scene_id, self._time))
        self._finished.set()

    async def _unload(self) -> None:
        if self._state == SceneState.IDLE:
            return
        await self._cancel_tick()
        if self._state != SceneState.FINISHED:
            await self._audio.stop_narration()
            await self._audio.stop_music()
        await self._audio.stop_ambient_sound()
        await self._set_state(SceneState.IDLE)

        self._timeline = None
        self._time = 0.0
        self.frame = None
        self.mouth_shape = MouthShape.CLOSED
        self._finished.set()

    def _start_tick(self) -> None:
        self._tick_task = create_tracked_task(
            self._tick_loop(),
            category=TaskCategory.TIMELINE,
            description=f"timeline {self._timeline.scene_id}",
        )

    async def _cancel_tick(self) -> None:
        task, self._tick_task = self._tick_task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _tick_loop(self) -> None:
        interval = 1.0 / self.config.fps
        last = self._clock()
        log.debug("Tick loop started", fps=self.config.fps)
        try:
            while self._state == SceneState.PLAYING:
                await asyncio.sleep(interval)
                now = self._clock()
                await self.advance((now - last) * 1000)
                last = now
        except asyncio.CancelledError:
            log.debug("Tick loop cancelled")
        except Exception as e:
            log.error(f"Tick loop error: {e}", exc_info=True)
            # the scene still has to release its audio and wake run()
            async with self._lock:
                if self._state in (SceneState.PLAYING, SceneState.PAUSED):
                    await self._finish()
        finally:
            log.debug("Tick loop stopped", t=round(self._time))

    async def _fire_due_cues(self) -> None:
        for i, cue in enumerate(self._timeline.cues):
            if i not in self._fired and cue.time <= self._time:
                self._fired.add(i)
                await self._audio.play_sfx(cue.action)

    def _on_mouth_shape(self, shape: MouthShape) -> None:
        self.mouth_shape = shape

    async def _publish(self, event: Event) -> None:
        if self._event_bus is not None:
            await self._event_bus.publish(event)
