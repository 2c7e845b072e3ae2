"""
Tests for scene planning, pure frame sampling and the TimelineCoordinator
state machine.
"""

import asyncio
import time

import pytest

from audio.lip_sync import mouth_shape_at
from engine.timeline import (
    InvalidStateTransition,
    TimelineCoordinator,
    build_scene_timeline,
    sample_timeline,
)
from models.config import TimelineConfig
from models.enums import AmbientType, Mood, MouthShape, SceneState
from models.events import EventType
from models.keyframe import CameraKeyframe
from models.scene import Scene, SceneAudioConfig, SceneCharacter
from services.narration_mapper import calculate_scene_duration, count_words


JUMP_NARRATION = "Kiara loves to jump"


def _jump_scene(**changes):
    scene = Scene(
        id="jump",
        narration=JUMP_NARRATION,
        characters=[SceneCharacter(id="c1", rig_id="kiara", animation="jump", is_talking=True)],
    )
    return scene.with_changes(**changes) if changes else scene


def _expected_jump_cue(config=TimelineConfig()):
    speaking = count_words(JUMP_NARRATION) / config.words_per_minute * 60_000
    fraction = JUMP_NARRATION.lower().index("jump") / len(JUMP_NARRATION)
    return config.sfx_lead_ms + fraction * speaking


@pytest.fixture
def coordinator(mock_audio_engine, event_bus):
    """Coordinator on a frozen clock: the tick loop never moves time, tests call advance()"""
    return TimelineCoordinator(mock_audio_engine, event_bus=event_bus, clock=lambda: 0.0)


@pytest.fixture
def fast_coordinator(mock_audio_engine, event_bus):
    """Coordinator whose clock runs 500x faster than wall time"""
    return TimelineCoordinator(
        mock_audio_engine,
        event_bus=event_bus,
        config=TimelineConfig(fps=200),
        clock=lambda: time.monotonic() * 500,
    )


class TestBuildSceneTimeline:

    def test_duration_from_narration(self, twenty_word_scene):
        timeline = build_scene_timeline(twenty_word_scene)
        assert timeline.duration_ms == pytest.approx(20 / 130 * 60_000 + 2000)
        assert timeline.camera.duration == timeline.duration_ms

    def test_explicit_duration_wins(self, twenty_word_scene):
        timeline = build_scene_timeline(twenty_word_scene.with_changes(duration=2500))
        assert timeline.duration_ms == 2500

    def test_explicit_camera_keyframes(self):
        keyframes = [CameraKeyframe(0, zoom=1.0), CameraKeyframe(1000, zoom=2.0)]
        timeline = build_scene_timeline(_jump_scene(camera_keyframes=keyframes))
        assert timeline.camera.keyframes == keyframes

    def test_suggested_camera_when_missing(self):
        timeline = build_scene_timeline(_jump_scene())
        assert timeline.camera.keyframes

    def test_mood_detected_only_when_neutral(self):
        happy_text = "A happy day full of fun"
        assert build_scene_timeline(Scene(id="a", narration=happy_text)).mood == Mood.HAPPY
        assert build_scene_timeline(Scene(id="b", narration=happy_text, mood=Mood.SAD)).mood == Mood.SAD
        assert build_scene_timeline(Scene(id="c", narration="Nothing here")).mood == Mood.NEUTRAL

    def test_ambient_and_audio_config(self):
        timeline = build_scene_timeline(_jump_scene(background="forest", mood=Mood.CALM))
        assert timeline.ambient == AmbientType.FOREST
        assert timeline.audio_config() == SceneAudioConfig(JUMP_NARRATION, Mood.CALM, "forest")

    def test_sfx_cue_follows_keyword_position(self):
        timeline = build_scene_timeline(_jump_scene())
        (cue,) = timeline.cues
        assert cue.action == "jump"
        assert cue.time == pytest.approx(_expected_jump_cue())

    def test_cues_sorted_and_clamped(self):
        scene = Scene(id="s", narration="walk then jump", duration=300)
        cues = build_scene_timeline(scene).cues
        assert [c.action for c in cues] == ["walk", "jump"]
        assert all(c.time <= 300 for c in cues)

    def test_unknown_rig_falls_back(self):
        scene = Scene(id="s", characters=[SceneCharacter(id="c", rig_id="dragon")])
        assert build_scene_timeline(scene).characters[0].rig.id == "kiara"

        config = TimelineConfig(default_rig="buddy")
        plan = build_scene_timeline(scene, config).characters[0]
        assert plan.rig.id == "buddy"
        assert plan.is_animal

    def test_empty_narration_has_no_lip_sync(self):
        timeline = build_scene_timeline(Scene(id="quiet"))
        assert timeline.lip_sync.frames == []
        assert timeline.duration_ms == 4000

    def test_auto_enhance_fills_characters(self):
        scene = Scene(
            id="s",
            narration="She was so happy",
            characters=[SceneCharacter(id="c", rig_id="luna")],
        )
        plan = build_scene_timeline(scene, auto_enhance=True).characters[0]
        assert plan.expression == "happy"


class TestSampleTimeline:

    def test_frame_contents(self):
        scene = _jump_scene(characters=[
            SceneCharacter(id="talker", rig_id="kiara", is_talking=True),
            SceneCharacter(id="quiet", rig_id="buddy", flip=True),
        ])
        timeline = build_scene_timeline(scene)

        frame = sample_timeline(timeline, 50)

        talker, quiet = frame.characters
        assert talker.mouth == mouth_shape_at(timeline.lip_sync, 50)
        assert quiet.mouth == MouthShape.CLOSED
        assert quiet.transforms["body"].scale.x < 0
        assert set(talker.paint_order) == set(talker.transforms)

    def test_clamped_to_scene(self):
        timeline = build_scene_timeline(_jump_scene())
        assert sample_timeline(timeline, -100).time == 0
        assert sample_timeline(timeline, 1e9).time == timeline.duration_ms

    def test_sampling_is_pure(self):
        """Frames do not depend on the order they are sampled in"""
        timeline = build_scene_timeline(_jump_scene())
        later = sample_timeline(timeline, 3000)
        earlier = sample_timeline(timeline, 500)
        assert sample_timeline(timeline, 3000) == later
        assert sample_timeline(timeline, 500) == earlier

    def test_cues_due(self):
        timeline = build_scene_timeline(_jump_scene())
        cue_time = timeline.cues[0].time
        assert sample_timeline(timeline, cue_time - 1).audio.cues_due == ()
        assert sample_timeline(timeline, cue_time).audio.cues_due == timeline.cues


class TestCoordinatorTransitions:

    @pytest.mark.asyncio
    async def test_initial_state(self, coordinator):
        assert coordinator.state == SceneState.IDLE
        assert coordinator.timeline is None
        with pytest.raises(InvalidStateTransition):
            coordinator.sample(0)

    @pytest.mark.asyncio
    async def test_invalid_transitions(self, coordinator):
        with pytest.raises(InvalidStateTransition):
            await coordinator.play()
        with pytest.raises(InvalidStateTransition):
            await coordinator.stop()
        with pytest.raises(InvalidStateTransition):
            await coordinator.seek(100)
        with pytest.raises(InvalidStateTransition):
            await coordinator.run()

        await coordinator.load(_jump_scene())
        with pytest.raises(InvalidStateTransition):
            await coordinator.pause()
        with pytest.raises(InvalidStateTransition):
            await coordinator.resume()

    @pytest.mark.asyncio
    async def test_load_publishes(self, coordinator, event_bus):
        timeline = await coordinator.load(_jump_scene())

        assert coordinator.state == SceneState.LOADING
        (loaded,) = [e for e in event_bus.get_event_history(100) if e.type == EventType.SCENE_LOADED]
        assert (loaded.scene_id, loaded.duration_ms) == ("jump", timeline.duration_ms)

    @pytest.mark.asyncio
    async def test_play_mounts_audio(self, coordinator, mock_audio_engine):
        await coordinator.load(_jump_scene(mood=Mood.HAPPY))
        await coordinator.play()

        assert coordinator.state == SceneState.PLAYING
        mock_audio_engine.configure_for_scene.assert_awaited_once_with(
            SceneAudioConfig(JUMP_NARRATION, Mood.HAPPY, "meadow"))
        args, kwargs = mock_audio_engine.play_narration.call_args
        assert args == (JUMP_NARRATION,)

        # Mouth shapes from the narration drive the coordinator
        kwargs["on_mouth_shape"](MouthShape.OH)
        assert coordinator.mouth_shape == MouthShape.OH
        await coordinator.unload()

    @pytest.mark.asyncio
    async def test_silent_scene_skips_narration(self, coordinator, mock_audio_engine):
        await coordinator.load(Scene(id="quiet"))
        await coordinator.play()
        mock_audio_engine.play_narration.assert_not_awaited()
        await coordinator.unload()

    @pytest.mark.asyncio
    async def test_pause_and_resume(self, coordinator, mock_audio_engine):
        await coordinator.load(_jump_scene(mood=Mood.CALM))
        await coordinator.play()
        await coordinator.advance(100)

        await coordinator.pause()

        assert coordinator.state == SceneState.PAUSED
        mock_audio_engine.stop_narration.assert_awaited()
        mock_audio_engine.stop_music.assert_awaited()
        assert await coordinator.advance(500) is None
        assert coordinator.current_time == 100

        await coordinator.resume()

        assert coordinator.state == SceneState.PLAYING
        mock_audio_engine.play_mood_music.assert_awaited_once_with(Mood.CALM)
        await coordinator.unload()

    @pytest.mark.asyncio
    async def test_play_only_from_loading(self, coordinator, mock_audio_engine):
        """A paused scene continues through resume(), never by restarting narration"""
        await coordinator.load(_jump_scene())
        await coordinator.play()
        await coordinator.pause()

        with pytest.raises(InvalidStateTransition):
            await coordinator.play()

        assert coordinator.state == SceneState.PAUSED
        mock_audio_engine.play_narration.assert_awaited_once()
        mock_audio_engine.configure_for_scene.assert_awaited_once()
        await coordinator.unload()

    @pytest.mark.asyncio
    async def test_stop_finishes_early(self, coordinator, event_bus):
        await coordinator.load(_jump_scene())
        await coordinator.play()
        await coordinator.advance(300)

        await coordinator.stop()

        assert coordinator.state == SceneState.FINISHED
        assert coordinator.mouth_shape == MouthShape.CLOSED
        (finished,) = [e for e in event_bus.get_event_history(100) if e.type == EventType.SCENE_FINISHED]
        assert finished.elapsed_ms == 300
        with pytest.raises(InvalidStateTransition):
            await coordinator.stop()

    @pytest.mark.asyncio
    async def test_unload_after_finish(self, coordinator, mock_audio_engine):
        await coordinator.load(_jump_scene())
        await coordinator.play()
        await coordinator.stop()

        await coordinator.unload()

        assert coordinator.state == SceneState.IDLE
        assert coordinator.timeline is None
        assert coordinator.frame is None
        mock_audio_engine.stop_ambient_sound.assert_awaited_once()
        # Finishing already silenced narration and music
        assert mock_audio_engine.stop_narration.await_count == 1
        assert mock_audio_engine.stop_music.await_count == 1

    @pytest.mark.asyncio
    async def test_unload_when_idle_is_noop(self, coordinator, mock_audio_engine):
        await coordinator.unload()
        assert coordinator.state == SceneState.IDLE
        mock_audio_engine.stop_ambient_sound.assert_not_awaited()


class TestSceneSwitching:

    @pytest.mark.asyncio
    async def test_previous_scene_silenced_before_next_loads(self, coordinator, mock_audio_engine, event_bus):
        calls = []
        for name in ("stop_narration", "stop_music", "stop_ambient_sound"):
            getattr(mock_audio_engine, name).side_effect = lambda name=name: calls.append(name)
        event_bus.subscribe(EventType.SCENE_STATE_CHANGED, lambda e: calls.append(f"state:{e.new.name}"))

        await coordinator.load(_jump_scene())
        await coordinator.play()
        calls.clear()

        await coordinator.load(_jump_scene(id="next"))

        assert calls == [
            "stop_narration",
            "stop_music",
            "stop_ambient_sound",
            "state:IDLE",
            "state:LOADING",
        ]
        assert coordinator.timeline.scene_id == "next"

    @pytest.mark.asyncio
    async def test_finish_stops_audio_before_state_change(self, coordinator, mock_audio_engine, event_bus):
        calls = []
        mock_audio_engine.stop_narration.side_effect = lambda: calls.append("stop_narration")
        mock_audio_engine.stop_music.side_effect = lambda: calls.append("stop_music")
        event_bus.subscribe(EventType.SCENE_STATE_CHANGED, lambda e: calls.append(f"state:{e.new.name}"))

        timeline = await coordinator.load(_jump_scene())
        await coordinator.play()
        await coordinator.advance(timeline.duration_ms)

        assert calls[-3:] == ["stop_narration", "stop_music", "state:FINISHED"]


class TestPlayback:

    @pytest.mark.asyncio
    async def test_run_to_completion(self, fast_coordinator, event_bus, twenty_word_scene):
        """The scene ends exactly at the duration computed from its narration"""
        await fast_coordinator.load(twenty_word_scene)

        await asyncio.wait_for(fast_coordinator.run(), timeout=5)

        assert fast_coordinator.state == SceneState.FINISHED
        expected = calculate_scene_duration(twenty_word_scene.narration)
        assert fast_coordinator.current_time == pytest.approx(expected)
        (finished,) = [e for e in event_bus.get_event_history(100) if e.type == EventType.SCENE_FINISHED]
        assert finished.elapsed_ms == pytest.approx(expected)

    @pytest.mark.asyncio
    async def test_frames_delivered(self, mock_audio_engine):
        frames = []

        async def on_frame(frame):
            frames.append(frame.time)

        coordinator = TimelineCoordinator(mock_audio_engine, clock=lambda: 0.0, on_frame=on_frame)
        await coordinator.load(_jump_scene(duration=1000))
        await coordinator.play()

        await coordinator.advance(400)
        await coordinator.advance(400)
        await coordinator.advance(400)

        assert sorted({t for t in frames if t > 0}) == [400, 800, 1000]
        assert coordinator.state == SceneState.FINISHED

    @pytest.mark.asyncio
    async def test_renderer_error_finishes_scene(self, mock_audio_engine, event_bus):
        """A failing frame callback ends the scene and releases its audio"""
        def broken_renderer(frame):
            raise RuntimeError("renderer gone")

        coordinator = TimelineCoordinator(
            mock_audio_engine,
            event_bus=event_bus,
            config=TimelineConfig(fps=200),
            clock=lambda: 0.0,
            on_frame=broken_renderer,
        )
        await coordinator.load(_jump_scene())

        await asyncio.wait_for(coordinator.run(), timeout=5)

        assert coordinator.state == SceneState.FINISHED
        mock_audio_engine.stop_narration.assert_awaited()
        mock_audio_engine.stop_music.assert_awaited()
        assert [e.type for e in event_bus.get_event_history(100)][-1] == EventType.SCENE_FINISHED

    @pytest.mark.asyncio
    async def test_cues_fire_once(self, coordinator, mock_audio_engine):
        timeline = await coordinator.load(_jump_scene())
        await coordinator.play()
        mock_audio_engine.play_sfx.assert_not_awaited()

        await coordinator.advance(timeline.cues[0].time)
        await coordinator.advance(100)

        mock_audio_engine.play_sfx.assert_awaited_once_with("jump")
        await coordinator.unload()

    @pytest.mark.asyncio
    async def test_seek_skips_earlier_cues(self, coordinator, mock_audio_engine):
        timeline = await coordinator.load(_jump_scene())

        await coordinator.seek(timeline.cues[0].time + 1)
        await coordinator.play()
        await coordinator.advance(100)

        mock_audio_engine.play_sfx.assert_not_awaited()
        assert coordinator.frame.time == pytest.approx(timeline.cues[0].time + 101)
        await coordinator.unload()

    @pytest.mark.asyncio
    async def test_seek_clamps(self, coordinator):
        timeline = await coordinator.load(_jump_scene())

        await coordinator.seek(-50)
        assert coordinator.current_time == 0
        await coordinator.seek(1e9)
        assert coordinator.current_time == timeline.duration_ms

    @pytest.mark.asyncio
    async def test_sample_matches_pure_function(self, coordinator):
        timeline = await coordinator.load(_jump_scene())
        assert coordinator.sample(750) == sample_timeline(timeline, 750)
