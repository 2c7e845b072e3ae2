"""
Tests for procedural mood music and synthesized sound effects.
"""

import numpy as np
import pytest

from audio.graph import AudioContext
from audio.synth import (
    SCALES,
    ambient_for_background,
    mood_music_config,
    resolve_mood,
    schedule_mood_music,
    schedule_sfx,
)
from models.enums import AmbientType, Mood, MusicKey, MusicStyle, OscillatorType, SFXType


@pytest.fixture
def ctx(manual_clock):
    return AudioContext(sample_rate=8000, clock=manual_clock)


@pytest.fixture
def rng():
    return np.random.default_rng(0)


class TestMoodConfig:

    @pytest.mark.parametrize("mood, tempo, key, style", [
        (Mood.HAPPY, 120, MusicKey.MAJOR, MusicStyle.UPBEAT),
        (Mood.SAD, 60, MusicKey.MINOR, MusicStyle.SLOW),
        (Mood.EXCITING, 140, MusicKey.MAJOR, MusicStyle.ENERGETIC),
        (Mood.CALM, 70, MusicKey.MAJOR, MusicStyle.GENTLE),
        (Mood.MYSTERIOUS, 80, MusicKey.MINOR, MusicStyle.AMBIENT),
        (Mood.NEUTRAL, 90, MusicKey.MAJOR, MusicStyle.LIGHT),
    ])
    def test_table(self, mood, tempo, key, style):
        config = mood_music_config(mood)
        assert (config.tempo, config.key, config.style) == (tempo, key, style)

    def test_string_moods(self):
        assert resolve_mood("Happy") == Mood.HAPPY
        assert resolve_mood("grumpy") == Mood.NEUTRAL
        assert resolve_mood(None) == Mood.NEUTRAL
        assert mood_music_config("sad").tempo == 60

    @pytest.mark.parametrize("background, ambient", [
        ("meadow", AmbientType.MEADOW),
        ("Forest", AmbientType.FOREST),
        ("night", AmbientType.NIGHT),
        ("park", AmbientType.PARK),
        ("space station", AmbientType.MEADOW),
        ("", AmbientType.MEADOW),
    ])
    def test_background_ambient(self, background, ambient):
        assert ambient_for_background(background) == ambient


class TestMoodMusic:

    def test_drone_plus_thirty_two_steps(self, ctx):
        oscillators = schedule_mood_music(ctx, ctx.destination, mood_music_config(Mood.CALM))

        assert len(oscillators) == 33
        drone = oscillators[0]
        assert drone.frequency.value == pytest.approx(SCALES[MusicKey.MAJOR][0] / 2)
        assert drone.stop_time is None

    def test_upbeat_uses_square_wave(self, ctx):
        happy = schedule_mood_music(ctx, ctx.destination, mood_music_config(Mood.HAPPY))
        sad = schedule_mood_music(ctx, ctx.destination, mood_music_config(Mood.SAD))

        assert {o.type for o in happy[1:]} == {OscillatorType.SQUARE}
        assert {o.type for o in sad[1:]} == {OscillatorType.SINE}
        assert happy[0].type == OscillatorType.SINE

    def test_note_timing_follows_tempo(self, ctx):
        notes = schedule_mood_music(ctx, ctx.destination, mood_music_config(Mood.HAPPY), start=1.0)[1:]

        # 120 BPM -> half a beat is 0.25s
        assert [n.start_time for n in notes[:3]] == pytest.approx([1.0, 1.25, 1.5])
        assert notes[0].stop_time == pytest.approx(1.25)
        assert notes[-1].start_time == pytest.approx(1.0 + 31 * 0.25)

    def test_arpeggio_pattern(self, ctx):
        notes = schedule_mood_music(ctx, ctx.destination, mood_music_config(Mood.SAD))[1:]
        scale = SCALES[MusicKey.MINOR]
        expected = [scale[0], scale[2], scale[4], scale[2]] * 2
        assert [n.frequency.value for n in notes[:8]] == pytest.approx(expected)

    def test_music_is_audible(self, ctx):
        schedule_mood_music(ctx, ctx.destination, mood_music_config(Mood.HAPPY))
        assert np.abs(ctx.render(0.2)).max() > 0.01


class TestSfx:

    @pytest.mark.parametrize("sfx, count", [
        (SFXType.FOOTSTEPS, 2),
        (SFXType.FOOTSTEPS_FAST, 4),
        (SFXType.GIGGLE, 3),
        (SFXType.BOING, 1),
        (SFXType.WHOOSH, 1),
        (SFXType.SPLASH, 1),
    ])
    def test_source_counts(self, ctx, rng, sfx, count):
        assert len(schedule_sfx(ctx, ctx.destination, sfx, rng)) == count

    def test_footstep_spacing(self, ctx, rng):
        slow = schedule_sfx(ctx, ctx.destination, SFXType.FOOTSTEPS, rng, start=0)
        fast = schedule_sfx(ctx, ctx.destination, SFXType.FOOTSTEPS_FAST, rng, start=0)
        assert [s.start_time for s in slow] == pytest.approx([0, 0.3])
        assert [s.start_time for s in fast] == pytest.approx([0, 0.15, 0.3, 0.45])
        for step in slow + fast:
            assert 100 <= step.frequency.value <= 150

    @pytest.mark.parametrize("sfx", [SFXType.CLAP, SFXType.SNORE, SFXType.MUNCH])
    def test_unsynthesized_effects_beep(self, ctx, rng, sfx):
        sources = schedule_sfx(ctx, ctx.destination, sfx, rng, start=0)
        assert len(sources) == 1
        assert sources[0].frequency.value == 440
        assert sources[0].stop_time == pytest.approx(0.2)

    def test_boing_sweeps_up_then_down(self, ctx, rng):
        (osc,) = schedule_sfx(ctx, ctx.destination, SFXType.BOING, rng, start=0)
        assert osc.frequency.value_at(0.1) == pytest.approx(800)
        assert osc.frequency.value_at(0.25) == pytest.approx(400)

    def test_whoosh_is_filtered_noise(self, ctx, rng):
        (source,) = schedule_sfx(ctx, ctx.destination, SFXType.WHOOSH, rng, start=0)
        assert len(source.buffer) == int(8000 * 0.3)
        assert np.abs(ctx.render(0.3)).max() > 0

    def test_same_seed_same_effect(self, manual_clock):
        renders = []
        for _ in range(2):
            ctx = AudioContext(sample_rate=8000, clock=manual_clock)
            schedule_sfx(ctx, ctx.destination, SFXType.FOOTSTEPS, np.random.default_rng(5), start=0)
            renders.append(ctx.render(0.5))
        assert np.array_equal(renders[0], renders[1])
