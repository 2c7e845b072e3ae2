"""
Tests for ambient beds: switching, fades, volume and seeded scheduling.
"""

import numpy as np
import pytest

from audio.ambient import FADE_OUT_S, AmbientController
from audio.graph import AudioContext
from models.enums import AmbientType


@pytest.fixture
def ctx(manual_clock):
    return AudioContext(sample_rate=4000, clock=manual_clock)


@pytest.fixture
def ambient(ctx):
    return AmbientController(ctx, ctx.destination, seed=3, horizon=10.0)


class TestPlayback:

    def test_play_and_replay(self, ambient):
        assert ambient.play(AmbientType.MEADOW) is True
        assert ambient.is_playing
        assert ambient.current_type == AmbientType.MEADOW

        assert ambient.play(AmbientType.MEADOW) is False

    @pytest.mark.parametrize("ambient_type", list(AmbientType))
    def test_every_bed_schedules_sources(self, ambient, ambient_type):
        ambient.play(ambient_type)
        assert ambient._sources

    def test_fade_in_to_volume(self, ambient):
        ambient.play(AmbientType.FOREST)
        assert ambient.output.gain.value_at(0) == pytest.approx(0)
        assert ambient.output.gain.value_at(1.0) == pytest.approx(0.5)

    def test_switching_releases_previous_bed(self, ambient):
        ambient.play(AmbientType.MEADOW)
        previous = list(ambient._sources)

        ambient.play(AmbientType.NIGHT)

        assert ambient.current_type == AmbientType.NIGHT
        assert all(not s.connected for s in previous)
        assert not set(previous) & set(ambient._sources)

    def test_stop_fades_out(self, ambient, manual_clock):
        ambient.play(AmbientType.BEACH)
        manual_clock.advance(2.0)

        ambient.stop()

        assert not ambient.is_playing
        assert ambient.output.gain.value_at(2.0) == pytest.approx(0.5)
        assert ambient.output.gain.value_at(2.0 + FADE_OUT_S) == pytest.approx(0)
        assert all(s.stop_time <= 2.0 + FADE_OUT_S + 0.1 for s in ambient._sources)

    def test_stop_without_fade_releases_immediately(self, ambient):
        ambient.play(AmbientType.RAIN)
        ambient.stop(fade_out=False)
        assert ambient._sources == []

    def test_stop_when_idle_is_noop(self, ambient):
        ambient.stop()
        assert not ambient.is_playing

    def test_set_volume_clamps_and_ramps(self, ambient, manual_clock):
        ambient.play(AmbientType.WIND, fade_in=False)
        manual_clock.advance(1.0)

        ambient.set_volume(3.0)

        assert ambient.volume == 1.0
        assert ambient.output.gain.value_at(1.0) == pytest.approx(0.5)
        assert ambient.output.gain.value_at(1.1) == pytest.approx(1.0)

    def test_dispose_disconnects(self, ambient):
        ambient.play(AmbientType.MEADOW)
        ambient.dispose()
        assert not ambient.output.connected
        assert ambient._sources == []


class TestDeterminism:

    def test_same_seed_same_bed(self, manual_clock):
        renders = []
        for _ in range(2):
            ctx = AudioContext(sample_rate=4000, clock=manual_clock)
            controller = AmbientController(ctx, ctx.destination, seed=11, horizon=5.0)
            controller.play(AmbientType.MEADOW)
            renders.append(ctx.render(1.5))

        assert np.array_equal(renders[0], renders[1])
        assert np.abs(renders[0]).max() > 0
