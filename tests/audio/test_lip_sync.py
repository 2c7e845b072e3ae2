"""
Tests for text and envelope driven lip sync.
"""

import numpy as np
import pytest

from audio.lip_sync import (
    CLOSING_FRAME_MS,
    extract_phonemes,
    generate_lip_sync,
    lip_sync_from_envelope,
    mouth_shape_at,
)
from models.enums import MouthShape


class TestPhonemes:

    def test_digraphs_and_pauses(self):
        assert extract_phonemes("The ship, ok") == [
            "th", "e", "pause", "sh", "i", "p", "pause", "pause", "o", "k",
        ]

    def test_other_characters_ignored(self):
        assert extract_phonemes("a1!b?") == ["a", "b"]


class TestTextLipSync:

    def test_frame_timing(self):
        """150 wpm at rate 1 gives 100ms per phoneme"""
        track = generate_lip_sync("ab", speech_rate=1.0, words_per_minute=150)

        assert [(f.time, f.shape) for f in track.frames] == [
            (0, MouthShape.WIDE),
            (pytest.approx(100), MouthShape.CLOSED),
            (pytest.approx(200), MouthShape.CLOSED),
        ]
        assert track.total_duration == pytest.approx(300)
        assert track.frames[-1].duration == CLOSING_FRAME_MS

    def test_slower_rate_stretches(self):
        track = generate_lip_sync("ab", speech_rate=0.5, words_per_minute=150)
        assert track.total_duration == pytest.approx(500)

    def test_pauses_are_double_length_and_silent(self):
        track = generate_lip_sync("a b", speech_rate=1.0)
        pause = track.frames[1]
        assert pause.shape == MouthShape.CLOSED
        assert pause.duration == pytest.approx(200)
        assert pause.intensity == 0.0

    def test_unmapped_letters_open(self):
        track = generate_lip_sync("q", speech_rate=1.0)
        assert track.frames[0].shape == MouthShape.OPEN

    def test_empty_text_closes(self):
        track = generate_lip_sync("")
        assert len(track.frames) == 1
        assert track.total_duration == CLOSING_FRAME_MS

    def test_mouth_shape_at(self):
        track = generate_lip_sync("oe", speech_rate=1.0)
        assert mouth_shape_at(track, -10) == MouthShape.CLOSED
        assert mouth_shape_at(track, 50) == MouthShape.OH
        assert mouth_shape_at(track, 150) == MouthShape.EE
        assert mouth_shape_at(track, 10_000) == MouthShape.CLOSED


class TestEnvelopeLipSync:

    def test_intensity_thresholds(self):
        sr, hop = 300, 10
        levels = [0.0, 0.5, 0.2, 0.3, 0.1]
        samples = np.concatenate([np.full(hop, level) for level in levels])

        track = lip_sync_from_envelope(samples, sr, fps=30, sensitivity=0.5)

        assert [f.shape for f in track.frames] == [
            MouthShape.CLOSED,
            MouthShape.OPEN,
            MouthShape.HALF,
            MouthShape.WIDE,
            MouthShape.ROUND,
        ]
        assert track.frames[1].time == pytest.approx(1000 / 30)
        assert track.total_duration == pytest.approx(len(samples) / sr * 1000)

    def test_stereo_uses_first_channel(self):
        samples = np.zeros((20, 2))
        samples[:, 1] = 1.0
        track = lip_sync_from_envelope(samples, 300, fps=30)
        assert {f.shape for f in track.frames} == {MouthShape.CLOSED}

    def test_invalid_sensitivity(self):
        with pytest.raises(ValueError):
            lip_sync_from_envelope(np.zeros(10), 300, sensitivity=0)
