"""
Tests for the simulated speech provider and WAV export.
"""

import asyncio

import numpy as np
import pytest
import soundfile as sf

from audio.export import export_wav
from audio.speech import (
    SimulatedSpeechService,
    SpeechError,
    SpeechInterruptedError,
    SpeechRequest,
    SpeechService,
)


class TestSimulatedSpeech:

    def test_satisfies_protocol(self):
        assert isinstance(SimulatedSpeechService(), SpeechService)

    def test_interrupted_is_a_speech_error(self):
        assert issubclass(SpeechInterruptedError, SpeechError)

    @pytest.mark.asyncio
    async def test_speak_completes(self, fast_speech):
        request = SpeechRequest("Hello there little one", volume=0.5)

        await fast_speech.speak(request)

        assert fast_speech.spoken == [request]

    @pytest.mark.asyncio
    async def test_cancel_interrupts(self):
        speech = SimulatedSpeechService(time_scale=1.0)
        task = asyncio.create_task(speech.speak(SpeechRequest("a long sentence " * 20)))
        await asyncio.sleep(0.01)

        speech.cancel()

        with pytest.raises(SpeechInterruptedError):
            await task

    def test_cancel_without_speech_is_noop(self):
        SimulatedSpeechService().cancel()


class TestExport:

    def test_wav_round_trip(self, tmp_path):
        buffer = np.sin(np.linspace(0, 20, 4000)).astype(np.float32) * 0.5
        path = export_wav(tmp_path / "out" / "scene.wav", buffer, 8000)

        data, sample_rate = sf.read(str(path))

        assert path.exists()
        assert sample_rate == 8000
        assert len(data) == len(buffer)
        assert data == pytest.approx(buffer, abs=1e-3)
