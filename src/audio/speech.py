"""
Text-to-speech boundary

The engine talks to any TTS provider through SpeechService. Providers may
be local voices or network calls; both are awaited the same way and may
take arbitrarily long, fail, or be interrupted.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from audio.lip_sync import generate_lip_sync
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SPEECH)


class SpeechError(Exception):
    """Provider failed to speak"""


class SpeechInterruptedError(SpeechError):
    """Speech was cut short (cancel(), or new speech started). Not a failure."""


@dataclass(frozen=True)
class SpeechRequest:
    text: str
    rate: float = 0.9
    pitch: float = 1.1
    volume: float = 1.0
    voice: Optional[str] = None


@runtime_checkable
class SpeechService(Protocol):
    async def speak(self, request: SpeechRequest) -> None:
        """Return when the utterance has finished playing"""
        ...

    def cancel(self) -> None:
        """Interrupt the current utterance; its speak() raises SpeechInterruptedError"""
        ...


class SimulatedSpeechService:
    """
    Speaks silently for as long as the text would take to say

    Used when no real provider is attached (offline export, tests, demo).
    time_scale < 1 shortens the wait.
    """

    def __init__(self, time_scale: float = 1.0, words_per_minute: float = 150):
        self.time_scale = time_scale
        self.words_per_minute = words_per_minute
        self._interrupt: Optional[asyncio.Event] = None
        self.spoken = []

    async def speak(self, request: SpeechRequest) -> None:
        track = generate_lip_sync(request.text, request.rate, self.words_per_minute)
        interrupt = asyncio.Event()
        self._interrupt = interrupt
        self.spoken.append(request)
        log.debug("Speaking", chars=len(request.text), duration_ms=round(track.total_duration))

        try:
            await asyncio.wait_for(interrupt.wait(), track.total_duration / 1000 * self.time_scale)
        except asyncio.TimeoutError:
            return
        finally:
            if self._interrupt is interrupt:
                self._interrupt = None
        raise SpeechInterruptedError("Speech cancelled")

    def cancel(self) -> None:
        if self._interrupt is not None:
            self._interrupt.set()
