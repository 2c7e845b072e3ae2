import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

from audio.engine import AudioEngine
from audio.graph import ManualClock
from audio.speech import SimulatedSpeechService, SpeechService
from lifecycle.task_registry import TaskRegistry
from models.scene import Scene, SceneCharacter
from services.event_bus import EventBus


@pytest.fixture(autouse=True)
def fresh_task_registry():
    TaskRegistry.reset()
    yield
    TaskRegistry.reset()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def manual_clock():
    return ManualClock()


@pytest.fixture
def fast_speech():
    """Simulated TTS that finishes a thousand times faster than real speech"""
    return SimulatedSpeechService(time_scale=0.001)


@pytest.fixture
def mock_speech():
    speech = MagicMock(spec=SpeechService)
    speech.speak = AsyncMock(return_value=None)
    return speech


@pytest_asyncio.fixture
async def audio_engine(event_bus, manual_clock, fast_speech):
    """Initialized engine on a manual clock; disposed after the test"""
    engine = AudioEngine(speech=fast_speech, event_bus=event_bus, clock=manual_clock, seed=1)
    await engine.initialize()
    yield engine
    await engine.dispose()


@pytest.fixture
def mock_audio_engine():
    """Audio engine stand-in for timeline tests; every coroutine method is an AsyncMock"""
    return AsyncMock(spec=AudioEngine)


@pytest.fixture
def twenty_word_scene():
    narration = " ".join(["word"] * 20)
    return Scene(
        id="scene-20",
        narration=narration,
        characters=[SceneCharacter(id="c1", rig_id="kiara", animation="walk")],
    )
