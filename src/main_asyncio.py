"""
main_asyncio.py: Demo entry point for the scene engine
--------------------------------------------------------

Responsible for:
- loading configuration
- wiring the event bus, audio engine and timeline coordinator
- playing a short story scene by scene
- optionally rendering the first scene's audio bed to a WAV file
"""

import sys

# ---------------------------------------------------------------------------
# UTF-8 ENCODING FIX
# ---------------------------------------------------------------------------

if hasattr(sys.stdout, 'reconfigure') and sys.stdout.encoding != 'UTF-8':
    sys.stdout.reconfigure(encoding='utf-8')  # type: ignore
if hasattr(sys.stderr, 'reconfigure') and sys.stderr.encoding != 'UTF-8':
    sys.stderr.reconfigure(encoding='utf-8')  # type: ignore

import argparse
import asyncio
from typing import List, Optional

from audio import AudioEngine, ManualClock, SimulatedSpeechService, export_wav
from engine import TimelineCoordinator, build_scene_timeline
from lifecycle import TaskRegistry
from managers import ConfigManager
from models.enums import LogCategory, LogLevel
from models.scene import Scene
from schemas import SceneSchema
from services import EventBus, apply_auto_durations, generate_transition
from services.middleware import log_middleware
from utils.logger import configure_logger, file_sink, get_logger

log = get_logger().for_category(LogCategory.SYSTEM)

DEMO_STORY = [
    {
        "id": "scene-1",
        "narration": "Kiara walked through the sunny meadow. She was so happy to see the butterflies dancing!",
        "background": "meadow",
        "characters": [
            {"id": "char-0-0", "characterId": "kiara", "x": 35, "animation": "walk", "expression": "happy"},
            {"id": "char-0-1", "characterId": "whiskers", "x": 65, "animation": "idle"},
        ],
    },
    {
        "id": "scene-2",
        "narration": 'Whiskers jumped over a log. "Look at me!" said Whiskers.',
        "background": "forest",
        "characters": [
            {"id": "char-1-0", "characterId": "whiskers", "x": 40, "animation": "jump"},
            {"id": "char-1-1", "characterId": "kiara", "x": 70, "animation": "idle"},
        ],
    },
    {
        "id": "scene-3",
        "narration": "As the stars came out, everyone went to sleep. It was a calm and peaceful night.",
        "background": "night",
        "characters": [
            {"id": "char-2-0", "characterId": "kiara", "x": 50, "animation": "sit", "expression": "sleepy"},
        ],
    },
]


def load_story() -> List[Scene]:
    scenes = [SceneSchema.model_validate(s).to_domain() for s in DEMO_STORY]
    return apply_auto_durations(scenes)


async def export_first_scene(scenes: List[Scene], config: ConfigManager, path: str) -> None:
    """Render the first scene's music and ambient bed offline and write a WAV"""
    audio_cfg = config.get_audio_config()
    timeline = build_scene_timeline(scenes[0], config.get_timeline_config())

    async with AudioEngine(
        settings=audio_cfg.settings,
        sample_rate=audio_cfg.sample_rate,
        clock=ManualClock(),
        seed=7,
    ) as offline:
        await offline.configure_for_scene(timeline.audio_config())
        buffer = offline.render(timeline.duration_ms / 1000, start=0.0)
        export_wav(path, buffer, audio_cfg.sample_rate)


async def main(export_path: Optional[str] = None, time_scale: float = 1.0, debug: bool = False):
    """Main async entry point (dependency injection and scene loop)."""

    log.info("Starting scene engine demo...")

    # ========================================================================
    # 1. INFRASTRUCTURE
    # ========================================================================

    log.info("Loading configuration...")
    config_manager = ConfigManager()
    config_manager.load()
    audio_cfg = config_manager.get_audio_config()

    log_cfg = config_manager.get_logging_config()
    configure_logger(LogLevel.DEBUG if debug else log_cfg.level, log_cfg.colors)
    if log_cfg.file:
        get_logger().add_sink(file_sink(log_cfg.file))
        log.info("Logging to file", path=log_cfg.file)

    log.info("Initializing event bus...")
    event_bus = EventBus()
    event_bus.add_middleware(log_middleware)

    scenes = load_story()

    # ========================================================================
    # 2. AUDIO + TIMELINE
    # ========================================================================

    speech = SimulatedSpeechService(time_scale=time_scale)
    async with AudioEngine(
        settings=audio_cfg.settings,
        speech=speech,
        event_bus=event_bus,
        sample_rate=audio_cfg.sample_rate,
        speech_rate=audio_cfg.speech.rate,
        speech_pitch=audio_cfg.speech.pitch,
    ) as audio:
        coordinator = TimelineCoordinator(
            audio,
            event_bus=event_bus,
            config=config_manager.get_timeline_config(),
        )

        try:
            for previous, scene in zip([None] + scenes[:-1], scenes):
                if previous is not None:
                    transition = generate_transition(previous, scene)
                    log.info("Transition", kind=transition.type.value, duration_ms=transition.duration)
                await coordinator.load(scene)
                await coordinator.run()
        finally:
            await coordinator.unload()

    log.info(TaskRegistry.instance().summary())

    if export_path:
        await export_first_scene(scenes, config_manager, export_path)

    log.info("👋 Demo finished.")


# ---------------------------------------------------------------------------
# ENTRY POINT
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Play the demo story")
    parser.add_argument("--export", metavar="WAV", help="Also render scene 1 audio to this WAV file")
    parser.add_argument("--debug", action="store_true", help="Debug logging")
    args = parser.parse_args()

    configure_logger(LogLevel.DEBUG if args.debug else LogLevel.INFO)
    try:
        asyncio.run(main(args.export, debug=args.debug))
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")
    except Exception as e:
        log.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
