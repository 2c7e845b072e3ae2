"""
Config Manager

Loads config.yaml with include support and exposes typed sections
(audio, timeline, motion, logging).
"""

import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional

from models.config import AudioConfig, LoggingConfig, MotionConfig, SpeechConfig, TimelineConfig
from models.enums import LogLevel
from models.scene import AudioSettings
from utils.enum_helper import EnumHelper
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)

SRC_DIR = Path(__file__).parent.parent


class ConfigManager:
    """
    Main configuration manager with include system support

    Example:
        config = ConfigManager()
        config.load()

        settings = config.get_audio_settings()
        timeline = config.get_timeline_config()
    """

    def __init__(self, config_path="config/config.yaml", defaults_path="config/factory_defaults.yaml",
                 base_dir: Optional[Path] = None):
        """
        Args:
            config_path: Main config.yaml (relative to base_dir)
            defaults_path: Factory defaults fallback (relative to base_dir)
            base_dir: Directory paths are resolved against (default: src/)
        """
        self.base_dir = Path(base_dir) if base_dir is not None else SRC_DIR
        self.config_path = Path(config_path)
        self.factory_defaults_path = Path(defaults_path)
        self.data: Dict[str, Any] = {}

    def load(self) -> Dict[str, Any]:
        """
        Load YAML configuration

        Process:
        1. Load main config.yaml
        2. If it has an 'include:' list, load and merge those files
        3. Otherwise treat it as a monolithic config
        4. Fall back to factory defaults on any failure

        Returns:
            Merged config data dict
        """
        try:
            full_path = self.base_dir / self.config_path
            with open(full_path, "r", encoding="utf-8") as f:
                main_config = yaml.safe_load(f) or {}

            if 'include' in main_config:
                log.info("Using include-based configuration")
                self.data = self._load_with_includes(main_config['include'], full_path.parent)
            else:
                log.info("Using monolithic configuration")
                self.data = main_config

        except Exception as ex:
            log.error("Failed to load config.yaml", error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")

            with open(self.base_dir / self.factory_defaults_path, "r", encoding="utf-8") as f:
                self.data = yaml.safe_load(f) or {}

        return self.data

    def _load_with_includes(self, include_list: List[str], config_dir: Path) -> Dict[str, Any]:
        """
        Load and merge YAML files from the include list (top-level keys, later files win)
        """
        merged: Dict[str, Any] = {}

        for filename in include_list:
            filepath = config_dir / filename
            try:
                with open(filepath, 'r', encoding='utf-8') as f:
                    file_data = yaml.safe_load(f)
                    if file_data:
                        merged.update(file_data)
                        log.info(f"Loaded {filename}", keys=str(list(file_data.keys())))
            except FileNotFoundError:
                log.error(f"File not found: {filename}")
                raise

        log.info("Config merge complete", total_keys=len(merged), keys=str(list(merged.keys())))
        return merged

    # ===== Sections =====

    @property
    def audio(self) -> Dict[str, Any]:
        return self.data.get("audio", {}) or {}

    @property
    def timeline(self) -> Dict[str, Any]:
        return self.data.get("timeline", {}) or {}

    @property
    def motion(self) -> Dict[str, Any]:
        return self.data.get("motion", {}) or {}

    @property
    def logging(self) -> Dict[str, Any]:
        return self.data.get("logging", {}) or {}

    # ===== Typed accessors =====

    def get_audio_settings(self) -> AudioSettings:
        """
        Default mixing state from the audio section

        Raises:
            ValueError: unknown keys under audio.settings
        """
        settings = AudioSettings()
        settings.merge(self.audio.get("settings", {}) or {})
        return settings

    def get_audio_config(self) -> AudioConfig:
        speech = self.audio.get("speech", {}) or {}
        return AudioConfig(
            settings=self.get_audio_settings(),
            sample_rate=int(self.audio.get("sample_rate", 44100)),
            speech=SpeechConfig(
                rate=float(speech.get("rate", 0.9)),
                pitch=float(speech.get("pitch", 1.1)),
            ),
        )

    def get_timeline_config(self) -> TimelineConfig:
        t = self.timeline
        defaults = TimelineConfig()
        return TimelineConfig(
            fps=int(t.get("fps", defaults.fps)),
            min_scene_duration_ms=float(t.get("min_scene_duration_ms", defaults.min_scene_duration_ms)),
            words_per_minute=float(t.get("words_per_minute", defaults.words_per_minute)),
            duration_buffer_ms=float(t.get("duration_buffer_ms", defaults.duration_buffer_ms)),
            default_rig=t.get("default_rig", defaults.default_rig),
            sfx_lead_ms=float(t.get("sfx_lead_ms", defaults.sfx_lead_ms)),
        )

    def get_motion_config(self) -> MotionConfig:
        m = self.motion
        defaults = MotionConfig()
        return MotionConfig(
            inbetweens_per_keyframe=int(m.get("inbetweens_per_keyframe", defaults.inbetweens_per_keyframe)),
            squash_max_deformation=float(m.get("squash_max_deformation", defaults.squash_max_deformation)),
        )

    def get_logging_config(self) -> LoggingConfig:
        """Unknown level names fall back to INFO"""
        section = self.logging
        level = section.get("level")
        return LoggingConfig(
            level=EnumHelper.from_string(LogLevel, str(level), default=LogLevel.INFO) if level else LogLevel.INFO,
            colors=bool(section.get("colors", True)),
            file=section.get("file"),
        )
