"""
Tests for the structured console logger.
"""

import pytest

from models.enums import LogCategory, LogLevel
from utils.logger import Logger, configure_logger, file_sink, get_category_logger, get_logger


@pytest.fixture
def plain_logger():
    return Logger(min_level=LogLevel.DEBUG, use_colors=False)


class TestLoggerOutput:

    def test_message_and_details(self, plain_logger, capsys):
        plain_logger.info(LogCategory.AUDIO, "Mood music started", mood="happy", tempo=120)

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].endswith("AUDIO     ✓ Mood music started")
        assert lines[1].strip() == "├─ mood: happy"
        assert lines[2].strip() == "└─ tempo: 120"

    def test_level_filter(self, capsys):
        logger = Logger(min_level=LogLevel.WARN, use_colors=False)
        logger.info(LogCategory.TIMELINE, "hidden")
        logger.error(LogCategory.TIMELINE, "shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "✗ shown" in out

    def test_exc_info_appends_traceback(self, plain_logger, capsys):
        try:
            raise ValueError("bad rig")
        except ValueError:
            plain_logger.error(LogCategory.RIG, "Rig failed", exc_info=True)

        out = capsys.readouterr().out
        assert "ValueError: bad rig" in out

    def test_colors_can_be_disabled(self, plain_logger, capsys):
        plain_logger.warn(LogCategory.SPEECH, "slow provider")
        assert "\033[" not in capsys.readouterr().out


class TestBoundLogger:

    def test_category_binding_and_override(self, plain_logger, capsys):
        bound = plain_logger.for_category(LogCategory.CAMERA)
        bound.debug("pan")
        bound.with_category(LogCategory.MOTION).info("squash")

        lines = capsys.readouterr().out.splitlines()
        assert "CAMERA" in lines[0]
        assert "MOTION" in lines[1]

    def test_configure_updates_shared_instance(self, capsys):
        logger = get_logger()
        previous = (logger.min_level, logger.use_colors)
        try:
            configure_logger(LogLevel.ERROR, use_colors=False)
            bound = get_category_logger(LogCategory.NARRATION)
            bound.warn("quiet")
            bound.error("loud")
        finally:
            configure_logger(*previous)

        out = capsys.readouterr().out
        assert "quiet" not in out
        assert "NARRATION ✗ loud" in out


class TestSinks:

    def test_sink_receives_records(self, plain_logger, capsys):
        records = []
        plain_logger.add_sink(records.append)

        plain_logger.info(LogCategory.AUDIO, "SFX", sfx="boing")
        plain_logger.debug(LogCategory.AUDIO, "filtered", details=["a"])

        (first, second) = records
        assert (first.category, first.level, first.message) == (LogCategory.AUDIO, LogLevel.INFO, "SFX")
        assert first.details == ["sfx: boing"]
        assert second.details == ["a"]

    def test_filtered_records_skip_sinks(self):
        logger = Logger(min_level=LogLevel.ERROR, use_colors=False)
        records = []
        logger.add_sink(records.append)

        logger.warn(LogCategory.RIG, "ignored")

        assert records == []

    def test_failing_sink_is_removed(self, plain_logger, capsys):
        def broken(record):
            raise IOError("disk full")

        plain_logger.add_sink(broken)
        plain_logger.info(LogCategory.SYSTEM, "first")
        plain_logger.info(LogCategory.SYSTEM, "second")

        out = capsys.readouterr().out
        assert out.count("Log sink removed after error: disk full") == 1
        assert plain_logger.remove_sink(broken) is False

    def test_file_sink_writes_plain_text(self, tmp_path, capsys):
        logger = Logger(min_level=LogLevel.DEBUG, use_colors=True)
        path = tmp_path / "scene.log"
        logger.add_sink(file_sink(path, logger))

        logger.info(LogCategory.TIMELINE, "Scene loaded", scene="s1")

        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0].endswith("TIMELINE  ✓ Scene loaded")
        assert lines[1].strip() == "└─ scene: s1"
        assert "\033[" in capsys.readouterr().out

    def test_custom_stream(self, tmp_path):
        path = tmp_path / "out.txt"
        with open(path, "w", encoding="utf-8") as stream:
            Logger(use_colors=False, stream=stream).error(LogCategory.SPEECH, "offline")
        assert "SPEECH    ✗ offline" in path.read_text(encoding="utf-8")
