"""
Structured console logger

Every module binds one category at import time:

    log = get_logger().for_category(LogCategory.AUDIO)
    log.info("Mood music started", mood="happy", tempo=120)

    [14:23:45] AUDIO     ✓ Mood music started
               ├─ mood: happy
               └─ tempo: 120

Besides the console, records can be forwarded to sinks (a log file for the
demo, a list in tests, an editor log panel).
"""

import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, TextIO

from models.enums import LogLevel, LogCategory


# === ANSI COLORS ===
class Colors:
    """ANSI escape codes for colored terminal output"""
    RESET = '\033[0m'
    DIM = '\033[2m'

    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'
    WHITE = '\033[37m'

    BRIGHT_GREEN = '\033[92m'
    BRIGHT_YELLOW = '\033[93m'
    BRIGHT_BLUE = '\033[94m'
    BRIGHT_MAGENTA = '\033[95m'
    BRIGHT_CYAN = '\033[96m'
    BRIGHT_WHITE = '\033[97m'


CATEGORY_COLORS = {
    LogCategory.CONFIG: Colors.CYAN,
    LogCategory.SYSTEM: Colors.BRIGHT_WHITE,
    LogCategory.RIG: Colors.BRIGHT_GREEN,
    LogCategory.MOTION: Colors.BRIGHT_YELLOW,
    LogCategory.CAMERA: Colors.YELLOW,
    LogCategory.NARRATION: Colors.BRIGHT_CYAN,
    LogCategory.AUDIO: Colors.BRIGHT_BLUE,
    LogCategory.AMBIENT: Colors.BLUE,
    LogCategory.SPEECH: Colors.MAGENTA,
    LogCategory.TIMELINE: Colors.BRIGHT_MAGENTA,
    LogCategory.EVENT: Colors.MAGENTA,
}

LEVEL_SYMBOLS = {
    LogLevel.DEBUG: '·',
    LogLevel.INFO: '✓',
    LogLevel.WARN: '⚠',
    LogLevel.ERROR: '✗',
}

LEVEL_COLORS = {
    LogLevel.DEBUG: Colors.DIM,
    LogLevel.INFO: Colors.GREEN,
    LogLevel.WARN: Colors.YELLOW,
    LogLevel.ERROR: Colors.RED,
}

LEVEL_PRIORITY = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
}

DETAIL_INDENT = " " * 11


@dataclass(frozen=True)
class LogRecord:
    """One emitted message, as handed to sinks"""
    timestamp: datetime
    category: LogCategory
    level: LogLevel
    message: str
    details: List[str] = field(default_factory=list)


LogSink = Callable[[LogRecord], None]


class Logger:
    """
    Category-based logger with tree-formatted details

    Args:
        min_level: Records below this level are dropped (console and sinks)
        use_colors: ANSI colors on the console
        stream: Console target; sys.stdout at write time when None
    """

    def __init__(self, min_level: LogLevel = LogLevel.INFO, use_colors: bool = True,
                 stream: Optional[TextIO] = None):
        self.min_level = min_level
        self.use_colors = use_colors
        self._stream = stream
        self._sinks: List[LogSink] = []

    # === Sinks ===

    def add_sink(self, sink: LogSink) -> None:
        self._sinks.append(sink)

    def remove_sink(self, sink: LogSink) -> bool:
        if sink in self._sinks:
            self._sinks.remove(sink)
            return True
        return False

    # === Formatting ===

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{Colors.RESET}"

    def format_record(self, record: LogRecord, colors: Optional[bool] = None) -> List[str]:
        """
        Render a record as output lines (header plus one line per detail)

        colors overrides use_colors, e.g. False for file sinks.
        """
        saved = self.use_colors
        if colors is not None:
            self.use_colors = colors
        try:
            timestamp = record.timestamp.strftime('[%H:%M:%S]')
            cat = self._colorize(record.category.name.ljust(9), CATEGORY_COLORS.get(record.category, Colors.WHITE))
            sym = self._colorize(LEVEL_SYMBOLS.get(record.level, '·'), LEVEL_COLORS.get(record.level, Colors.WHITE))
            msg = self._colorize(record.message, LEVEL_COLORS.get(record.level, Colors.WHITE))

            lines = [f"{timestamp} {cat} {sym} {msg}"]
            last = len(record.details) - 1
            for i, detail in enumerate(record.details):
                tree = self._colorize("└─" if i == last else "├─", Colors.DIM)
                lines.append(f"{DETAIL_INDENT}{tree} {detail}")
            return lines
        finally:
            self.use_colors = saved

    # === Logging ===

    def is_enabled(self, level: LogLevel) -> bool:
        return LEVEL_PRIORITY[level] >= LEVEL_PRIORITY[self.min_level]

    def log(
        self,
        category: LogCategory,
        message: str,
        level: LogLevel = LogLevel.INFO,
        details: Optional[list] = None,
        exc_info: bool = False,
        **kwargs
    ):
        """
        Log a structured message

        Args:
            category: Log category (AUDIO, TIMELINE, etc.)
            message: Main message text
            level: Log level (DEBUG, INFO, WARN, ERROR)
            details: Extra detail lines shown under the message
            exc_info: Append the traceback of the exception being handled
            **kwargs: Shown as "key: value" detail lines
        """
        if not self.is_enabled(level):
            return

        all_details = [str(d) for d in details or []]
        all_details.extend(f"{k}: {v}" for k, v in kwargs.items())
        if exc_info:
            tb = traceback.format_exc().strip()
            if tb and tb != "NoneType: None":
                all_details.extend(tb.splitlines())

        record = LogRecord(datetime.now(), category, level, message, all_details)

        stream = self._stream or sys.stdout
        for line in self.format_record(record):
            print(line, file=stream)

        for sink in list(self._sinks):
            try:
                sink(record)
            except Exception as e:
                # broken sinks are dropped
                self.remove_sink(sink)
                print(f"Log sink removed after error: {e}", file=stream)

    def debug(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.DEBUG, **kw)
    def info(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.INFO, **kw)
    def warn(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.WARN, **kw)
    def error(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.ERROR, **kw)

    def for_category(self, category: LogCategory) -> 'BoundLogger':
        """Logger bound to one category"""
        return BoundLogger(self, category)


class BoundLogger:
    """Logger bound to a default category; category= overrides per call"""

    def __init__(self, base: Logger, category: LogCategory):
        self._base = base
        self._category = category

    def log(self, message: str, level: LogLevel = LogLevel.INFO, category: Optional[LogCategory] = None, **kw):
        self._base.log(category or self._category, message, level, **kw)

    def debug(self, message: str, **kw): self.log(message, LogLevel.DEBUG, **kw)
    def info(self, message: str, **kw): self.log(message, LogLevel.INFO, **kw)
    def warn(self, message: str, **kw): self.log(message, LogLevel.WARN, **kw)
    def error(self, message: str, **kw): self.log(message, LogLevel.ERROR, **kw)

    def with_category(self, category: LogCategory) -> 'BoundLogger':
        return BoundLogger(self._base, category)


def file_sink(path, logger: Optional[Logger] = None) -> LogSink:
    """
    Sink appending uncolored records to a text file

    Usage:
        get_logger().add_sink(file_sink("scene.log"))
    """
    logger = logger or _logger

    def write(record: LogRecord) -> None:
        with open(path, "a", encoding="utf-8") as f:
            for line in logger.format_record(record, colors=False):
                f.write(line + "\n")

    return write


# === Global instance helpers ===
_logger = Logger()


def get_logger() -> Logger:
    return _logger


def get_category_logger(category: LogCategory) -> BoundLogger:
    return _logger.for_category(category)


def configure_logger(min_level: LogLevel = LogLevel.INFO, use_colors: bool = True):
    """
    Reconfigure the shared logger in place

    Bound loggers created at import time keep pointing at the same instance.
    """
    _logger.min_level = min_level
    _logger.use_colors = use_colors
