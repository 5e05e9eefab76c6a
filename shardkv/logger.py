"""Thread-safe line logger writing to the console and optionally to a file."""

from __future__ import annotations

import sys
import threading
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import IO, Any, ClassVar, Optional, Union


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


_LABELS = {
    LogLevel.DEBUG: "\033[36mDEBUG\033[0m",
    LogLevel.INFO: "INFO",
    LogLevel.WARNING: "\033[33mWARNING\033[0m",
    LogLevel.ERROR: "\033[31mERROR\033[0m",
}


def timestamp() -> str:
    """Current local wall-clock time as ``YYYY-MM-DD HH:MM:SS``."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def level_label(level: LogLevel) -> str:
    """Label printed for a level, coloured with ANSI codes where the level has a colour."""
    return _LABELS.get(level, "UNKNOWN")


class Logger:
    """Writes formatted log lines; one shared instance is available via :meth:`get_instance`."""

    _instance: ClassVar[Optional["Logger"]] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        console_output: bool = True,
        stream: Optional[IO[str]] = None,
        path: Optional[Union[str, Path]] = None,
    ) -> None:
        self.console_output = console_output
        self._stream = stream
        self._lock = threading.Lock()
        self._file: Optional[IO[str]] = (
            open(path, "a", encoding="utf-8") if path is not None else None
        )

    @classmethod
    def get_instance(cls) -> "Logger":
        """The process-wide shared logger, created on first use."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    def format(self, level: LogLevel, message: Any, rank: int = -1) -> str:
        """Build one log line; a rank below zero is left out."""
        parts = [f"[{timestamp()}] ", f"[{level_label(level)}] "]
        if rank >= 0:
            parts.append(f"[Node {rank}] ")
        parts.append(str(message))
        return "".join(parts)

    def log(self, level: LogLevel, message: Any, rank: int = -1) -> None:
        line = self.format(level, message, rank)
        with self._lock:
            if self.console_output:
                stream = self._stream if self._stream is not None else sys.stdout
                stream.write(line + "\n")
            if self._file is not None and not self._file.closed:
                self._file.write(line + "\n")

    def debug(self, message: Any, rank: int = -1) -> None:
        self.log(LogLevel.DEBUG, message, rank)

    def info(self, message: Any, rank: int = -1) -> None:
        self.log(LogLevel.INFO, message, rank)

    def warning(self, message: Any, rank: int = -1) -> None:
        self.log(LogLevel.WARNING, message, rank)

    def error(self, message: Any, rank: int = -1) -> None:
        self.log(LogLevel.ERROR, message, rank)

    def close(self) -> None:
        """Close the log file, if one is open."""
        with self._lock:
            if self._file is not None and not self._file.closed:
                self._file.close()

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()