from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, NoReturn, Optional

from doctoc.common.errors import DocumentException


class LogLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def logging_level(self) -> int:
        return {
            LogLevel.INFO: logging.INFO,
            LogLevel.WARNING: logging.WARNING,
            LogLevel.ERROR: logging.ERROR,
        }[self]


@dataclass(slots=True)
class LogEntry:
    """A single diagnostic emitted while building TOC files."""

    level: LogLevel
    message: str
    code: Optional[str] = None
    file: Optional[str] = None


Listener = Callable[[LogEntry], None]


class BuildLogger:
    """Diagnostic sink threaded through the TOC readers, resolver and build step.

    Entries go to a stdlib logger and are also kept in ``entries`` so callers
    can inspect exactly what was reported. ``fatal`` logs an error and raises
    ``DocumentException``.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or logging.getLogger("doctoc")
        self._listeners: List[Listener] = []
        self._scopes: List[str] = []
        self.entries: List[LogEntry] = []

    @property
    def current_file(self) -> Optional[str]:
        return self._scopes[-1] if self._scopes else None

    @contextmanager
    def file_scope(self, file: str) -> Iterator[None]:
        """Attribute every entry logged inside the block to ``file``."""

        self._scopes.append(file)
        try:
            yield
        finally:
            self._scopes.pop()

    def register_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unregister_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def info(self, message: str, code: str | None = None) -> None:
        self._emit(LogLevel.INFO, message, code)

    def warning(self, message: str, code: str | None = None) -> None:
        self._emit(LogLevel.WARNING, message, code)

    def error(self, message: str, code: str | None = None) -> None:
        self._emit(LogLevel.ERROR, message, code)

    def fatal(self, message: str, code: str) -> NoReturn:
        self._emit(LogLevel.ERROR, message, code)
        raise DocumentException(message, code=code)

    def entries_with_code(self, *codes: str) -> List[LogEntry]:
        return [entry for entry in self.entries if entry.code in codes]

    def _emit(self, level: LogLevel, message: str, code: str | None) -> None:
        entry = LogEntry(level=level, message=message, code=code, file=self.current_file)
        self.entries.append(entry)
        if entry.file:
            self._log.log(level.logging_level, "%s: %s", entry.file, message, extra={"code": code})
        else:
            self._log.log(level.logging_level, "%s", message, extra={"code": code})
        for listener in list(self._listeners):
            listener(entry)


__all__ = ["BuildLogger", "LogEntry", "LogLevel"]
