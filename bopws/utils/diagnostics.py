"""
Diagnostics sink

Builders and shapers report odd-but-recoverable conditions here instead of
logging directly, so callers (and tests) can inspect what was noticed while a
request was translated. Every event is also logged under its source name.
"""
from dataclasses import dataclass, field
from typing import List, Optional
import logging


@dataclass(frozen=True)
class DiagnosticEvent:
    level: int
    source: str
    message: str


@dataclass
class Diagnostics:
    """Request-scoped collector of diagnostic events"""

    events: List[DiagnosticEvent] = field(default_factory=list)

    def emit(self, level: int, source: str, message: str) -> None:
        self.events.append(DiagnosticEvent(level, source, message))
        logging.getLogger(source).log(level, message)

    def debug(self, source: str, message: str) -> None:
        self.emit(logging.DEBUG, source, message)

    def info(self, source: str, message: str) -> None:
        self.emit(logging.INFO, source, message)

    def warning(self, source: str, message: str) -> None:
        self.emit(logging.WARNING, source, message)

    def messages(self, level: Optional[int] = None) -> List[str]:
        """Messages emitted so far, optionally only those at `level`"""
        return [e.message for e in self.events if level is None or e.level == level]
