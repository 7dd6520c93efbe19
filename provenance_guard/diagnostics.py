"""Diagnostics sinks for non-fatal advisories (the host's tracing service)."""

import logging
from typing import List, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticsSink(Protocol):
    def trace(self, message: str) -> None: ...


class LoggingDiagnosticsSink:
    """Forward advisories to the standard logger."""

    def __init__(self, log: logging.Logger = logger, level: int = logging.WARNING):
        self._log = log
        self._level = level

    def trace(self, message: str) -> None:
        self._log.log(self._level, message)


class MemoryDiagnosticsSink:
    """Keep advisories in memory so callers can inspect or return them."""

    def __init__(self):
        self.messages: List[str] = []

    def trace(self, message: str) -> None:
        self.messages.append(message)

    def clear(self) -> None:
        self.messages.clear()
